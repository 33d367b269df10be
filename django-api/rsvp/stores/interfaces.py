"""Store interfaces (repository pattern).

Stores must be swappable and return domain models.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable
from contextlib import AbstractContextManager
from dataclasses import dataclass

from rsvp.domain import (
    NewParticipant,
    NewPaymentProof,
    Participant,
    ParticipantId,
    ParticipantStatus,
    PaymentProof,
    PaymentProofId,
    PaymentStatus,
    Session,
    SessionId,
)


@dataclass(frozen=True)
class UniquenessConflict:
    """Returned by an insert that lost a race for a unique participant key."""

    session_id: SessionId
    constraint: str | None = None


class SessionStore(ABC):
    """Interface for read-only session lookups."""

    @abstractmethod
    def find_by_public_code(self, public_code: str) -> Session | None:
        """Return the session shared under this code, or None if not found."""
        ...

    @abstractmethod
    def get(self, session_id: SessionId) -> Session | None:
        """Return a session by ID, or None if not found."""
        ...


class ParticipantStore(ABC):
    """Interface for participant persistence operations."""

    @abstractmethod
    def count_confirmed(self, session_id: SessionId) -> int:
        """Return the number of confirmed participants in a session."""
        ...

    @abstractmethod
    def find_participant(
        self,
        session_id: SessionId,
        *,
        contact_email: str | None = None,
        profile_id: str | None = None,
        guest_key: str | None = None,
    ) -> Participant | None:
        """Return the participant matching exactly one of the given keys."""
        ...

    @abstractmethod
    def get(self, participant_id: ParticipantId) -> Participant | None:
        """Return a participant by ID, or None if not found."""
        ...

    @abstractmethod
    def insert_participant(self, row: NewParticipant) -> Participant | UniquenessConflict:
        """Insert a participant.

        A unique-key violation is reported as a UniquenessConflict value;
        any other storage failure raises.
        """
        ...

    @abstractmethod
    def update_participant(self, participant_id: ParticipantId, **patch) -> Participant:
        """Apply field changes to a participant and return the updated row."""
        ...

    @abstractmethod
    def delete_participant(self, participant_id: ParticipantId) -> None:
        ...

    @abstractmethod
    def oldest_waitlisted(self, session_id: SessionId) -> Participant | None:
        """Return the waitlisted participant with the earliest created_at."""
        ...

    @abstractmethod
    def list_participants(
        self, session_id: SessionId, status: ParticipantStatus | None = None
    ) -> list[Participant]:
        """Return participants ordered by created_at ascending."""
        ...

    @abstractmethod
    def capacity_guard(self, session_id: SessionId) -> AbstractContextManager[None]:
        """Serialise capacity-sensitive read-then-write sequences for a session."""
        ...


class PaymentProofStore(ABC):
    """Interface for payment proof persistence operations."""

    @abstractmethod
    def list_proofs(
        self,
        session_id: SessionId,
        statuses: Iterable[PaymentStatus] | None = None,
    ) -> list[PaymentProof]:
        """Return proofs for a session ordered by created_at descending."""
        ...

    def list_approved_proofs(self, session_id: SessionId) -> list[PaymentProof]:
        return self.list_proofs(session_id, statuses=[PaymentStatus.APPROVED])

    @abstractmethod
    def get(self, proof_id: PaymentProofId) -> PaymentProof | None:
        ...

    @abstractmethod
    def insert_proof(self, row: NewPaymentProof) -> PaymentProof:
        ...

    @abstractmethod
    def update_proof(self, proof_id: PaymentProofId, **patch) -> PaymentProof:
        ...
