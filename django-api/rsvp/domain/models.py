"""Domain models representing persisted state.

These are pure domain objects with no API input rules.
Django ORM models are in rsvp/models.py (persistence layer).
"""

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum

from rsvp.domain.value_objects import (
    Capacity,
    Money,
    ParticipantId,
    PaymentProofId,
    SessionId,
)


class SessionStatus(StrEnum):
    DRAFT = "draft"
    OPEN = "open"
    CLOSED = "closed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class ParticipantStatus(StrEnum):
    CONFIRMED = "confirmed"
    WAITLISTED = "waitlisted"
    CANCELLED = "cancelled"
    PULLED_OUT = "pulled_out"
    # Legacy value, never counted as confirmed.
    INVITED = "invited"


class PaymentStatus(StrEnum):
    PENDING_REVIEW = "pending_review"
    APPROVED = "approved"
    REJECTED = "rejected"


@dataclass(frozen=True)
class Session:
    """Domain representation of a hosted Session."""

    id: SessionId
    public_code: str
    status: SessionStatus
    capacity: Capacity | None
    waitlist_enabled: bool
    start_at: datetime | None
    host_slug: str | None = None
    host_id: int | None = None
    title: str = ""

    @property
    def is_unlimited(self) -> bool:
        return self.capacity is None


@dataclass(frozen=True)
class Participant:
    """Domain representation of one person's RSVP to one Session."""

    id: ParticipantId
    session_id: SessionId
    display_name: str
    status: ParticipantStatus
    created_at: datetime
    contact_phone: str | None = None
    contact_email: str | None = None
    guest_key: str | None = None
    profile_id: str | None = None
    pull_out_reason: str | None = None
    pull_out_seen: bool = False

    @property
    def is_authenticated_row(self) -> bool:
        return bool(self.contact_email)

    @property
    def is_waitlisted(self) -> bool:
        return self.status == ParticipantStatus.WAITLISTED


@dataclass(frozen=True)
class NewParticipant:
    """Values for a participant row that has not been persisted yet."""

    session_id: SessionId
    display_name: str
    status: ParticipantStatus
    contact_phone: str | None = None
    contact_email: str | None = None
    guest_key: str | None = None
    profile_id: str | None = None


@dataclass(frozen=True)
class PaymentProof:
    """Domain representation of a payment submission.

    ``participant_id`` is the participant who paid. Older rows carry only this
    id; newer rows also list every participant the payment settles in
    ``covered_participant_ids``.
    """

    id: PaymentProofId
    session_id: SessionId
    participant_id: ParticipantId
    status: PaymentStatus
    created_at: datetime
    covered_participant_ids: tuple[ParticipantId, ...] = ()
    proof_image_url: str | None = None
    amount: Money | None = None
    currency: str | None = None
    processed_at: datetime | None = None

    def covered_ids(self) -> frozenset[ParticipantId]:
        """Return every participant this proof settles.

        The paying participant is always included so legacy single-participant
        rows and new multi-participant rows reconcile the same way.
        """
        return frozenset(self.covered_participant_ids) | {self.participant_id}

    @property
    def is_cash(self) -> bool:
        return self.proof_image_url is None


@dataclass(frozen=True)
class NewPaymentProof:
    """Values for a payment proof that has not been persisted yet."""

    session_id: SessionId
    participant_id: ParticipantId
    status: PaymentStatus
    covered_participant_ids: tuple[ParticipantId, ...] = ()
    proof_image_url: str | None = None
    amount: Money | None = None
    currency: str | None = None
    processed_at: datetime | None = None
