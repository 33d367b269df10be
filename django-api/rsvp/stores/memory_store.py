"""Thread-safe in-memory stores.

Mirror the storage constraints of the Django models (unique guest key and
contact email per session, server-assigned monotonic created_at) so services
can be exercised, including under concurrency, without a database.
"""

import threading
import uuid
from collections import defaultdict
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from dataclasses import replace
from datetime import UTC, datetime, timedelta

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
from rsvp.domain.errors import ParticipantNotFoundError, PaymentProofNotFoundError
from rsvp.stores.interfaces import (
    ParticipantStore,
    PaymentProofStore,
    SessionStore,
    UniquenessConflict,
)


class _MonotonicClock:
    """Wall clock that never returns the same instant twice."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._last: datetime | None = None

    def now(self) -> datetime:
        with self._lock:
            current = datetime.now(UTC)
            if self._last is not None and current <= self._last:
                current = self._last + timedelta(microseconds=1)
            self._last = current
            return current


class InMemorySessionStore(SessionStore):
    def __init__(self, sessions: Iterable[Session] = ()) -> None:
        self._sessions = {session.id: session for session in sessions}

    def add(self, session: Session) -> Session:
        self._sessions[session.id] = session
        return session

    def find_by_public_code(self, public_code: str) -> Session | None:
        return next(
            (s for s in self._sessions.values() if s.public_code == public_code), None
        )

    def get(self, session_id: SessionId) -> Session | None:
        return self._sessions.get(session_id)


class InMemoryParticipantStore(ParticipantStore):
    def __init__(self) -> None:
        self._rows: dict[ParticipantId, Participant] = {}
        self._lock = threading.RLock()
        self._guards: defaultdict[SessionId, threading.RLock] = defaultdict(threading.RLock)
        self._clock = _MonotonicClock()

    def count_confirmed(self, session_id: SessionId) -> int:
        with self._lock:
            return sum(
                1
                for row in self._rows.values()
                if row.session_id == session_id and row.status == ParticipantStatus.CONFIRMED
            )

    def find_participant(
        self,
        session_id: SessionId,
        *,
        contact_email: str | None = None,
        profile_id: str | None = None,
        guest_key: str | None = None,
    ) -> Participant | None:
        criteria = {
            key: value
            for key, value in (
                ("contact_email", contact_email),
                ("profile_id", profile_id),
                ("guest_key", guest_key),
            )
            if value is not None
        }
        if len(criteria) != 1:
            raise ValueError("find_participant needs exactly one match criterion")
        ((field, value),) = criteria.items()
        with self._lock:
            matches = [
                row
                for row in self._ordered(session_id)
                if getattr(row, field) == value
            ]
        return matches[0] if matches else None

    def get(self, participant_id: ParticipantId) -> Participant | None:
        with self._lock:
            return self._rows.get(participant_id)

    def insert_participant(self, row: NewParticipant) -> Participant | UniquenessConflict:
        with self._lock:
            constraint = self._violated_constraint(row)
            if constraint is not None:
                return UniquenessConflict(session_id=row.session_id, constraint=constraint)
            participant = Participant(
                id=ParticipantId(uuid.uuid4()),
                session_id=row.session_id,
                display_name=row.display_name,
                status=row.status,
                created_at=self._clock.now(),
                contact_phone=row.contact_phone,
                contact_email=row.contact_email,
                guest_key=row.guest_key,
                profile_id=row.profile_id,
            )
            self._rows[participant.id] = participant
            return participant

    def update_participant(self, participant_id: ParticipantId, **patch) -> Participant:
        with self._lock:
            current = self._rows.get(participant_id)
            if current is None:
                raise ParticipantNotFoundError(str(participant_id))
            updated = replace(current, **patch)
            self._rows[participant_id] = updated
            return updated

    def delete_participant(self, participant_id: ParticipantId) -> None:
        with self._lock:
            self._rows.pop(participant_id, None)

    def oldest_waitlisted(self, session_id: SessionId) -> Participant | None:
        waitlist = self.list_participants(session_id, ParticipantStatus.WAITLISTED)
        return waitlist[0] if waitlist else None

    def list_participants(
        self, session_id: SessionId, status: ParticipantStatus | None = None
    ) -> list[Participant]:
        with self._lock:
            return [
                row
                for row in self._ordered(session_id)
                if status is None or row.status == status
            ]

    @contextmanager
    def capacity_guard(self, session_id: SessionId) -> Iterator[None]:
        with self._lock:
            guard = self._guards[session_id]
        with guard:
            yield

    def _ordered(self, session_id: SessionId) -> list[Participant]:
        rows = [row for row in self._rows.values() if row.session_id == session_id]
        return sorted(rows, key=lambda row: row.created_at)

    def _violated_constraint(self, new: NewParticipant) -> str | None:
        for row in self._rows.values():
            if row.session_id != new.session_id:
                continue
            if new.guest_key is not None and row.guest_key == new.guest_key:
                return "participant_unique_session_guest_key"
            if new.contact_email is not None and row.contact_email == new.contact_email:
                return "participant_unique_session_contact_email"
        return None


class InMemoryPaymentProofStore(PaymentProofStore):
    def __init__(self) -> None:
        self._rows: dict[PaymentProofId, PaymentProof] = {}
        self._lock = threading.Lock()
        self._clock = _MonotonicClock()

    def list_proofs(
        self,
        session_id: SessionId,
        statuses: Iterable[PaymentStatus] | None = None,
    ) -> list[PaymentProof]:
        wanted = set(statuses) if statuses is not None else None
        with self._lock:
            rows = [
                row
                for row in self._rows.values()
                if row.session_id == session_id and (wanted is None or row.status in wanted)
            ]
        return sorted(rows, key=lambda row: row.created_at, reverse=True)

    def get(self, proof_id: PaymentProofId) -> PaymentProof | None:
        with self._lock:
            return self._rows.get(proof_id)

    def insert_proof(self, row: NewPaymentProof) -> PaymentProof:
        proof = PaymentProof(
            id=PaymentProofId(uuid.uuid4()),
            session_id=row.session_id,
            participant_id=row.participant_id,
            status=row.status,
            created_at=self._clock.now(),
            covered_participant_ids=row.covered_participant_ids,
            proof_image_url=row.proof_image_url,
            amount=row.amount,
            currency=row.currency,
            processed_at=row.processed_at,
        )
        with self._lock:
            self._rows[proof.id] = proof
        return proof

    def update_proof(self, proof_id: PaymentProofId, **patch) -> PaymentProof:
        with self._lock:
            current = self._rows.get(proof_id)
            if current is None:
                raise PaymentProofNotFoundError(str(proof_id))
            updated = replace(current, **patch)
            self._rows[proof_id] = updated
            return updated

    def add(self, proof: PaymentProof) -> PaymentProof:
        """Seed a fully-formed proof, e.g. a legacy row without a covered set."""
        with self._lock:
            self._rows[proof.id] = proof
        return proof
