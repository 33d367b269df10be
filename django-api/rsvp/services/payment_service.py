"""Payment coverage reconciliation.

One payment proof can settle several participants. A proof covers every id in
its covered set plus the participant who paid, which keeps older proofs
(written before covered sets existed) reconciling the same way.
"""

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from django.utils import timezone

from rsvp.domain import (
    Identity,
    Money,
    NewPaymentProof,
    Participant,
    ParticipantId,
    ParticipantStatus,
    PaymentProof,
    PaymentStatus,
    Session,
    SessionId,
    SessionStatus,
)
from rsvp.domain.errors import (
    AlreadyPaidError,
    ParticipantNotConfirmedError,
    ParticipantNotFoundError,
    PaymentProofNotFoundError,
    ProofSessionMismatchError,
    SessionNotOpenError,
)
from rsvp.services.identity import IdentityResolver
from rsvp.services.ids import parse_participant_id, parse_proof_id
from rsvp.services.session_reader import SessionReader
from rsvp.stores.interfaces import ParticipantStore, PaymentProofStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PaymentSummary:
    received_count: int
    pending_count: int
    confirmed_count: int
    paid_participant_count: int
    collected: Money


@dataclass(frozen=True)
class PaymentUpload:
    """A confirmed participant alongside their latest payment proof."""

    participant: Participant
    proof: PaymentProof | None

    @property
    def has_proof(self) -> bool:
        return self.proof is not None and not self.proof.is_cash


def latest_proof_per_participant(
    proofs: Iterable[PaymentProof],
    participant_ids: Iterable[ParticipantId] | None = None,
) -> dict[ParticipantId, PaymentProof]:
    wanted = set(participant_ids) if participant_ids is not None else None
    latest: dict[ParticipantId, PaymentProof] = {}
    for proof in proofs:
        for pid in proof.covered_ids():
            if wanted is not None and pid not in wanted:
                continue
            current = latest.get(pid)
            if current is None or proof.created_at > current.created_at:
                latest[pid] = proof
    return latest


def covered_by_approved(proofs: Iterable[PaymentProof]) -> frozenset[ParticipantId]:
    covered: set[ParticipantId] = set()
    for proof in proofs:
        if proof.status == PaymentStatus.APPROVED:
            covered |= proof.covered_ids()
    return frozenset(covered)


class PaymentService:
    def __init__(
        self,
        reader: SessionReader,
        participants: ParticipantStore,
        proofs: PaymentProofStore,
        resolver: IdentityResolver,
        clock: Callable[[], datetime] = timezone.now,
    ) -> None:
        self._reader = reader
        self._participants = participants
        self._proofs = proofs
        self._resolver = resolver
        self._clock = clock

    def unpaid_participants(self, session_id: str, host_id: int | None) -> list[Participant]:
        """Return confirmed participants not covered by any approved proof.

        Raises:
            NotSessionHostError: If the caller does not host the session.
        """
        session = self._reader.get_hosted_session(session_id, host_id)
        paid = covered_by_approved(self._proofs.list_approved_proofs(session.id))
        return [
            participant
            for participant in self._participants.list_participants(
                session.id, ParticipantStatus.CONFIRMED
            )
            if participant.id not in paid
        ]

    def coverage_for(
        self, session_id: SessionId, participant_ids: Iterable[ParticipantId]
    ) -> dict[ParticipantId, PaymentProof]:
        """Return the most recent proof, of any status, covering each participant."""
        return latest_proof_per_participant(self._proofs.list_proofs(session_id), participant_ids)

    def mark_paid_by_cash(
        self, session_id: str, participant_id: str, host_id: int | None
    ) -> PaymentProof:
        """Record a cash payment as an approved proof without an image.

        Raises:
            NotSessionHostError: If the caller does not host the session.
            ParticipantNotFoundError: If the participant does not exist.
            ProofSessionMismatchError: If the participant is in another session.
            ParticipantNotConfirmedError: If the participant is not confirmed.
            AlreadyPaidError: If an approved proof already covers the participant.
        """
        session = self._reader.get_hosted_session(session_id, host_id)
        participant = self._session_participant(session, parse_participant_id(participant_id))
        if participant.status != ParticipantStatus.CONFIRMED:
            raise ParticipantNotConfirmedError()
        if participant.id in covered_by_approved(self._proofs.list_approved_proofs(session.id)):
            raise AlreadyPaidError()

        proof = self._proofs.insert_proof(
            NewPaymentProof(
                session_id=session.id,
                participant_id=participant.id,
                status=PaymentStatus.APPROVED,
                covered_participant_ids=(participant.id,),
                proof_image_url=None,
                processed_at=self._clock(),
            )
        )
        logger.info(
            "Cash payment recorded",
            extra={"session_id": str(session.id), "participant_id": str(participant.id)},
        )
        return proof

    def submit_proof(
        self,
        session_id: str,
        identity: Identity,
        covered_ids: Iterable[str] = (),
        image_url: str | None = None,
        amount: Decimal | None = None,
        currency: str | None = None,
    ) -> PaymentProof:
        """Submit a payment proof for review on behalf of the caller.

        The paying participant is the caller's own row, resolved from their
        identity the same way an RSVP lookup is.

        Raises:
            SessionNotOpenError: If the session is not open.
            ParticipantNotFoundError: If the caller has no RSVP in the session.
            ProofSessionMismatchError: If a covered participant is in another
                session.
            ParticipantNotConfirmedError: If the payer is not confirmed.
        """
        session = self._reader.get_session_by_id(session_id)
        if session.status != SessionStatus.OPEN:
            raise SessionNotOpenError(session.status.value)
        payer = self._resolver.resolve_existing(session, identity).participant
        if payer is None:
            raise ParticipantNotFoundError()
        if payer.status != ParticipantStatus.CONFIRMED:
            raise ParticipantNotConfirmedError()

        covered = tuple(dict.fromkeys(parse_participant_id(value) for value in covered_ids))
        for pid in covered:
            self._session_participant(session, pid)

        proof = self._proofs.insert_proof(
            NewPaymentProof(
                session_id=session.id,
                participant_id=payer.id,
                status=PaymentStatus.PENDING_REVIEW,
                covered_participant_ids=covered or (payer.id,),
                proof_image_url=image_url,
                amount=Money(amount) if amount is not None else None,
                currency=currency.upper() if currency else None,
            )
        )
        logger.info(
            "Payment proof submitted",
            extra={
                "session_id": str(session.id),
                "proof_id": str(proof.id),
                "covered_count": len(proof.covered_ids()),
            },
        )
        return proof

    def review_proof(
        self, session_id: str, proof_id: str, host_id: int | None, approve: bool
    ) -> PaymentProof:
        """Approve or reject a proof. Re-reviewing with the same verdict is a no-op."""
        session = self._reader.get_hosted_session(session_id, host_id)
        proof = self._proofs.get(parse_proof_id(proof_id))
        if proof is None:
            raise PaymentProofNotFoundError(str(proof_id))
        if proof.session_id != session.id:
            raise ProofSessionMismatchError()

        status = PaymentStatus.APPROVED if approve else PaymentStatus.REJECTED
        if proof.status == status:
            return proof
        return self._proofs.update_proof(proof.id, status=status, processed_at=self._clock())

    def payment_uploads(self, session_id: str, host_id: int | None) -> list[PaymentUpload]:
        session = self._reader.get_hosted_session(session_id, host_id)
        confirmed = self._participants.list_participants(session.id, ParticipantStatus.CONFIRMED)
        latest = self.coverage_for(session.id, [p.id for p in confirmed])
        return [PaymentUpload(participant, latest.get(participant.id)) for participant in confirmed]

    def payment_summary(self, session_id: str, host_id: int | None) -> PaymentSummary:
        session = self._reader.get_hosted_session(session_id, host_id)
        proofs = self._proofs.list_proofs(
            session.id, statuses=[PaymentStatus.PENDING_REVIEW, PaymentStatus.APPROVED]
        )
        approved = [proof for proof in proofs if proof.status == PaymentStatus.APPROVED]
        collected = sum(
            (proof.amount for proof in approved if proof.amount is not None),
            Money(Decimal("0")),
        )
        return PaymentSummary(
            received_count=len(proofs),
            pending_count=len(proofs) - len(approved),
            confirmed_count=len(approved),
            paid_participant_count=len(covered_by_approved(approved)),
            collected=collected,
        )

    def _session_participant(self, session: Session, participant_id: ParticipantId) -> Participant:
        participant = self._participants.get(participant_id)
        if participant is None:
            raise ParticipantNotFoundError(str(participant_id))
        if participant.session_id != session.id:
            raise ProofSessionMismatchError()
        return participant
