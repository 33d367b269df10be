"""Django ORM implementation of the rsvp stores."""

from collections.abc import Iterable, Iterator
from contextlib import contextmanager

from django.db import IntegrityError, transaction

from rsvp import models
from rsvp.domain import (
    Capacity,
    Money,
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
    SessionStatus,
)
from rsvp.domain.errors import ParticipantNotFoundError, PaymentProofNotFoundError
from rsvp.stores.errors import is_unique_violation, violated_constraint
from rsvp.stores.interfaces import (
    ParticipantStore,
    PaymentProofStore,
    SessionStore,
    UniquenessConflict,
)


def to_session(row: models.Session) -> Session:
    return Session(
        id=SessionId(row.id),
        public_code=row.public_code or "",
        status=SessionStatus(row.status),
        capacity=Capacity(row.capacity) if row.capacity is not None else None,
        # A null flag predates the column default and means "enabled".
        waitlist_enabled=row.waitlist_enabled is not False,
        start_at=row.start_at,
        host_slug=row.host_slug,
        host_id=row.host_id,
        title=row.title,
    )


def to_participant(row: models.Participant) -> Participant:
    return Participant(
        id=ParticipantId(row.id),
        session_id=SessionId(row.session_id),
        display_name=row.display_name,
        status=ParticipantStatus(row.status),
        created_at=row.created_at,
        contact_phone=row.contact_phone,
        contact_email=row.contact_email,
        guest_key=row.guest_key,
        profile_id=row.profile_id,
        pull_out_reason=row.pull_out_reason,
        pull_out_seen=row.pull_out_seen,
    )


def to_payment_proof(row: models.PaymentProof) -> PaymentProof:
    return PaymentProof(
        id=PaymentProofId(row.id),
        session_id=SessionId(row.session_id),
        participant_id=ParticipantId(row.participant_id),
        status=PaymentStatus(row.payment_status),
        created_at=row.created_at,
        covered_participant_ids=tuple(
            ParticipantId.from_string(str(value)) for value in row.covered_participant_ids or []
        ),
        proof_image_url=row.proof_image_url,
        amount=Money(row.amount) if row.amount is not None else None,
        currency=row.currency,
        processed_at=row.processed_at,
    )


class DjangoSessionStore(SessionStore):
    """PostgreSQL-backed session store using Django ORM."""

    def find_by_public_code(self, public_code: str) -> Session | None:
        row = models.Session.objects.filter(public_code=public_code).first()
        return to_session(row) if row else None

    def get(self, session_id: SessionId) -> Session | None:
        row = models.Session.objects.filter(pk=session_id.value).first()
        return to_session(row) if row else None


class DjangoParticipantStore(ParticipantStore):
    """PostgreSQL-backed participant store using Django ORM."""

    def count_confirmed(self, session_id: SessionId) -> int:
        return models.Participant.objects.filter(
            session_id=session_id.value, status=ParticipantStatus.CONFIRMED.value
        ).count()

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
        row = (
            models.Participant.objects.filter(session_id=session_id.value, **criteria)
            .order_by("created_at", "id")
            .first()
        )
        return to_participant(row) if row else None

    def get(self, participant_id: ParticipantId) -> Participant | None:
        row = models.Participant.objects.filter(pk=participant_id.value).first()
        return to_participant(row) if row else None

    def insert_participant(self, row: NewParticipant) -> Participant | UniquenessConflict:
        try:
            # Savepoint, so a conflict leaves an enclosing transaction usable.
            with transaction.atomic():
                created = models.Participant.objects.create(
                    session_id=row.session_id.value,
                    display_name=row.display_name,
                    status=row.status.value,
                    contact_phone=row.contact_phone,
                    contact_email=row.contact_email,
                    guest_key=row.guest_key,
                    profile_id=row.profile_id,
                )
        except IntegrityError as exc:
            if not is_unique_violation(exc):
                raise
            return UniquenessConflict(
                session_id=row.session_id, constraint=violated_constraint(exc)
            )
        return to_participant(created)

    def update_participant(self, participant_id: ParticipantId, **patch) -> Participant:
        row = models.Participant.objects.filter(pk=participant_id.value).first()
        if row is None:
            raise ParticipantNotFoundError(str(participant_id))
        for field, value in patch.items():
            if isinstance(value, ParticipantStatus):
                value = value.value
            setattr(row, field, value)
        row.save(update_fields=list(patch))
        return to_participant(row)

    def delete_participant(self, participant_id: ParticipantId) -> None:
        row = models.Participant.objects.filter(pk=participant_id.value).first()
        if row is not None:
            row.delete()

    def oldest_waitlisted(self, session_id: SessionId) -> Participant | None:
        row = (
            models.Participant.objects.filter(
                session_id=session_id.value, status=ParticipantStatus.WAITLISTED.value
            )
            .order_by("created_at", "id")
            .first()
        )
        return to_participant(row) if row else None

    def list_participants(
        self, session_id: SessionId, status: ParticipantStatus | None = None
    ) -> list[Participant]:
        rows = models.Participant.objects.filter(session_id=session_id.value)
        if status is not None:
            rows = rows.filter(status=status.value)
        return [to_participant(row) for row in rows.order_by("created_at", "id")]

    @contextmanager
    def capacity_guard(self, session_id: SessionId) -> Iterator[None]:
        # Row lock on the session serialises joiners on PostgreSQL. SQLite has
        # no row locks and relies on IMMEDIATE transactions from settings.
        with transaction.atomic():
            list(models.Session.objects.select_for_update().filter(pk=session_id.value))
            yield


class DjangoPaymentProofStore(PaymentProofStore):
    """PostgreSQL-backed payment proof store using Django ORM."""

    def list_proofs(
        self,
        session_id: SessionId,
        statuses: Iterable[PaymentStatus] | None = None,
    ) -> list[PaymentProof]:
        rows = models.PaymentProof.objects.filter(session_id=session_id.value)
        if statuses is not None:
            rows = rows.filter(payment_status__in=[status.value for status in statuses])
        return [to_payment_proof(row) for row in rows.order_by("-created_at", "id")]

    def get(self, proof_id: PaymentProofId) -> PaymentProof | None:
        row = models.PaymentProof.objects.filter(pk=proof_id.value).first()
        return to_payment_proof(row) if row else None

    def insert_proof(self, row: NewPaymentProof) -> PaymentProof:
        created = models.PaymentProof.objects.create(
            session_id=row.session_id.value,
            participant_id=row.participant_id.value,
            covered_participant_ids=[str(pid) for pid in row.covered_participant_ids],
            proof_image_url=row.proof_image_url,
            payment_status=row.status.value,
            amount=row.amount.amount if row.amount is not None else None,
            currency=row.currency,
            processed_at=row.processed_at,
        )
        return to_payment_proof(created)

    def update_proof(self, proof_id: PaymentProofId, **patch) -> PaymentProof:
        row = models.PaymentProof.objects.filter(pk=proof_id.value).first()
        if row is None:
            raise PaymentProofNotFoundError(str(proof_id))
        fields = []
        for field, value in patch.items():
            if field == "status":
                field, value = "payment_status", PaymentStatus(value).value
            setattr(row, field, value)
            fields.append(field)
        row.save(update_fields=fields)
        return to_payment_proof(row)
