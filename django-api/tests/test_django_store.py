"""Tests for the Django ORM stores against the test database.

Run with: pytest tests/test_django_store.py -v
"""

import uuid
from datetime import timedelta

import pytest
from django.utils import timezone

from conftest import BlindResolver
from rsvp import models
from rsvp.domain import (
    GuestIdentity,
    NewParticipant,
    NewPaymentProof,
    ParticipantId,
    ParticipantStatus,
    PaymentStatus,
    SessionId,
)
from rsvp.domain.errors import ParticipantNotFoundError
from rsvp.services import build_services
from rsvp.stores.django_store import (
    DjangoParticipantStore,
    DjangoPaymentProofStore,
    DjangoSessionStore,
)
from rsvp.stores.interfaces import UniquenessConflict


@pytest.fixture
def session_row():
    return models.Session.objects.create(
        title="Thursday futsal",
        status="open",
        capacity=2,
        public_code="futsal",
        start_at=timezone.now() + timedelta(days=1),
    )


def new_guest(session_row, key, status=ParticipantStatus.CONFIRMED, name="Ana"):
    return NewParticipant(
        session_id=SessionId(session_row.id),
        display_name=name,
        status=status,
        guest_key=key,
        profile_id=key,
    )


@pytest.mark.django_db
class TestDjangoSessionStore:
    def test_find_by_public_code(self, session_row):
        session = DjangoSessionStore().find_by_public_code("futsal")
        assert session.id == SessionId(session_row.id)
        assert session.capacity.value == 2

    def test_missing_code_returns_none(self):
        assert DjangoSessionStore().find_by_public_code("nope") is None

    def test_null_waitlist_flag_reads_as_enabled(self, session_row):
        models.Session.objects.filter(pk=session_row.pk).update(waitlist_enabled=None)
        assert DjangoSessionStore().get(SessionId(session_row.id)).waitlist_enabled


@pytest.mark.django_db
class TestDjangoParticipantStore:
    def test_duplicate_guest_key_is_a_conflict(self, session_row):
        store = DjangoParticipantStore()
        first = store.insert_participant(new_guest(session_row, "k1"))

        second = store.insert_participant(new_guest(session_row, "k1"))

        assert first.guest_key == "k1"
        assert isinstance(second, UniquenessConflict)
        assert models.Participant.objects.filter(session=session_row).count() == 1

    def test_duplicate_email_is_a_conflict(self, session_row):
        store = DjangoParticipantStore()
        row = NewParticipant(
            session_id=SessionId(session_row.id),
            display_name="Eve",
            status=ParticipantStatus.CONFIRMED,
            contact_email="e@x.com",
        )
        store.insert_participant(row)

        assert isinstance(store.insert_participant(row), UniquenessConflict)

    def test_several_rows_without_guest_key_are_allowed(self, session_row):
        store = DjangoParticipantStore()
        for email in ("a@x.com", "b@x.com"):
            store.insert_participant(
                NewParticipant(
                    session_id=SessionId(session_row.id),
                    display_name=email,
                    status=ParticipantStatus.CONFIRMED,
                    contact_email=email,
                )
            )
        assert store.count_confirmed(SessionId(session_row.id)) == 2

    def test_oldest_waitlisted_is_fifo(self, session_row):
        store = DjangoParticipantStore()
        first = store.insert_participant(new_guest(session_row, "w1", ParticipantStatus.WAITLISTED))
        store.insert_participant(new_guest(session_row, "w2", ParticipantStatus.WAITLISTED))

        assert store.oldest_waitlisted(SessionId(session_row.id)).id == first.id

    def test_find_participant_needs_one_criterion(self, session_row):
        with pytest.raises(ValueError):
            DjangoParticipantStore().find_participant(
                SessionId(session_row.id), guest_key="a", profile_id="a"
            )

    def test_update_persists_fields(self, session_row):
        store = DjangoParticipantStore()
        created = store.insert_participant(new_guest(session_row, "k1"))

        updated = store.update_participant(
            created.id, status=ParticipantStatus.PULLED_OUT, pull_out_reason="sick"
        )

        assert updated.status == ParticipantStatus.PULLED_OUT
        assert models.Participant.objects.get(pk=created.id.value).pull_out_reason == "sick"

    def test_update_missing_participant(self, session_row):
        with pytest.raises(ParticipantNotFoundError):
            DjangoParticipantStore().update_participant(
                ParticipantId(uuid.uuid4()), status=ParticipantStatus.CANCELLED
            )

    def test_capacity_guard_runs_the_block(self, session_row):
        store = DjangoParticipantStore()
        with store.capacity_guard(SessionId(session_row.id)):
            store.insert_participant(new_guest(session_row, "k1"))
        assert store.count_confirmed(SessionId(session_row.id)) == 1


@pytest.mark.django_db
class TestDjangoPaymentProofStore:
    def test_covered_ids_round_trip_through_json(self, session_row):
        participants = DjangoParticipantStore()
        payer = participants.insert_participant(new_guest(session_row, "k1"))
        friend = participants.insert_participant(new_guest(session_row, "k2", name="Bo"))
        store = DjangoPaymentProofStore()

        proof = store.insert_proof(
            NewPaymentProof(
                session_id=SessionId(session_row.id),
                participant_id=payer.id,
                status=PaymentStatus.PENDING_REVIEW,
                covered_participant_ids=(payer.id, friend.id),
            )
        )
        loaded = store.get(proof.id)

        assert loaded.covered_ids() == {payer.id, friend.id}

    def test_update_proof_maps_status(self, session_row):
        payer = DjangoParticipantStore().insert_participant(new_guest(session_row, "k1"))
        store = DjangoPaymentProofStore()
        proof = store.insert_proof(
            NewPaymentProof(
                session_id=SessionId(session_row.id),
                participant_id=payer.id,
                status=PaymentStatus.PENDING_REVIEW,
            )
        )

        store.update_proof(proof.id, status=PaymentStatus.APPROVED, processed_at=timezone.now())

        assert [p.id for p in store.list_approved_proofs(SessionId(session_row.id))] == [proof.id]


@pytest.mark.django_db
class TestDjangoConflictRecovery:
    def test_lost_insert_race_returns_winning_row(self, session_row):
        participants = DjangoParticipantStore()
        services = build_services(
            DjangoSessionStore(),
            participants,
            DjangoPaymentProofStore(),
            resolver=BlindResolver(participants),
        )
        identity = GuestIdentity(guest_key="k1", display_name="Ana")
        first = services.joins.join("futsal", identity, "Ana")

        second = services.joins.join("futsal", identity, "Ana")

        assert second.already_joined
        assert second.participant.id == first.participant.id
        assert models.Participant.objects.filter(session=session_row).count() == 1
