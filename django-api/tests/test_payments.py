"""Unit tests for payment coverage reconciliation.

Run with: pytest tests/test_payments.py -v
"""

import uuid
from dataclasses import replace
from datetime import timedelta
from decimal import Decimal

import pytest

from conftest import HOST_ID, NOW
from rsvp.domain import (
    GuestIdentity,
    Money,
    PaymentProof,
    PaymentProofId,
    PaymentStatus,
    SessionStatus,
)
from rsvp.domain.errors import (
    AlreadyPaidError,
    NotSessionHostError,
    ParticipantNotConfirmedError,
    ParticipantNotFoundError,
    PaymentProofNotFoundError,
    ProofSessionMismatchError,
    SessionNotOpenError,
)
from rsvp.services.payment_service import covered_by_approved, latest_proof_per_participant


@pytest.fixture
def roster(services, make_session, guest):
    """A session with four confirmed participants p1..p4."""
    session = make_session(capacity=10)
    people = [
        services.joins.join(session.public_code, guest(name), name).participant
        for name in ("p1", "p2", "p3", "p4")
    ]
    return session, people


def as_guest(participant):
    """The identity a guest participant submits with."""
    return GuestIdentity(guest_key=participant.guest_key, display_name=participant.display_name)


def legacy_proof(session, payer, status=PaymentStatus.APPROVED, created_at=NOW):
    """A proof written before covered sets existed."""
    return PaymentProof(
        id=PaymentProofId(uuid.uuid4()),
        session_id=session.id,
        participant_id=payer.id,
        status=status,
        created_at=created_at,
        proof_image_url="https://example.com/legacy.png",
    )


class TestUnpaidParticipants:
    def test_legacy_and_covered_set_proofs_both_count(self, services, stores, roster):
        session, (p1, p2, p3, p4) = roster
        proof = services.payments.submit_proof(
            str(session.id),
            as_guest(p1),
            covered_ids=[str(p1.id), str(p2.id)],
            image_url="https://example.com/p.png",
        )
        services.payments.review_proof(str(session.id), str(proof.id), HOST_ID, approve=True)
        stores.proofs.add(legacy_proof(session, p3))

        unpaid = services.payments.unpaid_participants(str(session.id), HOST_ID)

        assert [p.id for p in unpaid] == [p4.id]

    def test_pending_and_rejected_proofs_do_not_cover(self, services, stores, roster):
        session, (p1, p2, _, _) = roster
        services.payments.submit_proof(
            str(session.id), as_guest(p1), image_url="https://example.com/p.png"
        )
        stores.proofs.add(legacy_proof(session, p2, status=PaymentStatus.REJECTED))

        unpaid = services.payments.unpaid_participants(str(session.id), HOST_ID)

        assert len(unpaid) == 4

    def test_only_confirmed_participants_are_listed(self, services, roster, guest):
        session, people = roster
        services.joins.decline(session.public_code, guest("Gone"), "Gone")

        unpaid = services.payments.unpaid_participants(str(session.id), HOST_ID)

        assert {p.id for p in unpaid} == {p.id for p in people}

    def test_unpaid_list_is_host_only(self, services, roster):
        session, _ = roster
        with pytest.raises(NotSessionHostError):
            services.payments.unpaid_participants(str(session.id), HOST_ID + 1)
        with pytest.raises(NotSessionHostError):
            services.payments.unpaid_participants(str(session.id), None)


class TestCashPayments:
    def test_cash_payment_is_approved_without_image(self, services, roster):
        session, (p1, *_) = roster

        proof = services.payments.mark_paid_by_cash(str(session.id), str(p1.id), HOST_ID)

        assert proof.status == PaymentStatus.APPROVED
        assert proof.is_cash
        assert proof.covered_ids() == {p1.id}
        assert proof.processed_at == NOW

    def test_second_cash_payment_is_rejected(self, services, roster):
        session, (p1, *_) = roster
        services.payments.mark_paid_by_cash(str(session.id), str(p1.id), HOST_ID)

        with pytest.raises(AlreadyPaidError):
            services.payments.mark_paid_by_cash(str(session.id), str(p1.id), HOST_ID)

    def test_cash_for_participant_covered_by_friend(self, services, roster):
        session, (p1, p2, *_) = roster
        proof = services.payments.submit_proof(
            str(session.id),
            as_guest(p1),
            covered_ids=[str(p2.id)],
            image_url="https://example.com/p.png",
        )
        services.payments.review_proof(str(session.id), str(proof.id), HOST_ID, approve=True)

        with pytest.raises(AlreadyPaidError):
            services.payments.mark_paid_by_cash(str(session.id), str(p2.id), HOST_ID)

    def test_cash_requires_confirmed_participant(self, services, make_session, guest):
        session = make_session(capacity=1)
        services.joins.join(session.public_code, guest("A"), "A")
        waiting = services.joins.join(session.public_code, guest("B"), "B").participant

        with pytest.raises(ParticipantNotConfirmedError):
            services.payments.mark_paid_by_cash(str(session.id), str(waiting.id), HOST_ID)

    def test_cash_requires_host(self, services, roster):
        session, (p1, *_) = roster
        with pytest.raises(NotSessionHostError):
            services.payments.mark_paid_by_cash(str(session.id), str(p1.id), None)

    def test_cash_for_participant_of_other_session(self, services, roster, make_session, guest):
        session, _ = roster
        other = make_session()
        stranger = services.joins.join(other.public_code, guest("X"), "X").participant

        with pytest.raises(ProofSessionMismatchError):
            services.payments.mark_paid_by_cash(str(session.id), str(stranger.id), HOST_ID)


class TestSubmitProof:
    def test_proof_defaults_to_covering_payer(self, services, roster):
        session, (p1, *_) = roster

        proof = services.payments.submit_proof(
            str(session.id),
            as_guest(p1),
            image_url="https://example.com/p.png",
            amount=Decimal("12.50"),
            currency="eur",
        )

        assert proof.status == PaymentStatus.PENDING_REVIEW
        assert proof.covered_participant_ids == (p1.id,)
        assert proof.amount == Money(Decimal("12.50"))
        assert proof.currency == "EUR"

    def test_duplicate_covered_ids_are_collapsed(self, services, roster):
        session, (p1, p2, *_) = roster

        proof = services.payments.submit_proof(
            str(session.id),
            as_guest(p1),
            covered_ids=[str(p2.id), str(p2.id), str(p1.id)],
            image_url="https://example.com/p.png",
        )

        assert proof.covered_participant_ids == (p2.id, p1.id)

    def test_covered_participant_must_be_in_session(self, services, roster, make_session, guest):
        session, (p1, *_) = roster
        other = make_session()
        stranger = services.joins.join(other.public_code, guest("X"), "X").participant

        with pytest.raises(ProofSessionMismatchError):
            services.payments.submit_proof(
                str(session.id), as_guest(p1), covered_ids=[str(stranger.id)]
            )

    def test_payer_is_the_caller(self, services, roster):
        session, (p1, p2, *_) = roster

        proof = services.payments.submit_proof(
            str(session.id), as_guest(p2), covered_ids=[str(p1.id), str(p2.id)]
        )

        assert proof.participant_id == p2.id

    def test_caller_without_rsvp_cannot_submit(self, services, roster, guest):
        session, _ = roster
        with pytest.raises(ParticipantNotFoundError):
            services.payments.submit_proof(str(session.id), guest("Nobody"))

    def test_caller_using_another_guests_key_cannot_submit(self, services, roster):
        session, (p1, *_) = roster
        impostor = GuestIdentity(guest_key=p1.guest_key, display_name="Mallory")

        with pytest.raises(ParticipantNotFoundError):
            services.payments.submit_proof(str(session.id), impostor)

    def test_waitlisted_caller_cannot_submit(self, services, make_session, guest):
        session = make_session(capacity=1)
        services.joins.join(session.public_code, guest("A"), "A")
        waiting = guest("W")
        services.joins.join(session.public_code, waiting, "W")

        with pytest.raises(ParticipantNotConfirmedError):
            services.payments.submit_proof(str(session.id), waiting)

    def test_session_must_be_open(self, services, stores, roster):
        session, (p1, *_) = roster
        stores.sessions.add(replace(session, status=SessionStatus.CLOSED))

        with pytest.raises(SessionNotOpenError):
            services.payments.submit_proof(str(session.id), as_guest(p1))


class TestReviewProof:
    def test_review_sets_status_and_processed_at(self, services, roster):
        session, (p1, *_) = roster
        proof = services.payments.submit_proof(str(session.id), as_guest(p1))

        reviewed = services.payments.review_proof(str(session.id), str(proof.id), HOST_ID, False)

        assert reviewed.status == PaymentStatus.REJECTED
        assert reviewed.processed_at == NOW

    def test_repeat_review_is_a_no_op(self, services, roster):
        session, (p1, *_) = roster
        proof = services.payments.submit_proof(str(session.id), as_guest(p1))
        first = services.payments.review_proof(str(session.id), str(proof.id), HOST_ID, True)

        second = services.payments.review_proof(str(session.id), str(proof.id), HOST_ID, True)

        assert second == first

    def test_unknown_proof(self, services, roster):
        session, _ = roster
        with pytest.raises(PaymentProofNotFoundError):
            services.payments.review_proof(str(session.id), str(uuid.uuid4()), HOST_ID, True)

    def test_proof_of_other_session(self, services, roster, make_session, guest):
        session, _ = roster
        other = make_session()
        payer = services.joins.join(other.public_code, guest("X"), "X").participant
        proof = services.payments.submit_proof(str(other.id), as_guest(payer))

        with pytest.raises(ProofSessionMismatchError):
            services.payments.review_proof(str(session.id), str(proof.id), HOST_ID, True)


class TestHostPaymentViews:
    def test_latest_proof_wins_per_participant(self, stores, roster):
        session, (p1, *_) = roster
        older = stores.proofs.add(
            legacy_proof(session, p1, PaymentStatus.REJECTED, created_at=NOW - timedelta(hours=2))
        )
        newer = stores.proofs.add(
            legacy_proof(session, p1, PaymentStatus.PENDING_REVIEW, created_at=NOW)
        )

        latest = latest_proof_per_participant([older, newer])

        assert latest[p1.id] == newer

    def test_uploads_flag_image_proofs_only(self, services, roster):
        session, (p1, p2, p3, _) = roster
        services.payments.submit_proof(
            str(session.id), as_guest(p1), image_url="https://example.com/p.png"
        )
        services.payments.mark_paid_by_cash(str(session.id), str(p2.id), HOST_ID)

        uploads = services.payments.payment_uploads(str(session.id), HOST_ID)
        uploads = {upload.participant.id: upload for upload in uploads}

        assert uploads[p1.id].has_proof
        assert not uploads[p2.id].has_proof
        assert uploads[p2.id].proof is not None
        assert uploads[p3.id].proof is None

    def test_summary_counts_and_collected_amount(self, services, roster):
        session, (p1, p2, p3, _) = roster
        group = services.payments.submit_proof(
            str(session.id),
            as_guest(p1),
            covered_ids=[str(p1.id), str(p2.id)],
            amount=Decimal("20.00"),
        )
        services.payments.review_proof(str(session.id), str(group.id), HOST_ID, True)
        services.payments.submit_proof(str(session.id), as_guest(p3), amount=Decimal("10"))

        summary = services.payments.payment_summary(str(session.id), HOST_ID)

        assert summary.received_count == 2
        assert summary.pending_count == 1
        assert summary.confirmed_count == 1
        assert summary.paid_participant_count == 2
        assert summary.collected == Money(Decimal("20.00"))

    def test_covered_by_approved_ignores_other_statuses(self, roster):
        session, (p1, p2, *_) = roster
        proofs = [
            legacy_proof(session, p1, PaymentStatus.APPROVED),
            legacy_proof(session, p2, PaymentStatus.PENDING_REVIEW),
        ]
        assert covered_by_approved(proofs) == {p1.id}
