"""Unit tests for capacity and waitlist decisions."""

import pytest

from rsvp.domain import ParticipantStatus, StatusDecision, decide_status
from rsvp.domain.policies import has_free_slot, is_full


class TestDecideStatus:
    def test_confirms_below_capacity(self, make_session):
        assert decide_status(make_session(capacity=2), 1) is StatusDecision.CONFIRMED

    def test_waitlists_when_full_and_waitlist_enabled(self, make_session):
        session = make_session(capacity=2, waitlist_enabled=True)
        assert decide_status(session, 2) is StatusDecision.WAITLISTED

    def test_rejects_when_full_and_waitlist_disabled(self, make_session):
        session = make_session(capacity=2, waitlist_enabled=False)
        assert decide_status(session, 2) is StatusDecision.REJECTED

    def test_unlimited_session_always_confirms(self, make_session):
        session = make_session(capacity=None, waitlist_enabled=False)
        assert decide_status(session, 10_000) is StatusDecision.CONFIRMED

    def test_zero_capacity_is_always_full(self, make_session):
        assert is_full(make_session(capacity=0), 0)

    def test_rejected_decision_has_no_status(self):
        assert StatusDecision.WAITLISTED.to_status() == ParticipantStatus.WAITLISTED
        with pytest.raises(ValueError):
            StatusDecision.REJECTED.to_status()


class TestHasFreeSlot:
    def test_free_slot_below_capacity(self, make_session):
        assert has_free_slot(make_session(capacity=2), 1)

    def test_no_free_slot_at_capacity(self, make_session):
        assert not has_free_slot(make_session(capacity=2), 2)

    def test_unlimited_session_never_promotes(self, make_session):
        assert not has_free_slot(make_session(capacity=None), 0)
