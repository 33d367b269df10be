"""Concurrent joins and removals.

Most cases use the thread-safe in-memory stores; one races real database
connections through the ORM stores.

Run with: pytest tests/test_concurrency.py -v
"""

from concurrent.futures import ThreadPoolExecutor
from datetime import timedelta
from functools import partial

import pytest
from django.db import connections
from django.utils import timezone

from conftest import HOST_ID
from rsvp import models
from rsvp.domain import GuestIdentity, ParticipantStatus
from rsvp.domain.errors import CapacityExceededError
from rsvp.services import django_services


def run_concurrently(calls, workers=16):
    """Run callables on a thread pool; return (results, domain errors)."""

    def attempt(call):
        try:
            return call(), None
        except CapacityExceededError as exc:
            return None, exc

    with ThreadPoolExecutor(max_workers=workers) as pool:
        outcomes = list(pool.map(attempt, calls))
    return [r for r, _ in outcomes if r is not None], [e for _, e in outcomes if e is not None]


class TestConcurrentJoins:
    def test_capacity_holds_under_racing_joins(self, services, stores, make_session, guest):
        session = make_session(capacity=5, waitlist_enabled=False)
        identities = [guest(f"P{i}") for i in range(40)]

        joined, rejected = run_concurrently(
            [
                partial(services.joins.join, session.public_code, ident, ident.display_name)
                for ident in identities
            ]
        )

        assert stores.participants.count_confirmed(session.id) == 5
        assert len(joined) == 5
        assert len(rejected) == 35

    def test_racing_joins_waitlist_the_overflow(self, services, stores, make_session, guest):
        session = make_session(capacity=3, waitlist_enabled=True)
        identities = [guest(f"P{i}") for i in range(20)]

        joined, _ = run_concurrently(
            [
                partial(services.joins.join, session.public_code, ident, ident.display_name)
                for ident in identities
            ]
        )

        assert len(joined) == 20
        assert stores.participants.count_confirmed(session.id) == 3
        waitlisted = stores.participants.list_participants(session.id, ParticipantStatus.WAITLISTED)
        assert len(waitlisted) == 17

    def test_same_guest_racing_yields_one_row(self, services, stores, make_session, guest):
        session = make_session(capacity=5)
        identity = guest("Ana")

        joined, _ = run_concurrently(
            [partial(services.joins.join, session.public_code, identity, "Ana")] * 12
        )

        assert len({result.participant.id for result in joined}) == 1
        assert sum(1 for result in joined if not result.already_joined) == 1
        assert len(stores.participants.list_participants(session.id)) == 1


class TestConcurrentRemovals:
    def test_each_removal_promotes_at_most_one(self, services, stores, make_session, guest):
        session = make_session(capacity=4, waitlist_enabled=True)
        confirmed = [
            services.joins.join(session.public_code, guest(f"C{i}"), f"C{i}").participant
            for i in range(4)
        ]
        for i in range(6):
            services.joins.join(session.public_code, guest(f"W{i}"), f"W{i}")

        run_concurrently(
            [
                partial(
                    services.promotions.remove_participant, str(session.id), str(p.id), HOST_ID
                )
                for p in confirmed[:3]
            ]
        )

        assert stores.participants.count_confirmed(session.id) == 4
        remaining = stores.participants.list_participants(session.id, ParticipantStatus.WAITLISTED)
        assert [p.display_name for p in remaining] == ["W3", "W4", "W5"]


@pytest.fixture
def race_session(transactional_db):
    return models.Session.objects.create(
        status="open",
        capacity=3,
        waitlist_enabled=False,
        public_code="race",
        start_at=timezone.now() + timedelta(days=1),
    )


def join_on_database(index):
    """Join from a worker thread with its own database connection."""
    try:
        identity = GuestIdentity(guest_key=f"key-{index}", display_name=f"P{index}")
        return django_services().joins.join("race", identity, f"P{index}")
    finally:
        connections.close_all()


class TestConcurrentJoinsOnDatabase:
    def test_capacity_holds_with_orm_stores(self, race_session):
        joined, rejected = run_concurrently(
            [partial(join_on_database, i) for i in range(12)], workers=6
        )

        confirmed = models.Participant.objects.filter(session=race_session, status="confirmed")
        assert confirmed.count() == 3
        assert len(joined) == 3
        assert len(rejected) == 9
