"""Pytest configuration and shared fixtures."""

import uuid
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

import pytest
from rest_framework.test import APIClient

from rsvp.domain import Capacity, GuestIdentity, Session, SessionId, SessionStatus
from rsvp.services import Services, build_services
from rsvp.services.identity import IdentityResolver, Resolution
from rsvp.stores.memory_store import (
    InMemoryParticipantStore,
    InMemoryPaymentProofStore,
    InMemorySessionStore,
)

NOW = datetime(2026, 3, 1, 18, 0, tzinfo=UTC)
HOST_ID = 7


class BlindResolver(IdentityResolver):
    """Never finds an existing row, as if a concurrent insert had not landed yet."""

    def resolve_existing(self, session, identity):
        return Resolution(None, identity)


@pytest.fixture
def api_client() -> APIClient:
    return APIClient()


@pytest.fixture(autouse=True)
def clear_cache():
    from django.core.cache import cache
    cache.clear()
    yield
    cache.clear()


@dataclass
class Stores:
    sessions: InMemorySessionStore
    participants: InMemoryParticipantStore
    proofs: InMemoryPaymentProofStore


@pytest.fixture
def stores() -> Stores:
    return Stores(
        sessions=InMemorySessionStore(),
        participants=InMemoryParticipantStore(),
        proofs=InMemoryPaymentProofStore(),
    )


@pytest.fixture
def services(stores) -> Services:
    return build_services(stores.sessions, stores.participants, stores.proofs, clock=lambda: NOW)


@pytest.fixture
def make_session(stores):
    """Factory for open sessions in the in-memory session store."""

    def _make(
        capacity: int | None = 2,
        waitlist_enabled: bool = True,
        status: SessionStatus = SessionStatus.OPEN,
        start_at: datetime | None = NOW + timedelta(days=1),
        public_code: str | None = None,
        host_id: int | None = HOST_ID,
    ) -> Session:
        return stores.sessions.add(
            Session(
                id=SessionId(uuid.uuid4()),
                public_code=public_code or uuid.uuid4().hex[:8],
                status=status,
                capacity=Capacity(capacity) if capacity is not None else None,
                waitlist_enabled=waitlist_enabled,
                start_at=start_at,
                host_id=host_id,
            )
        )

    return _make


@pytest.fixture
def guest():
    """Factory for guest identities with a fresh key unless one is given."""

    def _guest(name: str, key: str | None = None) -> GuestIdentity:
        return GuestIdentity(guest_key=key or f"guest-{uuid.uuid4()}", display_name=name)

    return _guest
