"""Participant identity resolution.

Maps a requester (signed-in email or anonymous guest key + name) onto the
participant row that already represents them in a session, if any.

Identity scope rules:
- a signed-in lookup only ever matches rows that carry a contact email;
- a guest lookup never matches a row that carries a contact email;
- a guest who shows up under a different name is a different guest, and gets
  a freshly minted key instead of taking over the earlier guest's row.
"""

import logging
import uuid
from collections.abc import Callable
from dataclasses import dataclass

from rsvp.domain import AuthenticatedIdentity, GuestIdentity, Identity, Participant, Session
from rsvp.stores.interfaces import ParticipantStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Resolution:
    """Result of resolving a requester against a session.

    ``identity`` is the identity the caller must write with. For guests it can
    differ from the requested one when a fresh key had to be minted.
    """

    participant: Participant | None
    identity: Identity

    @property
    def guest_key(self) -> str | None:
        if isinstance(self.identity, GuestIdentity):
            return self.identity.guest_key
        return None


def _new_guest_key() -> str:
    return str(uuid.uuid4())


class IdentityResolver:
    def __init__(
        self,
        participants: ParticipantStore,
        new_guest_key: Callable[[], str] = _new_guest_key,
    ) -> None:
        self._participants = participants
        self._new_guest_key = new_guest_key

    def resolve_existing(self, session: Session, identity: Identity) -> Resolution:
        if isinstance(identity, AuthenticatedIdentity):
            return Resolution(self._find_authenticated(session, identity), identity)
        return self._resolve_guest(session, identity)

    def _find_authenticated(
        self, session: Session, identity: AuthenticatedIdentity
    ) -> Participant | None:
        row = self._participants.find_participant(session.id, contact_email=identity.email)
        if row is None or not row.is_authenticated_row:
            return None
        return row

    def _resolve_guest(self, session: Session, identity: GuestIdentity) -> Resolution:
        row = self._participants.find_participant(session.id, profile_id=identity.guest_key)
        legacy = False
        if row is None:
            # Rows written before profile ids existed are keyed by guest_key only.
            row = self._participants.find_participant(session.id, guest_key=identity.guest_key)
            if row is None:
                return Resolution(None, identity)
            if row.profile_id is not None and not row.is_authenticated_row:
                return self._fresh_identity(session, identity, reason="guest_key_taken")
            legacy = True

        if row.is_authenticated_row:
            return self._fresh_identity(session, identity, reason="authenticated_row")
        if not identity.names_match(row.display_name):
            return self._fresh_identity(session, identity, reason="name_changed")

        if legacy:
            row = self._participants.update_participant(row.id, profile_id=identity.guest_key)
            logger.info(
                "Backfilled profile id on legacy guest participant",
                extra={"session_id": str(session.id), "participant_id": str(row.id)},
            )
        return Resolution(row, identity)

    def _fresh_identity(
        self, session: Session, identity: GuestIdentity, reason: str
    ) -> Resolution:
        fresh = GuestIdentity(guest_key=self._new_guest_key(), display_name=identity.display_name)
        logger.info(
            "Guest treated as a new identity",
            extra={"session_id": str(session.id), "reason": reason},
        )
        return Resolution(None, fresh)
