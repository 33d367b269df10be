"""Idempotent create-or-update of participant rows.

An insert that loses a race against a concurrent writer for the same
(session, guest key) or (session, contact email) is not an error: the row
the other writer created is looked up and returned instead, and the caller
observes that row's persisted status.
"""

import logging
from dataclasses import dataclass

from rsvp.domain import (
    AuthenticatedIdentity,
    Identity,
    NewParticipant,
    Participant,
    ParticipantStatus,
    Session,
)
from rsvp.domain.errors import DuplicateUnresolvedError, IdentityConflictError
from rsvp.stores.interfaces import ParticipantStore, UniquenessConflict

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UpsertResult:
    participant: Participant
    already_joined: bool = False

    @property
    def waitlisted(self) -> bool:
        return self.participant.is_waitlisted


class ParticipantUpserter:
    def __init__(self, participants: ParticipantStore) -> None:
        self._participants = participants

    def upsert(
        self,
        session: Session,
        identity: Identity,
        target_status: ParticipantStatus,
        existing: Participant | None = None,
        *,
        display_name: str,
        phone: str | None = None,
    ) -> UpsertResult:
        """Write target_status for identity, updating existing when known.

        Raises:
            IdentityConflictError: If a conflicting row belongs to the other
                identity kind.
            DuplicateUnresolvedError: If a conflicting row cannot be found again.
        """
        if existing is not None:
            patch = {
                "status": target_status,
                "display_name": display_name,
                "contact_phone": phone,
            }
            if isinstance(identity, AuthenticatedIdentity):
                patch["contact_email"] = identity.email
            if target_status in (ParticipantStatus.CONFIRMED, ParticipantStatus.WAITLISTED):
                patch["pull_out_reason"] = None
                patch["pull_out_seen"] = False
            return UpsertResult(self._participants.update_participant(existing.id, **patch))

        outcome = self._participants.insert_participant(
            self._new_row(session, identity, target_status, display_name, phone)
        )
        if isinstance(outcome, UniquenessConflict):
            return UpsertResult(self._recover(session, identity, outcome), already_joined=True)
        return UpsertResult(outcome)

    def _new_row(
        self,
        session: Session,
        identity: Identity,
        status: ParticipantStatus,
        display_name: str,
        phone: str | None,
    ) -> NewParticipant:
        if isinstance(identity, AuthenticatedIdentity):
            return NewParticipant(
                session_id=session.id,
                display_name=display_name,
                status=status,
                contact_phone=phone,
                contact_email=identity.email,
            )
        return NewParticipant(
            session_id=session.id,
            display_name=display_name,
            status=status,
            contact_phone=phone,
            guest_key=identity.guest_key,
            profile_id=identity.guest_key,
        )

    def _recover(
        self, session: Session, identity: Identity, conflict: UniquenessConflict
    ) -> Participant:
        log_context = {"session_id": str(session.id), "constraint": conflict.constraint}
        logger.info("Duplicate participant insert, re-resolving existing row", extra=log_context)
        try:
            row = self._lookup(session, identity)
        except Exception as exc:
            logger.exception("Re-query after duplicate insert failed", extra=log_context)
            raise DuplicateUnresolvedError() from exc

        if row is None:
            logger.error("Duplicate insert but no matching participant found", extra=log_context)
            raise DuplicateUnresolvedError()
        if row.is_authenticated_row != isinstance(identity, AuthenticatedIdentity):
            logger.error(
                "Duplicate insert collided with a row of the other identity kind",
                extra={**log_context, "participant_id": str(row.id)},
            )
            raise IdentityConflictError()
        return row

    def _lookup(self, session: Session, identity: Identity) -> Participant | None:
        if isinstance(identity, AuthenticatedIdentity):
            return self._participants.find_participant(session.id, contact_email=identity.email)
        return self._participants.find_participant(session.id, guest_key=identity.guest_key)
