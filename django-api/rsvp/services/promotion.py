"""Participant removal, pull-out and FIFO waitlist promotion.

A confirmed participant leaving frees exactly one slot, so each removal
promotes at most one waitlisted participant: the one who has waited longest.
Promotion is bookkeeping; if it fails the removal still stands.
"""

import logging

from rsvp.domain import Identity, Participant, ParticipantId, ParticipantStatus, Session
from rsvp.domain.errors import ParticipantNotActiveError, ParticipantNotFoundError
from rsvp.domain.policies import has_free_slot
from rsvp.services.identity import IdentityResolver
from rsvp.services.ids import parse_participant_id
from rsvp.services.session_reader import SessionReader
from rsvp.stores.interfaces import ParticipantStore

logger = logging.getLogger(__name__)

ACTIVE_STATUSES = (ParticipantStatus.CONFIRMED, ParticipantStatus.WAITLISTED)


class WaitlistPromotionService:
    def __init__(
        self,
        reader: SessionReader,
        participants: ParticipantStore,
        resolver: IdentityResolver,
    ) -> None:
        self._reader = reader
        self._participants = participants
        self._resolver = resolver

    def remove_and_promote(
        self, session: Session, participant_id: ParticipantId
    ) -> Participant | None:
        """Hard-delete a participant and fill the freed slot from the waitlist.

        Returns the promoted participant, if any.

        Raises:
            ParticipantNotFoundError: If the participant is not in the session.
        """
        participant = self._session_participant(session, participant_id)
        self._participants.delete_participant(participant.id)
        logger.info(
            "Participant removed",
            extra={
                "session_id": str(session.id),
                "participant_id": str(participant.id),
                "prior_status": participant.status.value,
            },
        )
        return self.after_slot_released(session, participant.status)

    def remove_participant(
        self, session_id: str, participant_id: str, host_id: int | None
    ) -> Participant | None:
        """Host removal of a participant.

        Raises:
            InvalidIdError: If an ID is not a valid UUID.
            SessionNotFoundError: If the session does not exist.
            NotSessionHostError: If the caller does not host the session.
            ParticipantNotFoundError: If the participant is not in the session.
        """
        session = self._reader.get_hosted_session(session_id, host_id)
        return self.remove_and_promote(session, parse_participant_id(participant_id))

    def pull_out(
        self, public_code: str, identity: Identity, reason: str | None = None
    ) -> Participant:
        """Withdraw the requester from a session, keeping the row for the host.

        Raises:
            SessionNotFoundError, SessionNotOpenError, SessionAlreadyStartedError:
                If the session no longer accepts RSVP changes.
            ParticipantNotFoundError: If the requester has no RSVP in the session.
            ParticipantNotActiveError: If the RSVP is neither confirmed nor waitlisted.
        """
        session = self._reader.load_joinable_session(public_code)
        participant = self._resolver.resolve_existing(session, identity).participant
        if participant is None:
            raise ParticipantNotFoundError()
        if participant.status not in ACTIVE_STATUSES:
            raise ParticipantNotActiveError(participant.status.value)

        updated = self._participants.update_participant(
            participant.id,
            status=ParticipantStatus.PULLED_OUT,
            pull_out_reason=(reason or "").strip() or None,
            pull_out_seen=False,
        )
        logger.info(
            "Participant pulled out",
            extra={
                "session_id": str(session.id),
                "participant_id": str(participant.id),
                "prior_status": participant.status.value,
            },
        )
        self.after_slot_released(session, participant.status)
        return updated

    def mark_pull_out_seen(
        self, session_id: str, participant_id: str, host_id: int | None
    ) -> Participant:
        session = self._reader.get_hosted_session(session_id, host_id)
        participant = self._session_participant(session, parse_participant_id(participant_id))
        return self._participants.update_participant(participant.id, pull_out_seen=True)

    def after_slot_released(
        self, session: Session, prior_status: ParticipantStatus
    ) -> Participant | None:
        if prior_status != ParticipantStatus.CONFIRMED:
            return None
        return self.promote_next(session)

    def promote_next(self, session: Session) -> Participant | None:
        """Promote the longest-waiting participant if a confirmed slot is free."""
        try:
            with self._participants.capacity_guard(session.id):
                confirmed = self._participants.count_confirmed(session.id)
                if not has_free_slot(session, confirmed):
                    return None
                candidate = self._participants.oldest_waitlisted(session.id)
                if candidate is None:
                    return None
                promoted = self._participants.update_participant(
                    candidate.id, status=ParticipantStatus.CONFIRMED
                )
        except Exception:
            logger.exception(
                "Waitlist promotion failed", extra={"session_id": str(session.id)}
            )
            return None

        logger.info(
            "Promoted participant from waitlist",
            extra={"session_id": str(session.id), "participant_id": str(promoted.id)},
        )
        return promoted

    def _session_participant(
        self, session: Session, participant_id: ParticipantId
    ) -> Participant:
        participant = self._participants.get(participant_id)
        if participant is None or participant.session_id != session.id:
            raise ParticipantNotFoundError(str(participant_id))
        return participant
