"""Session snapshot reads and lifecycle preconditions."""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from django.utils import timezone

from rsvp.domain import Participant, ParticipantStatus, Session, SessionStatus
from rsvp.domain.errors import (
    NotSessionHostError,
    SessionAlreadyStartedError,
    SessionNotFoundError,
    SessionNotOpenError,
)
from rsvp.services.ids import parse_session_id
from rsvp.stores.interfaces import ParticipantStore, SessionStore


@dataclass(frozen=True)
class ParticipantLists:
    """Public roster of a session: who is going and who is waiting."""

    confirmed: list[Participant]
    waitlisted: list[Participant]


class SessionReader:
    """Read-only access to sessions for the RSVP flows."""

    def __init__(
        self,
        sessions: SessionStore,
        participants: ParticipantStore,
        clock: Callable[[], datetime] = timezone.now,
    ) -> None:
        self._sessions = sessions
        self._participants = participants
        self._clock = clock

    def get_session(self, public_code: str) -> Session:
        """Return a session by public code, whatever its status.

        Raises:
            SessionNotFoundError: If no session is shared under the code.
        """
        session = self._sessions.find_by_public_code(public_code)
        if session is None:
            raise SessionNotFoundError(public_code)
        return session

    def load_joinable_session(self, public_code: str) -> Session:
        """Return a session that currently accepts RSVPs.

        Raises:
            SessionNotFoundError: If no session is shared under the code.
            SessionNotOpenError: If the session status is not open.
            SessionAlreadyStartedError: If the session start time has passed.
        """
        session = self.get_session(public_code)
        if session.status != SessionStatus.OPEN:
            raise SessionNotOpenError(session.status.value)
        if session.start_at is not None and self._clock() >= session.start_at:
            raise SessionAlreadyStartedError()
        return session

    def get_session_by_id(self, session_id: str) -> Session:
        """Return a session by ID.

        Raises:
            InvalidIdError: If session_id is not a valid UUID.
            SessionNotFoundError: If the session does not exist.
        """
        session = self._sessions.get(parse_session_id(session_id))
        if session is None:
            raise SessionNotFoundError(str(session_id))
        return session

    def get_hosted_session(self, session_id: str, host_id: int | None) -> Session:
        """Return a session owned by host_id.

        Raises:
            InvalidIdError: If session_id is not a valid UUID.
            SessionNotFoundError: If the session does not exist.
            NotSessionHostError: If the caller is not the session's host.
        """
        session = self.get_session_by_id(session_id)
        if host_id is None or session.host_id != host_id:
            raise NotSessionHostError()
        return session

    def participant_lists(self, public_code: str) -> ParticipantLists:
        session = self.get_session(public_code)
        return ParticipantLists(
            confirmed=self._participants.list_participants(
                session.id, ParticipantStatus.CONFIRMED
            ),
            waitlisted=self._participants.list_participants(
                session.id, ParticipantStatus.WAITLISTED
            ),
        )
