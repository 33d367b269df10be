"""Capacity and waitlist decisions.

Pure functions of counted state at decision time; callers are responsible for
reading the confirmed count under the session's capacity guard.
"""

from enum import Enum

from rsvp.domain.models import ParticipantStatus, Session


class StatusDecision(Enum):
    """Outcome of a join attempt against a session's remaining capacity."""

    CONFIRMED = "confirmed"
    WAITLISTED = "waitlisted"
    REJECTED = "rejected"

    def to_status(self) -> ParticipantStatus:
        if self is StatusDecision.REJECTED:
            raise ValueError("A rejected decision has no participant status")
        return ParticipantStatus(self.value)


def is_full(session: Session, confirmed_count: int) -> bool:
    return session.capacity is not None and confirmed_count >= session.capacity.value


def decide_status(session: Session, confirmed_count: int) -> StatusDecision:
    """Decide whether a join attempt is confirmed, waitlisted or rejected."""
    if not is_full(session, confirmed_count):
        return StatusDecision.CONFIRMED
    if session.waitlist_enabled:
        return StatusDecision.WAITLISTED
    return StatusDecision.REJECTED


def has_free_slot(session: Session, confirmed_count: int) -> bool:
    """Whether a waitlisted participant can be promoted.

    Unlimited sessions never waitlist anyone, so they never promote either.
    """
    return session.capacity is not None and confirmed_count < session.capacity.value
