"""Join and decline flows.

Services:
- Depend only on interfaces (stores)
- Validate domain invariants
- Perform orchestration and error mapping
- Return domain models or domain errors

A join runs: session snapshot -> identity resolution -> capacity decision
-> idempotent upsert. The confirmed count is read and acted on under the
session's capacity guard.
"""

import logging
from dataclasses import dataclass

from rsvp.domain import Identity, Participant, ParticipantStatus, Session, StatusDecision
from rsvp.domain.errors import CapacityExceededError
from rsvp.domain.policies import decide_status
from rsvp.services.identity import IdentityResolver, Resolution
from rsvp.services.promotion import WaitlistPromotionService
from rsvp.services.session_reader import SessionReader
from rsvp.services.upsert import ParticipantUpserter
from rsvp.stores.interfaces import ParticipantStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RsvpResult:
    """Outcome of a join or decline.

    ``guest_key`` is the key the client must keep using; it changes when a
    guest rejoined under a different name and was given a new identity.
    """

    participant: Participant
    already_joined: bool = False
    guest_key: str | None = None

    @property
    def waitlisted(self) -> bool:
        return self.participant.is_waitlisted

    @property
    def joined_as(self) -> str:
        return "waitlist" if self.waitlisted else "joined"


def _clean_phone(phone: str | None) -> str | None:
    return (phone or "").strip() or None


class JoinService:
    def __init__(
        self,
        reader: SessionReader,
        participants: ParticipantStore,
        resolver: IdentityResolver,
        upserter: ParticipantUpserter,
        promotions: WaitlistPromotionService,
    ) -> None:
        self._reader = reader
        self._participants = participants
        self._resolver = resolver
        self._upserter = upserter
        self._promotions = promotions

    def join(
        self,
        public_code: str,
        identity: Identity,
        display_name: str,
        phone: str | None = None,
    ) -> RsvpResult:
        """Join a session as confirmed, or waitlisted when it is full.

        Raises:
            SessionNotFoundError, SessionNotOpenError, SessionAlreadyStartedError:
                If the session does not accept RSVPs.
            CapacityExceededError: If the session is full and its waitlist is off.
            IdentityConflictError, DuplicateUnresolvedError: If a racing
                duplicate insert cannot be reconciled.
        """
        session = self._reader.load_joinable_session(public_code)
        display_name = display_name.strip()
        phone = _clean_phone(phone)

        with self._participants.capacity_guard(session.id):
            resolution = self._resolver.resolve_existing(session, identity)
            existing = resolution.participant
            decision = self._decide(session, existing)

            if decision is StatusDecision.REJECTED:
                if existing is not None and existing.is_waitlisted:
                    return RsvpResult(existing, already_joined=True, guest_key=resolution.guest_key)
                logger.warning(
                    "Join rejected, session full and waitlist disabled",
                    extra={"session_id": str(session.id)},
                )
                raise CapacityExceededError()

            result = self._upserter.upsert(
                session,
                resolution.identity,
                decision.to_status(),
                existing,
                display_name=display_name,
                phone=phone,
            )

        already_joined = result.already_joined or (
            existing is not None
            and existing.status in (ParticipantStatus.CONFIRMED, ParticipantStatus.WAITLISTED)
        )
        outcome = RsvpResult(result.participant, already_joined, resolution.guest_key)
        logger.info(
            "Participant joined",
            extra={
                "session_id": str(session.id),
                "participant_id": str(outcome.participant.id),
                "joined_as": outcome.joined_as,
                "already_joined": outcome.already_joined,
            },
        )
        return outcome

    def decline(
        self,
        public_code: str,
        identity: Identity,
        display_name: str,
        phone: str | None = None,
    ) -> RsvpResult:
        """Record that the requester is not going.

        A confirmed participant who declines releases their slot to the waitlist.
        """
        session = self._reader.load_joinable_session(public_code)
        display_name = display_name.strip()
        phone = _clean_phone(phone)

        with self._participants.capacity_guard(session.id):
            resolution = self._resolver.resolve_existing(session, identity)
            existing = resolution.participant
            prior_status = existing.status if existing is not None else None
            result = self._upserter.upsert(
                session,
                resolution.identity,
                ParticipantStatus.CANCELLED,
                existing,
                display_name=display_name,
                phone=phone,
            )
            participant = result.participant
            if result.already_joined and participant.status != ParticipantStatus.CANCELLED:
                # Lost an insert race; the decline still applies to the winning row.
                prior_status = participant.status
                participant = self._participants.update_participant(
                    participant.id, status=ParticipantStatus.CANCELLED
                )

        logger.info(
            "Participant declined",
            extra={"session_id": str(session.id), "participant_id": str(participant.id)},
        )
        if prior_status is not None:
            self._promotions.after_slot_released(session, prior_status)
        return RsvpResult(participant, result.already_joined, resolution.guest_key)

    def rsvp_status(self, public_code: str, identity: Identity) -> Resolution:
        """Return the requester's current RSVP in a session, if any."""
        session = self._reader.get_session(public_code)
        return self._resolver.resolve_existing(session, identity)

    def _decide(self, session: Session, existing: Participant | None) -> StatusDecision:
        if existing is not None and existing.status == ParticipantStatus.CONFIRMED:
            # Holds a slot already and is not counted against itself.
            return StatusDecision.CONFIRMED
        return decide_status(session, self._participants.count_confirmed(session.id))
