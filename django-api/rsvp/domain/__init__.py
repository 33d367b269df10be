from rsvp.domain.models import (
    NewParticipant,
    NewPaymentProof,
    Participant,
    ParticipantStatus,
    PaymentProof,
    PaymentStatus,
    Session,
    SessionStatus,
)
from rsvp.domain.policies import StatusDecision, decide_status
from rsvp.domain.value_objects import (
    AuthenticatedIdentity,
    Capacity,
    GuestIdentity,
    Identity,
    Money,
    ParticipantId,
    PaymentProofId,
    SessionId,
)

__all__ = [
    "Session",
    "SessionStatus",
    "Participant",
    "ParticipantStatus",
    "NewParticipant",
    "PaymentProof",
    "PaymentStatus",
    "NewPaymentProof",
    "SessionId",
    "ParticipantId",
    "PaymentProofId",
    "Money",
    "Capacity",
    "AuthenticatedIdentity",
    "GuestIdentity",
    "Identity",
    "StatusDecision",
    "decide_status",
]
