from rsvp.handlers.views import (
    CashPaymentView,
    DeclineView,
    HostParticipantView,
    HostPaymentsView,
    JoinView,
    ParticipantListView,
    PaymentProofSubmitView,
    ProofReviewView,
    PullOutSeenView,
    PullOutView,
    RsvpStatusView,
    UnpaidParticipantsView,
)

__all__ = [
    "JoinView",
    "DeclineView",
    "RsvpStatusView",
    "ParticipantListView",
    "PullOutView",
    "UnpaidParticipantsView",
    "PaymentProofSubmitView",
    "HostParticipantView",
    "PullOutSeenView",
    "CashPaymentView",
    "ProofReviewView",
    "HostPaymentsView",
]
