from django.urls import path

from rsvp.handlers import (
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

urlpatterns = [
    path("join", JoinView.as_view(), name="join"),
    path("decline", DeclineView.as_view(), name="decline"),
    path(
        "sessions/<str:public_code>/rsvp-status",
        RsvpStatusView.as_view(),
        name="rsvp-status",
    ),
    path(
        "sessions/<str:public_code>/participants",
        ParticipantListView.as_view(),
        name="participant-list",
    ),
    path("sessions/<str:public_code>/pull-out", PullOutView.as_view(), name="pull-out"),
    path(
        "sessions/<str:session_id>/unpaid",
        UnpaidParticipantsView.as_view(),
        name="unpaid-participants",
    ),
    path(
        "sessions/<str:session_id>/payment-proofs",
        PaymentProofSubmitView.as_view(),
        name="payment-proof-submit",
    ),
    path(
        "host/sessions/<str:session_id>/participants/<str:participant_id>",
        HostParticipantView.as_view(),
        name="host-participant",
    ),
    path(
        "host/sessions/<str:session_id>/participants/<str:participant_id>/pull-out-seen",
        PullOutSeenView.as_view(),
        name="pull-out-seen",
    ),
    path(
        "host/sessions/<str:session_id>/participants/<str:participant_id>/cash",
        CashPaymentView.as_view(),
        name="cash-payment",
    ),
    path(
        "host/sessions/<str:session_id>/payment-proofs/<str:proof_id>/review",
        ProofReviewView.as_view(),
        name="proof-review",
    ),
    path(
        "host/sessions/<str:session_id>/payments",
        HostPaymentsView.as_view(),
        name="host-payments",
    ),
]
