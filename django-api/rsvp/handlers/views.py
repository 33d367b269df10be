"""HTTP handlers (views) - handle HTTP concerns only.

Handlers:
- Parse requests and validate input format
- Call services for business logic
- Map domain errors to HTTP responses (see handlers/exceptions.py)
- Never contain business logic
- Never expose internal error details
"""

from django.conf import settings
from django.core.cache import cache
from rest_framework import status
from rest_framework.exceptions import ValidationError
from rest_framework.permissions import IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from rsvp.cache import participant_list_key
from rsvp.domain import AuthenticatedIdentity, GuestIdentity, Identity
from rsvp.handlers.serializers import (
    HostParticipantSerializer,
    IdentityRequestSerializer,
    ParticipantListsSerializer,
    ParticipantSerializer,
    PaymentProofRequestSerializer,
    PaymentProofSerializer,
    PaymentSummarySerializer,
    PaymentUploadSerializer,
    ProofReviewRequestSerializer,
    PullOutRequestSerializer,
    RsvpRequestSerializer,
    RsvpResultSerializer,
)
from rsvp.services import Services, django_services


def identity_from_request(request: Request, data: dict) -> Identity:
    """Signed-in users with an email act as themselves; everyone else is a guest."""
    user = request.user
    if user.is_authenticated and getattr(user, "email", ""):
        return AuthenticatedIdentity(email=user.email)
    guest_key = (data.get("guest_key") or "").strip()
    if not guest_key:
        raise ValidationError({"guest_key": ["This field is required for guests."]})
    return GuestIdentity(guest_key=guest_key, display_name=data.get("name"))


def host_id(request: Request) -> int | None:
    return request.user.pk if request.user.is_authenticated else None


class ServiceView(APIView):
    def get_services(self) -> Services:
        return django_services()


class JoinView(ServiceView):
    """Handler for POST /api/join"""

    def post(self, request: Request) -> Response:
        body = RsvpRequestSerializer(data=request.data)
        body.is_valid(raise_exception=True)
        data = body.validated_data
        result = self.get_services().joins.join(
            data["public_code"],
            identity_from_request(request, data),
            data["name"],
            data.get("phone"),
        )
        return Response(RsvpResultSerializer(result).data)


class DeclineView(ServiceView):
    """Handler for POST /api/decline"""

    def post(self, request: Request) -> Response:
        body = RsvpRequestSerializer(data=request.data)
        body.is_valid(raise_exception=True)
        data = body.validated_data
        result = self.get_services().joins.decline(
            data["public_code"],
            identity_from_request(request, data),
            data["name"],
            data.get("phone"),
        )
        return Response(RsvpResultSerializer(result).data)


class RsvpStatusView(ServiceView):
    """Handler for POST /api/sessions/{public_code}/rsvp-status"""

    def post(self, request: Request, public_code: str) -> Response:
        body = IdentityRequestSerializer(data=request.data)
        body.is_valid(raise_exception=True)
        resolution = self.get_services().joins.rsvp_status(
            public_code, identity_from_request(request, body.validated_data)
        )
        participant = resolution.participant
        return Response(
            {
                "participant": ParticipantSerializer(participant).data if participant else None,
                "status": participant.status.value if participant else None,
                "guest_key": resolution.guest_key,
            }
        )


class ParticipantListView(ServiceView):
    """Handler for GET /api/sessions/{public_code}/participants"""

    def get(self, request: Request, public_code: str) -> Response:
        key = participant_list_key(public_code)
        data = cache.get(key)
        if data is None:
            lists = self.get_services().reader.participant_lists(public_code)
            data = ParticipantListsSerializer(lists).data
            cache.set(key, data, settings.PARTICIPANT_LIST_CACHE_TTL)
        return Response(data)


class PullOutView(ServiceView):
    """Handler for POST /api/sessions/{public_code}/pull-out"""

    def post(self, request: Request, public_code: str) -> Response:
        body = PullOutRequestSerializer(data=request.data)
        body.is_valid(raise_exception=True)
        data = body.validated_data
        participant = self.get_services().promotions.pull_out(
            public_code, identity_from_request(request, data), data.get("reason")
        )
        return Response(ParticipantSerializer(participant).data)


class UnpaidParticipantsView(ServiceView):
    """Handler for GET /api/sessions/{session_id}/unpaid"""

    permission_classes = [IsAuthenticated]

    def get(self, request: Request, session_id: str) -> Response:
        participants = self.get_services().payments.unpaid_participants(
            session_id, host_id(request)
        )
        return Response({"participants": ParticipantSerializer(participants, many=True).data})


class PaymentProofSubmitView(ServiceView):
    """Handler for POST /api/sessions/{session_id}/payment-proofs"""

    def post(self, request: Request, session_id: str) -> Response:
        body = PaymentProofRequestSerializer(data=request.data)
        body.is_valid(raise_exception=True)
        data = body.validated_data
        proof = self.get_services().payments.submit_proof(
            session_id,
            identity_from_request(request, data),
            covered_ids=[str(pid) for pid in data["covered_participant_ids"]],
            image_url=data["proof_image_url"],
            amount=data.get("amount"),
            currency=data.get("currency"),
        )
        return Response(PaymentProofSerializer(proof).data, status=status.HTTP_201_CREATED)


class HostParticipantView(ServiceView):
    """Handler for DELETE /api/host/sessions/{session_id}/participants/{participant_id}"""

    permission_classes = [IsAuthenticated]

    def delete(self, request: Request, session_id: str, participant_id: str) -> Response:
        promoted = self.get_services().promotions.remove_participant(
            session_id, participant_id, host_id(request)
        )
        return Response(
            {"promoted": ParticipantSerializer(promoted).data if promoted else None}
        )


class PullOutSeenView(ServiceView):
    """Handler for POST /api/host/sessions/{session_id}/participants/{participant_id}/pull-out-seen"""

    permission_classes = [IsAuthenticated]

    def post(self, request: Request, session_id: str, participant_id: str) -> Response:
        participant = self.get_services().promotions.mark_pull_out_seen(
            session_id, participant_id, host_id(request)
        )
        return Response(HostParticipantSerializer(participant).data)


class CashPaymentView(ServiceView):
    """Handler for POST /api/host/sessions/{session_id}/participants/{participant_id}/cash"""

    permission_classes = [IsAuthenticated]

    def post(self, request: Request, session_id: str, participant_id: str) -> Response:
        proof = self.get_services().payments.mark_paid_by_cash(
            session_id, participant_id, host_id(request)
        )
        return Response(PaymentProofSerializer(proof).data, status=status.HTTP_201_CREATED)


class ProofReviewView(ServiceView):
    """Handler for POST /api/host/sessions/{session_id}/payment-proofs/{proof_id}/review"""

    permission_classes = [IsAuthenticated]

    def post(self, request: Request, session_id: str, proof_id: str) -> Response:
        body = ProofReviewRequestSerializer(data=request.data)
        body.is_valid(raise_exception=True)
        proof = self.get_services().payments.review_proof(
            session_id, proof_id, host_id(request), body.validated_data["approve"]
        )
        return Response(PaymentProofSerializer(proof).data)


class HostPaymentsView(ServiceView):
    """Handler for GET /api/host/sessions/{session_id}/payments"""

    permission_classes = [IsAuthenticated]

    def get(self, request: Request, session_id: str) -> Response:
        payments = self.get_services().payments
        uploads = payments.payment_uploads(session_id, host_id(request))
        summary = payments.payment_summary(session_id, host_id(request))
        return Response(
            {
                "uploads": PaymentUploadSerializer(uploads, many=True).data,
                "summary": PaymentSummarySerializer(summary).data,
            }
        )
