"""Serializers for request validation and for transforming domain models to API responses."""

from decimal import Decimal

from rest_framework import serializers


class RsvpRequestSerializer(serializers.Serializer):
    """Body of a join or decline request."""

    public_code = serializers.CharField(max_length=32)
    name = serializers.CharField(max_length=255, trim_whitespace=True)
    phone = serializers.CharField(max_length=50, required=False, allow_blank=True, allow_null=True)
    guest_key = serializers.CharField(max_length=100, required=False, allow_blank=True)


class IdentityRequestSerializer(serializers.Serializer):
    """Guest identity fields for requests that act on the caller's own RSVP."""

    name = serializers.CharField(max_length=255, required=False, allow_blank=True)
    guest_key = serializers.CharField(max_length=100, required=False, allow_blank=True)


class PullOutRequestSerializer(IdentityRequestSerializer):
    reason = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class PaymentProofRequestSerializer(IdentityRequestSerializer):
    """Proof submitted by the caller for themselves and anyone they cover."""

    covered_participant_ids = serializers.ListField(
        child=serializers.UUIDField(), required=False, default=list
    )
    proof_image_url = serializers.URLField(max_length=500)
    amount = serializers.DecimalField(
        max_digits=10, decimal_places=2, min_value=Decimal("0"), required=False, allow_null=True
    )
    currency = serializers.CharField(max_length=3, required=False, allow_null=True)


class ProofReviewRequestSerializer(serializers.Serializer):
    approve = serializers.BooleanField()


class ParticipantSerializer(serializers.Serializer):
    """Serializer for Participant domain model."""

    id = serializers.CharField()
    display_name = serializers.CharField()
    status = serializers.CharField()
    created_at = serializers.DateTimeField()


class HostParticipantSerializer(ParticipantSerializer):
    """Participant fields visible to the session host."""

    contact_phone = serializers.CharField(allow_null=True)
    contact_email = serializers.CharField(allow_null=True)
    pull_out_reason = serializers.CharField(allow_null=True)
    pull_out_seen = serializers.BooleanField()


class RsvpResultSerializer(serializers.Serializer):
    participant_id = serializers.CharField(source="participant.id")
    status = serializers.CharField(source="participant.status")
    waitlisted = serializers.BooleanField()
    already_joined = serializers.BooleanField()
    joined_as = serializers.CharField()
    guest_key = serializers.CharField(allow_null=True)


class ParticipantListsSerializer(serializers.Serializer):
    confirmed = ParticipantSerializer(many=True)
    waitlisted = ParticipantSerializer(many=True)


class PaymentProofSerializer(serializers.Serializer):
    """Serializer for PaymentProof domain model."""

    id = serializers.CharField()
    participant_id = serializers.CharField()
    covered_participant_ids = serializers.SerializerMethodField()
    status = serializers.CharField()
    proof_image_url = serializers.CharField(allow_null=True)
    amount = serializers.SerializerMethodField()
    currency = serializers.CharField(allow_null=True)
    created_at = serializers.DateTimeField()
    processed_at = serializers.DateTimeField(allow_null=True)

    def get_covered_participant_ids(self, proof) -> list[str]:
        return sorted(str(pid) for pid in proof.covered_ids())

    def get_amount(self, proof) -> str | None:
        return str(proof.amount) if proof.amount is not None else None


class PaymentUploadSerializer(serializers.Serializer):
    participant = ParticipantSerializer()
    proof = PaymentProofSerializer(allow_null=True)
    has_proof = serializers.BooleanField()


class PaymentSummarySerializer(serializers.Serializer):
    received_count = serializers.IntegerField()
    pending_count = serializers.IntegerField()
    confirmed_count = serializers.IntegerField()
    paid_participant_count = serializers.IntegerField()
    collected = serializers.CharField()
