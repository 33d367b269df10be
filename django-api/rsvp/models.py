"""Django ORM models (persistence layer).

These models handle database concerns. Domain logic lives in domain/.
"""

import uuid

from django.conf import settings
from django.db import models
from django.db.models import Q

from rsvp.domain.models import ParticipantStatus, PaymentStatus, SessionStatus


def _choices(enum_cls) -> list[tuple[str, str]]:
    return [(member.value, member.value.replace("_", " ").title()) for member in enum_cls]


class Session(models.Model):
    """Persistence model for hosted sessions."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    host = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="hosted_sessions",
    )
    title = models.CharField(max_length=255, blank=True)
    status = models.CharField(
        max_length=20, choices=_choices(SessionStatus), default=SessionStatus.DRAFT.value
    )
    capacity = models.PositiveIntegerField(null=True, blank=True)
    waitlist_enabled = models.BooleanField(null=True, default=True)
    start_at = models.DateTimeField(null=True, blank=True)
    public_code = models.CharField(max_length=32, unique=True, null=True, blank=True)
    host_slug = models.SlugField(max_length=100, null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return self.title or str(self.public_code or self.id)


class Participant(models.Model):
    """Persistence model for a person's RSVP to a session."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    session = models.ForeignKey(Session, on_delete=models.CASCADE, related_name="participants")
    display_name = models.CharField(max_length=255)
    contact_phone = models.CharField(max_length=50, null=True, blank=True)
    contact_email = models.EmailField(null=True, blank=True)
    guest_key = models.CharField(max_length=100, null=True, blank=True)
    profile_id = models.CharField(max_length=100, null=True, blank=True)
    status = models.CharField(
        max_length=20,
        choices=_choices(ParticipantStatus),
        default=ParticipantStatus.CONFIRMED.value,
    )
    pull_out_reason = models.TextField(null=True, blank=True)
    pull_out_seen = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        ordering = ["created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["session", "guest_key"],
                condition=Q(guest_key__isnull=False),
                name="participant_unique_session_guest_key",
            ),
            models.UniqueConstraint(
                fields=["session", "contact_email"],
                condition=Q(contact_email__isnull=False),
                name="participant_unique_session_contact_email",
            ),
        ]
        indexes = [
            models.Index(
                fields=["session", "status", "created_at"],
                name="participant_session_status_idx",
            ),
            models.Index(fields=["session", "profile_id"], name="participant_profile_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.display_name} ({self.status})"


class PaymentProof(models.Model):
    """Persistence model for a payment submission or host-recorded cash payment."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    session = models.ForeignKey(Session, on_delete=models.CASCADE, related_name="payment_proofs")
    participant = models.ForeignKey(
        Participant, on_delete=models.CASCADE, related_name="payment_proofs"
    )
    covered_participant_ids = models.JSONField(default=list, blank=True)
    proof_image_url = models.URLField(max_length=500, null=True, blank=True)
    payment_status = models.CharField(
        max_length=20,
        choices=_choices(PaymentStatus),
        default=PaymentStatus.PENDING_REVIEW.value,
    )
    amount = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    currency = models.CharField(max_length=3, null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    processed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["session", "payment_status"], name="proof_session_status_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.participant_id} - {self.payment_status}"
