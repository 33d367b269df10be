import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Session",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4, editable=False, primary_key=True, serialize=False
                    ),
                ),
                ("title", models.CharField(blank=True, max_length=255)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("draft", "Draft"),
                            ("open", "Open"),
                            ("closed", "Closed"),
                            ("completed", "Completed"),
                            ("cancelled", "Cancelled"),
                        ],
                        default="draft",
                        max_length=20,
                    ),
                ),
                ("capacity", models.PositiveIntegerField(blank=True, null=True)),
                ("waitlist_enabled", models.BooleanField(default=True, null=True)),
                ("start_at", models.DateTimeField(blank=True, null=True)),
                (
                    "public_code",
                    models.CharField(blank=True, max_length=32, null=True, unique=True),
                ),
                ("host_slug", models.SlugField(blank=True, max_length=100, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "host",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="hosted_sessions",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
            },
        ),
        migrations.CreateModel(
            name="Participant",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4, editable=False, primary_key=True, serialize=False
                    ),
                ),
                ("display_name", models.CharField(max_length=255)),
                ("contact_phone", models.CharField(blank=True, max_length=50, null=True)),
                ("contact_email", models.EmailField(blank=True, max_length=254, null=True)),
                ("guest_key", models.CharField(blank=True, max_length=100, null=True)),
                ("profile_id", models.CharField(blank=True, max_length=100, null=True)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("confirmed", "Confirmed"),
                            ("waitlisted", "Waitlisted"),
                            ("cancelled", "Cancelled"),
                            ("pulled_out", "Pulled Out"),
                            ("invited", "Invited"),
                        ],
                        default="confirmed",
                        max_length=20,
                    ),
                ),
                ("pull_out_reason", models.TextField(blank=True, null=True)),
                ("pull_out_seen", models.BooleanField(default=False)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                (
                    "session",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="participants",
                        to="rsvp.session",
                    ),
                ),
            ],
            options={
                "ordering": ["created_at"],
                "indexes": [
                    models.Index(
                        fields=["session", "status", "created_at"],
                        name="participant_session_status_idx",
                    ),
                    models.Index(fields=["session", "profile_id"], name="participant_profile_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        condition=models.Q(("guest_key__isnull", False)),
                        fields=("session", "guest_key"),
                        name="participant_unique_session_guest_key",
                    ),
                    models.UniqueConstraint(
                        condition=models.Q(("contact_email__isnull", False)),
                        fields=("session", "contact_email"),
                        name="participant_unique_session_contact_email",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="PaymentProof",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4, editable=False, primary_key=True, serialize=False
                    ),
                ),
                ("covered_participant_ids", models.JSONField(blank=True, default=list)),
                ("proof_image_url", models.URLField(blank=True, max_length=500, null=True)),
                (
                    "payment_status",
                    models.CharField(
                        choices=[
                            ("pending_review", "Pending Review"),
                            ("approved", "Approved"),
                            ("rejected", "Rejected"),
                        ],
                        default="pending_review",
                        max_length=20,
                    ),
                ),
                (
                    "amount",
                    models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True),
                ),
                ("currency", models.CharField(blank=True, max_length=3, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("processed_at", models.DateTimeField(blank=True, null=True)),
                (
                    "participant",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="payment_proofs",
                        to="rsvp.participant",
                    ),
                ),
                (
                    "session",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="payment_proofs",
                        to="rsvp.session",
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(
                        fields=["session", "payment_status"], name="proof_session_status_idx"
                    ),
                ],
            },
        ),
    ]
