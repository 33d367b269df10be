from django.contrib import admin

from rsvp.models import Participant, PaymentProof, Session


class ParticipantInline(admin.TabularInline):
    model = Participant
    extra = 0
    fields = ["display_name", "status", "contact_email", "guest_key", "created_at"]
    readonly_fields = ["created_at"]


@admin.register(Session)
class SessionAdmin(admin.ModelAdmin):
    list_display = ["title", "public_code", "status", "capacity", "waitlist_enabled", "start_at"]
    list_filter = ["status", "waitlist_enabled"]
    search_fields = ["title", "public_code", "host_slug"]
    inlines = [ParticipantInline]


@admin.register(Participant)
class ParticipantAdmin(admin.ModelAdmin):
    list_display = ["display_name", "session", "status", "created_at", "pull_out_seen"]
    list_filter = ["status"]
    search_fields = ["display_name", "contact_email", "guest_key"]


@admin.register(PaymentProof)
class PaymentProofAdmin(admin.ModelAdmin):
    list_display = ["participant", "session", "payment_status", "amount", "currency", "created_at"]
    list_filter = ["payment_status"]
