"""Cache keys for public rsvp reads."""

from django.core.cache import cache


def participant_list_key(public_code: str) -> str:
    return f"sessions:{public_code}:participants"


def invalidate_participant_list(public_code: str | None) -> None:
    if public_code:
        cache.delete(participant_list_key(public_code))
