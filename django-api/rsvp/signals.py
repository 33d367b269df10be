"""Django signals for cache invalidation.

The public participant list of a session is cached under its public code;
any change to the session or to one of its participants drops that entry
once the surrounding transaction commits.
"""

from functools import partial

from django.db import transaction
from django.db.models.signals import post_delete, post_save
from django.dispatch import receiver

from rsvp.cache import invalidate_participant_list
from rsvp.models import Participant, Session


def invalidate_after_commit(public_code: str | None) -> None:
    transaction.on_commit(partial(invalidate_participant_list, public_code))


@receiver([post_save, post_delete], sender=Session)
def invalidate_session_cache(sender, instance, **kwargs):
    """Invalidate the participant list when a session is saved or deleted."""
    invalidate_after_commit(instance.public_code)


@receiver([post_save, post_delete], sender=Participant)
def invalidate_participant_cache(sender, instance, **kwargs):
    """Invalidate the participant list when a participant is saved or deleted."""
    public_code = (
        Session.objects.filter(pk=instance.session_id)
        .values_list("public_code", flat=True)
        .first()
    )
    invalidate_after_commit(public_code)
