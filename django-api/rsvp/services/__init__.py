"""Service wiring.

Services receive their stores explicitly; build_services assembles one
consistent graph over a set of stores.
"""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from django.utils import timezone

from rsvp.services.identity import IdentityResolver
from rsvp.services.join_service import JoinService
from rsvp.services.payment_service import PaymentService
from rsvp.services.promotion import WaitlistPromotionService
from rsvp.services.session_reader import SessionReader
from rsvp.services.upsert import ParticipantUpserter
from rsvp.stores.interfaces import ParticipantStore, PaymentProofStore, SessionStore


@dataclass(frozen=True)
class Services:
    reader: SessionReader
    joins: JoinService
    promotions: WaitlistPromotionService
    payments: PaymentService


def build_services(
    sessions: SessionStore,
    participants: ParticipantStore,
    proofs: PaymentProofStore,
    clock: Callable[[], datetime] = timezone.now,
    resolver: IdentityResolver | None = None,
) -> Services:
    reader = SessionReader(sessions, participants, clock=clock)
    resolver = resolver or IdentityResolver(participants)
    promotions = WaitlistPromotionService(reader, participants, resolver)
    joins = JoinService(
        reader, participants, resolver, ParticipantUpserter(participants), promotions
    )
    payments = PaymentService(reader, participants, proofs, resolver, clock=clock)
    return Services(reader=reader, joins=joins, promotions=promotions, payments=payments)


def django_services() -> Services:
    """Services backed by the Django ORM stores."""
    from rsvp.stores.django_store import (
        DjangoParticipantStore,
        DjangoPaymentProofStore,
        DjangoSessionStore,
    )

    return build_services(
        DjangoSessionStore(), DjangoParticipantStore(), DjangoPaymentProofStore()
    )
