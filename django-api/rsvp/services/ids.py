"""Parsing of externally supplied identifiers."""

from rsvp.domain import ParticipantId, PaymentProofId, SessionId
from rsvp.domain.errors import InvalidIdError


def parse_session_id(value: str) -> SessionId:
    try:
        return SessionId.from_string(str(value))
    except ValueError as exc:
        raise InvalidIdError() from exc


def parse_participant_id(value: str) -> ParticipantId:
    try:
        return ParticipantId.from_string(str(value))
    except ValueError as exc:
        raise InvalidIdError() from exc


def parse_proof_id(value: str) -> PaymentProofId:
    try:
        return PaymentProofId.from_string(str(value))
    except ValueError as exc:
        raise InvalidIdError() from exc
