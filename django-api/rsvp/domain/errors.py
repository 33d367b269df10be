"""Domain error codes for the rsvp module."""

from dataclasses import dataclass
from enum import Enum


class ErrorCode(Enum):
    """Domain error codes."""

    SESSION_NOT_FOUND = "SESSION_NOT_FOUND"
    SESSION_NOT_OPEN = "SESSION_NOT_OPEN"
    SESSION_ALREADY_STARTED = "SESSION_ALREADY_STARTED"
    CAPACITY_EXCEEDED = "CAPACITY_EXCEEDED"
    PARTICIPANT_NOT_FOUND = "PARTICIPANT_NOT_FOUND"
    PARTICIPANT_NOT_ACTIVE = "PARTICIPANT_NOT_ACTIVE"
    PARTICIPANT_NOT_CONFIRMED = "PARTICIPANT_NOT_CONFIRMED"
    PAYMENT_PROOF_NOT_FOUND = "PAYMENT_PROOF_NOT_FOUND"
    PROOF_SESSION_MISMATCH = "PROOF_SESSION_MISMATCH"
    ALREADY_PAID = "ALREADY_PAID"
    NOT_SESSION_HOST = "NOT_SESSION_HOST"
    INVALID_ID = "INVALID_ID"
    IDENTITY_CONFLICT = "IDENTITY_CONFLICT"
    DUPLICATE_UNRESOLVED = "DUPLICATE_UNRESOLVED"


@dataclass(eq=False)
class DomainError(Exception):
    """Base domain error with code and user-safe message."""

    code: ErrorCode
    message: str

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class SessionNotFoundError(DomainError):
    """Raised when no session matches a public code or id."""

    def __init__(self, lookup: str) -> None:
        super().__init__(
            code=ErrorCode.SESSION_NOT_FOUND,
            message="Session not found",
        )
        self.lookup = lookup


class SessionNotOpenError(DomainError):
    """Raised when a session is not accepting RSVPs."""

    def __init__(self, status: str) -> None:
        super().__init__(
            code=ErrorCode.SESSION_NOT_OPEN,
            message=f"Session is {status}. Only open sessions can be joined.",
        )
        self.status = status


class SessionAlreadyStartedError(DomainError):
    """Raised when joining or pulling out of a session that has already started."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.SESSION_ALREADY_STARTED,
            message="Session has already started",
        )


class CapacityExceededError(DomainError):
    """Raised when a session is full and its waitlist is disabled."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.CAPACITY_EXCEEDED,
            message="Session is full and the waitlist is disabled. Please contact the host.",
        )


class ParticipantNotFoundError(DomainError):
    """Raised when a participant id or requester has no row in the session."""

    def __init__(self, participant_id: str | None = None) -> None:
        super().__init__(
            code=ErrorCode.PARTICIPANT_NOT_FOUND,
            message="Participant not found",
        )
        self.participant_id = participant_id


class ParticipantNotActiveError(DomainError):
    """Raised when a pull-out targets a participant who is not going or waitlisted."""

    def __init__(self, status: str) -> None:
        super().__init__(
            code=ErrorCode.PARTICIPANT_NOT_ACTIVE,
            message="Only joined or waitlisted participants can pull out",
        )
        self.status = status


class ParticipantNotConfirmedError(DomainError):
    """Raised when a payment is recorded for a participant who is not confirmed."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.PARTICIPANT_NOT_CONFIRMED,
            message="Participant is not confirmed",
        )


class PaymentProofNotFoundError(DomainError):
    """Raised when no payment proof matches an id."""

    def __init__(self, proof_id: str) -> None:
        super().__init__(
            code=ErrorCode.PAYMENT_PROOF_NOT_FOUND,
            message="Payment proof not found",
        )
        self.proof_id = proof_id


class ProofSessionMismatchError(DomainError):
    """Raised when a payment references participants or proofs of another session."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.PROOF_SESSION_MISMATCH,
            message="Payment does not belong to this session",
        )


class AlreadyPaidError(DomainError):
    """Raised when an approved proof already covers the participant."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.ALREADY_PAID,
            message="Participant is already marked as paid",
        )


class NotSessionHostError(DomainError):
    """Raised when a host-only operation is called by someone else."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.NOT_SESSION_HOST,
            message="You don't own this session",
        )


class InvalidIdError(DomainError):
    """Raised when an ID is not a valid UUID."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.INVALID_ID,
            message="Invalid ID format",
        )


class IdentityConflictError(DomainError):
    """Raised when a guest and a signed-in identity would share one row."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.IDENTITY_CONFLICT,
            message="This RSVP belongs to a different identity",
        )


class DuplicateUnresolvedError(DomainError):
    """Raised when a uniqueness conflict cannot be traced back to a row."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.DUPLICATE_UNRESOLVED,
            message="Unable to resolve duplicate join",
        )
