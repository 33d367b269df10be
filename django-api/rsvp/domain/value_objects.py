"""Domain primitives that enforce validity at creation time."""

from dataclasses import dataclass
from decimal import Decimal
from typing import Self
from uuid import UUID


@dataclass(frozen=True)
class SessionId:
    """Unique identifier for a Session."""

    value: UUID

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=UUID(value))

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class ParticipantId:
    """Unique identifier for a Participant."""

    value: UUID

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=UUID(value))

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class PaymentProofId:
    """Unique identifier for a PaymentProof."""

    value: UUID

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=UUID(value))

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class Money:
    """Price representation with validation."""

    amount: Decimal

    def __post_init__(self) -> None:
        if self.amount < 0:
            raise ValueError("Money amount cannot be negative")

    def __add__(self, other: "Money") -> "Money":
        return Money(self.amount + other.amount)

    def __str__(self) -> str:
        return f"{self.amount:.2f}"


@dataclass(frozen=True)
class Capacity:
    """Non-negative integer representing capacity."""

    value: int

    def __post_init__(self) -> None:
        if self.value < 0:
            raise ValueError("Capacity cannot be negative")


@dataclass(frozen=True)
class AuthenticatedIdentity:
    """A signed-in requester, keyed by contact email."""

    email: str

    def __post_init__(self) -> None:
        normalized = self.email.strip().lower()
        if not normalized:
            raise ValueError("Authenticated identity requires an email")
        object.__setattr__(self, "email", normalized)


@dataclass(frozen=True)
class GuestIdentity:
    """An anonymous requester, keyed by a client-generated guest key.

    ``display_name`` is None when the caller only sent its key; such a lookup
    matches whatever name the stored row carries.
    """

    guest_key: str
    display_name: str | None = None

    def __post_init__(self) -> None:
        if not self.guest_key.strip():
            raise ValueError("Guest identity requires a guest key")
        object.__setattr__(self, "guest_key", self.guest_key.strip())
        name = self.display_name.strip() if self.display_name is not None else ""
        object.__setattr__(self, "display_name", name or None)

    def names_match(self, other_name: str) -> bool:
        if self.display_name is None:
            return True
        return self.display_name.casefold() == other_name.strip().casefold()


Identity = AuthenticatedIdentity | GuestIdentity
