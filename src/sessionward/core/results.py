"""Explicit outcome values for expected authentication denials."""

from dataclasses import dataclass
from typing import Generic, Self, TypeVar

from sessionward.errors import AuthenticationError, DenialReason, OriginNotAllowedError

T = TypeVar("T")

DenialError = AuthenticationError | OriginNotAllowedError


@dataclass(frozen=True, slots=True)
class AuthResult(Generic[T]):
    """Either a granted value or the denial that prevented it.

    Denials are returned, not raised, so routine "wrong password" or "stale
    token" branches stay ordinary control flow. ``unwrap`` raises the denial
    at the boundary that needs an exception.
    """

    value: T | None = None
    error: DenialError | None = None

    @classmethod
    def success(cls, value: T) -> Self:
        return cls(value=value)

    @classmethod
    def denied(cls, error: DenialError) -> Self:
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def reason(self) -> DenialReason | None:
        return None if self.error is None else self.error.reason

    def unwrap(self) -> T:
        if self.error is not None:
            raise self.error
        return self.value  # type: ignore[return-value]
