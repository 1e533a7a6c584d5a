from abc import ABC
from enum import StrEnum


class DenialReason(StrEnum):
    """Coarse reason codes exposed to callers and logs."""

    INVALID_CREDENTIALS = "invalid_credentials"
    INVALID_TOKEN = "invalid_token"  # noqa: S105
    SESSION_EXPIRED = "session_expired"
    ORIGIN_NOT_ALLOWED = "origin_not_allowed"


class UserError(ABC, Exception):
    """Base class for user-related errors.

    All errors that inherit from UserError will have their messages
    displayed to the user. These errors should not contain any
    sensitive information.
    """


class NotFoundError(UserError):
    """Raised when a requested resource is not found."""

    def __init__(self, message: str = "Document not found") -> None:
        super().__init__(message)


class ValidationError(UserError):
    """Raised when user input fails validation."""


class AuthenticationError(UserError):
    """Raised when authentication fails.

    Subclasses carry a coarse ``reason`` so collaborators can log and alert
    on each condition separately while the response stays generic.
    """

    reason: DenialReason | None = None

    def __init__(self, message: str = "Authentication failed") -> None:
        super().__init__(message)


class InvalidCredentialsError(AuthenticationError):
    """Unknown account or wrong password. Callers cannot tell which."""

    reason = DenialReason.INVALID_CREDENTIALS


class InvalidTokenError(AuthenticationError):
    """Token is malformed or its signature does not verify."""

    reason = DenialReason.INVALID_TOKEN


class SessionExpiredError(AuthenticationError):
    """Token is authentic but its record is absent, expired, or revoked."""

    reason = DenialReason.SESSION_EXPIRED


class OriginNotAllowedError(UserError):
    """Cookie-borne request arrived from an origin outside the allow-list."""

    reason = DenialReason.ORIGIN_NOT_ALLOWED

    def __init__(self, message: str = "Origin not allowed") -> None:
        super().__init__(message)


class StoreUnavailableError(Exception):
    """Transient storage failure or timeout. Retryable."""


class DuplicateIDError(Exception):
    """A record with the same identifier already exists."""


class SessionNotFoundError(Exception):
    """Record is absent or already logically expired."""


class ConfigurationError(Exception):
    """Fatal startup misconfiguration."""


class InvalidKeyError(ConfigurationError):
    """Signing key is absent or empty."""


class SignatureFormatError(ValueError):
    """Signature input has the wrong shape for the configured algorithm."""
