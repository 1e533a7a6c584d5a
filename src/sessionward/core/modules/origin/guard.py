from collections.abc import Iterable
from enum import StrEnum

import structlog

from sessionward.core.results import AuthResult
from sessionward.errors import ConfigurationError, OriginNotAllowedError

logger = structlog.get_logger(__name__)

WILDCARD = "*"
SAFE_METHODS = frozenset({"GET", "HEAD", "OPTIONS"})


class TransmissionMode(StrEnum):
    """How clients present session tokens."""

    COOKIE = "cookie"  # replayed automatically by browsers, origin-checked
    HEADER = "header"  # Authorization: Bearer, never replayed cross-site


def normalize_origin(origin: str) -> str:
    return origin.strip().removesuffix("/")


class OriginPolicyGuard:
    """Cross-site request forgery mitigation for cookie-borne sessions.

    Header transmission bypasses the guard entirely. In cookie mode an
    explicit allow-list is required and a wildcard is rejected, since
    credentialed requests must never be accepted from any origin.
    """

    def __init__(self, allowed_origins: Iterable[str], transmission_mode: TransmissionMode | str) -> None:
        self.mode = TransmissionMode(transmission_mode)
        self._allowed = frozenset(normalize_origin(origin) for origin in allowed_origins if origin.strip())
        self._wildcard = WILDCARD in self._allowed
        if self._wildcard and self.mode is TransmissionMode.COOKIE:
            raise ConfigurationError("Wildcard origin cannot be combined with cookie transmission")

    @property
    def allowed_origins(self) -> frozenset[str]:
        return self._allowed

    def is_allowed_origin(self, origin: str | None) -> bool:
        """Exact match against the allow-list; no pattern matching."""
        if not origin:
            return False
        return self._wildcard or normalize_origin(origin) in self._allowed

    def check(self, origin: str | None, method: str = "POST") -> AuthResult[None]:
        if self.mode is TransmissionMode.HEADER:
            return AuthResult.success(None)

        # Browsers may omit Origin on same-origin safe requests
        if not origin and method.upper() in SAFE_METHODS:
            return AuthResult.success(None)

        if self.is_allowed_origin(origin):
            return AuthResult.success(None)

        logger.warning("origin_denied", origin=origin, method=method.upper(), reason=OriginNotAllowedError.reason)
        return AuthResult.denied(OriginNotAllowedError())
