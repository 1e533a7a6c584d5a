"""Tests for the origin policy guard."""

import pytest

from sessionward.core.modules.origin.guard import OriginPolicyGuard, TransmissionMode
from sessionward.errors import ConfigurationError, DenialReason, OriginNotAllowedError


@pytest.fixture
def guard():
    return OriginPolicyGuard(["https://app.example", "https://admin.example/"], TransmissionMode.COOKIE)


class TestCookieMode:
    """Tests for origin checks on cookie-borne requests."""

    def test_allowed_origin(self, guard):
        """Test that a listed origin is accepted."""
        assert guard.check("https://app.example", "POST").ok

    def test_trailing_slash_normalized(self, guard):
        """Test that a trailing slash on either side does not matter."""
        assert guard.check("https://admin.example", "POST").ok
        assert guard.check("https://app.example/", "POST").ok

    @pytest.mark.parametrize(
        "origin",
        [
            "https://evil.example",
            "http://app.example",
            "https://app.example:8443",
            "https://sub.app.example",
            "https://app.example.evil",
            "null",
        ],
    )
    def test_foreign_origin_denied(self, guard, origin):
        """Test that near-miss origins are denied."""
        result = guard.check(origin, "POST")
        assert isinstance(result.error, OriginNotAllowedError)
        assert result.reason == DenialReason.ORIGIN_NOT_ALLOWED

    def test_foreign_origin_denied_on_safe_method(self, guard):
        """Test that a foreign origin is denied even on GET."""
        assert not guard.check("https://evil.example", "GET").ok

    def test_missing_origin_on_unsafe_method_denied(self, guard):
        """Test that unsafe methods require an Origin header."""
        assert not guard.check(None, "POST").ok
        assert not guard.check("", "DELETE").ok

    @pytest.mark.parametrize("method", ["GET", "HEAD", "OPTIONS", "get"])
    def test_missing_origin_on_safe_method_allowed(self, guard, method):
        """Test that safe methods may omit the Origin header."""
        assert guard.check(None, method).ok

    def test_wildcard_rejected(self):
        """Test that a wildcard allow-list is refused in cookie mode."""
        with pytest.raises(ConfigurationError):
            OriginPolicyGuard(["*"], "cookie")

    def test_empty_allow_list_denies_everything(self):
        """Test that an empty allow-list denies every origin."""
        guard = OriginPolicyGuard([], TransmissionMode.COOKIE)
        assert not guard.check("https://app.example", "POST").ok


class TestHeaderMode:
    """Tests for requests carrying the token in a header."""

    def test_any_origin_accepted(self):
        """Test that header mode skips the origin check."""
        guard = OriginPolicyGuard([], TransmissionMode.HEADER)
        assert guard.check("https://evil.example", "POST").ok
        assert guard.check(None, "POST").ok

    def test_wildcard_allowed(self):
        """Test that a wildcard is allowed in header mode."""
        guard = OriginPolicyGuard(["*"], "header")
        assert guard.is_allowed_origin("https://anything.example")


class TestIsAllowedOrigin:
    """Tests for allow-list matching."""

    def test_exact_match_only(self, guard):
        """Test that only exact origins match."""
        assert guard.is_allowed_origin("https://app.example")
        assert not guard.is_allowed_origin("https://APP.example.evil")
        assert not guard.is_allowed_origin(None)

    def test_allowed_origins_normalized(self, guard):
        """Test that configured origins are stored without trailing slashes."""
        assert guard.allowed_origins == frozenset({"https://app.example", "https://admin.example"})
