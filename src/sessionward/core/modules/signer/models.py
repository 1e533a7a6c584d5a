import hashlib
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from enum import StrEnum
from typing import Any, Self

from pydantic import SecretStr

from sessionward.errors import ConfigurationError, InvalidKeyError


class SignatureAlgorithm(StrEnum):
    """HMAC hash functions accepted for signing (NIST approved, >= 256-bit output)."""

    SHA256 = "sha256"
    SHA512 = "sha512"

    @property
    def digestmod(self) -> Callable[..., Any]:
        return hashlib.sha256 if self is SignatureAlgorithm.SHA256 else hashlib.sha512

    @property
    def digest_size(self) -> int:
        return self.digestmod().digest_size


@dataclass(frozen=True, slots=True)
class SigningKeys:
    """Immutable key ring: one key for signing, older keys accepted for verification."""

    current: bytes
    previous: tuple[bytes, ...] = ()

    def __post_init__(self) -> None:
        if not self.current:
            raise InvalidKeyError("Signing key is missing or empty")
        if any(not key for key in self.previous):
            raise InvalidKeyError("Previous signing keys must not be empty")
        if self.current in self.previous:
            raise ConfigurationError("Current signing key is also listed as a previous key")

    @property
    def candidates(self) -> tuple[bytes, ...]:
        return (self.current, *self.previous)

    @classmethod
    def from_secrets(cls, current: SecretStr | str | None, previous: Sequence[SecretStr | str] = ()) -> Self:
        """Build a key ring from configuration values."""
        return cls(_key_bytes(current), tuple(_key_bytes(key) for key in previous))


def _key_bytes(value: SecretStr | str | None) -> bytes:
    if value is None:
        return b""
    if isinstance(value, SecretStr):
        value = value.get_secret_value()
    return value.encode("utf-8")
