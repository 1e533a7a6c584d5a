"""Opaque random identifiers, one value type per use."""

import secrets
from dataclasses import dataclass
from typing import Any, Self

from pydantic import GetCoreSchemaHandler
from pydantic_core import core_schema

from sessionward.utils import b64url_decode, b64url_encode

IDENTIFIER_SIZE = 16  # bytes, 128 bits


@dataclass(frozen=True, slots=True)
class Identifier:
    """Fixed-length random byte sequence.

    Equality is type-strict: a ``SessionID`` never equals an ``AccountID``
    carrying the same bytes.
    """

    raw: bytes

    def __post_init__(self) -> None:
        if not isinstance(self.raw, bytes):
            raise TypeError("Identifier bytes required")
        if len(self.raw) < IDENTIFIER_SIZE:
            raise ValueError(f"Identifier must be at least {IDENTIFIER_SIZE} bytes")

    @classmethod
    def generate(cls) -> Self:
        return cls(secrets.token_bytes(IDENTIFIER_SIZE))

    def to_wire(self) -> str:
        return b64url_encode(self.raw)

    @classmethod
    def from_wire(cls, value: str) -> Self:
        raw = b64url_decode(value)
        if raw is None:
            raise ValueError("Invalid identifier encoding")
        return cls(raw)

    def __str__(self) -> str:
        return self.to_wire()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.to_wire()!r})"

    @classmethod
    def __get_pydantic_core_schema__(cls, _source: Any, _handler: GetCoreSchemaHandler) -> core_schema.CoreSchema:
        return core_schema.no_info_plain_validator_function(
            cls._validate,
            serialization=core_schema.plain_serializer_function_ser_schema(
                lambda value: value.to_wire(), when_used="json"
            ),
        )

    @classmethod
    def _validate(cls, value: Any) -> Self:
        if isinstance(value, cls):
            return value
        if isinstance(value, Identifier):
            raise ValueError(f"Expected {cls.__name__}, got {type(value).__name__}")
        if isinstance(value, bytes):
            return cls(bytes(value))  # bson Binary is a bytes subclass
        if isinstance(value, str):
            return cls.from_wire(value)
        raise ValueError(f"Cannot build {cls.__name__} from {type(value).__name__}")


class SessionID(Identifier):
    """Identifies a session record."""

    __slots__ = ()


class AccountID(Identifier):
    """Identifies an account, the subject of sessions and authorization tokens."""

    __slots__ = ()


class TokenID(Identifier):
    """Identifies an authorization token record."""

    __slots__ = ()
