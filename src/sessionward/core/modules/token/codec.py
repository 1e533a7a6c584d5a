"""Transportable token strings: base64url(signature || identifier bytes)."""

import hashlib
from typing import Generic, TypeVar

from sessionward.core.modules.identifier.models import IDENTIFIER_SIZE, Identifier
from sessionward.core.modules.signer.service import Signer
from sessionward.utils import b64url_decode, b64url_encode

IdT = TypeVar("IdT", bound=Identifier)

PURPOSE_SEPARATOR = b":"


class TokenCodec(Generic[IdT]):
    """Maps identifiers to signed URL-safe strings and back.

    The signature is a fixed-width prefix, so no delimiter is needed on the
    wire. An optional purpose is bound into the signed payload but not
    transmitted, so a token minted for one purpose never verifies for another.
    """

    def __init__(self, signer: Signer, id_type: type[IdT]) -> None:
        self._signer = signer
        self._id_type = id_type

    @property
    def id_type(self) -> type[IdT]:
        return self._id_type

    def encode(self, identifier: IdT, purpose: str | None = None) -> str:
        if len(identifier.raw) != IDENTIFIER_SIZE:
            raise ValueError(f"Tokens carry exactly {IDENTIFIER_SIZE}-byte identifiers")
        signature = self._signer.sign(self._payload(identifier.raw, purpose))
        return b64url_encode(signature + identifier.raw)

    def decode(self, token: str, purpose: str | None = None) -> IdT | None:
        """Return the embedded identifier, or None if the token is not authentic."""
        if not token:
            return None
        data = b64url_decode(token)
        if data is None:
            return None

        # Exactly one signature followed by one identifier
        size = self._signer.signature_size
        if len(data) != size + IDENTIFIER_SIZE:
            return None

        signature, raw = data[:size], data[size:]
        if not self._signer.verify(self._payload(raw, purpose), signature):
            return None
        return self._id_type(raw)

    @staticmethod
    def _payload(raw: bytes, purpose: str | None) -> bytes:
        if purpose is None:
            return raw
        return purpose.encode("utf-8") + PURPOSE_SEPARATOR + raw


def cookie_name_for_origin(base: str, origin: str) -> str:
    """Cookie name isolated per origin: base plus 64 bits of the origin's SHA-256."""
    digest = hashlib.sha256(origin.encode("utf-8")).hexdigest()[:16]
    return f"{base}_{digest}"
