import base64
import binascii
import re
from datetime import UTC, datetime

BASE64URL_RE = re.compile(r"^[A-Za-z0-9_-]*$")


def now() -> datetime:
    return datetime.now(UTC)


def b64url_encode(data: bytes) -> str:
    """Encode bytes as unpadded base64url."""
    return base64.urlsafe_b64encode(data).decode("ascii").rstrip("=")


def b64url_decode(value: str) -> bytes | None:
    """Decode unpadded base64url, returning None for anything malformed."""
    if not BASE64URL_RE.fullmatch(value) or len(value) % 4 == 1:
        return None
    padding = "=" * (-len(value) % 4)
    try:
        return base64.urlsafe_b64decode(value + padding)
    except (binascii.Error, ValueError):
        return None
