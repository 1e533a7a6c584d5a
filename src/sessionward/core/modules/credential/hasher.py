import asyncio
import secrets

import bcrypt
import structlog
from argon2 import PasswordHasher, Type
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError

from sessionward.core.modules.credential.models import ARGON2ID_PREFIX, LEGACY_BCRYPT_PREFIXES, HasherParams

logger = structlog.get_logger(__name__)

BCRYPT_MAX_PASSWORD_BYTES = 72


class CredentialHasher:
    """Argon2id password hashing with read-only support for legacy bcrypt hashes."""

    def __init__(self, params: HasherParams | None = None) -> None:
        self.params = params or HasherParams()
        self._hasher = PasswordHasher(
            time_cost=self.params.time_cost,
            memory_cost=self.params.memory_cost,
            parallelism=self.params.parallelism,
            hash_len=self.params.hash_len,
            salt_len=self.params.salt_len,
            type=Type.ID,
        )
        # Verified against when an account lookup misses, so both paths cost one hash
        self._dummy_hash = self._hasher.hash(secrets.token_urlsafe(32))

    def hash(self, plaintext: str) -> str:
        """Hash with a fresh salt; the result encodes algorithm, parameters, salt, and digest."""
        return self._hasher.hash(plaintext)

    def verify(self, encoded_hash: str, plaintext: str) -> bool:
        """Fail closed: any mismatch or unreadable hash yields False."""
        if encoded_hash.startswith(LEGACY_BCRYPT_PREFIXES):
            return self._verify_bcrypt(encoded_hash, plaintext)
        if not encoded_hash.startswith(ARGON2ID_PREFIX):
            logger.error("credential_hash_unsupported_algorithm")
            return False
        try:
            return self._hasher.verify(encoded_hash, plaintext)
        except VerifyMismatchError:
            return False
        except InvalidHashError:
            logger.error("credential_hash_malformed")
            return False
        except VerificationError:
            return False

    def dummy_verify(self, plaintext: str) -> bool:
        """Spend the same work as a real verification. Always False."""
        self.verify(self._dummy_hash, plaintext)
        return False

    def needs_rehash(self, encoded_hash: str) -> bool:
        """True for legacy bcrypt hashes and Argon2 hashes with outdated parameters."""
        if not encoded_hash.startswith(ARGON2ID_PREFIX):
            return True
        try:
            return self._hasher.check_needs_rehash(encoded_hash)
        except InvalidHashError:
            return True

    async def ahash(self, plaintext: str) -> str:
        return await asyncio.to_thread(self.hash, plaintext)

    async def averify(self, encoded_hash: str, plaintext: str) -> bool:
        return await asyncio.to_thread(self.verify, encoded_hash, plaintext)

    async def adummy_verify(self, plaintext: str) -> bool:
        return await asyncio.to_thread(self.dummy_verify, plaintext)

    @staticmethod
    def _verify_bcrypt(encoded_hash: str, plaintext: str) -> bool:
        password = plaintext.encode("utf-8")
        if len(password) > BCRYPT_MAX_PASSWORD_BYTES:
            return False
        try:
            return bcrypt.checkpw(password, encoded_hash.encode("utf-8"))
        except ValueError:
            logger.error("credential_hash_malformed", algorithm="bcrypt")
            return False
