from collections.abc import Callable, Mapping
from datetime import datetime, timedelta
from typing import Any

import structlog

from sessionward.core.io import bounded
from sessionward.core.modules.account.service import AccountService
from sessionward.core.modules.credential.hasher import CredentialHasher
from sessionward.core.modules.identifier.models import AccountID, SessionID
from sessionward.core.modules.session.models import IssuedSession, SessionRecord
from sessionward.core.modules.session.store import SessionStore
from sessionward.core.modules.token.codec import TokenCodec
from sessionward.core.results import AuthResult
from sessionward.errors import (
    DuplicateIDError,
    InvalidCredentialsError,
    InvalidTokenError,
    SessionExpiredError,
    SessionNotFoundError,
    StoreUnavailableError,
)
from sessionward.utils import now

logger = structlog.get_logger(__name__)

MAX_ID_COLLISIONS = 3


class SessionManager:
    """Sign-in, session issuance, verification, renewal, and revocation.

    Holds no mutable state of its own; all durable state lives in the store.
    Expired and revoked sessions are reported identically so a stale token
    reveals nothing about why it stopped working.
    """

    def __init__(
        self,
        store: SessionStore[SessionID],
        codec: TokenCodec[SessionID],
        hasher: CredentialHasher,
        accounts: AccountService,
        *,
        session_duration: timedelta,
        sliding_expiration: bool = False,
        store_timeout: float,
        clock: Callable[[], datetime] = now,
    ) -> None:
        self._store = store
        self._codec = codec
        self._hasher = hasher
        self._accounts = accounts
        self._duration = session_duration
        self._sliding = sliding_expiration
        self._timeout = store_timeout
        self._clock = clock

    @property
    def session_duration(self) -> timedelta:
        return self._duration

    async def authenticate(self, email: str, password: str) -> AuthResult[AccountID]:
        """Check credentials, doing one hash verification whether or not the account exists."""
        credential = await self._accounts.lookup_credential(email)
        if credential is None:
            await self._hasher.adummy_verify(password)
            logger.info("authenticate_denied", reason=InvalidCredentialsError.reason)
            return AuthResult.denied(InvalidCredentialsError("Invalid credentials"))

        subject_id, encoded_hash = credential
        if not await self._hasher.averify(encoded_hash, password):
            logger.info("authenticate_denied", reason=InvalidCredentialsError.reason)
            return AuthResult.denied(InvalidCredentialsError("Invalid credentials"))

        if self._hasher.needs_rehash(encoded_hash):
            await self._upgrade_hash(subject_id, password)
        return AuthResult.success(subject_id)

    async def start_session(
        self,
        subject_id: AccountID,
        duration: timedelta | None = None,
        attributes: Mapping[str, Any] | None = None,
    ) -> IssuedSession:
        """Create a session record and return it with its token.

        A zero duration produces a session that is already expired.
        """
        duration = self._duration if duration is None else duration
        if duration < timedelta(0):
            raise ValueError("Session duration must not be negative")

        created_at = self._clock()
        for attempt in range(1, MAX_ID_COLLISIONS + 1):
            record = SessionRecord[SessionID](
                id=SessionID.generate(),
                subject_id=subject_id,
                created_at=created_at,
                expires_at=created_at + duration,
                attributes=dict(attributes or {}),
            )
            try:
                await bounded(self._store.put(record), self._timeout, "session_put")
                break
            except DuplicateIDError:
                logger.error("session_id_collision", attempt=attempt)
        else:
            raise DuplicateIDError("Could not allocate a unique session id")

        logger.info("session_started", subject_id=subject_id.to_wire(), expires_at=record.expires_at.isoformat())
        return IssuedSession(token=self._codec.encode(record.id), record=record)

    async def verify_session(self, token: str) -> AuthResult[SessionRecord[SessionID]]:
        session_id = self._codec.decode(token)
        if session_id is None:
            logger.warning("session_verify_denied", reason=InvalidTokenError.reason)
            return AuthResult.denied(InvalidTokenError("Invalid session token"))

        record = await bounded(self._store.get(session_id), self._timeout, "session_get")
        if record is None:
            logger.info("session_verify_denied", reason=SessionExpiredError.reason)
            return AuthResult.denied(SessionExpiredError("Session expired"))

        if self._sliding:
            renewed = max(record.expires_at, self._clock() + self._duration)
            try:
                await bounded(self._store.touch(session_id, renewed), self._timeout, "session_touch")
            except SessionNotFoundError:
                # Revoked or expired between the read and the renewal
                logger.info("session_verify_denied", reason=SessionExpiredError.reason)
                return AuthResult.denied(SessionExpiredError("Session expired"))
            record = record.model_copy(update={"expires_at": renewed})

        return AuthResult.success(record)

    async def end_session(self, token: str) -> None:
        """Delete the session behind a token. Unreadable or unknown tokens are already ended."""
        session_id = self._codec.decode(token)
        if session_id is None:
            return
        if await bounded(self._store.delete(session_id), self._timeout, "session_delete"):
            logger.info("session_ended")

    async def end_all_sessions(self, subject_id: AccountID) -> int:
        count = await bounded(self._store.delete_all_for_subject(subject_id), self._timeout, "session_delete_all")
        logger.info("sessions_revoked", subject_id=subject_id.to_wire(), count=count)
        return count

    async def purge_expired(self) -> int:
        return await bounded(self._store.purge_expired(), self._timeout, "session_purge")

    async def _upgrade_hash(self, subject_id: AccountID, password: str) -> None:
        """Re-hash with current parameters after a successful sign-in. Best effort."""
        try:
            await self._accounts.store_password_hash(subject_id, await self._hasher.ahash(password))
        except StoreUnavailableError:
            logger.warning("credential_rehash_deferred", subject_id=subject_id.to_wire())
            return
        logger.info("credential_rehashed", subject_id=subject_id.to_wire())
