from collections.abc import Callable
from datetime import datetime, timedelta

import structlog

from sessionward.core.io import bounded
from sessionward.core.modules.identifier.models import AccountID, TokenID
from sessionward.core.modules.session.models import SessionRecord
from sessionward.core.modules.session.store import SessionStore
from sessionward.core.modules.token.codec import TokenCodec
from sessionward.core.results import AuthResult
from sessionward.errors import InvalidTokenError, SessionExpiredError
from sessionward.utils import now

logger = structlog.get_logger(__name__)


class AuthorizationTokenService:
    """Purpose-scoped, optionally one-time tokens backed by a session-shaped store.

    The purpose is part of the signed payload, so a token minted for one
    purpose fails signature verification when presented for another.
    """

    def __init__(
        self,
        store: SessionStore[TokenID],
        codec: TokenCodec[TokenID],
        *,
        ttl: timedelta,
        store_timeout: float,
        clock: Callable[[], datetime] = now,
    ) -> None:
        self._store = store
        self._codec = codec
        self._ttl = ttl
        self._timeout = store_timeout
        self._clock = clock

    async def issue(
        self,
        subject_id: AccountID,
        purpose: str,
        *,
        one_time: bool = True,
        ttl: timedelta | None = None,
    ) -> str:
        ttl = self._ttl if ttl is None else ttl
        if ttl < timedelta(0):
            raise ValueError("Token lifetime must not be negative")
        if not purpose:
            raise ValueError("Token purpose is required")

        created_at = self._clock()
        record = SessionRecord[TokenID](
            id=TokenID.generate(),
            subject_id=subject_id,
            created_at=created_at,
            expires_at=created_at + ttl,
            attributes={"purpose": str(purpose), "one_time": one_time},
        )
        await bounded(self._store.put(record), self._timeout, "token_put")
        logger.info("authorization_token_issued", purpose=str(purpose), subject_id=subject_id.to_wire())
        return self._codec.encode(record.id, purpose=str(purpose))

    async def redeem(self, token: str, purpose: str) -> AuthResult[AccountID]:
        """Verify a token for ``purpose``; one-time tokens are consumed before access is granted.

        Store failures while consuming propagate as StoreUnavailableError, so
        access is never granted without the deletion having happened.
        """
        token_id = self._codec.decode(token, purpose=str(purpose))
        if token_id is None:
            logger.warning("authorization_token_denied", purpose=str(purpose), reason=InvalidTokenError.reason)
            return AuthResult.denied(InvalidTokenError("Invalid token"))

        record = await bounded(self._store.get(token_id), self._timeout, "token_get")
        if record is None:
            logger.info("authorization_token_denied", purpose=str(purpose), reason=SessionExpiredError.reason)
            return AuthResult.denied(SessionExpiredError("Token expired or already used"))

        if record.attributes.get("purpose") != str(purpose):
            logger.warning("authorization_token_denied", purpose=str(purpose), reason=InvalidTokenError.reason)
            return AuthResult.denied(InvalidTokenError("Invalid token"))

        # Only the caller whose delete removed the record may proceed
        if record.attributes.get("one_time", True) and not await bounded(
            self._store.delete(token_id), self._timeout, "token_delete"
        ):
            logger.info("authorization_token_denied", purpose=str(purpose), reason=SessionExpiredError.reason)
            return AuthResult.denied(SessionExpiredError("Token expired or already used"))

        logger.info("authorization_token_redeemed", purpose=str(purpose), subject_id=record.subject_id.to_wire())
        return AuthResult.success(record.subject_id)

    async def revoke_all(self, subject_id: AccountID) -> int:
        return await bounded(self._store.delete_all_for_subject(subject_id), self._timeout, "token_delete_all")
