import asyncio
from collections.abc import AsyncGenerator, Awaitable, Callable
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Protocol, TypeVar

import structlog

from sessionward.config import Config
from sessionward.core.core import Core
from sessionward.core.modules.account.models import AccountView
from sessionward.core.modules.credential.validators import validate_password
from sessionward.core.modules.identifier.models import AccountID, SessionID
from sessionward.core.modules.session.models import IssuedSession, SessionRecord, SessionView
from sessionward.core.modules.token.models import TokenPurpose
from sessionward.errors import AuthenticationError, InvalidCredentialsError, StoreUnavailableError
from sessionward.utils import now

logger = structlog.get_logger(__name__)

T = TypeVar("T")


class TokenDelivery(Protocol):
    """Out-of-band channel (usually email) that hands authorization tokens to their owner."""

    async def deliver(self, email: str, purpose: TokenPurpose, token: str) -> None: ...


class NullTokenDelivery:
    async def deliver(self, email: str, purpose: TokenPurpose, token: str) -> None:
        logger.warning("token_delivery_not_configured", purpose=str(purpose))


class App:
    """Facade for all authentication operations.

    Unwraps denials into raised UserErrors for the HTTP layer and retries
    transient store failures with bounded backoff before surfacing them.
    """

    def __init__(
        self,
        config: Config,
        *,
        delivery: TokenDelivery | None = None,
        clock: Callable[[], datetime] = now,
    ) -> None:
        self._core = Core(config, clock=clock)
        self._delivery = delivery or NullTokenDelivery()

    @property
    def config(self) -> Config:
        return self._core.config

    @property
    def core(self) -> Core:
        return self._core

    @asynccontextmanager
    async def lifespan(self) -> AsyncGenerator[None]:
        """Application lifespan management - delegates to Core."""
        async with self._core.lifespan():
            yield

    async def login(self, email: str, password: str) -> IssuedSession:
        """Authenticate credentials and start a session."""
        subject_id = (await self._retrying(lambda: self._core.sessions.authenticate(email, password))).unwrap()
        return await self._retrying(lambda: self._core.sessions.start_session(subject_id))

    async def authenticate_request(
        self,
        token: str | None,
        *,
        origin: str | None = None,
        method: str = "GET",
        via_cookie: bool = False,
    ) -> SessionRecord[SessionID]:
        """Resolve the session behind a request, checking origin for cookie-borne tokens."""
        if via_cookie:
            self._core.origin_guard.check(origin, method).unwrap()
        if not token:
            raise AuthenticationError("Not authenticated")
        return (await self._retrying(lambda: self._core.sessions.verify_session(token))).unwrap()

    async def logout(self, token: str) -> None:
        await self._retrying(lambda: self._core.sessions.end_session(token))

    async def logout_all(self, session: SessionRecord[SessionID]) -> int:
        return await self._retrying(lambda: self._core.sessions.end_all_sessions(session.subject_id))

    def get_session_view(self, session: SessionRecord[SessionID]) -> SessionView:
        return SessionView.from_domain(session)

    async def get_account(self, session: SessionRecord[SessionID]) -> AccountView:
        account = await self._retrying(lambda: self._core.accounts.get_account(session.subject_id))
        return AccountView.from_domain(account)

    async def create_account(self, email: str, password: str) -> AccountView:
        account = await self._retrying(lambda: self._core.accounts.create_account(email, password))
        return AccountView.from_domain(account)

    async def change_password(
        self, session: SessionRecord[SessionID], old_password: str, new_password: str
    ) -> IssuedSession:
        """Replace the password, end every session, and start a fresh one for the caller."""
        account = await self._retrying(lambda: self._core.accounts.get_account(session.subject_id))
        if not await self._core.hasher.averify(account.password_hash, old_password):
            raise InvalidCredentialsError("Invalid credentials")
        validate_password(new_password)
        await self._replace_password(account.id, new_password)
        return await self._retrying(lambda: self._core.sessions.start_session(account.id))

    async def request_password_reset(self, email: str) -> None:
        """Issue and deliver a reset token. Unknown emails are silently ignored."""
        account = await self._retrying(lambda: self._core.accounts.find_by_email(email))
        if account is None:
            logger.info("password_reset_unknown_account")
            return
        token = await self._retrying(lambda: self._core.tokens.issue(account.id, TokenPurpose.PASSWORD_RESET))
        await self._delivery.deliver(account.email, TokenPurpose.PASSWORD_RESET, token)

    async def confirm_password_reset(self, token: str, new_password: str) -> None:
        """Redeem a reset token, revoke every session, and set the new password."""
        validate_password(new_password)
        result = await self._retrying(lambda: self._core.tokens.redeem(token, TokenPurpose.PASSWORD_RESET))
        await self._replace_password(result.unwrap(), new_password)

    async def request_email_verification(self, session: SessionRecord[SessionID]) -> None:
        account = await self._retrying(lambda: self._core.accounts.get_account(session.subject_id))
        token = await self._retrying(lambda: self._core.tokens.issue(account.id, TokenPurpose.EMAIL_VERIFY))
        await self._delivery.deliver(account.email, TokenPurpose.EMAIL_VERIFY, token)

    async def confirm_email_verification(self, token: str) -> None:
        result = await self._retrying(lambda: self._core.tokens.redeem(token, TokenPurpose.EMAIL_VERIFY))
        subject_id = result.unwrap()
        await self._retrying(lambda: self._core.accounts.mark_email_verified(subject_id))

    async def _replace_password(self, subject_id: AccountID, new_password: str) -> None:
        """Swap the password between two revocation passes.

        Existing sessions end before the write, so no failure leaves them alive
        beside the new password. The second pass ends sessions opened with the
        old password while the write was in flight.
        """
        await self._revoke_everything(subject_id)
        await self._retrying(lambda: self._core.accounts.set_password(subject_id, new_password))
        await self._revoke_everything(subject_id)

    async def _revoke_everything(self, subject_id: AccountID) -> None:
        await self._retrying(lambda: self._core.sessions.end_all_sessions(subject_id))
        await self._retrying(lambda: self._core.tokens.revoke_all(subject_id))

    async def _retrying(self, operation: Callable[[], Awaitable[T]]) -> T:
        """Run ``operation``, retrying StoreUnavailableError with exponential backoff."""
        attempts = self.config.store_retry_attempts
        for attempt in range(1, attempts + 1):
            try:
                return await operation()
            except StoreUnavailableError:
                if attempt == attempts:
                    logger.error("store_retries_exhausted", attempts=attempts)
                    raise
                delay = self.config.store_retry_backoff * 2 ** (attempt - 1)
                logger.warning("store_retry", attempt=attempt, delay=delay)
                await asyncio.sleep(delay)
        raise AssertionError("unreachable")
