from __future__ import annotations

from collections.abc import AsyncGenerator, Callable
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any, Protocol

import structlog
from pymongo import AsyncMongoClient

from sessionward.config import Config
from sessionward.core.db import create_mongo_client, get_database
from sessionward.core.modules.account.mongo_store import MongoAccountStore
from sessionward.core.modules.account.service import AccountService
from sessionward.core.modules.account.store import AccountStore, MemoryAccountStore
from sessionward.core.modules.credential.hasher import CredentialHasher
from sessionward.core.modules.credential.models import HasherParams
from sessionward.core.modules.identifier.models import SessionID, TokenID
from sessionward.core.modules.origin.guard import OriginPolicyGuard
from sessionward.core.modules.session.mongo_store import MongoSessionStore
from sessionward.core.modules.session.service import SessionManager
from sessionward.core.modules.session.store import MemorySessionStore, SessionStore
from sessionward.core.modules.signer.models import SigningKeys
from sessionward.core.modules.signer.service import Signer
from sessionward.core.modules.token.codec import TokenCodec
from sessionward.core.modules.token.service import AuthorizationTokenService
from sessionward.utils import now

logger = structlog.get_logger(__name__)


class Startable(Protocol):
    async def on_start(self) -> None: ...


class Core:
    """Container providing config, storage, and all component instances.

    Built once per process; every component is read-only after construction
    except the stores.
    """

    config: Config
    mongo_client: AsyncMongoClient[dict[str, Any]] | None
    signer: Signer
    hasher: CredentialHasher
    accounts: AccountService
    sessions: SessionManager
    tokens: AuthorizationTokenService
    origin_guard: OriginPolicyGuard

    def __init__(self, config: Config, *, clock: Callable[[], datetime] = now) -> None:
        """Initialize core from config; raises InvalidKeyError on a missing signing key."""
        self.config = config
        self.signer = Signer(
            SigningKeys.from_secrets(config.signing_key, config.previous_signing_keys),
            config.signing_algorithm,
        )
        self.hasher = CredentialHasher(
            HasherParams(
                time_cost=config.hasher_time_cost,
                memory_cost=config.hasher_memory_cost,
                parallelism=config.hasher_parallelism,
            )
        )
        self.origin_guard = OriginPolicyGuard(config.allowed_origins, config.transmission_mode)

        self._startables: list[Startable] = []
        account_store, session_store, token_store = self._create_stores(clock)

        self.accounts = AccountService(account_store, self.hasher, store_timeout=config.store_timeout)
        self.sessions = SessionManager(
            session_store,
            TokenCodec(self.signer, SessionID),
            self.hasher,
            self.accounts,
            session_duration=config.session_duration,
            sliding_expiration=config.sliding_expiration,
            store_timeout=config.store_timeout,
            clock=clock,
        )
        self.tokens = AuthorizationTokenService(
            token_store,
            TokenCodec(self.signer, TokenID),
            ttl=config.one_time_token_ttl,
            store_timeout=config.store_timeout,
            clock=clock,
        )

    def _create_stores(
        self, clock: Callable[[], datetime]
    ) -> tuple[AccountStore, SessionStore[SessionID], SessionStore[TokenID]]:
        if not self.config.database_url:
            self.mongo_client = None
            logger.info("storage_selected", backend="memory")
            return MemoryAccountStore(), MemorySessionStore(clock), MemorySessionStore(clock)

        self.mongo_client = create_mongo_client(self.config.database_url)
        database = get_database(self.mongo_client, self.config.database_url)
        account_store = MongoAccountStore(database.get_collection("accounts"))
        session_store = MongoSessionStore(database.get_collection("sessions"), SessionID, clock)
        token_store = MongoSessionStore(database.get_collection("authorization_tokens"), TokenID, clock)
        self._startables.extend([account_store, session_store, token_store])
        logger.info("storage_selected", backend="mongodb", database=database.name)
        return account_store, session_store, token_store

    @asynccontextmanager
    async def lifespan(self) -> AsyncGenerator[None]:
        """Manage application lifecycle - startup and shutdown."""
        await self.on_start()
        try:
            yield
        finally:
            await self.on_stop()

    async def on_start(self) -> None:
        """Create store indexes on application startup."""
        for component in self._startables:
            await component.on_start()

    async def on_stop(self) -> None:
        """Close MongoDB connection on shutdown."""
        if self.mongo_client is not None:
            await self.mongo_client.aclose()
