"""Shared pytest fixtures."""

from datetime import UTC, datetime, timedelta

import pytest

from sessionward.config import Config
from sessionward.core.modules.account.service import AccountService
from sessionward.core.modules.account.store import MemoryAccountStore
from sessionward.core.modules.credential.hasher import CredentialHasher
from sessionward.core.modules.credential.models import HasherParams
from sessionward.core.modules.identifier.models import SessionID, TokenID
from sessionward.core.modules.session.service import SessionManager
from sessionward.core.modules.session.store import MemorySessionStore
from sessionward.core.modules.signer.models import SigningKeys
from sessionward.core.modules.signer.service import Signer
from sessionward.core.modules.token.codec import TokenCodec
from sessionward.core.modules.token.service import AuthorizationTokenService

# Minimal Argon2 cost so tests stay fast
FAST_HASHER_PARAMS = HasherParams(time_cost=1, memory_cost=8, parallelism=1)


class FakeClock:
    """Manually advanced UTC clock."""

    def __init__(self, start: datetime) -> None:
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, delta: timedelta) -> None:
        self.current += delta


@pytest.fixture
def clock():
    return FakeClock(datetime(2025, 1, 1, 12, 0, 0, tzinfo=UTC))


@pytest.fixture
def signer():
    """Signer with a key unique to the test."""
    return Signer(SigningKeys(b"unit-test-signing-key-0123456789"))


@pytest.fixture
def session_codec(signer):
    return TokenCodec(signer, SessionID)


@pytest.fixture
def token_codec(signer):
    return TokenCodec(signer, TokenID)


@pytest.fixture(scope="session")
def hasher():
    return CredentialHasher(FAST_HASHER_PARAMS)


@pytest.fixture
def account_store():
    return MemoryAccountStore()


@pytest.fixture
def accounts(account_store, hasher):
    return AccountService(account_store, hasher, store_timeout=1.0)


@pytest.fixture
def session_store(clock):
    return MemorySessionStore(clock)


@pytest.fixture
def session_manager(session_store, session_codec, hasher, accounts, clock):
    return SessionManager(
        session_store,
        session_codec,
        hasher,
        accounts,
        session_duration=timedelta(hours=24),
        store_timeout=1.0,
        clock=clock,
    )


@pytest.fixture
def token_store(clock):
    return MemorySessionStore(clock)


@pytest.fixture
def authorization_tokens(token_store, token_codec, clock):
    return AuthorizationTokenService(
        token_store,
        token_codec,
        ttl=timedelta(minutes=15),
        store_timeout=1.0,
        clock=clock,
    )


def build_config(**overrides) -> Config:
    """Config isolated from the environment and .env files."""
    values = {
        "signing_key": "config-test-signing-key-abcdef",
        "hasher_time_cost": FAST_HASHER_PARAMS.time_cost,
        "hasher_memory_cost": FAST_HASHER_PARAMS.memory_cost,
        "hasher_parallelism": FAST_HASHER_PARAMS.parallelism,
        "allowed_origins": ["https://app.example"],
        "store_retry_backoff": 0,
    }
    values.update(overrides)
    return Config(_env_file=None, **values)


@pytest.fixture
def config_factory():
    return build_config


@pytest.fixture
def config():
    return build_config()
