from datetime import timedelta
from typing import Literal, Self

from pydantic import Field, SecretStr, model_validator
from pydantic_settings import BaseSettings


class Config(BaseSettings):
    """Application configuration loaded from environment variables."""

    # Signing
    signing_key: SecretStr  # HMAC key for session and authorization tokens
    previous_signing_keys: list[SecretStr] = []  # Still accepted for verification after rotation
    signing_algorithm: Literal["sha256", "sha512"] = "sha256"

    # Sessions
    session_duration: timedelta = timedelta(hours=24)
    sliding_expiration: bool = False
    one_time_token_ttl: timedelta = timedelta(minutes=15)

    # Transmission
    transmission_mode: Literal["cookie", "header"] = "cookie"
    allowed_origins: list[str] = []
    cookie_name: str = "__session"
    cookie_samesite: Literal["strict", "lax", "none"] = "strict"
    cookie_secure: bool = True
    cookie_per_origin: bool = False  # Separate cookie per request origin (hashed into the name)

    # Argon2id cost parameters
    hasher_time_cost: int = Field(default=3, ge=1)
    hasher_memory_cost: int = Field(default=65536, ge=8)  # KiB
    hasher_parallelism: int = Field(default=4, ge=1)

    # Storage
    database_url: str | None = None  # MongoDB URL; in-memory stores when unset
    store_timeout: float = Field(default=2.0, gt=0)  # Seconds per store call
    store_retry_attempts: int = Field(default=3, ge=1)
    store_retry_backoff: float = Field(default=0.05, ge=0)  # Seconds, doubled per attempt

    # Server
    host: str = "127.0.0.1"
    port: int = 8000
    debug: bool = False

    model_config = {
        "env_file": [".env"],
        "env_prefix": "SESSIONWARD_",
        "extra": "ignore",
        "frozen": True,
    }

    @model_validator(mode="after")
    def check_cookie_policy(self) -> Self:
        if self.cookie_samesite == "none" and not self.cookie_secure:
            raise ValueError("SameSite=None cookies must also be Secure")
        return self
