"""Session management models."""

from datetime import datetime
from typing import Any, Generic, Self, TypeVar

from pydantic import BaseModel, ConfigDict, Field, model_validator

from sessionward.core.db import MongoModel
from sessionward.core.modules.identifier.models import AccountID, Identifier, SessionID

IdT = TypeVar("IdT", bound=Identifier)


class SessionRecord(MongoModel, Generic[IdT]):
    """Server-side state behind a token.

    A record whose ``expires_at`` is not after the current time is logically
    absent, whether or not storage has removed it yet. The same shape backs
    authorization tokens, with ``TokenID`` as the id type.
    """

    id: IdT = Field(alias="_id", serialization_alias="id")
    subject_id: AccountID
    created_at: datetime
    expires_at: datetime
    attributes: dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def check_lifetime(self) -> Self:
        if self.expires_at < self.created_at:
            raise ValueError("expires_at must not precede created_at")
        return self

    def is_expired(self, at: datetime) -> bool:
        return self.expires_at <= at


class IssuedSession(BaseModel):
    """A freshly started session together with its transport token.

    The token is handed to the client once and never stored or logged.
    """

    token: str
    record: SessionRecord[SessionID]


class SessionView(BaseModel):
    """Authenticated session information (API representation)."""

    subject_id: str = Field(..., description="Account ID (base64url)")
    created_at: datetime = Field(..., description="Session start")
    expires_at: datetime = Field(..., description="Session expiry")

    @classmethod
    def from_domain(cls, record: SessionRecord[SessionID]) -> "SessionView":
        """Create view model from domain model."""
        return cls(subject_id=record.subject_id.to_wire(), created_at=record.created_at, expires_at=record.expires_at)
