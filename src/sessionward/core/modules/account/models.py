from datetime import datetime

from pydantic import BaseModel, Field

from sessionward.core.db import MongoModel
from sessionward.core.modules.identifier.models import AccountID
from sessionward.utils import now


class Account(MongoModel):
    """Account domain model with credentials.

    Indexed on email - unique.
    """

    id: AccountID = Field(alias="_id", serialization_alias="id", default_factory=AccountID.generate)
    email: str
    password_hash: str  # self-describing encoded hash (argon2id, or legacy bcrypt)
    email_verified: bool = False
    created_at: datetime = Field(default_factory=now)


class AccountView(BaseModel):
    """Account information (API representation)."""

    id: str = Field(..., description="Account ID (base64url)")
    email: str = Field(..., description="Email address")
    email_verified: bool = Field(..., description="Whether the email address was confirmed")

    @classmethod
    def from_domain(cls, account: Account) -> "AccountView":
        """Create view model from domain model."""
        return cls(id=account.id.to_wire(), email=account.email, email_verified=account.email_verified)
