from typing import Any

from pymongo.asynchronous.collection import AsyncCollection
from pymongo.errors import DuplicateKeyError

from sessionward.core.db import store_errors, to_bson
from sessionward.core.modules.account.models import Account
from sessionward.core.modules.identifier.models import AccountID
from sessionward.errors import DuplicateIDError, NotFoundError


class MongoAccountStore:
    def __init__(self, collection: AsyncCollection[dict[str, Any]]) -> None:
        self._collection = collection

    async def on_start(self) -> None:
        """Create indexes on startup."""
        with store_errors():
            await self._collection.create_index([("email", 1)], unique=True)

    async def get(self, account_id: AccountID) -> Account | None:
        with store_errors():
            document = await self._collection.find_one({"_id": to_bson(account_id)})
        return None if document is None else Account.from_mongo(document)

    async def get_by_email(self, email: str) -> Account | None:
        with store_errors():
            document = await self._collection.find_one({"email": email})
        return None if document is None else Account.from_mongo(document)

    async def insert(self, account: Account) -> None:
        try:
            with store_errors():
                await self._collection.insert_one(account.to_mongo())
        except DuplicateKeyError as exc:
            raise DuplicateIDError(f"Account '{account.email}' already exists") from exc

    async def update_password_hash(self, account_id: AccountID, password_hash: str) -> None:
        await self._update(account_id, {"password_hash": password_hash})

    async def mark_email_verified(self, account_id: AccountID) -> None:
        await self._update(account_id, {"email_verified": True})

    async def _update(self, account_id: AccountID, fields: dict[str, Any]) -> None:
        with store_errors():
            result = await self._collection.update_one({"_id": to_bson(account_id)}, {"$set": fields})
        if result.matched_count == 0:
            raise NotFoundError(f"Account '{account_id}' not found")
