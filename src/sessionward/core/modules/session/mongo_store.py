from collections.abc import Callable
from datetime import datetime
from typing import Any, Generic, TypeVar

import structlog
from pymongo.asynchronous.collection import AsyncCollection
from pymongo.errors import DuplicateKeyError

from sessionward.core.db import store_errors, to_bson
from sessionward.core.modules.identifier.models import AccountID, Identifier
from sessionward.core.modules.session.models import SessionRecord
from sessionward.errors import DuplicateIDError, SessionNotFoundError
from sessionward.utils import now

logger = structlog.get_logger(__name__)

IdT = TypeVar("IdT", bound=Identifier)


class MongoSessionStore(Generic[IdT]):
    """MongoDB-backed store.

    Primary key is the raw id, with a secondary index on subject_id. A TTL
    index sweeps expired documents eventually; reads filter on expiry
    regardless of when the sweep runs.
    """

    def __init__(
        self,
        collection: AsyncCollection[dict[str, Any]],
        id_type: type[IdT],
        clock: Callable[[], datetime] = now,
    ) -> None:
        self._collection = collection
        self._record_type = SessionRecord[id_type]  # type: ignore[valid-type]
        self._clock = clock

    async def on_start(self) -> None:
        """Create indexes on startup."""
        with store_errors():
            await self._collection.create_index([("subject_id", 1)])
            await self._collection.create_index([("expires_at", 1)], expireAfterSeconds=0)

    async def put(self, record: SessionRecord[IdT]) -> None:
        try:
            with store_errors():
                await self._collection.insert_one(record.to_mongo())
        except DuplicateKeyError as exc:
            raise DuplicateIDError(f"Record '{record.id}' already exists") from exc

    async def get(self, record_id: IdT) -> SessionRecord[IdT] | None:
        with store_errors():
            document = await self._collection.find_one({"_id": to_bson(record_id), "expires_at": {"$gt": self._clock()}})
        if document is None:
            return None
        return self._record_type.from_mongo(document)

    async def touch(self, record_id: IdT, new_expires_at: datetime) -> None:
        with store_errors():
            result = await self._collection.update_one(
                {"_id": to_bson(record_id), "expires_at": {"$gt": self._clock()}},
                {"$set": {"expires_at": new_expires_at}},
            )
        if result.matched_count == 0:
            raise SessionNotFoundError(f"Record '{record_id}' not found")

    async def delete(self, record_id: IdT) -> bool:
        with store_errors():
            result = await self._collection.delete_one({"_id": to_bson(record_id)})
        return result.deleted_count > 0

    async def delete_all_for_subject(self, subject_id: AccountID) -> int:
        subject = to_bson(subject_id)
        with store_errors():
            live = await self._collection.delete_many({"subject_id": subject, "expires_at": {"$gt": self._clock()}})
            # Expired leftovers the TTL sweep has not reached yet
            await self._collection.delete_many({"subject_id": subject})
        return live.deleted_count

    async def purge_expired(self) -> int:
        with store_errors():
            result = await self._collection.delete_many({"expires_at": {"$lte": self._clock()}})
        if result.deleted_count:
            logger.debug("mongo_store_purged", collection=self._collection.name, count=result.deleted_count)
        return result.deleted_count
