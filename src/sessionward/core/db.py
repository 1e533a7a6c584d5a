from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any, Self
from urllib.parse import urlparse

import structlog
from bson import Binary
from pydantic import BaseModel, ConfigDict
from pymongo import AsyncMongoClient
from pymongo.asynchronous.cursor import AsyncCursor
from pymongo.asynchronous.database import AsyncDatabase
from pymongo.errors import DuplicateKeyError, PyMongoError

from sessionward.core.modules.identifier.models import Identifier
from sessionward.errors import StoreUnavailableError

logger = structlog.get_logger(__name__)


class MongoModel(BaseModel):
    """Base for persisted models whose ``id`` is stored as ``_id``."""

    model_config = ConfigDict(
        populate_by_name=True,
        arbitrary_types_allowed=True,
        json_schema_serialization_defaults_required=True,
    )

    def to_mongo(self) -> dict[str, Any]:
        """Convert the model to a dictionary for MongoDB storage with _id field."""
        data = self.model_dump()
        if "id" in data:
            data["_id"] = data.pop("id")  # Rename id → _id for MongoDB
        return {key: to_bson(value) for key, value in data.items()}

    @classmethod
    def from_mongo(cls, document: dict[str, Any]) -> Self:
        return cls.model_validate(document)

    @classmethod
    async def list_cursor(cls, cursor: AsyncCursor[dict[str, Any]]) -> list[Self]:
        """Iterate over an AsyncCursor and return a list of model instances."""
        return [cls.from_mongo(item) async for item in cursor]


def to_bson(value: Any) -> Any:
    """Identifiers are stored as raw binary; everything else passes through."""
    if isinstance(value, Identifier):
        return Binary(value.raw)
    return value


@contextmanager
def store_errors() -> Iterator[None]:
    """Translate driver failures into StoreUnavailableError.

    Duplicate-key errors pass through so stores can map them to their own
    contract errors.
    """
    try:
        yield
    except DuplicateKeyError:
        raise
    except PyMongoError as exc:
        logger.warning("store_unavailable", error=type(exc).__name__)
        raise StoreUnavailableError(str(exc)) from exc


def create_mongo_client(database_url: str) -> AsyncMongoClient[dict[str, Any]]:
    # tz_aware keeps stored expiry timestamps comparable with UTC-aware now()
    return AsyncMongoClient(database_url, tz_aware=True)


def get_database(client: AsyncMongoClient[dict[str, Any]], database_url: str) -> AsyncDatabase[dict[str, Any]]:
    return client.get_database(urlparse(database_url).path[1:] or "sessionward")
