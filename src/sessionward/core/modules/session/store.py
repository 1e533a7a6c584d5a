"""Session Store interface and the in-memory reference implementation."""

from collections.abc import Callable
from datetime import datetime
from typing import Generic, Protocol, TypeVar

import structlog

from sessionward.core.modules.identifier.models import AccountID, Identifier
from sessionward.core.modules.session.models import SessionRecord
from sessionward.errors import DuplicateIDError, SessionNotFoundError
from sessionward.utils import now

logger = structlog.get_logger(__name__)

IdT = TypeVar("IdT", bound=Identifier)


class SessionStore(Protocol[IdT]):
    """Durable mapping from record id to record, with read-time expiry.

    Every method may block on I/O; callers bound each call with a timeout.
    """

    async def put(self, record: SessionRecord[IdT]) -> None:
        """Insert a new record. Raises DuplicateIDError if the id exists."""
        ...

    async def get(self, record_id: IdT) -> SessionRecord[IdT] | None:
        """Return the record, or None when absent or expired."""
        ...

    async def touch(self, record_id: IdT, new_expires_at: datetime) -> None:
        """Move the expiry. Raises SessionNotFoundError when absent or expired."""
        ...

    async def delete(self, record_id: IdT) -> bool:
        """Remove the record, reporting whether it existed. Deleting an absent id is not an error."""
        ...

    async def delete_all_for_subject(self, subject_id: AccountID) -> int:
        """Remove every record of a subject, returning how many were still live."""
        ...

    async def purge_expired(self) -> int:
        """Physically remove expired records, returning how many were removed."""
        ...


class MemorySessionStore(Generic[IdT]):
    """Dict-backed store with a subject index. Expired rows are removed lazily."""

    def __init__(self, clock: Callable[[], datetime] = now) -> None:
        self._clock = clock
        self._records: dict[IdT, SessionRecord[IdT]] = {}
        self._by_subject: dict[AccountID, set[IdT]] = {}

    def __len__(self) -> int:
        return len(self._records)

    async def put(self, record: SessionRecord[IdT]) -> None:
        if record.id in self._records:
            raise DuplicateIDError(f"Record '{record.id}' already exists")
        self._records[record.id] = record
        self._by_subject.setdefault(record.subject_id, set()).add(record.id)

    async def get(self, record_id: IdT) -> SessionRecord[IdT] | None:
        record = self._records.get(record_id)
        if record is None:
            return None
        if record.is_expired(self._clock()):
            self._remove(record)
            return None
        return record

    async def touch(self, record_id: IdT, new_expires_at: datetime) -> None:
        record = await self.get(record_id)
        if record is None:
            raise SessionNotFoundError(f"Record '{record_id}' not found")
        self._records[record_id] = record.model_copy(update={"expires_at": new_expires_at})

    async def delete(self, record_id: IdT) -> bool:
        record = self._records.get(record_id)
        if record is None:
            return False
        self._remove(record)
        return True

    async def delete_all_for_subject(self, subject_id: AccountID) -> int:
        current = self._clock()
        live = 0
        for record_id in self._by_subject.pop(subject_id, set()):
            record = self._records.pop(record_id, None)
            if record is not None and not record.is_expired(current):
                live += 1
        return live

    async def purge_expired(self) -> int:
        current = self._clock()
        expired = [record for record in self._records.values() if record.is_expired(current)]
        for record in expired:
            self._remove(record)
        if expired:
            logger.debug("memory_store_purged", count=len(expired))
        return len(expired)

    def _remove(self, record: SessionRecord[IdT]) -> None:
        self._records.pop(record.id, None)
        ids = self._by_subject.get(record.subject_id)
        if ids is not None:
            ids.discard(record.id)
            if not ids:
                del self._by_subject[record.subject_id]
