import asyncio
from collections.abc import Awaitable
from typing import TypeVar

import structlog

from sessionward.errors import StoreUnavailableError

logger = structlog.get_logger(__name__)

T = TypeVar("T")


async def bounded(awaitable: Awaitable[T], timeout: float, operation: str) -> T:
    """Await a storage call, turning a timeout into StoreUnavailableError.

    A timeout is a transient failure for the caller's retry policy, never a
    denial.
    """
    try:
        async with asyncio.timeout(timeout):
            return await awaitable
    except TimeoutError as exc:
        logger.warning("store_call_timed_out", operation=operation, timeout=timeout)
        raise StoreUnavailableError(f"{operation} timed out after {timeout}s") from exc
