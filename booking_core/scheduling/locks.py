"""
Per-key mutual exclusion for booking commits and review recomputes.

Each key gets its own ``asyncio.Lock``, created on first use and dropped
once nobody holds or waits for it. Unrelated keys never contend, so two
providers, or one provider on two dates, book in parallel.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Hashable, Optional

from booking_core.config import settings
from booking_core.errors import LockTimeoutError

logger = logging.getLogger(__name__)


def booking_lock_key(provider_id: str, date: str) -> tuple[str, str, str]:
    return ("booking", provider_id, date)


def review_lock_key(provider_id: str) -> tuple[str, str]:
    return ("review", provider_id)


class KeyedLockRegistry:
    """Hands out one lock per key with a bounded wait."""

    def __init__(self, timeout_sec: Optional[float] = None) -> None:
        self._timeout_sec = (
            timeout_sec if timeout_sec is not None else settings.scheduling.lock_timeout_sec
        )
        self._locks: dict[Hashable, asyncio.Lock] = {}
        self._users: dict[Hashable, int] = {}

    @asynccontextmanager
    async def hold(self, key: Hashable, timeout_sec: Optional[float] = None) -> AsyncIterator[None]:
        """
        Hold the lock for ``key`` for the duration of the block.

        Raises:
            LockTimeoutError: If the lock is not acquired within the timeout.
        """
        timeout = timeout_sec if timeout_sec is not None else self._timeout_sec
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._users[key] = self._users.get(key, 0) + 1
        try:
            try:
                async with asyncio.timeout(timeout):
                    await lock.acquire()
            except TimeoutError:
                logger.warning("Lock wait for %s exceeded %.2fs", key, timeout)
                raise LockTimeoutError(
                    f"Another request is still working on {key}; try again shortly.",
                    details={"timeout_sec": timeout},
                ) from None
            try:
                yield
            finally:
                lock.release()
        finally:
            self._users[key] -= 1
            if self._users[key] == 0:
                del self._users[key]
                del self._locks[key]

    def is_locked(self, key: Hashable) -> bool:
        lock = self._locks.get(key)
        return lock is not None and lock.locked()

    def active_keys(self) -> list[Hashable]:
        """Keys currently held or awaited."""
        return list(self._locks)
