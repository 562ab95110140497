"""Tests for the per-key lock registry."""

import asyncio

import pytest

from booking_core.errors import LockTimeoutError
from booking_core.scheduling.locks import KeyedLockRegistry, booking_lock_key, review_lock_key


class TestLockKeys:
    def test_booking_keys_differ_by_date(self):
        assert booking_lock_key("P1", "2025-03-17") != booking_lock_key("P1", "2025-03-18")

    def test_review_and_booking_keys_do_not_collide(self):
        assert review_lock_key("P1") != booking_lock_key("P1", "2025-03-17")


class TestHold:
    @pytest.mark.asyncio
    async def test_same_key_serialises(self):
        locks = KeyedLockRegistry(timeout_sec=1.0)
        events: list[str] = []

        async def worker(name: str) -> None:
            async with locks.hold("k"):
                events.append(f"{name}-in")
                await asyncio.sleep(0.01)
                events.append(f"{name}-out")

        await asyncio.gather(worker("a"), worker("b"))
        assert events == ["a-in", "a-out", "b-in", "b-out"]

    @pytest.mark.asyncio
    async def test_different_keys_do_not_contend(self):
        locks = KeyedLockRegistry(timeout_sec=1.0)
        async with locks.hold("a"):
            await asyncio.wait_for(self._enter(locks, "b"), timeout=0.5)

    @staticmethod
    async def _enter(locks: KeyedLockRegistry, key: str) -> None:
        async with locks.hold(key):
            assert locks.is_locked(key)

    @pytest.mark.asyncio
    async def test_timeout_raises_retryable_error(self):
        locks = KeyedLockRegistry(timeout_sec=1.0)
        async with locks.hold("k"):
            with pytest.raises(LockTimeoutError) as exc_info:
                async with locks.hold("k", timeout_sec=0.02):
                    pass
        assert exc_info.value.retryable
        assert exc_info.value.status_code == 503

    @pytest.mark.asyncio
    async def test_keys_dropped_when_idle(self):
        locks = KeyedLockRegistry(timeout_sec=1.0)
        async with locks.hold("k"):
            assert locks.active_keys() == ["k"]
        assert locks.active_keys() == []
        assert not locks.is_locked("k")

    @pytest.mark.asyncio
    async def test_released_when_block_raises(self):
        locks = KeyedLockRegistry(timeout_sec=1.0)
        with pytest.raises(RuntimeError):
            async with locks.hold("k"):
                raise RuntimeError("boom")
        async with locks.hold("k", timeout_sec=0.05):
            pass
        assert locks.active_keys() == []
