"""Tests for the async retry helper."""

from __future__ import annotations

import pytest

from nichescout.retry import RetryExhaustedError, async_with_retry


class TestAsyncWithRetry:
    @pytest.mark.asyncio
    async def test_succeeds_first_try(self):
        async def ok() -> int:
            return 42

        assert await async_with_retry(ok, max_retries=3, base_delay=0.01) == 42

    @pytest.mark.asyncio
    async def test_succeeds_after_failures(self):
        attempts = {"count": 0}

        async def flaky() -> str:
            attempts["count"] += 1
            if attempts["count"] < 3:
                raise ValueError("not yet")
            return "ok"

        assert await async_with_retry(flaky, max_retries=3, base_delay=0.01) == "ok"
        assert attempts["count"] == 3

    @pytest.mark.asyncio
    async def test_exhausted_raises_with_attempts(self):
        async def always_fail() -> None:
            raise ValueError("fail")

        with pytest.raises(RetryExhaustedError, match="Failed after 4 attempts") as info:
            await async_with_retry(always_fail, max_retries=3, base_delay=0.01, jitter=False)
        assert info.value.attempts == 4
        assert isinstance(info.value.__cause__, ValueError)

    @pytest.mark.asyncio
    async def test_zero_retries_means_one_attempt(self):
        attempts = {"count": 0}

        async def fail() -> None:
            attempts["count"] += 1
            raise ValueError("fail")

        with pytest.raises(RetryExhaustedError):
            await async_with_retry(fail, max_retries=0, base_delay=0.01)
        assert attempts["count"] == 1

    @pytest.mark.asyncio
    async def test_non_retryable_raises_immediately(self):
        attempts = {"count": 0}

        async def fail_type_error() -> None:
            attempts["count"] += 1
            raise TypeError("bad type")

        with pytest.raises(TypeError):
            await async_with_retry(
                fail_type_error,
                max_retries=3,
                base_delay=0.01,
                retryable=(ValueError,),
            )
        assert attempts["count"] == 1
