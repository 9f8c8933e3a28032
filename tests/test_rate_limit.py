import asyncio

import pytest

from claimledger.core.rate_limit import AsyncRateLimiter, get_rate_limiter, throttled


def test_named_limiters_are_shared():
    assert get_rate_limiter("shared-test", 2, 1.0) is get_rate_limiter("shared-test", 5, 9.0)


@pytest.mark.asyncio
async def test_burst_up_to_capacity_is_immediate():
    limiter = AsyncRateLimiter(max_calls=3, period=60)
    loop = asyncio.get_running_loop()

    start = loop.time()
    for _ in range(3):
        async with limiter:
            pass

    assert loop.time() - start < 0.5


@pytest.mark.asyncio
async def test_exceeding_capacity_waits_for_refill():
    limiter = AsyncRateLimiter(max_calls=2, period=0.2)
    loop = asyncio.get_running_loop()

    start = loop.time()
    for _ in range(3):
        await limiter.acquire()

    assert loop.time() - start >= 0.05


@pytest.mark.asyncio
async def test_throttled_decorator_passes_through():
    @throttled(limit=10, period=1.0, name="decorator-test")
    async def double(x):
        return x * 2

    assert await double(21) == 42
    assert double.__name__ == "double"
