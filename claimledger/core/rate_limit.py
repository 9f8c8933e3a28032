import asyncio
import functools
import time
from typing import Any, Callable, Dict, Optional, TypeVar

F = TypeVar("F", bound=Callable[..., Any])


class AsyncRateLimiter:
    """
    Token bucket shared by every caller of one upstream provider.
    At most `max_calls` acquisitions are granted per `period` seconds.

    Example:
        limiter = AsyncRateLimiter(max_calls=5, period=1)
        async with limiter:
            await client.get(...)
    """

    def __init__(self, max_calls: int, period: float) -> None:
        self.max_calls = max_calls
        self.period = period
        self._tokens: float = float(max_calls)
        self._updated = time.monotonic()
        self._lock = asyncio.Lock()

    def _refill(self) -> None:
        now = time.monotonic()
        elapsed = now - self._updated
        if elapsed > 0:
            self._tokens = min(float(self.max_calls), self._tokens + elapsed * self.max_calls / self.period)
            self._updated = now

    async def acquire(self) -> None:
        async with self._lock:
            self._refill()
            while self._tokens < 1:
                missing = 1 - self._tokens
                await asyncio.sleep(missing * self.period / self.max_calls)
                self._refill()
            self._tokens -= 1

    async def __aenter__(self) -> "AsyncRateLimiter":
        await self.acquire()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        return None


_limiters: Dict[str, AsyncRateLimiter] = {}


def get_rate_limiter(name: str, limit: int, period: float) -> AsyncRateLimiter:
    """Return the bucket registered under `name`, creating it on first use."""
    if name not in _limiters:
        _limiters[name] = AsyncRateLimiter(limit, period)
    return _limiters[name]


def throttled(limit: int, period: float, name: Optional[str] = None) -> Callable[[F], F]:
    """
    Decorator for async throttling against a named bucket.

    Usage:
        @throttled(limit=1, period=1, name="newsapi")
        async def get_everything(...):
            ...
    """

    def decorator(func: F) -> F:
        limiter = get_rate_limiter(name or func.__qualname__, limit, period)

        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            async with limiter:
                return await func(*args, **kwargs)

        return wrapper  # type: ignore[return-value]

    return decorator
