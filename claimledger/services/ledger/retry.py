import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, Tuple, Type, TypeVar

from claimledger.constants.config import LEDGER_MAX_ATTEMPTS, LEDGER_RETRY_BACKOFF
from claimledger.core.errors import LedgerError, LedgerTransientError
from claimledger.core.logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class RetryExhausted(LedgerError):
    def __init__(self, attempts: int, last_error: BaseException) -> None:
        super().__init__(str(last_error) or type(last_error).__name__, cause=last_error)
        self.attempts = attempts
        self.last_error = last_error


@dataclass(frozen=True)
class RetryPolicy:
    """
    Fixed-interval retry: up to `max_attempts` tries, `backoff` seconds apart.

    Only errors matching `retry_on` are retried. Anything else propagates on
    the attempt that raised it. Running out of attempts raises RetryExhausted
    wrapping the last error.
    """

    max_attempts: int = LEDGER_MAX_ATTEMPTS
    backoff: float = LEDGER_RETRY_BACKOFF
    retry_on: Tuple[Type[BaseException], ...] = (LedgerTransientError,)

    def is_retryable(self, error: BaseException) -> bool:
        return isinstance(error, self.retry_on)

    async def execute(
        self,
        operation: Callable[[], Awaitable[T]],
        label: str = "operation",
        on_retry: Optional[Callable[[int, BaseException], None]] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> Tuple[T, int]:
        """Run `operation`; returns its result and the number of attempts used."""
        attempt = 0
        while True:
            attempt += 1
            try:
                return await operation(), attempt
            except Exception as e:
                if not self.is_retryable(e):
                    raise
                remaining = self.max_attempts - attempt
                logger.warning(f"[RetryPolicy] {label} attempt {attempt} failed ({remaining} left): {e}")
                if remaining <= 0:
                    raise RetryExhausted(attempt, e) from e
                if on_retry is not None:
                    on_retry(attempt, e)
                await sleep(self.backoff)
