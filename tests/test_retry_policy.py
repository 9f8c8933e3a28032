import pytest

from claimledger.core.errors import LedgerError, LedgerTransientError
from claimledger.services.ledger.retry import RetryExhausted, RetryPolicy


class _Flaky:
    def __init__(self, failures, error_factory=lambda n: LedgerTransientError(f"boom {n}"), result="0xabc"):
        self.failures = failures
        self.error_factory = error_factory
        self.result = result
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        if self.calls <= self.failures:
            raise self.error_factory(self.calls)
        return self.result


class _Sleeps:
    def __init__(self):
        self.delays = []

    async def __call__(self, delay):
        self.delays.append(delay)


@pytest.mark.asyncio
async def test_succeeds_first_try_without_sleeping():
    sleep = _Sleeps()
    op = _Flaky(0)

    result, attempts = await RetryPolicy().execute(op, sleep=sleep)

    assert (result, attempts) == ("0xabc", 1)
    assert sleep.delays == []


@pytest.mark.asyncio
async def test_recovers_from_transient_errors_with_fixed_backoff():
    sleep = _Sleeps()
    retried = []
    op = _Flaky(2)

    result, attempts = await RetryPolicy(max_attempts=3, backoff=2.0).execute(
        op, on_retry=lambda attempt, err: retried.append(attempt), sleep=sleep
    )

    assert (result, attempts) == ("0xabc", 3)
    assert sleep.delays == [2.0, 2.0]
    assert retried == [1, 2]


@pytest.mark.asyncio
async def test_exhaustion_wraps_last_error():
    sleep = _Sleeps()
    op = _Flaky(10)

    with pytest.raises(RetryExhausted) as excinfo:
        await RetryPolicy(max_attempts=3, backoff=0.5).execute(op, sleep=sleep)

    assert op.calls == 3
    assert excinfo.value.attempts == 3
    assert str(excinfo.value.last_error) == "boom 3"
    assert sleep.delays == [0.5, 0.5]


@pytest.mark.asyncio
async def test_non_retryable_error_propagates_immediately():
    sleep = _Sleeps()
    op = _Flaky(10, error_factory=lambda n: LedgerError("rejected"))

    with pytest.raises(LedgerError, match="rejected"):
        await RetryPolicy(max_attempts=5).execute(op, sleep=sleep)

    assert op.calls == 1
    assert sleep.delays == []


@pytest.mark.asyncio
async def test_custom_retry_on():
    op = _Flaky(1, error_factory=lambda n: KeyError("missing"))

    result, attempts = await RetryPolicy(retry_on=(KeyError,)).execute(op, sleep=_Sleeps())

    assert (result, attempts) == ("0xabc", 2)
