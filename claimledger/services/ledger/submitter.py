import json
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from claimledger.constants.config import LEDGER_READBACK_ATTEMPTS, LEDGER_READBACK_BACKOFF
from claimledger.core.errors import LedgerError, LedgerTransientError, PriorRecordNotFound, RecordNotFoundError
from claimledger.core.logger import get_logger
from claimledger.core.observability import ledger_retries_total, ledger_submissions_total, stage_timer
from claimledger.services.ledger.base import LedgerClient
from claimledger.services.ledger.hasher import canonical_json
from claimledger.services.ledger.retry import RetryExhausted, RetryPolicy

logger = get_logger(__name__)


@dataclass
class SubmissionResult:
    success: bool
    identifier: Optional[str] = None
    explorer_url: Optional[str] = None
    error: Optional[str] = None
    attempts: int = 0
    verified: bool = False


class LedgerSubmitter:
    """
    Writes JSON payloads to the ledger and proves they landed.

    State machine per submission:

        ATTEMPT (up to write_policy.max_attempts, fixed backoff on LedgerTransientError)
          → EXHAUSTED          returns success=False with the last error
          → WRITTEN → READ-BACK (read_policy) → decode → compare
               → VERIFIED      success=True
               → UNVERIFIED    success=False, identifier kept

    `read` resolves records written earlier (lookup_policy): transient
    errors are retried, a missing record is not.

    Non-transient ledger errors on the write propagate to the caller
    without consuming further attempts.
    """

    def __init__(
        self,
        client: LedgerClient,
        write_policy: Optional[RetryPolicy] = None,
        read_policy: Optional[RetryPolicy] = None,
        lookup_policy: Optional[RetryPolicy] = None,
    ) -> None:
        self.client = client
        self.write_policy = write_policy or RetryPolicy()
        self.read_policy = read_policy or RetryPolicy(
            max_attempts=LEDGER_READBACK_ATTEMPTS,
            backoff=LEDGER_READBACK_BACKOFF,
            retry_on=(LedgerTransientError, RecordNotFoundError),
        )
        self.lookup_policy = lookup_policy or RetryPolicy(
            max_attempts=LEDGER_READBACK_ATTEMPTS, backoff=LEDGER_READBACK_BACKOFF
        )

    @staticmethod
    def encode(payload: Mapping[str, Any]) -> bytes:
        return canonical_json(payload).encode("utf-8")

    @staticmethod
    def decode(data: bytes) -> Dict[str, Any]:
        decoded = json.loads(data.decode("utf-8"))
        if not isinstance(decoded, dict):
            raise ValueError("ledger record is not a JSON object")
        return decoded

    @staticmethod
    def _count_retry(attempt: int, error: BaseException) -> None:
        ledger_retries_total.inc()

    # ---------------------------------------------------------------------
    # Submit
    # ---------------------------------------------------------------------
    async def submit(self, payload: Mapping[str, Any]) -> SubmissionResult:
        data = self.encode(payload)

        with stage_timer("ledger_write"):
            try:
                identifier, attempts = await self.write_policy.execute(
                    lambda: self.client.write(data), label="ledger write", on_retry=self._count_retry
                )
            except RetryExhausted as e:
                logger.error(f"[LedgerSubmitter] Giving up after {e.attempts} attempts: {e.last_error}")
                ledger_submissions_total.labels(status="exhausted").inc()
                return SubmissionResult(success=False, error=str(e.last_error), attempts=e.attempts)
            except LedgerError:
                ledger_submissions_total.labels(status="failed").inc()
                raise

        explorer_url = self.client.explorer_url(identifier)
        logger.info(f"[LedgerSubmitter] Written as {identifier} after {attempts} attempt(s), verifying")

        with stage_timer("ledger_readback"):
            problem = await self._verify(identifier, data, payload)

        if problem:
            logger.error(f"[LedgerSubmitter] Read-back of {identifier} failed: {problem}")
            ledger_submissions_total.labels(status="unverified").inc()
            return SubmissionResult(
                success=False,
                identifier=identifier,
                explorer_url=explorer_url,
                error=f"Read-back verification failed: {problem}",
                attempts=attempts,
            )

        ledger_submissions_total.labels(status="verified").inc()
        return SubmissionResult(
            success=True, identifier=identifier, explorer_url=explorer_url, attempts=attempts, verified=True
        )

    async def _verify(self, identifier: str, sent: bytes, payload: Mapping[str, Any]) -> Optional[str]:
        """Return None when the stored record matches what was sent, else a description of the mismatch."""
        try:
            stored, _ = await self.read_policy.execute(lambda: self.client.read(identifier), label="ledger read-back")
        except RetryExhausted as e:
            return str(e.last_error)
        except LedgerError as e:
            return str(e)

        if stored != sent:
            return "stored bytes differ from submitted payload"
        try:
            decoded = self.decode(stored)
        except ValueError as e:
            return f"stored record is not decodable: {e}"
        if decoded != dict(payload):
            return "decoded record differs from submitted payload"
        return None

    # ---------------------------------------------------------------------
    # Read
    # ---------------------------------------------------------------------
    async def read(self, identifier: str) -> Dict[str, Any]:
        """Fetch and decode a record. Any failure to produce a JSON object is PriorRecordNotFound."""
        identifier = (identifier or "").strip()
        try:
            data, _ = await self.lookup_policy.execute(lambda: self.client.read(identifier), label="ledger read")
            record = self.decode(data)
        except (LedgerError, ValueError) as e:
            logger.warning(f"[LedgerSubmitter] Could not resolve {identifier}: {e}")
            raise PriorRecordNotFound(f"No decodable ledger record for {identifier}: {e}", cause=e) from e

        logger.info(f"[LedgerSubmitter] Decoded record {identifier}")
        return record
