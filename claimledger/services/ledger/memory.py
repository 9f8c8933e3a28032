import asyncio
import hashlib
from typing import Dict

from claimledger.core.errors import RecordNotFoundError
from claimledger.core.logger import get_logger
from claimledger.services.ledger.base import LedgerClient

logger = get_logger(__name__)


class InMemoryLedger(LedgerClient):
    """Process-local ledger for development and tests. Identifiers look like transaction hashes."""

    name = "memory"

    def __init__(self) -> None:
        self._records: Dict[str, bytes] = {}
        self._lock = asyncio.Lock()

    async def write(self, data: bytes) -> str:
        async with self._lock:
            nonce = len(self._records).to_bytes(8, "big")
            identifier = "0x" + hashlib.sha256(nonce + data).hexdigest()
            self._records[identifier] = bytes(data)
        logger.info(f"[InMemoryLedger] Stored {len(data)} bytes as {identifier}")
        return identifier

    async def read(self, identifier: str) -> bytes:
        try:
            return self._records[identifier.lower()]
        except KeyError:
            raise RecordNotFoundError(f"Transaction not found: {identifier}") from None

    def __len__(self) -> int:
        return len(self._records)
