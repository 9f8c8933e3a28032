import asyncio
from typing import Any, Dict, Optional

import aiohttp
from eth_account.signers.local import LocalAccount
from web3 import AsyncHTTPProvider, AsyncWeb3
from web3.exceptions import TransactionNotFound, Web3Exception

from claimledger.constants.config import LEDGER_RPC_TIMEOUT
from claimledger.core.errors import LedgerError, LedgerTransientError, RecordNotFoundError
from claimledger.core.logger import get_logger
from claimledger.services.ledger.base import LedgerClient

logger = get_logger(__name__)


class EthereumLedger(LedgerClient):
    """
    Ethereum as an append-only record store.

    Each record is a zero-value transaction from the service account to
    itself whose calldata is the UTF-8 payload. The transaction hash is the
    record identifier; reading it back returns the calldata.
    """

    name = "ethereum"

    def __init__(
        self,
        rpc_url: str,
        account: Optional[LocalAccount] = None,
        gas_limit: int = 100000,
        chain_id: Optional[int] = None,
        explorer_template: Optional[str] = None,
        w3: Optional[AsyncWeb3] = None,
    ) -> None:
        self.w3 = w3 or AsyncWeb3(
            AsyncHTTPProvider(rpc_url, request_kwargs={"timeout": aiohttp.ClientTimeout(total=LEDGER_RPC_TIMEOUT)})
        )
        self.account = account
        self.gas_limit = gas_limit
        self.chain_id = chain_id
        self.explorer_template = explorer_template

    # ---------------------------------------------------------------------
    # Error classification
    # ---------------------------------------------------------------------
    @staticmethod
    def _translate(error: Exception, action: str) -> LedgerError:
        if isinstance(error, aiohttp.ClientResponseError):
            if error.status >= 500 or error.status == 429:
                return LedgerTransientError(f"Ledger RPC server error during {action} ({error.status})", cause=error)
            return LedgerError(f"Ledger RPC rejected {action} ({error.status}): {error.message}", cause=error)
        if isinstance(error, (aiohttp.ClientConnectionError, asyncio.TimeoutError)):
            return LedgerTransientError(f"Ledger RPC unreachable during {action}: {error}", cause=error)
        return LedgerError(f"Ledger {action} failed: {error}", cause=error)

    # ---------------------------------------------------------------------
    # Write
    # ---------------------------------------------------------------------
    async def _fee_fields(self) -> Dict[str, int]:
        priority = await self.w3.eth.max_priority_fee
        block = await self.w3.eth.get_block("latest")
        base_fee = block.get("baseFeePerGas", 0)
        return {"maxPriorityFeePerGas": priority, "maxFeePerGas": base_fee * 2 + priority}

    async def _build_transaction(self, sender: str, data: bytes) -> Dict[str, Any]:
        chain_id = self.chain_id or await self.w3.eth.chain_id
        nonce = await self.w3.eth.get_transaction_count(sender, "pending")
        tx: Dict[str, Any] = {
            "type": 2,
            "chainId": chain_id,
            "nonce": nonce,
            "to": sender,
            "value": 0,
            "data": data,
            "gas": self.gas_limit,
        }
        tx.update(await self._fee_fields())
        return tx

    async def write(self, data: bytes) -> str:
        if self.account is None:
            raise LedgerError("Ledger writes need a signing account")
        try:
            tx = await self._build_transaction(self.account.address, data)
            signed = self.account.sign_transaction(tx)
            tx_hash = await self.w3.eth.send_raw_transaction(signed.raw_transaction)
        except (aiohttp.ClientError, asyncio.TimeoutError, Web3Exception) as e:
            raise self._translate(e, "write") from e

        identifier = self.w3.to_hex(tx_hash)
        logger.info(f"[EthereumLedger] Transaction sent: {identifier} ({len(data)} bytes)")
        return identifier

    # ---------------------------------------------------------------------
    # Read
    # ---------------------------------------------------------------------
    async def read(self, identifier: str) -> bytes:
        try:
            tx = await self.w3.eth.get_transaction(identifier)
        except TransactionNotFound:
            raise RecordNotFoundError(f"Transaction not found: {identifier}") from None
        except (aiohttp.ClientError, asyncio.TimeoutError, Web3Exception) as e:
            raise self._translate(e, "read") from e
        except ValueError as e:
            raise RecordNotFoundError(f"Invalid transaction hash {identifier!r}: {e}") from e

        if tx is None:
            raise RecordNotFoundError(f"Transaction not found: {identifier}")
        return bytes(tx["input"])

    def explorer_url(self, identifier: str) -> str | None:
        if not self.explorer_template:
            return None
        return self.explorer_template.format(tx_hash=identifier)

    async def aclose(self) -> None:
        disconnect = getattr(self.w3.provider, "disconnect", None)
        if disconnect is not None:
            await disconnect()
