"""
Fetch a commitment or refutation from the ledger and print its decoded payload.

Usage:
    python scripts/decode_record.py 0xabc... [--rpc-url https://sepolia.drpc.org] [--verify-hash]
"""

import argparse
import asyncio
import json
import sys
from typing import Any, Dict

from claimledger.core.config import settings
from claimledger.core.errors import PriorRecordNotFound
from claimledger.services.ledger.ethereum import EthereumLedger
from claimledger.services.ledger.hasher import fingerprint
from claimledger.services.ledger.submitter import LedgerSubmitter


def recompute_hash(record: Dict[str, Any]) -> str:
    content = {k: v for k, v in record.items() if k != "hash"}
    return fingerprint(content)


async def _run(tx_hash: str, rpc_url: str, verify_hash: bool) -> int:
    ledger = EthereumLedger(rpc_url=rpc_url)
    submitter = LedgerSubmitter(ledger)
    try:
        record = await submitter.read(tx_hash)
    except PriorRecordNotFound as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    finally:
        await ledger.aclose()

    print(json.dumps(record, indent=2, ensure_ascii=False))

    if verify_hash and "hash" in record:
        expected = recompute_hash(record)
        status = "ok" if expected == record["hash"] else f"MISMATCH (recomputed {expected})"
        print(f"hash: {status}")
        return 0 if expected == record["hash"] else 2
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(description="Decode a claimledger record from its transaction hash")
    parser.add_argument("tx_hash", help="Transaction hash of the record")
    parser.add_argument("--rpc-url", default=settings.LEDGER_RPC_URL, help="Ethereum JSON-RPC endpoint")
    parser.add_argument("--verify-hash", action="store_true", help="Recompute the content hash and compare")
    args = parser.parse_args()

    sys.exit(asyncio.run(_run(args.tx_hash, args.rpc_url, args.verify_hash)))


if __name__ == "__main__":
    main()
