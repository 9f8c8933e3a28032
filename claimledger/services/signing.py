"""
Signing account adapter.

The service account is loaded from LEDGER_PRIVATE_KEY or LEDGER_MNEMONIC.
It signs ledger transactions and answers the account / test-signature
endpoints.
"""

import hashlib
from typing import Any, Dict, Optional

from eth_account import Account
from eth_account.messages import encode_defunct
from eth_account.signers.local import LocalAccount

from claimledger.core.errors import ConfigurationError, SigningUnavailable
from claimledger.core.logger import get_logger

logger = get_logger(__name__)

TEST_SIGN_PATH = "foo"
TEST_SIGN_PAYLOAD = b"testing"


def load_account(private_key: Optional[str] = None, mnemonic: Optional[str] = None) -> LocalAccount:
    if private_key:
        return Account.from_key(private_key)
    if mnemonic:
        Account.enable_unaudited_hdwallet_features()
        return Account.from_mnemonic(mnemonic)
    raise ConfigurationError("Missing LEDGER_PRIVATE_KEY or LEDGER_MNEMONIC")


class AgentSigner:
    def __init__(self, account: Optional[LocalAccount], chain_id: Optional[int] = None) -> None:
        self.account = account
        self.chain_id = chain_id

    def _require_account(self) -> LocalAccount:
        if self.account is None:
            raise SigningUnavailable("Signing account is not configured")
        return self.account

    def describe(self) -> Dict[str, Any]:
        account = self._require_account()
        return {"address": account.address, "chain_id": self.chain_id}

    def test_sign(self) -> Dict[str, Any]:
        """Sign sha256(b"testing") to prove the account is usable."""
        account = self._require_account()
        digest = hashlib.sha256(TEST_SIGN_PAYLOAD).digest()
        signed = account.sign_message(encode_defunct(primitive=digest))
        logger.info(f"[AgentSigner] Signed test payload with {account.address}")
        return {
            "path": TEST_SIGN_PATH,
            "address": account.address,
            "payload": digest.hex(),
            "signature": "0x" + bytes(signed.signature).hex(),
            "v": signed.v,
            "r": hex(signed.r),
            "s": hex(signed.s),
        }
