import hashlib

import pytest
from eth_account import Account
from eth_account.messages import encode_defunct

from claimledger.core.errors import ConfigurationError, SigningUnavailable
from claimledger.services.signing import AgentSigner, load_account

# Well-known development account (never holds real funds)
DEV_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"
DEV_MNEMONIC = "test test test test test test test test test test test junk"
DEV_ADDRESS = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"


def test_load_account_from_key_or_mnemonic():
    assert load_account(private_key=DEV_KEY).address == DEV_ADDRESS
    assert load_account(mnemonic=DEV_MNEMONIC).address == DEV_ADDRESS


def test_load_account_without_credentials():
    with pytest.raises(ConfigurationError):
        load_account()


def test_describe_returns_address_and_chain():
    signer = AgentSigner(load_account(private_key=DEV_KEY), chain_id=11155111)

    assert signer.describe() == {"address": DEV_ADDRESS, "chain_id": 11155111}


def test_test_sign_recovers_to_account():
    signer = AgentSigner(load_account(private_key=DEV_KEY))

    result = signer.test_sign()

    digest = hashlib.sha256(b"testing").digest()
    assert result["path"] == "foo"
    assert result["payload"] == digest.hex()
    recovered = Account.recover_message(encode_defunct(primitive=digest), signature=result["signature"])
    assert recovered == DEV_ADDRESS


def test_signer_without_account_is_unavailable():
    signer = AgentSigner(None)

    with pytest.raises(SigningUnavailable):
        signer.describe()
    with pytest.raises(SigningUnavailable):
        signer.test_sign()
