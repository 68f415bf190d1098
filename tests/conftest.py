"""
Pytest fixtures: a ChainContext wired to a mocked node
"""

from unittest.mock import MagicMock

import pytest
from eth_account import Account
from fastapi.testclient import TestClient
from web3 import Web3

from chain_utils import ChainContext, get_chain_context
from config import Settings, get_settings
from erc20_utils import TokenConfig, get_erc20_contract
from main import app

TEST_PRIVATE_KEY = "0x0123456789abcdef0123456789abcdef0123456789abcdef0123456789abcdef"
TEST_SIGNER_ADDRESS = "0xFCAd0B19bB29D4674531d6f115237E16AfCE377c"
RECIPIENT = "0x742d35cc6634c0532925a3b8d44268d9c8c16c99"

TOKEN_TX_HASH = b"\x11" * 32
DROP_TX_HASH = b"\x22" * 32


class RecordingAccount:
    """Real eth-account signer that remembers every transaction it signed."""

    def __init__(self, private_key: str):
        self._account = Account.from_key(private_key)
        self.address = self._account.address
        self.signed = []

    def sign_transaction(self, tx: dict):
        self.signed.append(dict(tx))
        return self._account.sign_transaction(tx)


@pytest.fixture
def settings():
    return Settings(private_key=TEST_PRIVATE_KEY)


@pytest.fixture
def mock_w3():
    w3 = MagicMock()
    w3.eth.gas_price = 1_000_000_000
    w3.eth.get_transaction_count.return_value = 7
    w3.eth.estimate_gas.side_effect = [52_000, 21_000]
    w3.eth.send_raw_transaction.side_effect = [TOKEN_TX_HASH, DROP_TX_HASH]
    w3.eth.wait_for_transaction_receipt.side_effect = [
        {"status": 1, "blockNumber": 1001, "gasUsed": 51_234},
        {"status": 1, "blockNumber": 1002, "gasUsed": 21_000},
    ]
    return w3


@pytest.fixture
def mock_token(settings):
    """Token handle whose ABI encoding is real and whose balanceOf is mocked (10.00 tokens)."""
    real = get_erc20_contract(Web3(), TokenConfig(address=settings.token_address))
    token = MagicMock()
    token.address = real.address
    token.encode_abi.side_effect = real.encode_abi
    token.functions.balanceOf.return_value.call.return_value = 1000
    return token


@pytest.fixture
def signer():
    return RecordingAccount(TEST_PRIVATE_KEY)


@pytest.fixture
def ctx(settings, mock_w3, mock_token, signer):
    return ChainContext(settings=settings, w3=mock_w3, account=signer, token=mock_token)


@pytest.fixture
def client(settings, ctx):
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_chain_context] = lambda: ctx
    yield TestClient(app)
    app.dependency_overrides.clear()
