import pytest
from web3 import Web3

from conftest import RECIPIENT
from erc20_utils import ERC20_ABI, TokenConfig, get_erc20_contract, get_token_balance
from exceptions import RpcError, ValidationError


def test_abi_exposes_transfer_and_balance_of_only():
    assert sorted(item["name"] for item in ERC20_ABI) == ["balanceOf", "transfer"]


def test_transfer_call_data(settings):
    token = get_erc20_contract(Web3(), TokenConfig(address=settings.token_address))
    data = token.encode_abi("transfer", args=[Web3.to_checksum_address(RECIPIENT), 100])
    # transfer(address,uint256) selector + two 32-byte words
    assert data.startswith("0xa9059cbb")
    assert len(data) == 2 + 8 + 64 * 2
    assert data.endswith(f"{100:064x}")


def test_get_token_balance(ctx, mock_token):
    mock_token.functions.balanceOf.return_value.call.return_value = 250

    result = get_token_balance(ctx, RECIPIENT)

    assert result == {
        "address": RECIPIENT,
        "balance": 2.5,
        "rawBalance": "250",
        "decimals": 2,
    }
    mock_token.functions.balanceOf.assert_called_once_with(Web3.to_checksum_address(RECIPIENT))


def test_get_token_balance_invalid_address(ctx, mock_token):
    with pytest.raises(ValidationError):
        get_token_balance(ctx, "0x1234")
    mock_token.functions.balanceOf.assert_not_called()


def test_get_token_balance_rpc_failure(ctx, mock_token):
    mock_token.functions.balanceOf.return_value.call.side_effect = ConnectionError("node down")

    with pytest.raises(RpcError) as exc_info:
        get_token_balance(ctx, RECIPIENT)

    assert exc_info.value.to_payload() == {
        "error": "Failed to fetch token balance",
        "details": "node down",
    }
