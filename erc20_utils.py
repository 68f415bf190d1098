# erc20_utils.py
import logging
from dataclasses import dataclass, field

from web3 import Web3

from exceptions import RpcError, ValidationError
from validate_utils import from_base_units, is_valid_address

logger = logging.getLogger(__name__)

# 最小 ERC20 ABI，只要 transfer / balanceOf
ERC20_ABI = [
    {
        "constant": False,
        "inputs": [
            {"name": "_to", "type": "address"},
            {"name": "_value", "type": "uint256"},
        ],
        "name": "transfer",
        "outputs": [{"name": "", "type": "bool"}],
        "payable": False,
        "stateMutability": "nonpayable",
        "type": "function",
    },
    {
        "constant": True,
        "inputs": [{"name": "_owner", "type": "address"}],
        "name": "balanceOf",
        "outputs": [{"name": "balance", "type": "uint256"}],
        "payable": False,
        "stateMutability": "view",
        "type": "function",
    },
]


@dataclass(frozen=True)
class TokenConfig:
    """
    token 合约参数。decimals 按配置信任，不从合约读取。
    """

    address: str
    decimals: int = 2
    abi: list = field(default_factory=lambda: ERC20_ABI)


def get_erc20_contract(w3: Web3, token: TokenConfig):
    return w3.eth.contract(address=Web3.to_checksum_address(token.address), abi=token.abi)


def get_token_balance(ctx, address: str) -> dict:
    """
    只读查询 balanceOf(address)
    返回 {address, balance, rawBalance, decimals}，balance 是人类可读单位
    """
    if not is_valid_address(address):
        raise ValidationError("Invalid Ethereum address")

    decimals = ctx.token_config.decimals
    try:
        raw = ctx.token.functions.balanceOf(Web3.to_checksum_address(address)).call()
    except Exception as e:
        logger.error("balanceOf(%s) failed: %s", address, e)
        raise RpcError(str(e)) from e

    return {
        "address": address,
        "balance": from_base_units(raw, decimals),
        "rawBalance": str(raw),
        "decimals": decimals,
    }
