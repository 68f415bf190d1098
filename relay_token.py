# relay_token.py
from decimal import Decimal

from web3 import Web3


def build_token_transfer_tx(ctx, to_address: str, amount_int: int, gas_price: int, nonce: int) -> dict:
    """
    服务钱包发起的 ERC20 transfer(to, amount)，legacy gasPrice。
    gas 用编码后的调用向节点估算。
    """
    to = Web3.to_checksum_address(to_address)
    data = ctx.token.encode_abi("transfer", args=[to, amount_int])

    gas = ctx.w3.eth.estimate_gas(
        {
            "from": ctx.address,
            "to": ctx.token.address,
            "data": data,
        }
    )

    return {
        "from": ctx.address,
        "to": ctx.token.address,
        "data": data,
        "gas": gas,
        "gasPrice": gas_price,
        "nonce": nonce,
        "chainId": ctx.settings.chain_id,
    }


def gas_drop_wei(ctx) -> int:
    return Web3.to_wei(Decimal(ctx.settings.gas_drop_amount), "ether")


def build_gas_drop_tx(ctx, to_address: str, gas_price: int, nonce: int) -> dict:
    """普通原生币转账，金额为配置的 gas drop 数量"""
    to = Web3.to_checksum_address(to_address)
    value = gas_drop_wei(ctx)

    gas = ctx.w3.eth.estimate_gas(
        {
            "from": ctx.address,
            "to": to,
            "value": value,
        }
    )

    return {
        "from": ctx.address,
        "to": to,
        "value": value,
        "gas": gas,
        "gasPrice": gas_price,
        "nonce": nonce,
        "chainId": ctx.settings.chain_id,
    }
