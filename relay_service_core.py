# relay_service_core.py
import logging

from exceptions import InsufficientBalanceError, TokenTransferError, TransactionError, ValidationError
from relay_token import build_gas_drop_tx, build_token_transfer_tx
from sign.tx_sender import sign_and_send
from validate_utils import from_base_units, is_valid_address, is_valid_amount, to_base_units

logger = logging.getLogger(__name__)


def _missing(value) -> bool:
    return value is None or (isinstance(value, str) and value.strip() == "")


def handle_token_transfer(ctx, amount, wallet_address) -> dict:
    """
    整体流程：
    1. 校验输入，把 amount 换算成 token 最小单位
    2. 预检：服务钱包的 token 余额必须够
    3. 发 token 转账（nonce n），等上链
    4. 给同一地址补一点原生币当 gas（nonce n + 1）

    两笔交易共用一次 gas price。不重试；第二笔失败也不回滚已上链的 token 转账。
    """
    if _missing(amount) or _missing(wallet_address):
        raise ValidationError("amount and walletAddress are required")
    if not is_valid_amount(amount):
        raise ValidationError("Invalid amount. Must be a positive number.")
    if not is_valid_address(wallet_address):
        raise ValidationError("Invalid wallet address")

    decimals = ctx.token_config.decimals
    try:
        token_amount = to_base_units(amount, decimals)
    except OverflowError:
        raise ValidationError("Invalid amount. Must be a positive number.")

    try:
        sender_balance = ctx.token.functions.balanceOf(ctx.address).call()
        if int(sender_balance) < token_amount:
            raise InsufficientBalanceError(
                available=from_base_units(sender_balance, decimals),
                requested=amount,
            )

        gas_price = ctx.w3.eth.gas_price

        with ctx.nonce_lock:
            nonce = ctx.w3.eth.get_transaction_count(ctx.address)
            logger.info(
                "Transfer %s (%s units) -> %s, nonce=%s gasPrice=%s",
                amount,
                token_amount,
                wallet_address,
                nonce,
                gas_price,
            )

            token_tx = build_token_transfer_tx(ctx, wallet_address, token_amount, gas_price, nonce)
            token_receipt = sign_and_send(ctx, token_tx, label="token transfer")

            drop_tx = build_gas_drop_tx(ctx, wallet_address, gas_price, nonce + 1)
            drop_receipt = sign_and_send(ctx, drop_tx, label="gas drop")
    except TokenTransferError:
        raise
    except Exception as e:
        logger.error("Token transfer to %s failed: %s", wallet_address, e)
        raise TransactionError(str(e)) from e

    return {
        "success": True,
        "tokenTransfer": {
            "transactionHash": token_receipt["transactionHash"],
            "amount": amount,
            "tokenAmount": str(token_amount),
            "gasUsed": token_receipt["gasUsed"],
            "blockNumber": token_receipt["blockNumber"],
        },
        "ethTransfer": {
            "transactionHash": drop_receipt["transactionHash"],
            "amount": ctx.settings.gas_drop_amount,
            "amountWei": str(drop_tx["value"]),
            "gasUsed": drop_receipt["gasUsed"],
            "blockNumber": drop_receipt["blockNumber"],
        },
        "from": ctx.address,
        "to": wallet_address,
        "network": ctx.settings.network_name,
        "totalTransactions": 2,
    }
