# tx_sender.py
import logging

from web3 import Web3

from exceptions import TransactionError

logger = logging.getLogger(__name__)


def sign_and_send(ctx, tx: dict, label: str = "tx") -> dict:
    """
    用服务账户签名 tx，广播后阻塞等待上链。

    返回 {transactionHash, gasUsed, blockNumber}：hash 为 0x-hex，数字转成十进制字符串。
    节点拒绝交易或 receipt 显示 revert 时抛 TransactionError。
    """
    signed = ctx.account.sign_transaction(tx)
    tx_hash = ctx.w3.eth.send_raw_transaction(signed.raw_transaction)
    tx_hash_hex = Web3.to_hex(tx_hash)
    logger.info("Sent %s: hash=%s nonce=%s", label, tx_hash_hex, tx["nonce"])

    receipt = ctx.w3.eth.wait_for_transaction_receipt(
        tx_hash, timeout=ctx.settings.receipt_timeout
    )
    logger.info(
        "%s mined: hash=%s status=%s block=%s gasUsed=%s",
        label,
        tx_hash_hex,
        receipt["status"],
        receipt["blockNumber"],
        receipt["gasUsed"],
    )
    if receipt["status"] != 1:
        raise TransactionError(f"{label} {tx_hash_hex} reverted on-chain")

    return {
        "transactionHash": tx_hash_hex,
        "gasUsed": str(receipt["gasUsed"]),
        "blockNumber": str(receipt["blockNumber"]),
    }
