# validate_utils.py
import math

from web3 import Web3


def is_valid_address(address) -> bool:
    """0x + 40 位 hex；大小写混合时必须是合法的 EIP-55 checksum"""
    if not isinstance(address, str) or not Web3.is_address(address):
        return False
    body = address[2:] if address[:2] in ("0x", "0X") else address
    # 全小写 / 全大写不带 checksum
    if body == body.lower() or body == body.upper():
        return True
    return Web3.is_checksum_address(address)


def _as_float(value) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def is_valid_amount(amount) -> bool:
    num = _as_float(amount)
    return num is not None and math.isfinite(num) and num > 0


def to_base_units(amount: str | float, decimals: int) -> int:
    """
    人类可读数量 -> 最小单位整数，例如 2 位精度时 1.00 -> 100

    先用 double 相乘再向下取整，所以 0.29 这类值会少 1 个单位（28）。
    放大后溢出（比如 1e307）抛 OverflowError。
    """
    scaled = float(amount) * math.pow(10, decimals)
    if not math.isfinite(scaled):
        raise OverflowError(f"{amount} is too large for {decimals} decimals")
    return int(math.floor(scaled))


def from_base_units(raw: int | str, decimals: int) -> float:
    return int(raw) / math.pow(10, decimals)
