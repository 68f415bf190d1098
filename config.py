# config.py
"""
服务配置

从进程环境变量读取，可选地先加载本目录下的 properties.env。
token 参数默认是 Base 链上已部署的 token（2 位精度）。
"""

import os
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from functools import lru_cache
from pathlib import Path
from typing import Mapping, Optional

from dotenv import load_dotenv
from web3 import Web3

from exceptions import ConfigurationError

BASE_DIR = Path(__file__).resolve().parent
ENV_PATH = BASE_DIR / "properties.env"

DEFAULT_RPC_URL = "https://mainnet.base.org"
DEFAULT_TOKEN_ADDRESS = Web3.to_checksum_address("0x69efd833288605f320d77eb2ab99dde62919bbc1")
DEFAULT_TOKEN_DECIMALS = 2
DEFAULT_CHAIN_ID = 8453  # Base mainnet
DEFAULT_NETWORK_NAME = "Base Chain"
DEFAULT_GAS_DROP_AMOUNT = "0.000001"  # 每笔 token 转账附带的原生币数量
DEFAULT_PORT = 3000
DEFAULT_RECEIPT_TIMEOUT = 120

INIT_MODES = ("lazy", "eager")


@dataclass(frozen=True)
class Settings:
    private_key: Optional[str]
    rpc_url: str = DEFAULT_RPC_URL
    port: int = DEFAULT_PORT
    app_env: str = "development"
    init_mode: str = "lazy"
    chain_id: int = DEFAULT_CHAIN_ID
    network_name: str = DEFAULT_NETWORK_NAME
    token_address: str = DEFAULT_TOKEN_ADDRESS
    token_decimals: int = DEFAULT_TOKEN_DECIMALS
    gas_drop_amount: str = DEFAULT_GAS_DROP_AMOUNT
    receipt_timeout: int = DEFAULT_RECEIPT_TIMEOUT
    log_level: str = "INFO"
    log_file: Optional[str] = None

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"


def _int_env(env: Mapping[str, str], name: str, default: int, minimum: int = 0) -> int:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}")
    if value < minimum:
        raise ConfigurationError(f"{name} must be >= {minimum}, got {value}")
    return value


def _token_address(env: Mapping[str, str]) -> str:
    raw = (env.get("TOKEN_ADDRESS") or DEFAULT_TOKEN_ADDRESS).strip()
    if not Web3.is_address(raw.lower()):
        raise ConfigurationError(f"TOKEN_ADDRESS is not a valid address: {raw!r}")
    return Web3.to_checksum_address(raw)


def _gas_drop_amount(env: Mapping[str, str]) -> str:
    raw = (env.get("GAS_DROP_AMOUNT") or DEFAULT_GAS_DROP_AMOUNT).strip()
    try:
        value = Decimal(raw)
    except InvalidOperation:
        raise ConfigurationError(f"GAS_DROP_AMOUNT must be a decimal number, got {raw!r}")
    if not value.is_finite() or value <= 0:
        raise ConfigurationError(f"GAS_DROP_AMOUNT must be positive, got {raw!r}")
    return raw


def load_settings(env: Mapping[str, str] | None = None) -> Settings:
    if env is None:
        load_dotenv(ENV_PATH)
        env = os.environ

    init_mode = (env.get("INIT_MODE") or "lazy").strip().lower()
    if init_mode not in INIT_MODES:
        raise ConfigurationError(f"INIT_MODE must be one of {INIT_MODES}, got {init_mode!r}")

    return Settings(
        private_key=env.get("PRIVATE_KEY"),
        rpc_url=(env.get("RPC_URL") or DEFAULT_RPC_URL).strip(),
        port=_int_env(env, "PORT", DEFAULT_PORT, minimum=1),
        app_env=(env.get("APP_ENV") or "development").strip().lower(),
        init_mode=init_mode,
        chain_id=_int_env(env, "CHAIN_ID", DEFAULT_CHAIN_ID, minimum=1),
        network_name=env.get("NETWORK_NAME") or DEFAULT_NETWORK_NAME,
        token_address=_token_address(env),
        token_decimals=_int_env(env, "TOKEN_DECIMALS", DEFAULT_TOKEN_DECIMALS),
        gas_drop_amount=_gas_drop_amount(env),
        receipt_timeout=_int_env(env, "RECEIPT_TIMEOUT", DEFAULT_RECEIPT_TIMEOUT, minimum=1),
        log_level=(env.get("LOG_LEVEL") or "INFO").strip().upper(),
        log_file=env.get("LOG_FILE") or None,
    )


@lru_cache
def get_settings() -> Settings:
    return load_settings()
