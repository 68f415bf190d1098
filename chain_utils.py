# chain_utils.py
import logging
import re
import threading
from dataclasses import dataclass, field
from typing import Any, Optional

from web3 import Web3

from config import Settings, get_settings
from erc20_utils import TokenConfig, get_erc20_contract
from exceptions import ConfigurationError

logger = logging.getLogger(__name__)

PRIVATE_KEY_RE = re.compile(r"^0x[0-9a-fA-F]{64}$")


def normalize_private_key(raw: Optional[str]) -> str:
    """返回 0x + 64 位 hex 的私钥，不合法就抛 ConfigurationError"""
    if not raw or not raw.strip():
        raise ConfigurationError("PRIVATE_KEY environment variable is required")

    key = raw.strip()
    if not key.startswith("0x"):
        key = "0x" + key

    if len(key) != 66:
        raise ConfigurationError(
            f"PRIVATE_KEY must be 64 hex characters long, got {len(key) - 2}"
        )
    if not PRIVATE_KEY_RE.match(key):
        raise ConfigurationError(
            "PRIVATE_KEY contains invalid characters, only 0-9, a-f, A-F are allowed"
        )
    return key


@dataclass
class ChainContext:
    """
    请求访问链所需的一切：web3 客户端、签名账户、绑定好的 token 合约。
    每个进程只构造一次，只读共享；nonce_lock 用来串行分配 signer 的 nonce。
    """

    settings: Settings
    w3: Any
    account: Any
    token: Any
    nonce_lock: threading.Lock = field(default_factory=threading.Lock)

    @property
    def address(self) -> str:
        return self.account.address

    @property
    def token_config(self) -> TokenConfig:
        return TokenConfig(
            address=self.settings.token_address,
            decimals=self.settings.token_decimals,
        )


def get_web3(settings: Settings) -> Web3:
    return Web3(Web3.HTTPProvider(settings.rpc_url))


def build_chain_context(settings: Settings) -> ChainContext:
    private_key = normalize_private_key(settings.private_key)

    w3 = get_web3(settings)
    account = w3.eth.account.from_key(private_key)
    w3.eth.default_account = account.address

    token = get_erc20_contract(
        w3, TokenConfig(address=settings.token_address, decimals=settings.token_decimals)
    )
    logger.info(
        "Chain context ready: signer=%s token=%s rpc=%s chain_id=%s",
        account.address,
        token.address,
        settings.rpc_url,
        settings.chain_id,
    )
    return ChainContext(settings=settings, w3=w3, account=account, token=token)


_context: Optional[ChainContext] = None
_context_lock = threading.Lock()


def get_chain_context() -> ChainContext:
    """缓存的 ChainContext，并发请求下也只构造一次"""
    global _context
    if _context is None:
        with _context_lock:
            if _context is None:
                _context = build_chain_context(get_settings())
    return _context


def reset_chain_context() -> None:
    global _context
    with _context_lock:
        _context = None
