# logging_config.py
"""
日志配置：始终输出到控制台；设置了 LOG_FILE 时再写滚动日志文件。
"""

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

MAX_BYTES = 10 * 1024 * 1024  # 10 MB
BACKUP_COUNT = 5


def setup_logging(level: str = "INFO", log_file: str | None = None) -> None:
    level_no = getattr(logging, level.upper(), logging.INFO)
    formatter = logging.Formatter(LOG_FORMAT, DATE_FORMAT)

    root = logging.getLogger()
    root.setLevel(level_no)
    root.handlers = []

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level_no)
    console_handler.setFormatter(formatter)
    root.addHandler(console_handler)

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            path,
            maxBytes=MAX_BYTES,
            backupCount=BACKUP_COUNT,
            encoding="utf-8",
        )
        file_handler.setLevel(level_no)
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    # web3 的 HTTP provider 在 DEBUG 级别太吵
    logging.getLogger("web3").setLevel(max(level_no, logging.INFO))
    logging.getLogger("urllib3").setLevel(logging.WARNING)
