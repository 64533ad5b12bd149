import logging
import os
from typing import Optional

from .naming import log_path as default_log_path

FORMAT = "%(asctime)s | %(levelname)s | %(message)s"


def get_logger(run_id: str, log_path: Optional[str] = None) -> logging.Logger:
    logger = logging.getLogger(f"movr.{run_id}")
    logger.setLevel(logging.INFO)
    for handler in logger.handlers:
        handler.close()
    logger.handlers.clear()

    fmt = logging.Formatter(FORMAT)
    ch = logging.StreamHandler()
    ch.setFormatter(fmt)
    logger.addHandler(ch)

    if log_path is None:
        log_path = default_log_path(f"run_{run_id}")
    os.makedirs(os.path.dirname(log_path), exist_ok=True)
    fh = logging.FileHandler(log_path, encoding="utf-8")
    fh.setFormatter(fmt)
    logger.addHandler(fh)
    logger.propagate = False
    return logger


def log_summary(logger: logging.Logger, stats: dict) -> None:
    logger.info("summary %s", {k: v for k, v in stats.items()})


def close_logger(logger: logging.Logger) -> None:
    """ハンドラを閉じて外す。長時間動くプロセスでログファイルを開いたままにしない。"""
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)
