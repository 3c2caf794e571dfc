# invitation_engine/config/logging_config.py
import logging
from typing import Optional

from invitation_engine.config.settings import settings


def get_logger(name: str, tag: Optional[str] = None) -> logging.Logger:
    """Module logger with its own stream handler, so engine logs never double up on the root logger."""
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        prefix = f"[{tag}] " if tag else ""
        formatter = logging.Formatter(f'%(asctime)s [%(levelname)s] {prefix}%(message)s', '%Y-%m-%d %H:%M:%S')
        handler.setFormatter(formatter)
        logger.addHandler(handler)
        logger.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
        logger.propagate = False
    return logger
