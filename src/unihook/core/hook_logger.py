"""
Log sink for the hook system.

Messages go through the standard ``logging`` module under the ``unihook``
logger. Informational messages are only emitted while the owning
configuration has ``debug`` enabled; setup failures are always reported.
"""

import logging
import sys
from typing import Optional

from ..config import HookConfig

LOGGER_NAME = "unihook"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logger(name: str = LOGGER_NAME, level: str = "INFO") -> logging.Logger:
    """Set up a logger with a single console handler."""
    logger = logging.getLogger(name)
    logger.setLevel(level)

    if not any(getattr(h, "_unihook_handler", False) for h in logger.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._unihook_handler = True
        logger.addHandler(handler)

    return logger


class HookLogger:
    """Debug-gated logger bound to a :class:`HookConfig`."""

    def __init__(self, config: HookConfig, logger: Optional[logging.Logger] = None):
        self.config = config
        self.logger = logger or setup_logger(level=config.log_level)

    @property
    def enabled(self) -> bool:
        return bool(self.config.debug)

    def info(self, msg: str, *args) -> None:
        if self.enabled:
            self.logger.info(msg, *args)

    def debug(self, msg: str, *args) -> None:
        if self.enabled:
            self.logger.debug(msg, *args)

    def warning(self, msg: str, *args) -> None:
        if self.enabled:
            self.logger.warning(msg, *args)

    def error(self, msg: str, *args) -> None:
        self.logger.error(msg, *args)

    def exception(self, msg: str, *args) -> None:
        self.logger.exception(msg, *args)
