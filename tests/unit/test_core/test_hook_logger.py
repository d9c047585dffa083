"""Unit tests for the debug-gated log sink."""

import logging

from unihook.config import HookConfig
from unihook.core.hook_logger import LOGGER_NAME, HookLogger, setup_logger


class TestHookLogger:
    """Test debug gating of log messages."""

    def test_info_only_when_debug(self, caplog):
        config = HookConfig(debug=False)
        log = HookLogger(config)

        with caplog.at_level(logging.INFO, logger=LOGGER_NAME):
            log.info("hidden %s", "message")
            config.debug = True
            log.info("shown %s", "message")

        assert "hidden message" not in caplog.text
        assert "shown message" in caplog.text

    def test_errors_always_reported(self, caplog):
        log = HookLogger(HookConfig(debug=False))
        with caplog.at_level(logging.ERROR, logger=LOGGER_NAME):
            log.error("setup failed for %s", "target")
        assert "setup failed for target" in caplog.text

    def test_setup_logger_adds_one_handler(self):
        logger = setup_logger()
        setup_logger()
        marked = [h for h in logger.handlers if getattr(h, "_unihook_handler", False)]
        assert len(marked) == 1
        assert logger.name == LOGGER_NAME
