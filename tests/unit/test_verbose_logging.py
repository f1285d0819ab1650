"""Unit tests for logging configuration."""

import logging
from unittest.mock import Mock

from vscreen.cli.logging_config import (
    ColoredFormatter,
    get_global_logger,
    init_logging,
    log_subprocess_call,
    log_timing,
    setup_logging,
)


class TestLoggingSetup:

    def test_default_logging_level(self):
        """Default is WARNING level."""
        logger = setup_logging(verbose=False, debug=False)
        assert logger.level == logging.WARNING

    def test_verbose_logging_level(self):
        logger = setup_logging(verbose=True, debug=False)
        assert logger.level == logging.INFO

    def test_debug_overrides_verbose(self):
        logger = setup_logging(verbose=True, debug=True)
        assert logger.level == logging.DEBUG

    def test_logger_name(self):
        assert setup_logging().name == "vscreen"

    def test_repeated_setup_keeps_one_handler(self):
        setup_logging()
        logger = setup_logging(debug=True)

        assert len(logger.handlers) == 1

    def test_module_loggers_are_children(self):
        logger = setup_logging(debug=True)
        child = logging.getLogger("vscreen.xrandr")

        assert child.getEffectiveLevel() == logging.DEBUG
        assert child.parent is logger

    def test_global_logger(self):
        init_logging(verbose=True)
        assert get_global_logger().level == logging.INFO


class TestSubprocessLogging:

    def test_log_subprocess_call(self, caplog):
        result = Mock()
        result.returncode = 0
        result.stdout = "Screen 0: minimum 8 x 8"
        result.stderr = ""

        logger = setup_logging(debug=True)
        with caplog.at_level(logging.DEBUG, logger="vscreen"):
            log_subprocess_call(["xrandr", "--query"], result, logger)

        assert "Subprocess call: xrandr --query" in caplog.text
        assert "Return code: 0" in caplog.text
        assert "Screen 0" in caplog.text

    def test_log_subprocess_with_stderr(self, caplog):
        result = Mock()
        result.returncode = 1
        result.stdout = b""
        result.stderr = b"BadMatch"

        logger = setup_logging(debug=True)
        with caplog.at_level(logging.DEBUG, logger="vscreen"):
            log_subprocess_call(["xrandr", "--rmmode", "x"], result, logger)

        assert "stderr: BadMatch" in caplog.text


class TestTiming:

    def test_log_timing(self, caplog):
        logger = setup_logging(verbose=True)
        with caplog.at_level(logging.INFO, logger="vscreen"):
            with log_timing("--off-all", logger):
                pass

        assert "Starting: --off-all" in caplog.text
        assert "--off-all completed in" in caplog.text


class TestColoredFormatter:

    def test_level_name_is_colored_and_restored(self):
        formatter = ColoredFormatter("%(levelname)s: %(message)s")
        record = logging.LogRecord("vscreen", logging.ERROR, __file__, 1, "boom", None, None)

        text = formatter.format(record)

        assert "\033[31mERROR\033[0m" in text
        assert record.levelname == "ERROR"
