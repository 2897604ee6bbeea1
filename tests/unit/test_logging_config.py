"""Unit tests for logging configuration."""

import io
import logging
import os
import sys
from unittest.mock import patch

import pytest

from logosmith.logging_config import (
    PROMPT_LOG_MAX,
    configure_logging,
    get_logger,
    get_verbosity_from_env,
    instructions_logged,
    log_instruction,
    log_tier_fallback,
    log_tier_served,
    set_verbosity,
)


@pytest.fixture(autouse=True)
def _reset_verbosity():
    yield
    set_verbosity(0)


@pytest.mark.unit
class TestSetVerbosity:
    @pytest.mark.parametrize(
        "level,logger_level,instructions",
        [
            (0, logging.INFO, False),
            (1, logging.INFO, True),
            (2, logging.DEBUG, True),
            (-1, logging.INFO, False),
            (7, logging.DEBUG, True),
        ],
    )
    def test_levels(self, level, logger_level, instructions):
        set_verbosity(level)
        assert logging.getLogger("logosmith").level == logger_level
        assert instructions_logged() is instructions

    def test_single_handler_after_repeated_calls(self):
        set_verbosity(0)
        before = len(logging.getLogger("logosmith").handlers)
        set_verbosity(2)
        configure_logging(quiet=True)
        assert len(logging.getLogger("logosmith").handlers) == before

    def test_handler_writes_to_current_stderr(self):
        set_verbosity(0)
        swapped = io.StringIO()
        with patch.object(sys, "stderr", swapped):
            get_logger("core.storage").warning("disk nearly full")
        assert "disk nearly full" in swapped.getvalue()


@pytest.mark.unit
class TestConfigureLogging:
    def test_quiet_keeps_warnings_only(self):
        configure_logging(verbose_level=1, quiet=True)
        assert logging.getLogger("logosmith").level == logging.WARNING
        assert instructions_logged() is False

    def test_not_quiet_applies_verbosity(self):
        configure_logging(verbose_level=2)
        assert logging.getLogger("logosmith").level == logging.DEBUG


@pytest.mark.unit
class TestVerbosityFromEnv:
    @pytest.mark.parametrize(
        "raw,expected", [("0", 0), ("1", 1), (" 2 ", 2), ("9", 0), ("", 0), ("loud", 0)]
    )
    def test_values(self, raw, expected):
        with patch.dict(os.environ, {"LOGOSMITH_VERBOSITY": raw}):
            assert get_verbosity_from_env() == expected

    def test_missing_is_zero(self):
        with patch.dict(os.environ, {}, clear=True):
            assert get_verbosity_from_env() == 0


@pytest.mark.unit
class TestGetLogger:
    def test_prefixes_module_names(self):
        assert get_logger("core.storage").name == "logosmith.core.storage"

    def test_keeps_qualified_names(self):
        assert get_logger("logosmith.core.raster").name == "logosmith.core.raster"
        assert get_logger("logosmith").name == "logosmith"


@pytest.mark.unit
class TestInstructionLogging:
    def test_silent_at_default_verbosity(self, caplog):
        set_verbosity(0)
        with caplog.at_level(logging.INFO, logger="logosmith"):
            log_instruction(get_logger("test"), "Instruction", "draw a fox")
        assert "draw a fox" not in caplog.text

    def test_logged_at_verbosity_1(self, caplog):
        set_verbosity(1)
        with caplog.at_level(logging.INFO, logger="logosmith"):
            log_instruction(get_logger("test"), "Instruction", "draw a fox")
        assert "Instruction: draw a fox" in caplog.text

    def test_long_text_truncated(self, caplog):
        set_verbosity(1)
        with caplog.at_level(logging.INFO, logger="logosmith"):
            log_instruction(get_logger("test"), "Instruction", "x" * (PROMPT_LOG_MAX + 10))
        assert caplog.records[-1].getMessage().endswith("...")


@pytest.mark.unit
class TestTierLogging:
    def test_served(self, caplog):
        with caplog.at_level(logging.INFO, logger="logosmith"):
            log_tier_served(get_logger("test"), "enhance", "raster", "enhanced-1-2.png", 0.5)
        assert "enhance served by raster tier in 0.50s filename=enhanced-1-2.png" in caplog.text

    def test_fallback_is_a_warning(self, caplog):
        with caplog.at_level(logging.WARNING, logger="logosmith"):
            log_tier_fallback(
                get_logger("test"), "generate_from_text", "remote", 1.0, RuntimeError("quota")
            )
        record = caplog.records[-1]
        assert record.levelno == logging.WARNING
        assert "falling back: quota" in record.getMessage()
