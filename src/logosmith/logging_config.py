"""
Logging for logosmith.

Every module logs under the ``logosmith`` logger tree. Nothing is printed until
configure_logging() or set_verbosity() is called, so applications embedding the
library keep full control of their own logging setup.

Verbosity:
    0  INFO: which tier served each operation, fallbacks, timings
    1  as 0, plus the instruction text sent to remote backends
    2  DEBUG: as 1, plus HTTP status and timing, cache hits, raster transforms

The CLI reads LOGOSMITH_VERBOSITY; its -v/-q flags take precedence.
"""

import logging
import os
import sys

ROOT_LOGGER_NAME = "logosmith"
VERBOSITY_ENV = "LOGOSMITH_VERBOSITY"
LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"
DATE_FORMAT = "%H:%M:%S"
# Instruction text longer than this is cut when logged
PROMPT_LOG_MAX = 50_000

# verbosity -> (logger level, whether instruction text is logged)
VERBOSITY_LEVELS: dict[int, tuple[int, bool]] = {
    0: (logging.INFO, False),
    1: (logging.INFO, True),
    2: (logging.DEBUG, True),
}

_instructions_logged = False


class _StderrHandler(logging.StreamHandler):
    """Stream handler bound to sys.stderr at emit time rather than at creation."""

    def __init__(self) -> None:
        super().__init__(sys.stderr)

    @property
    def stream(self):  # type: ignore[override]
        return sys.stderr

    @stream.setter
    def stream(self, value) -> None:
        pass


def _root() -> logging.Logger:
    root = logging.getLogger(ROOT_LOGGER_NAME)
    if not any(isinstance(h, _StderrHandler) for h in root.handlers):
        handler = _StderrHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
        root.addHandler(handler)
    return root


def set_verbosity(level: int) -> None:
    """Apply verbosity 0, 1 or 2; values outside that range are clamped."""
    global _instructions_logged
    logger_level, _instructions_logged = VERBOSITY_LEVELS[min(max(level, 0), 2)]
    _root().setLevel(logger_level)


def configure_logging(verbose_level: int = 0, quiet: bool = False) -> None:
    """Quiet keeps only fallback warnings and errors; otherwise see set_verbosity."""
    global _instructions_logged
    if quiet:
        _root().setLevel(logging.WARNING)
        _instructions_logged = False
        return
    set_verbosity(verbose_level)


def instructions_logged() -> bool:
    return _instructions_logged


def get_verbosity_from_env() -> int:
    """LOGOSMITH_VERBOSITY as 0, 1 or 2; anything else counts as 0."""
    raw = os.environ.get(VERBOSITY_ENV, "").strip()
    level = int(raw) if raw.isdigit() else 0
    return level if level in VERBOSITY_LEVELS else 0


def get_logger(name: str) -> logging.Logger:
    """Logger under the logosmith tree; bare module names are prefixed."""
    if name == ROOT_LOGGER_NAME or name.startswith(ROOT_LOGGER_NAME + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


def log_instruction(logger: logging.Logger, label: str, text: str) -> None:
    """Instruction text at INFO, only from verbosity 1 up."""
    if not _instructions_logged:
        return
    if len(text) > PROMPT_LOG_MAX:
        text = text[:PROMPT_LOG_MAX] + "..."
    logger.info("%s: %s", label, text)


def log_tier_served(
    logger: logging.Logger, operation: str, tier: str, filename: str, elapsed: float
) -> None:
    logger.info("%s served by %s tier in %.2fs filename=%s", operation, tier, elapsed, filename)


def log_tier_fallback(
    logger: logging.Logger, operation: str, tier: str, elapsed: float, error: BaseException
) -> None:
    """A non-final tier failed; the next tier will be tried."""
    logger.warning(
        "%s tier failed for %s after %.2fs, falling back: %s", tier, operation, elapsed, error
    )


def log_tier_failed(
    logger: logging.Logger, operation: str, tier: str, error: BaseException
) -> None:
    logger.error("%s failed on final tier %s: %s", operation, tier, error)


__all__ = [
    "VERBOSITY_LEVELS",
    "configure_logging",
    "get_logger",
    "get_verbosity_from_env",
    "instructions_logged",
    "log_instruction",
    "log_tier_failed",
    "log_tier_fallback",
    "log_tier_served",
    "set_verbosity",
]
