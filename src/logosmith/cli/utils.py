"""
Exit codes and small helpers shared by CLI commands.
"""

import json
from typing import Any

# Exit codes (130 = common for SIGINT)
EXIT_SUCCESS = 0
EXIT_OPERATION_FAILED = 1
EXIT_VALIDATION_OR_CONFIG = 2
EXIT_NOT_FOUND = 3
EXIT_CANCELLED = 130


def to_json(data: Any) -> str:
    """Stable, human-readable JSON for stdout."""
    return json.dumps(data, indent=2, sort_keys=True, default=str)


__all__ = [
    "EXIT_SUCCESS",
    "EXIT_OPERATION_FAILED",
    "EXIT_VALIDATION_OR_CONFIG",
    "EXIT_NOT_FOUND",
    "EXIT_CANCELLED",
    "to_json",
]
