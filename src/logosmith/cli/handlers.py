"""
Error handling for the CLI.

Maps library exceptions to exit codes and user messages so each command body
stays free of try/except for known errors.
"""

import sys
from collections.abc import Callable

import click

from logosmith.cli import progress
from logosmith.cli.utils import (
    EXIT_CANCELLED,
    EXIT_NOT_FOUND,
    EXIT_OPERATION_FAILED,
    EXIT_VALIDATION_OR_CONFIG,
)
from logosmith.utils.exceptions import (
    ConfigurationError,
    LogosmithError,
    NotFoundError,
    OperationError,
    RemoteServiceError,
    ValidationError,
)


def map_exception_to_exit(exc: BaseException) -> tuple[int, str]:
    """Map library and known exceptions to (exit_code, user_message)."""
    if isinstance(exc, ValidationError):
        msg = exc.args[0] if exc.args else "Validation failed."
        if getattr(exc, "field", None):
            msg = f"{msg} (field: {exc.field})"
        return (EXIT_VALIDATION_OR_CONFIG, msg)
    if isinstance(exc, ConfigurationError):
        return (EXIT_VALIDATION_OR_CONFIG, exc.args[0] if exc.args else "Invalid configuration.")
    if isinstance(exc, NotFoundError):
        return (EXIT_NOT_FOUND, exc.args[0] if exc.args else "Not found.")
    if isinstance(exc, KeyboardInterrupt):
        return (EXIT_CANCELLED, "Cancelled.")
    if isinstance(exc, OperationError):
        msg = exc.args[0] if exc.args else "Operation failed."
        if exc.tier:
            msg = f"{msg} (tier: {exc.tier})"
        return (EXIT_OPERATION_FAILED, msg)
    if isinstance(exc, (RemoteServiceError, LogosmithError)):
        return (EXIT_OPERATION_FAILED, exc.args[0] if exc.args else "An error occurred.")
    return (EXIT_OPERATION_FAILED, str(exc) if exc.args else "An unexpected error occurred.")


def run_with_error_handling(
    fn: Callable[[], None],
    *,
    quiet: bool = False,
    debug: bool = False,
) -> None:
    """
    Run fn(); on exception map to exit code and message, print and sys.exit.
    """
    try:
        fn()
    except (LogosmithError, KeyboardInterrupt) as e:
        code, msg = map_exception_to_exit(e)
        if code == EXIT_CANCELLED:
            if not quiet:
                progress.print_warning(msg)
        elif quiet:
            click.echo(msg, err=True)
        else:
            progress.print_error(msg)
        sys.exit(code)
    except Exception as e:
        if debug:
            raise
        _, msg = map_exception_to_exit(e)
        if quiet:
            click.echo(msg, err=True)
        else:
            progress.print_error(msg)
        sys.exit(EXIT_OPERATION_FAILED)


__all__ = ["map_exception_to_exit", "run_with_error_handling"]
