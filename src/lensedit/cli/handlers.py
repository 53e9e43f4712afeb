"""
Error handling for the CLI.

Maps library exceptions to exit codes and user-facing messages so command
bodies stay free of try/except for known errors.
"""

import sys
from collections.abc import Callable

import click

from lensedit import (
    ConfigurationError,
    GenerationError,
    LensEditError,
    ReadError,
    ValidationError,
)
from lensedit.cli import progress
from lensedit.cli.utils import EXIT_GENERATION_FAILED, EXIT_VALIDATION_OR_CONFIG


def map_exception_to_exit(exc: BaseException) -> tuple[int, str]:
    """Map library and known exceptions to (exit_code, user_message)."""
    if isinstance(exc, ValidationError):
        msg = exc.args[0] if exc.args else "Validation failed."
        if getattr(exc, "field", None):
            msg = f"{msg} (field: {exc.field})"
        return (EXIT_VALIDATION_OR_CONFIG, msg)
    if isinstance(exc, ConfigurationError):
        return (EXIT_VALIDATION_OR_CONFIG, exc.args[0] if exc.args else "Invalid configuration.")
    if isinstance(exc, ReadError):
        return (EXIT_VALIDATION_OR_CONFIG, exc.args[0] if exc.args else "Could not read image.")
    if isinstance(exc, (GenerationError, LensEditError)):
        return (EXIT_GENERATION_FAILED, exc.args[0] if exc.args else "Failed to generate image.")
    return (EXIT_GENERATION_FAILED, str(exc) if exc.args else "An unexpected error occurred.")


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
    except LensEditError as e:
        code, msg = map_exception_to_exit(e)
        if quiet:
            click.echo(msg, err=True)
        else:
            progress.print_error(msg)
        sys.exit(code)
    except Exception as e:
        if debug:
            raise
        code, msg = map_exception_to_exit(e)
        if quiet:
            click.echo(msg, err=True)
        else:
            progress.print_error(msg)
        sys.exit(code)


__all__ = [
    "map_exception_to_exit",
    "run_with_error_handling",
]
