"""
Utility functions for the CLI.

This module contains helper functions used by CLI commands,
such as output path generation and exit code constants.
"""

from lensedit.utils.data_url import download_filename

# Exit codes
EXIT_SUCCESS = 0
EXIT_GENERATION_FAILED = 1
EXIT_VALIDATION_OR_CONFIG = 2


def default_output_path(mime_type: str) -> str:
    """Return default output path: gemini-edit-<epoch millis>.<ext> in current directory."""
    return download_filename(mime_type)


__all__ = [
    "EXIT_SUCCESS",
    "EXIT_GENERATION_FAILED",
    "EXIT_VALIDATION_OR_CONFIG",
    "default_output_path",
]
