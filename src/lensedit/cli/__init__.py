"""
Command-line interface for lensedit.

This package contains the CLI implementation using Click.
Uses only the public API: from lensedit import ...
"""

from lensedit.cli.commands import cli, edit, main, presets, ui

__all__ = ["cli", "edit", "main", "presets", "ui"]
