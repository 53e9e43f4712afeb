"""
Logging configuration for lensedit.

Logging is configured lazily so library users who never call set_verbosity or
configure_logging get no output unless they configure logging themselves.

Verbosity levels:
- 0 (default): INFO, activity and timing only
- 1 (info): INFO + instruction text
- 2 (verbose): DEBUG + instruction text, API calls and session transitions

LENSEDIT_VERBOSITY env (0/1/2) is read when the CLI or UI starts; CLI flags
override env.
"""

import logging
import os

LOG_FORMAT = "%(levelname)s [%(name)s] %(message)s"
ROOT_LOGGER_NAME = "lensedit"

# Instructions longer than this are cut when logged
INSTRUCTION_LOG_MAX = 2_000

# verbosity -> (logger level, log instruction text)
_VERBOSITY_LEVELS: dict[int, tuple[int, bool]] = {
    0: (logging.INFO, False),
    1: (logging.INFO, True),
    2: (logging.DEBUG, True),
}

_log_prompts: bool = False


def _root() -> logging.Logger:
    """Return the lensedit root logger, attaching a stderr handler on first use."""
    root = logging.getLogger(ROOT_LOGGER_NAME)
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)
    return root


def set_verbosity(level: int) -> None:
    """
    Set logging verbosity (0=default, 1=info, 2=verbose).

    Values below 0 count as 0 and values above 2 as 2.
    """
    global _log_prompts
    log_level, _log_prompts = _VERBOSITY_LEVELS[max(0, min(level, 2))]
    _root().setLevel(log_level)


def log_prompts() -> bool:
    """Return True if instruction text should be logged (verbosity 1 or 2)."""
    return _log_prompts


def configure_logging(verbose_level: int = 0, quiet: bool = False) -> None:
    """
    Configure logging from CLI, UI or library.

    quiet wins over verbose_level and limits output to warnings and errors.
    """
    global _log_prompts
    if quiet:
        _root().setLevel(logging.WARNING)
        _log_prompts = False
        return
    set_verbosity(verbose_level)


def get_verbosity_from_env() -> int:
    """Read LENSEDIT_VERBOSITY (0, 1, or 2); anything else counts as 0."""
    raw = os.environ.get("LENSEDIT_VERBOSITY", "").strip()
    return int(raw) if raw in ("1", "2") else 0


def instruction_for_log(text: str, limit: int = INSTRUCTION_LOG_MAX) -> str:
    """Return the instruction as it may be logged: single line, cut at limit."""
    flat = " ".join(text.split())
    if len(flat) <= limit:
        return flat
    return f"{flat[:limit]}... <{len(flat)} chars>"


def get_logger(name: str) -> logging.Logger:
    """Return a child logger under lensedit (e.g. lensedit.core.client)."""
    if name == ROOT_LOGGER_NAME or name.startswith(ROOT_LOGGER_NAME + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


__all__ = [
    "configure_logging",
    "get_logger",
    "get_verbosity_from_env",
    "instruction_for_log",
    "log_prompts",
    "set_verbosity",
]
