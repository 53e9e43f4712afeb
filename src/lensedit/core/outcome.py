"""
Result of one generation attempt.

Exactly one of Success or Failure; the generation client never raises, it
returns one of these.
"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Success:
    """Edited image as a data URL (data:<mime>;base64,<payload>)."""

    result_image: str


@dataclass(frozen=True)
class Failure:
    """Human-readable failure message; error keeps the cause for diagnostics."""

    message: str
    error: Exception | None = field(default=None, compare=False)


GenerationOutcome = Success | Failure

__all__ = ["Failure", "GenerationOutcome", "Success"]
