"""
Load preset edit instructions from the bundled presets.yaml file.

Presets are defined in src/lensedit/presets.yaml and loaded once per process.
"""

import importlib.resources

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from lensedit.utils.exceptions import ConfigurationError, ValidationError


class Preset(BaseModel):
    """A named edit instruction."""

    key: str = Field(..., min_length=1, description="Identifier used by --preset")
    label: str = Field(..., min_length=1, description="Button / list label")
    text: str = Field(..., min_length=1, description="Instruction sent to the model")


class PresetsSchema(BaseModel):
    """Schema for presets.yaml."""

    presets: list[Preset]

    @field_validator("presets")
    @classmethod
    def _unique_keys(cls, value: list[Preset]) -> list[Preset]:
        keys = [p.key for p in value]
        dupes = sorted({k for k in keys if keys.count(k) > 1})
        if dupes:
            raise ValueError(f"duplicate preset keys: {', '.join(dupes)}")
        return value


# Module-level cache for parsed presets
_presets: list[Preset] | None = None


def _load_presets() -> list[Preset]:
    """Load and validate presets.yaml from the package. Cached after first call.

    Raises:
        ConfigurationError: If YAML is missing, malformed, or fails validation.
    """
    global _presets
    if _presets is not None:
        return _presets

    try:
        with (
            importlib.resources.files("lensedit")
            .joinpath("presets.yaml")
            .open(encoding="utf-8") as f
        ):
            raw = f.read()
    except FileNotFoundError as e:
        raise ConfigurationError(
            "presets.yaml not found. This file is required and should be bundled with the package."
        ) from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Failed to parse presets.yaml: {e}.") from e

    if data is None:
        raise ConfigurationError("presets.yaml is empty. Expected a 'presets' list.")

    try:
        schema = PresetsSchema(**data)
    except (PydanticValidationError, TypeError) as e:
        raise ConfigurationError(f"Invalid presets.yaml structure: {e}") from e

    _presets = schema.presets
    return _presets


def list_presets() -> list[Preset]:
    """Return all presets in file order."""
    return list(_load_presets())


def get_preset(key: str) -> Preset:
    """
    Return the preset with the given key.

    Raises:
        ValidationError: If no preset has that key
    """
    for preset in _load_presets():
        if preset.key == key:
            return preset
    known = ", ".join(p.key for p in _load_presets())
    raise ValidationError(f"Unknown preset: {key!r}. Known presets: {known}", field="preset")
