"""
Configuration management for lensedit.

This module handles the Gemini API key, endpoint, and request settings.
The image-editing model is a fixed constant and cannot be overridden.
"""

import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

from lensedit.logging_config import get_logger
from lensedit.utils.exceptions import ConfigurationError

logger = get_logger(__name__)

# Load environment variables from .env file
load_dotenv()

DEFAULT_GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
IMAGE_EDIT_MODEL = "gemini-2.5-flash-image"
DEFAULT_GENERATION_TIMEOUT = 120


@dataclass
class Config:
    """Configuration for lensedit."""

    # API Configuration (gemini_api_key excluded from repr to avoid leaking secrets)
    gemini_api_key: str = field(default="", repr=False)
    gemini_base_url: str = DEFAULT_GEMINI_BASE_URL

    # Model that accepts an image plus instruction and answers with an image
    image_model: str = field(default=IMAGE_EDIT_MODEL, init=False)

    # Timeout Configuration (seconds)
    generation_timeout: int = DEFAULT_GENERATION_TIMEOUT

    # Debug: log raw API payload/response with image data truncated
    debug_api: bool = False

    _validated: bool = field(default=False, repr=False)

    @classmethod
    def from_env(cls) -> "Config":
        """
        Create a Config instance from environment variables.

        Environment variables:
            GEMINI_API_KEY: Required for image editing (API_KEY is accepted as a fallback)
            LENSEDIT_GEMINI_BASE_URL: Optional API base URL
            LENSEDIT_TIMEOUT: Optional request timeout in seconds (default 120)
            LENSEDIT_DEBUG_API: Optional; 1/true/yes logs truncated request/response bodies

        Returns:
            Config instance populated from environment
        """
        api_key = os.getenv("GEMINI_API_KEY") or os.getenv("API_KEY") or ""

        def _int_env(name: str, default: int) -> int:
            val = os.getenv(name)
            if val is None or val == "":
                return default
            try:
                return int(val)
            except ValueError as e:
                raise ConfigurationError(f"{name} must be an integer, got {val!r}.") from e

        debug_api = os.getenv("LENSEDIT_DEBUG_API", "").strip().lower() in ("1", "true", "yes")

        return cls(
            gemini_api_key=api_key.strip(),
            gemini_base_url=os.getenv("LENSEDIT_GEMINI_BASE_URL") or DEFAULT_GEMINI_BASE_URL,
            generation_timeout=_int_env("LENSEDIT_TIMEOUT", DEFAULT_GENERATION_TIMEOUT),
            debug_api=debug_api,
        )

    def validate(self) -> None:
        """
        Validate the configuration.

        Raises:
            ConfigurationError: If configuration is invalid
        """
        logger.debug("Validating config")

        if not self.gemini_api_key:
            raise ConfigurationError(
                "Gemini API key is required. "
                "Set GEMINI_API_KEY environment variable or provide it explicitly."
            )
        if self.generation_timeout <= 0:
            raise ConfigurationError(
                f"generation_timeout must be positive, got {self.generation_timeout}."
            )
        if not self.gemini_base_url.startswith(("http://", "https://")):
            raise ConfigurationError(
                f"gemini_base_url must be an http(s) URL, got {self.gemini_base_url!r}."
            )

        self._validated = True

    def is_valid(self) -> bool:
        """Return True if validate() has been called successfully."""
        return self._validated

    def set_api_key(self, api_key: str) -> None:
        """
        Set the Gemini API key.

        Args:
            api_key: The API key to use

        Raises:
            ConfigurationError: If API key is empty
        """
        if not api_key or not api_key.strip():
            raise ConfigurationError("API key cannot be empty")

        self.gemini_api_key = api_key.strip()
        self._validated = False  # Need to revalidate


# Global configuration instance
_global_config: Config | None = None


def get_config() -> Config:
    """
    Get the global configuration instance.

    Returns:
        The global Config instance
    """
    global _global_config
    if _global_config is None:
        _global_config = Config.from_env()
    return _global_config


def set_config(config: Config) -> None:
    """
    Set the global configuration instance.

    Args:
        config: The Config instance to use globally
    """
    global _global_config
    _global_config = config
