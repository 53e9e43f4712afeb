"""
Image editing via the Gemini generateContent API.

This module sends an encoded image plus an edit instruction to the fixed
image-editing model and turns whatever comes back into a GenerationOutcome.
GeminiClient.generate never raises: transport faults, malformed bodies, text
refusals and empty responses all end up as a Failure carrying a message.
"""

import asyncio
import json
import time
from typing import Any

import requests

from lensedit.core.config import Config, get_config
from lensedit.core.encoder import EncodedPart
from lensedit.core.outcome import Failure, GenerationOutcome, Success
from lensedit.core.response import ContentPart, ImagePart, TextPart, first_candidate_parts
from lensedit.logging_config import get_logger, instruction_for_log, log_prompts
from lensedit.utils.data_url import build_data_url
from lensedit.utils.exceptions import (
    APIError,
    ConfigurationError,
    EmptyResponseError,
    ModelRefusalError,
    NetworkError,
    RequestTimeoutError,
)

logger = get_logger(__name__)

FALLBACK_FAILURE_MESSAGE = "Failed to generate image."
NO_IMAGE_MESSAGE = "No image data received from Gemini."
REFUSAL_PREVIEW_CHARS = 100

_DEBUG_TRUNCATE_THRESHOLD = 200
_DEBUG_NEVER_TRUNCATE_KEYS = frozenset({"text", "message"})


def _truncate_image_data_for_log(obj: Any, parent_key: str | None = None) -> Any:
    """Recursively replace long base64 strings with placeholders for safe logging."""
    if isinstance(obj, dict):
        return {k: _truncate_image_data_for_log(v, k) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_truncate_image_data_for_log(v, None) for v in obj]
    if isinstance(obj, str) and len(obj) >= _DEBUG_TRUNCATE_THRESHOLD:
        if parent_key in _DEBUG_NEVER_TRUNCATE_KEYS:
            return obj
        return f"<string, {len(obj)} chars>"
    return obj


def _error_detail(response: requests.Response) -> str:
    """Return error.message from a Gemini error body, else the raw text."""
    try:
        body = response.json()
    except ValueError:
        return response.text
    if isinstance(body, dict) and isinstance(body.get("error"), dict):
        return str(body["error"].get("message") or response.text)
    return response.text


def interpret_parts(parts: list[ContentPart]) -> Success:
    """
    Pick the edited image out of the first candidate's parts.

    The first ImagePart wins. Without one, the first TextPart means the model
    declined or redirected the request.

    Raises:
        ModelRefusalError: If the parts hold text but no image
        EmptyResponseError: If the parts hold neither
    """
    for part in parts:
        if isinstance(part, ImagePart):
            return Success(result_image=build_data_url(part.data, part.mime_type))
    for part in parts:
        if isinstance(part, TextPart):
            raise ModelRefusalError(
                "The model returned text instead of an image: "
                f'"{part.text[:REFUSAL_PREVIEW_CHARS]}..."',
                text=part.text,
            )
    raise EmptyResponseError(NO_IMAGE_MESSAGE)


class GeminiClient:
    """Client for the Gemini image-editing model."""

    def __init__(self, config: Config | None = None) -> None:
        self._config = config

    @property
    def config(self) -> Config:
        return self._config or get_config()

    @property
    def model(self) -> str:
        return self.config.image_model

    def _build_payload(self, image: EncodedPart, instruction: str) -> dict[str, Any]:
        """Build generateContent payload: image part first, instruction second."""
        return {
            "contents": {
                "parts": [
                    image.to_payload(),
                    {"text": instruction},
                ]
            }
        }

    def _url(self, config: Config) -> str:
        return f"{config.gemini_base_url.rstrip('/')}/models/{config.image_model}:generateContent"

    def _check_status(self, response: requests.Response) -> None:
        """Map non-200 status codes to APIError."""
        status = response.status_code
        if status == 200:
            return
        if status in (401, 403):
            raise APIError(
                "Authentication failed. Please check your Gemini API key.",
                status_code=status,
                response=response.text,
            )
        if status == 404:
            raise APIError(
                f"Model not found or endpoint unavailable: {self.model}",
                status_code=404,
                response=response.text,
            )
        if status == 429:
            raise APIError(
                "Rate limit exceeded. Please wait before making more requests.",
                status_code=429,
                response=response.text,
            )
        if status >= 500:
            raise APIError(
                f"Gemini service error: {status}",
                status_code=status,
                response=response.text,
            )
        raise APIError(
            f"API request failed with status {status}: {_error_detail(response)}",
            status_code=status,
            response=response.text,
        )

    def _do_request(
        self,
        url: str,
        headers: dict[str, str],
        payload: dict[str, Any],
        timeout: int,
        debug: bool,
    ) -> list[ContentPart]:
        """Perform HTTP POST and return the first candidate's parts."""
        logger.debug("API request url=%s model=%s timeout=%s", url, self.model, timeout)
        if debug:
            logger.info(
                "API request payload (image data truncated): %s",
                json.dumps(_truncate_image_data_for_log(payload), indent=2, default=str),
            )
        start_time = time.time()
        response = requests.post(url, headers=headers, json=payload, timeout=timeout)
        elapsed = time.time() - start_time
        logger.debug(
            "API response status=%s content_type=%s time=%.2fs",
            response.status_code,
            response.headers.get("content-type", ""),
            elapsed,
        )
        self._check_status(response)

        try:
            body = response.json()
        except ValueError as e:
            raise APIError(
                f"Failed to parse API response as JSON: {str(e)}",
                response=response.text,
            ) from e
        if debug:
            logger.info(
                "API response (image data truncated): %s",
                json.dumps(_truncate_image_data_for_log(body), indent=2, default=str),
            )
        return first_candidate_parts(body)

    def _generate_sync(self, image: EncodedPart, instruction: str) -> Success:
        config = self.config
        if not config.gemini_api_key:
            raise ConfigurationError(
                "Gemini API key is required. Set GEMINI_API_KEY or provide it via config."
            )
        url = self._url(config)
        headers = {
            "x-goog-api-key": config.gemini_api_key,
            "Content-Type": "application/json",
        }
        payload = self._build_payload(image, instruction)

        logger.info("Editing image model=%s mime_type=%s", config.image_model, image.mime_type)
        if log_prompts():
            logger.info("Instruction: %s", instruction_for_log(instruction))

        start_time = time.time()
        try:
            parts = self._do_request(
                url, headers, payload, config.generation_timeout, config.debug_api
            )
        except requests.exceptions.Timeout as e:
            raise RequestTimeoutError(
                f"Request timed out after {config.generation_timeout} seconds. "
                "The edit may be taking longer than expected."
            ) from e
        except requests.exceptions.ConnectionError as e:
            raise NetworkError(
                "Failed to connect to the Gemini API. Please check your internet connection.",
                original_error=e,
            ) from e
        except requests.exceptions.RequestException as e:
            raise NetworkError(
                f"Network error during API request: {str(e)}", original_error=e
            ) from e

        result = interpret_parts(parts)
        logger.info("Edited in %.1fs model=%s", time.time() - start_time, config.image_model)
        return result

    async def generate(self, image: EncodedPart, instruction: str) -> GenerationOutcome:
        """
        Send an image and an edit instruction to the model.

        Args:
            image: Encoded input image
            instruction: Free-form edit instruction

        Returns:
            Success with a data URL, or Failure with a human-readable message.
            Never raises.
        """
        try:
            return await asyncio.to_thread(self._generate_sync, image, instruction)
        except Exception as e:
            message = str(e) or FALLBACK_FAILURE_MESSAGE
            logger.error("Gemini API error (%s): %s", type(e).__name__, message)
            return Failure(message=message, error=e)


async def edit_image(
    image: EncodedPart,
    instruction: str,
    config: Config | None = None,
) -> GenerationOutcome:
    """
    Edit an image with the Gemini image model.

    Args:
        image: Encoded input image
        instruction: Edit instruction
        config: Optional config; if None, uses shared config from get_config()

    Returns:
        Success or Failure; never raises
    """
    return await GeminiClient(config).generate(image, instruction)


__all__ = [
    "FALLBACK_FAILURE_MESSAGE",
    "GeminiClient",
    "NO_IMAGE_MESSAGE",
    "edit_image",
    "interpret_parts",
]
