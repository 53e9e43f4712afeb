"""
lensedit - AI image editing with Gemini

Upload an image, describe an edit, and get back the edited image from the
Gemini image model (gemini-2.5-flash-image).

Library usage:
- encode_image() turns an image resource (ImageFile, ImageBytes) into the
  base64 part sent to the API; edit_image() / GeminiClient.generate() send it
  with an instruction and return Success or Failure, never raising.
- SessionController wraps both in a small state machine (idle, processing,
  success, error) with subscribe() for state change notifications.
- Configuration can be passed per client (GeminiClient(config)) or via the
  shared config: get_config() / set_config().
- Logging: set_verbosity(0|1|2) or configure_logging(verbose_level, quiet);
  LENSEDIT_VERBOSITY env (0/1/2) is read when the CLI or UI runs.
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("lensedit")
except PackageNotFoundError:
    # Package is not installed (e.g., running from source in development)
    __version__ = "0.0.0.dev"

from lensedit.core.client import GeminiClient, edit_image
from lensedit.core.config import (
    DEFAULT_GEMINI_BASE_URL,
    IMAGE_EDIT_MODEL,
    Config,
    get_config,
    set_config,
)
from lensedit.core.encoder import EncodedPart, ImageBytes, ImageFile, encode_image
from lensedit.core.outcome import Failure, GenerationOutcome, Success
from lensedit.core.presets import Preset, get_preset, list_presets
from lensedit.core.preview import PreviewHandle
from lensedit.core.session import InputImage, SessionController, SessionPhase, SessionState
from lensedit.logging_config import configure_logging, set_verbosity
from lensedit.utils.data_url import decode_data_url, download_filename, is_image_media_type
from lensedit.utils.exceptions import (
    APIError,
    ConfigurationError,
    EmptyResponseError,
    GenerationError,
    LensEditError,
    ModelRefusalError,
    NetworkError,
    ReadError,
    RequestTimeoutError,
    TransportError,
    ValidationError,
)

__all__ = [
    "APIError",
    "Config",
    "ConfigurationError",
    "DEFAULT_GEMINI_BASE_URL",
    "EmptyResponseError",
    "EncodedPart",
    "Failure",
    "GeminiClient",
    "GenerationError",
    "GenerationOutcome",
    "IMAGE_EDIT_MODEL",
    "ImageBytes",
    "ImageFile",
    "InputImage",
    "LensEditError",
    "ModelRefusalError",
    "NetworkError",
    "Preset",
    "PreviewHandle",
    "ReadError",
    "RequestTimeoutError",
    "SessionController",
    "SessionPhase",
    "SessionState",
    "Success",
    "TransportError",
    "ValidationError",
    "configure_logging",
    "decode_data_url",
    "download_filename",
    "edit_image",
    "encode_image",
    "get_config",
    "get_preset",
    "is_image_media_type",
    "list_presets",
    "set_config",
    "set_verbosity",
]
