"""
Encoding of input images for the generation request.

An image resource is whatever the file provider hands over: bytes plus the
media type it declared. encode_image reads it to completion in a worker thread
and returns the base64 text the API expects. The media type is passed through
verbatim; content is never sniffed.
"""

import asyncio
import base64
import mimetypes
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from lensedit.logging_config import get_logger
from lensedit.utils.exceptions import ReadError

logger = get_logger(__name__)


class ImageResource(Protocol):
    """A raw binary image with a declared media type."""

    @property
    def media_type(self) -> str:
        """Declared media type, e.g. 'image/jpeg'. Read-only."""
        ...

    def read(self) -> bytes:
        """Return the full content. May block; may raise OSError."""
        ...


@dataclass(frozen=True)
class ImageBytes:
    """In-memory image resource."""

    data: bytes
    media_type: str

    def read(self) -> bytes:
        return self.data


@dataclass(frozen=True)
class ImageFile:
    """Image resource backed by a file on disk.

    The declared type comes from the filename, as a browser does for a picked
    file. Pass media_type to override it.
    """

    path: Path
    media_type: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "path", Path(self.path))
        if not self.media_type:
            guessed, _ = mimetypes.guess_type(self.path.name)
            object.__setattr__(self, "media_type", guessed or "")

    @property
    def name(self) -> str:
        return self.path.name

    def read(self) -> bytes:
        return self.path.read_bytes()


@dataclass(frozen=True)
class EncodedPart:
    """Base64 image content plus MIME type, as sent inline to the API."""

    data: str
    mime_type: str

    def to_payload(self) -> dict[str, dict[str, str]]:
        """Return the inlineData request part."""
        return {"inlineData": {"data": self.data, "mimeType": self.mime_type}}


def _read_and_encode(resource: ImageResource) -> EncodedPart:
    media_type = resource.media_type
    try:
        raw = resource.read()
    except OSError as e:
        raise ReadError(f"Failed to read file: {e}", media_type=media_type) from e
    if not isinstance(raw, (bytes, bytearray, memoryview)):
        raise ReadError("Failed to read file", media_type=media_type)
    data = base64.b64encode(bytes(raw)).decode("ascii")
    logger.debug("Encoded image media_type=%s bytes=%d", media_type, len(raw))
    return EncodedPart(data=data, mime_type=media_type)


async def encode_image(resource: ImageResource) -> EncodedPart:
    """
    Read an image resource to completion and base64-encode it.

    Args:
        resource: Bytes provider with a declared media type

    Returns:
        EncodedPart with the base64 content and the declared media type

    Raises:
        ReadError: If the read fails or does not produce bytes
    """
    return await asyncio.to_thread(_read_and_encode, resource)


__all__ = [
    "EncodedPart",
    "ImageBytes",
    "ImageFile",
    "ImageResource",
    "encode_image",
]
