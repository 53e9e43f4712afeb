"""
Data URL helpers for edited images.

The generation client hands results back as data URLs; these helpers build
and unpack them and name the file a result is saved under.
"""

import base64
import binascii
import time

from lensedit.utils.exceptions import ValidationError

DEFAULT_IMAGE_MIME = "image/png"
DOWNLOAD_PREFIX = "gemini-edit"


def is_image_media_type(media_type: str | None) -> bool:
    """Return True if media_type declares an image (starts with 'image/')."""
    return bool(media_type) and media_type.strip().lower().startswith("image/")


def build_data_url(data: str, mime_type: str | None = None) -> str:
    """
    Build a data URL from base64 text and a MIME type.

    Args:
        data: Base64 payload (not decoded or re-encoded)
        mime_type: MIME type; image/png when missing or empty

    Returns:
        data:<mime>;base64,<data>
    """
    return f"data:{mime_type or DEFAULT_IMAGE_MIME};base64,{data}"


def decode_data_url(data_url: str) -> tuple[bytes, str]:
    """
    Split a base64 data URL into raw bytes and its MIME type.

    Raises:
        ValidationError: If the string is not a base64 data URL or the payload is invalid
    """
    data_url = data_url.strip()
    if not data_url.startswith("data:"):
        raise ValidationError("Not a data URL", field="image")
    idx = data_url.find(";base64,")
    if idx == -1:
        raise ValidationError("Data URL missing ;base64, part", field="image")
    try:
        payload = base64.b64decode(data_url[idx + 8 :], validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValidationError(f"Invalid base64 in data URL: {e}", field="image") from e
    mime = data_url[5:idx].strip().lower() or DEFAULT_IMAGE_MIME
    return payload, mime


def extension_for_mime(mime_type: str | None) -> str:
    """Return a file extension for an image MIME type (image/jpeg -> jpg, default png)."""
    if not is_image_media_type(mime_type):
        return "png"
    assert mime_type is not None
    sub = mime_type.split("/", 1)[1].split(";")[0].split("+")[0].strip().lower()
    if sub == "jpeg":
        return "jpg"
    return sub or "png"


def download_filename(mime_type: str = DEFAULT_IMAGE_MIME, now: float | None = None) -> str:
    """Return gemini-edit-<epoch millis>.<ext>, the name a result is saved under."""
    stamp = int((time.time() if now is None else now) * 1000)
    return f"{DOWNLOAD_PREFIX}-{stamp}.{extension_for_mime(mime_type)}"


__all__ = [
    "DEFAULT_IMAGE_MIME",
    "build_data_url",
    "decode_data_url",
    "download_filename",
    "extension_for_mime",
    "is_image_media_type",
]
