"""
Typed view of a generateContent response.

The wire format is loosely typed: every field is optional and a part may carry
inline image data, text, or something else entirely. The raw JSON is validated
with pydantic and then narrowed to a closed set of content parts, ImagePart and
TextPart, which is all the generation client needs to reason about.
"""

from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from lensedit.utils.exceptions import APIError


class _InlineData(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    data: str | None = None
    mime_type: str | None = Field(default=None, alias="mimeType")


class _Part(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    inline_data: _InlineData | None = Field(default=None, alias="inlineData")
    text: str | None = None


class _Content(BaseModel):
    model_config = ConfigDict(extra="allow")

    parts: list[_Part] | None = None


class _Candidate(BaseModel):
    model_config = ConfigDict(extra="allow")

    content: _Content | None = None


class GenerateContentResponse(BaseModel):
    """Schema for the parts of a generateContent response that are read."""

    model_config = ConfigDict(extra="allow")

    candidates: list[_Candidate] | None = None


@dataclass(frozen=True)
class ImagePart:
    """Inline image data; mime_type is None when the API omitted it."""

    data: str
    mime_type: str | None = None


@dataclass(frozen=True)
class TextPart:
    text: str


ContentPart = ImagePart | TextPart


def _narrow(part: _Part) -> list[ContentPart]:
    out: list[ContentPart] = []
    if part.inline_data is not None and part.inline_data.data:
        out.append(ImagePart(data=part.inline_data.data, mime_type=part.inline_data.mime_type))
    if part.text:
        out.append(TextPart(text=part.text))
    return out


def first_candidate_parts(body: Any) -> list[ContentPart]:
    """
    Return the content parts of the first candidate, in order.

    Parts with neither image data nor text are dropped. A response with no
    candidates, no content or no parts yields an empty list.

    Raises:
        APIError: If the body does not match the response schema
    """
    try:
        response = GenerateContentResponse.model_validate(body)
    except PydanticValidationError as e:
        raise APIError(
            f"Malformed response from Gemini: {e.error_count()} validation error(s)",
            response=str(body)[:2000],
        ) from e
    if not response.candidates:
        return []
    content = response.candidates[0].content
    if content is None or not content.parts:
        return []
    parts: list[ContentPart] = []
    for raw in content.parts:
        parts.extend(_narrow(raw))
    return parts


__all__ = [
    "ContentPart",
    "GenerateContentResponse",
    "ImagePart",
    "TextPart",
    "first_candidate_parts",
]
