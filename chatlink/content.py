"""Pydantic models for resolved message content.

A message body is either plain text or an ordered list of media parts
(text interleaved with images and audio). ``ResolvedContent`` keeps that
distinction explicit so consumers branch on ``kind`` instead of inspecting
Python types. Part models dump to the chat-completions wire format.
"""

from __future__ import annotations

from typing import Annotated
from typing import Any
from typing import Literal
from typing import Union

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field


class TextPart(BaseModel):
    """Plain text content."""

    model_config = ConfigDict(extra="forbid")

    type: Literal["text"] = "text"
    text: str


class ImageUrl(BaseModel):
    """Image reference, always a base64 data URI here."""

    url: str


class ImageUrlPart(BaseModel):
    """Image content."""

    model_config = ConfigDict(extra="forbid")

    type: Literal["image_url"] = "image_url"
    image_url: ImageUrl


class InputAudio(BaseModel):
    """Base64 audio payload (no data URI prefix)."""

    data: str
    format: Literal["wav", "mp3"]


class InputAudioPart(BaseModel):
    """Audio content."""

    model_config = ConfigDict(extra="forbid")

    type: Literal["input_audio"] = "input_audio"
    input_audio: InputAudio


ContentPart = Union[TextPart, ImageUrlPart, InputAudioPart]

MediaPart = Annotated[ContentPart, Field(discriminator="type")]


class ResolvedText(BaseModel):
    """Content that resolved to a single string."""

    kind: Literal["text"] = "text"
    text: str

    def to_payload(self) -> str:
        return self.text

    def as_text(self) -> str:
        return self.text


class ResolvedParts(BaseModel):
    """Content that resolved to an ordered list of media parts."""

    kind: Literal["parts"] = "parts"
    parts: list[MediaPart]

    def to_payload(self) -> list[dict[str, Any]]:
        return [part.model_dump() for part in self.parts]

    def as_text(self) -> str:
        """Join the text parts, dropping binary media."""
        return "\n".join(part.text for part in self.parts if isinstance(part, TextPart))


ResolvedContent = Annotated[
    Union[ResolvedText, ResolvedParts],
    Field(discriminator="kind"),
]


def merge_text_parts(
    parts: list[ContentPart],
) -> list[ContentPart]:
    """Merge runs of adjacent text parts into one part joined by newlines.

    Args:
        parts: Parts in document order.

    Returns:
        New list where no two consecutive parts are both text.
    """
    merged: list[ContentPart] = []
    for part in parts:
        prev = merged[-1] if merged else None
        if isinstance(part, TextPart) and isinstance(prev, TextPart):
            merged[-1] = TextPart(text=f"{prev.text}\n{part.text}")
        else:
            merged.append(part)
    return merged


def collapse_parts(
    parts: list[ContentPart], fallback: str
) -> ResolvedText | ResolvedParts:
    """Pick the simplest representation for a merged part list.

    Args:
        parts: Merged parts.
        fallback: Text to return when there are no parts at all.

    Returns:
        ``ResolvedText`` when the list is empty or a single text part,
        otherwise ``ResolvedParts``.
    """
    if not parts:
        return ResolvedText(text=fallback)
    if len(parts) == 1 and isinstance(parts[0], TextPart):
        return ResolvedText(text=parts[0].text)
    return ResolvedParts(parts=parts)
