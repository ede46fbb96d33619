"""Attachment classification and encoding into content parts."""

from __future__ import annotations

import base64
from enum import Enum

from chatlink.content import ImageUrl
from chatlink.content import ImageUrlPart
from chatlink.content import InputAudio
from chatlink.content import InputAudioPart

from .audio import transcode_to_wav

IMAGE_EXTENSIONS = frozenset({"png", "jpg", "jpeg", "gif", "webp"})
AUDIO_EXTENSIONS = frozenset({"mp3", "wav", "m4a"})

# Formats accepted as-is by chat-completions input_audio
NATIVE_AUDIO_FORMATS = frozenset({"mp3", "wav"})

IMAGE_MIME_TYPES = {
    "png": "image/png",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "gif": "image/gif",
    "webp": "image/webp",
}


class MediaKind(str, Enum):
    IMAGE = "image"
    AUDIO = "audio"
    OTHER = "other"


def classify_extension(extension: str) -> MediaKind:
    """Classify a file extension (with or without leading dot, any case)."""
    ext = extension.lstrip(".").lower()
    if ext in IMAGE_EXTENSIONS:
        return MediaKind.IMAGE
    if ext in AUDIO_EXTENSIONS:
        return MediaKind.AUDIO
    return MediaKind.OTHER


def image_mime_type(extension: str) -> str:
    return IMAGE_MIME_TYPES.get(extension.lstrip(".").lower(), "image/webp")


def to_data_uri(data: bytes, mime: str) -> str:
    return f"data:{mime};base64,{base64.b64encode(data).decode('ascii')}"


def encode_image(data: bytes, extension: str) -> ImageUrlPart:
    """Wrap image bytes in an ``image_url`` part carrying a data URI."""
    url = to_data_uri(data, image_mime_type(extension))
    return ImageUrlPart(image_url=ImageUrl(url=url))


async def encode_audio(data: bytes, extension: str) -> InputAudioPart:
    """Wrap audio bytes in an ``input_audio`` part.

    Formats the completion API does not take directly are transcoded to WAV
    first and reported as ``wav``. The payload is bare base64, no data URI
    prefix.

    Raises:
        ValueError: If the extension is not an audio format.
        av.error.FFmpegError: If transcoding fails.
    """
    ext = extension.lstrip(".").lower()
    if ext not in AUDIO_EXTENSIONS:
        raise ValueError(f"Not an audio extension: {extension}")

    if ext not in NATIVE_AUDIO_FORMATS:
        data = await transcode_to_wav(data)
        ext = "wav"

    return InputAudioPart(
        input_audio=InputAudio(data=base64.b64encode(data).decode("ascii"), format=ext)
    )
