"""Media attachments: classification, encoding and audio transcoding."""

from .audio import DecodedAudio
from .audio import decode_audio
from .audio import encode_wav_pcm16
from .audio import transcode_to_wav
from .classify import AUDIO_EXTENSIONS
from .classify import IMAGE_EXTENSIONS
from .classify import MediaKind
from .classify import classify_extension
from .classify import encode_audio
from .classify import encode_image
from .classify import image_mime_type
from .classify import to_data_uri

__all__ = [
    "DecodedAudio",
    "decode_audio",
    "encode_wav_pcm16",
    "transcode_to_wav",
    "AUDIO_EXTENSIONS",
    "IMAGE_EXTENSIONS",
    "MediaKind",
    "classify_extension",
    "encode_audio",
    "encode_image",
    "image_mime_type",
    "to_data_uri",
]
