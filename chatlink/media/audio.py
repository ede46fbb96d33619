"""Audio decoding and PCM16 WAV encoding.

Decoding goes through PyAV so any container FFmpeg understands (m4a/AAC in
practice) can be turned into canonical 16-bit little-endian WAV.
"""

from __future__ import annotations

import asyncio
import io
import logging
import struct
import sys
from array import array
from dataclasses import dataclass
from dataclasses import field

logger = logging.getLogger(__name__)

WAV_HEADER = struct.Struct("<4sI4s4sIHHIIHH4sI")
BITS_PER_SAMPLE = 16


@dataclass
class DecodedAudio:
    """Planar float samples in [-1, 1] (values outside are clamped on encode).

    Attributes:
        sample_rate: Frames per second.
        channels: One sample array per channel, all the same length.
    """

    sample_rate: int
    channels: list[array] = field(default_factory=list)

    @property
    def num_channels(self) -> int:
        return len(self.channels)

    @property
    def num_frames(self) -> int:
        return len(self.channels[0]) if self.channels else 0


def decode_audio(data: bytes) -> DecodedAudio:
    """Decode an audio file into planar float samples.

    Raises:
        ValueError: If the data holds no audio stream.
        av.error.FFmpegError: If FFmpeg cannot decode the data.
    """
    import av

    with av.open(io.BytesIO(data)) as container:
        if not container.streams.audio:
            raise ValueError("No audio stream found")
        stream = container.streams.audio[0]
        num_channels = len(stream.layout.channels) or 1
        sample_rate = stream.codec_context.sample_rate or stream.rate
        resampler = av.AudioResampler(format="fltp", layout=stream.layout, rate=sample_rate)

        channels = [array("f") for _ in range(num_channels)]

        def collect(frames) -> None:
            for resampled in frames:
                for index, plane in enumerate(resampled.planes[:num_channels]):
                    samples = array("f")
                    samples.frombytes(bytes(plane)[: resampled.samples * samples.itemsize])
                    channels[index].extend(samples)

        for frame in container.decode(stream):
            collect(resampler.resample(frame))
        # Flush samples buffered inside the resampler
        collect(resampler.resample(None))

    logger.debug(
        f"Decoded audio: {num_channels} channel(s), {sample_rate} Hz, "
        f"{len(channels[0])} frames"
    )
    return DecodedAudio(sample_rate=sample_rate, channels=channels)


def _to_pcm16(sample: float) -> int:
    sample = max(-1.0, min(1.0, sample))
    return int(sample * 0x8000) if sample < 0 else int(sample * 0x7FFF)


def encode_wav_pcm16(audio: DecodedAudio) -> bytes:
    """Write interleaved 16-bit PCM behind a 44-byte RIFF/WAVE header."""
    num_channels = audio.num_channels
    block_align = num_channels * BITS_PER_SAMPLE // 8
    data_size = audio.num_frames * block_align

    header = WAV_HEADER.pack(
        b"RIFF",
        36 + data_size,
        b"WAVE",
        b"fmt ",
        16,  # fmt chunk size
        1,  # PCM
        num_channels,
        audio.sample_rate,
        audio.sample_rate * block_align,
        block_align,
        BITS_PER_SAMPLE,
        b"data",
        data_size,
    )

    pcm = array("h")
    for frame in range(audio.num_frames):
        for channel in audio.channels:
            pcm.append(_to_pcm16(channel[frame]))
    if sys.byteorder == "big":
        pcm.byteswap()

    return header + pcm.tobytes()


async def transcode_to_wav(data: bytes) -> bytes:
    """Decode and re-encode as PCM16 WAV without blocking the event loop."""

    def _transcode() -> bytes:
        return encode_wav_pcm16(decode_audio(data))

    return await asyncio.to_thread(_transcode)
