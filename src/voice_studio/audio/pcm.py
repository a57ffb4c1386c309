from __future__ import annotations

from typing import Union

import numpy as np

from .context import AudioContext
from .errors import BufferAllocationError
from .types import DEFAULT_CHANNELS, DEFAULT_SAMPLE_RATE_HZ, PCM16_BYTES_PER_SAMPLE, AudioBuffer

BytesLike = Union[bytes, bytearray, memoryview]

# One-sided scale: -32768 maps to exactly -1.0, 32767 stays just below 1.0.
PCM16_SCALE = 32768.0


def pcm16le_samples(data: BytesLike) -> np.ndarray:
    """
    Assemble signed 16-bit little-endian samples from a byte buffer.

    Each sample is built from its byte pair as ``low | (high << 8)`` and
    sign-extended, so the result does not depend on host byte order.
    A trailing odd byte is ignored.
    """
    sample_count = len(data) // PCM16_BYTES_PER_SAMPLE
    if sample_count == 0:
        return np.zeros(0, dtype=np.int32)

    raw = np.frombuffer(data, dtype=np.uint8, count=sample_count * PCM16_BYTES_PER_SAMPLE).astype(np.int32)
    samples = raw[0::2] | (raw[1::2] << 8)
    return np.where(samples >= 0x8000, samples - 0x10000, samples)


async def decode_audio_data(
    data: BytesLike,
    ctx: AudioContext,
    sample_rate: int = DEFAULT_SAMPLE_RATE_HZ,
    num_channels: int = DEFAULT_CHANNELS,
) -> AudioBuffer:
    """
    Convert raw PCM16LE bytes into a normalized float audio buffer.

    Samples are interleaved frame-major. A trailing partial frame is dropped
    without error. The buffer is allocated by ``ctx`` and each sample is
    written as ``int16 / 32768.0``. ``data`` is never modified.
    """
    if num_channels < 1:
        raise BufferAllocationError(f"Unsupported channel count: {num_channels}")

    samples = pcm16le_samples(data)
    frame_count = samples.shape[0] // num_channels

    buffer = await ctx.create_buffer(num_channels, frame_count, sample_rate)

    frames = samples[: frame_count * num_channels].reshape(frame_count, num_channels)
    for channel in range(num_channels):
        channel_data = buffer.get_channel_data(channel)
        channel_data[:frame_count] = frames[:, channel] / PCM16_SCALE

    return buffer
