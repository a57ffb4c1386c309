from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Literal

import numpy as np

SampleFormat = Literal["pcm16"]

DEFAULT_SAMPLE_RATE_HZ = 24000
DEFAULT_CHANNELS = 1
PCM16_BYTES_PER_SAMPLE = 2
WAV_MIME_TYPE = "audio/wav"


@dataclass(frozen=True)
class AudioFormat:
    """Describes raw PCM audio."""

    sample_rate_hz: int = DEFAULT_SAMPLE_RATE_HZ
    channels: int = DEFAULT_CHANNELS
    sample_format: SampleFormat = "pcm16"

    def bytes_per_sample(self) -> int:
        """Return bytes per sample (PCM16 = 2)."""
        return PCM16_BYTES_PER_SAMPLE

    def bytes_per_frame(self) -> int:
        """Return bytes per frame = bytes_per_sample * channels."""
        return self.bytes_per_sample() * self.channels

    def byte_rate(self) -> int:
        return self.sample_rate_hz * self.bytes_per_frame()


@dataclass
class AudioBuffer:
    """Playback-ready audio: one normalized float32 array per channel."""

    sample_rate: int
    channel_data: List[np.ndarray] = field(default_factory=list)

    @property
    def number_of_channels(self) -> int:
        return len(self.channel_data)

    @property
    def length(self) -> int:
        """Frame count."""
        if not self.channel_data:
            return 0
        return int(self.channel_data[0].shape[0])

    @property
    def duration_s(self) -> float:
        if self.sample_rate <= 0:
            return 0.0
        return self.length / self.sample_rate

    def get_channel_data(self, channel: int) -> np.ndarray:
        """Return the writable sample array for ``channel``."""
        if channel < 0 or channel >= self.number_of_channels:
            raise IndexError(f"Channel {channel} out of range (buffer has {self.number_of_channels})")
        return self.channel_data[channel]

    def to_interleaved(self) -> np.ndarray:
        """Return a (frames, channels) float32 array, the layout audio devices expect."""
        if not self.channel_data:
            return np.zeros((0, 0), dtype=np.float32)
        return np.stack(self.channel_data, axis=1)


@dataclass(frozen=True)
class WavBlob:
    """An encoded WAV file held in memory."""

    data: bytes
    mime_type: str = WAV_MIME_TYPE

    @property
    def size(self) -> int:
        return len(self.data)

    def __len__(self) -> int:
        return len(self.data)

    def __bytes__(self) -> bytes:
        return self.data
