from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

import numpy as np

from .errors import BufferAllocationError
from .types import DEFAULT_SAMPLE_RATE_HZ, AudioBuffer

MIN_SAMPLE_RATE_HZ = 3000
MAX_SAMPLE_RATE_HZ = 768000
MAX_CHANNELS = 32


@runtime_checkable
class AudioContext(Protocol):
    """Allocates audio buffers for the playback subsystem."""

    sample_rate: int

    async def create_buffer(self, number_of_channels: int, length: int, sample_rate: int) -> AudioBuffer:
        ...


@dataclass
class NumpyAudioContext:
    """
    Default audio context backed by numpy arrays.

    Buffers are zero-filled float32 arrays, one per channel. Parameter
    ranges match what browser audio contexts accept, except that a
    zero-length buffer is allowed.
    """

    sample_rate: int = DEFAULT_SAMPLE_RATE_HZ

    def __post_init__(self) -> None:
        self._validate_sample_rate(self.sample_rate)

    async def create_buffer(self, number_of_channels: int, length: int, sample_rate: int) -> AudioBuffer:
        if not 1 <= number_of_channels <= MAX_CHANNELS:
            raise BufferAllocationError(
                f"Unsupported channel count: {number_of_channels} (expected 1..{MAX_CHANNELS})"
            )
        if length < 0:
            raise BufferAllocationError(f"Invalid buffer length: {length}")
        self._validate_sample_rate(sample_rate)

        channels = [np.zeros(length, dtype=np.float32) for _ in range(number_of_channels)]
        return AudioBuffer(sample_rate=sample_rate, channel_data=channels)

    @staticmethod
    def _validate_sample_rate(sample_rate: int) -> None:
        if not MIN_SAMPLE_RATE_HZ <= sample_rate <= MAX_SAMPLE_RATE_HZ:
            raise BufferAllocationError(
                f"Invalid sample rate: {sample_rate} (expected {MIN_SAMPLE_RATE_HZ}..{MAX_SAMPLE_RATE_HZ} Hz)"
            )
