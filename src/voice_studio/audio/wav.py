from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import Optional

from .errors import PcmAlignmentError
from .pcm import BytesLike
from .types import PCM16_BYTES_PER_SAMPLE, WavBlob

BITS_PER_SAMPLE = 16
PCM_AUDIO_FORMAT = 1
FMT_CHUNK_SIZE = 16
WAV_HEADER_SIZE = 44

U16_MAX = 0xFFFF
U32_MAX = 0xFFFFFFFF

# RIFF descriptor, "fmt " sub-chunk and "data" sub-chunk header, all little-endian.
_HEADER_STRUCT = struct.Struct("<4sI4s4sIHHIIHH4sI")


class WavFormatError(ValueError):
    """Raised when bytes cannot be read as a canonical PCM WAV header."""


class WavFieldRangeError(WavFormatError):
    """Raised when a header field does not fit its 16- or 32-bit slot."""


@dataclass(frozen=True)
class WavHeader:
    """
    The canonical 44-byte PCM WAV header.

    ``byte_rate`` and ``block_align`` are derived from the other fields unless
    given explicitly. ``parse`` keeps the values stored in the file, so a
    header whose stored fields disagree can be detected with ``is_consistent``.
    """

    sample_rate: int
    num_channels: int
    data_size: int
    bits_per_sample: int = BITS_PER_SAMPLE
    audio_format: int = PCM_AUDIO_FORMAT
    byte_rate: Optional[int] = None
    block_align: Optional[int] = None

    def __post_init__(self) -> None:
        if self.block_align is None:
            object.__setattr__(self, "block_align", self.expected_block_align)
        if self.byte_rate is None:
            object.__setattr__(self, "byte_rate", self.expected_byte_rate)

    @property
    def expected_block_align(self) -> int:
        return self.num_channels * (self.bits_per_sample // 8)

    @property
    def expected_byte_rate(self) -> int:
        return self.sample_rate * self.expected_block_align

    @property
    def is_consistent(self) -> bool:
        return self.byte_rate == self.expected_byte_rate and self.block_align == self.expected_block_align

    @property
    def riff_chunk_size(self) -> int:
        return 36 + self.data_size

    def _check_ranges(self) -> None:
        fields = (
            ("riff chunk size", self.riff_chunk_size, U32_MAX),
            ("audio format", self.audio_format, U16_MAX),
            ("channel count", self.num_channels, U16_MAX),
            ("sample rate", self.sample_rate, U32_MAX),
            ("byte rate", self.byte_rate, U32_MAX),
            ("block align", self.block_align, U16_MAX),
            ("bits per sample", self.bits_per_sample, U16_MAX),
            ("data size", self.data_size, U32_MAX),
        )
        for name, value, limit in fields:
            if not 0 <= value <= limit:
                raise WavFieldRangeError(f"WAV {name} {value} is out of range (0..{limit})")

    def pack(self) -> bytes:
        self._check_ranges()
        return _HEADER_STRUCT.pack(
            b"RIFF",
            self.riff_chunk_size,
            b"WAVE",
            b"fmt ",
            FMT_CHUNK_SIZE,
            self.audio_format,
            self.num_channels,
            self.sample_rate,
            self.byte_rate,
            self.block_align,
            self.bits_per_sample,
            b"data",
            self.data_size,
        )

    @classmethod
    def parse(cls, data: BytesLike) -> "WavHeader":
        """Read the header from the first 44 bytes of ``data``."""
        if len(data) < WAV_HEADER_SIZE:
            raise WavFormatError(f"WAV data too short: {len(data)} bytes (need {WAV_HEADER_SIZE})")

        (
            riff,
            _chunk_size,
            wave,
            fmt_id,
            fmt_size,
            audio_format,
            num_channels,
            sample_rate,
            byte_rate,
            block_align,
            bits_per_sample,
            data_id,
            data_size,
        ) = _HEADER_STRUCT.unpack_from(bytes(data[:WAV_HEADER_SIZE]))

        if riff != b"RIFF" or wave != b"WAVE":
            raise WavFormatError("Missing RIFF/WAVE signature")
        if fmt_id != b"fmt " or fmt_size != FMT_CHUNK_SIZE:
            raise WavFormatError("Unsupported fmt chunk layout")
        if data_id != b"data":
            raise WavFormatError("Missing data chunk at offset 36")

        return cls(
            sample_rate=sample_rate,
            num_channels=num_channels,
            data_size=data_size,
            bits_per_sample=bits_per_sample,
            audio_format=audio_format,
            byte_rate=byte_rate,
            block_align=block_align,
        )


def create_wav_blob(pcm: BytesLike, sample_rate: int, num_channels: int, *, strict: bool = False) -> WavBlob:
    """
    Wrap 16-bit PCM bytes in a RIFF/WAVE container.

    The PCM bytes are copied verbatim after a 44-byte header. By default any
    byte count is accepted, so odd-length input yields a well-formed file with
    a broken last sample. Pass ``strict=True`` to reject input that does not
    end on a frame boundary.

    Raises ``WavFieldRangeError`` when the sample rate, channel count or data
    size cannot be represented in the header.
    """
    data_size = len(pcm)
    if strict:
        frame_bytes = PCM16_BYTES_PER_SAMPLE * num_channels
        if frame_bytes <= 0 or data_size % frame_bytes:
            raise PcmAlignmentError(
                f"PCM length {data_size} is not a multiple of the {frame_bytes}-byte frame size"
            )

    header = WavHeader(sample_rate=sample_rate, num_channels=num_channels, data_size=data_size)
    return WavBlob(header.pack() + bytes(pcm))
