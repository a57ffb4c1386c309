from __future__ import annotations


class AudioDecodeError(ValueError):
    """Raised when a base64 audio payload cannot be decoded."""


class BufferAllocationError(ValueError):
    """Raised when an audio context rejects the requested buffer parameters."""


class PcmAlignmentError(ValueError):
    """Raised by strict encoding when PCM bytes do not end on a frame boundary."""
