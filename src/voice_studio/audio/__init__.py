from .base64_codec import Base64AudioCodec, decode
from .context import AudioContext, NumpyAudioContext
from .errors import AudioDecodeError, BufferAllocationError, PcmAlignmentError
from .pcm import PCM16_SCALE, decode_audio_data, pcm16le_samples
from .types import (
    DEFAULT_CHANNELS,
    DEFAULT_SAMPLE_RATE_HZ,
    WAV_MIME_TYPE,
    AudioBuffer,
    AudioFormat,
    WavBlob,
)
from .wav import WAV_HEADER_SIZE, WavFieldRangeError, WavFormatError, WavHeader, create_wav_blob

__all__ = [
    "AudioBuffer",
    "AudioContext",
    "AudioDecodeError",
    "AudioFormat",
    "Base64AudioCodec",
    "BufferAllocationError",
    "DEFAULT_CHANNELS",
    "DEFAULT_SAMPLE_RATE_HZ",
    "NumpyAudioContext",
    "PCM16_SCALE",
    "PcmAlignmentError",
    "WAV_HEADER_SIZE",
    "WAV_MIME_TYPE",
    "WavBlob",
    "WavFieldRangeError",
    "WavFormatError",
    "WavHeader",
    "create_wav_blob",
    "decode",
    "decode_audio_data",
    "pcm16le_samples",
]
