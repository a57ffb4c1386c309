"""Play audio buffers through the default output device."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Optional

from .audio import AudioBuffer

try:
    import sounddevice as sd
except Exception:  # pragma: no cover - PortAudio missing on the host
    sd = None

logger = logging.getLogger(__name__)


def _stream_active() -> bool:
    try:
        return bool(sd.get_stream().active)
    except RuntimeError:
        # sd.play() has not opened a stream yet.
        return False


class PlaybackUnavailableError(RuntimeError):
    """Raised when no audio output backend is available."""


class PlaybackStatus(str, Enum):
    IDLE = "idle"
    PLAYING = "playing"
    STOPPED = "stopped"


class AudioPlayer:
    """
    Single-clip player.

    Starting a clip stops whatever is playing; the newest request always
    wins and nothing is queued.
    """

    def __init__(self) -> None:
        self.status = PlaybackStatus.IDLE
        self.current: Optional[AudioBuffer] = None

    @property
    def is_playing(self) -> bool:
        """True while a clip is sounding. A clip that ran to its end resets the player to IDLE."""
        if self.status != PlaybackStatus.PLAYING:
            return False
        if sd is not None and not _stream_active():
            self.current = None
            self.status = PlaybackStatus.IDLE
            return False
        return True

    def play(self, buffer: AudioBuffer) -> None:
        if sd is None:
            raise PlaybackUnavailableError(
                "sounddevice is required for playback. Install it with: pip install sounddevice (requires PortAudio)"
            )

        self.stop()
        logger.info(
            f"Playback: {buffer.duration_s:.2f}s, {buffer.number_of_channels} channel(s) @ {buffer.sample_rate} Hz"
        )
        sd.play(buffer.to_interleaved(), samplerate=buffer.sample_rate, blocking=False)
        self.current = buffer
        self.status = PlaybackStatus.PLAYING

    def stop(self) -> None:
        if not self.is_playing:
            return
        if sd is not None:
            sd.stop()
        logger.info("Playback: stopped previous clip")
        self.current = None
        self.status = PlaybackStatus.STOPPED

    def wait(self) -> None:
        """Block until the current clip finishes."""
        if not self.is_playing:
            return
        if sd is not None:
            sd.wait()
        self.current = None
        self.status = PlaybackStatus.IDLE


__all__ = ["AudioPlayer", "PlaybackStatus", "PlaybackUnavailableError"]
