"""Text-to-speech and lyric composing workflow, independent of any UI."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Union

from .audio import AudioBuffer, AudioContext, WavBlob, create_wav_blob, decode, decode_audio_data
from .config import Config
from .playback import AudioPlayer
from .providers import GeminiStudioClient

logger = logging.getLogger(__name__)


class StudioError(Exception):
    """Base class for user-facing studio failures."""


class StudioInputError(StudioError):
    """Raised when required user input is missing or invalid."""


class EmptyAudioError(StudioError):
    """Raised when the speech model returns no audio."""


class NoAudioError(StudioError):
    """Raised when a download is requested before any speech was generated."""


class SpeechStudio:
    """
    Holds the text, voice, lyrics and last generated clip.

    The clip is kept only as its base64 payload. Playback and download each
    decode it on their own, and any change to the text discards it.
    """

    def __init__(
        self,
        client: GeminiStudioClient,
        context: AudioContext,
        player: AudioPlayer,
        config: Config,
    ) -> None:
        self.client = client
        self.context = context
        self.player = player
        self.config = config

        self._text = ""
        self._voice = config.gemini.default_voice
        self.lyrics = ""
        self.generated_audio: Optional[str] = None

    @property
    def text(self) -> str:
        return self._text

    @text.setter
    def text(self, value: str) -> None:
        self._text = value
        self.generated_audio = None

    @property
    def voice(self) -> str:
        return self._voice

    @voice.setter
    def voice(self, value: str) -> None:
        if value not in self.config.gemini.voices:
            raise StudioInputError(f"Unknown voice '{value}'. Choose one of: {', '.join(self.config.gemini.voices)}")
        self._voice = value

    @property
    def has_audio(self) -> bool:
        return self.generated_audio is not None

    async def generate_speech(self, *, play: bool = True) -> AudioBuffer:
        """Synthesize the current text, start playback and keep the clip for download."""
        if not self._text.strip():
            raise StudioInputError("Please enter some text to synthesize.")

        self.generated_audio = None
        self.player.stop()

        audio_b64 = await self.client.generate_speech(self._text, self._voice)
        if not audio_b64:
            raise EmptyAudioError("Could not generate audio: the response was empty.")

        self.generated_audio = audio_b64
        audio_fmt = self.config.audio.format
        buffer = await decode_audio_data(
            decode(audio_b64),
            self.context,
            sample_rate=audio_fmt.sample_rate_hz,
            num_channels=audio_fmt.channels,
        )
        logger.info(f"Generated {buffer.duration_s:.2f}s of speech with voice {self._voice}")

        if play:
            self.player.play(buffer)
        return buffer

    def wav_blob(self) -> WavBlob:
        """Encode the current clip as WAV, decoding the stored payload again."""
        if self.generated_audio is None:
            raise NoAudioError("There is no audio to download.")
        audio_fmt = self.config.audio.format
        return create_wav_blob(
            decode(self.generated_audio),
            audio_fmt.sample_rate_hz,
            audio_fmt.channels,
            strict=self.config.audio.strict_wav,
        )

    def download(self, destination: Union[str, Path, None] = None) -> Path:
        """Write the current clip as a WAV file and return its path.

        ``destination`` may be a file path or a directory; directories get the
        configured download filename.
        """
        blob = self.wav_blob()

        path = Path(destination) if destination is not None else Path.cwd()
        if path.is_dir():
            path = path / self.config.audio.download_filename
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(blob.data)

        logger.info(f"Saved {blob.size} bytes ({blob.mime_type}) to {path}")
        return path

    async def compose_lyrics(self, topic: str) -> str:
        if not topic.strip():
            raise StudioInputError("Please enter a topic to compose about.")

        self.lyrics = ""
        self.lyrics = await self.client.generate_lyrics(topic)
        logger.info(f"Composed {len(self.lyrics)} characters of lyrics")
        return self.lyrics

    def send_lyrics_to_tts(self) -> None:
        """Use the composed lyrics as the text to synthesize."""
        self.text = self.lyrics


__all__ = [
    "EmptyAudioError",
    "NoAudioError",
    "SpeechStudio",
    "StudioError",
    "StudioInputError",
]
