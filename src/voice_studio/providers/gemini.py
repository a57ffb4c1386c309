"""Gemini client for speech synthesis and lyric generation."""

from __future__ import annotations

import logging
from typing import Any, Optional

from google import genai
from google.genai import types

from ..audio import Base64AudioCodec
from ..config import ConfigError, GeminiConfig

logger = logging.getLogger(__name__)


class GenerationError(Exception):
    """Raised when the Gemini API call fails."""


class GeminiStudioClient:
    """Thin async wrapper over the Gemini models used by the studio.

    Speech comes back as base64 PCM16LE (24 kHz, mono); lyrics as plain text.

    Example:
        >>> client = GeminiStudioClient(GeminiConfig(api_key="..."))
        >>> audio_b64 = await client.generate_speech("Xin chào", "Kore")
    """

    def __init__(self, config: GeminiConfig, client: Optional[genai.Client] = None):
        self.config = config
        if client is None:
            if not config.api_key:
                raise ConfigError(
                    "Missing Gemini API key. Set VS_GEMINI_API_KEY (or GEMINI_API_KEY / API_KEY) "
                    "in your environment or .env file."
                )
            client = genai.Client(api_key=config.api_key)
        self._client = client

    async def generate_speech(self, text: str, voice: str) -> Optional[str]:
        """Synthesize ``text`` with a prebuilt voice. Returns base64 audio, or None if the response has none."""
        logger.info(f"TTS: synthesizing '{text[:50]}' with {self.config.speech_model}/{voice}")
        try:
            response = await self._client.aio.models.generate_content(
                model=self.config.speech_model,
                contents=text,
                config=types.GenerateContentConfig(
                    response_modalities=["AUDIO"],
                    speech_config=types.SpeechConfig(
                        voice_config=types.VoiceConfig(
                            prebuilt_voice_config=types.PrebuiltVoiceConfig(voice_name=voice),
                        ),
                    ),
                ),
            )
        except Exception as exc:
            logger.error(f"Error generating speech: {exc}")
            raise GenerationError(f"Failed to communicate with Gemini API: {exc}") from exc

        audio_b64 = _first_inline_audio(response)
        if audio_b64 is None:
            logger.warning("TTS: response contained no audio")
        else:
            logger.info(f"TTS: received {len(audio_b64)} base64 chars")
        return audio_b64

    async def generate_lyrics(self, topic: str) -> str:
        """Ask the text model for song lyrics on ``topic``."""
        prompt = self.config.lyrics_prompt_template.format(topic=topic)
        logger.info(f"Lyrics: composing with {self.config.lyrics_model}")
        try:
            response = await self._client.aio.models.generate_content(
                model=self.config.lyrics_model,
                contents=prompt,
            )
        except Exception as exc:
            logger.error(f"Error generating lyrics: {exc}")
            raise GenerationError(f"Failed to communicate with Gemini API: {exc}") from exc

        return response.text or ""


def _first_inline_audio(response: Any) -> Optional[str]:
    """Return the first candidate's first part as base64, or None."""
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        return None
    content = getattr(candidates[0], "content", None)
    parts = getattr(content, "parts", None) or []
    if not parts:
        return None
    inline_data = getattr(parts[0], "inline_data", None)
    data = getattr(inline_data, "data", None)
    if not data:
        return None
    # The SDK hands back decoded bytes; keep the wire form the rest of the app expects.
    if isinstance(data, (bytes, bytearray)):
        return Base64AudioCodec.encode(bytes(data))
    return data


__all__ = ["GeminiStudioClient", "GenerationError"]
