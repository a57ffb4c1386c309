"""Gemini text-to-speech studio with a bit-exact PCM/WAV audio pipeline."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("voice-studio")
except PackageNotFoundError:  # pragma: no cover - fallback during local execution
    __version__ = "0.0.0"

__all__ = ["__version__"]
