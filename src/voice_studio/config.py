from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Sequence

import yaml
from dotenv import load_dotenv

from .audio import DEFAULT_CHANNELS, DEFAULT_SAMPLE_RATE_HZ, AudioFormat
from .utils.config_layers import merge_layers
from .utils.env_config import ENV_PREFIX, apply_env_overrides

logger = logging.getLogger(__name__)

# Checked in order after VS_GEMINI_API_KEY.
API_KEY_FALLBACK_ENVS = ("GEMINI_API_KEY", "API_KEY")

DEFAULT_VOICES = ["Kore", "Puck", "Charon", "Fenrir", "Zephyr"]
DEFAULT_LYRICS_PROMPT_TEMPLATE = (
    "Với vai trò là một nhạc sĩ tài hoa, hãy sáng tác lời bài hát nhẹ nhàng, sâu lắng "
    'bằng tiếng Việt dựa trên chủ đề sau: "{topic}". '
    "Chỉ trả về phần lời bài hát, không thêm bất kỳ giải thích nào khác."
)


class ConfigError(Exception):
    """Raised when configuration cannot be loaded or is invalid."""


@dataclass
class SystemConfig:
    log_level: str = "INFO"

    def to_dict(self) -> Dict:
        return {"log_level": self.log_level}


@dataclass
class AudioConfig:
    sample_rate_hz: int = DEFAULT_SAMPLE_RATE_HZ
    channels: int = DEFAULT_CHANNELS
    strict_wav: bool = False
    download_filename: str = "gemini-speech.wav"

    @property
    def format(self) -> AudioFormat:
        return AudioFormat(sample_rate_hz=self.sample_rate_hz, channels=self.channels)

    def to_dict(self) -> Dict:
        return {
            "sample_rate_hz": self.sample_rate_hz,
            "channels": self.channels,
            "strict_wav": self.strict_wav,
            "download_filename": self.download_filename,
        }


@dataclass
class GeminiConfig:
    api_key: Optional[str] = None
    speech_model: str = "gemini-2.5-flash-preview-tts"
    lyrics_model: str = "gemini-2.5-flash"
    default_voice: str = "Kore"
    voices: List[str] = field(default_factory=lambda: list(DEFAULT_VOICES))
    lyrics_prompt_template: str = DEFAULT_LYRICS_PROMPT_TEMPLATE

    def to_dict(self) -> Dict:
        return {
            "api_key": self.api_key,
            "speech_model": self.speech_model,
            "lyrics_model": self.lyrics_model,
            "default_voice": self.default_voice,
            "voices": list(self.voices),
            "lyrics_prompt_template": self.lyrics_prompt_template,
        }


@dataclass
class Config:
    system: SystemConfig = field(default_factory=SystemConfig)
    audio: AudioConfig = field(default_factory=AudioConfig)
    gemini: GeminiConfig = field(default_factory=GeminiConfig)

    def to_dict(self) -> Dict:
        return {
            "system": self.system.to_dict(),
            "audio": self.audio.to_dict(),
            "gemini": self.gemini.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "Config":
        system = data.get("system") or {}
        audio = data.get("audio") or {}
        gemini = data.get("gemini") or {}

        try:
            config = cls(
                system=SystemConfig(**system),
                audio=AudioConfig(**audio),
                gemini=GeminiConfig(**gemini),
            )
        except TypeError as exc:
            raise ConfigError(f"Unknown configuration key: {exc}") from exc

        config.validate()
        return config

    @classmethod
    def from_yaml(cls, paths: Sequence[Path]) -> "Config":
        """Load and merge YAML config files over the defaults.

        Configs are merged left-to-right, later files overriding earlier ones.
        Missing files are skipped with a warning.
        """
        return cls.from_dict(cls._merge_yaml(DEFAULT_CONFIG.to_dict(), paths))

    @classmethod
    def load(
        cls,
        paths: Optional[Sequence[Path]] = None,
        *,
        dotenv_path: Optional[str] = None,
    ) -> "Config":
        """Defaults, then YAML files, then ``.env`` and process environment overrides."""
        load_dotenv(dotenv_path)

        merged = cls._merge_yaml(DEFAULT_CONFIG.to_dict(), paths or [])
        merged = apply_env_overrides(merged, prefix=ENV_PREFIX)

        gemini = merged.setdefault("gemini", {})
        if not gemini.get("api_key"):
            for name in API_KEY_FALLBACK_ENVS:
                value = os.getenv(name)
                if value:
                    gemini["api_key"] = value.strip()
                    logger.info("config_api_key_from_env var=%s", name)
                    break

        return cls.from_dict(merged)

    def validate(self) -> None:
        if self.audio.sample_rate_hz <= 0:
            raise ConfigError(f"audio.sample_rate_hz must be positive, got {self.audio.sample_rate_hz}")
        if self.audio.channels < 1:
            raise ConfigError(f"audio.channels must be at least 1, got {self.audio.channels}")
        if not self.gemini.voices:
            raise ConfigError("gemini.voices must list at least one voice")
        if self.gemini.default_voice not in self.gemini.voices:
            raise ConfigError(
                f"gemini.default_voice '{self.gemini.default_voice}' is not one of: {', '.join(self.gemini.voices)}"
            )
        if "{topic}" not in self.gemini.lyrics_prompt_template:
            raise ConfigError("gemini.lyrics_prompt_template must contain a {topic} placeholder")

    @staticmethod
    def _merge_yaml(base: Dict, paths: Sequence[Path]) -> Dict:
        layers = [base]
        for path in paths:
            path = Path(path)
            if not path.is_file():
                logger.warning(f"Config path does not exist or is not a file: {path}")
                continue
            try:
                with path.open("r", encoding="utf-8") as f:
                    data = yaml.safe_load(f) or {}
            except yaml.YAMLError as exc:
                raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc
            if not isinstance(data, dict):
                raise ConfigError(f"Config file {path} must contain a mapping at the top level")
            layers.append(data)
            logger.info(f"Loaded config file: {path}")
        return merge_layers(*layers)


DEFAULT_CONFIG = Config()
