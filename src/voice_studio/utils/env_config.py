"""Environment variable overrides for voice-studio configuration.

Every scalar in the config tree can be overridden by a variable named
VS_{PATH_TO_PROPERTY}: the VS_ prefix followed by the path components,
joined with underscores and upper-cased.

Examples:
    VS_SYSTEM_LOG_LEVEL=DEBUG
    VS_AUDIO_STRICT_WAV=true
    VS_GEMINI_DEFAULT_VOICE=Puck
"""

from __future__ import annotations

import json
import logging
import os
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

ENV_PREFIX = "VS"


class EnvConfigError(Exception):
    """Raised when an environment override cannot be applied."""


def parse_env_value(value: str, existing_value: Any) -> Any:
    """Parse an environment string into the type of the value it replaces.

    Args:
        value: Raw environment variable value
        existing_value: Current config value, used to infer the target type

    Returns:
        The parsed value

    Raises:
        EnvConfigError: If the value cannot be parsed as the target type

    Examples:
        >>> parse_env_value("yes", False)
        True
        >>> parse_env_value("48000", 24000)
        48000
        >>> parse_env_value("Puck", "Kore")
        'Puck'
    """
    if value == "" or value.lower() in ("null", "none"):
        return None

    target_type = type(existing_value) if existing_value is not None else str

    if target_type is bool:
        lowered = value.lower()
        if lowered in ("true", "yes", "1", "on"):
            return True
        if lowered in ("false", "no", "0", "off"):
            return False
        raise EnvConfigError(
            f"Cannot parse '{value}' as boolean. "
            f"Valid values: true/false, yes/no, 1/0, on/off (case-insensitive)"
        )

    if target_type is int:
        try:
            return int(value)
        except ValueError as exc:
            raise EnvConfigError(f"Cannot parse '{value}' as integer") from exc

    if target_type is float:
        try:
            return float(value)
        except ValueError as exc:
            raise EnvConfigError(f"Cannot parse '{value}' as float") from exc

    # Lists (e.g. gemini.voices) accept a JSON array or a comma-separated string.
    if target_type is list:
        stripped = value.strip()
        if stripped.startswith("["):
            try:
                parsed = json.loads(stripped)
            except json.JSONDecodeError as exc:
                raise EnvConfigError(f"Cannot parse '{value}' as JSON list") from exc
            if not isinstance(parsed, list):
                raise EnvConfigError(f"Expected JSON list, got {type(parsed).__name__}")
            return parsed
        return [item.strip() for item in stripped.split(",") if item.strip()]

    if target_type is dict:
        try:
            parsed = json.loads(value)
        except json.JSONDecodeError as exc:
            raise EnvConfigError(f"Cannot parse '{value}' as JSON dict") from exc
        if not isinstance(parsed, dict):
            raise EnvConfigError(f"Expected JSON dict, got {type(parsed).__name__}")
        return parsed

    return value


def _build_env_var_name(path: List[str], prefix: str) -> str:
    """Build the variable name for a config path.

    Examples:
        >>> _build_env_var_name(["audio", "strict_wav"], "VS")
        'VS_AUDIO_STRICT_WAV'
    """
    return "_".join(part.upper() for part in [prefix] + path)


def apply_env_overrides(
    config_dict: Dict[str, Any],
    prefix: str = ENV_PREFIX,
    path: Optional[List[str]] = None,
) -> Dict[str, Any]:
    """Return a copy of ``config_dict`` with environment overrides applied.

    Nested dicts are walked recursively so individual leaves can be set.

    Raises:
        EnvConfigError: If an environment value cannot be parsed
    """
    if path is None:
        path = []

    result = dict(config_dict)

    for key, value in result.items():
        current_path = path + [key]

        if isinstance(value, dict):
            result[key] = apply_env_overrides(value, prefix, current_path)
            continue

        env_var_name = _build_env_var_name(current_path, prefix)
        env_value = os.environ.get(env_var_name)
        if env_value is None:
            continue

        try:
            parsed_value = parse_env_value(env_value, value)
        except EnvConfigError as exc:
            raise EnvConfigError(f"Failed to parse environment variable {env_var_name}: {exc}") from exc

        result[key] = parsed_value
        logger.info(
            "config_override_from_env var=%s value_type=%s path=%s",
            env_var_name,
            type(parsed_value).__name__,
            ".".join(current_path),
        )

    return result


__all__ = ["ENV_PREFIX", "EnvConfigError", "apply_env_overrides", "parse_env_value"]
