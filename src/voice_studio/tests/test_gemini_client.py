import base64
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from voice_studio.config import ConfigError, GeminiConfig
from voice_studio.providers import GeminiStudioClient, GenerationError


def _audio_response(data):
    part = SimpleNamespace(inline_data=SimpleNamespace(data=data, mime_type="audio/L16;rate=24000"))
    return SimpleNamespace(candidates=[SimpleNamespace(content=SimpleNamespace(parts=[part]))])


def _mock_sdk(response=None, side_effect=None):
    sdk = MagicMock()
    sdk.aio.models.generate_content = AsyncMock(return_value=response, side_effect=side_effect)
    return sdk


def test_missing_api_key_raises_config_error():
    with pytest.raises(ConfigError, match="API key"):
        GeminiStudioClient(GeminiConfig(api_key=None))


def test_builds_sdk_client_from_api_key():
    with patch("voice_studio.providers.gemini.genai.Client") as client_cls:
        GeminiStudioClient(GeminiConfig(api_key="test-key"))
    client_cls.assert_called_once_with(api_key="test-key")


@pytest.mark.asyncio
async def test_generate_speech_requests_audio_with_voice():
    pcm = b"\x00\x00\xff\x7f"
    sdk = _mock_sdk(_audio_response(pcm))
    client = GeminiStudioClient(GeminiConfig(), client=sdk)

    result = await client.generate_speech("Xin chào", "Puck")

    assert result == base64.b64encode(pcm).decode("ascii")
    kwargs = sdk.aio.models.generate_content.await_args.kwargs
    assert kwargs["model"] == "gemini-2.5-flash-preview-tts"
    assert kwargs["contents"] == "Xin chào"
    assert kwargs["config"].response_modalities == ["AUDIO"]
    assert kwargs["config"].speech_config.voice_config.prebuilt_voice_config.voice_name == "Puck"


@pytest.mark.asyncio
async def test_generate_speech_passes_base64_string_through():
    sdk = _mock_sdk(_audio_response("AAD/fw=="))
    client = GeminiStudioClient(GeminiConfig(), client=sdk)
    assert await client.generate_speech("hi", "Kore") == "AAD/fw=="


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "response",
    [
        SimpleNamespace(candidates=None),
        SimpleNamespace(candidates=[]),
        SimpleNamespace(candidates=[SimpleNamespace(content=None)]),
        SimpleNamespace(candidates=[SimpleNamespace(content=SimpleNamespace(parts=[]))]),
        _audio_response(None),
        _audio_response(b""),
    ],
)
async def test_generate_speech_returns_none_without_audio(response):
    client = GeminiStudioClient(GeminiConfig(), client=_mock_sdk(response))
    assert await client.generate_speech("hi", "Kore") is None


@pytest.mark.asyncio
async def test_generate_speech_wraps_api_failures():
    sdk = _mock_sdk(side_effect=RuntimeError("quota exceeded"))
    client = GeminiStudioClient(GeminiConfig(), client=sdk)

    with pytest.raises(GenerationError, match="Failed to communicate with Gemini API: quota exceeded") as exc_info:
        await client.generate_speech("hi", "Kore")
    assert isinstance(exc_info.value.__cause__, RuntimeError)


@pytest.mark.asyncio
async def test_generate_lyrics_renders_prompt_template():
    sdk = _mock_sdk(SimpleNamespace(text="La la la"))
    config = GeminiConfig(lyrics_prompt_template="Write a song about {topic}.")
    client = GeminiStudioClient(config, client=sdk)

    assert await client.generate_lyrics("the night sky") == "La la la"
    kwargs = sdk.aio.models.generate_content.await_args.kwargs
    assert kwargs["model"] == "gemini-2.5-flash"
    assert kwargs["contents"] == "Write a song about the night sky."


@pytest.mark.asyncio
async def test_generate_lyrics_default_prompt_mentions_topic():
    sdk = _mock_sdk(SimpleNamespace(text="..."))
    client = GeminiStudioClient(GeminiConfig(), client=sdk)
    await client.generate_lyrics("những vì sao")
    assert '"những vì sao"' in sdk.aio.models.generate_content.await_args.kwargs["contents"]


@pytest.mark.asyncio
async def test_generate_lyrics_empty_text_is_empty_string():
    client = GeminiStudioClient(GeminiConfig(), client=_mock_sdk(SimpleNamespace(text=None)))
    assert await client.generate_lyrics("anything") == ""


@pytest.mark.asyncio
async def test_generate_lyrics_wraps_api_failures():
    client = GeminiStudioClient(GeminiConfig(), client=_mock_sdk(side_effect=ValueError("bad request")))
    with pytest.raises(GenerationError, match="bad request"):
        await client.generate_lyrics("anything")
