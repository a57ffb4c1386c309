import base64
import struct
from unittest.mock import MagicMock, patch

import pytest

from voice_studio.audio import NumpyAudioContext, PcmAlignmentError, WavHeader, create_wav_blob, decode
from voice_studio.config import Config
from voice_studio.playback import AudioPlayer
from voice_studio.studio import EmptyAudioError, NoAudioError, SpeechStudio, StudioInputError

PCM = struct.pack("<4h", 0, 32767, -32768, 16384)
AUDIO_B64 = base64.b64encode(PCM).decode("ascii")


class FakeClient:
    def __init__(self, audio_b64=AUDIO_B64, lyrics="Twinkle twinkle"):
        self.audio_b64 = audio_b64
        self.lyrics = lyrics
        self.speech_calls = []
        self.lyrics_calls = []

    async def generate_speech(self, text, voice):
        self.speech_calls.append((text, voice))
        return self.audio_b64

    async def generate_lyrics(self, topic):
        self.lyrics_calls.append(topic)
        return self.lyrics


@pytest.fixture
def player():
    return MagicMock(spec=AudioPlayer)


def _studio(client=None, player=None, config=None):
    return SpeechStudio(
        client=client or FakeClient(),
        context=NumpyAudioContext(),
        player=player or MagicMock(spec=AudioPlayer),
        config=config or Config(),
    )


@pytest.mark.asyncio
async def test_generate_speech_plays_decoded_clip(player):
    client = FakeClient()
    studio = _studio(client, player)
    studio.text = "Xin chào"

    buffer = await studio.generate_speech()

    assert client.speech_calls == [("Xin chào", "Kore")]
    assert studio.generated_audio == AUDIO_B64
    assert buffer.sample_rate == 24000
    assert buffer.get_channel_data(0).tolist() == [0.0, 32767 / 32768.0, -1.0, 0.5]
    player.stop.assert_called_once()
    player.play.assert_called_once_with(buffer)


@pytest.mark.asyncio
async def test_generate_speech_without_playback(player):
    studio = _studio(player=player)
    studio.text = "hello"
    await studio.generate_speech(play=False)
    player.play.assert_not_called()
    assert studio.has_audio


@pytest.mark.asyncio
async def test_generate_speech_uses_selected_voice():
    client = FakeClient()
    studio = _studio(client)
    studio.text = "hello"
    studio.voice = "Zephyr"
    await studio.generate_speech(play=False)
    assert client.speech_calls == [("hello", "Zephyr")]


def test_unknown_voice_is_rejected():
    studio = _studio()
    with pytest.raises(StudioInputError, match="Unknown voice"):
        studio.voice = "Nobody"
    assert studio.voice == "Kore"


@pytest.mark.asyncio
@pytest.mark.parametrize("text", ["", "   \n\t"])
async def test_generate_speech_rejects_blank_text(text):
    client = FakeClient()
    studio = _studio(client)
    studio.text = text
    with pytest.raises(StudioInputError):
        await studio.generate_speech()
    assert client.speech_calls == []


@pytest.mark.asyncio
@pytest.mark.parametrize("audio_b64", [None, ""])
async def test_generate_speech_empty_response(audio_b64, player):
    studio = _studio(FakeClient(audio_b64=audio_b64), player)
    studio.text = "hello"
    with pytest.raises(EmptyAudioError):
        await studio.generate_speech()
    assert not studio.has_audio
    player.play.assert_not_called()


@pytest.mark.asyncio
async def test_new_request_discards_previous_clip():
    client = FakeClient()
    studio = _studio(client)
    studio.text = "first"
    await studio.generate_speech(play=False)

    client.audio_b64 = None
    with pytest.raises(EmptyAudioError):
        await studio.generate_speech(play=False)
    assert studio.generated_audio is None


@pytest.mark.asyncio
async def test_text_change_invalidates_download():
    studio = _studio()
    studio.text = "hello"
    await studio.generate_speech(play=False)
    assert studio.has_audio

    studio.text = "hello again"

    assert not studio.has_audio
    with pytest.raises(NoAudioError):
        studio.download()


def test_download_without_audio_raises(tmp_path):
    with pytest.raises(NoAudioError):
        _studio().download(tmp_path)


@pytest.mark.asyncio
async def test_download_writes_wav_to_directory(tmp_path):
    studio = _studio()
    studio.text = "hello"
    await studio.generate_speech(play=False)

    path = studio.download(tmp_path)

    assert path == tmp_path / "gemini-speech.wav"
    data = path.read_bytes()
    assert data == create_wav_blob(PCM, 24000, 1).data
    assert WavHeader.parse(data).data_size == len(PCM)


@pytest.mark.asyncio
async def test_download_to_explicit_file(tmp_path):
    studio = _studio()
    studio.text = "hello"
    await studio.generate_speech(play=False)
    target = tmp_path / "out" / "clip.wav"
    assert studio.download(target) == target
    assert target.read_bytes()[44:] == PCM


@pytest.mark.asyncio
async def test_playback_and_download_decode_stored_payload_independently(tmp_path):
    studio = _studio()
    studio.text = "hello"

    with patch("voice_studio.studio.decode", wraps=decode) as decode_spy:
        await studio.generate_speech(play=False)
        first = studio.wav_blob()
        second = studio.wav_blob()

    assert decode_spy.call_count == 3
    assert all(call.args == (AUDIO_B64,) for call in decode_spy.call_args_list)
    # Re-decoding is deterministic, so caching by payload would be observably equivalent.
    assert first.data == second.data


@pytest.mark.asyncio
async def test_strict_wav_rejects_odd_length_clip(tmp_path):
    config = Config()
    config.audio.strict_wav = True
    odd_b64 = base64.b64encode(PCM + b"\x01").decode("ascii")
    studio = _studio(FakeClient(audio_b64=odd_b64), config=config)
    studio.text = "hello"

    buffer = await studio.generate_speech(play=False)
    assert buffer.length == 4

    with pytest.raises(PcmAlignmentError):
        studio.download(tmp_path)


@pytest.mark.asyncio
async def test_lenient_wav_keeps_odd_length_clip(tmp_path):
    odd_b64 = base64.b64encode(PCM + b"\x01").decode("ascii")
    studio = _studio(FakeClient(audio_b64=odd_b64))
    studio.text = "hello"
    await studio.generate_speech(play=False)
    assert studio.download(tmp_path).stat().st_size == 44 + len(PCM) + 1


@pytest.mark.asyncio
async def test_compose_lyrics_and_send_to_tts():
    client = FakeClient(lyrics="Stars above")
    studio = _studio(client)
    studio.text = "old text"
    await studio.generate_speech(play=False)

    lyrics = await studio.compose_lyrics("the night sky")
    studio.send_lyrics_to_tts()

    assert lyrics == "Stars above"
    assert client.lyrics_calls == ["the night sky"]
    assert studio.text == "Stars above"
    assert not studio.has_audio


@pytest.mark.asyncio
async def test_compose_lyrics_rejects_blank_topic():
    client = FakeClient()
    studio = _studio(client)
    with pytest.raises(StudioInputError):
        await studio.compose_lyrics("  ")
    assert client.lyrics_calls == []
