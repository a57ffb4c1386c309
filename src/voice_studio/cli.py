"""Command-line interface for voice-studio."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.traceback import install as install_rich_traceback

from .audio import (
    AudioDecodeError,
    BufferAllocationError,
    NumpyAudioContext,
    PcmAlignmentError,
    WAV_HEADER_SIZE,
    WavFormatError,
    WavHeader,
    create_wav_blob,
    decode,
)
from .config import Config, ConfigError
from .logging_setup import configure_logging
from .playback import AudioPlayer, PlaybackUnavailableError
from .providers import GeminiStudioClient, GenerationError
from .studio import SpeechStudio, StudioError

install_rich_traceback(suppress=[typer])

app = typer.Typer(help="Gemini text-to-speech and lyric composer.")
console = Console()

USER_ERRORS = (
    AudioDecodeError,
    BufferAllocationError,
    ConfigError,
    GenerationError,
    PcmAlignmentError,
    PlaybackUnavailableError,
    StudioError,
    WavFormatError,
)

CONFIG_OPTION = typer.Option(None, "--config", "-c", help="YAML config file (repeatable, merged left-to-right)")
DOTENV_OPTION = typer.Option(None, "--env-file", help="Path to a .env file to load before reading the environment")


def _load_config(config_paths: Optional[List[Path]], dotenv_path: Optional[Path]) -> Config:
    config = Config.load(config_paths, dotenv_path=str(dotenv_path) if dotenv_path else None)
    configure_logging(config.system.log_level)
    return config


def _build_studio(config: Config) -> SpeechStudio:
    audio_fmt = config.audio.format
    return SpeechStudio(
        client=GeminiStudioClient(config.gemini),
        context=NumpyAudioContext(sample_rate=audio_fmt.sample_rate_hz),
        player=AudioPlayer(),
        config=config,
    )


async def _speak_and_save(studio: SpeechStudio, play: bool, output: Optional[Path]) -> None:
    buffer = await studio.generate_speech(play=play)
    console.print(
        f"[bold green]Generated {buffer.duration_s:.2f}s of speech[/bold green] (voice: {studio.voice})"
    )
    if output is not None:
        path = studio.download(output)
        console.print(f"[bold blue]Saved WAV:[/bold blue] {path}")
    if play:
        studio.player.wait()


async def speak_async(text: str, voice: Optional[str], output: Optional[Path], play: bool, config: Config) -> None:
    studio = _build_studio(config)
    studio.text = text
    if voice:
        studio.voice = voice
    await _speak_and_save(studio, play, output)


async def compose_async(
    topic: str,
    speak: bool,
    voice: Optional[str],
    output: Optional[Path],
    play: bool,
    config: Config,
) -> None:
    studio = _build_studio(config)
    lyrics = await studio.compose_lyrics(topic)
    console.print(Panel(lyrics or "(empty)", title="Lyrics", border_style="cyan"))

    if not speak:
        return
    studio.send_lyrics_to_tts()
    if voice:
        studio.voice = voice
    await _speak_and_save(studio, play, output)


def _run(coro) -> None:
    try:
        asyncio.run(coro)
    except USER_ERRORS as exc:
        console.print(f"[bold red]{exc}[/bold red]")
        raise typer.Exit(code=1) from exc
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted[/yellow]")
        raise typer.Exit(code=130)


@app.command()
def speak(
    text: str = typer.Argument(..., help="Text to synthesize"),
    voice: Optional[str] = typer.Option(None, "--voice", "-v", help="Prebuilt voice name"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Save the clip as WAV (file or directory)"),
    play: bool = typer.Option(True, "--play/--no-play", help="Play the clip through the default output device"),
    config_paths: Optional[List[Path]] = CONFIG_OPTION,
    dotenv_path: Optional[Path] = DOTENV_OPTION,
) -> None:
    """Synthesize speech, play it and optionally save it as WAV."""
    try:
        config = _load_config(config_paths, dotenv_path)
    except ConfigError as exc:
        console.print(f"[bold red]{exc}[/bold red]")
        raise typer.Exit(code=1) from exc
    _run(speak_async(text, voice, output, play, config))


@app.command()
def compose(
    topic: str = typer.Argument(..., help="What the song should be about"),
    speak: bool = typer.Option(False, "--speak", help="Send the lyrics to text-to-speech"),
    voice: Optional[str] = typer.Option(None, "--voice", "-v", help="Prebuilt voice name for --speak"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Save the spoken lyrics as WAV"),
    play: bool = typer.Option(True, "--play/--no-play", help="Play the spoken lyrics"),
    config_paths: Optional[List[Path]] = CONFIG_OPTION,
    dotenv_path: Optional[Path] = DOTENV_OPTION,
) -> None:
    """Compose song lyrics, optionally reading them aloud."""
    try:
        config = _load_config(config_paths, dotenv_path)
    except ConfigError as exc:
        console.print(f"[bold red]{exc}[/bold red]")
        raise typer.Exit(code=1) from exc
    _run(compose_async(topic, speak, voice, output, play, config))


@app.command()
def voices(
    config_paths: Optional[List[Path]] = CONFIG_OPTION,
    dotenv_path: Optional[Path] = DOTENV_OPTION,
) -> None:
    """List the configured prebuilt voices."""
    try:
        config = _load_config(config_paths, dotenv_path)
    except ConfigError as exc:
        console.print(f"[bold red]{exc}[/bold red]")
        raise typer.Exit(code=1) from exc
    for name in config.gemini.voices:
        marker = " (default)" if name == config.gemini.default_voice else ""
        console.print(f"{name}{marker}")


@app.command()
def wav(
    input_path: Path = typer.Argument(..., exists=True, dir_okay=False, help="Base64 payload or raw PCM16LE file"),
    output_path: Path = typer.Argument(..., help="WAV file to write"),
    base64_input: bool = typer.Option(True, "--base64/--raw", help="Treat the input as base64 text or raw bytes"),
    sample_rate: int = typer.Option(24000, "--sample-rate", min=1, help="Sample rate in Hz"),
    channels: int = typer.Option(1, "--channels", min=1, max=65535, help="Interleaved channel count"),
    strict: bool = typer.Option(False, "--strict", help="Reject PCM that does not end on a frame boundary"),
) -> None:
    """Package PCM16LE audio as a WAV file."""
    try:
        if base64_input:
            # Wrapped base64 (e.g. 76-column `base64` output) is accepted.
            pcm = decode("".join(input_path.read_text(encoding="ascii").split()))
        else:
            pcm = input_path.read_bytes()
        blob = create_wav_blob(pcm, sample_rate, channels, strict=strict)
    except (AudioDecodeError, PcmAlignmentError, WavFormatError, UnicodeDecodeError) as exc:
        console.print(f"[bold red]{exc}[/bold red]")
        raise typer.Exit(code=1) from exc

    output_path.write_bytes(blob.data)
    console.print(f"[bold green]Wrote {blob.size} bytes to {output_path}[/bold green]")


@app.command()
def info(
    wav_path: Path = typer.Argument(..., exists=True, dir_okay=False, help="WAV file to inspect"),
) -> None:
    """Show the header fields of a PCM WAV file."""
    data = wav_path.read_bytes()
    try:
        header = WavHeader.parse(data)
    except WavFormatError as exc:
        console.print(f"[bold red]{exc}[/bold red]")
        raise typer.Exit(code=1) from exc

    table = Table(title=str(wav_path))
    table.add_column("Field")
    table.add_column("Value", justify="right")
    table.add_row("Sample rate", f"{header.sample_rate} Hz")
    table.add_row("Channels", str(header.num_channels))
    table.add_row("Bits per sample", str(header.bits_per_sample))
    table.add_row("Byte rate", str(header.byte_rate))
    table.add_row("Block align", str(header.block_align))
    table.add_row("Data size", f"{header.data_size} bytes")
    if not header.is_consistent:
        table.add_row(
            "[yellow]Expected[/yellow]",
            f"[yellow]byte rate {header.expected_byte_rate}, block align {header.expected_block_align}[/yellow]",
        )
    if header.byte_rate:
        table.add_row("Duration", f"{header.data_size / header.byte_rate:.3f} s")
    if len(data) - WAV_HEADER_SIZE != header.data_size:
        table.add_row("[yellow]File body[/yellow]", f"[yellow]{len(data) - WAV_HEADER_SIZE} bytes[/yellow]")
    console.print(table)


def main() -> None:  # pragma: no cover - entrypoint wrapper
    app()


if __name__ == "__main__":  # pragma: no cover
    main()
