#!/usr/bin/env python3
"""
Read-Aloud - Main CLI

Sentence detection and SSML tooling for reading selected text aloud
with sentence-level highlighting.

Features:
- Sentence detection (pysbd with a regex/abbreviation fallback)
- Sentence positions, word counts and reading-time estimates
- SSML with highlight marks, plain-text extraction and validation
- Google Cloud TTS synthesis with mark timepoints
- Timing maps linking playback time to text positions
"""

import json
import sys
from pathlib import Path
from typing import Any, Optional

import click

from readaloud.cloud_tts import GoogleTTSClient, TTSError
from readaloud.readalong.sentence_metadata import get_sentence_metadata
from readaloud.readalong.sentence_splitter import SentenceSplitter
from readaloud.readalong.ssml_builder import (
    assemble_markup,
    build_sentence_markup,
    extract_marks,
    extract_plain_text,
    validate_markup,
)
from readaloud.readalong.timing_map import SentenceTimingMap
from readaloud.utils import logger
from readaloud.utils.config import config

text_input = click.argument("input_file", type=click.Path(exists=True), required=False)
text_option = click.option("-t", "--text", default=None, help="Text to use instead of INPUT_FILE")
language_option = click.option(
    "-l", "--language",
    default=None,
    help=f"Language for sentence detection (default: {config.language})",
)
fallback_option = click.option(
    "--fallback-only",
    is_flag=True,
    help="Skip the library segmenter and use the regex fallback",
)


def _read_input(input_file: Optional[str], text: Optional[str]) -> str:
    """Return --text, the file contents, or exit with an error."""
    if text is not None:
        return text
    if input_file:
        return Path(input_file).read_text(encoding="utf-8")
    logger.error("Provide INPUT_FILE or --text")
    sys.exit(1)


def _splitter(fallback_only: bool) -> SentenceSplitter:
    return SentenceSplitter(use_library=False if fallback_only else None)


def _emit(data: Any) -> None:
    click.echo(json.dumps(data, indent=2, ensure_ascii=False))


@click.group()
@click.version_option(version="1.0.0")
def cli():
    """
    Read-Aloud

    Split selected text into sentences and build SSML with
    highlight marks for text-to-speech playback.
    """
    pass


@cli.command()
@text_input
@text_option
@language_option
@fallback_option
def sentences(input_file: Optional[str], text: Optional[str], language: Optional[str], fallback_only: bool):
    """
    Detect sentences in text.
    """
    source = _read_input(input_file, text)
    result = _splitter(fallback_only).detect(source, language)
    _emit(result.to_dict())


@cli.command()
@text_input
@text_option
@language_option
@fallback_option
def metadata(input_file: Optional[str], text: Optional[str], language: Optional[str], fallback_only: bool):
    """
    Show sentence positions, word counts and duration estimates.
    """
    source = _read_input(input_file, text)
    result = get_sentence_metadata(source, language, splitter=_splitter(fallback_only))
    _emit(result.to_dict())


@cli.command()
@text_input
@text_option
@language_option
@fallback_option
@click.option("--sentences", "per_sentence", is_flag=True, help="Add a mark at every sentence boundary")
@click.option("--markup-only", is_flag=True, help="Print only the SSML string")
def ssml(
    input_file: Optional[str],
    text: Optional[str],
    language: Optional[str],
    fallback_only: bool,
    per_sentence: bool,
    markup_only: bool,
):
    """
    Build SSML with highlight marks.
    """
    source = _read_input(input_file, text)
    if per_sentence:
        result = build_sentence_markup(source, language, splitter=_splitter(fallback_only))
    else:
        result = assemble_markup(source)

    if markup_only:
        click.echo(result.markup)
    else:
        _emit(result.to_dict())


@cli.command()
@text_input
@text_option
def extract(input_file: Optional[str], text: Optional[str]):
    """
    Extract plain text from SSML.
    """
    click.echo(extract_plain_text(_read_input(input_file, text)))


@cli.command()
@text_input
@text_option
def validate(input_file: Optional[str], text: Optional[str]):
    """
    Validate SSML structure.

    Exits with status 1 when the markup is invalid.
    """
    result = validate_markup(_read_input(input_file, text))
    if result.valid:
        logger.success("SSML is valid")
    else:
        logger.error(result.error)
    _emit(result.to_dict())
    if not result.valid:
        sys.exit(1)


@cli.command()
@text_input
@text_option
def marks(input_file: Optional[str], text: Optional[str]):
    """
    List the marks in SSML with their offsets.
    """
    _emit([m.to_dict() for m in extract_marks(_read_input(input_file, text))])


@cli.command()
@text_input
@text_option
@language_option
@fallback_option
@click.option("-o", "--output", type=click.Path(), default="timing.json", help="Timing map output path")
def timing(
    input_file: Optional[str],
    text: Optional[str],
    language: Optional[str],
    fallback_only: bool,
    output: str,
):
    """
    Write an estimated timing map for local speech playback.

    Used when no cloud timepoints are available.
    """
    source = _read_input(input_file, text)
    data = get_sentence_metadata(source, language, splitter=_splitter(fallback_only))
    timing_map = SentenceTimingMap.from_estimates(data.metadata)
    timing_map.save(Path(output))
    logger.info(f"Estimated duration: {timing_map.duration:.1f} seconds ({len(timing_map.entries)} sentences)")


@cli.command()
@text_input
@text_option
@language_option
@fallback_option
@click.option("-v", "--voice", default=None, help=f"Cloud or local voice name (default: {config.voice})")
@click.option("-r", "--rate", type=float, default=None, help="Speaking rate (default: from config)")
@click.option("-o", "--output", type=click.Path(), default="speech.mp3", help="MP3 output path")
def speak(
    input_file: Optional[str],
    text: Optional[str],
    language: Optional[str],
    fallback_only: bool,
    voice: Optional[str],
    rate: Optional[float],
    output: str,
):
    """
    Synthesize text with Google Cloud TTS.

    Writes the MP3 and a timing map (same name, .json) built from
    the sentence mark timepoints.
    """
    source = _read_input(input_file, text)
    output_path = Path(output)
    logger.header(f"Speaking: {len(source):,} characters")

    logger.step("Building sentence SSML", 1, 3)
    result = build_sentence_markup(source, language, splitter=_splitter(fallback_only))
    logger.info(f"{len(result.sentences)} sentences ({result.method})")

    logger.step("Synthesizing audio", 2, 3)
    client = GoogleTTSClient()
    try:
        synthesis = client.synthesize(result.markup, voice_name=voice, speaking_rate=rate)
    except TTSError as e:
        logger.error(str(e))
        logger.info("Use 'readaloud timing' for local speech playback")
        sys.exit(1)

    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_bytes(synthesis.audio_content)
    logger.success(f"Saved audio: {output_path}")

    logger.step("Writing timing map", 3, 3)
    timing_map = SentenceTimingMap.from_timepoints(result.metadata, synthesis.timepoint_map())
    timing_map.save(output_path.with_suffix(".json"))


@cli.command()
@click.option("-l", "--language", default=None, help="Filter by language code, e.g. en-US")
def voices(language: Optional[str]):
    """
    List available Google Cloud TTS voices.
    """
    client = GoogleTTSClient()
    if not client.enabled:
        logger.warning("GOOGLE_TTS_API_KEY not set; only local voices are available")
        return

    found = client.list_voices(language)
    logger.header(f"Google TTS Voices ({len(found)})")
    for voice in found:
        logger.console.print(
            f"  {voice['name']:<28} {voice['lang']:<8} {voice['gender']:<8} {voice['quality']}"
        )


@cli.command()
def info():
    """
    Show configuration.
    """
    logger.header("Read-Aloud")

    logger.console.print("[bold]Sentence Detection:[/bold]")
    logger.console.print(f"  Language:         {config.language}")
    logger.console.print(f"  Library segmenter: {config.use_library_segmenter}")
    logger.console.print(f"  Words per minute: {config.words_per_minute}")

    logger.console.print("\n[bold]Voice Settings:[/bold]")
    logger.console.print(f"  Default voice:    {config.voice}")
    logger.console.print(f"  Speaking rate:    {config.speaking_rate}")

    logger.console.print("\n[bold]Google TTS:[/bold]")
    logger.console.print(f"  Endpoint:         {config.tts_endpoint}")
    key_status = "[green]SET[/green]" if config.api_key else "[red]NOT SET[/red]"
    logger.console.print(f"  API key:          {key_status}")


def main():
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
