"""Main CLI entry point for Lyric Studio."""

import asyncio
import logging
from typing import TextIO

import click
from rich.console import Console
from rich.table import Table
from rich.text import Text

from lyric_studio import __version__
from lyric_studio.core.config import get_settings
from lyric_studio.core.exceptions import GenerationError
from lyric_studio.services.llm import LLMClient
from lyric_studio.services.lyric_generator import LyricGenerator
from lyric_studio.utils.languages import LANGUAGE_NAMES, normalize_language_code

console = Console()


def get_generator() -> LyricGenerator:
    """Build a lyric generator from environment settings."""
    settings = get_settings()
    return LyricGenerator(LLMClient(settings), parallel_expansion=settings.parallel_keyword_expansion)


@click.group()
@click.version_option(version=__version__, prog_name="lyric-studio")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """Lyric Studio - Write multilingual song lyrics from keywords and melodies."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    if verbose:
        logging.basicConfig(level=logging.INFO)


@cli.command()
def languages() -> None:
    """List supported language codes."""
    table = Table(title="Supported Languages")
    table.add_column("Code", style="cyan")
    table.add_column("Language", style="green")

    for code, name in LANGUAGE_NAMES.items():
        table.add_row(code, name)

    console.print(table)


@cli.command()
@click.argument("keywords", nargs=-1, required=True)
def expand(keywords: tuple[str, ...]) -> None:
    """Expand KEYWORDS into songwriting context."""
    generator = get_generator()
    expanded = asyncio.run(generator.expand_keywords(list(keywords)))

    table = Table(title="Expanded Keywords")
    table.add_column("Keyword", style="cyan")
    table.add_column("Expansion", style="white")

    for keyword, expansion in expanded.items():
        table.add_row(Text(keyword), Text(expansion))

    console.print(table)


@cli.command()
@click.option("--keyword", "-k", "keywords", multiple=True, required=True, help="Keyword or theme (repeatable)")
@click.option("--melody", "-m", required=True, help="Description of the melody")
@click.option("--language", "-l", "language_codes", multiple=True, default=("zh",), help="Language code (repeatable)")
@click.option("--mixed", is_flag=True, help="Mix the languages within the song")
@click.option("--timing", is_flag=True, help="Show per-line timing")
def generate(
    keywords: tuple[str, ...],
    melody: str,
    language_codes: tuple[str, ...],
    mixed: bool,
    timing: bool,
) -> None:
    """Generate a song from keywords and a melody description."""
    generator = get_generator()
    codes = [normalize_language_code(code) for code in language_codes]

    try:
        result = asyncio.run(generator.generate_lyrics(list(keywords), melody, codes, mixed))
    except GenerationError as e:
        console.print(f"[red]{e}[/red]")
        raise SystemExit(1)

    # Model output is printed verbatim; lyric section tags look like markup
    console.print()
    console.print(Text(result.title, style="bold"))
    console.print()
    console.print(result.content, markup=False)

    if result.translation:
        console.print("\n[bold]Translation[/bold]\n")
        console.print(result.translation, markup=False)

    if timing and result.timing_data:
        table = Table(title="Timing")
        table.add_column("Start (ms)", justify="right", style="yellow")
        table.add_column("Duration (ms)", justify="right", style="yellow")
        table.add_column("Line", style="white")

        for entry in result.timing_data:
            table.add_row(f"{entry.start_time:.0f}", f"{entry.duration:.0f}", Text(entry.line))

        console.print(table)


@cli.command()
@click.argument("text_file", type=click.File("r"))
@click.option("--to", "target", default="zh", help="Target language code")
def translate(text_file: TextIO, target: str) -> None:
    """Translate lyrics read from TEXT_FILE (use - for stdin)."""
    generator = get_generator()
    lyrics = text_file.read()
    translated = asyncio.run(generator.translate_lyrics(lyrics, normalize_language_code(target)))
    console.print(translated, markup=False)


def main() -> None:
    """Entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
