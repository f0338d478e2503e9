"""Command-line interface for PitchCraft.

Provides commands for:
- match: List tracks that mix with the playing track at a fader position
- key: Convert a key between musical and Camelot notation
- tracks: List the library, optionally filtered by title/artist
- add: Add a track to a SQLite library by hand
- edit: Change the fields of a track in a SQLite library
- import: Replace a SQLite library with the contents of a CSV/XLSX file
"""

from dataclasses import replace
from pathlib import Path
from typing import List, Optional

import structlog
import typer
from rich.console import Console
from rich.markup import escape
from rich.progress import BarColumn, Progress, TextColumn
from rich.table import Table

from pitchcraft.config import ALLOWED_PITCH_RANGES, get_settings
from pitchcraft.library.importer import parse_tracks_from_file
from pitchcraft.library.models import Track, new_track_id
from pitchcraft.library.samples import sample_tracks
from pitchcraft.library.store import LibraryError, SqliteTrackStore
from pitchcraft.matching.finder import (
    CompatibilityOptions,
    find_compatible_tracks,
    reference_state,
)
from pitchcraft.theory.camelot import KeyDisplayFormat, camelot_to_key, format_key_display, key_to_camelot
from pitchcraft.theory.key import format_key, parse_key
from pitchcraft.theory.pitch import pitch_for_target_bpm
from pitchcraft.utils.logging import setup_logging

app = typer.Typer(
    name="pitchcraft",
    help="Harmonic mixing for turntable DJs",
    rich_markup_mode="markdown",
)
console = Console()
logger = structlog.get_logger()

SQLITE_SUFFIXES = (".db", ".sqlite", ".sqlite3")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """Find tracks that stay in key at your pitch fader position."""
    settings = get_settings()
    setup_logging("DEBUG" if verbose else settings.log_level, settings.log_file)


def _fail(message: str) -> None:
    console.print(f"[red]{escape(message)}[/red]")
    raise typer.Exit(1)


def load_library(library: Optional[Path]) -> List[Track]:
    """
    Load tracks from a SQLite library, a CSV/XLSX file, or the sample library.

    Raises:
        ValueError: If an import file contains no usable tracks
    """
    if library is None and get_settings().library_path:
        library = Path(get_settings().library_path)
    if library is None:
        return sample_tracks()

    if library.suffix.lower() in SQLITE_SUFFIXES:
        return SqliteTrackStore(library).get_tracks()

    result = parse_tracks_from_file(library)
    if result.error:
        raise ValueError(f"{library}: {result.error}")
    return result.tracks


def find_track(tracks: List[Track], query: str) -> Track:
    """
    Find a track by id, or by exact case-insensitive title.

    Raises:
        ValueError: If nothing or more than one track matches
    """
    for track in tracks:
        if track.id == query:
            return track

    wanted = query.strip().casefold()
    matches = [track for track in tracks if track.title.casefold() == wanted]
    if not matches:
        raise ValueError(f"No track with id or title '{query}'")
    if len(matches) > 1:
        raise ValueError(f"Title '{query}' matches {len(matches)} tracks, use the track id")
    return matches[0]


def search_tracks(tracks: List[Track], query: Optional[str]) -> List[Track]:
    """Tracks whose "title artist" text contains query, ignoring case."""
    if not query:
        return tracks
    wanted = query.casefold()
    return [track for track in tracks if wanted in f"{track.title} {track.artist}".casefold()]


@app.command()
def match(
    track: str = typer.Argument(..., help="Id or title of the playing track"),
    library: Optional[Path] = typer.Option(
        None, "--library", "-l", help="SQLite library, CSV or XLSX file (sample library if omitted)"
    ),
    pitch: float = typer.Option(0.0, "--pitch", "-p", help="Pitch fader position in percent"),
    bpm: Optional[float] = typer.Option(
        None, "--bpm", help="Target tempo for the playing track, overrides --pitch"
    ),
    pitch_range: Optional[int] = typer.Option(None, "--range", "-r", help="Fader range: 8 or 16"),
    tolerance: Optional[float] = typer.Option(None, "--tolerance", "-t", help="Tempo tolerance in BPM"),
    kci: Optional[float] = typer.Option(None, "--kci", help="KCI threshold, 0 disables"),
    key_format: Optional[KeyDisplayFormat] = typer.Option(None, "--format", "-f", help="Key display"),
    limit: int = typer.Option(50, "--limit", "-n", help="Maximum rows to show"),
):
    """
    List tracks that can be beat-matched to the playing track and stay
    harmonically compatible.
    """
    settings = get_settings()
    pitch_range = pitch_range if pitch_range is not None else settings.pitch_range
    key_format = key_format or settings.key_format

    try:
        if pitch_range not in ALLOWED_PITCH_RANGES:
            raise ValueError(f"Fader range must be one of {ALLOWED_PITCH_RANGES}, got {pitch_range}")

        tracks = load_library(library)
        reference = find_track(tracks, track)
        if bpm is not None:
            pitch = pitch_for_target_bpm(reference.bpm, bpm, pitch_range)
        elif abs(pitch) > pitch_range:
            raise ValueError(f"Pitch {pitch:+.2f}% is outside the +/-{pitch_range}% fader range")
    except (LibraryError, ValueError, OSError) as e:
        logger.error("Match failed", track=track, error=str(e))
        _fail(str(e))

    options = CompatibilityOptions(
        bpm_tolerance=tolerance if tolerance is not None else settings.bpm_tolerance,
        max_pitch_percent=float(pitch_range),
        kci_threshold=kci if kci is not None else settings.kci_threshold,
    )
    state = reference_state(reference, pitch)
    results = find_compatible_tracks(reference, pitch, tracks, options)

    console.print(
        f"[bold]{reference.artist} - {reference.title}[/bold]  "
        f"pitch {pitch:+.2f}%  "
        f"{state.bpm:.2f} BPM  "
        f"key {format_key_display(state.key, key_format)}"
    )

    if not results:
        console.print("[yellow]No compatible tracks found.[/yellow]")
        return

    table = Table(title=f"Compatible tracks ({len(results)})")
    table.add_column("Id", style="dim")
    table.add_column("Artist", style="cyan")
    table.add_column("Title")
    table.add_column("Pitch", justify="right")
    table.add_column("BPM", justify="right")
    table.add_column("Key", style="green")
    table.add_column("Match", style="magenta")

    for result in results[:limit]:
        table.add_row(
            result.track.id,
            result.track.artist,
            result.track.title,
            f"{result.pitch_percent:+.2f}%",
            f"{result.bpm:.2f}",
            format_key_display(result.key, key_format),
            result.compatibility.value,
        )

    console.print(table)


@app.command()
def key(
    text: str = typer.Argument(..., help="Musical key (e.g. Ebmin) or Camelot code (e.g. 2A)"),
):
    """Show a key in canonical musical and Camelot notation."""
    parsed = parse_key(text)
    if parsed is not None:
        console.print(f"{format_key(parsed)}  {key_to_camelot(text)}")
        return

    musical = camelot_to_key(text)
    if musical is not None:
        console.print(f"{musical}  {text.strip().upper()}")
        return

    _fail(f"Unrecognised key: '{text}'")


@app.command()
def tracks(
    library: Optional[Path] = typer.Option(
        None, "--library", "-l", help="SQLite library, CSV or XLSX file (sample library if omitted)"
    ),
    key_format: Optional[KeyDisplayFormat] = typer.Option(None, "--format", "-f", help="Key display"),
    search: Optional[str] = typer.Option(
        None, "--search", "-s", help="Only tracks whose title or artist contains this text"
    ),
):
    """List the library."""
    key_format = key_format or get_settings().key_format
    try:
        library_tracks = search_tracks(load_library(library), search)
    except (LibraryError, ValueError, OSError) as e:
        logger.error("Could not load library", error=str(e))
        _fail(str(e))

    table = Table(title=f"Library ({len(library_tracks)} tracks)")
    table.add_column("Id", style="dim")
    table.add_column("Artist", style="cyan")
    table.add_column("Title")
    table.add_column("BPM", justify="right")
    table.add_column("Key", style="green")
    for track in library_tracks:
        table.add_row(
            track.id,
            track.artist,
            track.title,
            f"{track.bpm:g}",
            format_key_display(track.key, key_format),
        )
    console.print(table)


@app.command()
def add(
    title: str = typer.Option(..., "--title", help="Track title"),
    artist: str = typer.Option(..., "--artist", help="Artist name"),
    bpm: float = typer.Option(..., "--bpm", help="Nominal tempo"),
    key_text: str = typer.Option(..., "--key", help="Musical key, e.g. Amin"),
    database: Path = typer.Option(..., "--db", help="SQLite library to add to"),
):
    """Add a track to a SQLite library."""
    track = Track(
        id=new_track_id(),
        title=title.strip(),
        artist=artist.strip(),
        bpm=bpm,
        key=key_text.strip(),
    )
    try:
        SqliteTrackStore(database).insert_track(track)
    except LibraryError as e:
        logger.error("Add failed", title=title, error=str(e))
        _fail(str(e))

    console.print(f"[green]Added {escape(track.artist)} - {escape(track.title)} ({track.id}).[/green]")


@app.command()
def edit(
    track: str = typer.Argument(..., help="Id or title of the track to change"),
    database: Path = typer.Option(..., "--db", help="SQLite library holding the track"),
    title: Optional[str] = typer.Option(None, "--title", help="New title"),
    artist: Optional[str] = typer.Option(None, "--artist", help="New artist"),
    bpm: Optional[float] = typer.Option(None, "--bpm", help="New nominal tempo"),
    key_text: Optional[str] = typer.Option(None, "--key", help="New musical key"),
):
    """Change the title, artist, tempo or key of a track in a SQLite library."""
    changes = {
        name: value.strip() if isinstance(value, str) else value
        for name, value in (("title", title), ("artist", artist), ("bpm", bpm), ("key", key_text))
        if value is not None
    }
    if not changes:
        _fail("Nothing to change: pass --title, --artist, --bpm or --key")

    store = SqliteTrackStore(database)
    try:
        updated = replace(find_track(store.get_tracks(), track), **changes)
        store.update_track(updated)
    except (LibraryError, ValueError) as e:
        logger.error("Edit failed", track=track, error=str(e))
        _fail(str(e))

    console.print(f"[green]Updated {escape(updated.artist)} - {escape(updated.title)} ({updated.id}).[/green]")


@app.command("import")
def import_tracks(
    source: Path = typer.Argument(..., help="CSV or XLSX file to import"),
    database: Path = typer.Option(..., "--db", help="SQLite library to replace"),
):
    """Replace a SQLite library with the tracks from a CSV or XLSX file."""
    try:
        result = parse_tracks_from_file(source)
    except OSError as e:
        logger.error("Import failed", source=str(source), error=str(e))
        _fail(f"Import failed: {e}")

    if result.error:
        _fail(result.error)

    store = SqliteTrackStore(database, batch_size=get_settings().replace_batch_size)
    with Progress(
        TextColumn("[blue]Importing[/blue]"),
        BarColumn(),
        TextColumn("{task.completed}/{task.total}"),
        console=console,
        transient=True,
    ) as progress:
        task = progress.add_task("import", total=len(result.tracks))

        def on_progress(processed: int, total: int) -> None:
            progress.update(task, completed=processed, total=total)

        try:
            store.replace_tracks(result.tracks, on_progress=on_progress)
        except LibraryError as e:
            logger.error("Import failed", source=str(source), error=str(e))
            _fail(f"Import failed: {e}")

    console.print(f"[green]Imported {len(result.tracks)} tracks.[/green]")


if __name__ == "__main__":
    app()
