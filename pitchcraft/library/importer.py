"""
Track import from CSV and XLSX files.

Header names are matched after lowercasing and stripping everything but
letters, so "Musical Key" and "musical_key" both map to the key column.

| Header                | Column |
|-----------------------|--------|
| title, track          | title  |
| artist                | artist |
| bpm, tempo            | bpm    |
| key, musicalkey       | key    |

When the first row does not name all four columns, every row is treated as
data and the columns are read by position: artist=1, title=2, bpm=3, key=4
(column 0 is typically a row number in DJ software exports).

The bpm cell is read from its leading number, so exports such as "128 BPM"
or "126.5bpm" keep their tempo. Rows with a blank title, artist or key, or
a bpm that is not a positive finite number, are dropped.
"""

import csv
import io
import math
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Union

import structlog

from pitchcraft.library.models import Track, new_track_id

logger = structlog.get_logger()

HEADER_ALIASES = {
    "title": "title",
    "track": "title",
    "artist": "artist",
    "bpm": "bpm",
    "tempo": "bpm",
    "key": "key",
    "musicalkey": "key",
}

FALLBACK_COLUMNS = {
    "artist": 1,
    "title": 2,
    "bpm": 3,
    "key": 4,
}

REQUIRED_COLUMNS = ("title", "artist", "bpm", "key")

LEADING_NUMBER = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")


@dataclass
class ImportResult:
    """Outcome of an import. error is set when no usable track was found."""
    tracks: List[Track] = field(default_factory=list)
    error: Optional[str] = None


def _normalize_header(value: str) -> str:
    return re.sub(r"[^a-z]", "", value.lower())


def _detect_header_map(headers: Sequence[str]) -> Optional[Dict[str, int]]:
    index_map: Dict[str, int] = {}
    for index, header in enumerate(headers):
        alias = HEADER_ALIASES.get(_normalize_header(header))
        if alias:
            index_map[alias] = index
    if all(column in index_map for column in REQUIRED_COLUMNS):
        return index_map
    return None


def _cell(row: Sequence[str], index: int) -> str:
    if index >= len(row) or row[index] is None:
        return ""
    return str(row[index]).strip()


def _parse_bpm(value: str) -> Optional[float]:
    match = LEADING_NUMBER.match(value)
    if not match:
        return None
    bpm = float(match.group())
    return bpm if math.isfinite(bpm) and bpm > 0 else None


def parse_rows_to_tracks(rows: Sequence[Sequence[str]]) -> ImportResult:
    """
    Turn table rows into tracks with fresh ids.

    Args:
        rows: Table rows, optionally starting with a header row

    Returns:
        ImportResult with the valid tracks, or an error message
    """
    rows = [row for row in rows if any(_cell(row, i) for i in range(len(row)))]
    if not rows:
        return ImportResult(error="CSV file is empty.")

    header_map = _detect_header_map(rows[0])
    index_map = header_map or FALLBACK_COLUMNS
    data_rows = rows[1:] if header_map else rows

    tracks = []
    for row in data_rows:
        title = _cell(row, index_map["title"])
        artist = _cell(row, index_map["artist"])
        key = _cell(row, index_map["key"])
        bpm = _parse_bpm(_cell(row, index_map["bpm"]))
        if not title or not artist or not key or bpm is None:
            continue
        tracks.append(Track(id=new_track_id(), title=title, artist=artist, bpm=bpm, key=key))

    dropped = len(data_rows) - len(tracks)
    logger.info(
        "Parsed track rows",
        rows=len(data_rows),
        tracks=len(tracks),
        dropped=dropped,
        header_detected=header_map is not None,
    )

    if not tracks:
        return ImportResult(error="No valid rows found.")
    return ImportResult(tracks=tracks)


def parse_tracks_from_csv(text: str) -> ImportResult:
    """Parse tracks from CSV text."""
    rows = list(csv.reader(io.StringIO(text)))
    return parse_rows_to_tracks(rows)


def parse_tracks_from_xlsx(path: Union[str, Path]) -> ImportResult:
    """
    Parse tracks from the first sheet of an XLSX workbook.

    Requires pandas with the openpyxl engine.
    """
    import pandas as pd

    sheets = pd.read_excel(path, sheet_name=None, header=None, dtype=str, engine="openpyxl")
    if not sheets:
        return ImportResult(error="No sheets found in XLSX file.")

    frame = next(iter(sheets.values()))
    rows = [
        ["" if pd.isna(cell) else str(cell) for cell in row]
        for row in frame.itertuples(index=False, name=None)
    ]
    return parse_rows_to_tracks(rows)


def parse_tracks_from_file(path: Union[str, Path]) -> ImportResult:
    """
    Parse tracks from a CSV or XLSX file, chosen by file extension.

    Raises:
        OSError: If the file cannot be read
    """
    path = Path(path)
    logger.info("Importing tracks", path=str(path))
    if path.suffix.lower() == ".xlsx":
        return parse_tracks_from_xlsx(path)
    return parse_tracks_from_csv(path.read_text(encoding="utf-8-sig"))
