"""
Track library storage.

Two stores implement the same TrackStore interface:

- InMemoryTrackStore: a snapshot held in memory (sample library, tests,
  one-shot CLI runs on an imported file)
- SqliteTrackStore: a persistent SQLite library

replace_tracks is all-or-nothing in both: the incoming tracks are validated
and written as one unit, and on any failure the previous library is kept.
"""

import math
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Protocol, Union

import structlog

from pitchcraft.library.models import Track

logger = structlog.get_logger()

ProgressCallback = Callable[[int, int], None]

DEFAULT_BATCH_SIZE = 25

CREATE_TRACKS_TABLE = """
    CREATE TABLE IF NOT EXISTS tracks (
        id TEXT PRIMARY KEY,
        title TEXT NOT NULL,
        artist TEXT NOT NULL,
        bpm REAL NOT NULL,
        key TEXT NOT NULL,
        created_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
        updated_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
    )
"""

UPSERT_TRACK = """
    INSERT OR REPLACE INTO tracks (id, title, artist, bpm, key, updated_at)
    VALUES (?, ?, ?, ?, ?, CURRENT_TIMESTAMP)
"""


class LibraryError(Exception):
    """Base class for track library errors."""


class InvalidTrackError(LibraryError):
    """Raised when a track violates the library invariants."""


class DuplicateTrackError(LibraryError):
    """Raised when inserting a track whose id is already in the library."""


class TrackNotFoundError(LibraryError):
    """Raised when updating a track that is not in the library."""


class TrackStore(Protocol):
    """Library collaborator consumed by the CLI."""

    def get_tracks(self) -> List[Track]: ...

    def insert_track(self, track: Track) -> None: ...

    def update_track(self, track: Track) -> None: ...

    def replace_tracks(
        self,
        tracks: Iterable[Track],
        on_progress: Optional[ProgressCallback] = None
    ) -> None: ...


def validate_track(track: Track) -> Track:
    """
    Check the invariants every stored track must satisfy.

    Raises:
        InvalidTrackError: If a text field is blank or bpm is not a
            positive finite number
    """
    for field_name in ("id", "title", "artist", "key"):
        if not str(getattr(track, field_name) or "").strip():
            raise InvalidTrackError(f"Track {track.id!r} has an empty {field_name}")
    if not isinstance(track.bpm, (int, float)) or not math.isfinite(track.bpm) or track.bpm <= 0:
        raise InvalidTrackError(f"Track {track.id!r} has an invalid bpm: {track.bpm!r}")
    return track


def _sort_key(track: Track):
    return (track.artist.casefold(), track.title.casefold())


def _report_progress(
    on_progress: Optional[ProgressCallback],
    processed: int,
    total: int,
    batch_size: int
) -> None:
    if on_progress and (processed % batch_size == 0 or processed == total):
        on_progress(processed, total)


def _check_batch_size(batch_size: int) -> int:
    if batch_size < 1:
        raise ValueError(f"batch_size must be at least 1, got {batch_size}")
    return batch_size


class InMemoryTrackStore:
    """Track library held in memory."""

    def __init__(self, tracks: Iterable[Track] = (), batch_size: int = DEFAULT_BATCH_SIZE):
        self.batch_size = _check_batch_size(batch_size)
        self._tracks: Dict[str, Track] = {}
        for track in tracks:
            self._tracks[track.id] = validate_track(track)

    def __len__(self) -> int:
        return len(self._tracks)

    def get_tracks(self) -> List[Track]:
        """All tracks ordered by artist, then title."""
        return sorted(self._tracks.values(), key=_sort_key)

    def get_track(self, track_id: str) -> Optional[Track]:
        return self._tracks.get(track_id)

    def insert_track(self, track: Track) -> None:
        validate_track(track)
        if track.id in self._tracks:
            raise DuplicateTrackError(f"Track id already in library: {track.id}")
        self._tracks[track.id] = track

    def update_track(self, track: Track) -> None:
        validate_track(track)
        if track.id not in self._tracks:
            raise TrackNotFoundError(f"Track not in library: {track.id}")
        self._tracks[track.id] = track

    def replace_tracks(
        self,
        tracks: Iterable[Track],
        on_progress: Optional[ProgressCallback] = None
    ) -> None:
        """
        Replace the whole library.

        Args:
            tracks: New library contents. A repeated id keeps the last track.
            on_progress: Called with (processed, total) before the first track,
                after every batch_size tracks, and after the last one

        Raises:
            InvalidTrackError: If any track is invalid. The library is unchanged.
        """
        incoming = list(tracks)
        total = len(incoming)
        if on_progress:
            on_progress(0, total)

        staged: Dict[str, Track] = {}
        for processed, track in enumerate(incoming, start=1):
            staged[track.id] = validate_track(track)
            _report_progress(on_progress, processed, total, self.batch_size)

        self._tracks = staged
        logger.info("Library replaced", track_count=len(staged))


class SqliteTrackStore:
    """Track library persisted in a SQLite database file."""

    def __init__(self, path: Union[str, Path], batch_size: int = DEFAULT_BATCH_SIZE):
        self.path = Path(path)
        self.batch_size = _check_batch_size(batch_size)
        with self._connection() as conn:
            conn.execute(CREATE_TRACKS_TABLE)
            conn.commit()

    @contextmanager
    def _connection(self):
        conn = sqlite3.connect(self.path, timeout=30.0)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
        finally:
            conn.close()

    def get_tracks(self) -> List[Track]:
        """All tracks ordered by artist, then title."""
        with self._connection() as conn:
            rows = conn.execute(
                "SELECT id, title, artist, bpm, key FROM tracks "
                "ORDER BY artist COLLATE NOCASE, title COLLATE NOCASE"
            ).fetchall()
        return [
            Track(id=row["id"], title=row["title"], artist=row["artist"], bpm=row["bpm"], key=row["key"])
            for row in rows
        ]

    def insert_track(self, track: Track) -> None:
        validate_track(track)
        with self._connection() as conn:
            try:
                conn.execute(
                    "INSERT INTO tracks (id, title, artist, bpm, key) VALUES (?, ?, ?, ?, ?)",
                    (track.id, track.title, track.artist, track.bpm, track.key),
                )
            except sqlite3.IntegrityError as e:
                raise DuplicateTrackError(f"Track id already in library: {track.id}") from e
            conn.commit()

    def update_track(self, track: Track) -> None:
        validate_track(track)
        with self._connection() as conn:
            cursor = conn.execute(
                "UPDATE tracks SET title = ?, artist = ?, bpm = ?, key = ?, "
                "updated_at = CURRENT_TIMESTAMP WHERE id = ?",
                (track.title, track.artist, track.bpm, track.key, track.id),
            )
            if cursor.rowcount == 0:
                raise TrackNotFoundError(f"Track not in library: {track.id}")
            conn.commit()

    def replace_tracks(
        self,
        tracks: Iterable[Track],
        on_progress: Optional[ProgressCallback] = None
    ) -> None:
        """
        Replace the whole library in a single transaction.

        Args:
            tracks: New library contents. A repeated id keeps the last track.
            on_progress: Called with (processed, total) before the first track,
                after every batch_size tracks, and after the last one

        Raises:
            InvalidTrackError: If any track is invalid. The transaction is
                rolled back and the library is unchanged.
        """
        incoming = list(tracks)
        total = len(incoming)

        with self._connection() as conn:
            try:
                conn.execute("BEGIN IMMEDIATE")
                conn.execute("DELETE FROM tracks")
                if on_progress:
                    on_progress(0, total)
                for processed, track in enumerate(incoming, start=1):
                    validate_track(track)
                    conn.execute(UPSERT_TRACK, (track.id, track.title, track.artist, track.bpm, track.key))
                    _report_progress(on_progress, processed, total, self.batch_size)
                conn.commit()
            except Exception:
                conn.rollback()
                logger.warning("Library replace rolled back", path=str(self.path))
                raise

        logger.info(
            "Library replaced",
            path=str(self.path),
            track_count=len({track.id for track in incoming}),
        )
