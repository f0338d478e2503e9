"""Track library: model, storage, import and sample data"""

from pitchcraft.library.importer import ImportResult, parse_tracks_from_csv, parse_tracks_from_file
from pitchcraft.library.models import Track, new_track_id
from pitchcraft.library.samples import sample_tracks
from pitchcraft.library.store import (
    DuplicateTrackError,
    InMemoryTrackStore,
    InvalidTrackError,
    LibraryError,
    SqliteTrackStore,
    TrackNotFoundError,
    TrackStore,
)

__all__ = [
    "ImportResult",
    "parse_tracks_from_csv",
    "parse_tracks_from_file",
    "Track",
    "new_track_id",
    "sample_tracks",
    "DuplicateTrackError",
    "InMemoryTrackStore",
    "InvalidTrackError",
    "LibraryError",
    "SqliteTrackStore",
    "TrackNotFoundError",
    "TrackStore",
]
