"""
Track library data model
"""

import uuid
from dataclasses import dataclass


@dataclass(frozen=True)
class Track:
    """A library track with its nominal tempo and key as entered by the DJ."""
    id: str
    title: str
    artist: str
    bpm: float
    key: str


def new_track_id() -> str:
    """Generate a fresh, never reused track id."""
    return uuid.uuid4().hex
