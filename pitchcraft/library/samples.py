"""
Built-in sample library, used when no library file is given.
"""

from typing import List

from pitchcraft.library.models import Track

BASE_TRACKS = [
    ("Nightshift Groove", "Mara Vale", 126, "Amin"),
    ("Chrome Harbor", "Analog Reach", 124, "Cmaj"),
    ("Glass Alley", "Kirox", 128, "Emin"),
    ("Velvet Circuit", "Jun Osei", 122, "Gmaj"),
    ("Low Tide", "Civic Orbit", 120, "Dmin"),
    ("Signal Bloom", "Rena K", 130, "F#min"),
    ("Afterhours Type", "Niko Lane", 125, "Bmin"),
    ("Midnight Relay", "The Resin", 123, "Amaj"),
    ("Metro Pulse", "Lumenfield", 127, "C#min"),
    ("Static Dawn", "Vera Moss", 118, "Emaj"),
]

KEY_POOL = [
    "Cmaj", "Gmaj", "Dmaj", "Amaj", "Emaj", "Bmaj",
    "F#maj", "C#maj", "Fmaj", "Bbmaj", "Ebmaj", "Abmaj",
    "Amin", "Emin", "Bmin", "F#min", "C#min", "G#min",
    "D#min", "A#min", "Dmin", "Gmin", "Cmin", "Fmin",
]

MIN_SAMPLE_BPM = 90
MAX_SAMPLE_BPM = 140
DEFAULT_SAMPLE_COUNT = 1500


def sample_tracks(count: int = DEFAULT_SAMPLE_COUNT) -> List[Track]:
    """
    Build a deterministic sample library.

    Titles and artists cycle through BASE_TRACKS with a running number,
    tempos are spread up to 7 BPM around the base tempo, and keys cycle
    through all 24 keys.
    """
    tracks = []
    for i in range(count):
        title, artist, base_bpm, _ = BASE_TRACKS[i % len(BASE_TRACKS)]
        bpm_offset = (i * 7) % 15 - 7
        bpm = max(MIN_SAMPLE_BPM, min(MAX_SAMPLE_BPM, base_bpm + bpm_offset))
        tracks.append(Track(
            id=f"seed_{i + 1}",
            title=f"{title} {i + 1}",
            artist=artist,
            bpm=float(bpm),
            key=KEY_POOL[i % len(KEY_POOL)],
        ))
    return tracks
