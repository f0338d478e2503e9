"""
Camelot Wheel notation.

The Camelot Wheel is Mark Davis's (Mixed In Key) system for organizing
the 24 musical keys in a circle for easy harmonic mixing.

Outer circle (B) = MAJOR keys
Inner circle (A) = MINOR keys

Both tables below are indexed by pitch class (C=0 ... B=11).
"""

from enum import Enum
from typing import Optional

from pitchcraft.theory.key import Key, KeyMode, format_key, parse_key

CAMELOT_MAJOR = (
    "8B",   # C
    "3B",   # C#
    "10B",  # D
    "5B",   # D#
    "12B",  # E
    "7B",   # F
    "2B",   # F#
    "9B",   # G
    "4B",   # G#
    "11B",  # A
    "6B",   # A#
    "1B",   # B
)

CAMELOT_MINOR = (
    "5A",   # C
    "12A",  # C#
    "7A",   # D
    "2A",   # D#
    "9A",   # E
    "4A",   # F
    "11A",  # F#
    "6A",   # G
    "1A",   # G#
    "8A",   # A
    "3A",   # A#
    "10A",  # B
)

_CAMELOT_TO_KEY = {
    **{code: Key(root, KeyMode.MAJOR) for root, code in enumerate(CAMELOT_MAJOR)},
    **{code: Key(root, KeyMode.MINOR) for root, code in enumerate(CAMELOT_MINOR)},
}


class KeyDisplayFormat(str, Enum):
    """How keys are rendered to the user."""
    MUSICAL = "musical"
    CAMELOT = "camelot"


def key_to_camelot(value: Optional[str]) -> Optional[str]:
    """
    Convert a musical key string to Camelot notation.

    Args:
        value: Musical key string (e.g. "Amin", "C", "F#m")

    Returns:
        Camelot notation (e.g. "8A") or None if the key is unparseable
    """
    parsed = parse_key(value)
    if parsed is None:
        return None
    table = CAMELOT_MAJOR if parsed.mode == KeyMode.MAJOR else CAMELOT_MINOR
    return table[parsed.root]


def camelot_to_key(code: Optional[str]) -> Optional[str]:
    """
    Convert Camelot notation to a canonical musical key string.

    Args:
        code: Camelot notation, any case (e.g. "8a", "12B")

    Returns:
        Canonical key (e.g. "Amin", "Emaj") or None if no wheel position matches
    """
    if not code:
        return None
    key = _CAMELOT_TO_KEY.get(code.strip().upper())
    return format_key(key) if key is not None else None


def format_key_display(value: str, display_format: KeyDisplayFormat) -> str:
    """
    Render a key string for display. Unparseable text comes back unchanged.

    Args:
        value: Key text as stored on the track
        display_format: Musical or Camelot rendering
    """
    if display_format == KeyDisplayFormat.CAMELOT:
        return key_to_camelot(value) or value
    parsed = parse_key(value)
    return format_key(parsed) if parsed is not None else value
