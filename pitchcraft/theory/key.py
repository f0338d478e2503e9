"""
Musical key model.

A key is a root pitch class on the 12-position chromatic circle plus a mode.
Roots are always held on the sharp-based scale:

    C  C#  D  D#  E  F  F#  G  G#  A  A#  B
    0  1   2  3   4  5  6   7  8   9  10  11

Key strings accepted by `parse_key`:

| Text        | Parsed as |
|-------------|-----------|
| "Am"        | Amin      |
| "a minor"   | Amin      |
| "Ebmaj"     | D#maj     |
| "F#"        | F#maj     |
| " gb MIN "  | F#min     |

Anything else (Camelot codes, "H", "Cb", empty text) is unparseable and
yields None. Callers keep the original text for display in that case.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional

import numpy as np

PITCH_CLASSES = ("C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B")

FLAT_TO_SHARP = {
    "Db": "C#",
    "Eb": "D#",
    "Gb": "F#",
    "Ab": "G#",
    "Bb": "A#",
}

# Root frequencies of the fourth octave, A4 = 440 Hz, rounded to 0.01 Hz
REFERENCE_FREQUENCIES = np.round(440.0 * 2.0 ** ((np.arange(12) - 9) / 12.0), 2)

_KEY_PATTERN = re.compile(r"^([A-G](?:#|b)?)\s*(maj|min|major|minor|m)?$", re.IGNORECASE)


class KeyMode(str, Enum):
    """Key mode, valued by its canonical suffix."""
    MAJOR = "maj"
    MINOR = "min"


@dataclass(frozen=True)
class Key:
    """An immutable (root pitch class, mode) pair."""
    root: int
    mode: KeyMode = KeyMode.MAJOR

    @property
    def root_name(self) -> str:
        return PITCH_CLASSES[self.root]

    def __str__(self) -> str:
        return format_key(self)


def normalize_root(root: str) -> str:
    """
    Capitalise a root spelling and map flats to their sharp equivalent.

    Args:
        root: Root text such as "bb", "C#" or "e"

    Returns:
        Normalized root name (e.g. "A#"). Spellings without a sharp
        equivalent ("Cb", "Fb") come back capitalised but otherwise unchanged.
    """
    trimmed = root.strip()
    if len(trimmed) == 1:
        normalized = trimmed.upper()
    else:
        normalized = trimmed[0].upper() + trimmed[1:2].lower()
    return FLAT_TO_SHARP.get(normalized, normalized)


def parse_key(value: Optional[str]) -> Optional[Key]:
    """
    Parse a key string.

    Args:
        value: Key text (e.g. "Am", "Ebmaj", "F# minor")

    Returns:
        Parsed Key, or None when the text does not follow the key grammar
    """
    if not value:
        return None

    match = _KEY_PATTERN.match(value.strip())
    if not match:
        return None

    root_name = normalize_root(match.group(1))
    if root_name not in PITCH_CLASSES:
        return None

    mode_token = (match.group(2) or "maj").lower()
    mode = KeyMode.MINOR if mode_token in ("min", "minor", "m") else KeyMode.MAJOR
    return Key(root=PITCH_CLASSES.index(root_name), mode=mode)


def index_to_key(index: int, mode: KeyMode) -> Key:
    """Build a key from any integer position, wrapping onto the 12-cycle."""
    return Key(root=index % 12, mode=mode)


def transpose_key(key: Key, semitones: int) -> Key:
    """
    Move a key by a number of semitones, keeping its mode.

    Args:
        key: Key to transpose
        semitones: Shift in semitones, negative or beyond an octave allowed

    Returns:
        Transposed key
    """
    return index_to_key(key.root + semitones, key.mode)


def format_key(key: Key) -> str:
    """Canonical key text, root followed by "maj" or "min" (e.g. "C#min")."""
    return f"{PITCH_CLASSES[key.root]}{key.mode.value}"


def key_to_frequency(value: Optional[str]) -> Optional[float]:
    """Reference frequency in Hz of the key's root, None if unparseable."""
    parsed = parse_key(value)
    if parsed is None:
        return None
    return float(REFERENCE_FREQUENCIES[parsed.root])
