"""
Theory module for key and tempo math.

Contains:
- Key model (parsing, transposition, canonical spelling)
- Camelot wheel notation
- Turntable pitch/tempo conversions
"""

from .key import (
    PITCH_CLASSES,
    REFERENCE_FREQUENCIES,
    Key,
    KeyMode,
    format_key,
    index_to_key,
    key_to_frequency,
    normalize_root,
    parse_key,
    transpose_key,
)

from .camelot import (
    CAMELOT_MAJOR,
    CAMELOT_MINOR,
    KeyDisplayFormat,
    camelot_to_key,
    format_key_display,
    key_to_camelot,
)

from .pitch import (
    bpm_after_pitch,
    clamp_pitch,
    effective_key,
    pitch_for_target_bpm,
    pitch_to_match_bpm,
    round_half_up,
    rounded_semitone_shift,
    semitone_shift,
)

__all__ = [
    "PITCH_CLASSES",
    "REFERENCE_FREQUENCIES",
    "Key",
    "KeyMode",
    "format_key",
    "index_to_key",
    "key_to_frequency",
    "normalize_root",
    "parse_key",
    "transpose_key",
    "CAMELOT_MAJOR",
    "CAMELOT_MINOR",
    "KeyDisplayFormat",
    "camelot_to_key",
    "format_key_display",
    "key_to_camelot",
    "bpm_after_pitch",
    "clamp_pitch",
    "effective_key",
    "pitch_for_target_bpm",
    "pitch_to_match_bpm",
    "round_half_up",
    "rounded_semitone_shift",
    "semitone_shift",
]
