"""
Turntable pitch fader math.

A pitch fader changes playback speed, so tempo and musical pitch move
together. A +p% offset multiplies tempo by (1 + p/100) and shifts pitch by
12 * log2(1 + p/100) semitones.

| Pitch   | Tempo (128 BPM) | Semitones |
|---------|-----------------|-----------|
| -8%     | 117.76          | -1.44     |
| 0%      | 128.00          | 0.00      |
| +2.9%   | 131.71          | +0.49     |
| +6%     | 135.68          | +1.01     |
| +8%     | 138.24          | +1.33     |

Tempos are assumed strictly positive. Validation of track data happens
where tracks enter the library, not here.
"""

import math
from typing import Optional

from pitchcraft.theory.key import format_key, parse_key, transpose_key


def bpm_after_pitch(original_bpm: float, pitch_percent: float) -> float:
    """Tempo heard when a track is played at the given pitch offset."""
    return original_bpm * (1 + pitch_percent / 100)


def pitch_to_match_bpm(original_bpm: float, target_bpm: float) -> float:
    """Pitch offset (percent) that brings original_bpm to target_bpm."""
    return (target_bpm / original_bpm - 1) * 100


def semitone_shift(pitch_percent: float) -> float:
    """Exact equal-temperament semitone offset produced by a pitch offset."""
    return 12 * math.log2(1 + pitch_percent / 100)


def round_half_up(value: float) -> int:
    """Nearest integer, exact halves rounded toward positive infinity."""
    whole = math.floor(value)
    return whole + 1 if value - whole >= 0.5 else whole


def rounded_semitone_shift(pitch_percent: float) -> int:
    """
    Whole-semitone shift used to transpose a key.

    Uses round_half_up: a shift of +0.5 becomes 1, -0.5 becomes 0 and
    -1.5 becomes -1.
    """
    return round_half_up(semitone_shift(pitch_percent))


def clamp_pitch(pitch_percent: float, pitch_range: float) -> float:
    """Clamp a pitch offset to the [-pitch_range, pitch_range] slider span."""
    return max(-pitch_range, min(pitch_range, pitch_percent))


def pitch_for_target_bpm(original_bpm: float, target_bpm: float, pitch_range: float) -> float:
    """
    Fader position for a manually entered target tempo.

    Args:
        original_bpm: Nominal tempo of the playing track
        target_bpm: Tempo the DJ wants to hear
        pitch_range: Slider range in percent (8 or 16)

    Returns:
        Required pitch offset, clamped to the slider range

    Raises:
        ValueError: If target_bpm is not a positive finite number
    """
    if not math.isfinite(target_bpm) or target_bpm <= 0:
        raise ValueError(f"Target BPM must be a positive number, got {target_bpm}")
    return clamp_pitch(pitch_to_match_bpm(original_bpm, target_bpm), pitch_range)


def effective_key(key_text: Optional[str], pitch_percent: float) -> Optional[str]:
    """
    Key a track sounds in at the given pitch offset.

    Args:
        key_text: Nominal key as stored on the track
        pitch_percent: Fader offset in percent

    Returns:
        Canonical transposed key, or key_text unchanged when it is unparseable
    """
    parsed = parse_key(key_text)
    if parsed is None:
        return key_text
    return format_key(transpose_key(parsed, rounded_semitone_shift(pitch_percent)))
