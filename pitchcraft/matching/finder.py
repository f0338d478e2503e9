"""
Compatible track finder

For every library track, works out the pitch fader position that beat-matches
it to the playing track, the key it will sound in at that position, and how
that key relates to the playing track's key. Tracks that cannot be matched
within the configured tolerances are dropped, the rest are ranked.
"""

from dataclasses import dataclass
from typing import Iterable, List, Optional

import structlog

from pitchcraft.library.models import Track
from pitchcraft.matching.harmonic_rules import CompatibilityKind, classify_compatibility
from pitchcraft.matching.kci import kci_value, kci_within_threshold
from pitchcraft.theory.pitch import bpm_after_pitch, effective_key, pitch_to_match_bpm

logger = structlog.get_logger()

DEFAULT_BPM_TOLERANCE = 0.3


@dataclass(frozen=True)
class CompatibilityOptions:
    """Filter settings for a compatibility search."""
    bpm_tolerance: float = DEFAULT_BPM_TOLERANCE  # Absolute BPM
    max_pitch_percent: Optional[float] = None  # Slider range, None = unbounded
    kci_threshold: Optional[float] = None  # None or <= 0 disables the KCI filter


@dataclass(frozen=True)
class ReferenceState:
    """What the playing track sounds like at its current fader position."""
    track: Track
    pitch_percent: float
    bpm: float
    key: str
    kci: Optional[float]


@dataclass(frozen=True)
class CompatibilityResult:
    """A candidate track pitched to match the playing track."""
    track: Track
    pitch_percent: float
    bpm: float
    key: str
    compatibility: CompatibilityKind


def reference_state(reference: Track, pitch_percent: float) -> ReferenceState:
    """
    Compute the effective tempo and key of the playing track.

    Args:
        reference: The playing track
        pitch_percent: Its current fader offset in percent

    Returns:
        ReferenceState. The KCI is computed from the nominal tempo and key.
    """
    return ReferenceState(
        track=reference,
        pitch_percent=pitch_percent,
        bpm=bpm_after_pitch(reference.bpm, pitch_percent),
        key=effective_key(reference.key, pitch_percent),
        kci=kci_value(reference.bpm, reference.key),
    )


def _match_candidate(
    state: ReferenceState,
    candidate: Track,
    options: CompatibilityOptions
) -> Optional[CompatibilityResult]:
    pitch_percent = pitch_to_match_bpm(candidate.bpm, state.bpm)
    bpm = bpm_after_pitch(candidate.bpm, pitch_percent)

    if abs(bpm - state.bpm) > options.bpm_tolerance:
        return None

    if options.max_pitch_percent is not None and abs(pitch_percent) > options.max_pitch_percent:
        return None

    if not kci_within_threshold(
        state.kci,
        kci_value(candidate.bpm, candidate.key),
        options.kci_threshold,
    ):
        return None

    key = effective_key(candidate.key, pitch_percent)
    compatibility = classify_compatibility(state.key, key)
    if compatibility is None:
        return None

    return CompatibilityResult(
        track=candidate,
        pitch_percent=pitch_percent,
        bpm=bpm,
        key=key,
        compatibility=compatibility,
    )


def find_compatible_tracks(
    reference: Track,
    reference_pitch_percent: float,
    tracks: Iterable[Track],
    options: Optional[CompatibilityOptions] = None
) -> List[CompatibilityResult]:
    """
    Find the library tracks that mix with the playing track.

    Each candidate is pitched to the playing track's effective tempo and its
    key is transposed by the resulting whole-semitone shift before being
    classified against the playing track's effective key.

    Args:
        reference: The playing track, excluded from the results by id
        reference_pitch_percent: Fader offset of the playing track
        tracks: Full library snapshot
        options: Filter settings, defaults to a 0.3 BPM tolerance only

    Returns:
        Matches ordered by relationship (same key, relative, fifth, fourth),
        then by the smallest fader movement
    """
    options = options or CompatibilityOptions()
    state = reference_state(reference, reference_pitch_percent)

    results = []
    candidate_count = 0
    for candidate in tracks:
        if candidate.id == reference.id:
            continue
        candidate_count += 1
        result = _match_candidate(state, candidate, options)
        if result is not None:
            results.append(result)

    results.sort(key=lambda r: (r.compatibility.rank, abs(r.pitch_percent)))

    logger.debug(
        "Compatible tracks computed",
        reference_id=reference.id,
        reference_bpm=state.bpm,
        reference_key=state.key,
        candidates=candidate_count,
        matches=len(results),
    )
    return results
