"""Harmonic matching of library tracks against the playing track"""

from pitchcraft.matching.finder import (
    CompatibilityOptions,
    CompatibilityResult,
    ReferenceState,
    find_compatible_tracks,
    reference_state,
)
from pitchcraft.matching.harmonic_rules import CompatibilityKind, classify_compatibility
from pitchcraft.matching.kci import kci_value

__all__ = [
    "CompatibilityOptions",
    "CompatibilityResult",
    "ReferenceState",
    "find_compatible_tracks",
    "reference_state",
    "CompatibilityKind",
    "classify_compatibility",
    "kci_value",
]
