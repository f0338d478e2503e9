"""
Harmonic compatibility rules for pitch-matched mixing.

Intervals are measured upward from the reference root to the candidate
root on the 12-position chromatic circle.

| Relationship         | Interval | Modes     | Example       |
|----------------------|----------|-----------|---------------|
| Same key             | 0        | same      | Amin -> Amin  |
| Relative major/minor | 3 or 9   | different | Amin -> Cmaj  |
| Perfect fifth        | 7        | any       | Amin -> Emin  |
| Perfect fourth       | 5        | any       | Amin -> Dmin  |

Anything else is not considered mixable.
"""

from enum import Enum
from typing import Optional

from pitchcraft.theory.key import parse_key

PERFECT_FIFTH = 7
PERFECT_FOURTH = 5
MINOR_THIRD = 3


class CompatibilityKind(str, Enum):
    """Harmonic relationship between a reference key and a candidate key."""
    SAME_KEY = "same key"
    RELATIVE = "relative major/minor"
    PERFECT_FIFTH = "perfect fifth"
    PERFECT_FOURTH = "perfect fourth"

    @property
    def rank(self) -> int:
        """Position in the result ordering, 0 is the best match."""
        return _RANKS[self]


_RANKS = {
    CompatibilityKind.SAME_KEY: 0,
    CompatibilityKind.RELATIVE: 1,
    CompatibilityKind.PERFECT_FIFTH: 2,
    CompatibilityKind.PERFECT_FOURTH: 3,
}


def classify_compatibility(
    reference_key: Optional[str],
    candidate_key: Optional[str]
) -> Optional[CompatibilityKind]:
    """
    Classify the harmonic relationship between two keys.

    The relation is directional: always pass the playing track's key first.
    A fifth from A to B is a fourth from B to A.

    Args:
        reference_key: Key of the playing track (e.g. "Amin")
        candidate_key: Key of the track that would come next

    Returns:
        The relationship kind, or None when the keys are not compatible or
        either one is unparseable
    """
    reference = parse_key(reference_key)
    candidate = parse_key(candidate_key)
    if reference is None or candidate is None:
        return None

    if reference == candidate:
        return CompatibilityKind.SAME_KEY

    interval = (candidate.root - reference.root + 12) % 12

    if interval == PERFECT_FIFTH:
        return CompatibilityKind.PERFECT_FIFTH

    if interval == PERFECT_FOURTH:
        return CompatibilityKind.PERFECT_FOURTH

    if interval in (MINOR_THIRD, 12 - MINOR_THIRD) and reference.mode != candidate.mode:
        return CompatibilityKind.RELATIVE

    return None
