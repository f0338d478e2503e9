"""
Key Compatibility Index (KCI).

KCI = tempo / root frequency * 100, with root frequencies taken from
REFERENCE_FREQUENCIES (A4 = 440 Hz). Two tracks whose KCI values are close
are considered a better fit. The index is an auxiliary filter next to the
harmonic rules and is kept exactly as defined.
"""

from typing import Optional

from pitchcraft.theory.key import key_to_frequency


def kci_value(bpm: float, key: Optional[str]) -> Optional[float]:
    """
    Compute the KCI of a tempo/key pair.

    Args:
        bpm: Tempo in beats per minute
        key: Key string

    Returns:
        KCI value, or None when the key is unparseable
    """
    frequency = key_to_frequency(key)
    if not frequency:
        return None
    return bpm / frequency * 100


def kci_within_threshold(
    reference_kci: Optional[float],
    candidate_kci: Optional[float],
    threshold: Optional[float]
) -> bool:
    """
    Apply the KCI filter.

    A missing or non-positive threshold disables the filter, and so does a
    value that cannot be computed on either side.
    """
    if threshold is None or threshold <= 0:
        return True
    if reference_kci is None or candidate_kci is None:
        return True
    return abs(candidate_kci - reference_kci) <= threshold
