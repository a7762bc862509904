"""String similarity helpers for title matching.

Edit distances come from ``rapidfuzz``; all comparisons are made on clean
titles (see ``releasevault.core.normalization.clean_title``).
"""

from __future__ import annotations

from rapidfuzz.distance import Levenshtein

from releasevault.core.constants import MatchConfidence
from releasevault.core.normalization import clean_title


def levenshtein(first: str, second: str) -> int:
    """Minimum number of single-character edits turning one string into the other.

    Examples:
        >>> levenshtein("kitten", "sitting")
        3
    """
    return int(Levenshtein.distance(first, second))


def title_similarity(first: str, second: str) -> float:
    """Similarity of two titles on a 0-100 scale.

    Exact clean-title match scores 100, containment of one in the other
    scores ``70 + 25 * shorter/longer``, anything else scores
    ``100 * (1 - distance/longest)``.

    Examples:
        >>> title_similarity("The Office", "the office!")
        100.0
        >>> title_similarity("Office", "The Office")
        85.0
    """
    a = clean_title(first)
    b = clean_title(second)
    if not a or not b:
        return 0.0
    if a == b:
        return 100.0

    shorter, longer = sorted((len(a), len(b)))
    if a in b or b in a:
        return MatchConfidence.SUBSTRING_BASE + MatchConfidence.SUBSTRING_RANGE * (shorter / longer)

    return max(0.0, 100.0 * (1 - levenshtein(a, b) / longer))


def fuzzy_confidence(
    distance: int,
    max_distance: int = MatchConfidence.DEFAULT_MAX_FUZZY_DISTANCE,
) -> float:
    """Confidence of a fuzzy match, linear from 90 at distance 0 to 60 at ``max_distance``.

    Raises:
        ValueError: If the distance is negative or beyond ``max_distance``
    """
    if max_distance <= 0:
        msg = f"max_distance must be positive, got {max_distance}"
        raise ValueError(msg)
    if not 0 <= distance <= max_distance:
        msg = f"distance {distance} outside [0, {max_distance}]"
        raise ValueError(msg)
    return MatchConfidence.FUZZY_MAX - (distance / max_distance) * MatchConfidence.FUZZY_RANGE


__all__ = ["fuzzy_confidence", "levenshtein", "title_similarity"]
