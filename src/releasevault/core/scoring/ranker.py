"""Ranking of scored releases.

Order: total score, quality term, custom-format term, then (torrents only)
seeder count, all descending; then release age ascending (newer first);
finally discovery order. Permanently rejected releases are never ranked.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import timezone

from releasevault.core.scoring.models import ScoredRelease

logger = logging.getLogger(__name__)


def _published_ordinal(scored: ScoredRelease) -> float:
    published = scored.candidate.published_at
    if published is None:
        return float("-inf")
    if published.tzinfo is None:
        published = published.replace(tzinfo=timezone.utc)
    return published.timestamp()


def rank_key(scored: ScoredRelease) -> tuple[int, int, int, int, float, int]:
    """Ascending sort key implementing the ranking order."""
    breakdown = scored.breakdown
    candidate = scored.candidate
    seeders = (candidate.seeders or 0) if candidate.is_torrent else 0
    return (
        -breakdown.total,
        -breakdown.quality,
        -breakdown.custom_format,
        -seeders,
        -_published_ordinal(scored),
        scored.discovery_index,
    )


class Ranker:
    """Total order over scored releases."""

    def rank(self, releases: Iterable[ScoredRelease]) -> list[ScoredRelease]:
        """Drop permanently rejected releases and sort the rest best first."""
        eligible = [r for r in releases if not r.is_permanently_rejected]
        ranked = sorted(eligible, key=rank_key)
        logger.debug("Ranked %d releases", len(ranked))
        return ranked


__all__ = ["Ranker", "rank_key"]
