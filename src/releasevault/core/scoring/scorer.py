"""Release scoring.

``total = quality + custom_format + preferred_word + indexer_priority + age + seeders``

Every term is a pure function of the release candidate and the scoring
context, so scoring the same candidate under another profile never depends
on a previous score.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import datetime

from releasevault.config.profiles import CustomFormat, PreferredWord, QualityProfile
from releasevault.core.constants import AgeScoring, QualityScoring, SeederScoring
from releasevault.core.quality import QualityTag
from releasevault.core.scoring.custom_formats import matching_formats
from releasevault.core.scoring.models import (
    ReleaseCandidate,
    ScoreBreakdown,
    ScoredRelease,
    ScoringContext,
)

logger = logging.getLogger(__name__)


def quality_score(quality: QualityTag, profile: QualityProfile) -> int:
    """1-based rank of the quality among the profile's allowed items x 100.

    Qualities the profile does not allow score 0; the rejector removes them.
    """
    rank = profile.rank_of(quality)
    return 0 if rank is None else rank * QualityScoring.RANK_MULTIPLIER


def custom_format_score(formats: Iterable[CustomFormat], profile: QualityProfile) -> int:
    return sum(profile.format_scores.get(cf.name, 0) for cf in formats)


def preferred_word_score(title: str, words: Iterable[PreferredWord]) -> int:
    return sum(word.score for word in words if word.matches(title))


def indexer_priority_score(priority: int, baseline: int) -> int:
    """Lower indexer priority numbers are preferred."""
    return baseline - priority


def _days_between(earlier: datetime, later: datetime) -> int:
    return (later - earlier).days


def age_score(candidate: ReleaseCandidate, now: datetime) -> int:
    """Reward fresh releases of recently available media.

    Media available for less than 30 days: same-day release +100, within a
    week +50, within two weeks +25. Media younger than a year: within a week
    +50, within 30 days +25. Older media never gains or loses anything.
    """
    if candidate.published_at is None or candidate.media_first_available is None:
        return 0

    media_age = _days_between(candidate.media_first_available, now)
    if media_age < AgeScoring.RECENT_MEDIA_DAYS:
        steps = AgeScoring.RECENT_STEPS
    elif media_age < AgeScoring.CURRENT_MEDIA_DAYS:
        steps = AgeScoring.CURRENT_STEPS
    else:
        return 0

    release_age = max(0, _days_between(candidate.published_at, now))
    for max_days, score in steps:
        if release_age <= max_days:
            return score
    return 0


def seeders_score(candidate: ReleaseCandidate) -> int:
    """Step function over torrent seeders; usenet and unknown counts score 0."""
    if not candidate.is_torrent or candidate.seeders is None:
        return 0
    if candidate.seeders == 0:
        return SeederScoring.NO_SEEDERS_PENALTY
    for upper_bound, score in SeederScoring.STEPS:
        if candidate.seeders < upper_bound:
            return score
    return SeederScoring.MAX_SCORE


class Scorer:
    """Compute score breakdowns for release candidates.

    Example:
        >>> scorer = Scorer()
        >>> scored = scorer.score(candidate, context)
        >>> scored.breakdown.as_dict()
        {'quality': 300, 'custom_format': 0, ..., 'total': 375}
    """

    def breakdown(
        self,
        candidate: ReleaseCandidate,
        context: ScoringContext,
    ) -> tuple[ScoreBreakdown, list[CustomFormat]]:
        """Return the score terms and the custom formats the release matched."""
        formats = matching_formats(context.custom_formats, candidate)
        breakdown = ScoreBreakdown(
            quality=quality_score(candidate.quality, context.profile),
            custom_format=custom_format_score(formats, context.profile),
            preferred_word=preferred_word_score(candidate.title, context.preferred_words),
            indexer_priority=indexer_priority_score(
                candidate.indexer_priority,
                context.settings.indexer_priority_baseline,
            ),
            age=age_score(candidate, context.now),
            seeders=seeders_score(candidate),
        )
        return breakdown, formats

    def score(
        self,
        candidate: ReleaseCandidate,
        context: ScoringContext,
        discovery_index: int = 0,
    ) -> ScoredRelease:
        breakdown, formats = self.breakdown(candidate, context)
        logger.debug("Scored '%s': %s", candidate.title, breakdown.as_dict())
        return ScoredRelease(
            candidate=candidate,
            breakdown=breakdown,
            matched_formats=tuple(cf.name for cf in formats),
            discovery_index=discovery_index,
        )


__all__ = [
    "Scorer",
    "age_score",
    "custom_format_score",
    "indexer_priority_score",
    "preferred_word_score",
    "quality_score",
    "seeders_score",
]
