"""Title matching strategies.

Each strategy compares a ``MatchQuery`` against the catalog entries one
provider returned and yields ``MatchCandidate`` objects. Strategies are
independent and side-effect free; the ``TitleMatcher`` runs every enabled
strategy, concatenates their output and deduplicates by external id.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from releasevault.config.settings import MatcherSettings
from releasevault.core.constants import MatchConfidence
from releasevault.core.matching.models import CatalogEntry, MatchCandidate, MatchMethod, MatchQuery
from releasevault.core.matching.similarity import fuzzy_confidence, levenshtein, title_similarity
from releasevault.core.normalization import clean_title, comparison_key

logger = logging.getLogger(__name__)


@runtime_checkable
class MatchingStrategy(Protocol):
    """Protocol for title matching strategies.

    Attributes:
        method: Match method recorded on produced candidates
    """

    method: MatchMethod

    def evaluate(
        self,
        query: MatchQuery,
        entries: Sequence[CatalogEntry],
        provider: str = "",
    ) -> list[MatchCandidate]:
        """Return candidates for the entries this strategy accepts.

        Must not modify ``entries``; returns an empty list when nothing matches.
        """
        ...


@dataclass(frozen=True)
class ExternalIdStrategy:
    """Entry whose identifier equals the release's identifier hint."""

    method: MatchMethod = MatchMethod.EXTERNAL_ID

    def evaluate(
        self,
        query: MatchQuery,
        entries: Sequence[CatalogEntry],
        provider: str = "",
    ) -> list[MatchCandidate]:
        if not query.external_id:
            return []
        return [
            MatchCandidate.from_entry(entry, MatchConfidence.EXTERNAL_ID, self.method, provider)
            for entry in entries
            if entry.external_id == query.external_id
        ]


@dataclass(frozen=True)
class ExactTitleStrategy:
    """Clean-title equality, 95 confidence plus 5 when the year also matches."""

    method: MatchMethod = MatchMethod.EXACT_TITLE

    def evaluate(
        self,
        query: MatchQuery,
        entries: Sequence[CatalogEntry],
        provider: str = "",
    ) -> list[MatchCandidate]:
        if not query.has_title:
            return []

        candidates: list[MatchCandidate] = []
        for entry in entries:
            if comparison_key(entry.title) != query.key:
                continue
            confidence = MatchConfidence.EXACT_TITLE
            if query.year is not None and entry.year == query.year:
                confidence += MatchConfidence.EXACT_YEAR_BONUS
            candidates.append(MatchCandidate.from_entry(entry, confidence, self.method, provider))
        return candidates


@dataclass(frozen=True)
class AliasStrategy:
    """Alternate-title match, fixed confidence 85.

    An entry matches when one of its own aliases equals the release title
    or when the alias table lists the entry's identifier for the title.
    """

    method: MatchMethod = MatchMethod.ALIAS

    def evaluate(
        self,
        query: MatchQuery,
        entries: Sequence[CatalogEntry],
        provider: str = "",
    ) -> list[MatchCandidate]:
        if not query.has_title:
            return []

        candidates: list[MatchCandidate] = []
        for entry in entries:
            listed = entry.external_id in query.alias_ids
            if listed or any(comparison_key(alias) == query.key for alias in entry.aliases):
                candidates.append(
                    MatchCandidate.from_entry(entry, MatchConfidence.ALIAS, self.method, provider)
                )
        return candidates


@dataclass(frozen=True)
class YearDisambiguationStrategy:
    """Title similarity scaled to 0-80, plus 20 when the years match.

    Only runs when the release carries a year.

    Attributes:
        min_similarity: Scaled similarity below which entries are ignored
    """

    min_similarity: int = 40
    method: MatchMethod = MatchMethod.YEAR_DISAMBIGUATION

    def evaluate(
        self,
        query: MatchQuery,
        entries: Sequence[CatalogEntry],
        provider: str = "",
    ) -> list[MatchCandidate]:
        if query.year is None or not query.has_title:
            return []

        scale = MatchConfidence.YEAR_SIMILARITY_MAX / 100
        candidates: list[MatchCandidate] = []
        for entry in entries:
            similarity = title_similarity(query.title, entry.title) * scale
            if similarity < self.min_similarity:
                continue
            confidence = similarity
            if entry.year == query.year:
                confidence += MatchConfidence.YEAR_MATCH_BONUS
            candidates.append(MatchCandidate.from_entry(entry, confidence, self.method, provider))
        return candidates


@dataclass(frozen=True)
class FuzzyTitleStrategy:
    """Levenshtein distance between clean titles within ``max_distance``.

    Confidence falls linearly from 90 (distance 0) to 60 (``max_distance``).
    """

    max_distance: int = MatchConfidence.DEFAULT_MAX_FUZZY_DISTANCE
    method: MatchMethod = MatchMethod.FUZZY_TITLE

    def evaluate(
        self,
        query: MatchQuery,
        entries: Sequence[CatalogEntry],
        provider: str = "",
    ) -> list[MatchCandidate]:
        if not query.has_title:
            return []

        candidates: list[MatchCandidate] = []
        for entry in entries:
            distance = levenshtein(query.clean_title, clean_title(entry.title))
            if distance > self.max_distance:
                continue
            confidence = fuzzy_confidence(distance, self.max_distance)
            candidates.append(MatchCandidate.from_entry(entry, confidence, self.method, provider))
        return candidates


def build_strategies(settings: MatcherSettings) -> tuple[MatchingStrategy, ...]:
    """Enabled strategies in method-priority order (external id first).

    The order is also the concatenation order, so when two strategies
    produce the same entry the higher-priority method's candidate is kept.
    """
    strategies: list[MatchingStrategy] = []
    if settings.enable_external_id:
        strategies.append(ExternalIdStrategy())
    if settings.enable_exact:
        strategies.append(ExactTitleStrategy())
    if settings.enable_alias:
        strategies.append(AliasStrategy())
    if settings.enable_year_disambiguation:
        strategies.append(YearDisambiguationStrategy(min_similarity=settings.min_year_similarity))
    if settings.enable_fuzzy:
        strategies.append(FuzzyTitleStrategy(max_distance=settings.max_fuzzy_distance))

    logger.debug("Matching strategies: %s", [s.method.value for s in strategies])
    return tuple(strategies)


__all__ = [
    "AliasStrategy",
    "ExactTitleStrategy",
    "ExternalIdStrategy",
    "FuzzyTitleStrategy",
    "MatchingStrategy",
    "YearDisambiguationStrategy",
    "build_strategies",
]
