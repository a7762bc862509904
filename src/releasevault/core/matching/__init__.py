"""Title matching: catalog lookups, matching strategies and candidate ranking."""

from releasevault.core.matching.matcher import TitleMatcher
from releasevault.core.matching.models import (
    BulkMatchReport,
    CatalogEntry,
    ContentType,
    MatchCandidate,
    MatchMethod,
    MatchOutcome,
    MatchQuery,
    SearchFilters,
)
from releasevault.core.matching.similarity import fuzzy_confidence, levenshtein, title_similarity

__all__ = [
    "BulkMatchReport",
    "CatalogEntry",
    "ContentType",
    "MatchCandidate",
    "MatchMethod",
    "MatchOutcome",
    "MatchQuery",
    "SearchFilters",
    "TitleMatcher",
    "fuzzy_confidence",
    "levenshtein",
    "title_similarity",
]
