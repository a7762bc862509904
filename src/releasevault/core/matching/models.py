"""Matching Engine Domain Models.

This module defines immutable domain models for the title matcher: the
catalog entries providers return, the filters passed to them and the
candidates and outcomes the matcher produces. All models are frozen
dataclasses; invalid values raise ``ValueError`` at construction.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from releasevault.core.normalization import clean_title, comparison_key
from releasevault.core.parser.models import ParsedRelease
from releasevault.shared.errors import ProviderError


class ContentType(str, Enum):
    """Kind of media a catalog entry describes."""

    SERIES = "series"
    ANIME = "anime"
    MOVIE = "movie"
    MUSIC_ARTIST = "music-artist"


class MatchMethod(str, Enum):
    """Strategy that produced a match candidate."""

    EXTERNAL_ID = "external-id"
    EXACT_TITLE = "exact-title"
    ALIAS = "alias"
    YEAR_DISAMBIGUATION = "year-disambiguation"
    FUZZY_TITLE = "fuzzy-title"

    @property
    def priority(self) -> int:
        """Tie-break priority between equally confident candidates (higher wins)."""
        return _METHOD_PRIORITY[self]


_METHOD_PRIORITY: dict[MatchMethod, int] = {
    MatchMethod.EXTERNAL_ID: 5,
    MatchMethod.EXACT_TITLE: 4,
    MatchMethod.ALIAS: 3,
    MatchMethod.YEAR_DISAMBIGUATION: 2,
    MatchMethod.FUZZY_TITLE: 1,
}


def _require_text(value: str, name: str) -> None:
    if not value or not value.strip():
        msg = f"{name} cannot be empty or whitespace"
        raise ValueError(msg)


@dataclass(frozen=True)
class CatalogEntry:
    """A known media entity as returned by a catalog provider.

    Attributes:
        external_id: Namespaced identifier, e.g. ``"tvdb:257855"``
        title: Canonical title
        year: First release year
        content_type: Kind of media
        aliases: Alternate titles (foreign titles, historical renames)

    Example:
        >>> entry = CatalogEntry("tvdb:153021", "The Walking Dead", 2010)
        >>> entry.namespace
        'tvdb'
    """

    external_id: str
    title: str
    year: int | None = None
    content_type: ContentType = ContentType.SERIES
    aliases: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        """Validate identifier and title.

        Raises:
            ValueError: If the identifier or title is empty
        """
        _require_text(self.external_id, "External id")
        _require_text(self.title, "Title")

    @property
    def namespace(self) -> str:
        """Identifier namespace (``tvdb``, ``tmdb``, ``imdb``, ``mbid``...)."""
        prefix, sep, _ = self.external_id.partition(":")
        return prefix if sep else ""

    @property
    def titles(self) -> tuple[str, ...]:
        """Canonical title followed by all aliases."""
        return (self.title, *self.aliases)


@dataclass(frozen=True)
class SearchFilters:
    """Optional hints passed to ``CatalogProvider.search``.

    ``year`` is a hint: providers may use it to order or narrow results but
    the matcher still scores entries from other years.
    """

    year: int | None = None
    content_type: ContentType | None = None


@dataclass(frozen=True)
class MatchQuery:
    """Normalized form of a parsed release used by the matching strategies.

    Attributes:
        title: Display title of the release
        clean_title: Lowercased, punctuation-free title (fuzzy comparisons)
        key: Clean title without spaces (exact comparisons)
        year: Parsed year, if any
        external_id: Identifier hint carried by the release name
        alias_ids: Identifiers the alias table lists for the title
    """

    title: str
    clean_title: str
    key: str
    year: int | None = None
    external_id: str | None = None
    alias_ids: tuple[str, ...] = ()

    @classmethod
    def from_release(
        cls,
        release: ParsedRelease,
        alias_ids: tuple[str, ...] = (),
    ) -> MatchQuery:
        return cls(
            title=release.title,
            clean_title=clean_title(release.title),
            key=comparison_key(release.title),
            year=release.year,
            external_id=release.external_id,
            alias_ids=alias_ids,
        )

    @property
    def has_title(self) -> bool:
        return bool(self.key)


@dataclass(frozen=True)
class MatchCandidate:
    """A catalog entry matched against a parsed release.

    Attributes:
        external_id: Namespaced identifier of the matched entry
        title: Entry title
        year: Entry year
        content_type: Entry content type
        confidence: Match confidence (0-100)
        match_method: Strategy that produced the candidate
        provider: Name of the provider the entry came from
    """

    external_id: str
    title: str
    year: int | None
    content_type: ContentType
    confidence: int
    match_method: MatchMethod
    provider: str = ""

    def __post_init__(self) -> None:
        """Validate match candidate fields.

        Raises:
            ValueError: If the title is empty or confidence is out of range
        """
        _require_text(self.title, "Title")
        if not 0 <= self.confidence <= 100:
            msg = f"Confidence {self.confidence} must be between 0 and 100"
            raise ValueError(msg)

    @classmethod
    def from_entry(
        cls,
        entry: CatalogEntry,
        confidence: float,
        method: MatchMethod,
        provider: str = "",
    ) -> MatchCandidate:
        """Build a candidate from a catalog entry, capping confidence at 100."""
        return cls(
            external_id=entry.external_id,
            title=entry.title,
            year=entry.year,
            content_type=entry.content_type,
            confidence=max(0, min(100, round(confidence))),
            match_method=method,
            provider=provider,
        )

    @property
    def sort_key(self) -> tuple[int, int]:
        """Descending-order key: confidence, then method priority."""
        return (self.confidence, self.match_method.priority)


@dataclass(frozen=True)
class MatchOutcome:
    """Result of matching one parsed release.

    An unmatched release still produces an outcome with no candidates, so
    callers can report it instead of silently dropping it.

    Attributes:
        release: The parsed release that was matched
        candidates: Deduplicated candidates, best first
        provider_errors: Failures of individual providers during the lookup
    """

    release: ParsedRelease
    candidates: tuple[MatchCandidate, ...] = ()
    provider_errors: tuple[ProviderError, ...] = ()

    @property
    def is_matched(self) -> bool:
        return bool(self.candidates)

    @property
    def best(self) -> MatchCandidate | None:
        return self.candidates[0] if self.candidates else None


@dataclass(frozen=True)
class BulkMatchReport:
    """Result of matching many releases.

    Attributes:
        outcomes: Outcomes of the releases that were processed, in input order
        completed: Number of releases processed
        pending: Number of releases not processed because of cancellation
        cancelled: Whether the run was cancelled
    """

    outcomes: tuple[MatchOutcome, ...]
    completed: int
    pending: int
    cancelled: bool = False

    @property
    def total(self) -> int:
        return self.completed + self.pending


__all__ = [
    "BulkMatchReport",
    "CatalogEntry",
    "ContentType",
    "MatchCandidate",
    "MatchMethod",
    "MatchOutcome",
    "MatchQuery",
    "SearchFilters",
]
