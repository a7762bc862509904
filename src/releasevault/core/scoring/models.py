"""Scoring Domain Models.

Immutable inputs and outputs of the scorer, rejector, ranker and conflict
resolver. A ``ScoredRelease`` always carries the ``ReleaseCandidate`` it
was derived from, so re-scoring under another profile is a pure function
of (candidate, context).
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from releasevault.config.profiles import (
    CustomFormat,
    PreferredWord,
    ProfileConfig,
    QualityProfile,
    ReleasePolicies,
)
from releasevault.config.settings import ScoringSettings
from releasevault.core.constants import DEFAULT_INDEXER_PRIORITY
from releasevault.core.parser.models import ParsedRelease
from releasevault.core.quality import QualityTag

BYTES_PER_MB = 1024 * 1024


class DownloadProtocol(str, Enum):
    """Transport a release is offered on."""

    TORRENT = "torrent"
    USENET = "usenet"


class RejectionKind(str, Enum):
    """How final a rejection is.

    PERMANENT: never selectable regardless of score
    TEMPORARY: may pass on a later evaluation (e.g. seeders improve)
    USER_POLICY: driven by user configuration, may change between runs
    """

    PERMANENT = "permanent"
    TEMPORARY = "temporary"
    USER_POLICY = "user-policy"


@dataclass(frozen=True)
class Rejection:
    """A reason a release is excluded or deprioritized."""

    reason: str
    kind: RejectionKind
    detail: str = ""

    @property
    def is_permanent(self) -> bool:
        return self.kind is RejectionKind.PERMANENT


@dataclass(frozen=True)
class ReleaseCandidate:
    """A parsed release offered by an indexer.

    Attributes:
        parsed: Parse result of the release title
        protocol: Torrent or usenet
        size_bytes: Release size
        indexer: Name of the indexer offering the release
        indexer_priority: Lower numbers are preferred (1-50, default 25)
        seeders: Torrent seeders; None when unknown or not a torrent
        published_at: When the indexer published the release
        media_first_available: When the target media first became available
        media_unit_id: Library identifier of the target episode/movie/album
        runtime_minutes: Runtime of the target media, for per-minute size checks
        indexer_flags: Indexer flags (freeleech, internal...)
    """

    parsed: ParsedRelease
    protocol: DownloadProtocol = DownloadProtocol.TORRENT
    size_bytes: int = 0
    indexer: str = ""
    indexer_priority: int = DEFAULT_INDEXER_PRIORITY
    seeders: int | None = None
    published_at: datetime | None = None
    media_first_available: datetime | None = None
    media_unit_id: str | None = None
    runtime_minutes: int | None = None
    indexer_flags: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        """Validate numeric fields.

        Raises:
            ValueError: If size, seeders or runtime are negative
        """
        if self.size_bytes < 0:
            msg = f"size_bytes must be non-negative, got {self.size_bytes}"
            raise ValueError(msg)
        if self.seeders is not None and self.seeders < 0:
            msg = f"seeders must be non-negative, got {self.seeders}"
            raise ValueError(msg)
        if self.runtime_minutes is not None and self.runtime_minutes <= 0:
            msg = f"runtime_minutes must be positive, got {self.runtime_minutes}"
            raise ValueError(msg)

    @property
    def title(self) -> str:
        return self.parsed.raw_title

    @property
    def quality(self) -> QualityTag:
        return self.parsed.quality

    @property
    def size_mb(self) -> float:
        return self.size_bytes / BYTES_PER_MB

    @property
    def is_torrent(self) -> bool:
        return self.protocol is DownloadProtocol.TORRENT


def same_edition(first: str | None, second: str | None) -> bool:
    """Editions compare case-insensitively; no edition is the theatrical cut."""
    return (first or "").strip().casefold() == (second or "").strip().casefold()


@dataclass(frozen=True)
class LibraryFile:
    """An existing on-disk file for a media unit."""

    media_unit_id: str
    quality: QualityTag
    edition: str | None = None
    path: str | None = None


@dataclass(frozen=True)
class LibrarySnapshot:
    """Read-only view of existing library files supplied by the caller.

    The core never mutates library state.
    """

    files: tuple[LibraryFile, ...] = ()

    @classmethod
    def of(cls, files: Iterable[LibraryFile]) -> LibrarySnapshot:
        return cls(tuple(files))

    def files_for(self, media_unit_id: str | None) -> tuple[LibraryFile, ...]:
        if media_unit_id is None:
            return ()
        return tuple(f for f in self.files if f.media_unit_id == media_unit_id)

    def best_for(self, media_unit_id: str | None, edition: str | None) -> LibraryFile | None:
        """Highest-weight existing file of one edition of a media unit (first one on ties)."""
        best: LibraryFile | None = None
        for library_file in self.files_for(media_unit_id):
            if not same_edition(library_file.edition, edition):
                continue
            if best is None or library_file.quality.weight > best.quality.weight:
                best = library_file
        return best


EMPTY_LIBRARY = LibrarySnapshot()


def _utc_now() -> datetime:
    return datetime.now(tz=timezone.utc)


@dataclass(frozen=True)
class ScoringContext:
    """Everything scoring and rejection depend on besides the release.

    Attributes:
        profile: Active quality profile
        custom_formats: Custom formats the profile may assign scores to
        preferred_words: Preferred-word rules
        policies: Release policies (seeders, retention, blocklist, restrictions)
        library: Snapshot of existing library files
        now: Reference time for age calculations
        settings: Scoring settings
    """

    profile: QualityProfile
    custom_formats: tuple[CustomFormat, ...] = ()
    preferred_words: tuple[PreferredWord, ...] = ()
    policies: ReleasePolicies = field(default_factory=ReleasePolicies)
    library: LibrarySnapshot = EMPTY_LIBRARY
    now: datetime = field(default_factory=_utc_now)
    settings: ScoringSettings = field(default_factory=ScoringSettings)

    @classmethod
    def from_config(
        cls,
        config: ProfileConfig,
        profile_name: str,
        library: LibrarySnapshot = EMPTY_LIBRARY,
        now: datetime | None = None,
        settings: ScoringSettings | None = None,
    ) -> ScoringContext:
        """Build a context from loaded profile configuration.

        Raises:
            ConfigurationError: If the profile does not exist
        """
        return cls(
            profile=config.profile(profile_name),
            custom_formats=tuple(config.custom_formats),
            preferred_words=tuple(config.preferred_words),
            policies=config.policies,
            library=library,
            now=now or _utc_now(),
            settings=settings or ScoringSettings(),
        )


@dataclass(frozen=True)
class ScoreBreakdown:
    """Named score terms; ``total`` is always their sum."""

    quality: int = 0
    custom_format: int = 0
    preferred_word: int = 0
    indexer_priority: int = 0
    age: int = 0
    seeders: int = 0

    @property
    def total(self) -> int:
        return (
            self.quality
            + self.custom_format
            + self.preferred_word
            + self.indexer_priority
            + self.age
            + self.seeders
        )

    def as_dict(self) -> dict[str, int]:
        return {
            "quality": self.quality,
            "custom_format": self.custom_format,
            "preferred_word": self.preferred_word,
            "indexer_priority": self.indexer_priority,
            "age": self.age,
            "seeders": self.seeders,
            "total": self.total,
        }


@dataclass(frozen=True)
class ScoredRelease:
    """A release with its score breakdown and rejections.

    Attributes:
        candidate: The scored release
        breakdown: Score terms
        matched_formats: Names of the custom formats the release matched
        rejections: Rejections found by the rejector
        discovery_index: Position in the input, the ranker's final tie-break
    """

    candidate: ReleaseCandidate
    breakdown: ScoreBreakdown
    matched_formats: tuple[str, ...] = ()
    rejections: tuple[Rejection, ...] = ()
    discovery_index: int = 0

    @property
    def total(self) -> int:
        return self.breakdown.total

    @property
    def is_rejected(self) -> bool:
        return bool(self.rejections)

    @property
    def is_permanently_rejected(self) -> bool:
        return any(r.is_permanent for r in self.rejections)

    @property
    def rejection_reasons(self) -> tuple[str, ...]:
        return tuple(r.reason for r in self.rejections)


__all__ = [
    "BYTES_PER_MB",
    "EMPTY_LIBRARY",
    "DownloadProtocol",
    "LibraryFile",
    "LibrarySnapshot",
    "Rejection",
    "RejectionKind",
    "ReleaseCandidate",
    "ScoreBreakdown",
    "ScoredRelease",
    "ScoringContext",
    "same_edition",
]
