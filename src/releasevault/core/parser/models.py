"""Data models for release title parsing.

All parsing strategies return a ``ParsedRelease``. Records are immutable:
post-processing rebuilds them with ``dataclasses.replace`` instead of
patching fields in place.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Generic, TypeVar

from releasevault.core.normalization import clean_title as build_clean_title
from releasevault.core.quality import UNKNOWN_QUALITY, ContentKind, QualityTag

T = TypeVar("T")


class LanguageTag(str, Enum):
    """Audio/subtitle language of a release."""

    UNSPECIFIED = "unspecified"
    MULTI = "multi"
    ENGLISH = "english"
    FRENCH = "french"
    GERMAN = "german"
    SPANISH = "spanish"
    ITALIAN = "italian"
    PORTUGUESE = "portuguese"
    DUTCH = "dutch"
    RUSSIAN = "russian"
    POLISH = "polish"
    SWEDISH = "swedish"
    NORWEGIAN = "norwegian"
    DANISH = "danish"
    FINNISH = "finnish"
    JAPANESE = "japanese"
    KOREAN = "korean"
    CHINESE = "chinese"
    HINDI = "hindi"
    ARABIC = "arabic"
    TURKISH = "turkish"


class ParserKind(str, Enum):
    """Name of the strategy that produced a result."""

    ARR_PATTERN = "arr-pattern"
    SCENE = "scene"
    ANIME = "anime"
    USER_NAMING = "user-naming"
    FALLBACK = "fallback"


@dataclass(frozen=True)
class Extraction(Generic[T]):
    """Value found by an extractor together with the span it came from."""

    value: T
    span: tuple[int, int]

    @property
    def start(self) -> int:
        return self.span[0]

    @property
    def end(self) -> int:
        return self.span[1]


@dataclass(frozen=True)
class Modifiers:
    """Revision markers of a release.

    Attributes:
        proper: PROPER release (fixes a previous release by another group)
        repack: REPACK/RERIP release (fixes a previous release by the same group)
        real: REAL marker, case-sensitive in release names
        version: Anime release version (v2, v3...); 1 when absent
    """

    proper: bool = False
    repack: bool = False
    real: bool = False
    version: int = 1

    def __post_init__(self) -> None:
        if not 1 <= self.version <= 255:
            msg = f"Version must be between 1 and 255, got {self.version}"
            raise ValueError(msg)

    @property
    def is_revision(self) -> bool:
        return self.proper or self.repack or self.real or self.version > 1


DEFAULT_LANGUAGES: frozenset[LanguageTag] = frozenset({LanguageTag.UNSPECIFIED})


@dataclass(frozen=True)
class ParsedRelease:
    """Structured metadata parsed from one release title.

    Attributes:
        raw_title: The title exactly as handed to the parser
        title: Display title of the series, movie or artist
        clean_title: Lowercased, punctuation-free form of ``title``
        year: Release year
        season_number: Season number (0 for specials)
        episode_numbers: Episode numbers in order of appearance
        absolute_episode_number: Continuous episode number (anime only)
        air_date: Broadcast date for daily shows
        episode_title: Episode title (arr-style names only)
        external_id: Catalog identifier hint, e.g. ``"tmdb:603"``
        quality: Quality tag with precomputed weight
        languages: Languages; ``{UNSPECIFIED}`` when no token matched
        release_group: Credited release or fansub group
        release_hash: CRC32 checksum found in brackets
        modifiers: Proper/repack/real/version markers
        edition: Edition label (Director's Cut, Extended...)
        codec: Video codec (x264, x265, AV1...)
        audio_codec: Audio codec (DDP, AAC, TrueHD...)
        audio_channels: Channel layout ("5.1", "2.0"...)
        hdr: HDR format (dolby-vision, hdr10+, hdr10, hdr, hlg)
        is_3d: Stereoscopic release
        confidence: 0..100; 0 only when the fallback strategy produced the record
        parser_used: Strategy that produced the record
    """

    raw_title: str
    title: str = ""
    clean_title: str = field(init=False, default="")
    year: int | None = None
    season_number: int | None = None
    episode_numbers: tuple[int, ...] = ()
    absolute_episode_number: int | None = None
    air_date: date | None = None
    episode_title: str | None = None
    external_id: str | None = None
    quality: QualityTag = UNKNOWN_QUALITY
    languages: frozenset[LanguageTag] = field(default=DEFAULT_LANGUAGES)
    release_group: str | None = None
    release_hash: str | None = None
    modifiers: Modifiers = field(default_factory=Modifiers)
    edition: str | None = None
    codec: str | None = None
    audio_codec: str | None = None
    audio_channels: str | None = None
    hdr: str | None = None
    is_3d: bool = False
    confidence: int = 0
    parser_used: ParserKind = ParserKind.FALLBACK

    def __post_init__(self) -> None:
        """Validate confidence and derive the clean title.

        Raises:
            ValueError: If confidence is outside [0, 100]
        """
        if not 0 <= self.confidence <= 100:
            msg = f"Confidence must be between 0 and 100, got {self.confidence}"
            raise ValueError(msg)
        object.__setattr__(self, "clean_title", build_clean_title(self.title))

    @property
    def series_title(self) -> str:
        return self.title

    @property
    def is_daily(self) -> bool:
        return self.air_date is not None

    @property
    def is_season_pack(self) -> bool:
        return (
            self.season_number is not None
            and not self.episode_numbers
            and self.absolute_episode_number is None
            and self.air_date is None
        )

    @property
    def is_anime(self) -> bool:
        return self.parser_used is ParserKind.ANIME or self.absolute_episode_number is not None

    @property
    def is_music(self) -> bool:
        return self.quality.content_kind is ContentKind.AUDIO

    @property
    def is_movie(self) -> bool:
        """No episode identity of any kind, and not a music release."""
        return (
            self.season_number is None
            and not self.episode_numbers
            and self.absolute_episode_number is None
            and self.air_date is None
            and not self.is_music
        )

    @property
    def is_matched(self) -> bool:
        """True when a strategy other than the fallback accepted the title."""
        return self.confidence > 0


__all__ = [
    "DEFAULT_LANGUAGES",
    "Extraction",
    "LanguageTag",
    "Modifiers",
    "ParsedRelease",
    "ParserKind",
]
