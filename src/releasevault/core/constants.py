"""Core module constants.

This module defines constants used within the core engine: parsing
confidence contributions, strategy priorities, matcher confidences and the
scoring step functions.

Confidence values are integers on a 0..100 scale.
"""

from __future__ import annotations

from typing import Final


class ParsingConfidence:
    """Confidence contributions for parsing operations."""

    TITLE_FOUND = 40  # A non-empty title was extracted
    IDENTITY_FOUND = 30  # Episode(s), absolute number, air date, season pack or movie year
    SEASON_FOUND = 10  # Season number extracted
    FANSUB_SIGNATURE = 10  # Bracketed group or CRC hash on an anime name
    ARR_QUALITY_BRACKET = 10  # Quality bracket in an arr-style name
    METADATA_BONUS = 5  # Each of resolution, source, codec, release group
    METADATA_BONUS_MAX = 20

    MIN_ACCEPTED = 50  # A strategy accepts at or above this confidence
    FALLBACK = 0  # The fallback strategy never claims any confidence
    MAX = 100


class StrategyPriority:
    """Static priorities of the parsing strategies (highest first)."""

    ARR_PATTERN = 100
    SCENE = 90
    ANIME = 85
    USER_NAMING = 70
    FALLBACK = 50


class PostProcessLimits:
    """Range limits applied after a strategy accepts.

    Values outside these ranges are dropped rather than clamped.
    """

    MAX_EPISODE_EXCLUSIVE = 10000  # episodes must lie in (0, 10000)
    MIN_SEASON = 0
    MAX_SEASON = 100
    MIN_YEAR = 1900
    FUTURE_YEAR_TOLERANCE = 5


class MatchConfidence:
    """Confidence values produced by the title matcher strategies."""

    EXTERNAL_ID = 100
    EXACT_TITLE = 95
    EXACT_YEAR_BONUS = 5
    YEAR_SIMILARITY_MAX = 80
    YEAR_MATCH_BONUS = 20
    FUZZY_MAX = 90
    FUZZY_RANGE = 30
    ALIAS = 85

    DEFAULT_MAX_FUZZY_DISTANCE = 3
    SUBSTRING_BASE = 70
    SUBSTRING_RANGE = 25


class AgeScoring:
    """Release-age rewards, applied only to recently available media."""

    RECENT_MEDIA_DAYS = 30
    CURRENT_MEDIA_DAYS = 365

    # (max release age in days, score) for media younger than RECENT_MEDIA_DAYS
    RECENT_STEPS: Final[tuple[tuple[int, int], ...]] = ((0, 100), (7, 50), (14, 25))
    # same for media younger than CURRENT_MEDIA_DAYS
    CURRENT_STEPS: Final[tuple[tuple[int, int], ...]] = ((7, 50), (30, 25))


class SeederScoring:
    """Step function for torrent seeders."""

    NO_SEEDERS_PENALTY = -1000
    # (upper bound exclusive, score); >= last bound scores MAX_SCORE
    STEPS: Final[tuple[tuple[int, int], ...]] = ((5, 0), (10, 25), (50, 50), (100, 75))
    MAX_SCORE = 100


class QualityScoring:
    """Quality term multiplier (1-based profile rank position x 100)."""

    RANK_MULTIPLIER = 100


DEFAULT_INDEXER_PRIORITY: Final[int] = 25

MEDIA_EXTENSIONS: Final[frozenset[str]] = frozenset(
    {
        "mkv", "mp4", "avi", "m4v", "mov", "wmv", "ts", "m2ts", "webm", "mpg", "mpeg",
        "flac", "mp3", "m4a", "aac", "ogg", "opus", "wav", "alac",
        "nzb", "torrent", "srt", "ass",
    }
)


__all__ = [
    "DEFAULT_INDEXER_PRIORITY",
    "MEDIA_EXTENSIONS",
    "AgeScoring",
    "MatchConfidence",
    "ParsingConfidence",
    "PostProcessLimits",
    "QualityScoring",
    "SeederScoring",
    "StrategyPriority",
]
