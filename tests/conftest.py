"""
Pytest configuration and shared fixtures for ReleaseVault tests.

This module provides common fixtures used across the parser, matcher and
scoring test modules.
"""

from __future__ import annotations

import copy
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any

import pytest

from releasevault.config.profiles import ProfileConfig
from releasevault.core.matching.models import CatalogEntry, ContentType
from releasevault.core.parser.models import ParsedRelease
from releasevault.core.parser.patterns import PatternLibrary, get_pattern_library
from releasevault.core.parser.pipeline import ReleaseParser
from releasevault.core.quality import QualityTag
from releasevault.core.scoring.models import ReleaseCandidate, ScoringContext
from releasevault.services.catalog import InMemoryCatalog

PROFILE_DATA: dict[str, Any] = {
    "quality_profiles": [
        {
            "name": "HD",
            "items": [
                "HDTV-720p",
                "WEB-DL 720p",
                "HDTV-1080p",
                "WEB-DL 1080p",
                "BluRay-1080p",
            ],
            "cutoff": "BluRay-1080p",
            "format_scores": {"x265": 50, "Low Quality Group": -100},
            "max_size_mb": 20000,
        },
        {
            "name": "Frozen",
            "items": ["HDTV-720p", "WEB-DL 1080p", "BluRay-1080p"],
            "upgrade_allowed": False,
        },
    ],
    "custom_formats": [
        {
            "name": "x265",
            "conditions": [{"type": "codec", "pattern": "x265|h265", "required": True}],
        },
        {
            "name": "Low Quality Group",
            "conditions": [{"type": "release_group", "pattern": "^LQ$"}],
        },
    ],
    "preferred_words": [{"term": "PROPER", "score": 10}],
    "policies": {
        "minimum_seeders": 3,
        "usenet_retention_days": 3000,
        "blocklist": ["Show.S01E01.1080p.WEB-DL-BAD"],
        "restrictions": [{"must_not_contain": ["/\\bcam\\b/"]}],
    },
}


@pytest.fixture
def patterns() -> PatternLibrary:
    """Shared compiled pattern library."""
    return get_pattern_library()


@pytest.fixture
def parser() -> ReleaseParser:
    """Parser with default settings."""
    return ReleaseParser()


@pytest.fixture
def now() -> datetime:
    """Fixed reference time for age calculations."""
    return datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def profile_data() -> dict[str, Any]:
    """Mutable copy of the raw profile configuration."""
    return copy.deepcopy(PROFILE_DATA)


@pytest.fixture
def profile_config() -> ProfileConfig:
    """Validated profile configuration with two profiles and two custom formats."""
    return ProfileConfig.from_dict(PROFILE_DATA)


@pytest.fixture
def scoring_context(profile_config: ProfileConfig, now: datetime) -> ScoringContext:
    """Scoring context for the HD profile with an empty library."""
    return ScoringContext.from_config(profile_config, "HD", now=now)


@pytest.fixture
def make_candidate() -> Callable[..., ReleaseCandidate]:
    """Factory for release candidates with sensible defaults.

    Keyword arguments named after ``ParsedRelease`` fields go to the parsed
    release; everything else goes to ``ReleaseCandidate``.
    """

    parsed_fields = {"release_group", "codec", "edition", "languages"}

    def _make(
        title: str = "Show.S01E01.1080p.WEB-DL-GRP",
        quality: str = "WEB-DL 1080p",
        **kwargs: Any,
    ) -> ReleaseCandidate:
        parsed_kwargs = {k: kwargs.pop(k) for k in list(kwargs) if k in parsed_fields}
        parsed_kwargs.setdefault("release_group", "GRP")
        parsed = ParsedRelease(
            raw_title=title,
            title="Show",
            season_number=1,
            episode_numbers=(1,),
            quality=QualityTag.from_name(quality),
            confidence=90,
            **parsed_kwargs,
        )
        kwargs.setdefault("size_bytes", 2 * 1024 * 1024 * 1024)
        return ReleaseCandidate(parsed=parsed, **kwargs)

    return _make


@pytest.fixture
def catalog_entries() -> list[CatalogEntry]:
    """Catalog entries covering exact, year, alias and movie lookups."""
    return [
        CatalogEntry("tvdb:153021", "The Walking Dead", 2010),
        CatalogEntry("tvdb:290853", "Fear the Walking Dead", 2015),
        CatalogEntry("tvdb:78804", "Doctor Who", 2005),
        CatalogEntry("tvdb:76107", "Doctor Who", 1963),
        CatalogEntry("tvdb:81797", "One Piece", 1999, ContentType.ANIME),
        CatalogEntry("tmdb:603", "The Matrix", 1999, ContentType.MOVIE),
    ]


@pytest.fixture
def catalog(catalog_entries: list[CatalogEntry]) -> InMemoryCatalog:
    """In-memory catalog provider named ``local``."""
    return InMemoryCatalog("local", catalog_entries)


@pytest.fixture
def release_factory() -> Callable[..., ParsedRelease]:
    """Build a parsed release directly, bypassing the parser."""

    def _make(title: str, **kwargs: Any) -> ParsedRelease:
        kwargs.setdefault("confidence", 80)
        return ParsedRelease(raw_title=title, title=title, **kwargs)

    return _make
