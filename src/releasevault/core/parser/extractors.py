"""Field extractors for release titles.

One pure function per semantic field. Each takes a normalized title and the
pattern library and returns an :class:`Extraction` (value plus matched span)
or ``None``. Extractors never raise: every one is wrapped by
:func:`safe_extractor`, which turns an unexpected exception into "field
absent".
"""

from __future__ import annotations

import functools
import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date
from typing import Any, TypeVar

from releasevault.core.parser.models import Extraction, LanguageTag, Modifiers
from releasevault.core.parser.patterns import PatternLibrary
from releasevault.core.quality import QualityModifier, QualitySource, QualityTag, Resolution

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])

# Ranges wider than this are kept as their two endpoints
MAX_EPISODE_RANGE = 100

_RESOLUTION_BY_WIDTH: tuple[tuple[int, Resolution], ...] = (
    (3800, Resolution.R2160P),
    (1900, Resolution.R1080P),
    (1200, Resolution.R720P),
    (960, Resolution.R540P),
    (700, Resolution.R480P),
    (0, Resolution.R360P),
)

_CHANNELS_BY_COUNT = {1: "1.0", 2: "2.0", 3: "2.1", 6: "5.1", 8: "7.1"}
_KNOWN_HEIGHTS = frozenset(r.value for r in Resolution if r)


def safe_extractor(func: F) -> F:
    """Turn any exception raised by an extractor into a missing field."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except Exception:  # pylint: disable=broad-exception-caught
            logger.debug(
                "Extractor '%s' failed, treating field as absent",
                func.__name__,
                exc_info=True,
            )
            return None

    return wrapper  # type: ignore[return-value]


@dataclass(frozen=True)
class SeasonEpisode:
    """Season number and the episode numbers found next to it."""

    season: int
    episodes: tuple[int, ...]


def _first_in_order(text: str, table: tuple[tuple[Any, Any], ...]) -> Extraction[Any] | None:
    # table order is the priority order, position in the string is irrelevant
    for value, pattern in table:
        match = pattern.search(text)
        if match:
            return Extraction(value, match.span())
    return None


@safe_extractor
def extract_resolution(text: str, patterns: PatternLibrary) -> Extraction[Resolution] | None:
    """Find the video resolution.

    Explicit tokens (1080p) beat dimension strings (1920x1080), which beat
    aliases (4K, FHD, HD). Source-based defaults are applied by
    :func:`extract_quality`, not here.
    """
    match = patterns.resolution_explicit.search(text)
    if match:
        return Extraction(Resolution(int(match.group("height"))), match.span())

    match = patterns.resolution_dimensions.search(text)
    if match:
        height = int(match.group("height"))
        if height in _KNOWN_HEIGHTS:
            return Extraction(Resolution(height), match.span())
        width = int(match.group("width"))
        for min_width, resolution in _RESOLUTION_BY_WIDTH:
            if width >= min_width:
                return Extraction(resolution, match.span())

    return _first_in_order(text, patterns.resolution_aliases)


@safe_extractor
def extract_source(text: str, patterns: PatternLibrary) -> Extraction[QualitySource] | None:
    """Find the release source by fixed priority, then by streaming service."""
    found = _first_in_order(text, patterns.sources)
    if found is not None:
        return found

    match = patterns.streaming_service.search(text)
    if match:
        return Extraction(QualitySource.WEBDL, match.span())
    return None


@safe_extractor
def extract_audio_quality(text: str, patterns: PatternLibrary) -> Extraction[QualitySource] | None:
    """Find the audio tier of a music release."""
    return _first_in_order(text, patterns.audio_qualities)


@safe_extractor
def extract_modifiers(text: str, patterns: PatternLibrary) -> Extraction[Modifiers] | None:
    """Find PROPER, REPACK, REAL and version markers."""
    proper = patterns.proper.search(text)
    repack = patterns.repack.search(text)
    real = patterns.real.search(text)
    version = patterns.version.search(text)

    found = [m for m in (proper, repack, real, version) if m is not None]
    if not found:
        return None

    modifiers = Modifiers(
        proper=proper is not None,
        repack=repack is not None,
        real=real is not None,
        version=int(version.group("version")) if version else 1,
    )
    span = (min(m.start() for m in found), max(m.end() for m in found))
    return Extraction(modifiers, span)


def quality_modifier(modifiers: Modifiers) -> QualityModifier | None:
    """Map release modifiers to the revision carried by the quality tag."""
    if modifiers.repack or modifiers.version > 1:
        return QualityModifier.REPACK
    if modifiers.proper or modifiers.real:
        return QualityModifier.PROPER
    return None


@safe_extractor
def extract_quality(text: str, patterns: PatternLibrary) -> Extraction[QualityTag] | None:
    """Build the quality tag from source, resolution and revision markers.

    A resolution without a source token is treated as a TV capture (HDTV at
    720p and above, SDTV below). Titles with neither are checked for music
    audio tiers.
    """
    source = extract_source(text, patterns)
    resolution = extract_resolution(text, patterns)
    modifiers = extract_modifiers(text, patterns)
    modifier = quality_modifier(modifiers.value) if modifiers else None

    if source is None and resolution is None:
        audio = extract_audio_quality(text, patterns)
        if audio is None:
            return None
        return Extraction(QualityTag.create(audio.value, Resolution.UNKNOWN, modifier), audio.span)

    if resolution is not None:
        res = resolution.value
    else:
        res = patterns.source_default_resolution.get(source.value, Resolution.UNKNOWN)

    if source is not None:
        src = source.value
    elif res >= Resolution.R720P:
        src = QualitySource.HDTV
    else:
        src = QualitySource.SDTV

    spans = [e.span for e in (source, resolution) if e is not None]
    span = (min(s[0] for s in spans), max(s[1] for s in spans))
    return Extraction(QualityTag.create(src, res, modifier), span)


@safe_extractor
def extract_codec(text: str, patterns: PatternLibrary) -> Extraction[str] | None:
    return _first_in_order(text, patterns.codecs)


@safe_extractor
def extract_audio_codec(text: str, patterns: PatternLibrary) -> Extraction[str] | None:
    return _first_in_order(text, patterns.audio_codecs)


@safe_extractor
def extract_audio_channels(text: str, patterns: PatternLibrary) -> Extraction[str] | None:
    """Find the channel layout, written as 5.1 or as a count like 6ch."""
    match = patterns.audio_channels.search(text)
    if match:
        return Extraction(match.group("channels"), match.span("channels"))

    match = patterns.audio_channel_count.search(text)
    if match:
        count = int(match.group("count"))
        return Extraction(_CHANNELS_BY_COUNT.get(count, f"{count}.0"), match.span())
    return None


@safe_extractor
def extract_hdr(text: str, patterns: PatternLibrary) -> Extraction[str] | None:
    return _first_in_order(text, patterns.hdr)


@safe_extractor
def extract_3d(text: str, patterns: PatternLibrary) -> Extraction[bool] | None:
    match = patterns.three_d.search(text)
    return Extraction(True, match.span()) if match else None


@safe_extractor
def extract_languages(
    text: str, patterns: PatternLibrary
) -> Extraction[frozenset[LanguageTag]] | None:
    """Find the language set.

    A MULTi or dual-audio token yields ``{MULTI, ENGLISH}`` plus any
    explicit languages. ``None`` means no token matched; callers then use
    ``{UNSPECIFIED}``, never English.
    """
    languages: set[LanguageTag] = set()
    spans: list[tuple[int, int]] = []

    multi = patterns.multi_language.search(text)
    if multi:
        languages.update({LanguageTag.MULTI, LanguageTag.ENGLISH})
        spans.append(multi.span())

    for language, pattern in patterns.languages:
        match = pattern.search(text)
        if match:
            languages.add(language)
            spans.append(match.span())

    if not languages:
        return None
    return Extraction(
        frozenset(languages),
        (min(s[0] for s in spans), max(s[1] for s in spans)),
    )


@safe_extractor
def extract_edition(text: str, patterns: PatternLibrary) -> Extraction[str] | None:
    return _first_in_order(text, patterns.editions)


@safe_extractor
def extract_release_hash(text: str, patterns: PatternLibrary) -> Extraction[str] | None:
    """Find a bracketed CRC32 checksum such as ``[ABCD1234]``."""
    for match in patterns.release_hash.finditer(text):
        value = match.group("hash")
        # all-digit runs are more likely dates or ids than checksums
        if not value.isdigit():
            return Extraction(value, match.span())
    return None


def _is_group_candidate(value: str, patterns: PatternLibrary) -> bool:
    if not value or value.isdigit():
        return False
    if any(part.lower() in patterns.non_group_tokens for part in value.split(".")):
        return False
    if patterns.resolution_explicit.fullmatch(value):
        return False
    return not (len(value) == 8 and patterns.release_hash.fullmatch(f"[{value}]"))


@safe_extractor
def extract_release_group(text: str, patterns: PatternLibrary) -> Extraction[str] | None:
    """Find the release group.

    A trailing ``-GROUP`` token wins; otherwise a leading bracket group
    (the fansub convention) is used.
    """
    match = patterns.trailing_group.search(text)
    if match and _is_group_candidate(match.group("group"), patterns):
        return Extraction(match.group("group"), match.span("group"))

    match = patterns.leading_group.search(text)
    if match:
        group = match.group("group").strip()
        if _is_group_candidate(group, patterns):
            return Extraction(group, match.span("group"))
    return None


@safe_extractor
def extract_year(text: str, patterns: PatternLibrary) -> Extraction[int] | None:
    """Find the release year: the last year-like token not at the very start."""
    candidates = [m for m in patterns.year.finditer(text) if m.start() > 0]
    if not candidates:
        return None
    match = candidates[-1]
    return Extraction(int(match.group("year")), match.span())


def _expand_episodes(first: int, more: str, patterns: PatternLibrary) -> tuple[int, ...]:
    episodes = [first]
    for match in patterns.episode_continuation.finditer(more):
        number = int(match.group("episode"))
        previous = episodes[-1]
        if match.group("dash") and previous < number <= previous + MAX_EPISODE_RANGE:
            episodes.extend(range(previous + 1, number + 1))
        elif number not in episodes:
            episodes.append(number)
    return tuple(episodes)


@safe_extractor
def extract_season_episode(
    text: str, patterns: PatternLibrary
) -> Extraction[SeasonEpisode] | None:
    """Find season and episode numbers.

    Handles ``S01E01``, multi-episode ``S01E01E02``, ranges ``S01E01-E03`` and
    ``S01E01-03``, ``1x02`` and ``Season 1 Episode 2``.
    """
    match = patterns.season_episode.search(text)
    if match:
        episodes = _expand_episodes(int(match.group("episode")), match.group("more"), patterns)
        return Extraction(SeasonEpisode(int(match.group("season")), episodes), match.span())

    for pattern in (patterns.cross_episode, patterns.season_word_episode):
        match = pattern.search(text)
        if match:
            value = SeasonEpisode(int(match.group("season")), (int(match.group("episode")),))
            return Extraction(value, match.span())
    return None


@safe_extractor
def extract_season_pack(text: str, patterns: PatternLibrary) -> Extraction[int] | None:
    """Find a season without episodes (``S02``, ``Season 2``)."""
    for pattern in (patterns.season_pack, patterns.season_word):
        match = pattern.search(text)
        if match:
            return Extraction(int(match.group("season")), match.span())
    return None


@safe_extractor
def extract_episode_word(text: str, patterns: PatternLibrary) -> Extraction[int] | None:
    """Find ``Ep 5`` or ``Episode 5`` without a season."""
    match = patterns.episode_word.search(text)
    if match:
        return Extraction(int(match.group("episode")), match.span())
    return None


@safe_extractor
def extract_air_date(text: str, patterns: PatternLibrary) -> Extraction[date] | None:
    """Find a valid broadcast date (YYYY.MM.DD or YYYY-MM-DD)."""
    for match in patterns.air_date.finditer(text):
        try:
            value = date(int(match.group("year")), int(match.group("month")), int(match.group("day")))
        except ValueError:
            continue
        return Extraction(value, match.span())
    return None


@safe_extractor
def extract_absolute_episode(text: str, patterns: PatternLibrary) -> Extraction[int] | None:
    """Find an anime-style absolute episode number (``Title - 43``)."""
    match = patterns.absolute_episode.search(text)
    if match:
        return Extraction(int(match.group("episode")), match.span("episode"))
    return None


__all__ = [
    "SeasonEpisode",
    "extract_3d",
    "extract_absolute_episode",
    "extract_air_date",
    "extract_audio_channels",
    "extract_audio_codec",
    "extract_audio_quality",
    "extract_codec",
    "extract_edition",
    "extract_episode_word",
    "extract_hdr",
    "extract_languages",
    "extract_modifiers",
    "extract_quality",
    "extract_release_group",
    "extract_release_hash",
    "extract_resolution",
    "extract_season_episode",
    "extract_season_pack",
    "extract_source",
    "extract_year",
    "quality_modifier",
    "safe_extractor",
]
