"""Parsing strategies.

Each strategy recognises one family of naming conventions and turns a
matching title into a :class:`ParsedRelease` with a confidence score. The
strategy list is fixed at import time, highest priority first:

1. ``ArrPatternStrategy`` (100): names written by Sonarr/Radarr style renamers
2. ``SceneStrategy`` (90): dotted scene names (``Show.S01E01.1080p.WEB-DL-GRP``)
3. ``AnimeStrategy`` (85): fansub names (``[Group] Title - 01 [1080p]``), with anitopy as a last resort
4. ``UserNamingStrategy`` (70): hand-typed names (``Show Season 1 Episode 2``)
5. ``FallbackStrategy`` (50): title-only extraction, always accepts
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import date
from typing import Any, Protocol, runtime_checkable

import anitopy

from releasevault.core.constants import ParsingConfidence, StrategyPriority
from releasevault.core.normalization import format_title
from releasevault.core.parser.extractors import (
    extract_3d,
    extract_air_date,
    extract_audio_channels,
    extract_audio_codec,
    extract_codec,
    extract_edition,
    extract_hdr,
    extract_languages,
    extract_modifiers,
    extract_quality,
    extract_release_group,
    extract_release_hash,
    extract_resolution,
    extract_season_episode,
    extract_season_pack,
    extract_source,
    extract_year,
)
from releasevault.core.parser.models import DEFAULT_LANGUAGES, Modifiers, ParsedRelease, ParserKind
from releasevault.core.parser.patterns import PatternLibrary
from releasevault.core.quality import UNKNOWN_QUALITY

logger = logging.getLogger(__name__)


@runtime_checkable
class ParsingStrategy(Protocol):
    """Protocol for parsing strategies.

    Attributes:
        kind: Name recorded in ``ParsedRelease.parser_used``
        priority: Static priority; the pipeline never re-sorts strategies
    """

    kind: ParserKind
    priority: int

    def parse(self, text: str, patterns: PatternLibrary) -> ParsedRelease | None:
        """Parse a pre-processed title.

        Returns:
            A candidate record, or None when the title does not have this
            strategy's shape. The pipeline decides acceptance from the
            record's confidence.
        """
        ...


def _metadata(text: str, tail_start: int, patterns: PatternLibrary) -> tuple[dict[str, Any], int]:
    """Extract the fields every strategy shares.

    Quality and media details are read from ``text[tail_start:]`` so that
    words inside the title ("The French Dispatch") are not taken as tags.
    Release group and hash are read from the whole title.

    Returns:
        The ParsedRelease keyword arguments and the metadata bonus.
    """
    tail = text[tail_start:]

    quality = extract_quality(tail, patterns)
    languages = extract_languages(tail, patterns)
    modifiers = extract_modifiers(tail, patterns)
    group = extract_release_group(text, patterns)
    release_hash = extract_release_hash(text, patterns)
    codec = extract_codec(tail, patterns)
    audio_codec = extract_audio_codec(tail, patterns)
    audio_channels = extract_audio_channels(tail, patterns)
    hdr = extract_hdr(tail, patterns)
    three_d = extract_3d(tail, patterns)
    edition = extract_edition(tail, patterns)

    fields: dict[str, Any] = {
        "quality": quality.value if quality else UNKNOWN_QUALITY,
        "languages": languages.value if languages else DEFAULT_LANGUAGES,
        "modifiers": modifiers.value if modifiers else Modifiers(),
        "release_group": group.value if group else None,
        "release_hash": release_hash.value if release_hash else None,
        "codec": codec.value if codec else None,
        "audio_codec": audio_codec.value if audio_codec else None,
        "audio_channels": audio_channels.value if audio_channels else None,
        "hdr": hdr.value if hdr else None,
        "is_3d": bool(three_d and three_d.value),
        "edition": edition.value if edition else None,
    }

    found = [
        extract_resolution(tail, patterns),
        extract_source(tail, patterns),
        codec,
        group,
    ]
    bonus = min(
        ParsingConfidence.METADATA_BONUS_MAX,
        sum(1 for item in found if item is not None) * ParsingConfidence.METADATA_BONUS,
    )
    return fields, bonus


def _confidence(*, title: str, identity: bool, season: bool, bonus: int) -> int:
    score = 0
    if title:
        score += ParsingConfidence.TITLE_FOUND
    if identity:
        score += ParsingConfidence.IDENTITY_FOUND
    if season:
        score += ParsingConfidence.SEASON_FOUND
    return min(ParsingConfidence.MAX, score + bonus)


def _split_title_year(fragment: str, patterns: PatternLibrary) -> tuple[str, int | None]:
    """Move a year trailing a series title (``Doctor.Who.2005.``) into ``year``."""
    match = patterns.trailing_title_year.search(fragment)
    if not match or not format_title(fragment[: match.start()]):
        return fragment, None
    return fragment[: match.start()], int(match.group("year"))


def _has_quality_marker(text: str, patterns: PatternLibrary) -> bool:
    return any(
        found is not None
        for found in (
            extract_resolution(text, patterns),
            extract_source(text, patterns),
            extract_codec(text, patterns),
        )
    )


def _parse_int(raw: Any) -> int | None:
    """Convert an anitopy number (str, or list of str) to int."""
    if isinstance(raw, list):
        raw = raw[0] if raw else None
    if raw is None:
        return None
    try:
        return int(str(raw).lstrip("0") or "0")
    except ValueError:
        return None


@dataclass(frozen=True)
class ArrPatternStrategy:
    """Names produced by Sonarr/Radarr style renamers.

    ``Series (2010) - S01E01 - Episode Title [WEBDL-1080p]-GROUP``,
    ``Series - 2023-05-01 - Episode Title [HDTV-720p]`` and
    ``Movie (1999) {tmdb-603} {edition-Director's Cut} [Bluray-1080p]``.
    """

    kind: ParserKind = ParserKind.ARR_PATTERN
    priority: int = StrategyPriority.ARR_PATTERN

    def parse(self, text: str, patterns: PatternLibrary) -> ParsedRelease | None:
        for shape in (self._episode, self._daily, self._movie):
            result = shape(text, patterns)
            if result is not None:
                return result
        return None

    def _tags(self, text: str, patterns: PatternLibrary) -> dict[str, str]:
        tags: dict[str, str] = {}
        for match in patterns.arr_tag.finditer(text):
            tags.setdefault(match.group("key").lower(), match.group("value").strip())
        return tags

    def _title(self, raw: str, patterns: PatternLibrary) -> str:
        return format_title(patterns.arr_tag.sub(" ", raw))

    def _external_id(self, tags: dict[str, str]) -> str | None:
        for key in ("tvdb", "tmdb", "imdb"):
            if key in tags:
                return f"{key}:{tags[key]}"
        return None

    def _episode(self, text: str, patterns: PatternLibrary) -> ParsedRelease | None:
        match = patterns.arr_episode.match(text)
        if not match:
            return None
        identity = extract_season_episode(match.group("identity"), patterns)
        if identity is None:
            return None

        title = self._title(match.group("title"), patterns)
        fields, bonus = _metadata(text, match.start("quality"), patterns)
        absolute = match.group("absolute")
        episode_title = match.group("episode_title")
        confidence = _confidence(title=title, identity=True, season=True, bonus=bonus)

        return ParsedRelease(
            raw_title=text,
            title=title,
            year=int(match.group("year")) if match.group("year") else None,
            season_number=identity.value.season,
            episode_numbers=identity.value.episodes,
            absolute_episode_number=int(absolute) if absolute else None,
            episode_title=episode_title.strip() if episode_title else None,
            external_id=self._external_id(self._tags(text, patterns)),
            confidence=min(ParsingConfidence.MAX, confidence + ParsingConfidence.ARR_QUALITY_BRACKET),
            parser_used=self.kind,
            **fields,
        )

    def _daily(self, text: str, patterns: PatternLibrary) -> ParsedRelease | None:
        match = patterns.arr_daily.match(text)
        if not match:
            return None
        try:
            air_date = date.fromisoformat(match.group("date"))
        except ValueError:
            return None

        title = self._title(match.group("title"), patterns)
        fields, bonus = _metadata(text, match.start("quality"), patterns)
        episode_title = match.group("episode_title")
        confidence = _confidence(title=title, identity=True, season=False, bonus=bonus)

        return ParsedRelease(
            raw_title=text,
            title=title,
            year=air_date.year,
            air_date=air_date,
            episode_title=episode_title.strip() if episode_title else None,
            external_id=self._external_id(self._tags(text, patterns)),
            confidence=min(ParsingConfidence.MAX, confidence + ParsingConfidence.ARR_QUALITY_BRACKET),
            parser_used=self.kind,
            **fields,
        )

    def _movie(self, text: str, patterns: PatternLibrary) -> ParsedRelease | None:
        match = patterns.arr_movie.match(text)
        if not match:
            return None

        tags = self._tags(match.group("tags"), patterns)
        title = self._title(match.group("title"), patterns)
        fields, bonus = _metadata(text, match.start("quality"), patterns)
        if "edition" in tags:
            fields["edition"] = tags["edition"]
        confidence = _confidence(title=title, identity=True, season=False, bonus=bonus)

        return ParsedRelease(
            raw_title=text,
            title=title,
            year=int(match.group("year")),
            external_id=self._external_id(tags),
            confidence=min(ParsingConfidence.MAX, confidence + ParsingConfidence.ARR_QUALITY_BRACKET),
            parser_used=self.kind,
            **fields,
        )


@dataclass(frozen=True)
class SceneStrategy:
    """Scene and P2P names.

    Recognises ``SxxEyy`` (with multi-episode forms), ``1x02``, daily dates,
    season packs and movies with a year. Titles must either be written
    without spaces or carry a quality marker.
    """

    kind: ParserKind = ParserKind.SCENE
    priority: int = StrategyPriority.SCENE

    def parse(self, text: str, patterns: PatternLibrary) -> ParsedRelease | None:
        # "[Group] Title S2 - 05" belongs to the anime strategy
        if patterns.anime_fansub.match(text):
            return None
        has_marker = _has_quality_marker(text, patterns)
        if " " in text.strip() and not has_marker:
            return None

        episode = extract_season_episode(text, patterns)
        if episode is not None:
            return self._build(
                text,
                patterns,
                fragment_end=episode.start,
                tail_start=episode.end,
                season_number=episode.value.season,
                episode_numbers=episode.value.episodes,
            )

        air_date = extract_air_date(text, patterns)
        if air_date is not None:
            return self._build(
                text,
                patterns,
                fragment_end=air_date.start,
                tail_start=air_date.end,
                air_date=air_date.value,
                year=air_date.value.year,
            )

        season = extract_season_pack(text, patterns)
        if season is not None:
            return self._build(
                text,
                patterns,
                fragment_end=season.start,
                tail_start=season.end,
                season_number=season.value,
            )

        # movie: a fansub bracket in front means this is not a scene name
        if not has_marker or patterns.leading_group.match(text):
            return None
        year = extract_year(text, patterns)
        if year is None:
            return None
        title = format_title(text[: year.start])
        if not title:
            return None
        fields, bonus = _metadata(text, year.end, patterns)
        return ParsedRelease(
            raw_title=text,
            title=title,
            year=year.value,
            confidence=_confidence(title=title, identity=True, season=False, bonus=bonus),
            parser_used=self.kind,
            **fields,
        )

    def _build(
        self,
        text: str,
        patterns: PatternLibrary,
        *,
        fragment_end: int,
        tail_start: int,
        **identity: Any,
    ) -> ParsedRelease | None:
        fragment, title_year = _split_title_year(text[:fragment_end], patterns)
        title = format_title(fragment)
        if not title:
            return None
        if title_year is not None and identity.get("year") is None:
            identity["year"] = title_year

        fields, bonus = _metadata(text, tail_start, patterns)
        confidence = _confidence(
            title=title,
            identity=True,
            season=identity.get("season_number") is not None,
            bonus=bonus,
        )
        return ParsedRelease(
            raw_title=text,
            title=title,
            confidence=confidence,
            parser_used=self.kind,
            **identity,
            **fields,
        )


@dataclass(frozen=True)
class AnimeStrategy:
    """Fansub names with absolute episode numbers.

    ``[Group] Title - 43 (1080p) [ABCD1234]`` and ``Title - 05 [720p]``.
    When neither shape matches, anitopy is consulted and its result is kept
    only when it found a title, an episode and a group or checksum.
    """

    kind: ParserKind = ParserKind.ANIME
    priority: int = StrategyPriority.ANIME

    def parse(self, text: str, patterns: PatternLibrary) -> ParsedRelease | None:
        match = patterns.anime_fansub.match(text) or patterns.anime_bare.match(text)
        if match is None:
            return self._parse_with_anitopy(text, patterns)

        fragment = match.group("title")
        season: int | None = None
        season_match = patterns.anime_title_season.search(fragment)
        if season_match and format_title(fragment[: season_match.start()]):
            season = int(season_match.group("season") or season_match.group("ordinal"))
            fragment = fragment[: season_match.start()]

        title = format_title(fragment)
        if not title:
            return None

        fields, bonus = _metadata(text, match.start("episode"), patterns)
        group = match.groupdict().get("group")
        if group:
            fields["release_group"] = group.strip()
        signature = group is not None or fields["release_hash"] is not None
        return self._build(
            text,
            title=title,
            episode=int(match.group("episode")),
            season=season,
            fields=fields,
            bonus=bonus + (ParsingConfidence.FANSUB_SIGNATURE if signature else 0),
        )

    def _parse_with_anitopy(self, text: str, patterns: PatternLibrary) -> ParsedRelease | None:
        try:
            parsed = anitopy.parse(text)
        except Exception:  # pylint: disable=broad-exception-caught
            logger.debug("anitopy failed to parse '%s'", text, exc_info=True)
            return None
        if not parsed:
            return None

        title = format_title(str(parsed.get("anime_title") or ""))
        episode = _parse_int(parsed.get("episode_number"))
        group = parsed.get("release_group")
        checksum = parsed.get("file_checksum")
        if not title or episode is None or not (group or checksum):
            return None

        fields, bonus = _metadata(text, 0, patterns)
        if group:
            fields["release_group"] = str(group)
        if checksum:
            fields["release_hash"] = str(checksum)
        return self._build(
            text,
            title=title,
            episode=episode,
            season=_parse_int(parsed.get("anime_season")),
            fields=fields,
            bonus=bonus + ParsingConfidence.FANSUB_SIGNATURE,
        )

    def _build(
        self,
        text: str,
        *,
        title: str,
        episode: int,
        season: int | None,
        fields: dict[str, Any],
        bonus: int,
    ) -> ParsedRelease:
        # absolute numbering only applies when no season is given
        if season is not None:
            identity: dict[str, Any] = {"season_number": season, "episode_numbers": (episode,)}
        else:
            identity = {"absolute_episode_number": episode}

        return ParsedRelease(
            raw_title=text,
            title=title,
            confidence=_confidence(title=title, identity=True, season=season is not None, bonus=bonus),
            parser_used=self.kind,
            **identity,
            **fields,
        )


@dataclass(frozen=True)
class UserNamingStrategy:
    """Hand-typed names.

    ``Show Season 1 Episode 2``, ``Show S1 E2``, ``Show 1x02``, ``Show Ep 5``,
    ``Show Season 2``, ``Movie (2019)`` and ``Movie 2019``.
    """

    kind: ParserKind = ParserKind.USER_NAMING
    priority: int = StrategyPriority.USER_NAMING

    def parse(self, text: str, patterns: PatternLibrary) -> ParsedRelease | None:
        for pattern in patterns.user_forms:
            match = pattern.match(text)
            if match:
                result = self._build(text, match, patterns)
                if result is not None:
                    return result
        return None

    def _build(
        self, text: str, match: re.Match[str], patterns: PatternLibrary
    ) -> ParsedRelease | None:
        groups = match.groupdict()
        identity: dict[str, Any] = {}
        fragment = groups["title"]

        if groups.get("year"):
            identity["year"] = int(groups["year"])
        else:
            fragment, title_year = _split_title_year(fragment, patterns)
            if title_year is not None:
                identity["year"] = title_year
        if groups.get("season"):
            identity["season_number"] = int(groups["season"])
        if groups.get("episode"):
            identity["episode_numbers"] = (int(groups["episode"]),)

        title = format_title(fragment)
        if not title:
            return None

        fields, bonus = _metadata(text, match.end(), patterns)
        confidence = _confidence(
            title=title,
            identity=True,
            season="season_number" in identity,
            bonus=bonus,
        )
        return ParsedRelease(
            raw_title=text,
            title=title,
            confidence=confidence,
            parser_used=self.kind,
            **identity,
            **fields,
        )


@dataclass(frozen=True)
class FallbackStrategy:
    """Title-only extraction. Always accepts, with confidence 0.

    The title is the text before the first quality, year or episode token;
    quality and media details are still extracted.
    """

    kind: ParserKind = ParserKind.FALLBACK
    priority: int = StrategyPriority.FALLBACK

    def parse(self, text: str, patterns: PatternLibrary) -> ParsedRelease:
        stops = sorted(
            found.start
            for found in (
                extract_year(text, patterns),
                extract_resolution(text, patterns),
                extract_source(text, patterns),
                extract_codec(text, patterns),
                extract_season_episode(text, patterns),
                extract_season_pack(text, patterns),
                extract_air_date(text, patterns),
                extract_release_group(text, patterns),
            )
            if found is not None and found.start > 0
        )

        title = ""
        tail_start = 0
        for stop in stops:
            title = format_title(text[:stop])
            if title:
                tail_start = stop
                break
        if not title:
            title = format_title(text)

        fields, _ = _metadata(text, tail_start, patterns)
        return ParsedRelease(
            raw_title=text,
            title=title,
            confidence=ParsingConfidence.FALLBACK,
            parser_used=self.kind,
            **fields,
        )


DEFAULT_STRATEGIES: tuple[ParsingStrategy, ...] = (
    ArrPatternStrategy(),
    SceneStrategy(),
    AnimeStrategy(),
    UserNamingStrategy(),
    FallbackStrategy(),
)


__all__ = [
    "DEFAULT_STRATEGIES",
    "AnimeStrategy",
    "ArrPatternStrategy",
    "FallbackStrategy",
    "ParsingStrategy",
    "SceneStrategy",
    "UserNamingStrategy",
]
