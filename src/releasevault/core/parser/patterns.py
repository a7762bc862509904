"""Pattern library for release title parsing.

Every regular expression and lookup table used by the extractors and the
parsing strategies is compiled exactly once into an immutable
``PatternLibrary``. The library holds no mutable state and is shared by all
parsing workers without synchronization.

Tokens are delimited by any non-alphanumeric character, so underscores,
dots, dashes and brackets all act as separators.
"""

from __future__ import annotations

import functools
import re
from collections.abc import Mapping
from dataclasses import dataclass
from re import Pattern
from types import MappingProxyType
from typing import Final

from releasevault.core.constants import MEDIA_EXTENSIONS
from releasevault.core.parser.models import LanguageTag
from releasevault.core.quality import QualitySource, Resolution

# Token boundaries; underscore counts as a separator, unlike \b
B: Final[str] = r"(?<![a-z0-9])"
E: Final[str] = r"(?![a-z0-9])"

_FLAGS: Final = re.IGNORECASE


def _token(body: str) -> Pattern[str]:
    return re.compile(f"{B}(?:{body}){E}", _FLAGS)


def _table(entries: tuple[tuple[object, str], ...]) -> tuple[tuple[object, Pattern[str]], ...]:
    return tuple((value, _token(body)) for value, body in entries)


# Source tokens in priority order; the first entry that matches anywhere wins
SOURCE_TOKENS: Final[tuple[tuple[QualitySource, str], ...]] = (
    (QualitySource.REMUX, r"(?:bd|uhd|blu-?ray)?[ ._-]?remux"),
    (QualitySource.BLURAY, r"blu-?ray|uhd-?bluray|b[dr]-?rip|bd(?:25|50|66|100)?|bdmv"),
    (QualitySource.WEBDL, r"web-?dl|webhd|web(?![ ._-]?(?:rip|cap))"),
    (QualitySource.WEBRIP, r"web-?rip|web-?cap"),
    (QualitySource.HDTV, r"hdtv(?:rip)?|uhdtv"),
    (QualitySource.DVD, r"dvd(?:-?rip|-?r|5|9)?|ntsc|vhs-?rip"),
    (QualitySource.SDTV, r"sdtv|pdtv|dsr(?:ip)?|tv-?rip"),
    (QualitySource.TELECINE, r"telecine|hd-?tc"),
    (QualitySource.TELESYNC, r"telesync|hd-?ts"),
    (QualitySource.CAM, r"cam-?rip|hd-?cam|cam"),
    (QualitySource.WORKPRINT, r"workprint"),
)

# Audio tiers for music releases, highest first
AUDIO_QUALITY_TOKENS: Final[tuple[tuple[QualitySource, str], ...]] = (
    (QualitySource.AUDIO_LOSSLESS, r"flac|alac|wav|24[ -]?bit|lossless"),
    (QualitySource.AUDIO_HIGH, r"320(?:k|kbps)?|v0"),
    (QualitySource.AUDIO_STANDARD, r"256(?:k|kbps)?|v2|192(?:k|kbps)?"),
    (QualitySource.AUDIO_LOW, r"128(?:k|kbps)?|96(?:k|kbps)?"),
)

# Streaming services that imply a web-dl source
STREAMING_SERVICE_TOKENS: Final[str] = (
    r"amzn|amazon|nf|nflx|netflix|dsnp|dsny|hmax|atvp|hulu|pcok|pmtp|crav|funi|vrv|roku|cr"
)

RESOLUTION_ALIASES: Final[tuple[tuple[Resolution, str], ...]] = (
    (Resolution.R2160P, r"4k|uhd"),
    (Resolution.R1080P, r"fhd"),
    (Resolution.R720P, r"hd"),
)

# Resolution assumed when a source token is present without one
SOURCE_DEFAULT_RESOLUTION: Final = MappingProxyType(
    {
        QualitySource.REMUX: Resolution.R1080P,
        QualitySource.BLURAY: Resolution.R1080P,
        QualitySource.WEBDL: Resolution.R720P,
        QualitySource.WEBRIP: Resolution.R720P,
        QualitySource.HDTV: Resolution.R720P,
        QualitySource.DVD: Resolution.R480P,
        QualitySource.SDTV: Resolution.R480P,
    }
)

CODEC_TOKENS: Final[tuple[tuple[str, str], ...]] = (
    ("x265", r"x265"),
    ("h265", r"h[ .]?265|hevc"),
    ("x264", r"x264"),
    ("h264", r"h[ .]?264|avc"),
    ("av1", r"av1"),
    ("vp9", r"vp9"),
    ("xvid", r"xvid"),
    ("divx", r"divx"),
    ("vc1", r"vc-?1"),
    ("mpeg2", r"mpeg-?2"),
)

# Audio codecs may be glued to their channel layout (DDP5.1, AAC2.0)
AUDIO_CODEC_TOKENS: Final[tuple[tuple[str, str], ...]] = (
    ("truehd", r"true-?hd(?:[ .]?atmos)?"),
    ("dts-x", r"dts[-.:]?x"),
    ("dts-hd", r"dts-?hd(?:[ .-]?ma)?|dts-?ma"),
    ("dts", r"dts"),
    ("ddp", r"ddp|dd\+|e-?ac-?3"),
    ("dd", r"dd|ac-?3|dolby[ .]?digital"),
    ("flac", r"flac"),
    ("opus", r"opus"),
    ("aac", r"aac"),
    ("lpcm", r"l?pcm"),
    ("mp3", r"mp3"),
)

HDR_TOKENS: Final[tuple[tuple[str, str], ...]] = (
    ("dolby-vision", r"dolby[ .-]?vision|dovi|dv"),
    ("hdr10+", r"hdr10(?:\+|plus)"),
    ("hdr10", r"hdr10"),
    ("hlg", r"hlg"),
    ("hdr", r"hdr"),
)

LANGUAGE_TOKENS: Final[tuple[tuple[LanguageTag, str], ...]] = (
    (LanguageTag.ENGLISH, r"english|eng"),
    (LanguageTag.FRENCH, r"french|truefrench|vostfr|vff|vf"),
    (LanguageTag.GERMAN, r"german|deutsch|ger"),
    (LanguageTag.SPANISH, r"spanish|castellano|esp|spa"),
    (LanguageTag.ITALIAN, r"italian|ita"),
    (LanguageTag.PORTUGUESE, r"portuguese|pt-?br|dublado"),
    (LanguageTag.DUTCH, r"dutch|flemish"),
    (LanguageTag.RUSSIAN, r"russian|rus"),
    (LanguageTag.POLISH, r"polish|pldub|plsub"),
    (LanguageTag.SWEDISH, r"swedish|swe"),
    (LanguageTag.NORWEGIAN, r"norwegian"),
    (LanguageTag.DANISH, r"danish"),
    (LanguageTag.FINNISH, r"finnish"),
    (LanguageTag.JAPANESE, r"japanese|jpn"),
    (LanguageTag.KOREAN, r"korean|kor"),
    (LanguageTag.CHINESE, r"chinese|mandarin|cantonese|chs|cht"),
    (LanguageTag.HINDI, r"hindi"),
    (LanguageTag.ARABIC, r"arabic"),
    (LanguageTag.TURKISH, r"turkish"),
)

EDITION_TOKENS: Final[tuple[tuple[str, str], ...]] = (
    ("Director's Cut", r"director'?s[ .]?cut"),
    ("Extended", r"extended(?:[ .](?:cut|edition))?"),
    ("Unrated", r"unrated"),
    ("Uncut", r"uncut"),
    ("Theatrical", r"theatrical(?:[ .](?:cut|edition))?"),
    ("Final Cut", r"final[ .]cut"),
    ("Ultimate Edition", r"ultimate[ .](?:cut|edition)"),
    ("Special Edition", r"special[ .]edition"),
    ("Collector's Edition", r"collector'?s[ .]edition"),
    ("Criterion", r"criterion(?:[ .]collection)?"),
    ("IMAX", r"imax(?:[ .]edition)?"),
    ("Open Matte", r"open[ .]matte"),
    ("Remastered", r"remaster(?:ed)?"),
)

# Tokens that are never release groups even when they trail a dash
NON_GROUP_TOKENS: Final[frozenset[str]] = frozenset(
    {
        "dl", "rip", "web", "webdl", "webrip", "hdtv", "bluray", "x264", "x265",
        "h264", "h265", "hevc", "avc", "dts", "ac3", "aac", "dd", "ddp", "sample",
        "proper", "repack", "real", "internal", "hdr", "dv", "remux", "ma", "cap",
        "1080p", "720p", "2160p", "480p", "4k",
    }
)


@dataclass(frozen=True)
class PatternLibrary:
    """Immutable, compiled-once set of recognizer rules.

    Build with :func:`get_pattern_library`; instances are safe to share
    across threads.
    """

    # pre-processing
    extension: Pattern[str]
    sample_marker: Pattern[str]

    # quality
    resolution_explicit: Pattern[str]
    resolution_dimensions: Pattern[str]
    resolution_aliases: tuple[tuple[Resolution, Pattern[str]], ...]
    sources: tuple[tuple[QualitySource, Pattern[str]], ...]
    audio_qualities: tuple[tuple[QualitySource, Pattern[str]], ...]
    streaming_service: Pattern[str]
    source_default_resolution: Mapping[QualitySource, Resolution]

    # media details
    codecs: tuple[tuple[str, Pattern[str]], ...]
    audio_codecs: tuple[tuple[str, Pattern[str]], ...]
    audio_channels: Pattern[str]
    audio_channel_count: Pattern[str]
    hdr: tuple[tuple[str, Pattern[str]], ...]
    three_d: Pattern[str]
    languages: tuple[tuple[LanguageTag, Pattern[str]], ...]
    multi_language: Pattern[str]
    editions: tuple[tuple[str, Pattern[str]], ...]

    # identity
    release_hash: Pattern[str]
    leading_group: Pattern[str]
    trailing_group: Pattern[str]
    non_group_tokens: frozenset[str]
    proper: Pattern[str]
    repack: Pattern[str]
    real: Pattern[str]
    version: Pattern[str]
    year: Pattern[str]
    trailing_title_year: Pattern[str]
    season_episode: Pattern[str]
    episode_continuation: Pattern[str]
    cross_episode: Pattern[str]
    season_pack: Pattern[str]
    season_word: Pattern[str]
    season_word_episode: Pattern[str]
    episode_word: Pattern[str]
    air_date: Pattern[str]
    absolute_episode: Pattern[str]

    # strategy shapes
    arr_episode: Pattern[str]
    arr_daily: Pattern[str]
    arr_movie: Pattern[str]
    arr_tag: Pattern[str]
    anime_fansub: Pattern[str]
    anime_bare: Pattern[str]
    anime_title_season: Pattern[str]
    user_forms: tuple[Pattern[str], ...]


def build_pattern_library() -> PatternLibrary:
    """Compile every pattern. Prefer :func:`get_pattern_library`, which caches the result."""
    extensions = "|".join(sorted(MEDIA_EXTENSIONS, key=len, reverse=True))
    sep = r"[ ._-]"

    return PatternLibrary(
        extension=re.compile(rf"\.(?:{extensions})$", _FLAGS),
        sample_marker=re.compile(r"\s*[\[\(\{]\s*sample\s*[\]\)\}]", _FLAGS),
        resolution_explicit=re.compile(
            rf"{B}(?P<height>2160|1080|720|576|540|480|360)[pi]{E}", _FLAGS
        ),
        resolution_dimensions=re.compile(
            r"(?<!\d)(?P<width>\d{3,4})\s?[x×]\s?(?P<height>\d{3,4})(?!\d)", _FLAGS
        ),
        resolution_aliases=_table(RESOLUTION_ALIASES),  # type: ignore[arg-type]
        sources=_table(SOURCE_TOKENS),  # type: ignore[arg-type]
        audio_qualities=_table(AUDIO_QUALITY_TOKENS),  # type: ignore[arg-type]
        streaming_service=_token(STREAMING_SERVICE_TOKENS),
        source_default_resolution=SOURCE_DEFAULT_RESOLUTION,
        codecs=_table(CODEC_TOKENS),  # type: ignore[arg-type]
        audio_codecs=tuple(
            (name, re.compile(rf"{B}(?:{body})(?![a-z])", _FLAGS))
            for name, body in AUDIO_CODEC_TOKENS
        ),
        audio_channels=re.compile(
            r"(?<![0-9])(?<!\d\.)(?P<channels>[1-9]\.[0-2])(?![0-9])(?!\.\d)", _FLAGS
        ),
        audio_channel_count=re.compile(rf"{B}(?P<count>[1-8])ch{E}", _FLAGS),
        hdr=_table(HDR_TOKENS),  # type: ignore[arg-type]
        three_d=_token(r"3d|h-?sbs|half-?sbs|h-?ou|half-?ou|sbs"),
        languages=_table(LANGUAGE_TOKENS),  # type: ignore[arg-type]
        multi_language=_token(r"multi(?:-?lang)?|dual[ ._-]?audio|dual"),
        editions=_table(EDITION_TOKENS),  # type: ignore[arg-type]
        release_hash=re.compile(r"[\[\(](?P<hash>[0-9a-f]{8})[\]\)]", _FLAGS),
        leading_group=re.compile(r"^\s*\[(?P<group>[^\[\]]+?)\]", _FLAGS),
        trailing_group=re.compile(
            r"-(?P<group>[a-z0-9](?:[a-z0-9&._]*[a-z0-9])?)(?:\s*\[[^\[\]]*\])*\s*$", _FLAGS
        ),
        non_group_tokens=NON_GROUP_TOKENS,
        proper=_token(r"proper"),
        repack=_token(r"repack|rerip"),
        real=re.compile(r"(?<![A-Za-z0-9])REAL(?![A-Za-z0-9])"),
        version=re.compile(r"(?<![a-z])v(?P<version>[2-9])(?![0-9a-z])", _FLAGS),
        year=re.compile(rf"{B}(?P<year>19\d{{2}}|20\d{{2}})(?![0-9a-z])", _FLAGS),
        trailing_title_year=re.compile(
            r"[ ._\-\[\(]+(?P<year>19\d{2}|20\d{2})[\]\)]?[ ._\-]*$", _FLAGS
        ),
        season_episode=re.compile(
            rf"{B}s(?P<season>\d{{1,4}}){sep}?e(?P<episode>\d{{1,4}})"
            r"(?P<more>(?:(?:-?e|-)\d{1,4}(?![0-9])(?![a-df-z]))*)"
            r"(?![0-9])",
            _FLAGS,
        ),
        episode_continuation=re.compile(r"(?P<dash>-)?e?(?P<episode>\d{1,4})", _FLAGS),
        cross_episode=re.compile(
            rf"{B}(?P<season>\d{{1,2}})x(?P<episode>\d{{2,3}}){E}", _FLAGS
        ),
        season_pack=re.compile(
            rf"{B}s(?P<season>\d{{1,2}})(?![0-9a-z]|{sep}?e\d)", _FLAGS
        ),
        season_word=re.compile(
            rf"{B}season{sep}*(?P<season>\d{{1,3}})(?![0-9])(?!{sep}*(?:episode|ep){sep}*\d)",
            _FLAGS,
        ),
        season_word_episode=re.compile(
            rf"{B}season{sep}*(?P<season>\d{{1,3}}){sep}*(?:episode|ep){sep}*(?P<episode>\d{{1,4}})(?![0-9])",
            _FLAGS,
        ),
        episode_word=re.compile(rf"{B}(?:episode|ep){sep}*(?P<episode>\d{{1,4}})(?![0-9])", _FLAGS),
        air_date=re.compile(
            r"(?<![0-9])(?P<year>(?:19|20)\d{2})[-._ ](?P<month>0[1-9]|1[0-2])"
            r"[-._ ](?P<day>0[1-9]|[12]\d|3[01])(?![0-9])",
            _FLAGS,
        ),
        absolute_episode=re.compile(
            r"(?<=\s-\s)(?P<episode>\d{1,4})(?:v(?P<version>\d))?(?=[\s\[\(]|$)", _FLAGS
        ),
        arr_episode=re.compile(
            r"^(?P<title>.+?)(?:\s\((?P<year>(?:19|20)\d{2})\))?"
            r"\s-\s(?P<identity>S\d{1,4}E\d{1,4}(?:-?E\d{1,4})*)"
            r"(?:\s-\s(?P<absolute>\d{2,4}))?"
            r"(?:\s-\s(?P<episode_title>[^\[]+?))?"
            r"\s*\[(?P<quality>[^\]]+)\](?P<rest>.*)$",
            _FLAGS,
        ),
        arr_daily=re.compile(
            r"^(?P<title>.+?)\s-\s(?P<date>(?:19|20)\d{2}-\d{2}-\d{2})"
            r"(?:\s-\s(?P<episode_title>[^\[]+?))?"
            r"\s*\[(?P<quality>[^\]]+)\](?P<rest>.*)$",
            _FLAGS,
        ),
        arr_movie=re.compile(
            r"^(?P<title>[^\[\]{}]+?)\s\((?P<year>(?:19|20)\d{2})\)"
            r"(?P<tags>(?:\s*\{[^{}]+\})*)"
            r"\s*\[(?P<quality>[^\]]+)\](?P<rest>.*)$",
            _FLAGS,
        ),
        arr_tag=re.compile(r"\{(?P<key>tmdb|imdb|tvdb|edition)-(?P<value>[^{}]+)\}", _FLAGS),
        anime_fansub=re.compile(
            r"^\[(?P<group>[^\[\]]+)\][ _]*(?P<title>.+?)[ _]+-[ _]+"
            r"(?P<episode>\d{1,4})(?:v(?P<version>\d))?(?=[ _]|[\[\(]|$)",
            _FLAGS,
        ),
        anime_bare=re.compile(
            r"^(?P<title>[^\[\]]+?)[ _]+-[ _]+(?P<episode>\d{1,4})(?:v(?P<version>\d))?[ _]*[\[\(]",
            _FLAGS,
        ),
        anime_title_season=re.compile(
            r"[ _]+(?:S(?P<season>\d{1,2})|(?P<ordinal>\d{1,2})(?:st|nd|rd|th)[ _]Season)$",
            _FLAGS,
        ),
        user_forms=(
            re.compile(
                rf"^(?P<title>.+?){sep}+season{sep}*(?P<season>\d{{1,3}}){sep}*"
                rf"(?:episode|ep){sep}*(?P<episode>\d{{1,4}})(?![0-9])",
                _FLAGS,
            ),
            re.compile(
                rf"^(?P<title>.+?){sep}+s(?P<season>\d{{1,3}})\s*{sep}?\s*e(?P<episode>\d{{1,4}})(?![0-9])",
                _FLAGS,
            ),
            re.compile(
                rf"^(?P<title>.+?){sep}+(?P<season>\d{{1,2}})x(?P<episode>\d{{2,3}})(?![0-9])",
                _FLAGS,
            ),
            re.compile(
                rf"^(?P<title>.+?){sep}+(?:episode|ep){sep}*(?P<episode>\d{{1,4}})(?![0-9])",
                _FLAGS,
            ),
            re.compile(
                rf"^(?P<title>.+?){sep}+season{sep}*(?P<season>\d{{1,3}})(?![0-9])",
                _FLAGS,
            ),
            re.compile(r"^(?P<title>.+?)[ ._]*\((?P<year>(?:19|20)\d{2})\)", _FLAGS),
            re.compile(r"^(?P<title>.+?)[ ._]+(?P<year>(?:19|20)\d{2})(?![0-9])", _FLAGS),
        ),
    )


@functools.lru_cache(maxsize=1)
def get_pattern_library() -> PatternLibrary:
    """Return the process-wide pattern library, compiling it on first use."""
    return build_pattern_library()


__all__ = [
    "PatternLibrary",
    "build_pattern_library",
    "get_pattern_library",
]
