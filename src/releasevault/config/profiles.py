"""Quality profiles, custom formats and release policies.

These models describe the read-only configuration handed to the scorer and
the rejector on every call. Everything that can be wrong with them (an
unknown quality name, a cutoff outside the profile, an invalid regular
expression, a malformed size condition) is caught when the configuration is
loaded, never while scoring.
"""

from __future__ import annotations

import functools
import logging
import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from re import Pattern
from typing import Any

import toml
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from releasevault.core.quality import DEFINITIONS_BY_NAME, QualityTag
from releasevault.shared.errors import (
    ConfigurationError,
    ErrorCode,
    ErrorContext,
    create_config_error,
)
from releasevault.shared.logging import log_operation_error

logger = logging.getLogger(__name__)

_SIZE_PATTERN = re.compile(
    r"^\s*(?:(?P<op>>=|<=|>|<)\s*(?P<value>\d+(?:\.\d+)?)"
    r"|(?P<low>\d+(?:\.\d+)?)\s*-\s*(?P<high>\d+(?:\.\d+)?))\s*$"
)


@functools.lru_cache(maxsize=1024)
def compile_term(term: str) -> Pattern[str]:
    """Compile a term: ``/regex/`` is a regular expression, anything else a literal.

    Both forms match case-insensitively.

    Raises:
        re.error: If a ``/regex/`` term is not a valid expression
    """
    if len(term) > 2 and term.startswith("/") and term.endswith("/"):
        return re.compile(term[1:-1], re.IGNORECASE)
    return re.compile(re.escape(term), re.IGNORECASE)


def _validate_term(term: str) -> str:
    if not term:
        msg = "Term must not be empty"
        raise ValueError(msg)
    try:
        compile_term(term)
    except re.error as e:
        msg = f"Invalid regular expression {term!r}: {e}"
        raise ValueError(msg) from e
    return term


@dataclass(frozen=True)
class SizeRange:
    """Size bounds in megabytes; ``None`` means unbounded on that side."""

    minimum: float | None = None
    maximum: float | None = None
    include_minimum: bool = True
    include_maximum: bool = True

    def contains(self, size_mb: float) -> bool:
        if self.minimum is not None:
            if size_mb < self.minimum or (size_mb == self.minimum and not self.include_minimum):
                return False
        if self.maximum is not None:
            if size_mb > self.maximum or (size_mb == self.maximum and not self.include_maximum):
                return False
        return True


@functools.lru_cache(maxsize=256)
def parse_size_pattern(pattern: str) -> SizeRange:
    """Parse ``>N``, ``>=N``, ``<N``, ``<=N`` or ``N-M`` (megabytes).

    Raises:
        ValueError: If the pattern has none of these forms
    """
    match = _SIZE_PATTERN.match(pattern)
    if not match:
        msg = f"Invalid size condition {pattern!r}; expected >N, >=N, <N, <=N or N-M"
        raise ValueError(msg)

    if match.group("op"):
        value = float(match.group("value"))
        op = match.group("op")
        if op.startswith(">"):
            return SizeRange(minimum=value, include_minimum=op == ">=")
        return SizeRange(maximum=value, include_maximum=op == "<=")

    low, high = float(match.group("low")), float(match.group("high"))
    if low > high:
        msg = f"Invalid size range {pattern!r}: lower bound exceeds upper bound"
        raise ValueError(msg)
    return SizeRange(minimum=low, maximum=high)


class QualityProfileItem(BaseModel):
    """One quality tier in a profile."""

    quality: str
    allowed: bool = True

    @field_validator("quality")
    @classmethod
    def validate_quality(cls, v: str) -> str:
        """Validate that the quality names a known definition."""
        if v not in DEFINITIONS_BY_NAME:
            msg = f"Unknown quality {v!r}"
            raise ValueError(msg)
        return v


class QualityProfile(BaseModel):
    """Ordered list of acceptable qualities, lowest first, with a cutoff.

    Attributes:
        name: Profile name
        items: Quality tiers, lowest preference first
        cutoff: Quality at which no further upgrades are wanted
        upgrade_allowed: Whether existing files may be upgraded at all
        format_scores: Score contributed by each matched custom format
        max_size_mb: Largest acceptable release size
    """

    name: str = Field(min_length=1)
    items: list[QualityProfileItem] = Field(min_length=1)
    cutoff: str | None = None
    upgrade_allowed: bool = True
    format_scores: dict[str, int] = Field(default_factory=dict)
    max_size_mb: float | None = Field(default=None, gt=0)

    @field_validator("items", mode="before")
    @classmethod
    def expand_item_names(cls, v: Any) -> Any:
        """Accept bare quality names as allowed items."""
        if isinstance(v, list):
            return [{"quality": item} if isinstance(item, str) else item for item in v]
        return v

    @model_validator(mode="after")
    def validate_items(self) -> QualityProfile:
        """Reject duplicate qualities and a cutoff that is not an allowed item."""
        names = [item.quality for item in self.items]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            msg = f"Profile {self.name!r} lists qualities more than once: {duplicates}"
            raise ValueError(msg)
        if self.cutoff is not None and self.cutoff not in self.allowed_qualities:
            msg = f"Cutoff {self.cutoff!r} is not an allowed quality of profile {self.name!r}"
            raise ValueError(msg)
        return self

    @property
    def allowed_qualities(self) -> list[str]:
        return [item.quality for item in self.items if item.allowed]

    def rank_of(self, quality: QualityTag) -> int | None:
        """1-based position of the quality among the allowed items, or None."""
        try:
            return self.allowed_qualities.index(quality.name) + 1
        except ValueError:
            return None

    def allows(self, quality: QualityTag) -> bool:
        return self.rank_of(quality) is not None

    @property
    def cutoff_weight(self) -> int | None:
        if self.cutoff is None:
            return None
        return QualityTag.from_name(self.cutoff).weight


class FormatConditionType(str, Enum):
    """Release attribute a custom-format condition is evaluated against."""

    RELEASE_TITLE = "release_title"
    RELEASE_GROUP = "release_group"
    SOURCE = "source"
    RESOLUTION = "resolution"
    CODEC = "codec"
    AUDIO_CODEC = "audio_codec"
    AUDIO_CHANNELS = "audio_channels"
    LANGUAGE = "language"
    EDITION = "edition"
    SIZE = "size"
    INDEXER_FLAG = "indexer_flag"


class FormatCondition(BaseModel):
    """One condition of a custom format.

    Attributes:
        type: Release attribute to test
        pattern: Regular expression, or a size expression for ``size``
        negate: Invert the result of this condition
        required: The format only matches when this condition matches
    """

    type: FormatConditionType
    pattern: str = Field(min_length=1)
    negate: bool = False
    required: bool = False

    @model_validator(mode="after")
    def validate_pattern(self) -> FormatCondition:
        """Compile the pattern now so that bad patterns fail at load time."""
        if self.type is FormatConditionType.SIZE:
            parse_size_pattern(self.pattern)
        else:
            try:
                self.regex()
            except re.error as e:
                msg = f"Invalid {self.type.value} pattern {self.pattern!r}: {e}"
                raise ValueError(msg) from e
        return self

    def regex(self) -> Pattern[str]:
        return _compile_condition(self.pattern)

    def size_range(self) -> SizeRange:
        return parse_size_pattern(self.pattern)


@functools.lru_cache(maxsize=1024)
def _compile_condition(pattern: str) -> Pattern[str]:
    return re.compile(pattern, re.IGNORECASE)


class CustomFormat(BaseModel):
    """Named set of conditions contributing a profile-assigned score."""

    name: str = Field(min_length=1)
    conditions: list[FormatCondition] = Field(min_length=1)


class PreferredWord(BaseModel):
    """Term adding a signed score when found in a release title."""

    term: str
    score: int

    @field_validator("term")
    @classmethod
    def validate_term(cls, v: str) -> str:
        return _validate_term(v)

    def matches(self, title: str) -> bool:
        return compile_term(self.term).search(title) is not None


class Restriction(BaseModel):
    """Required and forbidden terms.

    A release fails the restriction when it contains none of the
    ``must_contain`` terms (if any are given) or any ``must_not_contain`` term.
    """

    must_contain: list[str] = Field(default_factory=list)
    must_not_contain: list[str] = Field(default_factory=list)

    @field_validator("must_contain", "must_not_contain")
    @classmethod
    def validate_terms(cls, v: list[str]) -> list[str]:
        return [_validate_term(term) for term in v]

    def failures(self, title: str) -> list[str]:
        """Describe why the title fails this restriction; empty when it passes."""
        problems: list[str] = []
        if self.must_contain and not any(compile_term(t).search(title) for t in self.must_contain):
            problems.append(f"missing required term ({', '.join(self.must_contain)})")
        for term in self.must_not_contain:
            if compile_term(term).search(title):
                problems.append(f"contains forbidden term '{term}'")
        return problems


class ReleasePolicies(BaseModel):
    """Release-level policies applied by the rejector.

    Attributes:
        minimum_seeders: Torrents below this count are temporarily rejected
        usenet_retention_days: Usenet posts older than this are rejected
        blocklist: Release titles that must never be grabbed (case-insensitive)
        restrictions: Required/forbidden term rules
    """

    minimum_seeders: int = Field(default=1, ge=0)
    usenet_retention_days: int | None = Field(default=None, ge=1)
    blocklist: list[str] = Field(default_factory=list)
    restrictions: list[Restriction] = Field(default_factory=list)

    def is_blocklisted(self, title: str) -> bool:
        lowered = title.strip().lower()
        return any(entry.strip().lower() == lowered for entry in self.blocklist)


class ProfileConfig(BaseModel):
    """Complete scoring configuration: profiles, custom formats, words and policies."""

    quality_profiles: list[QualityProfile] = Field(min_length=1)
    custom_formats: list[CustomFormat] = Field(default_factory=list)
    preferred_words: list[PreferredWord] = Field(default_factory=list)
    policies: ReleasePolicies = Field(default_factory=ReleasePolicies)

    @model_validator(mode="after")
    def validate_references(self) -> ProfileConfig:
        """Check name uniqueness and that format scores reference defined formats."""
        profile_names = [p.name for p in self.quality_profiles]
        if len(set(profile_names)) != len(profile_names):
            msg = "Quality profile names must be unique"
            raise ValueError(msg)

        format_names = [f.name for f in self.custom_formats]
        if len(set(format_names)) != len(format_names):
            msg = "Custom format names must be unique"
            raise ValueError(msg)

        known = set(format_names)
        for profile in self.quality_profiles:
            unknown = sorted(set(profile.format_scores) - known)
            if unknown:
                msg = f"Profile {profile.name!r} scores undefined custom formats: {unknown}"
                raise ValueError(msg)
        return self

    def profile(self, name: str) -> QualityProfile:
        """Look up a quality profile by name.

        Raises:
            ConfigurationError: If no profile has this name
        """
        for profile in self.quality_profiles:
            if profile.name == name:
                return profile
        raise ConfigurationError(
            ErrorCode.CONFIG_MISSING,
            f"Quality profile {name!r} is not defined",
            ErrorContext(operation="lookup_profile", additional_data={"profile": name}),
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any], source: str | None = None) -> ProfileConfig:
        """Validate raw configuration data.

        Raises:
            ConfigurationError: If the data is invalid
        """
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            first = e.errors()[0] if e.errors() else {}
            field = ".".join(str(part) for part in first.get("loc", ())) or None
            raise create_config_error(
                f"Invalid profile configuration: {first.get('msg', str(e))}",
                field=field,
                source=source,
                original_error=e,
            ) from e


def _read_profile_config(path: Path) -> ProfileConfig:
    if not path.exists():
        raise ConfigurationError(
            ErrorCode.CONFIG_MISSING,
            f"Profile configuration not found: {path}",
            ErrorContext(operation="load_profile_config", source=str(path)),
        )
    try:
        data = toml.load(path)
    except (OSError, toml.TomlDecodeError) as e:
        raise create_config_error(
            f"Cannot read profile configuration: {e}",
            source=str(path),
            original_error=e,
        ) from e
    return ProfileConfig.from_dict(data, source=str(path))


def load_profile_config(path: str | Path) -> ProfileConfig:
    """Load and validate a profile configuration TOML file.

    Failures are logged before they are raised.

    Raises:
        ConfigurationError: If the file is missing, unreadable or invalid
    """
    path = Path(path)
    try:
        config = _read_profile_config(path)
    except ConfigurationError as error:
        log_operation_error(logger, error, operation="load_profile_config")
        raise

    logger.debug(
        "Loaded %d quality profile(s) and %d custom format(s) from %s",
        len(config.quality_profiles),
        len(config.custom_formats),
        path,
    )
    return config


__all__ = [
    "CustomFormat",
    "FormatCondition",
    "FormatConditionType",
    "PreferredWord",
    "ProfileConfig",
    "QualityProfile",
    "QualityProfileItem",
    "ReleasePolicies",
    "Restriction",
    "SizeRange",
    "compile_term",
    "load_profile_config",
    "parse_size_pattern",
]
