"""Custom-format evaluation.

A custom format matches a release when every required condition matches
and, if the format has optional conditions, at least one of them does.
``negate`` inverts a single condition.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from releasevault.config.profiles import CustomFormat, FormatCondition, FormatConditionType
from releasevault.core.quality import Resolution
from releasevault.core.scoring.models import ReleaseCandidate

logger = logging.getLogger(__name__)


def _condition_values(condition_type: FormatConditionType, candidate: ReleaseCandidate) -> list[str]:
    """Release attribute values a regex condition is tested against."""
    parsed = candidate.parsed
    quality = parsed.quality
    optional: dict[FormatConditionType, str | None] = {
        FormatConditionType.RELEASE_TITLE: parsed.raw_title,
        FormatConditionType.RELEASE_GROUP: parsed.release_group,
        FormatConditionType.CODEC: parsed.codec,
        FormatConditionType.AUDIO_CODEC: parsed.audio_codec,
        FormatConditionType.AUDIO_CHANNELS: parsed.audio_channels,
        FormatConditionType.EDITION: parsed.edition,
    }
    if condition_type in optional:
        value = optional[condition_type]
        return [value] if value else []
    if condition_type is FormatConditionType.SOURCE:
        return [quality.source.value]
    if condition_type is FormatConditionType.RESOLUTION:
        if quality.resolution is Resolution.UNKNOWN:
            return []
        return [f"{int(quality.resolution)}p"]
    if condition_type is FormatConditionType.LANGUAGE:
        return sorted(language.value for language in parsed.languages)
    if condition_type is FormatConditionType.INDEXER_FLAG:
        return list(candidate.indexer_flags)
    return []


def condition_matches(condition: FormatCondition, candidate: ReleaseCandidate) -> bool:
    """Evaluate one condition, honouring ``negate``."""
    if condition.type is FormatConditionType.SIZE:
        hit = condition.size_range().contains(candidate.size_mb)
    else:
        regex = condition.regex()
        hit = any(regex.search(value) for value in _condition_values(condition.type, candidate))
    return hit != condition.negate


def format_matches(custom_format: CustomFormat, candidate: ReleaseCandidate) -> bool:
    required = [c for c in custom_format.conditions if c.required]
    optional = [c for c in custom_format.conditions if not c.required]

    if not all(condition_matches(c, candidate) for c in required):
        return False
    return not optional or any(condition_matches(c, candidate) for c in optional)


def matching_formats(
    custom_formats: Iterable[CustomFormat],
    candidate: ReleaseCandidate,
) -> list[CustomFormat]:
    """Custom formats the release matches, in configuration order."""
    matched = [cf for cf in custom_formats if format_matches(cf, candidate)]
    if matched:
        logger.debug(
            "'%s' matched custom formats: %s",
            candidate.title,
            [cf.name for cf in matched],
        )
    return matched


__all__ = ["condition_matches", "format_matches", "matching_formats"]
