"""Release rejection rules.

Every rule is evaluated independently and all of them fire, so a release
may carry several rejections at once. Any ``PERMANENT`` rejection removes
the release from ranking; ``TEMPORARY`` and ``USER_POLICY`` rejections
keep it ranked but stop it from being selected.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import replace

from releasevault.core.scoring.models import (
    DownloadProtocol,
    Rejection,
    RejectionKind,
    ReleaseCandidate,
    ScoredRelease,
    ScoringContext,
)

logger = logging.getLogger(__name__)


class RejectionReason:
    """Reason identifiers carried by rejections."""

    ALREADY_IMPORTED = "already-imported"
    CUTOFF_ALREADY_MET = "cutoff-already-met"
    QUALITY_NOT_IN_PROFILE = "quality-not-in-profile"
    SIZE_EXCEEDS_MAXIMUM = "size-exceeds-profile-maximum"
    BELOW_MINIMUM_SEEDERS = "below-minimum-seeders"
    BLOCKLISTED = "blocklisted-release"
    RESTRICTION = "fails-restriction"
    USENET_RETENTION = "exceeds-usenet-retention"


RejectionRule = Callable[[ReleaseCandidate, ScoringContext], list[Rejection]]


def already_imported(candidate: ReleaseCandidate, context: ScoringContext) -> list[Rejection]:
    """An existing file of the same media unit and edition is of equal or better quality."""
    existing = context.library.best_for(candidate.media_unit_id, candidate.parsed.edition)
    if existing is None or existing.quality.weight < candidate.quality.weight:
        return []
    return [
        Rejection(
            RejectionReason.ALREADY_IMPORTED,
            RejectionKind.PERMANENT,
            f"existing {existing.quality} is not worse than {candidate.quality}",
        )
    ]


def cutoff_already_met(candidate: ReleaseCandidate, context: ScoringContext) -> list[Rejection]:
    """An existing file of the same edition already satisfies the profile, or upgrades are disabled."""
    existing = context.library.best_for(candidate.media_unit_id, candidate.parsed.edition)
    if existing is None:
        return []

    profile = context.profile
    if not profile.upgrade_allowed:
        detail = f"profile '{profile.name}' does not allow upgrades"
    elif profile.cutoff_weight is not None and existing.quality.weight >= profile.cutoff_weight:
        detail = f"existing {existing.quality} meets cutoff {profile.cutoff}"
    else:
        return []
    return [Rejection(RejectionReason.CUTOFF_ALREADY_MET, RejectionKind.PERMANENT, detail)]


def quality_not_in_profile(candidate: ReleaseCandidate, context: ScoringContext) -> list[Rejection]:
    if context.profile.allows(candidate.quality):
        return []
    return [
        Rejection(
            RejectionReason.QUALITY_NOT_IN_PROFILE,
            RejectionKind.PERMANENT,
            f"{candidate.quality} is not allowed by profile '{context.profile.name}'",
        )
    ]


def size_exceeds_maximum(candidate: ReleaseCandidate, context: ScoringContext) -> list[Rejection]:
    """Profile-wide size limit, and the per-minute limit of the quality when runtime is known."""
    size_mb = candidate.size_mb
    max_size_mb = context.profile.max_size_mb
    if max_size_mb is not None and size_mb > max_size_mb:
        return [
            Rejection(
                RejectionReason.SIZE_EXCEEDS_MAXIMUM,
                RejectionKind.PERMANENT,
                f"{size_mb:.1f} MB exceeds {max_size_mb:.1f} MB",
            )
        ]

    per_minute_max = candidate.quality.definition.max_size
    if candidate.runtime_minutes and per_minute_max is not None:
        per_minute = size_mb / candidate.runtime_minutes
        if per_minute > per_minute_max:
            return [
                Rejection(
                    RejectionReason.SIZE_EXCEEDS_MAXIMUM,
                    RejectionKind.PERMANENT,
                    f"{per_minute:.1f} MB/min exceeds {per_minute_max:.1f} MB/min",
                )
            ]
    return []


def below_minimum_seeders(candidate: ReleaseCandidate, context: ScoringContext) -> list[Rejection]:
    minimum = context.policies.minimum_seeders
    if not candidate.is_torrent or candidate.seeders is None or candidate.seeders >= minimum:
        return []
    return [
        Rejection(
            RejectionReason.BELOW_MINIMUM_SEEDERS,
            RejectionKind.TEMPORARY,
            f"{candidate.seeders} seeders, minimum {minimum}",
        )
    ]


def blocklisted(candidate: ReleaseCandidate, context: ScoringContext) -> list[Rejection]:
    if not context.policies.is_blocklisted(candidate.title):
        return []
    return [Rejection(RejectionReason.BLOCKLISTED, RejectionKind.PERMANENT)]


def restrictions(candidate: ReleaseCandidate, context: ScoringContext) -> list[Rejection]:
    """One user-policy rejection per failed required/forbidden term rule."""
    return [
        Rejection(RejectionReason.RESTRICTION, RejectionKind.USER_POLICY, failure)
        for restriction in context.policies.restrictions
        for failure in restriction.failures(candidate.title)
    ]


def usenet_retention(candidate: ReleaseCandidate, context: ScoringContext) -> list[Rejection]:
    retention = context.policies.usenet_retention_days
    if (
        candidate.protocol is not DownloadProtocol.USENET
        or retention is None
        or candidate.published_at is None
    ):
        return []
    age_days = (context.now - candidate.published_at).days
    if age_days <= retention:
        return []
    return [
        Rejection(
            RejectionReason.USENET_RETENTION,
            RejectionKind.PERMANENT,
            f"{age_days} days old, retention {retention} days",
        )
    ]


DEFAULT_RULES: tuple[RejectionRule, ...] = (
    already_imported,
    cutoff_already_met,
    quality_not_in_profile,
    size_exceeds_maximum,
    below_minimum_seeders,
    blocklisted,
    restrictions,
    usenet_retention,
)


class Rejector:
    """Evaluate rejection rules against releases.

    Args:
        rules: Rules to evaluate; the canonical set by default
    """

    def __init__(self, rules: Sequence[RejectionRule] = DEFAULT_RULES) -> None:
        self.rules = tuple(rules)

    def evaluate(self, candidate: ReleaseCandidate, context: ScoringContext) -> tuple[Rejection, ...]:
        """All rejections for a release; empty when it is acceptable."""
        rejections: list[Rejection] = []
        for rule in self.rules:
            rejections.extend(rule(candidate, context))
        if rejections:
            logger.debug(
                "Rejected '%s': %s",
                candidate.title,
                [f"{r.reason} ({r.kind.value})" for r in rejections],
            )
        return tuple(rejections)

    def apply(self, scored: ScoredRelease, context: ScoringContext) -> ScoredRelease:
        """Return a copy of the scored release carrying its rejections."""
        return replace(scored, rejections=self.evaluate(scored.candidate, context))


__all__ = [
    "DEFAULT_RULES",
    "RejectionReason",
    "RejectionRule",
    "Rejector",
    "already_imported",
    "below_minimum_seeders",
    "blocklisted",
    "cutoff_already_met",
    "quality_not_in_profile",
    "restrictions",
    "size_exceeds_maximum",
    "usenet_retention",
]
