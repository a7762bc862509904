"""Conflict classification between a release and existing library files.

The comparison uses quality weight only, the same ordering the ranker
relies on. The classification is advisory: callers decide whether to
replace, skip or keep both.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from releasevault.core.scoring.models import LibraryFile, LibrarySnapshot, ReleaseCandidate, same_edition

logger = logging.getLogger(__name__)


class ConflictKind(str, Enum):
    QUALITY_UPGRADE = "quality-upgrade"
    DUPLICATE_FILE = "duplicate-file"
    EDITION_VARIANT = "edition-variant"


class Recommendation(str, Enum):
    REPLACE = "replace"
    SKIP = "skip"
    KEEP_BOTH = "keep-both"


@dataclass(frozen=True)
class ConflictClassification:
    """Relationship between a candidate release and an existing file.

    Attributes:
        kind: Conflict classification
        recommendation: Suggested action
        reason: Short explanation (``higher-quality``, ``lower-quality``,
            ``different-edition`` or ``identical``)
        existing: The library file the candidate was compared with
        candidate_weight: Quality weight of the candidate
        existing_weight: Quality weight of the existing file
    """

    kind: ConflictKind
    recommendation: Recommendation
    reason: str
    existing: LibraryFile
    candidate_weight: int
    existing_weight: int


class ConflictResolver:
    """Classify candidate releases against existing library files."""

    def classify(self, candidate: ReleaseCandidate, existing: LibraryFile) -> ConflictClassification:
        candidate_weight = candidate.quality.weight
        existing_weight = existing.quality.weight

        if candidate_weight > existing_weight:
            kind, recommendation, reason = (
                ConflictKind.QUALITY_UPGRADE,
                Recommendation.REPLACE,
                "higher-quality",
            )
        elif candidate_weight < existing_weight:
            kind, recommendation, reason = (
                ConflictKind.DUPLICATE_FILE,
                Recommendation.SKIP,
                "lower-quality",
            )
        elif not same_edition(candidate.parsed.edition, existing.edition):
            kind, recommendation, reason = (
                ConflictKind.EDITION_VARIANT,
                Recommendation.KEEP_BOTH,
                "different-edition",
            )
        else:
            kind, recommendation, reason = (
                ConflictKind.DUPLICATE_FILE,
                Recommendation.SKIP,
                "identical",
            )

        logger.debug(
            "Conflict for '%s' vs %s: %s (%s)",
            candidate.title,
            existing.quality,
            kind.value,
            reason,
        )
        return ConflictClassification(
            kind=kind,
            recommendation=recommendation,
            reason=reason,
            existing=existing,
            candidate_weight=candidate_weight,
            existing_weight=existing_weight,
        )

    def resolve(
        self,
        candidate: ReleaseCandidate,
        library: LibrarySnapshot,
    ) -> ConflictClassification | None:
        """Classify against the library file for the candidate's media unit.

        A file of the same edition is preferred; otherwise the best existing
        file is used. Returns None when the media unit has no files.
        """
        files = library.files_for(candidate.media_unit_id)
        if not files:
            return None

        matching = [f for f in files if same_edition(f.edition, candidate.parsed.edition)]
        pool = matching or list(files)
        existing = max(pool, key=lambda f: f.quality.weight)
        return self.classify(candidate, existing)


__all__ = [
    "ConflictClassification",
    "ConflictKind",
    "ConflictResolver",
    "Recommendation",
]
