"""Release scoring, rejection, ranking and conflict classification."""

from releasevault.core.scoring.conflict import (
    ConflictClassification,
    ConflictKind,
    ConflictResolver,
    Recommendation,
)
from releasevault.core.scoring.models import (
    DownloadProtocol,
    LibraryFile,
    LibrarySnapshot,
    Rejection,
    RejectionKind,
    ReleaseCandidate,
    ScoreBreakdown,
    ScoredRelease,
    ScoringContext,
)
from releasevault.core.scoring.ranker import Ranker
from releasevault.core.scoring.rejector import RejectionReason, Rejector
from releasevault.core.scoring.scorer import Scorer

__all__ = [
    "ConflictClassification",
    "ConflictKind",
    "ConflictResolver",
    "DownloadProtocol",
    "LibraryFile",
    "LibrarySnapshot",
    "Ranker",
    "Recommendation",
    "Rejection",
    "RejectionKind",
    "RejectionReason",
    "Rejector",
    "ReleaseCandidate",
    "ScoreBreakdown",
    "ScoredRelease",
    "Scorer",
    "ScoringContext",
]
