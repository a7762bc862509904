"""Grab decision: score, reject, rank, pick the best and classify conflicts.

``DecisionEngine`` ties the scoring components together for one set of
releases offered for the same target, and for many such sets in bulk.
It never mutates the library snapshot or the profile configuration.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass

from releasevault.core.scoring.conflict import ConflictClassification, ConflictResolver
from releasevault.core.scoring.models import ReleaseCandidate, ScoredRelease, ScoringContext
from releasevault.core.scoring.ranker import Ranker
from releasevault.core.scoring.rejector import Rejector
from releasevault.core.scoring.scorer import Scorer
from releasevault.shared.logging import log_operation_start, log_operation_success
from releasevault.shared.protocols import CancellationToken

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]


@dataclass(frozen=True)
class Decision:
    """Outcome of evaluating the releases offered for one target.

    Attributes:
        ranked: Releases without permanent rejections, best first
        rejected: Permanently rejected releases, in input order
        best: Highest-ranked release with no rejection at all, if any
        conflict: Classification of ``best`` against the existing library file
    """

    ranked: tuple[ScoredRelease, ...] = ()
    rejected: tuple[ScoredRelease, ...] = ()
    best: ScoredRelease | None = None
    conflict: ConflictClassification | None = None

    @property
    def has_selection(self) -> bool:
        return self.best is not None


@dataclass(frozen=True)
class BulkDecisionReport:
    """Result of evaluating many release sets.

    Attributes:
        decisions: Decisions for the evaluated sets, in input order
        scored: Number of releases scored
        pending: Number of releases left unscored because of cancellation
        cancelled: Whether the run was cancelled
    """

    decisions: tuple[Decision, ...]
    scored: int
    pending: int
    cancelled: bool = False


class DecisionEngine:
    """Score, reject and rank releases and pick the one to grab.

    Args:
        scorer: Score calculator
        rejector: Rejection rules
        ranker: Ranking order
        conflict_resolver: Library conflict classifier
    """

    def __init__(
        self,
        scorer: Scorer | None = None,
        rejector: Rejector | None = None,
        ranker: Ranker | None = None,
        conflict_resolver: ConflictResolver | None = None,
    ) -> None:
        self.scorer = scorer or Scorer()
        self.rejector = rejector or Rejector()
        self.ranker = ranker or Ranker()
        self.conflict_resolver = conflict_resolver or ConflictResolver()

    def evaluate(
        self,
        candidates: Iterable[ReleaseCandidate],
        context: ScoringContext,
    ) -> Decision:
        """Decide among the releases offered for one target."""
        scored = [
            self.rejector.apply(self.scorer.score(candidate, context, index), context)
            for index, candidate in enumerate(candidates)
        ]
        ranked = self.ranker.rank(scored)
        rejected = tuple(r for r in scored if r.is_permanently_rejected)
        best = next((r for r in ranked if not r.is_rejected), None)

        conflict = None
        if best is not None:
            conflict = self.conflict_resolver.resolve(best.candidate, context.library)
            logger.debug(
                "Selected '%s' (score %d) out of %d releases",
                best.candidate.title,
                best.total,
                len(scored),
            )
        else:
            logger.debug("No acceptable release out of %d", len(scored))

        return Decision(ranked=tuple(ranked), rejected=rejected, best=best, conflict=conflict)

    def evaluate_many(
        self,
        batches: Iterable[Sequence[ReleaseCandidate]],
        context: ScoringContext,
        cancel_event: CancellationToken | None = None,
        progress: ProgressCallback | None = None,
    ) -> BulkDecisionReport:
        """Evaluate many release sets, cancellable between sets.

        Args:
            batches: One sequence of releases per target
            context: Scoring context shared by all sets
            cancel_event: Set it to stop before the next set
            progress: Called with ``(completed_sets, total_sets)`` after each set
        """
        items = [list(batch) for batch in batches]
        total_sets = len(items)
        total_releases = sum(len(batch) for batch in items)

        started = time.perf_counter()
        log_operation_start(logger, "evaluate_many", {"sets": total_sets, "releases": total_releases})

        decisions: list[Decision] = []
        scored = 0
        cancelled = False
        for batch in items:
            if cancel_event is not None and cancel_event.is_set():
                cancelled = True
                break
            decisions.append(self.evaluate(batch, context))
            scored += len(batch)
            if progress is not None:
                progress(len(decisions), total_sets)

        pending = total_releases - scored
        if cancelled:
            logger.info(
                "Bulk evaluation cancelled: %d releases scored, %d pending",
                scored,
                pending,
            )
        log_operation_success(
            logger,
            "evaluate_many",
            (time.perf_counter() - started) * 1000,
            {"sets": len(decisions), "scored": scored, "pending": pending},
        )
        return BulkDecisionReport(
            decisions=tuple(decisions),
            scored=scored,
            pending=pending,
            cancelled=cancelled,
        )


__all__ = ["BulkDecisionReport", "Decision", "DecisionEngine"]
