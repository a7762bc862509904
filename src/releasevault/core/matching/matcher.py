"""Title matcher: parsed releases to catalog candidates.

The matcher queries every configured catalog provider (through one shared
rate limiter per provider), runs the enabled matching strategies over the
returned entries, deduplicates the candidates by external id (first
occurrence wins) and orders them by confidence, then method priority.

Provider failures never fail a match: the error is logged, recorded on the
outcome and the remaining providers are still used. Nothing is retried.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable, Iterable, Sequence
from typing import TYPE_CHECKING

from releasevault.config.settings import MatcherSettings
from releasevault.core.matching.models import (
    BulkMatchReport,
    CatalogEntry,
    ContentType,
    MatchCandidate,
    MatchOutcome,
    MatchQuery,
    SearchFilters,
)
from releasevault.core.matching.strategies import MatchingStrategy, build_strategies
from releasevault.core.parser.models import ParsedRelease
from releasevault.services.rate_limiter import RateLimiterRegistry
from releasevault.shared.errors import ProviderError, create_provider_error
from releasevault.shared.logging import log_operation_start, log_operation_success

if TYPE_CHECKING:
    from releasevault.services.catalog import AliasTable
    from releasevault.shared.protocols import CancellationToken, CatalogProvider

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]


def _content_hint(release: ParsedRelease) -> ContentType | None:
    if release.is_music:
        return ContentType.MUSIC_ARTIST
    if release.is_movie:
        return ContentType.MOVIE
    return None


def deduplicate(candidates: Iterable[MatchCandidate]) -> list[MatchCandidate]:
    """Drop candidates whose external id was already seen (first occurrence wins)."""
    seen: set[str] = set()
    unique: list[MatchCandidate] = []
    for candidate in candidates:
        if candidate.external_id in seen:
            continue
        seen.add(candidate.external_id)
        unique.append(candidate)
    return unique


def rank_candidates(candidates: Iterable[MatchCandidate]) -> list[MatchCandidate]:
    """Order by confidence, then method priority, both descending.

    The sort is stable, so fully tied candidates keep discovery order.
    """
    return sorted(candidates, key=lambda c: c.sort_key, reverse=True)


class TitleMatcher:
    """Match parsed releases against catalog providers.

    Args:
        providers: Catalog providers, consulted concurrently for each release
        settings: Matcher settings (enabled strategies, fuzzy distance,
            concurrency and rate limits)
        alias_table: Optional alternate-title table for the alias strategy
        rate_limiters: Shared limiter registry; one is created from the
            settings when omitted

    Example:
        >>> matcher = TitleMatcher([InMemoryCatalog("local", entries)])
        >>> outcome = await matcher.match(parse_release("The.Office.S01E01.720p.HDTV-GRP"))
        >>> outcome.best.match_method
        <MatchMethod.EXACT_TITLE: 'exact-title'>
    """

    def __init__(
        self,
        providers: Sequence[CatalogProvider],
        settings: MatcherSettings | None = None,
        alias_table: AliasTable | None = None,
        rate_limiters: RateLimiterRegistry | None = None,
    ) -> None:
        self.providers = tuple(providers)
        self.settings = settings or MatcherSettings()
        self.alias_table = alias_table
        self.rate_limiters = rate_limiters or RateLimiterRegistry(
            capacity=self.settings.provider_rate_capacity,
            refill_rate=self.settings.provider_refill_rate,
        )
        self.strategies: tuple[MatchingStrategy, ...] = build_strategies(self.settings)

    async def match(self, release: ParsedRelease) -> MatchOutcome:
        """Find catalog candidates for one parsed release.

        Returns:
            The outcome; an unmatched release yields an outcome with no
            candidates rather than an exception.
        """
        started = time.perf_counter()
        alias_ids: tuple[str, ...] = ()
        if self.alias_table is not None and self.settings.enable_alias and release.title:
            alias_ids = self.alias_table.lookup(release.title)
        query = MatchQuery.from_release(release, alias_ids)

        if not query.has_title and not query.external_id:
            logger.debug("Nothing to match for '%s'", release.raw_title)
            return MatchOutcome(release=release)

        filters = SearchFilters(year=release.year, content_type=_content_hint(release))
        lookups = await asyncio.gather(
            *(self._lookup(provider, query, filters) for provider in self.providers)
        )

        provider_errors: list[ProviderError] = []
        for _, errors in lookups:
            provider_errors.extend(errors)

        found: list[MatchCandidate] = []
        for strategy in self.strategies:
            for provider, (entries, _) in zip(self.providers, lookups):
                found.extend(strategy.evaluate(query, entries, provider.name))

        candidates = rank_candidates(deduplicate(found))
        log_operation_success(
            logger,
            "match_release",
            (time.perf_counter() - started) * 1000,
            {
                "title": release.title,
                "candidates": len(candidates),
                "provider_errors": len(provider_errors),
            },
        )
        return MatchOutcome(
            release=release,
            candidates=tuple(candidates),
            provider_errors=tuple(provider_errors),
        )

    async def match_many(
        self,
        releases: Iterable[ParsedRelease],
        cancel_event: CancellationToken | None = None,
        progress: ProgressCallback | None = None,
    ) -> BulkMatchReport:
        """Match many releases concurrently.

        At most ``max_concurrent_lookups`` releases are looked up at a time.
        Cancellation is checked before each release starts; a release that
        has started always finishes.

        Args:
            releases: Parsed releases
            cancel_event: Set it to stop starting new releases
            progress: Called with ``(completed, total)`` after each release

        Returns:
            Outcomes of the processed releases in input order, with counts
            of completed and pending releases
        """
        items = list(releases)
        total = len(items)
        results: list[MatchOutcome | None] = [None] * total
        semaphore = asyncio.Semaphore(self.settings.max_concurrent_lookups)
        completed = 0

        started = time.perf_counter()
        log_operation_start(logger, "match_many", {"total": total})

        async def _run(index: int, release: ParsedRelease) -> None:
            nonlocal completed
            async with semaphore:
                if cancel_event is not None and cancel_event.is_set():
                    return
                results[index] = await self.match(release)
                completed += 1
                if progress is not None:
                    progress(completed, total)

        await asyncio.gather(*(_run(index, release) for index, release in enumerate(items)))

        outcomes = tuple(outcome for outcome in results if outcome is not None)
        pending = total - len(outcomes)
        if pending:
            logger.info("Bulk matching cancelled: %d of %d releases pending", pending, total)

        log_operation_success(
            logger,
            "match_many",
            (time.perf_counter() - started) * 1000,
            {"total": total, "completed": len(outcomes), "pending": pending},
        )
        return BulkMatchReport(
            outcomes=outcomes,
            completed=len(outcomes),
            pending=pending,
            cancelled=pending > 0,
        )

    async def _lookup(
        self,
        provider: CatalogProvider,
        query: MatchQuery,
        filters: SearchFilters,
    ) -> tuple[list[CatalogEntry], list[ProviderError]]:
        """Collect entries from one provider: a title search plus id lookups."""
        limiter = self.rate_limiters.get(provider.name)
        entries: list[CatalogEntry] = []
        errors: list[ProviderError] = []

        if query.has_title:
            try:
                await limiter.acquire_async()
                entries.extend(await provider.search(query.title, filters))
            except Exception as e:  # pylint: disable=broad-exception-caught
                errors.append(self._provider_failed(provider, query.title, e))

        ids: list[str] = []
        if query.external_id and self.settings.enable_external_id:
            ids.append(query.external_id)
        ids.extend(query.alias_ids)

        known = {entry.external_id for entry in entries}
        get_by_id = getattr(provider, "get_by_id", None)
        for external_id in dict.fromkeys(ids):
            if external_id in known or get_by_id is None:
                continue
            try:
                await limiter.acquire_async()
                entry = await get_by_id(external_id)
            except Exception as e:  # pylint: disable=broad-exception-caught
                errors.append(self._provider_failed(provider, external_id, e))
                continue
            if entry is not None:
                entries.append(entry)
                known.add(entry.external_id)

        return entries, errors

    @staticmethod
    def _provider_failed(provider: CatalogProvider, term: str, error: Exception) -> ProviderError:
        provider_error = create_provider_error(provider.name, term, error)
        logger.warning(
            "Catalog provider '%s' failed for '%s': %s",
            provider.name,
            term,
            error,
            extra={"error_code": provider_error.code.name, "operation": "catalog_lookup"},
        )
        return provider_error


__all__ = [
    "ProgressCallback",
    "TitleMatcher",
    "deduplicate",
    "rank_candidates",
]
