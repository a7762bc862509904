"""Release parsing pipeline.

``ReleaseParser`` pre-processes a title once, walks the fixed strategy list
highest priority first, and post-processes the first result whose
confidence reaches the acceptance threshold. The fallback strategy always
accepts, so parsing is total: every input yields a ``ParsedRelease`` and no
exception escapes.
"""

from __future__ import annotations

import functools
import logging
import time
from collections.abc import Callable, Iterable
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import replace
from datetime import datetime, timezone

from releasevault.config.settings import ParserSettings
from releasevault.core.constants import ParsingConfidence, PostProcessLimits
from releasevault.core.normalization import normalize_unicode
from releasevault.core.parser.models import ParsedRelease, ParserKind
from releasevault.core.parser.patterns import PatternLibrary, get_pattern_library
from releasevault.core.parser.strategies import (
    DEFAULT_STRATEGIES,
    FallbackStrategy,
    ParsingStrategy,
)
from releasevault.shared.logging import log_operation_start, log_operation_success

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]


class ReleaseParser:
    """Parse release titles into ``ParsedRelease`` records.

    The parser holds only immutable state (the pattern library, the
    strategy tuple and its settings) and may be shared between threads.

    Examples:
        >>> parser = ReleaseParser()
        >>> result = parser.parse("The.Walking.Dead.S11E08.1080p.AMZN.WEB-DL.DDP5.1.H.264-NTb")
        >>> result.series_title, result.season_number, result.episode_numbers
        ('The Walking Dead', 11, (8,))
        >>> result.release_group
        'NTb'
    """

    def __init__(
        self,
        patterns: PatternLibrary | None = None,
        settings: ParserSettings | None = None,
    ) -> None:
        """Initialize the parser.

        Args:
            patterns: Pattern library; the shared process-wide one by default
            settings: Parser settings; defaults apply when omitted
        """
        self.patterns = patterns or get_pattern_library()
        self.settings = settings or ParserSettings()

        disabled = set(self.settings.disabled_strategies)
        self.strategies: tuple[ParsingStrategy, ...] = tuple(
            strategy
            for strategy in DEFAULT_STRATEGIES
            if strategy.kind is ParserKind.FALLBACK or strategy.kind.value not in disabled
        )
        self._fallback = FallbackStrategy()

    def parse(self, title: str) -> ParsedRelease:
        """Parse one release title.

        Args:
            title: Release name or filename

        Returns:
            The parsed record. Confidence 0 means only the fallback
            strategy could handle the title.
        """
        text = self._preprocess(title)
        if not text:
            return ParsedRelease(raw_title=title)

        for strategy in self.strategies:
            if strategy.kind is ParserKind.FALLBACK:
                break
            try:
                result = strategy.parse(text, self.patterns)
            except Exception:  # pylint: disable=broad-exception-caught
                logger.debug(
                    "Strategy '%s' failed for '%s', trying next",
                    strategy.kind.value,
                    title,
                    exc_info=True,
                )
                continue

            if result is not None and result.confidence >= self.settings.min_confidence:
                logger.debug(
                    "Parsed '%s' with %s (confidence: %d)",
                    title,
                    strategy.kind.value,
                    result.confidence,
                )
                return self._postprocess(result, title)

        return self._postprocess(self._parse_fallback(text, title), title)

    def parse_many(
        self,
        titles: Iterable[str],
        max_workers: int | None = None,
        progress: ProgressCallback | None = None,
    ) -> list[ParsedRelease]:
        """Parse many titles concurrently.

        Args:
            titles: Titles to parse
            max_workers: Worker threads; falls back to the configured value,
                then to the ThreadPoolExecutor default
            progress: Called with ``(completed, total)`` after each parse

        Returns:
            Parsed records in input order
        """
        items = list(titles)
        total = len(items)
        results: list[ParsedRelease | None] = [None] * total
        if not items:
            return []

        started = time.perf_counter()
        log_operation_start(logger, "parse_many", {"total": total})

        workers = max_workers or self.settings.max_workers
        completed = 0
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = {executor.submit(self.parse, title): index for index, title in enumerate(items)}
            for future in as_completed(futures):
                results[futures[future]] = future.result()
                completed += 1
                if progress is not None:
                    progress(completed, total)

        matched = sum(1 for r in results if r is not None and r.is_matched)
        log_operation_success(
            logger,
            "parse_many",
            (time.perf_counter() - started) * 1000,
            {"total": total, "matched": matched},
        )
        return [r for r in results if r is not None]

    def _preprocess(self, title: str) -> str:
        text = self.patterns.extension.sub("", title.strip())
        text = normalize_unicode(text)
        text = self.patterns.sample_marker.sub("", text)
        return text.strip()

    def _parse_fallback(self, text: str, title: str) -> ParsedRelease:
        try:
            return self._fallback.parse(text, self.patterns)
        except Exception:  # pylint: disable=broad-exception-caught
            logger.debug("Fallback parsing failed for '%s'", title, exc_info=True)
            return ParsedRelease(raw_title=title, confidence=ParsingConfidence.FALLBACK)

    def _postprocess(self, result: ParsedRelease, title: str) -> ParsedRelease:
        """Drop out-of-range values and restore the raw title."""
        max_year = datetime.now(tz=timezone.utc).year + self.settings.future_year_tolerance

        episodes = tuple(
            e for e in result.episode_numbers if 0 < e < PostProcessLimits.MAX_EPISODE_EXCLUSIVE
        )
        season = result.season_number
        if season is not None and not PostProcessLimits.MIN_SEASON <= season <= PostProcessLimits.MAX_SEASON:
            season = None
        absolute = result.absolute_episode_number
        if absolute is not None and not 0 < absolute < PostProcessLimits.MAX_EPISODE_EXCLUSIVE:
            absolute = None
        year = result.year
        if year is not None and not PostProcessLimits.MIN_YEAR <= year <= max_year:
            year = None

        return replace(
            result,
            raw_title=title,
            episode_numbers=episodes,
            season_number=season,
            absolute_episode_number=absolute,
            year=year,
        )


@functools.lru_cache(maxsize=1)
def _default_parser() -> ReleaseParser:
    return ReleaseParser()


def parse_release(title: str) -> ParsedRelease:
    """Parse a title with a shared default-configured parser."""
    return _default_parser().parse(title)


__all__ = [
    "ProgressCallback",
    "ReleaseParser",
    "parse_release",
]
