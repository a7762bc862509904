"""Local catalog provider and alias table.

``InMemoryCatalog`` implements the ``CatalogProvider`` protocol over a
list of entries held in memory, e.g. a cache of previously fetched
metadata. ``AliasTable`` maps alternate titles (foreign titles, renames)
to catalog identifiers for the alias matching strategy.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable, Mapping, Sequence

from releasevault.core.matching.models import CatalogEntry, SearchFilters
from releasevault.core.matching.similarity import title_similarity
from releasevault.core.normalization import comparison_key

logger = logging.getLogger(__name__)

DEFAULT_MIN_SIMILARITY = 40.0
DEFAULT_RESULT_LIMIT = 20


class AliasTable:
    """Alternate-title lookup table.

    Titles are compared by ``comparison_key`` so punctuation, case and
    diacritics do not matter.

    Example:
        >>> table = AliasTable({"tvdb:81797": ["One Piece", "Wan Pisu"]})
        >>> table.lookup("wan pisu")
        ('tvdb:81797',)
    """

    def __init__(self, aliases: Mapping[str, Iterable[str]] | None = None) -> None:
        """Initialize the table.

        Args:
            aliases: Mapping of external id to its alternate titles
        """
        self._by_key: dict[str, list[str]] = {}
        self._lock = threading.Lock()
        for external_id, titles in (aliases or {}).items():
            for title in titles:
                self.add(title, external_id)

    @classmethod
    def from_entries(cls, entries: Iterable[CatalogEntry]) -> AliasTable:
        """Build a table from the aliases carried by catalog entries."""
        return cls({entry.external_id: entry.aliases for entry in entries if entry.aliases})

    def add(self, alias: str, external_id: str) -> None:
        key = comparison_key(alias)
        if not key:
            return
        with self._lock:
            ids = self._by_key.setdefault(key, [])
            if external_id not in ids:
                ids.append(external_id)

    def lookup(self, title: str) -> tuple[str, ...]:
        """External ids registered for a title, in insertion order."""
        return tuple(self._by_key.get(comparison_key(title), ()))

    def __len__(self) -> int:
        return len(self._by_key)


class InMemoryCatalog:
    """Catalog provider backed by an in-memory list of entries.

    Search returns entries whose title or any alias is similar enough to
    the search term, best first; entries from the filter year are listed
    before others with the same similarity.

    Args:
        name: Provider name, also the key of its rate limiter
        entries: Initial entries
        min_similarity: Minimum ``title_similarity`` (0-100) for a search hit
        limit: Maximum number of entries returned per search
    """

    def __init__(
        self,
        name: str,
        entries: Iterable[CatalogEntry] = (),
        min_similarity: float = DEFAULT_MIN_SIMILARITY,
        limit: int = DEFAULT_RESULT_LIMIT,
    ) -> None:
        self.name = name
        self.min_similarity = min_similarity
        self.limit = limit
        self._entries: dict[str, CatalogEntry] = {}
        for entry in entries:
            self.add(entry)

    def add(self, entry: CatalogEntry) -> None:
        """Add or replace an entry (keyed by external id)."""
        self._entries[entry.external_id] = entry

    def __len__(self) -> int:
        return len(self._entries)

    async def search(self, term: str, filters: SearchFilters) -> Sequence[CatalogEntry]:
        scored: list[tuple[float, bool, CatalogEntry]] = []
        for entry in self._entries.values():
            if filters.content_type is not None and entry.content_type is not filters.content_type:
                continue
            similarity = max(title_similarity(term, title) for title in entry.titles)
            if similarity >= self.min_similarity:
                same_year = filters.year is not None and entry.year == filters.year
                scored.append((similarity, same_year, entry))

        scored.sort(key=lambda item: (item[0], item[1]), reverse=True)
        results = [entry for _, _, entry in scored[: self.limit]]
        logger.debug("Catalog '%s' search '%s': %d entries", self.name, term, len(results))
        return results

    async def get_by_id(self, external_id: str) -> CatalogEntry | None:
        return self._entries.get(external_id)


__all__ = ["AliasTable", "InMemoryCatalog"]
