"""Service protocols for dependency inversion.

Core modules use these protocols without depending on any concrete
catalog backend.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from releasevault.core.matching.models import CatalogEntry, SearchFilters


@runtime_checkable
class CatalogProvider(Protocol):
    """Protocol for catalog lookups used by the title matcher.

    Implementations may be backed by a remote metadata API or a local
    cache; the matcher only relies on this interface. Providers should
    raise on failure; the matcher records the error and moves on.

    Example:
        >>> from releasevault.services.catalog import InMemoryCatalog
        >>> provider: CatalogProvider = InMemoryCatalog("local", [])
        >>> entries = await provider.search("The Office", SearchFilters())
    """

    name: str

    async def search(self, term: str, filters: SearchFilters) -> Sequence[CatalogEntry]:
        """Search entries by title.

        Args:
            term: Title to search for
            filters: Optional year/content-type hints

        Returns:
            Matching catalog entries (may be empty)
        """
        ...

    async def get_by_id(self, external_id: str) -> CatalogEntry | None:
        """Get one entry by its namespaced identifier.

        Returns:
            The entry, or None if the provider does not know the identifier
        """
        ...


class CancellationToken(Protocol):
    """Anything with ``is_set()``: ``threading.Event`` or ``asyncio.Event``."""

    def is_set(self) -> bool: ...


__all__ = ["CancellationToken", "CatalogProvider"]
