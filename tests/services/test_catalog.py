"""Tests for the in-memory catalog provider and alias table."""

from __future__ import annotations

import pytest

from releasevault.core.matching.models import CatalogEntry, ContentType, SearchFilters
from releasevault.services.catalog import AliasTable, InMemoryCatalog
from releasevault.shared.protocols import CatalogProvider


class TestAliasTable:
    """Alternate-title lookups."""

    def test_lookup_ignores_punctuation_and_case(self):
        """Test aliases are found by comparison key."""
        table = AliasTable({"tvdb:81797": ["Wan Pīsu"]})

        assert table.lookup("wan-pisu!") == ("tvdb:81797",)
        assert table.lookup("One Piece") == ()

    def test_shared_alias(self):
        """Test one alias can point at several ids without duplicates."""
        # Given
        table = AliasTable()

        # When
        table.add("Doctor Who", "tvdb:78804")
        table.add("Doctor Who", "tvdb:76107")
        table.add("doctor who", "tvdb:78804")
        table.add("!!!", "tvdb:1")

        # Then
        assert table.lookup("Doctor Who") == ("tvdb:78804", "tvdb:76107")
        assert len(table) == 1

    def test_from_entries(self):
        """Test aliases carried by catalog entries are registered."""
        entries = [
            CatalogEntry("tvdb:81797", "One Piece", 1999, ContentType.ANIME, aliases=("Wan Pisu",)),
            CatalogEntry("tvdb:78804", "Doctor Who", 2005),
        ]

        table = AliasTable.from_entries(entries)

        assert table.lookup("Wan Pisu") == ("tvdb:81797",)
        assert len(table) == 1


class TestInMemoryCatalog:
    """Search and id lookups."""

    def test_is_catalog_provider(self, catalog):
        """Test the protocol is satisfied."""
        assert isinstance(catalog, CatalogProvider)
        assert len(catalog) == 6

    @pytest.mark.asyncio
    async def test_search_orders_by_similarity(self, catalog):
        """Test the closest title comes first."""
        results = await catalog.search("The Walking Dead", SearchFilters())

        assert [e.external_id for e in results[:2]] == ["tvdb:153021", "tvdb:290853"]

    @pytest.mark.asyncio
    async def test_search_prefers_filter_year(self, catalog):
        """Test entries from the hinted year come first among equals."""
        results = await catalog.search("Doctor Who", SearchFilters(year=1963))

        assert [e.external_id for e in results] == ["tvdb:76107", "tvdb:78804"]

    @pytest.mark.asyncio
    async def test_search_filters_content_type(self, catalog):
        """Test the content type filter is strict."""
        movies = await catalog.search("The Matrix", SearchFilters(content_type=ContentType.MOVIE))
        series = await catalog.search("The Matrix", SearchFilters(content_type=ContentType.SERIES))

        assert [e.external_id for e in movies] == ["tmdb:603"]
        assert all(e.external_id != "tmdb:603" for e in series)

    @pytest.mark.asyncio
    async def test_search_matches_aliases(self):
        """Test aliases count as titles for search."""
        catalog = InMemoryCatalog(
            "local",
            [CatalogEntry("tvdb:81797", "One Piece", 1999, ContentType.ANIME, aliases=("Wan Pisu",))],
        )

        results = await catalog.search("Wan Pisu", SearchFilters())

        assert [e.external_id for e in results] == ["tvdb:81797"]

    @pytest.mark.asyncio
    async def test_search_limit(self, catalog_entries):
        """Test the result count is capped."""
        catalog = InMemoryCatalog("local", catalog_entries, min_similarity=0, limit=2)

        assert len(await catalog.search("Doctor Who", SearchFilters())) == 2

    @pytest.mark.asyncio
    async def test_get_by_id(self, catalog):
        """Test lookups by external id."""
        entry = await catalog.get_by_id("tmdb:603")

        assert entry.title == "The Matrix"
        assert await catalog.get_by_id("tmdb:0") is None
