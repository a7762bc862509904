"""Tests for matching domain models."""

from __future__ import annotations

import pytest

from releasevault.core.matching.models import (
    CatalogEntry,
    ContentType,
    MatchCandidate,
    MatchMethod,
    MatchOutcome,
    MatchQuery,
)
from releasevault.core.parser.models import ParsedRelease


class TestCatalogEntry:
    """Catalog entry validation."""

    def test_namespace(self):
        """Test the identifier namespace."""
        assert CatalogEntry("tvdb:153021", "The Walking Dead").namespace == "tvdb"
        assert CatalogEntry("plain", "Untagged").namespace == ""

    def test_titles_include_aliases(self):
        """Test the canonical title comes before aliases."""
        entry = CatalogEntry("tvdb:81797", "One Piece", aliases=("Wan Pisu",))

        assert entry.titles == ("One Piece", "Wan Pisu")

    @pytest.mark.parametrize(("external_id", "title"), [("", "Title"), ("tvdb:1", "  ")])
    def test_empty_fields(self, external_id, title):
        """Test empty identifiers and titles are rejected."""
        with pytest.raises(ValueError):
            CatalogEntry(external_id, title)


class TestMatchCandidate:
    """Candidate construction."""

    def test_confidence_is_capped(self):
        """Test confidence above 100 is capped when built from an entry."""
        entry = CatalogEntry("tvdb:1", "Doctor Who", 2005)

        candidate = MatchCandidate.from_entry(entry, 104.6, MatchMethod.YEAR_DISAMBIGUATION)

        assert candidate.confidence == 100

    def test_invalid_confidence(self):
        """Test direct construction validates the range."""
        with pytest.raises(ValueError):
            MatchCandidate("tvdb:1", "Doctor Who", 2005, ContentType.SERIES, 101, MatchMethod.EXACT_TITLE)

    def test_sort_key(self):
        """Test confidence dominates method priority."""
        exact = MatchCandidate("tvdb:1", "A", None, ContentType.SERIES, 90, MatchMethod.FUZZY_TITLE)
        alias = MatchCandidate("tvdb:2", "B", None, ContentType.SERIES, 85, MatchMethod.EXTERNAL_ID)

        assert exact.sort_key > alias.sort_key


class TestMatchQuery:
    """Query normalization."""

    def test_from_release(self):
        """Test titles are normalized for comparisons."""
        release = ParsedRelease(raw_title="x", title="Marvel's Agents of S.H.I.E.L.D.", year=2013)

        query = MatchQuery.from_release(release, ("tvdb:1",))

        assert query.clean_title == "marvel s agents of s h i e l d"
        assert query.key == "marvelsagentsofshield"
        assert query.year == 2013
        assert query.alias_ids == ("tvdb:1",)
        assert query.has_title

    def test_empty_title(self):
        """Test a release without a title has nothing to compare."""
        assert not MatchQuery.from_release(ParsedRelease(raw_title="")).has_title


class TestMatchOutcome:
    """Outcome accessors."""

    def test_empty_outcome(self):
        """Test an outcome without candidates."""
        outcome = MatchOutcome(release=ParsedRelease(raw_title="x"))

        assert not outcome.is_matched
        assert outcome.best is None
