"""Tests for title similarity helpers."""

from __future__ import annotations

import pytest
from hypothesis import given, strategies as st

from releasevault.core.matching.similarity import fuzzy_confidence, levenshtein, title_similarity

short_text = st.text(alphabet="abcdefgh ", max_size=12)


class TestLevenshtein:
    """Edit distance properties."""

    def test_known_distance(self):
        """Test a textbook example."""
        assert levenshtein("kitten", "sitting") == 3

    @given(short_text, short_text)
    def test_symmetric(self, first, second):
        """Test distance does not depend on argument order."""
        assert levenshtein(first, second) == levenshtein(second, first)

    @given(short_text)
    def test_identity(self, text):
        """Test a string is at distance zero from itself."""
        assert levenshtein(text, text) == 0

    @given(short_text, short_text, short_text)
    def test_triangle_inequality(self, first, second, third):
        """Test the triangle inequality."""
        assert levenshtein(first, third) <= levenshtein(first, second) + levenshtein(second, third)


class TestTitleSimilarity:
    """Title similarity scale."""

    def test_exact_after_cleaning(self):
        """Test punctuation and case do not matter."""
        assert title_similarity("The Office", "the office!") == 100.0

    def test_containment(self):
        """Test one title contained in the other."""
        assert title_similarity("Office", "The Office") == pytest.approx(85.0)

    def test_edit_distance(self):
        """Test unrelated-length titles fall back to edit distance."""
        assert title_similarity("The Walking Dead", "The Walking Deed") == pytest.approx(100 * (1 - 1 / 16))

    def test_empty(self):
        """Test empty titles never match."""
        assert title_similarity("", "The Office") == 0.0
        assert title_similarity("!!!", "The Office") == 0.0

    @given(short_text, short_text)
    def test_bounds(self, first, second):
        """Test similarity stays within 0-100."""
        assert 0.0 <= title_similarity(first, second) <= 100.0


class TestFuzzyConfidence:
    """Linear fuzzy confidence."""

    @pytest.mark.parametrize(("distance", "expected"), [(0, 90), (1, 80), (2, 70), (3, 60)])
    def test_steps(self, distance, expected):
        """Test the default scale from 90 down to 60."""
        assert fuzzy_confidence(distance) == pytest.approx(expected)

    @pytest.mark.parametrize("distance", [-1, 4])
    def test_out_of_range(self, distance):
        """Test distances outside the allowed range."""
        with pytest.raises(ValueError):
            fuzzy_confidence(distance)
