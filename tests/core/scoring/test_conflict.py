"""Tests for library conflict classification."""

from __future__ import annotations

import pytest

from releasevault.core.quality import QualityTag
from releasevault.core.scoring.conflict import ConflictKind, ConflictResolver, Recommendation
from releasevault.core.scoring.models import LibraryFile, LibrarySnapshot


class TestClassify:
    """Candidate against one existing file."""

    @pytest.mark.parametrize(
        ("candidate_quality", "existing_quality", "kind", "recommendation", "reason"),
        [
            ("Remux-2160p", "BluRay-1080p", ConflictKind.QUALITY_UPGRADE, Recommendation.REPLACE, "higher-quality"),
            ("HDTV-720p", "BluRay-1080p", ConflictKind.DUPLICATE_FILE, Recommendation.SKIP, "lower-quality"),
            ("BluRay-1080p", "BluRay-1080p", ConflictKind.DUPLICATE_FILE, Recommendation.SKIP, "identical"),
        ],
    )
    def test_quality_comparison(
        self, make_candidate, candidate_quality, existing_quality, kind, recommendation, reason
    ):
        """Test classification by quality weight."""
        # Given
        candidate = make_candidate(quality=candidate_quality)
        existing = LibraryFile("movie-1", QualityTag.from_name(existing_quality))

        # When
        result = ConflictResolver().classify(candidate, existing)

        # Then
        assert result.kind is kind
        assert result.recommendation is recommendation
        assert result.reason == reason
        assert result.existing is existing

    def test_edition_variant(self, make_candidate):
        """Test same quality with another edition keeps both."""
        candidate = make_candidate(quality="BluRay-1080p", edition="Director's Cut")
        existing = LibraryFile("movie-1", QualityTag.from_name("BluRay-1080p"))

        result = ConflictResolver().classify(candidate, existing)

        assert result.kind is ConflictKind.EDITION_VARIANT
        assert result.recommendation is Recommendation.KEEP_BOTH


class TestResolve:
    """Candidate against the library snapshot."""

    def test_no_files(self, make_candidate):
        """Test nothing to compare with."""
        resolver = ConflictResolver()

        assert resolver.resolve(make_candidate(media_unit_id="movie-1"), LibrarySnapshot()) is None
        assert resolver.resolve(make_candidate(), LibrarySnapshot()) is None

    def test_same_edition_preferred(self, make_candidate):
        """Test the file of the same edition is the comparison target."""
        # Given
        theatrical = LibraryFile("movie-1", QualityTag.from_name("BluRay-1080p"))
        extended = LibraryFile("movie-1", QualityTag.from_name("Remux-2160p"), edition="Extended")
        library = LibrarySnapshot.of([theatrical, extended])

        # When
        result = ConflictResolver().resolve(make_candidate(quality="BluRay-1080p", media_unit_id="movie-1"), library)

        # Then
        assert result.existing is theatrical
        assert result.reason == "identical"
