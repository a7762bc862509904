"""Tests for release scoring."""

from __future__ import annotations

from datetime import timedelta

import pytest

from releasevault.core.scoring.models import DownloadProtocol, ScoringContext
from releasevault.core.scoring.scorer import (
    Scorer,
    age_score,
    indexer_priority_score,
    quality_score,
    seeders_score,
)


class TestQualityScore:
    """Profile rank term."""

    def test_rank_times_hundred(self, scoring_context, make_candidate):
        """Test the 1-based rank among allowed qualities x 100."""
        assert quality_score(make_candidate(quality="HDTV-720p").quality, scoring_context.profile) == 100
        assert quality_score(make_candidate(quality="BluRay-1080p").quality, scoring_context.profile) == 500

    def test_not_in_profile(self, scoring_context, make_candidate):
        """Test qualities outside the profile score 0."""
        assert quality_score(make_candidate(quality="SDTV").quality, scoring_context.profile) == 0


class TestSeedersScore:
    """Seeder step function."""

    @pytest.mark.parametrize(
        ("seeders", "expected"),
        [(0, -1000), (4, 0), (5, 25), (10, 50), (50, 75), (99, 75), (100, 100), (5000, 100)],
    )
    def test_steps(self, make_candidate, seeders, expected):
        """Test each step boundary."""
        assert seeders_score(make_candidate(seeders=seeders)) == expected

    def test_usenet_and_unknown(self, make_candidate):
        """Test usenet releases and unknown counts score 0."""
        assert seeders_score(make_candidate(protocol=DownloadProtocol.USENET, seeders=50)) == 0
        assert seeders_score(make_candidate(seeders=None)) == 0


class TestAgeScore:
    """Freshness rewards."""

    @pytest.mark.parametrize(
        ("media_days", "release_days", "expected"),
        [
            (10, 0, 100),
            (10, 3, 50),
            (10, 10, 25),
            (10, 20, 0),
            (100, 5, 50),
            (100, 20, 25),
            (100, 40, 0),
            (400, 0, 0),
        ],
    )
    def test_steps(self, make_candidate, now, media_days, release_days, expected):
        """Test rewards by media age and release age."""
        candidate = make_candidate(
            media_first_available=now - timedelta(days=media_days),
            published_at=now - timedelta(days=release_days),
        )

        assert age_score(candidate, now) == expected

    def test_future_publish_date(self, make_candidate, now):
        """Test a publish date after ``now`` counts as same day."""
        candidate = make_candidate(
            media_first_available=now - timedelta(days=2),
            published_at=now + timedelta(days=1),
        )

        assert age_score(candidate, now) == 100

    def test_missing_dates(self, make_candidate, now):
        """Test releases without dates are never rewarded."""
        assert age_score(make_candidate(published_at=now), now) == 0


class TestIndexerPriority:
    """Indexer preference term."""

    def test_lower_priority_number_wins(self):
        """Test the term is baseline minus priority."""
        assert indexer_priority_score(10, 25) == 15
        assert indexer_priority_score(25, 25) == 0
        assert indexer_priority_score(40, 25) == -15


class TestScorer:
    """Full breakdown."""

    def test_plain_release(self, scoring_context, make_candidate):
        """Test a release with no extras scores its quality rank only."""
        # Given
        candidate = make_candidate()

        # When
        scored = Scorer().score(candidate, scoring_context)

        # Then
        assert scored.breakdown.as_dict() == {
            "quality": 400,
            "custom_format": 0,
            "preferred_word": 0,
            "indexer_priority": 0,
            "age": 0,
            "seeders": 0,
            "total": 400,
        }
        assert scored.matched_formats == ()

    def test_all_terms(self, scoring_context, make_candidate):
        """Test custom formats, preferred words and seeders add up."""
        # Given
        candidate = make_candidate(
            title="Show.S01E01.PROPER.1080p.WEB-DL.x265-GRP",
            codec="x265",
            seeders=60,
            indexer_priority=20,
        )

        # When
        scored = Scorer().score(candidate, scoring_context, discovery_index=4)

        # Then
        breakdown = scored.breakdown
        assert breakdown.quality == 400
        assert breakdown.custom_format == 50
        assert breakdown.preferred_word == 10
        assert breakdown.indexer_priority == 5
        assert breakdown.seeders == 75
        assert scored.total == 540
        assert scored.matched_formats == ("x265",)
        assert scored.discovery_index == 4

    def test_negative_format_score(self, scoring_context, make_candidate):
        """Test a penalizing custom format lowers the total."""
        scored = Scorer().score(make_candidate(release_group="LQ"), scoring_context)

        assert scored.breakdown.custom_format == -100
        assert scored.matched_formats == ("Low Quality Group",)

    def test_rescoring_is_pure(self, profile_config, now, make_candidate):
        """Test scoring under another profile does not depend on earlier scores."""
        candidate = make_candidate(quality="BluRay-1080p")
        hd = ScoringContext.from_config(profile_config, "HD", now=now)
        frozen = ScoringContext.from_config(profile_config, "Frozen", now=now)
        scorer = Scorer()

        first = scorer.score(candidate, hd)
        scorer.score(candidate, frozen)

        assert scorer.score(candidate, hd) == first
        assert scorer.score(candidate, frozen).breakdown.quality == 300
