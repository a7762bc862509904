"""Tests for release rejection rules."""

from __future__ import annotations

from dataclasses import replace
from datetime import timedelta

from releasevault.core.quality import QualityTag
from releasevault.core.scoring.models import (
    DownloadProtocol,
    LibraryFile,
    LibrarySnapshot,
    RejectionKind,
    ScoringContext,
)
from releasevault.core.scoring.rejector import RejectionReason, Rejector
from releasevault.core.scoring.scorer import Scorer


def reasons(rejections) -> set[str]:
    return {r.reason for r in rejections}


class TestQualityRules:
    """Profile and library based rules."""

    def test_quality_not_in_profile(self, scoring_context, make_candidate):
        """Test a disallowed quality is rejected permanently."""
        # Given
        candidate = make_candidate(quality="SDTV")

        # When
        rejections = Rejector().evaluate(candidate, scoring_context)

        # Then
        assert reasons(rejections) == {RejectionReason.QUALITY_NOT_IN_PROFILE}
        assert rejections[0].kind is RejectionKind.PERMANENT

    def test_acceptable_release(self, scoring_context, make_candidate):
        """Test a release that passes every rule."""
        assert Rejector().evaluate(make_candidate(seeders=10), scoring_context) == ()

    def test_already_imported_and_cutoff(self, scoring_context, make_candidate):
        """Test an equal-or-better existing file triggers both library rules."""
        # Given the library already holds the cutoff quality
        library = LibrarySnapshot.of([LibraryFile("ep-1", QualityTag.from_name("BluRay-1080p"))])
        context = replace(scoring_context, library=library)

        # When
        rejections = Rejector().evaluate(make_candidate(media_unit_id="ep-1"), context)

        # Then
        assert reasons(rejections) == {
            RejectionReason.ALREADY_IMPORTED,
            RejectionReason.CUTOFF_ALREADY_MET,
        }
        assert all(r.is_permanent for r in rejections)

    def test_library_rules_compare_same_edition(self, scoring_context, make_candidate):
        """Test only files of the candidate's edition count as already imported."""
        # Given a theatrical file and an extended cut at the cutoff quality
        library = LibrarySnapshot.of(
            [
                LibraryFile("movie-1", QualityTag.from_name("BluRay-1080p")),
                LibraryFile("movie-1", QualityTag.from_name("BluRay-1080p"), edition="Extended"),
            ]
        )
        context = replace(scoring_context, library=library)

        # When
        directors_cut = make_candidate(quality="BluRay-1080p", edition="Director's Cut", media_unit_id="movie-1")
        extended = make_candidate(quality="BluRay-1080p", edition="EXTENDED", media_unit_id="movie-1")

        # Then
        assert Rejector().evaluate(directors_cut, context) == ()
        assert reasons(Rejector().evaluate(extended, context)) == {
            RejectionReason.ALREADY_IMPORTED,
            RejectionReason.CUTOFF_ALREADY_MET,
        }

    def test_upgrade_is_accepted(self, scoring_context, make_candidate):
        """Test a better release for a file below cutoff passes."""
        library = LibrarySnapshot.of([LibraryFile("ep-1", QualityTag.from_name("HDTV-720p"))])
        context = replace(scoring_context, library=library)

        rejections = Rejector().evaluate(make_candidate(quality="BluRay-1080p", media_unit_id="ep-1"), context)

        assert rejections == ()

    def test_upgrades_disabled(self, profile_config, now, make_candidate):
        """Test a profile without upgrades rejects any release for an existing file."""
        library = LibrarySnapshot.of([LibraryFile("ep-1", QualityTag.from_name("HDTV-720p"))])
        context = ScoringContext.from_config(profile_config, "Frozen", library=library, now=now)

        rejections = Rejector().evaluate(make_candidate(quality="BluRay-1080p", media_unit_id="ep-1"), context)

        assert reasons(rejections) == {RejectionReason.CUTOFF_ALREADY_MET}


class TestSizeRule:
    """Size limits."""

    def test_profile_maximum(self, scoring_context, make_candidate):
        """Test the profile-wide size limit."""
        candidate = make_candidate(size_bytes=25000 * 1024 * 1024)

        assert reasons(Rejector().evaluate(candidate, scoring_context)) == {RejectionReason.SIZE_EXCEEDS_MAXIMUM}

    def test_per_minute_maximum(self, scoring_context, make_candidate):
        """Test the per-minute limit of the quality when runtime is known."""
        # WEB-DL 1080p allows 130 MB per minute
        too_big = make_candidate(size_bytes=5000 * 1024 * 1024, runtime_minutes=30)
        fine = make_candidate(size_bytes=3000 * 1024 * 1024, runtime_minutes=30)

        assert RejectionReason.SIZE_EXCEEDS_MAXIMUM in reasons(Rejector().evaluate(too_big, scoring_context))
        assert RejectionReason.SIZE_EXCEEDS_MAXIMUM not in reasons(Rejector().evaluate(fine, scoring_context))


class TestPolicyRules:
    """Seeder, blocklist, restriction and retention policies."""

    def test_minimum_seeders_is_temporary(self, scoring_context, make_candidate):
        """Test too few seeders is a temporary rejection."""
        rejections = Rejector().evaluate(make_candidate(seeders=1), scoring_context)

        assert reasons(rejections) == {RejectionReason.BELOW_MINIMUM_SEEDERS}
        assert rejections[0].kind is RejectionKind.TEMPORARY

    def test_minimum_seeders_ignores_usenet(self, scoring_context, make_candidate):
        """Test usenet releases have no seeders to check."""
        candidate = make_candidate(protocol=DownloadProtocol.USENET, seeders=0)

        assert Rejector().evaluate(candidate, scoring_context) == ()

    def test_blocklist(self, scoring_context, make_candidate):
        """Test blocklisted titles match case-insensitively."""
        candidate = make_candidate(title="show.s01e01.1080p.web-dl-bad", seeders=10)

        assert reasons(Rejector().evaluate(candidate, scoring_context)) == {RejectionReason.BLOCKLISTED}

    def test_forbidden_term(self, scoring_context, make_candidate):
        """Test a restriction failure is a user-policy rejection."""
        candidate = make_candidate(title="Show.S01E01.CAM.1080p.WEB-DL-GRP", seeders=10)

        rejections = Rejector().evaluate(candidate, scoring_context)

        assert reasons(rejections) == {RejectionReason.RESTRICTION}
        assert rejections[0].kind is RejectionKind.USER_POLICY

    def test_usenet_retention(self, scoring_context, make_candidate, now):
        """Test posts older than the retention window."""
        candidate = make_candidate(
            protocol=DownloadProtocol.USENET,
            published_at=now - timedelta(days=4000),
        )

        assert reasons(Rejector().evaluate(candidate, scoring_context)) == {RejectionReason.USENET_RETENTION}


class TestRejectorApply:
    """Attaching rejections to scored releases."""

    def test_apply_returns_copy(self, scoring_context, make_candidate):
        """Test the scored release is not modified in place."""
        scored = Scorer().score(make_candidate(quality="SDTV"), scoring_context)

        rejected = Rejector().apply(scored, scoring_context)

        assert scored.rejections == ()
        assert rejected.is_permanently_rejected
        assert rejected.rejection_reasons == (RejectionReason.QUALITY_NOT_IN_PROFILE,)

    def test_custom_rules(self, scoring_context, make_candidate):
        """Test the rule set can be replaced."""
        rejector = Rejector(rules=[])

        assert rejector.evaluate(make_candidate(quality="SDTV"), scoring_context) == ()
