"""Tests for the quality model."""

from __future__ import annotations

import pytest
from hypothesis import assume, given
from hypothesis import strategies as st

from releasevault.config.profiles import QualityProfile
from releasevault.core.parser.models import ParsedRelease
from releasevault.core.quality import (
    DEFINITIONS_BY_NAME,
    QUALITY_DEFINITIONS,
    ContentKind,
    QualityModifier,
    QualitySource,
    QualityTag,
    Resolution,
    resolve_definition,
)
from releasevault.core.scoring.conflict import ConflictKind, ConflictResolver
from releasevault.core.scoring.models import LibraryFile, ReleaseCandidate
from releasevault.core.scoring.scorer import quality_score


class TestResolveDefinition:
    """Source/resolution to definition lookup."""

    @pytest.mark.parametrize(
        ("source", "resolution", "name"),
        [
            (QualitySource.WEBDL, Resolution.R1080P, "WEB-DL 1080p"),
            (QualitySource.HDTV, Resolution.R480P, "SDTV"),
            (QualitySource.BLURAY, Resolution.R540P, "BluRay-480p"),
            (QualitySource.REMUX, Resolution.R720P, "BluRay-720p"),
            (QualitySource.CAM, Resolution.R1080P, "CAM"),
            (QualitySource.AUDIO_LOSSLESS, Resolution.UNKNOWN, "Audio-Lossless"),
            (QualitySource.WEBDL, Resolution.UNKNOWN, "Unknown"),
        ],
    )
    def test_lookup(self, source, resolution, name):
        """Test exact rows, fallbacks to lower tiers and resolution-agnostic sources."""
        assert resolve_definition(source, resolution).name == name

    def test_table_names_are_unique(self):
        """Test every definition can be looked up by name."""
        assert len(DEFINITIONS_BY_NAME) == len(QUALITY_DEFINITIONS)


class TestQualityTag:
    """Weighted tags."""

    def test_weight_from_definition(self):
        """Test the weight is derived from the table."""
        assert QualityTag.from_name("WEB-DL 1080p").weight == 320
        assert QualityTag.create(QualitySource.BLURAY, Resolution.R1080P).weight == 330

    def test_modifier_stays_within_tier(self):
        """Test a proper ranks above its base but below the next tier."""
        base = QualityTag.from_name("WEB-DL 1080p")
        proper = QualityTag.from_name("WEB-DL 1080p", QualityModifier.PROPER)
        next_tier = QualityTag.from_name("BluRay-1080p")

        assert proper.is_better_than(base)
        assert next_tier.is_better_than(proper)
        assert str(proper) == "WEB-DL 1080p Proper"

    def test_video_weights_increase_with_resolution(self):
        """Test higher resolutions of one source always weigh more."""
        web = [d for d in QUALITY_DEFINITIONS if d.source is QualitySource.WEBDL]

        assert sorted(web, key=lambda d: d.resolution) == sorted(web, key=lambda d: d.weight)

    def test_content_kind(self):
        """Test audio tiers are a separate content kind."""
        assert QualityTag.from_name("Audio-High").content_kind is ContentKind.AUDIO
        assert QualityTag.from_name("HDTV-720p").content_kind is ContentKind.VIDEO

    def test_unknown_name(self):
        """Test unknown names raise KeyError."""
        with pytest.raises(KeyError):
            QualityTag.from_name("VHS")

    def test_equality_ignores_definition_object(self):
        """Test tags built both ways compare equal."""
        assert QualityTag.from_name("HDTV-1080p") == QualityTag.create(QualitySource.HDTV, Resolution.R1080P)


VIDEO_DEFINITIONS = [d for d in QUALITY_DEFINITIONS if d.content_kind is ContentKind.VIDEO]


class TestWeightOrdering:
    """Weight is the only ordering used downstream."""

    @given(
        first=st.sampled_from(VIDEO_DEFINITIONS),
        second=st.sampled_from(VIDEO_DEFINITIONS),
        modifier=st.sampled_from([None, QualityModifier.PROPER, QualityModifier.REPACK]),
    )
    def test_heavier_tag_is_preferred(self, first, second, modifier):
        """Test a heavier tag is an upgrade and outranks the lighter one in a weight-ordered profile."""
        # Given
        heavier = QualityTag.from_name(first.name, modifier)
        lighter = QualityTag.from_name(second.name)
        assume(heavier.weight > lighter.weight)
        profile = QualityProfile(
            name="All",
            items=[d.name for d in sorted(VIDEO_DEFINITIONS, key=lambda d: d.weight)],
        )
        candidate = ReleaseCandidate(ParsedRelease(raw_title="x", quality=heavier))

        # When
        conflict = ConflictResolver().classify(candidate, LibraryFile("m", lighter))

        # Then
        assert conflict.kind is ConflictKind.QUALITY_UPGRADE
        assert quality_score(heavier, profile) >= quality_score(lighter, profile)
