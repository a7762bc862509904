"""Tests for the field extractors."""

from __future__ import annotations

from datetime import date

import pytest

from releasevault.core.parser.extractors import (
    extract_air_date,
    extract_audio_channels,
    extract_codec,
    extract_edition,
    extract_languages,
    extract_modifiers,
    extract_quality,
    extract_release_group,
    extract_release_hash,
    extract_resolution,
    extract_season_episode,
    extract_season_pack,
    extract_source,
)
from releasevault.core.parser.models import LanguageTag
from releasevault.core.parser.patterns import get_pattern_library
from releasevault.core.quality import QualityModifier, QualitySource, Resolution


class TestResolution:
    """Resolution extraction."""

    @pytest.mark.parametrize(
        ("title", "expected"),
        [
            ("Show.S01E01.1080p.WEB-DL", Resolution.R1080P),
            ("Show.S01E01.720i.HDTV", Resolution.R720P),
            ("Movie.2010.1920x1080.BluRay", Resolution.R1080P),
            ("Movie.2010.4K.HDR", Resolution.R2160P),
        ],
    )
    def test_resolution(self, patterns, title, expected):
        """Test explicit, dimension and alias resolutions."""
        found = extract_resolution(title, patterns)

        assert found is not None
        assert found.value is expected

    def test_no_resolution(self, patterns):
        """Test titles without a resolution token."""
        assert extract_resolution("Some.Show.S01E01", patterns) is None


class TestSourceAndQuality:
    """Source and quality tag extraction."""

    def test_streaming_service_implies_web_dl(self, patterns):
        """Test a streaming service token without an explicit source."""
        found = extract_source("Show.S01E01.NF.720p-GRP", patterns)

        assert found is not None
        assert found.value is QualitySource.WEBDL

    def test_resolution_without_source_is_tv(self, patterns):
        """Test a bare resolution resolves to HDTV or SDTV."""
        hd = extract_quality("Show.S01E01.720p-GRP", patterns)
        sd = extract_quality("Show.S01E01.480p-GRP", patterns)

        assert hd.value.name == "HDTV-720p"
        assert sd.value.name == "SDTV"

    def test_source_without_resolution_uses_default(self, patterns):
        """Test a BluRay source alone defaults to 1080p."""
        found = extract_quality("Movie.2010.BluRay.x264-GRP", patterns)

        assert found.value.name == "BluRay-1080p"

    def test_remux_beats_bluray(self, patterns):
        """Test source priority does not depend on position."""
        found = extract_quality("Movie.2010.2160p.BluRay.REMUX.HEVC-GRP", patterns)

        assert found.value.name == "Remux-2160p"

    def test_music_quality(self, patterns):
        """Test audio tiers when no video marker is present."""
        found = extract_quality("Artist-Album-2020-FLAC-GRP", patterns)

        assert found.value.name == "Audio-Lossless"

    def test_no_quality(self, patterns):
        """Test a title with no quality tokens."""
        assert extract_quality("Just.A.Title", patterns) is None


class TestModifiers:
    """Revision markers."""

    def test_repack(self, patterns):
        """Test REPACK is a repack revision."""
        found = extract_modifiers("Show.S01E01.REPACK.720p.HDTV-GRP", patterns)

        assert found.value.repack
        assert extract_quality("Show.S01E01.REPACK.720p.HDTV-GRP", patterns).value.modifier is (
            QualityModifier.REPACK
        )

    def test_real_is_case_sensitive(self, patterns):
        """Test REAL only counts in upper case."""
        assert extract_modifiers("Show.S01E01.REAL.720p.HDTV-GRP", patterns).value.real
        assert extract_modifiers("The.real.Show.S01E01.720p", patterns) is None


class TestMediaDetails:
    """Codec, audio, edition and language extraction."""

    def test_codec_alias(self, patterns):
        """Test HEVC maps to h265."""
        assert extract_codec("Movie.2010.1080p.HEVC-GRP", patterns).value == "h265"

    def test_audio_channels(self, patterns):
        """Test channel layouts glued to the codec."""
        assert extract_audio_channels("Movie.2010.AAC2.0-GRP", patterns).value == "2.0"
        assert extract_audio_channels("Movie.2010.DDP5.1.H.264-GRP", patterns).value == "5.1"

    def test_edition(self, patterns):
        """Test edition tokens map to display names."""
        found = extract_edition("Movie.2010.Directors.Cut.1080p.BluRay-GRP", patterns)

        assert found.value == "Director's Cut"

    def test_languages(self, patterns):
        """Test explicit and multi-language tokens."""
        french = extract_languages("Movie.2010.FRENCH.1080p", patterns)
        multi = extract_languages("Movie.2010.MULTi.GERMAN.1080p", patterns)

        assert french.value == frozenset({LanguageTag.FRENCH})
        assert multi.value == frozenset({LanguageTag.MULTI, LanguageTag.ENGLISH, LanguageTag.GERMAN})
        assert extract_languages("Movie.2010.1080p", patterns) is None


class TestGroupAndHash:
    """Release group and checksum extraction."""

    def test_trailing_group(self, patterns):
        """Test a trailing -GROUP token."""
        assert extract_release_group("Show.S01E01.720p.HDTV.x264-GRP", patterns).value == "GRP"

    def test_source_fragment_is_not_a_group(self, patterns):
        """Test '-DL' of WEB-DL is not taken as a group."""
        assert extract_release_group("Show.S01E01.720p.WEB-DL", patterns) is None

    def test_leading_bracket_group(self, patterns):
        """Test a fansub bracket group."""
        found = extract_release_group("[SubsPlease] Title - 01 (1080p)", patterns)

        assert found.value == "SubsPlease"

    def test_release_hash(self, patterns):
        """Test a bracketed CRC32, ignoring all-digit runs."""
        assert extract_release_hash("[Grp] Title - 01 [ABCD1234]", patterns).value == "ABCD1234"
        assert extract_release_hash("[Grp] Title - 01 [12345678]", patterns) is None


class TestEpisodeIdentity:
    """Season, episode and air date extraction."""

    def test_cross_notation(self, patterns):
        """Test 1x02."""
        found = extract_season_episode("Show.1x02.HDTV", patterns)

        assert found.value.season == 1
        assert found.value.episodes == (2,)

    def test_season_episode_words(self, patterns):
        """Test 'Season 1 Episode 2'."""
        found = extract_season_episode("Show Season 1 Episode 2 720p", patterns)

        assert found.value.season == 1
        assert found.value.episodes == (2,)

    def test_season_pack(self, patterns):
        """Test a lone season token."""
        assert extract_season_pack("Show.S03.720p.HDTV", patterns).value == 3
        assert extract_season_pack("Show.S03E01.720p.HDTV", patterns) is None

    def test_air_date(self, patterns):
        """Test valid and invalid broadcast dates."""
        assert extract_air_date("Show.2023.05.01.720p", patterns).value == date(2023, 5, 1)
        assert extract_air_date("Show.2023.02.30.720p", patterns) is None


class TestSafeExtractor:
    """Failure isolation."""

    def test_failure_is_missing_field(self):
        """Test an extractor that raises returns None instead."""
        # Given a broken pattern library
        broken = None

        # When
        found = extract_resolution("Show.S01E01.1080p", broken)

        # Then
        assert found is None

    def test_pattern_library_is_shared(self):
        """Test the library is compiled once per process."""
        assert get_pattern_library() is get_pattern_library()

    def test_default_resolution_table_is_read_only(self, patterns):
        """Test the shared source-to-resolution table cannot be changed by a caller."""
        with pytest.raises(TypeError):
            patterns.source_default_resolution[QualitySource.WEBDL] = Resolution.R2160P  # type: ignore[index]

        assert patterns.source_default_resolution[QualitySource.WEBDL] is Resolution.R720P
