"""Property-based tests for the release parser using Hypothesis."""

from __future__ import annotations

import pytest
from hypothesis import given, settings, strategies as st

from releasevault.core.normalization import clean_title
from releasevault.core.parser.models import ParsedRelease
from releasevault.core.parser.pipeline import ReleaseParser

PARSER = ReleaseParser()


@st.composite
def release_name_strategy(draw):
    """Generate plausible scene-style release names.

    Args:
        draw: Hypothesis draw function.

    Returns:
        Generated release name.
    """
    words = draw(
        st.lists(
            st.text(
                alphabet=st.characters(whitelist_categories=("Lu", "Ll", "Nd"), max_codepoint=0x17F),
                min_size=1,
                max_size=10,
            ),
            min_size=1,
            max_size=5,
        )
    )
    parts = list(words)

    if draw(st.booleans()):
        season = draw(st.integers(min_value=0, max_value=150))
        episode = draw(st.integers(min_value=0, max_value=12000))
        parts.append(f"S{season:02d}E{episode:02d}")

    if draw(st.booleans()):
        parts.append(draw(st.sampled_from(["2160p", "1080p", "720p", "480p", "4K"])))

    if draw(st.booleans()):
        parts.append(draw(st.sampled_from(["WEB-DL", "BluRay", "HDTV", "WEBRip", "DVDRip", "REMUX"])))

    name = draw(st.sampled_from([".", " ", "_"])).join(parts)
    if draw(st.booleans()):
        name += "-" + draw(st.sampled_from(["GRP", "NTb", "SPARKS", "x264"]))
    return name


class TestParserProperties:
    """Totality and range invariants."""

    @pytest.mark.slow
    @given(st.text(max_size=120))
    @settings(max_examples=200, deadline=None)
    def test_parse_is_total(self, title):
        """Test any text yields a record and never raises."""
        result = PARSER.parse(title)

        assert isinstance(result, ParsedRelease)
        assert result.raw_title == title
        assert 0 <= result.confidence <= 100

    @pytest.mark.slow
    @given(release_name_strategy())
    @settings(max_examples=200, deadline=None)
    def test_ranges_after_post_processing(self, name):
        """Test accepted values always lie within their ranges."""
        result = PARSER.parse(name)

        assert all(0 < e < 10000 for e in result.episode_numbers)
        if result.season_number is not None:
            assert 0 <= result.season_number <= 100
        if result.year is not None:
            assert result.year >= 1900
        if result.confidence == 0:
            assert not result.is_matched

    @given(
        st.text(
            alphabet=st.characters(
                whitelist_categories=("Lu", "Ll", "Nd", "Zs", "Po", "Pd"),
                max_codepoint=0x17F,
            ),
            max_size=60,
        )
    )
    def test_clean_title_is_fixed_point(self, title):
        """Test cleaning a clean title changes nothing."""
        once = clean_title(title)

        assert clean_title(once) == once

    @pytest.mark.parametrize(
        "title",
        [
            "The.Walking.Dead.S11E08.1080p.AMZN.WEB-DL.DDP5.1.H.264-NTb",
            "[SubsPlease] Demon Slayer - Kimetsu no Yaiba - 43 (1080p) [ABCD1234]",
        ],
    )
    def test_reparsing_clean_title_is_stable(self, title):
        """Test parsing the clean title again yields the same clean title."""
        first = PARSER.parse(title)
        second = PARSER.parse(first.clean_title)

        assert second.clean_title == first.clean_title
