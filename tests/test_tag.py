#!/usr/bin/env python3
"""
Tests for Tag values, reclassification and formatting.
"""

import pytest

from rls import Tag, TagRegistry, TagType


@pytest.fixture(scope="module")
def registry():
    """Fixture providing the bundled vocabulary."""
    return TagRegistry.load()


class TestTagConstruction:
    """Tests for creating and reclassifying tags."""

    def test_new_requires_source_and_value(self):
        with pytest.raises(ValueError):
            Tag.new(TagType.TEXT, None, "only")

    def test_none_values_become_empty(self):
        tag = Tag.new(TagType.DATE, None, "2020", "2020", None, None)
        assert tag.v == ("2020", "2020", "", "")

    def test_retype_remembers_previous_classification(self):
        tag = Tag.new(TagType.SOURCE, None, "Web", "Web")
        text = tag.retype(TagType.TEXT)
        assert text.is_(TagType.TEXT)
        assert text.was(TagType.SOURCE)
        assert text.revert().is_(TagType.SOURCE)

    def test_tags_are_immutable(self):
        tag = Tag.new(TagType.TEXT, None, "a", "a")
        with pytest.raises(Exception):
            tag.typ = TagType.DELIM

    def test_str_is_source_text(self):
        assert str(Tag.new(TagType.DELIM, None, " - ", " - ")) == " - "


class TestTagValues:
    """Tests for per-type accessors and normalization."""

    def test_date(self):
        tag = Tag.new(TagType.DATE, None, "2020.01.02", "2020", "01", "02")
        assert tag.date() == (2020, 1, 2)
        assert tag.normalize() == "2020-01-02"

    def test_year_only_date(self):
        tag = Tag.new(TagType.DATE, None, "1999", "1999", "", "")
        assert tag.normalize() == "1999"

    def test_series(self):
        tag = Tag.new(TagType.SERIES, None, "S01E02", "01", "02")
        assert tag.series() == (1, 2)
        assert tag.episodes() == [2]
        assert tag.normalize() == "S01E02"

    def test_season_only(self):
        assert Tag.new(TagType.SERIES, None, "S03", "03", "").normalize() == "S03"

    def test_single_episode(self):
        assert Tag.new(TagType.SERIES, None, "07", "", "07").single_ep()
        assert not Tag.new(TagType.SERIES, None, "S01E07", "01", "07").single_ep()

    @pytest.mark.parametrize("kind,num,expected", [
        ("CD", "2", "CD2"),
        ("DVD", "09", "DVD9"),
        ("S", "3", "3DiSCS"),
        ("X", "2", "2x"),
        ("D", "1", "D01"),
    ])
    def test_disc(self, kind, num, expected):
        assert Tag.new(TagType.DISC, None, "x", kind, num).normalize() == expected

    def test_channels(self):
        assert Tag.new(TagType.CHANNELS, None, "5.1", "5.1").normalize() == "5.1"
        assert Tag.new(TagType.CHANNELS, None, "7 1", "7 1").normalize() == "7.1"

    def test_lookup_uses_canonical_tag(self, registry):
        tag = Tag.new(TagType.RESOLUTION, registry.finder(TagType.RESOLUTION), "1920x1080", "1920x1080")
        assert tag.normalize() == "1080p"
        assert tag.info_title() == "FullHD (1080p)"

    def test_unknown_lookup_keeps_value(self, registry):
        tag = Tag.new(TagType.CODEC, registry.finder(TagType.CODEC), "zz9", "zz9")
        assert tag.normalize() == "zz9"
        assert tag.info() is None

    def test_placeholder_filled_from_captures(self, registry):
        finder = registry.finder(TagType.EDITION)
        tag = Tag.new(TagType.EDITION, finder, "25th.Anniversary", "25th.Anniversary", "25th")
        assert tag.normalize() == "25th.Anniversary.Edition"

    def test_ext_is_lower_cased(self):
        assert Tag.new(TagType.EXT, None, ".MKV", "MKV").normalize() == "mkv"

    def test_text_of_demoted_date_is_source_text(self):
        tag = Tag.new(TagType.DATE, None, "2012", "2012", "", "").retype(TagType.TEXT)
        assert tag.text() == "2012"

    def test_text_replace(self):
        tag = Tag.new(TagType.TEXT, None, "Mr.Robot", "Mr.Robot")
        assert tag.text_replace(".", " ") == "Mr Robot"

    @pytest.mark.parametrize("key,value,expected", [
        ("site", "example", "[example]"),
        ("sum", "DEADBEEF", "[DEADBEEF]"),
        ("pass", "secret", "{{secret}}"),
        ("req", "REQ", "[REQ]"),
        ("lang", "en", "[[lang:en]]"),
    ])
    def test_meta(self, key, value, expected):
        assert Tag.new(TagType.META, None, "x", key, value).normalize() == expected


class TestTagFormat:
    """Tests for formatting verbs and matching."""

    @pytest.fixture
    def tag(self):
        return Tag.new(TagType.DATE, None, "2020.01.02", "2020", "01", "02")

    def test_verbs(self, tag):
        assert tag.format("o") == "2020.01.02"
        assert tag.format("s") == "2020-01-02"
        assert tag.format("r") == "2020-01-02"
        assert tag.format("e") == "<Date:2020-01-02>"
        assert tag.format("v") == 'Date:["2020", "01", "02"]'
        assert tag.format("q") == '["2020.01.02", "2020", "01", "02"]'
        assert tag.format("?") == ""

    def test_match(self, tag):
        assert tag.match("2020-01-02")
        assert tag.match("")
        assert not tag.match("2020-01-03")
        assert tag.match("^2020", "r")
        assert not tag.match("2020-01-02", "s", TagType.TEXT)

    def test_match_canonicalizes_with_registry(self, registry):
        tag = Tag.new(TagType.SOURCE, registry.finder(TagType.SOURCE), "WEB-DL", "WEB-DL")
        assert tag.match("webdl")
