#!/usr/bin/env python3
"""
Tests for the release builder passes and end-to-end parsing.
"""

import pytest

from rls import Release, ReleaseBuilder, ReleaseType, Tag, TagRegistry, TagType
from rls.builder import isolated, peek
from rlsparse import ReleaseParser


@pytest.fixture(scope="module")
def parser():
    """Fixture providing a parser over the bundled vocabulary."""
    return ReleaseParser()


@pytest.fixture(scope="module")
def builder():
    return ReleaseBuilder(TagRegistry.load())


def text(s):
    return Tag.new(TagType.TEXT, None, s, s)


def delim(s):
    return Tag.new(TagType.DELIM, None, s, s)


class TestParse:
    """End-to-end parsing of typical names."""

    def test_movie(self, parser):
        r = parser.parse("The.Matrix.1999.1080p.BluRay.x264-GROUP")
        assert r.type == ReleaseType.MOVIE
        assert r.title == "The Matrix"
        assert r.year == 1999
        assert r.resolution == "1080p"
        assert r.source == "BluRay"
        assert r.codec == ["x264"]
        assert r.group == "GROUP"
        assert r.unused == []

    def test_music(self, parser):
        r = parser.parse("Artist - Album (2005) [FLAC]")
        assert r.type == ReleaseType.MUSIC
        assert r.artist == "Artist"
        assert r.title == "Album"
        assert r.year == 2005
        assert r.audio == ["FLAC"]

    def test_episode_range(self, parser):
        r = parser.parse("Show.S01E01-E03.1080p-GRP")
        assert r.type == ReleaseType.EPISODE
        assert r.title == "Show"
        assert (r.series, r.episode) == (1, 1)
        assert r.series_episodes() == [(1, 1), (1, 2), (1, 3)]
        assert r.group == "GRP"

    def test_web_episode(self, parser):
        r = parser.parse("Show.Name.S01E02.720p.WEB-DL-GRP")
        assert r.type == ReleaseType.EPISODE
        assert r.title == "Show Name"
        assert r.source == "WEB-DL"
        assert r.resolution == "720p"
        assert r.group == "GRP"

    def test_parse_reconstructs_input(self, parser):
        name = "The.Matrix.1999.1080p.BluRay.x264-GROUP"
        assert str(parser.parse(name)) == name

    @pytest.mark.parametrize("name", [
        "",
        "...",
        "()",
        "-GRP",
        "S01",
        "[[a:b]]",
        "a\x00b\x07",
        "Tab\tName\x1f2001",
        "Movie (2001",
        "][",
        "((ab-(ab",
        "Amélie.2001.1080p.BluRay-GRP",
        "  ⭐ Name ⭐  ",
    ])
    def test_edge_names_reconstruct_input(self, parser, name):
        assert str(parser.parse(name)) == name

    @pytest.mark.parametrize("name", [
        "The.Matrix.1999.1080p.BluRay.x264-GROUP",
        "Artist - Album (2005) [FLAC]",
        "Show.Name.S01E02.720p.WEB-DL-GRP",
        "Some.Movie.2001.1080p.Extra.Words.x264-GRP",
        "Name.ABCDEF12.leftover",
    ])
    def test_unused_tags_are_leftover_text(self, parser, name):
        r = parser.parse(name)
        assert len(set(r.unused)) == len(r.unused)
        assert all(t.is_(TagType.TEXT) for t in r.unused_tags())

    def test_nothing_left_over_for_a_clean_name(self, parser):
        assert parser.parse("The.Matrix.1999.1080p.BluRay.x264-GROUP").unused_tags() == []

    def test_vocabulary_matches_whole_words_only(self, parser):
        r = parser.parse("Movie.1080pxyz.2001.x264-GRP")
        assert r.resolution == ""
        assert r.codec == ["x264"]

    def test_type_only(self, parser):
        assert parser.parse_type_only("The.Matrix.1999.1080p.BluRay.x264-GROUP") == ReleaseType.MOVIE

    def test_rejects_non_string(self, parser):
        with pytest.raises(TypeError):
            parser.parse(None)


class TestHelpers:
    """Tests for tag sequence helpers."""

    def test_peek(self):
        tags = [text("a"), delim(".")]
        assert peek(tags, 1, TagType.DELIM)
        assert not peek(tags, 2, TagType.DELIM)
        assert not peek(tags, -1, TagType.TEXT)

    def test_isolated(self):
        tags = [text("a"), delim("."), text("b"), delim("."), text("c")]
        assert isolated(tags, 2, -1)
        assert isolated(tags, 2, 1)

    def test_not_isolated(self):
        tags = [text("a"), delim("."), Tag.new(TagType.SOURCE, None, "Web", "Web"), delim("."), text("c")]
        assert not isolated(tags, 3, -1)


class TestPasses:
    """Tests for individual passes over hand-built releases."""

    def test_magazine_month_folded_into_date(self, builder):
        tags = [text("Gamer"), delim("."), text("March"), delim("."),
                Tag.new(TagType.DATE, None, "2010", "2010", "", "")]
        r = Release(type=ReleaseType.MAGAZINE, year=2010, tags=tags, dates=[4], end=5)
        builder.special_date(r)
        assert r.month == 3
        assert r.tags[2].is_(TagType.DATE)
        assert 2 in r.dates

    def test_special_date_ignores_other_types(self, builder):
        tags = [text("March"), delim("."), Tag.new(TagType.DATE, None, "2010", "2010", "", "")]
        r = Release(type=ReleaseType.MOVIE, year=2010, tags=tags, dates=[2], end=3)
        builder.special_date(r)
        assert r.month == 0

    def test_unused_checksum(self, builder):
        r = Release(tags=[text("Title"), delim("."), text("1a2b3c4d")], end=3)
        builder.unused(r, 1)
        assert r.sum == "1a2b3c4d"
        assert r.unused == []

    def test_unused_group(self, builder):
        r = Release(tags=[text("Title"), delim("."), text("extra"), delim("."), text("GRP")], end=5)
        builder.unused(r, 1)
        assert r.group == "GRP"
        assert r.unused == [2]

    def test_unused_digits_stay_unused(self, builder):
        r = Release(tags=[text("Title"), delim("."), text("1234")], end=3)
        builder.unused(r, 1)
        assert r.group == ""
        assert r.unused == [2]

    def test_recollect_resets_fields(self, builder):
        r = Release(tags=[text("Title"), delim("."), Tag.new(TagType.DATE, None, "2001", "2001", "", "")],
                    end=3, title="stale", codec=["x"])
        builder.recollect(r)
        assert r.year == 2001
        assert r.codec == []

    @pytest.mark.parametrize("version,date", [
        ("v21.08.03", (2021, 8, 3)),
        ("v2012.08.03", (2012, 8, 3)),
    ])
    def test_version_becomes_air_date(self, builder, version, date):
        tags = [text("Show"), delim("."), Tag.new(TagType.VERSION, None, version, version)]
        r = Release(type=ReleaseType.EPISODE, version=version, tags=tags, end=3)
        builder._version_date(r)
        assert r.version == ""
        assert r.tags[2].is_(TagType.DATE)
        assert r.tags[2].date() == date
