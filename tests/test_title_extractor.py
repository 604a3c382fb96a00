#!/usr/bin/env python3
"""
Tests for title joining and per-type title extraction.
"""

import pytest

from rls import Release, ReleaseType, Tag, TagType, TitleExtractor


def text(s):
    return Tag.new(TagType.TEXT, None, s, s)


def delim(s):
    return Tag.new(TagType.DELIM, None, s, s)


def seq(*parts):
    """Alternate text and delimiter tags, starting with text."""
    return [text(p) if i % 2 == 0 else delim(p) for i, p in enumerate(parts)]


@pytest.fixture
def extractor():
    return TitleExtractor()


class TestTitle:
    """Tests for joining a run of tags into a title."""

    def test_dots_become_spaces(self, extractor):
        assert extractor.title(seq("The", ".", "Matrix"), TagType.TEXT) == ("The Matrix", 3)

    def test_acronym_keeps_dots(self, extractor):
        title, _ = extractor.title(seq("S", ".", "W", ".", "A", ".", "T"), TagType.TEXT)
        assert title == "S.W.A.T."

    def test_decimal_keeps_dot(self, extractor):
        title, _ = extractor.title(seq("Version", " ", "2", ".", "0"), TagType.TEXT)
        assert title == "Version 2.0"

    def test_ellipsis_kept(self, extractor):
        title, _ = extractor.title(seq("Wait", "...", "What"), TagType.TEXT)
        assert title == "Wait...What"

    def test_html_entities_unescaped(self, extractor):
        title, _ = extractor.title(seq("Tom", ".", "&amp;", ".", "Jerry"), TagType.TEXT)
        assert title == "Tom & Jerry"

    def test_repeated_plus_becomes_space(self, extractor):
        title, _ = extractor.title(seq("A", "+", "B", "+", "C"), TagType.TEXT)
        assert title == "A B C"

    def test_stops_at_bracket(self, extractor):
        assert extractor.title(seq("Title", " (", "x"), TagType.TEXT) == ("Title", 1)

    def test_stops_at_other_type(self, extractor):
        tags = seq("Title", ".") + [Tag.new(TagType.DATE, None, "2001", "2001", "", "")]
        assert extractor.title(tags, TagType.TEXT) == ("Title", 2)


class TestDelimText:
    """Tests for delimiter conversion."""

    @pytest.mark.parametrize("d,expected", [
        ("_", " "),
        (" - ", " - "),
        ("..", ". "),
        ("...", "..."),
        (",", ","),
        ("", " "),
    ])
    def test_conversions(self, extractor, d, expected):
        assert extractor.delim_text(d, seq("a", d, "b"), 1, TagType.TEXT) == expected

    def test_dot_after_dash_is_space(self, extractor):
        tags = seq("X", "-", "A", ".", "B")
        assert extractor.delim_text(".", tags, 3, TagType.TEXT) == " "


class TestExtract:
    """Tests for per-type title routines."""

    def test_movie_aka_split(self, extractor):
        tags = seq("Foo", ".", "AKA", ".", "Bar")
        r = Release(type=ReleaseType.MOVIE, tags=tags, end=len(tags))
        assert extractor.extract(r) == 5
        assert (r.title, r.alt) == ("Foo", "Bar")

    def test_music_artist_split(self, extractor):
        tags = seq("Artist", " - ", "Album")
        r = Release(type=ReleaseType.MUSIC, tags=tags, end=len(tags))
        extractor.extract(r)
        assert (r.artist, r.title) == ("Artist", "Album")

    def test_default_title(self, extractor):
        tags = seq("Some", ".", "Thing")
        r = Release(tags=tags, end=len(tags))
        extractor.extract(r)
        assert r.title == "Some Thing"

    def test_music_bracketed_title_keeps_opening_delimiter(self, extractor):
        tags = seq("Artist", " (", "Feat", ") ", "Album", " [", "Extra")
        r = Release(type=ReleaseType.MUSIC, tags=tags, end=len(tags))
        extractor.extract(r)
        assert (r.artist, r.title, r.subtitle) == ("Artist", "(Feat) Album", "Extra")
