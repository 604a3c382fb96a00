#!/usr/bin/env python3
"""
Tests for the individual lexers, each driven directly against a name.
"""

import pytest

from rls import LexerConfigError, TagRegistry, TagType
from rls.audio_lexer import AudioLexer, GenreLexer
from rls.date_lexer import DateLexer, VersionLexer, month_number
from rls.disc_lexer import DiscLexer, DiscSourceYearLexer
from rls.lexer import (
    ExtLexer, RegexpLexer, RegexpSourceLexer, ScanBuffer, TrimWhitespaceLexer, compile_lexer_re, is_delim,
)
from rls.meta_lexer import GroupLexer, MetaLexer
from rls.series_lexer import EpisodeLexer, IdLexer, SeriesLexer


@pytest.fixture(scope="module")
def registry():
    """Fixture providing the bundled vocabulary."""
    return TagRegistry.load()


def run(lexer, src, i=0, n=None):
    """Run one lexer over src; returns (head, tail, i, n, ok)."""
    buf = ScanBuffer(src)
    start, end = [], []
    i, n, ok = lexer.lex(src, buf, start, end, i, len(src) if n is None else n)
    return start, end, i, n, ok


def summary(tags):
    return [(t.typ, t.v[0]) for t in tags]


class TestDelimiters:
    """Tests for delimiter classification."""

    @pytest.mark.parametrize("c", list(" \t()[]{}+,-._/\\~"))
    def test_is_delim(self, c):
        assert is_delim(c)

    @pytest.mark.parametrize("c", ["a", "1", "'", "!", "", ".."])
    def test_is_not_delim(self, c):
        assert not is_delim(c)


class TestScanBuffer:
    """Tests for position-bounded matching over the encoded input."""

    def test_positions_are_characters(self):
        buf = ScanBuffer("Amélie.1080p")
        m = buf.match(compile_lexer_re(r"(\d+)p\b"), 7, len(buf))
        assert m.span() == (7, 12)
        assert m.group(1) == "1080"

    def test_end_position_is_end_of_input(self):
        buf = ScanBuffer("x264_iNT")
        pattern = compile_lexer_re(r"x264\b")
        assert buf.match(pattern, 0, 4, source=True).group() == "x264"
        assert buf.match(pattern, 0, len(buf), source=True) is None

    def test_working_text_blanks_separators(self):
        buf = ScanBuffer("a_b,c")
        assert buf.text == "a b c"
        assert buf.match(compile_lexer_re(r"b\b"), 2, len(buf)).group() == "b"

    def test_missing_groups_are_none(self):
        m = ScanBuffer("S01").match(compile_lexer_re(r"s(?P<s>\d+)(?:e(?P<e>\d+))?"), 0, 3)
        assert m.group("s") == "01"
        assert m.group("e") is None
        assert m.group("nope") is None
        assert m.groupdict() == {"e": None, "s": "01"}

    def test_unsupported_pattern(self):
        with pytest.raises(LexerConfigError):
            compile_lexer_re(r"(?<=a)b")


class TestTrimWhitespaceLexer:
    """Tests for leading/trailing whitespace peeling."""

    def test_trims_both_ends(self):
        start, end, i, n, ok = run(TrimWhitespaceLexer(), "  Name \t")
        assert ok
        assert summary(start) == [(TagType.WHITESPACE, "  ")]
        assert summary(end) == [(TagType.WHITESPACE, " \t")]
        assert (i, n) == (2, 6)

    def test_trims_decorative_star(self):
        start, end, i, n, ok = run(TrimWhitespaceLexer(), "⭐ Name")
        assert summary(start) == [(TagType.WHITESPACE, "⭐ ")]
        assert end == []

    def test_no_whitespace(self):
        start, end, i, n, ok = run(TrimWhitespaceLexer(), "Name")
        assert (start, end, i, n) == ([], [], 0, 4)


class TestExtLexer:
    """Tests for file extension detection."""

    def test_extension_at_end(self, registry):
        start, end, i, n, ok = run(ExtLexer().initialize(registry), "Movie.2010.mkv")
        assert ok
        assert summary(end) == [(TagType.EXT, ".mkv")]
        assert end[0].ext() == "mkv"
        assert n == len("Movie.2010")

    def test_no_extension(self, registry):
        start, end, i, n, ok = run(ExtLexer().initialize(registry), "Movie.2010")
        assert not ok
        assert end == []


class TestMetaLexer:
    """Tests for bracketed metadata at both ends."""

    @pytest.fixture
    def lexer(self, registry):
        return MetaLexer().initialize(registry)

    def test_request_and_checksum(self, lexer):
        src = "[REQ] Movie.2010 [ABCDEF12]"
        start, end, i, n, ok = run(lexer, src)
        assert ok
        assert [t.meta() for t in start] == [("req", "REQ")]
        assert [t.meta() for t in end] == [("sum", "ABCDEF12")]
        assert src[i:n] == "Movie.2010"

    def test_key_value(self, lexer):
        start, end, i, n, ok = run(lexer, "[[lang:en]]Movie")
        assert [t.meta() for t in start] == [("lang", "en")]
        assert i == len("[[lang:en]]")

    def test_password(self, lexer):
        start, end, i, n, ok = run(lexer, "Movie{{s3cret}}")
        assert [t.meta() for t in end] == [("pass", "s3cret")]
        assert n == len("Movie")

    def test_site_in_dashes(self, lexer):
        start, end, i, n, ok = run(lexer, "-={example}=-Movie")
        assert [t.meta() for t in start] == [("site", "example")]

    def test_short_vocabulary_word_is_not_a_site(self, lexer):
        start, end, i, n, ok = run(lexer, "[WEB]Movie")
        assert start == []
        assert i == 0

    def test_each_key_recorded_once(self, lexer):
        start, end, i, n, ok = run(lexer, "[example] [other] Movie")
        assert [t.meta() for t in start] == [("site", "example")]
        assert i == len("[example] ")

    def test_trailing_delimiters_go_to_tail(self, lexer):
        start, end, i, n, ok = run(lexer, "Movie (2005) [FLAC]")
        assert summary(end) == [(TagType.DELIM, "]")]
        assert n == len("Movie (2005) [FLAC")

    def test_long_delimiter_runs(self, lexer):
        src = "(" * 3000 + "Name" + "." * 3000 + "[REQ]"
        start, end, i, n, ok = run(lexer, src)
        assert start == []
        assert summary(end) == [(TagType.DELIM, "." * 3000), (TagType.META, "[REQ]")]
        assert (i, n) == (0, 3004)

    def test_form_needs_one_or_two_groups(self):
        with pytest.raises(LexerConfigError):
            MetaLexer([("x", "[", "]", "abc")])


class TestGroupLexer:
    """Tests for trailing release group detection."""

    @pytest.fixture
    def lexer(self, registry):
        return GroupLexer().initialize(registry)

    def test_group_after_last_hyphen(self, lexer):
        src = "The.Matrix.1999.1080p.BluRay.x264-GROUP"
        start, end, i, n, ok = run(lexer, src)
        assert ok
        assert summary(end) == [(TagType.DELIM, "-"), (TagType.GROUP, "GROUP")]
        assert end[1].group() == "GROUP"
        assert src[:n] == "The.Matrix.1999.1080p.BluRay.x264"

    def test_known_group_with_hyphen(self, lexer):
        start, end, i, n, ok = run(lexer, "Movie.2010.1080p.BluRay.x264-D-Z0N3")
        assert ok
        assert end[0].group() == "D-Z0N3"

    def test_short_vocabulary_word_is_not_a_group(self, lexer):
        start, end, i, n, ok = run(lexer, "Name-WEB")
        assert not ok
        assert end == []

    def test_hyphen_before_last_year_is_ignored(self, lexer):
        start, end, i, n, ok = run(lexer, "Spider-Man.2002.Movie")
        assert not ok

    def test_long_text_with_separators_is_rejected(self, lexer):
        start, end, i, n, ok = run(lexer, "Name-Some.Long.Words")
        assert not ok


class TestSeriesLexer:
    """Tests for season/episode forms."""

    @pytest.fixture
    def lexer(self, registry):
        return SeriesLexer().initialize(registry)

    def test_season_episode(self, lexer):
        start, end, i, n, ok = run(lexer, "S01E02.720p")
        assert summary(start) == [(TagType.SERIES, "S01E02")]
        assert start[0].series() == (1, 2)
        assert i == 6

    def test_multiple_episodes(self, lexer):
        start, end, i, n, ok = run(lexer, "S01E02E03.720p")
        assert len(start) == 1
        assert start[0].episodes() == [2, 3]

    def test_multiple_seasons(self, lexer):
        start, end, i, n, ok = run(lexer, "S01S02.720p")
        assert [t.normalize() for t in start] == ["S01", "S02"]
        assert "".join(t.v[0] for t in start) == "S01S02"

    def test_cross_form(self, lexer):
        start, end, i, n, ok = run(lexer, "1x05.HDTV")
        assert start[0].normalize() == "S01E05"

    def test_dvd_disc(self, lexer):
        start, end, i, n, ok = run(lexer, "S02DVD3.Extras")
        assert summary(start) == [(TagType.SERIES, "S02"), (TagType.SOURCE, "DVD"), (TagType.DISC, "3")]
        assert start[2].normalize() == "DVD3"
        assert i == len("S02DVD3")

    def test_plain_word(self, lexer):
        start, end, i, n, ok = run(lexer, "Show.S01E02")
        assert not ok


class TestEpisodeLexer:
    """Tests for bare trailing episode numbers."""

    def test_after_hyphen(self):
        src = "Show - 02 [720p]"
        start, end, i, n, ok = run(EpisodeLexer(), src, i=7)
        assert ok
        assert summary(start) == [(TagType.SERIES, "02")]
        assert start[0].single_ep()
        assert i == 9

    def test_needs_hyphen_before(self):
        start, end, i, n, ok = run(EpisodeLexer(), "Show 02", i=5)
        assert not ok


class TestIdLexer:
    """Tests for parenthesized catalog identifiers."""

    def test_catalog_number(self):
        src = "Album (CDM-12345) 2005"
        start, end, i, n, ok = run(IdLexer(), src, i=7)
        assert ok
        assert summary(start) == [(TagType.ID, "CDM-12345)")]
        assert start[0].v[1] == "CDM-12345"
        assert i == len("Album (CDM-12345)")

    def test_word_is_not_an_id(self):
        start, end, i, n, ok = run(IdLexer(), "Album (LIVE) 2005", i=7)
        assert not ok


class TestDateLexer:
    """Tests for date grammars and calendar validation."""

    @pytest.mark.parametrize("src,expected,text", [
        ("2020.01.02.Show", (2020, 1, 2), "2020.01.02"),
        ("1999.Movie", (1999, 0, 0), "1999"),
        ("13.02.2006.Show", (2006, 2, 13), "13.02.2006"),
        ("02.13.2006.Show", (2006, 2, 13), "02.13.2006"),
        ("2 Jan 2006 Show", (2006, 1, 2), "2 Jan 2006"),
        ("Nov.1999.Issue", (1999, 11, 0), "Nov.1999"),
        ("01-August-1998", (1998, 8, 1), "01-August-1998"),
        ("17.12.15.Show", (2017, 12, 15), "17.12.15"),
    ])
    def test_dates(self, src, expected, text):
        start, end, i, n, ok = run(DateLexer(), src)
        assert ok
        assert start[0].date() == expected
        assert start[0].v[0] == text

    def test_impossible_date_falls_through(self):
        start, end, i, n, ok = run(DateLexer(), "2020.02.30.Show")
        assert start[0].date() == (2020, 2, 0)
        assert start[0].v[0] == "2020.02"

    def test_not_a_date(self):
        start, end, i, n, ok = run(DateLexer(), "1080p")
        assert not ok

    @pytest.mark.parametrize("name,number", [
        ("January", 1), ("jan", 1), ("Sept", 9), ("DECEMBER", 12), ("Smarch", 0),
    ])
    def test_month_number(self, name, number):
        assert month_number(name) == number


class TestVersionLexer:
    """Tests for version number forms."""

    @pytest.mark.parametrize("src,version", [
        ("v1.17.Multi", "v1.17"),
        ("Version 2004 x64", "2004"),
        ("11.09.1.x64", "v11.09.1"),
        ("v20120803-GRP", "v20120803"),
    ])
    def test_versions(self, src, version):
        start, end, i, n, ok = run(VersionLexer(), src)
        assert ok
        assert start[0].version() == version

    def test_never_first(self):
        assert VersionLexer.not_first


class TestAudioLexer:
    """Tests for audio with optional channel layout."""

    def test_audio_with_channels(self, registry):
        start, end, i, n, ok = run(AudioLexer().initialize(registry), "DDP5.1.x264")
        assert [t.typ for t in start] == [TagType.AUDIO, TagType.CHANNELS]
        assert start[0].normalize() == "DDP"
        assert start[1].normalize() == "5.1"
        assert i == len("DDP5.1")

    def test_audio_alone(self, registry):
        start, end, i, n, ok = run(AudioLexer().initialize(registry), "FLAC")
        assert summary(start) == [(TagType.AUDIO, "FLAC")]


class TestRegexpLexers:
    """Tests for the vocabulary-driven lexers."""

    def test_resolution(self, registry):
        start, end, i, n, ok = run(RegexpLexer(TagType.RESOLUTION).initialize(registry), "1080p.BluRay")
        assert summary(start) == [(TagType.RESOLUTION, "1080p")]
        assert start[0].normalize() == "1080p"

    def test_requires_word_boundary(self, registry):
        start, end, i, n, ok = run(RegexpLexer(TagType.RESOLUTION).initialize(registry), "1080pxyz")
        assert not ok

    def test_source_lexer(self, registry):
        start, end, i, n, ok = run(RegexpSourceLexer(TagType.CODEC).initialize(registry), "x264.mkv")
        assert start[0].normalize() == "x264"
        assert i == 4

    def test_name_includes_type(self, registry):
        assert RegexpLexer(TagType.CODEC).name == "RegexpLexer(Codec)"


class TestDiscLexers:
    """Tests for disc numbers and disc/source/year combinations."""

    @pytest.fixture
    def lexer(self, registry):
        return DiscLexer().initialize(registry)

    def test_cd_number(self, lexer):
        start, end, i, n, ok = run(lexer, "CD2.Extras")
        assert summary(start) == [(TagType.SOURCE, "CD"), (TagType.DISC, "2")]
        assert start[1].normalize() == "CD2"
        assert i == 3

    def test_disc_prefix(self, lexer):
        start, end, i, n, ok = run(lexer, "D01.Movie")
        assert summary(start) == [(TagType.DISC, "D01")]
        assert start[0].normalize() == "D01"

    def test_multiplier(self, lexer):
        start, end, i, n, ok = run(lexer, "2xDVD.Movie")
        assert summary(start) == [(TagType.DISC, "2x"), (TagType.SOURCE, "DVD")]
        assert start[0].normalize() == "2x"

    def test_disc_source_year(self, registry):
        start, end, i, n, ok = run(DiscSourceYearLexer().initialize(registry), "2DVD1999.Movie")
        assert summary(start) == [(TagType.DISC, "2"), (TagType.SOURCE, "DVD"), (TagType.DATE, "1999")]
        assert start[2].date() == (1999, 0, 0)
        assert i == len("2DVD1999")


class TestGenreLexer:
    """Tests for parenthesized genres."""

    def test_parenthesized(self, registry):
        src = "Movie (Documentary) 2001"
        start, end, i, n, ok = run(GenreLexer().initialize(registry), src, i=7)
        assert ok
        assert start[0].genre() == "Documentary"
        assert i == len("Movie (Documentary)")

    def test_bare_word_is_not_a_genre(self, registry):
        start, end, i, n, ok = run(GenreLexer().initialize(registry), "Drama.2001", i=0)
        assert not ok

    def test_space_inside_parenthesis(self, registry):
        src = "Movie ( Documentary) 2001"
        start, end, i, n, ok = run(GenreLexer().initialize(registry), src, i=8)
        assert ok
        assert start[0].genre() == "Documentary"
        assert i == len("Movie ( Documentary)")
