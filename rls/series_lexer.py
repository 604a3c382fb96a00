#!/usr/bin/env python3
"""
Season/episode lexers: combined series forms, bare trailing episode numbers
and parenthesized catalog IDs.
"""

import re
from typing import List, Optional, Sequence

from .lexer import Lexer, compile_lexer_re
from .tag import Tag
from .taginfo import TagFinder
from .types import TagType

_SEP = r"[\-\_\. ]"

DEFAULT_SERIES_PATTERNS: Sequence[str] = (
    # s02, S01E01
    rf"s(?P<s>[0-8]?\d){_SEP}?(?:e(?P<e>\d{{1,5}}))?\b",
    # S01E02E03, S01E02-E03, S01E03.E04.E05
    rf"s(?P<s>[0-8]?\d)(?P<m>(?:{_SEP}?e\d{{1,5}}){{1,5}})\b",
    # S01S02S03
    r"(?P<S>(?:s[0-8]?\d){2,4})\b",
    # 2x1, 1x01
    r"(?P<s>[0-8]?\d)x(?P<e>\d{1,3})\b",
    # S01 - 02v3, S07-06, s03-5v.9
    rf"s(?P<s>[0-8]?\d){_SEP}{{1,3}}(?P<e>\d{{1,5}})(?:{_SEP}{{1,3}}(?P<v>v\d+(?:\.\d+){{0,2}}))?\b",
    # Season.01.Episode.02, Series.01.Ep.02, Series.01
    rf"(?:series|season|s){_SEP}?(?P<s>[0-8]?\d)(?:{_SEP}?(?:episode|ep)(?P<e>\d{{1,5}}))?\b",
    # Vol.1.No.2, vol1no2
    rf"vol(?:ume)?{_SEP}?(?P<s>\d{{1,3}})(?:{_SEP}?(?:number|no){_SEP}?(?P<e>\d{{1,5}}))\b",
    # Episode 15, E009, Ep. 007, Ep.05-07
    rf"e(?:p(?:isode)?{_SEP}{{1,3}})?(?P<e>\d{{1,5}})(?:{_SEP}{{1,3}}\d{{1,3}})?\b",
    # 10v1.7, 13v2
    rf"(?P<e>\d{{1,5}})(?P<v>v{_SEP}?\d+(?:\.\d){{0,2}})\b",
    # S01.Disc02, s01D3, Series.01.Disc.02, S02DVD3
    rf"(?:series|season|s){_SEP}?(?P<s>[0-8]?\d){_SEP}?(?P<d>(?:disc|disk|dvd|d){_SEP}?(?:\d{{1,3}}))\b",
    # s1957e01
    r"s(?P<s>19\d\d)e(?P<e>\d{2,4})\b",
)


def _group(m, name: str) -> str:
    return m.group(name) or ""


class SeriesLexer(Lexer):
    """
    Season/episode forms, including multi-episode and multi-season lists.

    A single match may also yield VERSION, SOURCE, DISC or DATE tokens when
    the form carries a version suffix, a disc, or a 19xx season.
    """

    mlt_re = re.compile(r"s(\d?\d)", re.IGNORECASE)
    mny_re = re.compile(r"[\-\._ ]?e(\d{1,5})", re.IGNORECASE)
    dsc_re = re.compile(r"^(?:disc|disk|dvd|d)", re.IGNORECASE)

    def __init__(self, patterns: Sequence[str] = DEFAULT_SERIES_PATTERNS):
        self.patterns = [compile_lexer_re(p) for p in patterns]
        self.sourcef: Optional[TagFinder] = None

    def initialize(self, registry):
        self.sourcef = registry.finder(TagType.SOURCE)
        return self

    def lex(self, src, buf, start, end, i, n):
        for pattern in self.patterns:
            m = buf.match(pattern, i, n)
            if not m:
                continue
            s = src[i:i + len(m.group())]
            series, episode = _group(m, "s"), _group(m, "e")
            version, disc = _group(m, "v"), _group(m, "d")
            multi_season, many_eps = _group(m, "S"), _group(m, "m")
            if not (series or episode or version or disc or multi_season or many_eps):
                continue

            tags: List[Tag] = []
            if series or episode:
                series_text = s
                if version:
                    series_text = series_text[:-len(version)]
                if disc:
                    series_text = series_text[:-len(disc)]
                if many_eps:
                    episodes = self.mny_re.findall(many_eps)
                else:
                    episodes = [episode]
                tags.append(Tag.new(TagType.SERIES, None, series_text, series, *episodes))

            if version:
                tags.append(Tag.new(TagType.VERSION, None, version, version))

            if disc:
                d = self.dsc_re.match(disc)
                if d:
                    typ = d.group().upper()
                    num = disc[len(typ):].strip()
                    if typ == "DVD":
                        tags.append(Tag.new(TagType.SOURCE, self.sourcef, disc[:len(typ)], typ))
                        tags.append(Tag.new(TagType.DISC, None, disc[len(typ):], typ, num))
                    else:
                        tags.append(Tag.new(TagType.DISC, None, disc, typ, num))

            if multi_season:
                offset = len(s) - len(multi_season)
                for sm in self.mlt_re.finditer(multi_season):
                    text = s[offset + sm.start():offset + sm.end()]
                    tags.append(Tag.new(TagType.SERIES, None, text, sm.group(1), ""))

            if len(series) == 4 and series.startswith("19"):
                tags.append(Tag.new(TagType.DATE, None, "", series, "", ""))

            if tags:
                start.extend(tags)
                return i + len(s), n, True
        return i, n, False


class EpisodeLexer(Lexer):
    """Bare episode number following a hyphen, as in 'Show - 02 [720p]'."""

    lookbehind_re = compile_lexer_re(r"-[\-\._ ]{1,3}\z")
    main_re = compile_lexer_re(r"(\d{1,4})(\b|[\._ ]?[\-\[\]\(\)\{\}])")

    def lex(self, src, buf, start, end, i, n):
        if not self.lookbehind_re.search(src[max(0, i - 4):i]):
            return i, n, False
        m = buf.match(self.main_re, i, n, source=True)
        if not m or src.startswith(",", m.end(1)):
            return i, n, False
        start.append(Tag.new(TagType.SERIES, None, m.group(1), "", m.group(1), ""))
        if m.group(2):
            start.append(Tag.new(TagType.DELIM, None, m.group(2), m.group(2)))
        return m.end(), n, True


class IdLexer(Lexer):
    """Catalog identifier inside parentheses, e.g. '(CDM-12345)'."""

    lookbehind_re = compile_lexer_re(r"\([\._ ]{0,2}\z")
    main_re = compile_lexer_re(r"([A-Z\d\-\_\. ]{2,24})\)", ignore_case=False)
    alpha_re = re.compile(r"[A-Z]")
    digit_re = re.compile(r"\d", re.ASCII)
    ws_re = re.compile(r"[\-\._ ]")

    def lex(self, src, buf, start, end, i, n):
        if not self.lookbehind_re.search(src[max(0, i - 3):i]):
            return i, n, False
        m = buf.match(self.main_re, i, n)
        if not m:
            return i, n, False
        text = m.group(1)
        a = len(self.alpha_re.findall(text))
        d = len(self.digit_re.findall(text))
        w = len(self.ws_re.findall(text))
        if (a == 0 and d > 4 and w < 4) or (a > 1 and d > 1 and a + d > 4 and w < 4):
            full = src[i:m.end()]
            start.append(Tag.new(TagType.ID, None, full, text))
            return m.end(), n, True
        return i, n, False
