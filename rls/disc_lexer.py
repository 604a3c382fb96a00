#!/usr/bin/env python3
"""
Disc lexers: disc numbers, multi-disc counts and disc/source/year combos.
"""

import re
from typing import List, Optional, Sequence

from .lexer import Lexer, compile_lexer_re
from .tag import Tag
from .taginfo import TagFinder
from .types import TagType

DEFAULT_DISC_SOURCE_YEAR_PATTERNS: Sequence[str] = (
    # VLS2004, 2DVD1999, 4CD2003
    r"(?P<d>[2-9])?(?P<s>cd|ep|lp|dvd|vls|vinyl)(?P<y>(?:19|20)\d\d)\b",
    # WEB2007
    r"(?P<s>web)(?P<y>20\d\d)\b",
)

DEFAULT_DISC_PATTERNS: Sequence[str] = (
    # D01, Disc.1
    r"(?P<t>d)(?:is[ck][\-\_\. ])?(?P<c>\d{1,3})\b",
    # 12DiSCS
    r"(?P<c>\d{1,3})[\-\_\. ]?di(?P<t>s)[ck]s?\b",
    # CD1, CD30
    r"(?P<t>cd)[\-\_\. ]?(?P<c>\d{1,2})\b",
    # DVD2, DVD24; not DVD5/DVD9
    r"(?P<t>dvd)[\-\_\. ]?(?P<c>[1-46-8]|[12]\d)\b",
    # 2xDVD9
    r"(?P<c>\d{1,2})(?P<t>x(?:dvd9))\b",
    # 2DVD9, 6DVD9
    r"(?P<c>[2-9])(?P<z>dvd9)\b",
    # 2xVinyl, 3xDVD, 4xCD
    r"(?P<c>\d{1,2})(?P<t>x(?:cd|ep|lp|dvda|dvd|vls|vinyl)s?)\b",
    # 2Vinyl, 6DVD
    r"(?P<c>\d{1,2})(?P<x>(?:cd|ep|lp|dvda|dvd|vls|vinyl)s?)\b",
    # CDS3
    r"(?:(?P<x>cd)s)(?P<c>\d{1,2})\b",
    # 2CDS
    r"(?P<c>[2-9])(?P<x>cds)\b",
)


class DiscSourceYearLexer(Lexer):
    """Combined forms such as '2DVD1999' (2 discs, DVD, 1999)."""

    def __init__(self, patterns: Sequence[str] = DEFAULT_DISC_SOURCE_YEAR_PATTERNS):
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
            tags: List[Tag] = []
            # each token keeps its own slice of the source
            pos = i
            for name, typ in (("d", TagType.DISC), ("s", TagType.SOURCE), ("y", TagType.DATE)):
                val = m.group(name)
                if not val:
                    continue
                text = src[pos:pos + len(val)]
                pos += len(val)
                if typ == TagType.DISC:
                    tags.append(Tag.new(TagType.DISC, None, text, "X", val))
                elif typ == TagType.SOURCE:
                    tags.append(Tag.new(TagType.SOURCE, self.sourcef, text, val))
                else:
                    tags.append(Tag.new(TagType.DATE, None, text, val, "", ""))
            if tags:
                start.extend(tags)
                return i + len(m.group()), n, True
        return i, n, False


class DiscLexer(Lexer):
    """
    Disc numbers with or without a source word.

    A count directly followed by a source word ('2CD', '3xDVD') is read as a
    multiplier: DISC for the count plus SOURCE (or SIZE for DVD9) for the rest.
    """

    prefix_re = re.compile(r"^(?:dvd|cd|d|s|x)", re.IGNORECASE)

    def __init__(self, patterns: Sequence[str] = DEFAULT_DISC_PATTERNS):
        self.patterns = [compile_lexer_re(p) for p in patterns]
        self.sourcef: Optional[TagFinder] = None
        self.sizef: Optional[TagFinder] = None

    def initialize(self, registry):
        self.sourcef = registry.finder(TagType.SOURCE)
        self.sizef = registry.finder(TagType.SIZE)
        return self

    def _tags(self, s: str, c: str, m) -> List[Tag]:
        count = s[:len(c) + 1]
        rest = s[len(c) + 1:]

        z = m.group("z")
        if z:
            return [
                Tag.new(TagType.DISC, None, count, "X", c),
                Tag.new(TagType.SIZE, self.sizef, rest, z.upper()),
            ]

        t = m.group("t")
        if t:
            p = self.prefix_re.match(t.upper())
            final = p.group().upper() if p else ""
            if final in ("D", "S"):
                return [Tag.new(TagType.DISC, None, s, final, c)]
            if final in ("DVDA", "DVD", "CD"):
                return [
                    Tag.new(TagType.SOURCE, self.sourcef, s[:len(final)], final),
                    Tag.new(TagType.DISC, None, s[len(final):], final, c),
                ]
            if final == "X":
                if rest.upper() == "DVD9":
                    return [
                        Tag.new(TagType.DISC, None, count, "X", c),
                        Tag.new(TagType.SIZE, self.sizef, rest, rest.upper()),
                    ]
                return [
                    Tag.new(TagType.DISC, None, count, "X", c),
                    Tag.new(TagType.SOURCE, self.sourcef, rest, rest),
                ]
            return []

        x = m.group("x")
        if x:
            # CDS3 keeps the source word in front of the count
            if s.upper().startswith(x.upper()):
                return [
                    Tag.new(TagType.SOURCE, self.sourcef, s[:len(x) + 1], x.upper()),
                    Tag.new(TagType.DISC, None, s[len(x) + 1:], "X", c),
                ]
            return [
                Tag.new(TagType.DISC, None, s[:len(c)], "X", c),
                Tag.new(TagType.SOURCE, self.sourcef, s[len(c):], x.upper()),
            ]
        return []

    def lex(self, src, buf, start, end, i, n):
        for pattern in self.patterns:
            m = buf.match(pattern, i, n)
            if not m:
                continue
            c = m.group("c")
            if c is None:
                continue
            s = src[i:i + len(m.group())]
            tags = self._tags(s, c, m)
            if tags:
                start.extend(tags)
                return i + len(s), n, True
        return i, n, False
