#!/usr/bin/env python3
"""
Audio (with optional channel layout) and genre lexers.
"""

import re
from typing import Optional

from .lexer import Lexer, Pattern, compile_lexer_re
from .tag import Tag
from .taginfo import TagFinder, build_alternation
from .types import TagType


class AudioLexer(Lexer):
    """
    Audio format optionally followed by a channel layout, as in 'DDP5.1'.

    Periods in channel tags are optional separators, so 'DD5 1' and 'DD51'
    also match. The match is split into AUDIO and CHANNELS tokens.
    """

    def __init__(self):
        self.re: Optional[Pattern] = None
        self.audiof: Optional[TagFinder] = None
        self.channelsf: Optional[TagFinder] = None

    def initialize(self, registry):
        audio = [info.pattern for info in registry.get(TagType.AUDIO)]
        channels = [re.escape(info.tag).replace(r"\.", r"[\._ ]?") for info in registry.get(TagType.CHANNELS)]
        self.re = compile_lexer_re(
            build_alternation(audio)
            + r"(?:[\-\_\. ]?" + build_alternation(channels) + r")?(?:\b|[\-\_\. ])"
        )
        self.audiof = registry.finder(TagType.AUDIO)
        self.channelsf = registry.finder(TagType.CHANNELS)
        return self

    def lex(self, src, buf, start, end, i, n):
        m = buf.match(self.re, i, n, source=True)
        if not m or not m.group():
            return i, n, False
        full, audio = m.group(), m.group(1)
        # last group is the channel layout
        last = self.re.groups
        chan = m.group(last) if last > 1 else None
        if chan:
            cs, ce = m.start(last) - i, m.end(last) - i
            start.append(Tag.new(TagType.AUDIO, self.audiof, full[:cs], audio))
            start.append(Tag.new(TagType.CHANNELS, self.channelsf, full[cs:ce], chan))
            if ce < len(full):
                start.append(Tag.new(TagType.DELIM, None, full[ce:], full[ce:]))
        else:
            ae = m.end(1) - i
            start.append(Tag.new(TagType.AUDIO, self.audiof, full[:ae], audio))
            if ae < len(full):
                start.append(Tag.new(TagType.DELIM, None, full[ae:], full[ae:]))
        return i + len(full), n, True


class GenreLexer(Lexer):
    """Parenthesized genre such as '(Documentary)', or a genre's alternate form."""

    def __init__(self):
        self.re: Optional[Pattern] = None
        self.other_re: Optional[Pattern] = None
        self.genref: Optional[TagFinder] = None

    def initialize(self, registry):
        infos = registry.get(TagType.GENRE)
        self.re = compile_lexer_re(r"\(?" + build_alternation([info.pattern for info in infos]) + r"\s*\)")
        others = [info.other for info in infos if info.other]
        if others:
            self.other_re = compile_lexer_re(build_alternation(others) + r"\b")
        self.genref = registry.finder(TagType.GENRE)
        return self

    @staticmethod
    def opened(src: str, i: int, text: str) -> bool:
        """Whether the genre text at i sits inside a '(' opened at or before i."""
        if text.startswith("("):
            return True
        j = i
        while j > 0 and src[j - 1] in " \t\n\f\r\v":
            j -= 1
        return j > 0 and src[j - 1] == "("

    def lex(self, src, buf, start, end, i, n):
        m = buf.match(self.re, i, n, source=True)
        if m and self.opened(src, i, m.group()):
            start.append(Tag.new(TagType.GENRE, self.genref, m.group(), m.group(1)))
            return m.end(), n, True

        if self.other_re is not None:
            m = buf.match(self.other_re, i, n)
            if m:
                text = src[i:m.end()]
                start.append(Tag.new(TagType.GENRE, self.genref, text, m.group(1)))
                return m.end(), n, True
        return i, n, False
