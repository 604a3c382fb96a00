#!/usr/bin/env python3
"""
Tokenizer module driving the lexer chain across a release name.

The head list grows from the front of the input and the tail list from its
end; the once-lexers may shrink the scan window from both sides before the
main loop classifies everything in between.
"""

import json
import logging
from dataclasses import dataclass
from typing import List, Tuple

from .lexer import DELIM_RE, WORK_RE, ScanBuffer, is_delim
from .parser_config import ParserConfig
from .tag import Tag
from .types import TagType

logger = logging.getLogger(__name__)


@dataclass
class TokenizationResult:
    """Result of tokenizing a release name."""
    original: str
    tags: List[Tag]
    pivot: int  # index of the first tail token

    def text(self) -> str:
        """Concatenated source text of every token; equals the input."""
        return "".join(t.v[0] for t in self.tags)

    def to_json(self) -> str:
        """Convert result to JSON format."""
        return json.dumps({
            "original": self.original,
            "pivot": self.pivot,
            "tags": [t.format("e") for t in self.tags],
        }, ensure_ascii=False)


class Tokenizer:
    """Splits a release name into typed tags using a parser configuration."""

    ellipsis = "..."
    work_re = WORK_RE

    def __init__(self, config: ParserConfig):
        self.config = config

    def tokenize(self, src: str) -> TokenizationResult:
        """
        Tokenize a release name.

        Args:
            src: Release name

        Returns:
            TokenizationResult with head and tail tags joined at the pivot
        """
        buf = ScanBuffer(src)
        i, n = 0, len(src)
        start: List[Tag] = []
        end: List[Tag] = []

        for lexer in self.config.once_lexers:
            i, n, _ = lexer.lex(src, buf, start, end, i, n)

        not_first = False
        while i < n:
            i, n, not_first = self._next(src, buf, start, end, i, n, not_first)

        result = TokenizationResult(src, start + end, len(start))
        logger.debug("Tokenized %r into %s tags", src, len(result.tags))
        return result

    def _next(self, src: str, buf: ScanBuffer, start: List[Tag], end: List[Tag],
              i: int, n: int, not_first: bool) -> Tuple[int, int, bool]:
        """Read the next token(s) at position i."""
        if src.startswith(self.ellipsis, i, n):
            start.append(Tag.new(TagType.DELIM, None, self.ellipsis, self.ellipsis))
            return i + len(self.ellipsis), n, not_first

        m = buf.match(DELIM_RE, i, n, source=True)
        if m:
            start.append(Tag.new(TagType.DELIM, None, m.group(), m.group()))
            return m.end(), n, not_first

        count = len(start)
        for lexer in self.config.multi_lexers:
            if lexer.not_first and not not_first:
                continue
            new_i, new_n, ok = lexer.lex(src, buf, start, end, i, n)
            if ok:
                return new_i, new_n, not_first or len(start) != count

        # free text up to the next delimiter
        j = i
        while j < n and not is_delim(src[j]):
            j += 1
        start.append(Tag.new(TagType.TEXT, None, src[i:j], src[i:j]))
        return j, n, True
