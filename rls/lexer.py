#!/usr/bin/env python3
"""
Lexer base class and the vocabulary-driven lexers.

A lexer is offered the source string, a ScanBuffer over it (holding the
working text, the source with '_', ',' and '+' replaced by spaces so word
boundaries work), the head and tail token lists and the current head/tail
cursors. It appends recognized tokens to the head (or prepends them to the
tail) in place and returns the updated cursors plus a success flag.

Once-lexers run a single time before the scan loop; the remaining lexers are
offered every scan position in chain order. Every pattern is compiled with
re2, and per-position matching runs against the ScanBuffer's encoded bytes
with a start and end offset, so no position ever copies the rest of the
input and the whole scan stays linear in its length.
"""

import re
from typing import Any, Dict, List, Optional, Tuple, Union

import re2

from .exceptions import LexerConfigError
from .tag import Tag
from .taginfo import TagFinder, TagRegistry, build_alternation
from .types import TagType

LexResult = Tuple[int, int, bool]

# compiled re2 pattern
Pattern = Any

DELIM_CHARS = "\t\n\f\r ()+,-._/\\[]{}~"
WORK_RE = re.compile(r"[_,+]")

# Longest stretch a once-lexer examines at either end of the input
EDGE_WINDOW = 128


def compile_lexer_re(pattern: str, ignore_case: bool = True) -> Pattern:
    """Compile a lexer pattern; \\d, \\s and \\b are ASCII-only under re2."""
    if ignore_case:
        pattern = "(?i)" + pattern
    try:
        return re2.compile(pattern)
    except re2.error as e:
        raise LexerConfigError(f"invalid lexer pattern {pattern!r}: {e}") from e


DELIM_RE = compile_lexer_re(r"[\t\n\f\r ()+,\-._/\\\[\]{}~]+", ignore_case=False)


def is_delim(c: str) -> bool:
    return len(c) == 1 and c in DELIM_CHARS


def head_window(src: str, i: int, n: int) -> str:
    return src[i:min(n, i + EDGE_WINDOW)]


def tail_window(src: str, i: int, n: int) -> str:
    return src[max(i, n - EDGE_WINDOW):n]


class ScanMatch:
    """A match against a ScanBuffer, reported in character positions."""

    def __init__(self, pattern: Pattern, m, text: str, chars: Optional[Dict[int, int]]):
        self.pattern = pattern
        self._m = m
        self._text = text
        self._chars = chars

    def span(self, group: Union[int, str] = 0) -> Tuple[int, int]:
        if isinstance(group, str):
            group = self.pattern.groupindex.get(group)
            if group is None:
                return -1, -1
        s, e = self._m.span(group)
        if s < 0:
            return -1, -1
        if self._chars is None:
            return s, e
        return self._chars[s], self._chars[e]

    def start(self, group: Union[int, str] = 0) -> int:
        return self.span(group)[0]

    def end(self, group: Union[int, str] = 0) -> int:
        return self.span(group)[1]

    def group(self, group: Union[int, str] = 0) -> Optional[str]:
        """Matched text of a group, or None if it did not take part or does not exist."""
        s, e = self.span(group)
        if s < 0:
            return None
        return self._text[s:e]

    def groups(self) -> Tuple[Optional[str], ...]:
        return tuple(self.group(k) for k in range(1, self.pattern.groups + 1))

    def groupdict(self) -> Dict[str, Optional[str]]:
        return {name: self.group(name) for name in self.pattern.groupindex}


class ScanBuffer:
    """
    The source and working text of one input, encoded once for matching.

    Matches are anchored at a character position and bounded by an end
    position, which behaves as the end of the input. The bytes up to an end
    position are cut once and reused while the end stays put.
    """

    def __init__(self, src: str):
        self.src = src
        self.text = WORK_RE.sub(" ", src)
        self._src_data = src.encode("utf-8", "surrogatepass")
        self._text_data = self.text.encode("utf-8", "surrogatepass")
        self._offsets: Optional[List[int]] = None
        self._chars: Optional[Dict[int, int]] = None
        self._cut: Dict[bool, Tuple[int, bytes]] = {}
        if len(self._src_data) != len(src):
            offsets = [0]
            for c in src:
                offsets.append(offsets[-1] + len(c.encode("utf-8", "surrogatepass")))
            self._offsets = offsets
            self._chars = {b: k for k, b in enumerate(offsets)}

    def __len__(self) -> int:
        return len(self.src)

    def _byte(self, k: int) -> int:
        return k if self._offsets is None else self._offsets[k]

    def _data(self, source: bool, n: int) -> bytes:
        data = self._src_data if source else self._text_data
        end = self._byte(n)
        if end == len(data):
            return data
        cut = self._cut.get(source)
        if cut is None or cut[0] != end:
            cut = (end, data[:end])
            self._cut[source] = cut
        return cut[1]

    def match(self, pattern: Pattern, i: int, n: int, source: bool = False) -> Optional[ScanMatch]:
        """
        Match pattern at position i without reading past n.

        Args:
            pattern: Compiled re2 pattern
            i: Start position
            n: End position
            source: Match the source instead of the working text

        Returns:
            ScanMatch, or None if the pattern does not match at i
        """
        m = pattern.match(self._data(source, n), self._byte(i))
        if m is None:
            return None
        return ScanMatch(pattern, m, self.src if source else self.text, self._chars)


class Lexer:
    """Base class for token recognizers."""

    once = False
    not_first = False

    def initialize(self, registry: TagRegistry) -> "Lexer":
        """Bind vocabulary-dependent state; returns self for chaining."""
        return self

    def lex(self, src: str, buf: ScanBuffer, start: List[Tag], end: List[Tag], i: int, n: int) -> LexResult:
        raise NotImplementedError

    @property
    def name(self) -> str:
        return type(self).__name__


class TrimWhitespaceLexer(Lexer):
    """Peels leading and trailing whitespace and decorative symbols."""

    once = True

    chars = "\t\n\f\r \u2b50\ufe0f"

    def lex(self, src, buf, start, end, i, n):
        j = i
        while j < n and src[j] in self.chars:
            j += 1
        if j > i:
            start.append(Tag.new(TagType.WHITESPACE, None, src[i:j], src[i:j]))
            i = j
        j = n
        while j > i and src[j - 1] in self.chars:
            j -= 1
        if j < n:
            end.append(Tag.new(TagType.WHITESPACE, None, src[j:n], src[j:n]))
            n = j
        return i, n, True


class ExtLexer(Lexer):
    """Matches a known file extension at the absolute end of the input."""

    once = True

    def __init__(self):
        self.re: Optional[Pattern] = None
        self.find: Optional[TagFinder] = None

    def initialize(self, registry):
        infos = registry.get(TagType.EXT)
        self.re = compile_lexer_re(r"\." + build_alternation([info.pattern for info in infos]) + r"\z")
        self.find = registry.finder(TagType.EXT)
        return self

    def lex(self, src, buf, start, end, i, n):
        m = self.re.search(tail_window(src, i, n))
        if m:
            end.insert(0, Tag.new(TagType.EXT, self.find, m.group(), m.group(1)))
            return i, n - len(m.group()), True
        return i, n, False


class RegexpLexer(Lexer):
    """
    Matches any vocabulary entry of one category at the current position.

    The alternation is matched against the working buffer and must end on a
    word boundary; the token keeps the source text plus every capture.
    """

    def __init__(self, typ: TagType, ignore_case: bool = True):
        self.typ = typ
        self.ignore_case = ignore_case
        self.re: Optional[Pattern] = None
        self.find: Optional[TagFinder] = None

    def initialize(self, registry):
        infos = registry.get(self.typ)
        self.re = compile_lexer_re(build_alternation([info.pattern for info in infos]) + r"\b",
                                   self.ignore_case)
        self.find = registry.finder(self.typ)
        return self

    @property
    def name(self) -> str:
        return f"{type(self).__name__}({self.typ.title})"

    def lex(self, src, buf, start, end, i, n):
        m = buf.match(self.re, i, n)
        if not m or not m.group():
            return i, n, False
        j = m.end()
        start.append(Tag.new(self.typ, self.find, src[i:j], *(g or "" for g in m.groups())))
        return j, n, True


class RegexpSourceLexer(RegexpLexer):
    """
    Like RegexpLexer, but matched against the source and allowed to swallow
    one trailing separator, which becomes its own DELIM token.
    """

    def initialize(self, registry):
        infos = registry.get(self.typ)
        self.re = compile_lexer_re(
            build_alternation([info.pattern for info in infos]) + r"(?:\b|[\-\_\. ])",
            self.ignore_case,
        )
        self.find = registry.finder(self.typ)
        return self

    def lex(self, src, buf, start, end, i, n):
        m = buf.match(self.re, i, n, source=True)
        if not m or not m.group():
            return i, n, False
        full, main = m.group(), m.group(1)
        if len(full) != len(main):
            start.append(Tag.new(self.typ, self.find, main, main))
            start.append(Tag.new(TagType.DELIM, None, full[len(main):], full[len(main):]))
        else:
            start.append(Tag.new(self.typ, self.find, full, *(g or "" for g in m.groups())))
        return i + len(full), n, True
