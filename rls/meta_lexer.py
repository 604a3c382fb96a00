#!/usr/bin/env python3
"""
Once-lexers working on both ends of the input: bracketed metadata and the
trailing release group.
"""

import re
from typing import Dict, List, Optional, Sequence, Tuple

from .exceptions import LexerConfigError
from .lexer import Lexer, Pattern, compile_lexer_re, head_window, is_delim, tail_window
from .tag import Tag
from .taginfo import TagFinder, TagRegistry, build_alternation
from .types import TagType

# (key, opening delimiter, closing delimiter, value pattern); an empty key
# means the pattern captures the key itself
MetaForm = Tuple[str, str, str, str]

DEFAULT_META_FORMS: Sequence[MetaForm] = (
    ("", "[[", "]]", r"([a-zA-Z][a-zA-Z0-9_]{0,15}):\s*([^ \t\]]{1,32})"),
    ("req", "[", "]", r"(REQ(?:UEST)?)"),
    ("req", "(", ")", r"(REQ(?:UEST)?)"),
    ("req", "{", "}", r"(REQ(?:UEST)?)"),
    ("sum", "[", "]", r"([0-9A-F]{8})"),
    ("site", "[", "]", r"([^ \t\]]{1,32})"),
    ("site", "-={", "}=-", r"([^ \t\}]{1,32})"),
    ("pass", "{{", "}}", r"([^ \t}]{1,32})"),
)

_INVALID_VALUE_RE = re.compile(r"[ \t\r\n\f+]")


class MetaLexer(Lexer):
    """
    Peels bracketed metadata off both ends of the input.

    Each key is recorded once; values that look like a short vocabulary word
    (for single-character brackets) or contain whitespace are rejected.
    Delimiters between leading metadata become DELIM tokens; trailing
    delimiters are always consumed into the tail.
    """

    once = True

    def __init__(self, forms: Sequence[MetaForm] = DEFAULT_META_FORMS):
        self.forms = tuple(forms)
        self.prefixes = []
        self.suffixes = []
        self.has_two = []
        self.registry: Optional[TagRegistry] = None
        for key, open_delim, close_delim, pattern in self.forms:
            s = rf"\s*{re.escape(open_delim)}\s*{pattern}\s*{re.escape(close_delim)}\s*"
            prefix = compile_lexer_re(s, ignore_case=False)
            if prefix.groups not in (1, 2):
                raise LexerConfigError(f"meta pattern {pattern!r} must have 1 or 2 capture groups")
            self.prefixes.append(prefix)
            self.suffixes.append(compile_lexer_re(s + r"\z", ignore_case=False))
            self.has_two.append(prefix.groups == 2)

    def initialize(self, registry):
        self.registry = registry
        return self

    def _accept(self, l: int, m, seen: Dict[str, bool]) -> Optional[Tuple[str, str]]:
        if self.has_two[l]:
            k, v = m.group(1), m.group(2)
        else:
            k, v = self.forms[l][0], m.group(1)
        is_short = len(self.forms[l][1]) == 1 and self.registry.is_short(v)
        if seen.get(k) or is_short or _INVALID_VALUE_RE.search(v):
            return None
        seen[k] = True
        return k, v

    def lex(self, src, buf, start, end, i, n):
        seen: Dict[str, bool] = {}

        # pending leading delimiters are src[d_start:i]
        d_start = i
        while i < n:
            matched = False
            for l, prefix in enumerate(self.prefixes):
                m = prefix.match(head_window(src, i, n))
                if not m:
                    continue
                kv = self._accept(l, m, seen)
                if kv is None:
                    continue
                if d_start < i:
                    start.append(Tag.new(TagType.DELIM, None, src[d_start:i], src[d_start:i]))
                start.append(Tag.new(TagType.META, None, m.group(), *kv))
                i += len(m.group())
                d_start = i
                matched = True
                break
            if matched:
                continue
            if is_delim(src[i]):
                i += 1
            else:
                break
        # leading delimiters not followed by metadata are left for the scanner
        i = d_start

        # pending trailing delimiters are src[n:d_end]
        d_end = n
        while i < n:
            matched = False
            for l, suffix in enumerate(self.suffixes):
                m = suffix.search(tail_window(src, i, n))
                if not m:
                    continue
                kv = self._accept(l, m, seen)
                if kv is None:
                    continue
                if n < d_end:
                    end.insert(0, Tag.new(TagType.DELIM, None, src[n:d_end], src[n:d_end]))
                end.insert(0, Tag.new(TagType.META, None, m.group(), *kv))
                n -= len(m.group())
                d_end = n
                matched = True
                break
            if matched:
                continue
            if is_delim(src[n - 1]):
                n -= 1
            else:
                break
        if n < d_end:
            end.insert(0, Tag.new(TagType.DELIM, None, src[n:d_end], src[n:d_end]))

        return i, n, True


class GroupLexer(Lexer):
    """
    Detects the release group at the end of the input.

    Tries, in order: a trailing '_<other>' special suffix (peeled as OTHER),
    a known group name after a separator, and finally the text after the
    rightmost hyphen following the last year.
    """

    once = True

    delim = "-"
    invalid = " _.()[]{}+"

    year_re = re.compile(r"\b(?:19|20)\d{2}\b", re.ASCII)
    group_re = re.compile(r"^[a-z0-9_ ]{2,10}$", re.IGNORECASE | re.ASCII)
    bracket_re = re.compile(r"^[\]\)\}]")

    def __init__(self):
        self.registry: Optional[TagRegistry] = None
        self.groupf: Optional[TagFinder] = None
        self.otherf: Optional[TagFinder] = None
        self.re: Optional[Pattern] = None
        self.special_re: Optional[Pattern] = None

    def initialize(self, registry):
        self.registry = registry
        self.groupf = registry.finder(TagType.GROUP)
        self.otherf = registry.finder(TagType.OTHER)
        groups = [info.pattern for info in registry.get(TagType.GROUP)]
        self.re = compile_lexer_re(r"[\-\_\. ]" + build_alternation(groups) + r"\z")
        others = [info.other for info in registry.get(TagType.OTHER) if info.other]
        if others:
            self.special_re = compile_lexer_re("_" + build_alternation(others) + r"\z")
        return self

    def lex(self, src, buf, start, end, i, n):
        if self.special_re is not None:
            m = self.special_re.search(tail_window(src, i, n))
            if m:
                end.insert(0, Tag.new(TagType.OTHER, self.otherf, m.group(), m.group(1)))
                n -= len(m.group())

        m = self.re.search(tail_window(src, i, n))
        if m:
            end.insert(0, Tag.new(TagType.GROUP, self.groupf, m.group(), m.group(1)))
            return i, n - len(m.group()), True

        l = i
        years = list(self.year_re.finditer(buf.text, i, n))
        if years:
            l = years[-1].end()

        j = buf.text.rfind(self.delim, l, n)
        if j == -1:
            return i, n, False

        s = src[j + 1:n]
        grp = s.strip(" \t_")
        has_invalid = any(c in s for c in self.invalid)
        if (
            grp
            and (not has_invalid or (len(s) <= 14 and self.group_re.match(grp)))
            and not self.registry.is_short(grp)
            and not (end and self.bracket_re.match(end[0].text()))
        ):
            end.insert(0, Tag.new(TagType.GROUP, None, s, grp))
            end.insert(0, Tag.new(TagType.DELIM, None, src[j:j + 1], self.delim))
            return i, j, True
        return i, n, False
