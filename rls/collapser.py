#!/usr/bin/env python3
"""
Character-filter transforms used to canonicalize strings before comparison.

A Collapser decomposes its input, drops combining marks, collapses runs of
"space" characters, deletes "remove" characters, applies an optional
contextual transformer, optionally lowercases and recomposes the result.
"""

import unicodedata
from typing import Callable, Optional

# Returned by a transformer to drop the current character
DROP = None

Transformer = Callable[[str, str, str], Optional[str]]


class Collapser:
    """Configurable whitespace-collapsing, character-removing transform."""

    spc = " "

    def __init__(self, lower: bool, trim: bool, remove: str, space: str,
                 transformer: Optional[Transformer] = None):
        self.lower = lower
        self.trim = trim
        self.remove = frozenset(remove)
        self.space = frozenset(space)
        self.transformer = transformer

    def transform(self, text: str) -> str:
        text = unicodedata.normalize("NFD", text)
        if not text:
            return ""

        start = 0
        if self.trim:
            while start < len(text) and (text[start] in self.space or text[start] in self.remove):
                start += 1
            if start == len(text):
                return ""

        out = []
        prev = ""
        for i in range(start, len(text)):
            r = text[i]
            if unicodedata.category(r).startswith("M"):
                continue
            if r in self.space:
                if prev == self.spc:
                    continue
                r = self.spc
            elif r in self.remove:
                continue

            if self.transformer is not None:
                nxt = text[i + 1] if i + 1 < len(text) else "\0"
                r = self.transformer(r, prev, nxt)
                if r is DROP:
                    continue

            if self.lower:
                r = r.lower()
            out.append(r)
            prev = r

        s = "".join(out)
        if self.trim:
            s = s.rstrip()
        return unicodedata.normalize("NFC", s)

    __call__ = transform


def _is_ascii_letter(c: str) -> bool:
    return len(c) == 1 and ("a" <= c <= "z" or "A" <= c <= "Z")


def normalizer_transformer(r: str, prev: str, nxt: str) -> Optional[str]:
    """Drop a hyphen after whitespace and spell currency symbols next to letters."""
    if r == "-" and prev.isspace():
        return DROP
    if r == "$" and (_is_ascii_letter(prev) or _is_ascii_letter(nxt)):
        return "S"
    if r == "£" and (_is_ascii_letter(prev) or _is_ascii_letter(nxt)):
        return "L"
    if r in ("$", "£"):
        return DROP
    return r


def new_cleaner() -> Collapser:
    """Trims, removes apostrophes and collapses whitespace, preserving case."""
    return Collapser(False, True, "'", " \t\r\n\f")


def new_normalizer() -> Collapser:
    """Lower-cased, punctuation-free form suitable for title comparison."""
    return Collapser(
        True, True,
        "`':;~!@#%^*=+()[]{}<>/?|\\\",",
        " \t\r\n\f._",
        normalizer_transformer,
    )


_CLEANER = new_cleaner()
_NORMALIZER = new_normalizer()


def clean(s: str) -> str:
    return _CLEANER.transform(s)


def normalize(s: str) -> str:
    return _NORMALIZER.transform(s)
