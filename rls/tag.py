#!/usr/bin/env python3
"""
Lexed token ("tag") with its captured values and registry lookup.

A Tag is immutable: reclassification produces a new Tag that remembers the
type and lookup it replaced, so the builder can store it back into the same
slot of the token list and later revert it.
"""

import json
import re
from dataclasses import dataclass, replace
from typing import Callable, Dict, List, Optional, Tuple

import re2

from .taginfo import TagInfo
from .types import ReleaseType, TagType

FindFunc = Callable[[str], Optional[TagInfo]]

_DIGIT_RE = re.compile(r"\d")


def _to_int(s: str) -> int:
    try:
        return int(s)
    except (TypeError, ValueError):
        m = re.match(r"\s*[+-]?\d+", s or "")
        return int(m.group()) if m else 0


@dataclass(frozen=True)
class Tag:
    """
    A classified unit of the input.

    Attributes:
        typ: Current token type
        v: Values; v[0] is the exact source text, the rest are captures
        find: Lookup resolving the normalized value to a vocabulary entry
        prev_typ: Type before the last reclassification
        prev_find: Lookup before the last reclassification
    """

    typ: TagType
    v: Tuple[str, ...]
    find: Optional[FindFunc] = None
    prev_typ: Optional[TagType] = None
    prev_find: Optional[FindFunc] = None

    @classmethod
    def new(cls, typ: TagType, find: Optional[FindFunc], *values) -> "Tag":
        if len(values) < 2:
            raise ValueError("a tag needs its source text and at least one value")
        v = tuple("" if x is None else str(x) for x in values)
        return cls(typ, v, find, typ, find)

    def retype(self, typ: TagType, find: Optional[FindFunc] = None) -> "Tag":
        """Copy of this tag reclassified as typ, remembering the current classification."""
        return Tag(typ, self.v, find, self.typ, self.find)

    def revert(self) -> "Tag":
        return Tag(self.prev_typ, self.v, self.prev_find, self.prev_typ, self.prev_find)

    def is_(self, *types: TagType) -> bool:
        return self.typ in types

    def was(self, *types: TagType) -> bool:
        return self.prev_typ in types

    def __str__(self) -> str:
        return self.v[0]

    # ------------------------------------------------------------------
    # Registry lookups
    # ------------------------------------------------------------------

    def info(self) -> Optional[TagInfo]:
        if self.find is None:
            return None
        return self.find(self.normalize())

    def info_type(self) -> ReleaseType:
        info = self.info()
        return info.typ if info else ReleaseType.UNKNOWN

    def info_excl(self) -> bool:
        info = self.info()
        return info.excl if info else False

    def info_title(self) -> str:
        info = self.info()
        if info is None:
            return ""
        s = info.title
        for i, val in enumerate(self.v[1:], 1):
            s = s.replace(f"${i}", val, 1)
        return s

    def single_ep(self) -> bool:
        """True for a bare episode number lexed without a season."""
        if self.typ != TagType.SERIES:
            return False
        s, e = self.series()
        return s == 0 and e != 0 and self.v[1] == "" and self.v[0] == self.v[2]

    def _normalize_with_func(self, s: str, *values: str) -> str:
        if self.find is not None:
            info = self.find(s)
            if info is not None:
                s = info.tag
        for i, val in enumerate(values, 1):
            s = s.replace(f"${i}", val, 1)
        return s

    def _lookup(self) -> str:
        return self._normalize_with_func(self.v[1], *self.v[2:])

    # ------------------------------------------------------------------
    # Per-type values
    # ------------------------------------------------------------------

    platform = arch = source = resolution = collection = _lookup
    codec = hdr = audio = cut = edition = language = _lookup
    region = container = genre = id_ = _lookup

    def whitespace(self) -> str:
        return self.v[1]

    def delim(self) -> str:
        return self.v[1]

    def text(self) -> str:
        if self.prev_typ in (TagType.DATE, TagType.SERIES):
            return self.v[0]
        if self.prev_typ == TagType.CHANNELS:
            return self.channels()
        return self.v[1]

    def text_replace(self, old: str, new: str) -> str:
        s = self.text()
        if self.prev_typ == TagType.CHANNELS:
            return s
        return s.replace(old, new)

    def date(self) -> Tuple[int, int, int]:
        return _to_int(self.v[1]), _to_int(self.v[2]), _to_int(self.v[3])

    def series(self) -> Tuple[int, int]:
        return _to_int(self.v[1]), _to_int(self.v[2])

    def episodes(self) -> List[int]:
        return [_to_int(x) for x in self.v[2:] if x]

    def version(self) -> str:
        return self.v[1]

    def disc(self) -> str:
        num = _to_int(self.v[2])
        typ = self.v[1]
        if typ in ("CD", "DVD"):
            return f"{typ}{num}"
        if typ == "S":
            return f"{num}DiSCS"
        if typ == "X":
            return f"{num}x"
        return f"D{num:02d}"

    def channels(self) -> str:
        s = "".join(_DIGIT_RE.findall(self._normalize_with_func(self.v[1], self.v[1])))
        if not s:
            return ""
        return f"{s[0]}.{s[1:]}"

    def other(self) -> str:
        s = self._lookup()
        if s.upper() in ("19XX", "20XX"):
            return s.upper()
        return s

    def size(self) -> str:
        return self._lookup().upper().replace("I", "i", 1)

    def group(self) -> str:
        return self.v[1]

    def meta(self) -> Tuple[str, str]:
        return self.v[1], self.v[2]

    def ext(self) -> str:
        return self.v[1].lower()

    # ------------------------------------------------------------------
    # Normalization and formatting
    # ------------------------------------------------------------------

    def normalize(self) -> str:
        return _NORMALIZERS[self.typ](self)

    def format(self, verb: str) -> str:
        """
        Format the tag.

        Verbs:
            o: original text
            s, r: normalized value
            e: <Type:value>
            v: Type:[captures]
            q: all values, quoted
        """
        if verb == "o":
            return self.v[0]
        if verb in ("s", "r"):
            return self.normalize()
        if verb == "e":
            return f"<{self.typ.title}:{self.normalize()}>"
        if verb == "v":
            return f"{self.typ.title}:{json.dumps(list(self.v[1:]), ensure_ascii=False)}"
        if verb == "q":
            return json.dumps(list(self.v), ensure_ascii=False)
        return ""

    def match(self, s: str, verb: str = "s", *types: TagType) -> bool:
        """Whether s equals (or, for verb 'r', is a regex found in) the formatted tag."""
        if types and self.typ not in types:
            return False
        v = self.format(verb)
        if not s:
            return True
        if self.find is not None and verb == "s":
            info = self.find(s)
            if info is not None:
                s = info.tag
        if verb == "r":
            return re2.search(s, v) is not None
        return s == v


def _normalize_date(t: Tag) -> str:
    year, month, day = t.date()
    if month and day:
        return f"{year}-{month:02d}-{day:02d}"
    return str(year)


def _normalize_series(t: Tag) -> str:
    series, episode = t.series()
    if episode:
        return f"S{series:02d}E{episode:02d}"
    return f"S{series:02d}"


def _normalize_meta(t: Tag) -> str:
    k, s = t.meta()
    if k in ("site", "sum"):
        return f"[{s}]"
    if k == "pass":
        return "{{" + s + "}}"
    if k == "req":
        return "[REQ]"
    return f"[[{k}:{s}]]"


_NORMALIZERS: Dict[TagType, Callable[[Tag], str]] = {
    TagType.WHITESPACE: Tag.whitespace,
    TagType.DELIM: Tag.delim,
    TagType.TEXT: Tag.text,
    TagType.PLATFORM: Tag.platform,
    TagType.ARCH: Tag.arch,
    TagType.SOURCE: Tag.source,
    TagType.RESOLUTION: Tag.resolution,
    TagType.COLLECTION: Tag.collection,
    TagType.DATE: _normalize_date,
    TagType.SERIES: _normalize_series,
    TagType.VERSION: Tag.version,
    TagType.DISC: Tag.disc,
    TagType.CODEC: Tag.codec,
    TagType.HDR: Tag.hdr,
    TagType.AUDIO: Tag.audio,
    TagType.CHANNELS: Tag.channels,
    TagType.OTHER: Tag.other,
    TagType.CUT: Tag.cut,
    TagType.EDITION: Tag.edition,
    TagType.LANGUAGE: Tag.language,
    TagType.SIZE: Tag.size,
    TagType.REGION: Tag.region,
    TagType.CONTAINER: Tag.container,
    TagType.GENRE: Tag.genre,
    TagType.ID: Tag.id_,
    TagType.GROUP: Tag.group,
    TagType.META: _normalize_meta,
    TagType.EXT: Tag.ext,
}

_missing = set(TagType) - set(_NORMALIZERS)
if _missing:
    raise RuntimeError(f"no normalizer for tag types: {sorted(t.name for t in _missing)}")
