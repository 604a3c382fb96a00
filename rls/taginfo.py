#!/usr/bin/env python3
"""
Vocabulary registry: tag definitions, precedence sorting and lookup.

Each row of the vocabulary table becomes a TagInfo with an anchored,
case-insensitive matcher. Rows are grouped by category and sorted so that
the first matching entry is the most specific one; lexers build their
alternations from the sorted lists and resolve lexed text back to the
canonical entry through a TagFinder.
"""

import logging
import re
from dataclasses import dataclass, field
from functools import cmp_to_key
from typing import Any, Dict, FrozenSet, Iterable, List, Optional, Sequence, Tuple

import re2

from .dictionary_loader import CsvRows, DictionaryLoader
from .exceptions import TagInfoError
from .types import ReleaseType, TagType

logger = logging.getLogger(__name__)

TAGINFO_COLUMNS = ("Type", "Tag", "Title", "Regexp", "Other", "ReleaseType", "TypeExclusive")

# Group names containing characters the trailing-hyphen heuristic would split on
HARDCODED_GROUPS = (
    ("CODEX", "game"),
    ("DARKSiDERS", "game"),
    ("D-Z0N3", "movie"),
    ("MrSeeN-SiMPLE", ""),
)

# Characters that separate words inside a release name
DELIMITERS = "\t\n\f\r ()+,-._/\\[]{}~"
_FIELD_SPLIT_RE = re.compile(r"[\t\n\f\r ()+,\-._/\\\[\]{}~]")
_DIGITS_RE = re.compile(r"\d+")

# Categories whose short tags are too generic to block group or meta detection
_SHORT_EXCLUDED = frozenset({TagType.HDR.category, TagType.LANGUAGE.category})


@dataclass(frozen=True)
class TagInfo:
    """
    One vocabulary entry.

    Attributes:
        tag: Canonical tag (may hold $1, $2 placeholders filled from captures)
        title: Display title template
        regexp: Match pattern; the escaped tag is used when empty
        other: Alternate pattern used by the genre and group lexers
        typ: Release type this entry is associated with
        excl: Whether the entry is only valid for its release type
    """

    tag: str
    title: str = ""
    regexp: str = ""
    other: str = ""
    typ: ReleaseType = ReleaseType.UNKNOWN
    excl: bool = False
    matcher: Any = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        if not self.title:
            object.__setattr__(self, "title", self.tag)
        try:
            compiled = re2.compile(f"(?i)(?:{self.pattern})")
        except re2.error as exc:
            raise TagInfoError(
                f"tag '{self.tag}' has invalid regexp '{self.regexp}': {exc}", tag=self.tag
            ) from exc
        object.__setattr__(self, "matcher", compiled)

    @property
    def pattern(self) -> str:
        """Raw pattern used for this entry inside lexer alternations."""
        return self.regexp or re.escape(self.tag)

    def match(self, s: str) -> bool:
        return self.matcher.fullmatch(s) is not None


class TagFinder:
    """Returns the first entry (in precedence order) whose matcher accepts a string."""

    __slots__ = ("infos",)

    def __init__(self, infos: Iterable[TagInfo]):
        self.infos: Tuple[TagInfo, ...] = tuple(infos)

    def __call__(self, s: str) -> Optional[TagInfo]:
        for info in self.infos:
            if info.match(s):
                return info
        return None

    def __repr__(self) -> str:
        return f"TagFinder({len(self.infos)} entries)"


def build_alternation(patterns: Sequence[str], quote: bool = False) -> str:
    """Join patterns into a single capturing alternation group."""
    if quote:
        patterns = [re.escape(p) for p in patterns]
    return "(" + "|".join(patterns) + ")"


def load_taginfo(rows: CsvRows) -> Dict[str, List[TagInfo]]:
    """
    Turn vocabulary table rows into per-category entry lists (file order).

    Args:
        rows: (line number, cells) pairs, the first being the header

    Returns:
        Mapping of category name to its entries

    Raises:
        TagInfoError: On a malformed header, a missing or duplicate tag,
            an unknown release type or an invalid pattern
    """
    if not rows:
        raise TagInfoError("vocabulary table is empty")
    _, header = rows[0]
    if len(header) != len(TAGINFO_COLUMNS):
        raise TagInfoError(f"expected {len(TAGINFO_COLUMNS)} columns in taginfo csv, got {len(header)}")

    infos: Dict[str, List[TagInfo]] = {}
    seen: Dict[Tuple[str, str], int] = {}
    for line, row in rows[1:]:
        if len(row) != len(TAGINFO_COLUMNS):
            logger.debug("Skipping line %s: %s columns", line, len(row))
            continue
        category, tag, title, regexp, other, typ_name, excl = row
        if not tag:
            raise TagInfoError("must define tag", line=line)
        if (category, tag) in seen:
            raise TagInfoError(
                f"type '{category}' with tag '{tag}' previously defined on line {seen[(category, tag)]}",
                line=line, tag=tag,
            )
        typ = ReleaseType.from_string(typ_name)
        if typ_name and typ is ReleaseType.UNKNOWN and typ_name.lower() != ReleaseType.UNKNOWN.value:
            raise TagInfoError(f"invalid release type '{typ_name}'", line=line, tag=tag)
        try:
            info = TagInfo(tag, title, regexp, other, typ, excl == "1")
        except TagInfoError as exc:
            raise TagInfoError(str(exc), line=line, tag=tag) from exc
        infos.setdefault(category, []).append(info)
        seen[(category, tag)] = line
    return infos


def hardcoded_group_infos() -> List[TagInfo]:
    return [TagInfo(tag, tag, "", "", ReleaseType.from_string(typ), False) for tag, typ in HARDCODED_GROUPS]


def _alpha(a: str, b: str) -> int:
    ka, kb = (a.lower(), a), (b.lower(), b)
    return (ka > kb) - (ka < kb)


def _leading_num(s: str) -> int:
    m = _DIGITS_RE.search(s)
    return int(m.group()) if m else 0


def _cmp_dollar(a: TagInfo, b: TagInfo) -> int:
    ac, bc = "$" in a.tag, "$" in b.tag
    if ac and not bc:
        return 1
    if bc and not ac:
        return -1
    if ac and bc:
        return _alpha(a.tag, b.tag)
    return 0


def _cmp_prefix(a: TagInfo, b: TagInfo) -> int:
    at, bt = a.tag.lower(), b.tag.lower()
    if at == bt:
        return 0
    if at.startswith(bt):
        return -1
    if bt.startswith(at):
        return 1
    return 0


def _cmp_ext(a: TagInfo, b: TagInfo) -> int:
    if b.tag.endswith(a.tag):
        return 1
    if a.tag.endswith(b.tag):
        return -1
    return _alpha(a.tag, b.tag)


def _cmp_numeric(a: TagInfo, b: TagInfo) -> int:
    return (
        _cmp_dollar(a, b)
        or _leading_num(b.tag) - _leading_num(a.tag)
        or _alpha(a.tag, b.tag)
    )


def _cmp_length(a: TagInfo, b: TagInfo) -> int:
    return len(b.tag) - len(a.tag) or _alpha(a.tag, b.tag)


def _cmp_default(a: TagInfo, b: TagInfo) -> int:
    return (
        _cmp_dollar(a, b)
        or _cmp_prefix(a, b)
        or len(b.tag) - len(a.tag)
        or _alpha(a.tag.lower(), b.tag.lower())
    )


_COMPARATORS = {
    TagType.EXT.category: _cmp_ext,
    TagType.RESOLUTION.category: _cmp_numeric,
    TagType.CHANNELS.category: _cmp_numeric,
    TagType.PLATFORM.category: _cmp_length,
    TagType.CODEC.category: _cmp_length,
    TagType.HDR.category: _cmp_length,
}


def sort_taginfo(infos: Dict[str, List[TagInfo]]) -> Dict[str, Tuple[TagInfo, ...]]:
    """Sort each category into lookup precedence order."""
    return {
        category: tuple(sorted(entries, key=cmp_to_key(_COMPARATORS.get(category, _cmp_default))))
        for category, entries in infos.items()
    }


def build_short_map(infos: Dict[str, Sequence[TagInfo]]) -> FrozenSet[str]:
    """Upper-cased 1-4 character words of every tag outside the hdr/language categories."""
    short = set()
    for category, entries in infos.items():
        if category in _SHORT_EXCLUDED:
            continue
        for info in entries:
            for word in _FIELD_SPLIT_RE.split(info.tag):
                if 0 < len(word) < 5 and "$" not in word:
                    short.add(word.upper())
    return frozenset(short)


@dataclass(frozen=True)
class TagRegistry:
    """Sorted vocabulary with a finder per category and the short-word set."""

    infos: Dict[str, Tuple[TagInfo, ...]]
    finders: Dict[str, TagFinder]
    short_map: FrozenSet[str]

    @classmethod
    def from_infos(cls, infos: Dict[str, List[TagInfo]]) -> "TagRegistry":
        ordered = sort_taginfo(infos)
        finders = {category: TagFinder(entries) for category, entries in ordered.items()}
        return cls(ordered, finders, build_short_map(ordered))

    @classmethod
    def load(cls, dictionary_name: str = "taginfo.csv") -> "TagRegistry":
        """Load, validate and sort the vocabulary table, adding the hard-coded groups."""
        infos = load_taginfo(DictionaryLoader.load_rows(dictionary_name))
        infos.setdefault(TagType.GROUP.category, []).extend(hardcoded_group_infos())
        registry = cls.from_infos(infos)
        logger.info(
            "Loaded %s vocabulary entries in %s categories from %s",
            sum(len(v) for v in registry.infos.values()), len(registry.infos), dictionary_name,
        )
        return registry

    def get(self, typ: TagType) -> Tuple[TagInfo, ...]:
        return self.infos.get(typ.category, ())

    def finder(self, typ: TagType) -> TagFinder:
        return self.finders.get(typ.category) or TagFinder(())

    def find(self, typ: TagType, s: str) -> Optional[TagInfo]:
        return self.finder(typ)(s)

    def is_short(self, s: str) -> bool:
        return s.upper() in self.short_map
