#!/usr/bin/env python3
"""
Date and version lexers.

Dates are matched against several absolute and two-digit-year grammars and
validated against the calendar before being accepted; impossible dates fall
through to the next grammar.
"""

import datetime
import logging
import re
from typing import Dict, Optional, Sequence

from .lexer import Lexer, compile_lexer_re
from .tag import Tag
from .types import TagType

logger = logging.getLogger(__name__)

MONTH_NAMES = (
    "January", "February", "March", "April", "May", "June", "July",
    "August", "September", "October", "November", "December",
)

# Full names, three-letter abbreviations and 'Sept', lower-cased
MONTHS: Dict[str, int] = {}
for _num, _name in enumerate(MONTH_NAMES, 1):
    MONTHS[_name.lower()] = _num
    MONTHS[_name[:3].lower()] = _num
MONTHS["sept"] = 9

_SEP = r"[\-\_\. ]"
_YEAR = r"(?P<year>(?:19|20)\d{2})"
_MON = r"(?P<mon>Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Oct|Nov|Dec)"
_MONTH_NAME = "(?P<month_name>" + "|".join(MONTH_NAMES) + ")"

DEFAULT_DATE_PATTERNS: Sequence[str] = (
    # 2006-01-02, 2006
    rf"{_YEAR}(?:{_SEP}(?P<month>\d{{2}}){_SEP}(?P<day>\d{{2}}))?\b",
    # 2006-01
    rf"{_YEAR}{_SEP}(?P<month>\d{{2}})\b",
    # 01-02-2006 (month first)
    rf"(?P<month>\d{{2}}){_SEP}(?P<day>\d{{2}}){_SEP}{_YEAR}\b",
    # 13-02-2006 (day first)
    rf"(?P<day>\d{{2}}){_SEP}(?P<month>\d{{2}}){_SEP}{_YEAR}\b",
    # 2nd Jan 2006, 13 Dec 2011, Nov 1999
    rf"(?:(?P<sday>\d{{1,2}})(?:th|st|nd|rd)?{_SEP})?{_MON}{_SEP}{_YEAR}\b",
    # 01-August-1998
    rf"(?P<sday>\d{{1,2}}){_SEP}{_MONTH_NAME}{_SEP}{_YEAR}\b",
    # MAY-30-1992
    rf"{_MON}{_SEP}(?P<sday>\d{{1,2}}){_SEP}{_YEAR}\b",
    # 17.12.15, 20-9-9
    rf"(?P<yy>[12]\d){_SEP}(?P<month>\d\d?){_SEP}(?P<day>\d\d?)\b",
)

DEFAULT_VERSION_PATTERNS: Sequence[str] = (
    # v1.17, v1, v1.2a, v1b
    rf"(?:version{_SEP})?(?P<v>v{_SEP}?\d{{1,2}}(?:[\._ ]\d{{1,2}}[a-z]?\d*){{0,3}})\b",
    # v2012, v20120803, v1999.08.08
    rf"(?:version{_SEP})?(?P<v>v{_SEP}?(?:19|20)\d\d(?:{_SEP}?\d\d?){{0,2}})\b",
    # v60009
    rf"(?:version{_SEP})?(?P<v>v{_SEP}?\d{{4,10}})\b",
    # Version 2004, Version 21H2
    rf"version{_SEP}(?P<V>\d{{2,}}|\d{{2}}[a-z]{{1,2}}\d{{1,2}})\b",
    # 11.09.1, 23.3.2.458
    r"(?P<u>\d{1,3}\.\d{1,3}\.\d{1,16}(\.\d{1,16})?)\b",
)


def month_number(name: str) -> int:
    """Month number for a month name or abbreviation, 0 if unknown."""
    return MONTHS.get(name.strip().lower(), 0)


def _date_fields(groups: Dict[str, Optional[str]]) -> Optional[Dict[str, str]]:
    """
    Reduce named captures to zero-padded year/month/day strings.

    Returns None when a capture has an impossible width or names no month.
    """
    year = month = day = ""
    for name, val in groups.items():
        if val is None:
            continue
        if name == "year":
            year = val
        elif name == "yy":
            if len(val) != 2:
                return None
            year = "20" + val
        elif name == "month":
            if len(val) != 2:
                return None
            month = f"{int(val):02d}"
        elif name in ("day", "sday"):
            if (name == "day" and len(val) != 2) or not 0 < len(val) <= 2:
                return None
            day = f"{int(val):02d}"
        elif name == "mon":
            if len(val) != 3:
                return None
            month = f"{month_number(val):02d}"
        elif name == "month_name":
            if len(val) <= 3:
                return None
            month = f"{month_number(val):02d}"
    return {"year": year, "month": month, "day": day}


def _is_valid_date(year: str, month: str, day: str) -> bool:
    y = int(year) if year else 0
    if y <= 0:
        return True
    try:
        datetime.date(y, int(month or 0) or 1, int(day or 0) or 1)
    except ValueError:
        return False
    return True


class DateLexer(Lexer):
    """Absolute and two-digit-year dates, validated against the calendar."""

    def __init__(self, patterns: Sequence[str] = DEFAULT_DATE_PATTERNS):
        self.patterns = [compile_lexer_re(p) for p in patterns]

    def lex(self, src, buf, start, end, i, n):
        for pattern in self.patterns:
            m = buf.match(pattern, i, n)
            if not m:
                continue
            fields = _date_fields(m.groupdict())
            if fields is None or not any(fields.values()):
                continue
            if not _is_valid_date(fields["year"], fields["month"], fields["day"]):
                logger.debug("Rejected impossible date %r", m.group())
                continue
            text = src[i:i + len(m.group())]
            start.append(Tag.new(TagType.DATE, None, text, fields["year"], fields["month"], fields["day"]))
            return i + len(text), n, True
        return i, n, False


class VersionLexer(Lexer):
    """Software version numbers; never the first word of a name."""

    not_first = True

    version_prefix_re = re.compile(r"^[ ._-]+")

    def __init__(self, patterns: Sequence[str] = DEFAULT_VERSION_PATTERNS):
        self.patterns = [compile_lexer_re(p) for p in patterns]

    def _version(self, s: str, groups: Dict[str, Optional[str]]) -> str:
        if groups.get("v") is not None:
            version = s.lower()
            if version.startswith("version"):
                version = self.version_prefix_re.sub("", version[len("version"):])
            return version.replace(" ", ".")
        if groups.get("V") is not None:
            return groups["V"]
        if groups.get("u") is not None:
            return "v" + groups["u"]
        return ""

    def lex(self, src, buf, start, end, i, n):
        for pattern in self.patterns:
            m = buf.match(pattern, i, n)
            if not m:
                continue
            s = src[i:i + len(m.group())]
            version = self._version(s, m.groupdict())
            if version:
                start.append(Tag.new(TagType.VERSION, None, s, version))
                return i + len(s), n, True
        return i, n, False
