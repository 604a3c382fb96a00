#!/usr/bin/env python3
"""
Title extraction module for building title, subtitle and artist text.

Each release type has its own routine. All of them absorb runs of
title-bearing tags and turn the delimiters between them into punctuation;
each returns the index where absorption stopped so the remaining text can
be reported as unused.
"""

import html
import re
from typing import List, Tuple

from .collapser import normalize
from .release import Release
from .tag import Tag
from .types import ReleaseType, TagType

# Characters stripped from the end of an artist or the start of a subtitle
TITLE_TRIM_DELIMS = " \t\n\f\r() ,-_[]{}~/\\"
# Characters stripped where a split breaks a title in two
BREAK_DELIMS = " \t\n\f\r()+,._[]{}~/\\"
# Characters stripped around a '~' split and after a boxset prefix
SPLIT_DELIMS = " \t\n\f\r-._,()[]{}~/\\"
# Characters stripped from both ends of every title
EDGE_DELIMS = " \t\n\f\r()[]{}~/\\_,-"

_ARTIST_SEPARATORS = (" - ", "--", "~")


def _is_upper_letter(s: str) -> bool:
    return len(s) == 1 and "A" <= s <= "Z"


def _is_digit(s: str) -> bool:
    return len(s) == 1 and "0" <= s <= "9"


class TitleExtractor:
    """Extracts title, subtitle, alternate title and artist from a typed Release."""

    missing_re = re.compile(r"\b[A-Z][\. ][A-Z](?:[\. ][A-Z])*[\. ]?\b", re.ASCII)
    bad_re = re.compile(r"[^A-Z][-\. ][A-Z]\.(?:$|[^A-Z])", re.ASCII)
    fix_re = re.compile(r"([A-Z])\.", re.ASCII)
    spaces_re = re.compile(r"\s+")
    ellips_re = re.compile(r"\.{3,}")
    break_re = re.compile(r"[()\[\]{}/]")
    dash_re = re.compile(r"[-~]")
    digpre_re = re.compile(r"^\d+", re.ASCII)
    digsuf_re = re.compile(r"\d+$", re.ASCII)

    def extract(self, r: Release) -> int:
        """
        Set the title fields for the release's type.

        Returns:
            Index of the first tag not absorbed into a title
        """
        aka = False
        if r.type == ReleaseType.MOVIE:
            f, aka = self.movie_titles, True
        elif r.type.is_in(ReleaseType.SERIES, ReleaseType.EPISODE):
            f, aka = self.episode_titles, True
        elif r.type == ReleaseType.MUSIC:
            f = self.music_titles
        elif r.type.is_in(ReleaseType.BOOK, ReleaseType.AUDIOBOOK):
            f = self.book_titles
        elif r.type.is_in(ReleaseType.APP, ReleaseType.GAME):
            f = self.app_title
        else:
            f = self.default_title

        i = f(r)

        if aka and not r.alt and " AKA " in r.title:
            title, alt = r.title.split(" AKA ", 1)
            if title and alt:
                r.title, r.alt = title, alt
        return i

    # ------------------------------------------------------------------
    # Shared helpers
    # ------------------------------------------------------------------

    def title(self, tags: List[Tag], *types: TagType) -> Tuple[str, int]:
        """
        Join the leading run of tags of types, converting delimiters.

        Stops at the first bracket or slash delimiter, a '__' delimiter, or
        any other tag type.

        Returns:
            The cleaned title and the number of tags consumed
        """
        v = []
        i = 0
        while i < len(tags):
            tag = tags[i]
            if tag.is_(*types):
                v.append(tag.text_replace(".", " "))
            elif tag.is_(TagType.DELIM):
                s = tag.delim()
                if self.break_re.search(s) or s == "__":
                    break
                v.append(self.delim_text(s, tags, i, *types))
            else:
                break
            i += 1

        s = "".join(v)
        s = self.missing_re.sub(lambda m: m.group().strip().replace(" ", ".") + ". ", s)
        s = s.replace(". .", ". ", 1)
        s = self.bad_re.sub(lambda m: self.fix_re.sub(r"\1", m.group()), s)
        s = self.spaces_re.sub(" ", s)
        s = self.ellips_re.sub("...", s)
        s = html.unescape(s)
        if s.count("+") > 1:
            s = s.replace("+", " ")
        return s.strip(EDGE_DELIMS), i

    def delim_text(self, delim: str, tags: List[Tag], i: int, *types: TagType) -> str:
        """
        Title text for a delimiter.

        A lone '.' between two capital letters or two digits is kept (unless
        a '-' or '~' came just before), other delimiters become spaces and
        '-', '+', ',' and '~' are preserved.
        """
        if delim == "...":
            return "..."
        if delim in ("..", ". "):
            return ". "
        if not delim:
            return " "
        s = self.spaces_re.sub(" ", "".join(c if c in "-+,.~" else " " for c in delim))
        if s != "." or i == len(tags) - 1:
            return self.spaces_re.sub(" ", s.replace(".", " "))

        ante = tags[i - 2].delim() if i > 1 and tags[i - 2].is_(TagType.DELIM) else ""
        prev = tags[i - 1].text() if i > 0 and tags[i - 1].is_(*types) else ""
        nxt = tags[i + 1].text() if i < len(tags) - 1 and tags[i + 1].is_(*types) else ""

        if not self.dash_re.search(ante):
            if _is_upper_letter(prev) and _is_upper_letter(nxt):
                return "."
            if _is_digit(prev) and _is_digit(nxt):
                return "."
        return " "

    def text_start(self, r: Release, i: int) -> int:
        while i < r.end and not r.tags[i].is_(TagType.TEXT):
            i += 1
        return i

    # ------------------------------------------------------------------
    # Per-type routines
    # ------------------------------------------------------------------

    def movie_titles(self, r: Release) -> int:
        """Title, plus a subtitle between the date and the resolution or after '~'."""
        pos = 0
        while pos < len(r.tags) and not r.tags[pos].is_(TagType.TEXT):
            pos += 1
        start = pos

        r.title, offset = self.title(r.tags[start:], TagType.TEXT)

        date_pos = next((i for i, t in enumerate(r.tags) if t.is_(TagType.DATE)), -1)
        res_pos = next((i for i, t in enumerate(r.tags) if t.is_(TagType.RESOLUTION)), -1)
        if date_pos == -1 or res_pos == -1 or not date_pos + 1 < res_pos - 1:
            return self.box_title(r, start, offset)

        subtitled = all(
            r.tags[p].is_(TagType.DELIM, TagType.TEXT, TagType.CUT, TagType.EDITION)
            for p in range(date_pos + 1, res_pos)
        )
        if subtitled:
            sub_start = date_pos + 1
            while sub_start < res_pos - 1 and not r.tags[sub_start].is_(TagType.TEXT, TagType.CUT, TagType.EDITION):
                sub_start += 1
            if sub_start < res_pos - 1:
                r.subtitle, _ = self.title(r.tags[sub_start:res_pos - 1], TagType.TEXT, TagType.CUT, TagType.EDITION)

        if not r.subtitle and "~" in r.title:
            head, _, tail = r.title.rpartition("~")
            r.title = head.rstrip(SPLIT_DELIMS)
            r.subtitle = tail.lstrip(SPLIT_DELIMS)

        return min(start + offset, res_pos)

    def box_title(self, r: Release, start: int, offset: int) -> int:
        """For boxsets, split '<title> The <subtitle> <cut/edition>' into title and subtitle."""
        n = start + offset
        if n >= len(r.tags) or n <= 0 or not r.disc or not r.tags[n].is_(TagType.CUT, TagType.EDITION):
            return n

        for pos in range(n - 1, max(start, n - 9, 0), -1):
            if normalize(r.tags[pos - 1].text()) != "the":
                continue
            prefix, _ = self.title(r.tags[pos - 1:n], TagType.TEXT)
            suffix, suffix_offset = self.title(r.tags[n:], TagType.TEXT, TagType.CUT, TagType.EDITION)
            if prefix and r.title.endswith(prefix):
                r.title = r.title[:-len(prefix)].rstrip(SPLIT_DELIMS)
            r.subtitle = f"{prefix} {suffix.rstrip('.-_')}"
            return n + suffix_offset
        return n

    def episode_titles(self, r: Release) -> int:
        """Movie-style title, then an episode subtitle after the series or date tag."""
        pos = self.movie_titles(r)
        typ = TagType.DATE if r.month != 0 and r.day != 0 else TagType.SERIES

        while pos < len(r.tags) and not r.tags[pos].is_(typ):
            if r.tags[pos].is_(TagType.TEXT):
                r.unused.append(pos)
            pos += 1
        if pos == len(r.tags):
            return pos
        pos += 1

        while pos < len(r.tags) and r.tags[pos].is_(
            TagType.DELIM, TagType.SOURCE, TagType.RESOLUTION, TagType.COLLECTION,
            TagType.DATE, TagType.SERIES, TagType.VERSION, TagType.DISC,
            TagType.OTHER, TagType.CUT, TagType.EDITION, TagType.LANGUAGE,
            TagType.CONTAINER,
        ):
            pos += 1

        if pos == len(r.tags) or not r.tags[pos].is_(TagType.TEXT):
            return pos

        r.subtitle, offset = self.title(r.tags[pos:], TagType.TEXT)
        return pos + offset

    def mix_title(self, r: Release, i: int) -> Tuple[str, int]:
        """Text run from i, allowing REMiX tags inside it."""
        start = self.text_start(r, i)
        if start >= len(r.tags):
            return "", i
        end = start
        while end < r.end and r.tags[end].is_(TagType.DELIM, TagType.TEXT, TagType.OTHER):
            if r.tags[end].is_(TagType.OTHER) and r.tags[end].other() != "REMiX":
                break
            end += 1
        title, offset = self.title(r.tags[start:end], TagType.TEXT, TagType.OTHER)
        return title, start + offset

    def check_date(self, r: Release, i: int) -> Tuple[int, bool, bool]:
        """Step over a date at i; report whether a delimiter follows."""
        if i >= r.end:
            return i, False, False
        skipped = False
        if r.tags[i].is_(TagType.DATE):
            i += 1
            skipped = True
        if i >= r.end or not r.tags[i].is_(TagType.DELIM):
            return i, skipped, False
        return i, skipped, True

    def music_titles(self, r: Release) -> int:
        """Artist - Title [(Year)] [Subtitle] layouts."""
        r.title, i = self.mix_title(r, 0)

        for sep in (" - ", "--", "~", "-"):
            if sep in r.title:
                artist, _, title = r.title.rpartition(sep)
                r.artist, r.title = artist.strip(), title.strip()
                break

        i, skipped, ok = self.check_date(r, i)
        if ok:
            delim = r.tags[i].delim()
            if not r.artist and delim.endswith("("):
                title, z1 = self.mix_title(r, i + 1)
                subtitle, z2 = self.mix_title(r, z1 + 1)
                if title and subtitle:
                    r.artist = r.title
                    r.title = f"({title}) {subtitle}"
                    i, skipped, ok = self.check_date(r, z2)
                    if not ok:
                        return i

            if not r.artist and (skipped or delim.startswith(")")):
                title, z = self.mix_title(r, i + 1)
                if title:
                    r.artist, r.title = r.title, title
                    i = z

            if (not r.subtitle
                    and (delim.endswith("(") or delim == "__" or self.dash_re.search(delim))
                    and i + 1 < r.end and r.tags[i + 1].is_(TagType.TEXT)):
                r.subtitle, i = self.mix_title(r, i + 1)

        if not r.subtitle and r.artist:
            for sep in _ARTIST_SEPARATORS:
                if sep in r.artist:
                    artist, title = r.artist.split(sep, 1)
                    r.subtitle = r.title
                    r.artist = artist.rstrip(TITLE_TRIM_DELIMS)
                    r.title = title.lstrip(BREAK_DELIMS)
                    break
        return i

    def book_titles(self, r: Release) -> int:
        """Title runs joined across platform/arch/region words, then artist and subtitle splits."""
        pos = 0
        while pos < len(r.tags):
            while pos < len(r.tags) and not r.tags[pos].is_(
                TagType.TEXT, TagType.PLATFORM, TagType.ARCH, TagType.OTHER, TagType.REGION,
            ):
                pos += 1
            if pos >= len(r.tags):
                break

            tag = r.tags[pos]
            if tag.is_(TagType.OTHER) and tag.info_type() != ReleaseType.BOOK:
                pos += 1
                continue

            if tag.is_(TagType.OTHER) and tag.other() == "Strategy.Guide":
                s, offset = tag.text().replace(".", " "), 2
            else:
                s, offset = self.title(r.tags[pos:], TagType.TEXT, TagType.PLATFORM, TagType.ARCH, TagType.REGION)
            if r.title and s:
                r.title += " "
            r.title += s
            pos += max(offset, 1)

        if ";" in r.title:
            head, _, tail = r.title.rpartition(";")
            r.title = head.rstrip(TITLE_TRIM_DELIMS)
            r.subtitle = tail.lstrip(TITLE_TRIM_DELIMS)

        if not r.artist:
            for sep in _ARTIST_SEPARATORS:
                if sep in r.title:
                    artist, title = r.title.split(sep, 1)
                    r.artist = artist.rstrip(TITLE_TRIM_DELIMS)
                    r.title = title.lstrip(BREAK_DELIMS)
                    break
        if not r.subtitle:
            for sep in _ARTIST_SEPARATORS:
                if sep in r.title:
                    title, subtitle = r.title.split(sep, 1)
                    r.title = title.rstrip(BREAK_DELIMS)
                    r.subtitle = subtitle.lstrip(TITLE_TRIM_DELIMS)
                    break
        if not r.artist and "-" in r.title:
            head, _, tail = r.title.rpartition("-")
            artist = head.rstrip(TITLE_TRIM_DELIMS)
            title = tail.lstrip(BREAK_DELIMS)
            if not self.digsuf_re.search(artist) and not self.digpre_re.search(title):
                r.artist, r.title = artist, title
        return pos

    def app_title(self, r: Release) -> int:
        pos = 0
        while pos < len(r.tags) and not r.tags[pos].is_(TagType.TEXT, TagType.DATE):
            pos += 1
        r.title, offset = self.title(r.tags[pos:], TagType.TEXT, TagType.DATE)
        return pos + offset

    def default_title(self, r: Release) -> int:
        pos = 0
        while pos < len(r.tags) and not r.tags[pos].is_(TagType.TEXT):
            pos += 1
        r.title, offset = self.title(r.tags[pos:], TagType.TEXT)
        return pos + offset
