#!/usr/bin/env python3
"""
Semantic builder turning a tag sequence into a Release.

Passes run in a fixed order, each relying on the state the previous ones
left behind:

1. initial fixups (demote misclassified tags to text)
2. collect (populate Release fields)
3. inspect (infer the release type)
4. unset (drop tags exclusive to another type, then re-collect)
5. special date (month names before a magazine's year)
6. titles (see title_extractor)
7. unused text (checksum or group from the last leftover text)
"""

import logging
import re
from dataclasses import fields
from typing import Dict, List, Optional, Tuple

from .date_lexer import month_number
from .release import Release
from .tag import Tag
from .taginfo import TagRegistry
from .title_extractor import TitleExtractor
from .types import ReleaseType, TagType

logger = logging.getLogger(__name__)

# Release fields that survive re-collection
_KEEP_ON_RECOLLECT = frozenset({"tags", "dates", "unused", "end"})

# Metadata categories that never start a release name
_NOT_FIRST = (
    TagType.PLATFORM, TagType.ARCH, TagType.SOURCE, TagType.RESOLUTION,
    TagType.CODEC, TagType.HDR, TagType.AUDIO, TagType.OTHER, TagType.CUT,
    TagType.EDITION, TagType.LANGUAGE, TagType.REGION,
)

# Categories demoted to text when they sit inside the title
_TITLE_IMPOSTORS = (TagType.COLLECTION, TagType.LANGUAGE, TagType.OTHER, TagType.ARCH, TagType.PLATFORM)

# Categories whose exclusive entries are dropped under another release type,
# with the Release field each one is collected into
_UNSET_FIELDS: Dict[TagType, str] = {
    TagType.PLATFORM: "platform",
    TagType.ARCH: "arch",
    TagType.SOURCE: "source",
    TagType.RESOLUTION: "resolution",
    TagType.COLLECTION: "collection",
    TagType.CODEC: "codec",
    TagType.HDR: "hdr",
    TagType.AUDIO: "audio",
    TagType.CHANNELS: "channels",
    TagType.OTHER: "other",
    TagType.CUT: "cut",
    TagType.EDITION: "edition",
    TagType.LANGUAGE: "language",
    TagType.SIZE: "size",
    TagType.REGION: "region",
    TagType.CONTAINER: "container",
    TagType.GENRE: "genre",
    TagType.GROUP: "group",
    TagType.EXT: "ext",
}

# Categories counted when looking for '-'-wrapped music metadata runs
_MUSIC_RUN = (
    TagType.DATE, TagType.CODEC, TagType.HDR, TagType.AUDIO,
    TagType.RESOLUTION, TagType.SOURCE, TagType.LANGUAGE,
)


def peek(tags: List[Tag], i: int, *types: TagType) -> bool:
    """Whether index i is in range and holds a tag of one of types."""
    return 0 <= i < len(tags) and tags[i].is_(*types)


def isolated(tags: List[Tag], i: int, inc: int) -> bool:
    """
    Whether walking from i in direction inc over delimiters reaches a TEXT tag.

    The walk stops at the first and last positions without inspecting them
    as delimiters.
    """
    j = i + inc
    while 0 < j < len(tags) - 1 and tags[j].is_(TagType.WHITESPACE, TagType.DELIM):
        j += inc
    return 0 <= j < len(tags) and tags[j].is_(TagType.TEXT)


def _is_impostor(tag: Tag) -> bool:
    """Vocabulary hits that are usually ordinary title words."""
    t = tag.text()
    if tag.is_(TagType.COLLECTION):
        c = tag.collection()
        return c in ("CC", "RED") or (c == "AMZN" and t.lower() == "amazon")
    if tag.is_(TagType.SOURCE):
        return t == "Web"
    if tag.is_(TagType.CUT):
        return t == "Uncut" or t.lower() == "dc"
    if tag.is_(TagType.OTHER):
        return tag.other() in ("MD", "RESTORATiON")
    return False


class ReleaseBuilder:
    """Builds Release records from tokenized release names."""

    sum_re = re.compile(r"^[a-f0-9]{8}$", re.IGNORECASE)
    digits_re = re.compile(r"^\d+$")
    date_like_re = re.compile(r"\d+")

    def __init__(self, registry: TagRegistry):
        self.registry = registry
        self.containerf = registry.finder(TagType.CONTAINER)
        self.audiof = registry.finder(TagType.AUDIO)
        self.title_extractor = TitleExtractor()

    def build(self, tags: List[Tag], end: int) -> Release:
        """
        Run every pass over a tag sequence.

        Args:
            tags: Head and tail tags in input order
            end: Index of the first tail tag

        Returns:
            The populated Release
        """
        r = self._classify(tags, end)
        self.special_date(r)
        i = self.title_extractor.extract(r)
        self.unused(r, i)
        logger.debug("Built %s release %r from %s tags", r.type, r.title, len(r.tags))
        return r

    def build_type_only(self, tags: List[Tag], end: int) -> Release:
        """Run the passes needed to infer the release type, skipping titles."""
        return self._classify(tags, end)

    def _classify(self, tags: List[Tag], end: int) -> Release:
        r = Release(tags=list(tags), end=end)
        self.init_tags(r)
        self.collect(r)
        r.type = self.inspect(r, True)
        self.unset(r)
        self.recollect(r)
        r.type = self.inspect(r, False)
        return r

    # ------------------------------------------------------------------
    # Pass 1: initial fixups
    # ------------------------------------------------------------------

    def init_tags(self, r: Release):
        self.fix_first_date(r)
        pivots, pivot = self.pivots(r, TagType.DATE, TagType.SOURCE, TagType.SERIES,
                                    TagType.RESOLUTION, TagType.VERSION)
        date_pos = pivots[TagType.DATE]
        series_pos = pivots[TagType.SERIES]

        if date_pos != -1:
            r.dates.append(date_pos)
        r.dates.extend(self.reset(r, date_pos, TagType.DATE))

        found = [p for p in (date_pos, series_pos) if p != -1]
        if found:
            self.fix_special(r, min(found), series_pos != -1)

        text_end = self.text_end(r, pivot)
        self.reset(r, text_end, TagType.LANGUAGE, TagType.ARCH, TagType.PLATFORM)
        self.fix_first(r)
        self.fix_bad(r, self.text_start(r, 0), text_end)
        self.fix_no_text(r, text_end)
        self.fix_isolated(r)
        self.fix_music(r)

    def fix_first_date(self, r: Release):
        """Demote a date opening the name when it is the only date in the head."""
        last = -1
        for i in range(r.end - 1, -1, -1):
            if r.tags[i].is_(TagType.DATE):
                last = i
                break
        if last == -1:
            return

        first = 0
        while first < r.end and r.tags[first].is_(TagType.WHITESPACE, TagType.DELIM):
            first += 1
        if first >= r.end or first < last:
            return
        if peek(r.tags, first - 1, TagType.DELIM) and r.tags[first - 1].delim().endswith("("):
            return
        if r.tags[first].is_(TagType.DATE):
            r.tags[first] = r.tags[first].retype(TagType.TEXT)

    def pivots(self, r: Release, *types: TagType) -> Tuple[Dict[TagType, int], int]:
        """Last head position of each pivot type, and the earliest of those positions."""
        found = {typ: -1 for typ in types}
        earliest = -1
        for i in range(r.end - 1, -1, -1):
            typ = r.tags[i].typ
            if typ in found and found[typ] == -1:
                found[typ] = i
                earliest = i
        return found, (r.end if earliest == -1 else earliest)

    def reset(self, r: Release, i: int, *types: TagType) -> List[int]:
        """Demote tags of types before index i (-1 meaning every tag) to text."""
        if i == -1:
            i = len(r.tags)
        indices = []
        for j in range(i - 1, -1, -1):
            if r.tags[j].is_(*types):
                r.tags[j] = r.tags[j].retype(TagType.TEXT)
                indices.append(j)
        return indices

    def text_start(self, r: Release, i: int) -> int:
        while i < r.end and not r.tags[i].is_(TagType.TEXT):
            i += 1
        return i

    def text_end(self, r: Release, i: int) -> int:
        while i > 0 and not r.tags[i - 1].is_(TagType.TEXT):
            i -= 1
        return i

    def fix_first(self, r: Release):
        i = 0
        while i < r.end and r.tags[i].is_(TagType.WHITESPACE, TagType.DELIM):
            i += 1
        if i < r.end and r.tags[i].is_(*_NOT_FIRST):
            r.tags[i] = r.tags[i].retype(TagType.TEXT)

    def fix_special(self, r: Release, i: int, series: bool):
        """Demote title impostors before the first date or series pivot."""
        for j in range(i - 1, -1, -1):
            tag = r.tags[j]
            if _is_impostor(tag) or (series and tag.is_(TagType.ARCH, TagType.PLATFORM)):
                r.tags[j] = tag.retype(TagType.TEXT)

    def fix_bad(self, r: Release, start: int, end: int):
        """Demote metadata-looking tags inside the title region."""
        i = end
        while i > start and r.tags[i - 1].is_(
            TagType.LANGUAGE, TagType.EDITION, TagType.CUT, TagType.OTHER,
            TagType.COLLECTION, TagType.DELIM, TagType.SOURCE,
        ):
            i -= 1

        for j in range(i - 1, start - 1, -1):
            tag = r.tags[j]
            if tag.is_(TagType.COLLECTION) and tag.collection() == "IMAX":
                continue
            if tag.is_(TagType.OTHER) and tag.other() == "REMiX":
                continue
            if _is_impostor(tag):
                continue
            if tag.is_(*_TITLE_IMPOSTORS):
                r.tags[j] = tag.retype(TagType.TEXT)

    def fix_no_text(self, r: Release, end: int):
        """A title made only of a collection name is the title."""
        n = min(end + 1, len(r.tags))
        if any(t.is_(TagType.TEXT) for t in r.tags[:n]):
            return
        for i in range(n):
            if r.tags[i].is_(TagType.COLLECTION):
                r.tags[i] = r.tags[i].retype(TagType.TEXT)

    def fix_isolated(self, r: Release):
        """Demote metadata tags surrounded by text on both sides."""
        head = r.tags[:r.end]
        for i in range(r.end - 2, 0, -1):
            tag = r.tags[i]
            if not tag.is_(*_TITLE_IMPOSTORS):
                continue
            if tag.is_(TagType.OTHER) and tag.other() == "REMiX":
                continue
            if not isolated(head, i, -1) or not isolated(head, i, 1):
                continue
            # keep the tag when the text after it is the last head token
            j = i + 1
            while j < r.end and not r.tags[j].is_(TagType.TEXT):
                j += 1
            if j == r.end - 1 or (
                j < r.end - 1
                and r.tags[j + 1].is_(TagType.DELIM, TagType.WHITESPACE)
                and j + 2 == r.end
            ):
                continue
            r.tags[i] = tag.retype(TagType.TEXT)

    def fix_music(self, r: Release):
        """CBR as a container, unwrapped BOOTLEG as text, music-only 16bit and episodes."""
        count = pos = 0
        has_cbr = False
        music_excl = any(t.is_(TagType.AUDIO) and t.info_excl() for t in r.tags[:r.end])

        for i in range(r.end):
            tag = r.tags[i]
            if tag.is_(TagType.AUDIO):
                if tag.audio() == "CBR":
                    has_cbr = True
                    pos = i
                count += 1

            if i != 0 and tag.is_(TagType.OTHER) and tag.other() == "BOOTLEG":
                prev = r.tags[i - 1].delim() if peek(r.tags, i - 1, TagType.DELIM) else ""
                nxt = r.tags[i + 1].delim() if peek(r.tags, i + 1, TagType.DELIM) else ""
                wrapped = (prev.endswith("-") and nxt.startswith("-")) or (prev.endswith("(") and nxt.startswith(")"))
                if not wrapped:
                    r.tags[i] = tag.retype(TagType.TEXT)

            if music_excl:
                if tag.single_ep():
                    r.tags[i] = tag.retype(TagType.TEXT)
                elif tag.is_(TagType.ARCH) and tag.arch() == "16bit":
                    r.tags[i] = tag.retype(TagType.AUDIO, self.audiof)

        if has_cbr and count == 1:
            r.tags[pos] = r.tags[pos].retype(TagType.CONTAINER, self.containerf)

    # ------------------------------------------------------------------
    # Pass 2: collect
    # ------------------------------------------------------------------

    def collect(self, r: Release):
        for tag in r.tags:
            typ = tag.typ
            if typ == TagType.PLATFORM:
                r.platform = r.platform or tag.platform()
            elif typ == TagType.ARCH:
                r.arch = r.arch or tag.arch()
            elif typ == TagType.SOURCE:
                s = tag.source()
                if not r.source or r.source == "CD" or (r.source == "DVD" and s != "CD"):
                    r.source = s
            elif typ == TagType.RESOLUTION:
                r.resolution = r.resolution or tag.resolution()
            elif typ == TagType.COLLECTION:
                r.collection = r.collection or tag.collection()
            elif typ == TagType.DATE:
                r.year, r.month, r.day = tag.date()
            elif typ == TagType.SERIES:
                series, episode = tag.series()
                r.series = r.series or series
                r.episode = r.episode or episode
            elif typ == TagType.VERSION:
                r.version = r.version or tag.version()
            elif typ == TagType.DISC:
                r.disc = r.disc or tag.format("s")
            elif typ == TagType.CODEC:
                r.codec.append(tag.codec())
            elif typ == TagType.HDR:
                r.hdr.append(tag.hdr())
            elif typ == TagType.AUDIO:
                r.audio.append(tag.audio())
            elif typ == TagType.CHANNELS:
                r.channels = r.channels or tag.channels()
            elif typ == TagType.OTHER:
                r.other.append(tag.other())
            elif typ == TagType.CUT:
                r.cut.append(tag.cut())
            elif typ == TagType.EDITION:
                r.edition.append(tag.edition())
            elif typ == TagType.LANGUAGE:
                r.language.append(tag.language())
            elif typ == TagType.SIZE:
                r.size = r.size or tag.size()
            elif typ == TagType.REGION:
                r.region = r.region or tag.region()
            elif typ == TagType.CONTAINER:
                r.container = r.container or tag.container()
            elif typ == TagType.GENRE:
                r.genre = r.genre or tag.genre()
            elif typ == TagType.ID:
                r.id = r.id or tag.id_()
            elif typ == TagType.GROUP:
                r.group = tag.group()
            elif typ == TagType.META:
                self._collect_meta(r, tag)
            elif typ == TagType.EXT:
                r.ext = tag.ext()

        for i in reversed(r.dates):
            year, month, day = r.tags[i].date()
            r.year = r.year or year
            r.month = r.month or month
            r.day = r.day or day

    def _collect_meta(self, r: Release, tag: Tag):
        k, v = tag.meta()
        if k == "site" and not r.site:
            r.site = v
        elif k == "sum" and not r.sum:
            r.sum = v
        elif k == "pass" and not r.password:
            r.password = v
        elif k == "req":
            r.req = True
        else:
            r.meta.append(f"{k}:{v}")

    def recollect(self, r: Release):
        """Reset every collected field and collect again."""
        blank = Release()
        for f in fields(Release):
            if f.name not in _KEEP_ON_RECOLLECT:
                setattr(r, f.name, getattr(blank, f.name))
        self.collect(r)

    # ------------------------------------------------------------------
    # Pass 3: inspect
    # ------------------------------------------------------------------

    def inspect(self, r: Release, initial: bool) -> ReleaseType:
        """
        Infer the release type.

        Decisive vocabulary hits are looked for from the end of the name;
        failing those, hyphen-wrapped metadata runs and then the collected
        fields decide. On the initial pass an undecided result reverts
        demoted platform/arch tags and tries once more.
        """
        if r.type != ReleaseType.UNKNOWN:
            return r.type

        seen = {"app": False, "series": False, "movie": False}
        typ = self._inspect_tags(r, seen)
        if typ is not None:
            return typ

        count = 0
        for i in range(len(r.tags) - 2, 0, -1):
            if (
                r.tags[i].is_(*_MUSIC_RUN)
                and peek(r.tags, i - 1, TagType.DELIM) and r.tags[i - 1].delim().endswith("-")
                and peek(r.tags, i + 1, TagType.DELIM) and r.tags[i + 1].delim().startswith("-")
            ):
                count += 1
                if count > 1:
                    return ReleaseType.MUSIC

        typ = self._inspect_fields(r, seen)
        if typ is not None:
            return typ

        if initial:
            reinspect = False
            for i in range(len(r.tags) - 1, -1, -1):
                if r.tags[i].was(TagType.PLATFORM, TagType.ARCH):
                    tag = r.tags[i] = r.tags[i].revert()
                    reinspect = True
                    if tag.is_(TagType.PLATFORM):
                        r.platform = tag.platform()
                    elif tag.is_(TagType.ARCH):
                        r.arch = tag.arch()
            if reinspect:
                logger.debug("Re-inspecting with platform/arch tags restored")
                return self.inspect(r, False)

        return ReleaseType.UNKNOWN

    def _inspect_tags(self, r: Release, seen: Dict[str, bool]) -> Optional[ReleaseType]:
        for i in range(len(r.tags) - 1, -1, -1):
            tag = r.tags[i]
            typ = tag.info_type()
            seen["app"] = seen["app"] or typ == ReleaseType.APP
            seen["series"] = seen["series"] or tag.is_(TagType.SERIES)
            seen["movie"] = seen["movie"] or typ == ReleaseType.MOVIE

            if typ.is_in(ReleaseType.BOOK, ReleaseType.GAME):
                for j in range(i - 1, -1, -1):
                    prev = r.tags[j].info_type()
                    if prev.is_in(ReleaseType.COMIC, ReleaseType.EDUCATION, ReleaseType.MAGAZINE):
                        return prev
                return typ

            if typ.is_in(ReleaseType.SERIES, ReleaseType.EPISODE):
                if r.episode != 0 or (r.series == 0 and "BOXSET" not in r.other):
                    return ReleaseType.EPISODE
                return ReleaseType.SERIES

            if typ == ReleaseType.EDUCATION and r.series == 0 and r.episode == 0:
                return typ

            if typ == ReleaseType.MUSIC:
                for j in range(i - 1, -1, -1):
                    if r.tags[j].info_type() == ReleaseType.AUDIOBOOK:
                        return ReleaseType.AUDIOBOOK
                return typ

            if typ.is_in(ReleaseType.AUDIOBOOK, ReleaseType.COMIC, ReleaseType.MAGAZINE):
                return typ

            if (tag.info_excl() and not r.version and r.series == 0 and r.episode == 0
                    and r.day == 0 and r.month == 0):
                return typ
        return None

    def _inspect_fields(self, r: Release, seen: Dict[str, bool]) -> Optional[ReleaseType]:
        if r.episode != 0 or (r.year != 0 and r.month != 0 and r.day != 0):
            return ReleaseType.EPISODE
        if r.series != 0 or seen["series"]:
            return ReleaseType.SERIES
        if seen["app"] or (r.version and not r.resolution):
            return ReleaseType.APP
        if seen["movie"] or r.resolution:
            return ReleaseType.MOVIE
        if r.source in ("", "WEB") and not r.resolution and r.year != 0:
            return ReleaseType.MUSIC
        return None

    # ------------------------------------------------------------------
    # Pass 4: unset
    # ------------------------------------------------------------------

    def unset(self, r: Release):
        """Demote tags exclusive to another type and reconcile the fields."""
        keeps_media = r.type.is_in(
            ReleaseType.MOVIE, ReleaseType.SERIES, ReleaseType.EPISODE, ReleaseType.MUSIC, ReleaseType.GAME,
        )
        grab_source = False

        for i, tag in enumerate(r.tags):
            if grab_source and tag.is_(TagType.SOURCE) and not r.source:
                r.source = tag.source()

            ityp = tag.info_type()
            name = _UNSET_FIELDS.get(tag.typ)
            if name is not None and ityp != r.type and tag.info_excl():
                if tag.is_(TagType.PLATFORM) and "Strategy.Guide" in r.other:
                    continue
                value = getattr(r, name)
                s = tag.normalize()
                collected = s in value if isinstance(value, list) else value == s
                if collected:
                    r.tags[i] = tag.retype(TagType.TEXT)
            elif not keeps_media and tag.is_(TagType.SOURCE) and ityp.is_in(
                ReleaseType.MOVIE, ReleaseType.SERIES, ReleaseType.EPISODE,
            ):
                if r.source == tag.normalize():
                    r.source = ""
                r.tags[i] = tag.retype(TagType.TEXT)
                grab_source = True
            elif not keeps_media and tag.is_(TagType.CHANNELS):
                r.tags[i] = tag.retype(TagType.TEXT)
                r.channels = ""

        self._version_date(r)
        self.recollect(r)

    def _version_date(self, r: Release):
        """A vYY.MM.DD version on a movie or episode is an air date."""
        if not r.version or not r.type.is_in(ReleaseType.MOVIE, ReleaseType.EPISODE, ReleaseType.SERIES):
            return
        if r.version[1:].count(".") != 2:
            return
        for i, tag in enumerate(r.tags):
            if not tag.is_(TagType.VERSION) or tag.normalize() != r.version:
                continue
            parts = self.date_like_re.findall(r.version)
            if len(parts) != 3:
                continue
            year = parts[0] if len(parts[0]) == 4 else "20" + parts[0]
            r.tags[i] = Tag.new(TagType.DATE, None, tag.v[0], year, f"{int(parts[1]):02d}", f"{int(parts[2]):02d}")
            r.version = ""
            break

    # ------------------------------------------------------------------
    # Pass 5: special date
    # ------------------------------------------------------------------

    def special_date(self, r: Release):
        """Fold a month name before a magazine's year into its date."""
        if r.type != ReleaseType.MAGAZINE or r.year == 0 or r.month != 0 or r.day != 0 or not r.dates:
            return
        i = r.dates[0] - 1
        while i > 0 and r.tags[i].is_(TagType.DELIM):
            i -= 1
        if i < 0 or not r.tags[i].is_(TagType.TEXT):
            return
        month = month_number(r.tags[i].text())
        if month:
            r.month = month
            r.tags[i] = Tag.new(TagType.DATE, None, r.tags[i].v[0], str(r.year), str(month), "")
            r.dates.append(i)

    # ------------------------------------------------------------------
    # Pass 7: unused text
    # ------------------------------------------------------------------

    def unused(self, r: Release, i: int):
        """Collect leftover text; the last piece may be a checksum or the group."""
        for j in range(i, len(r.tags)):
            if r.tags[j].is_(TagType.TEXT):
                r.unused.append(j)
        if not r.unused:
            return
        s = r.tags[r.unused[-1]].text()
        if not r.sum and self.sum_re.match(s) and any(c.isdigit() for c in s):
            r.sum = s
            r.unused.pop()
        elif not r.group and not self.digits_re.match(s):
            r.group = s
            r.unused.pop()
