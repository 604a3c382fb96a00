#!/usr/bin/env python3
"""
Release record produced by the builder.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple

from .tag import Tag
from .types import ReleaseType, TagType


@dataclass
class Release:
    """
    Parsed release information.

    Scalar fields keep the first match of their category; list fields
    accumulate every match. The token sequence, the indices of unused text
    and non-primary date tokens, and the head/tail pivot are kept so the
    original input can be reconstructed and inspected.
    """

    type: ReleaseType = ReleaseType.UNKNOWN
    artist: str = ""
    title: str = ""
    subtitle: str = ""
    alt: str = ""
    platform: str = ""
    arch: str = ""
    source: str = ""
    resolution: str = ""
    collection: str = ""
    year: int = 0
    month: int = 0
    day: int = 0
    series: int = 0
    episode: int = 0
    version: str = ""
    disc: str = ""
    codec: List[str] = field(default_factory=list)
    hdr: List[str] = field(default_factory=list)
    audio: List[str] = field(default_factory=list)
    channels: str = ""
    other: List[str] = field(default_factory=list)
    cut: List[str] = field(default_factory=list)
    edition: List[str] = field(default_factory=list)
    language: List[str] = field(default_factory=list)
    size: str = ""
    region: str = ""
    container: str = ""
    genre: str = ""
    id: str = ""
    group: str = ""
    meta: List[str] = field(default_factory=list)
    site: str = ""
    sum: str = ""
    password: str = ""
    req: bool = False
    ext: str = ""

    tags: List[Tag] = field(default_factory=list, repr=False)
    dates: List[int] = field(default_factory=list, repr=False)
    unused: List[int] = field(default_factory=list, repr=False)
    end: int = field(default=0, repr=False)

    def __str__(self) -> str:
        return "".join(t.format("o") for t in self.tags)

    def unused_tags(self) -> List[Tag]:
        """Text tags not absorbed into the title, subtitle or artist."""
        return [self.tags[i] for i in self.unused]

    def date_tags(self) -> List[Tag]:
        """Date tags not chosen as the release date."""
        return [self.tags[i] for i in self.dates]

    def series_episodes(self) -> List[Tuple[int, int]]:
        """
        Every (season, episode) pair, sorted.

        Episode-only tags inherit the season of the last season-bearing tag;
        when such a tag directly follows a '-' delimiter the episodes in
        between are filled in, so 'S01E01-E03' yields episodes 1, 2 and 3.
        """
        v: List[Tuple[int, int]] = []
        last = -1
        for i, tag in enumerate(self.tags):
            if not tag.is_(TagType.SERIES):
                continue
            series, _ = tag.series()
            for episode in tag.episodes():
                s = series
                if s == 0 and last != -1:
                    s, prev_ep = self.tags[last].series()
                    prev = self.tags[i - 1] if i > 0 else None
                    if prev is not None and prev.is_(TagType.DELIM) and str(prev) == "-":
                        v.extend((s, j) for j in range(prev_ep + 1, episode))
                v.append((s, episode))
            if series != 0:
                last = i
        return sorted(v)

    def to_dict(self) -> Dict[str, Any]:
        """Flat record with list fields joined by spaces."""
        episodes = self.series_episodes()
        return {
            "type": str(self.type),
            "artist": self.artist,
            "title": self.title,
            "subtitle": self.subtitle,
            "alt": self.alt,
            "platform": self.platform,
            "arch": self.arch,
            "source": self.source,
            "resolution": self.resolution,
            "collection": self.collection,
            "year": self.year,
            "month": self.month,
            "day": self.day,
            "series": self.series,
            "episode": self.episode,
            "seriesEpisodes": " ".join(f"S{s:02d}E{e:02d}" for s, e in episodes) if len(episodes) > 1 else "",
            "version": self.version,
            "disc": self.disc,
            "codec": " ".join(self.codec),
            "hdr": " ".join(self.hdr),
            "audio": " ".join(self.audio),
            "channels": self.channels,
            "other": " ".join(self.other),
            "cut": " ".join(self.cut),
            "edition": " ".join(self.edition),
            "language": " ".join(self.language),
            "size": self.size,
            "region": self.region,
            "container": self.container,
            "genre": self.genre,
            "id": self.id,
            "group": self.group,
            "meta": " ".join(self.meta),
            "site": self.site,
            "sum": self.sum,
            "pass": self.password,
            "req": 1 if self.req else 0,
            "ext": self.ext,
            "unused": " ".join(t.format("s") for t in self.unused_tags()),
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False)
