#!/usr/bin/env python3
"""
Token and release type enumerations shared by the lexers and the builder.
"""

from enum import Enum, IntEnum


class TagType(IntEnum):
    """Category of a lexed token."""

    WHITESPACE = 0
    DELIM = 1
    TEXT = 2
    PLATFORM = 3
    ARCH = 4
    SOURCE = 5
    RESOLUTION = 6
    COLLECTION = 7
    DATE = 8
    SERIES = 9
    VERSION = 10
    DISC = 11
    CODEC = 12
    HDR = 13
    AUDIO = 14
    CHANNELS = 15
    OTHER = 16
    CUT = 17
    EDITION = 18
    LANGUAGE = 19
    SIZE = 20
    REGION = 21
    CONTAINER = 22
    GENRE = 23
    ID = 24
    GROUP = 25
    META = 26
    EXT = 27

    @property
    def category(self) -> str:
        """Vocabulary category name used in the dictionary table (e.g. 'source')."""
        return self.name.lower()

    @property
    def title(self) -> str:
        """Display name used when dumping tokens (e.g. 'Source')."""
        return self.name.capitalize()


class ReleaseType(str, Enum):
    """Inferred kind of release."""

    UNKNOWN = "unknown"
    APP = "app"
    AUDIOBOOK = "audiobook"
    BOOK = "book"
    COMIC = "comic"
    EDUCATION = "education"
    EPISODE = "episode"
    GAME = "game"
    MAGAZINE = "magazine"
    MOVIE = "movie"
    MUSIC = "music"
    SERIES = "series"

    @classmethod
    def from_string(cls, s: str) -> "ReleaseType":
        """
        Resolve a release type name, case-insensitively.

        Returns UNKNOWN for an empty or unrecognized name; callers that need to
        reject unknown names compare the result against the input.
        """
        if not s:
            return cls.UNKNOWN
        try:
            return cls(s.lower())
        except ValueError:
            return cls.UNKNOWN

    def is_in(self, *types: "ReleaseType") -> bool:
        return self in types

    def __str__(self) -> str:
        return self.value
