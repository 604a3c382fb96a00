#!/usr/bin/env python3
"""
Default lexer chain in precedence order.
"""

from typing import List

from .audio_lexer import AudioLexer, GenreLexer
from .date_lexer import DateLexer, VersionLexer
from .disc_lexer import DiscLexer, DiscSourceYearLexer
from .lexer import ExtLexer, Lexer, RegexpLexer, RegexpSourceLexer, TrimWhitespaceLexer
from .meta_lexer import GroupLexer, MetaLexer
from .series_lexer import EpisodeLexer, IdLexer, SeriesLexer
from .types import TagType


def default_lexers() -> List[Lexer]:
    """
    Fresh, uninitialized lexers in chain order.

    Once-lexers come first and run a single time; the rest are offered every
    scan position in this order.
    """
    return [
        # once
        TrimWhitespaceLexer(),
        ExtLexer(),
        MetaLexer(),
        GroupLexer(),
        # repeating
        RegexpLexer(TagType.SIZE),
        RegexpLexer(TagType.PLATFORM),
        RegexpLexer(TagType.ARCH),
        RegexpLexer(TagType.SOURCE),
        RegexpLexer(TagType.RESOLUTION),
        RegexpSourceLexer(TagType.COLLECTION),
        SeriesLexer(),
        DiscSourceYearLexer(),
        DiscLexer(),
        DateLexer(),
        VersionLexer(),
        RegexpSourceLexer(TagType.CODEC),
        RegexpSourceLexer(TagType.HDR),
        AudioLexer(),
        RegexpLexer(TagType.CHANNELS),
        RegexpLexer(TagType.OTHER),
        RegexpLexer(TagType.CUT),
        RegexpLexer(TagType.EDITION),
        # language tags are case-sensitive acronyms
        RegexpLexer(TagType.LANGUAGE, ignore_case=False),
        RegexpLexer(TagType.REGION),
        RegexpLexer(TagType.CONTAINER),
        GenreLexer(),
        IdLexer(),
        EpisodeLexer(),
    ]
