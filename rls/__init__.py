"""
Release name parser package.

This package contains the parsing modules:
- taginfo: Vocabulary registry (tag definitions, precedence sorting, lookup)
- collapser: Rune-level normalizer used for vocabulary lookups
- tag: Lexed token with captured values
- lexer, meta_lexer, series_lexer, disc_lexer, date_lexer, audio_lexer: Lexers
- lexer_chain: Default lexer ordering
- parser_config: Shared, immutable registry plus initialized lexers
- tokenizer: Splits a release name into tags
- builder: Semantic passes producing a Release
- title_extractor: Title, subtitle, alternate title and artist extraction
- release: The parsed Release record
"""

from .exceptions import LexerConfigError, RlsError, TagInfoError
from .types import ReleaseType, TagType
from .taginfo import TagFinder, TagInfo, TagRegistry
from .collapser import Collapser, clean, normalize
from .tag import Tag
from .parser_config import ParserConfig, load_config
from .tokenizer import TokenizationResult, Tokenizer
from .release import Release
from .builder import ReleaseBuilder
from .title_extractor import TitleExtractor

__all__ = [
    'RlsError',
    'TagInfoError',
    'LexerConfigError',
    'ReleaseType',
    'TagType',
    'TagInfo',
    'TagFinder',
    'TagRegistry',
    'Collapser',
    'clean',
    'normalize',
    'Tag',
    'ParserConfig',
    'load_config',
    'Tokenizer',
    'TokenizationResult',
    'Release',
    'ReleaseBuilder',
    'TitleExtractor',
]
