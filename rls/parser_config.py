#!/usr/bin/env python3
"""
Immutable parser configuration: the vocabulary registry plus the initialized
lexer chain. Built once per vocabulary table and shared by every parse.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Optional, Sequence, Tuple

from .lexer import Lexer
from .lexer_chain import default_lexers
from .taginfo import TagRegistry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ParserConfig:
    """
    Shared, read-only parsing configuration.

    Attributes:
        registry: Sorted vocabulary
        once_lexers: Lexers run a single time before the scan loop
        multi_lexers: Lexers offered at every scan position, in precedence order
    """

    registry: TagRegistry
    once_lexers: Tuple[Lexer, ...]
    multi_lexers: Tuple[Lexer, ...]

    @classmethod
    def build(cls, registry: TagRegistry, lexers: Optional[Sequence[Lexer]] = None) -> "ParserConfig":
        """Initialize lexers against a registry and split them by kind."""
        if lexers is None:
            lexers = default_lexers()
        once, multi = [], []
        for lexer in lexers:
            lexer.initialize(registry)
            (once if lexer.once else multi).append(lexer)
        logger.debug("Initialized %s once-lexers and %s lexers", len(once), len(multi))
        return cls(registry, tuple(once), tuple(multi))


_CONFIGS: Dict[str, ParserConfig] = {}


def load_config(dictionary_name: str = "taginfo.csv") -> ParserConfig:
    """Load (or return the cached) configuration for a vocabulary table."""
    config = _CONFIGS.get(dictionary_name)
    if config is None:
        config = ParserConfig.build(TagRegistry.load(dictionary_name))
        _CONFIGS[dictionary_name] = config
    return config
