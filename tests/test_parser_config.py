#!/usr/bin/env python3
"""
Tests for dictionary loading and the shared parser configuration.
"""

import pytest

from rls import ParserConfig, TagRegistry, TagType, Tokenizer, load_config
from rls.dictionary_loader import DictionaryLoader
from rls.exceptions import TagInfoError
from rls.lexer import RegexpLexer, TrimWhitespaceLexer
from rls.lexer_chain import default_lexers


class TestDictionaryLoader:
    """Tests for reading and caching the bundled tables."""

    def test_rows_carry_line_numbers(self):
        rows = DictionaryLoader.load_rows("taginfo.csv")
        assert rows[0] == (1, ["Type", "Tag", "Title", "Regexp", "Other", "ReleaseType", "TypeExclusive"])
        assert rows[1][0] == 2

    def test_rows_are_cached(self):
        assert DictionaryLoader.load_rows("taginfo.csv") is DictionaryLoader.load_rows("taginfo.csv")

    def test_clear_cache(self):
        first = DictionaryLoader.load_rows("taginfo.csv")
        DictionaryLoader.clear_cache("taginfo.csv")
        assert DictionaryLoader.load_rows("taginfo.csv") is not first

    def test_schema_document(self):
        schema = DictionaryLoader.load_dictionary("taginfo.schema.json")
        assert schema["required"][0] == "Type"

    def test_missing_file(self):
        with pytest.raises(TagInfoError):
            DictionaryLoader.load_rows("missing.csv", use_cache=False)


class TestParserConfig:
    """Tests for building and sharing the lexer configuration."""

    def test_load_config_is_cached(self):
        assert load_config() is load_config()

    def test_default_chain_split(self):
        config = load_config()
        assert [type(lexer).__name__ for lexer in config.once_lexers] == [
            "TrimWhitespaceLexer", "ExtLexer", "MetaLexer", "GroupLexer",
        ]
        assert len(config.multi_lexers) == len(default_lexers()) - 4

    def test_config_is_immutable(self):
        with pytest.raises(Exception):
            load_config().registry = None

    def test_custom_chain(self):
        config = ParserConfig.build(TagRegistry.load(), [TrimWhitespaceLexer(), RegexpLexer(TagType.CODEC)])
        assert len(config.once_lexers) == 1
        result = Tokenizer(config).tokenize(" x264 Movie")
        assert [(t.typ, t.v[0]) for t in result.tags] == [
            (TagType.WHITESPACE, " "),
            (TagType.CODEC, "x264"),
            (TagType.DELIM, " "),
            (TagType.TEXT, "Movie"),
        ]
