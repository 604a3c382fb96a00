#!/usr/bin/env python3
"""
Tests for the cleaner and normalizer transforms.
"""

import pytest

from rls import Collapser, clean, normalize


class TestNormalize:
    """Tests for the lower-cased comparison form."""

    @pytest.mark.parametrize("text,expected", [
        ("The.Matrix", "the matrix"),
        ("The_Matrix", "the matrix"),
        ("  (Hello)  ", "hello"),
        ("AC/DC", "acdc"),
        ("Don't Stop", "dont stop"),
        ("Café Society", "cafe society"),
        ("a - b", "a b"),
        ("Spider-Man", "spider-man"),
        ("Ke$ha", "kesha"),
        ("$100", "100"),
        ("", ""),
        ("...", ""),
    ])
    def test_normalize(self, text, expected):
        assert normalize(text) == expected

    def test_collapses_runs_of_spaces(self):
        assert normalize("a . _ b") == "a b"


class TestClean:
    """Tests for the case-preserving cleaner."""

    def test_trims_and_collapses_whitespace(self):
        assert clean("  Hello \t  World  ") == "Hello World"

    def test_removes_apostrophes_and_keeps_case(self):
        assert clean("Don't") == "Dont"

    def test_keeps_punctuation(self):
        assert clean("A.B-C") == "A.B-C"


class TestCollapser:
    """Tests for custom configurations."""

    def test_without_trim_keeps_single_edge_space(self):
        c = Collapser(False, False, "", " ")
        assert c("  a  b  ") == " a b "

    def test_transformer_can_drop_characters(self):
        c = Collapser(False, False, "", "", lambda r, prev, nxt: None if r == "x" else r)
        assert c("axbxc") == "abc"

    def test_strips_combining_marks(self):
        c = Collapser(True, True, "", " ")
        assert c("ÉLAN") == "elan"
