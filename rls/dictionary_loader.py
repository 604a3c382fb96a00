#!/usr/bin/env python3
"""
Dictionary loader utility for centralized dictionary loading and caching.

Provides a single point of access for the vocabulary table and its schema,
with caching to avoid redundant file reads when several parser
configurations are built in one process.
"""

import csv
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from .exceptions import TagInfoError

logger = logging.getLogger(__name__)

# (line number, cells) pairs; line 1 is the header
CsvRows = List[Tuple[int, List[str]]]


class DictionaryLoader:
    """Centralized dictionary loader with caching support."""

    # Cache for loaded dictionaries to avoid redundant file reads
    _cache: Dict[str, Any] = {}

    @staticmethod
    def get_dictionary_path(dictionary_name: str = "taginfo.csv") -> Path:
        """
        Get the absolute path to a dictionary file.

        Args:
            dictionary_name: Name of the dictionary file, or an absolute path

        Returns:
            Absolute path to the dictionary file
        """
        path = Path(dictionary_name)
        if path.is_absolute():
            return path
        return Path(__file__).resolve().parent / "dictionaries" / dictionary_name

    @classmethod
    def load_rows(cls, dictionary_name: str = "taginfo.csv", use_cache: bool = True) -> CsvRows:
        """
        Load a delimited table from the dictionaries folder.

        Args:
            dictionary_name: Name of the CSV file to load
            use_cache: Whether to use cached version if available

        Returns:
            List of (line number, cells) pairs, header included

        Raises:
            TagInfoError: If the file cannot be read
        """
        if use_cache and dictionary_name in cls._cache:
            return cls._cache[dictionary_name]

        dictionary_path = cls.get_dictionary_path(dictionary_name)
        try:
            with open(dictionary_path, "r", encoding="utf-8", newline="") as f:
                rows = [
                    (line_no, cells)
                    for line_no, cells in enumerate(csv.reader(f), 1)
                    if cells
                ]
        except (FileNotFoundError, IOError, csv.Error) as exc:
            raise TagInfoError(f"cannot read {dictionary_path}: {exc}") from exc

        logger.debug("Read %s rows from %s", len(rows), dictionary_path)
        if use_cache:
            cls._cache[dictionary_name] = rows
        return rows

    @classmethod
    def load_dictionary(cls, dictionary_name: str, use_cache: bool = True) -> Optional[Any]:
        """
        Load a JSON document from the dictionaries folder.

        Args:
            dictionary_name: Name of the JSON file to load
            use_cache: Whether to use cached version if available

        Returns:
            Parsed JSON contents, or None if loading fails
        """
        if use_cache and dictionary_name in cls._cache:
            return cls._cache[dictionary_name]

        dictionary_path = cls.get_dictionary_path(dictionary_name)
        try:
            with open(dictionary_path, "r", encoding="utf-8") as f:
                dictionary = json.load(f)
        except (FileNotFoundError, json.JSONDecodeError, IOError) as exc:
            logger.warning("Could not load %s: %s", dictionary_path, exc)
            return None

        if use_cache:
            cls._cache[dictionary_name] = dictionary
        return dictionary

    @classmethod
    def clear_cache(cls, dictionary_name: Optional[str] = None) -> None:
        """
        Clear the dictionary cache.

        Args:
            dictionary_name: Specific dictionary to clear, or None to clear all
        """
        if dictionary_name:
            cls._cache.pop(dictionary_name, None)
        else:
            cls._cache.clear()

    @classmethod
    def preload_all(cls) -> None:
        """Preload the vocabulary table and its schema into cache."""
        cls.load_rows("taginfo.csv")
        cls.load_dictionary("taginfo.schema.json")
