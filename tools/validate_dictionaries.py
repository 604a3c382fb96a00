#!/usr/bin/env python3
"""Validate the vocabulary table against its JSON Schema and the loader's rules."""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from jsonschema import Draft7Validator

ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

from rls.dictionary_loader import CsvRows, DictionaryLoader
from rls.exceptions import TagInfoError
from rls.taginfo import TAGINFO_COLUMNS, TagRegistry, load_taginfo

DICTIONARY_DIR = ROOT / "rls" / "dictionaries"


def load_json(path: Path):
    with path.open("r", encoding="utf-8") as handle:
        return json.load(handle)


def rows_to_records(rows: CsvRows) -> List[tuple]:
    """(line, record) pairs keyed by header name; rows with the wrong width are kept as-is for reporting."""
    if not rows:
        return []
    _, header = rows[0]
    records = []
    for line, cells in rows[1:]:
        if len(cells) != len(header):
            records.append((line, cells))
        else:
            records.append((line, dict(zip(header, cells))))
    return records


def validate_with_schema(rows: CsvRows, schema: Dict[str, Any], label: str) -> List[str]:
    validator = Draft7Validator(schema)
    messages = []
    for line, record in rows_to_records(rows):
        if not isinstance(record, dict):
            messages.append(f"{label}: line {line}: expected {len(TAGINFO_COLUMNS)} columns, got {len(record)}")
            continue
        for error in sorted(validator.iter_errors(record), key=lambda e: list(e.path)):
            location = " > ".join(str(p) for p in error.absolute_path) or "row"
            messages.append(f"{label}: line {line}: {location}: {error.message}")
    return messages


def check_header(rows: CsvRows) -> List[str]:
    if not rows:
        return ["vocabulary table is empty"]
    _, header = rows[0]
    if tuple(header) != TAGINFO_COLUMNS:
        return [f"header must be {','.join(TAGINFO_COLUMNS)} (got {','.join(header)})"]
    return []


def check_loader(rows: CsvRows) -> List[str]:
    """Run the real loader: duplicates, release types and pattern compilation."""
    try:
        TagRegistry.from_infos(load_taginfo(rows))
    except TagInfoError as exc:
        return [str(exc)]
    return []


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = list(argv if argv is not None else sys.argv[1:])
    csv_path = Path(args[0]) if args else DICTIONARY_DIR / "taginfo.csv"
    schema_path = Path(args[1]) if len(args) > 1 else DICTIONARY_DIR / "taginfo.schema.json"

    failures: List[str] = []
    try:
        rows = DictionaryLoader.load_rows(str(csv_path.resolve()), use_cache=False)
    except TagInfoError as exc:
        print(f"Dictionary validation failed:\n - {exc}")
        return 1

    failures.extend(check_header(rows))
    failures.extend(validate_with_schema(rows, load_json(schema_path), csv_path.name))
    if not failures:
        failures.extend(check_loader(rows))

    if failures:
        print("Dictionary validation failed:")
        for failure in failures:
            print(f" - {failure}")
        return 1

    print(f"All {len(rows) - 1} vocabulary rows validated successfully.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
