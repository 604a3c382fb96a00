#!/usr/bin/env python3
"""
Evaluation harness for the release name parser.

Provides two modes:
- batch: parse every name of a text file or Excel sheet and report coverage
- fixtures: replay expected-value fixtures and report pass/fail counts

Outputs:
- Excel workbook with parsed results and a per-type summary
- JSON metrics file for automation
"""

import sys
import argparse
import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union
from collections import Counter

# Add parent directory to path to import parser modules
ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

from openpyxl import load_workbook

from rls import Release
from rls.excel_writer import release_sheet, summary_sheet, write_excel_workbook
from rlsparse import ReleaseParser

logger = logging.getLogger("evaluate")

# to_dict fields holding space-joined lists; compared order-insensitively
LIST_FIELDS = frozenset({"codec", "hdr", "audio", "other", "cut", "edition", "language", "meta", "seriesEpisodes", "unused"})

# Fields reported in the coverage metrics
COVERAGE_FIELDS = ("title", "year", "series", "episode", "source", "resolution", "codec", "audio", "group")


def parse_arguments(argv: Optional[Sequence[str]] = None):
    parser = argparse.ArgumentParser(
        description='Evaluate the release name parser with coverage metrics or fixtures'
    )
    parser.add_argument(
        '--input',
        help='Input file containing release names (one per line) or an Excel sheet with an "input" column'
    )
    parser.add_argument(
        '--fixtures',
        help='JSON fixtures file with expected values to replay'
    )
    parser.add_argument(
        '--sheet',
        help='Sheet name to read from an Excel input (default: active sheet)'
    )
    parser.add_argument(
        '--output-excel',
        help='Output Excel file path (default: metrics/batch-YYYYMMDD-HHMMSS.xlsx)'
    )
    parser.add_argument(
        '--output-json',
        help='Output JSON metrics file (default: metrics/batch-YYYYMMDD-HHMMSS.json)'
    )
    parser.add_argument(
        '--limit',
        type=int,
        help='Limit number of names to process'
    )
    parser.add_argument(
        '--no-write',
        action='store_true',
        help='Dry-run mode: skip writing output files'
    )
    parser.add_argument(
        '--skip-excel',
        action='store_true',
        help='Skip Excel output for faster CI runs'
    )

    args = parser.parse_args(argv)
    if not args.input and not args.fixtures:
        parser.error("one of --input or --fixtures is required")
    return args


def read_input_file(filepath: Union[str, Path], limit: Optional[int] = None,
                    sheet_name: Optional[str] = None) -> List[str]:
    """
    Read input file and return list of release names.
    Handles text files and Excel files.
    """
    filepath = Path(filepath)
    names = []

    if filepath.suffix == '.xlsx':
        wb = load_workbook(filepath, read_only=True)
        try:
            if sheet_name:
                if sheet_name not in wb.sheetnames:
                    raise ValueError(f"Could not find '{sheet_name}' sheet in Excel file. Sheets present: {wb.sheetnames}")
                ws = wb[sheet_name]
            else:
                ws = wb.active

            if ws is None:
                raise ValueError("Excel file has no usable worksheet")

            # Find the 'input' column (first row is the header)
            headers = [cell.value for cell in next(ws.iter_rows(min_row=1, max_row=1))]
            input_col_idx = None
            for idx, header in enumerate(headers):
                if header is not None and str(header).strip().lower() == 'input':
                    input_col_idx = idx
                    break

            if input_col_idx is None:
                raise ValueError("Could not find 'input' column in Excel file")

            for row in ws.iter_rows(min_row=2, values_only=True):
                if row and input_col_idx < len(row) and row[input_col_idx]:
                    names.append(str(row[input_col_idx]))
                    if limit and len(names) >= limit:
                        break
        finally:
            wb.close()
    else:
        with filepath.open('r', encoding='utf-8', errors='replace') as f:
            for line in f:
                line = line.strip()
                if line:
                    names.append(line)
                    if limit and len(names) >= limit:
                        break

    return names


def calculate_batch_metrics(parsed: List[Tuple[str, Release]]) -> Dict[str, Any]:
    """
    Calculate coverage metrics for a batch.

    Metrics include:
    - Release type histogram
    - Field coverage (share of rows with each field populated)
    - Rows with leftover text
    """
    total_rows = len(parsed)
    records = [release.to_dict() for _, release in parsed]

    field_coverage = {
        field: round(sum(1 for r in records if r[field]) / total_rows, 4) if total_rows else 0.0
        for field in COVERAGE_FIELDS
    }
    types = Counter(r["type"] for r in records)

    return {
        'mode': 'batch',
        'total_rows': total_rows,
        'type_histogram': dict(types.most_common()),
        'field_coverage': field_coverage,
        'rows_with_unused_text': sum(1 for r in records if r["unused"]),
        'timestamp': datetime.now().isoformat()
    }


def load_fixtures(filepath: Union[str, Path]) -> List[Dict[str, Any]]:
    """Load a list of {"input": ..., "expected": {...}} cases."""
    with Path(filepath).open('r', encoding='utf-8') as f:
        fixtures = json.load(f)
    if not isinstance(fixtures, list):
        raise ValueError(f"{filepath}: fixtures must be a JSON array")
    return fixtures


def _comparable(field: str, value: Any) -> Any:
    if isinstance(value, (list, tuple)):
        value = " ".join(str(v) for v in value)
    if field in LIST_FIELDS:
        return sorted(str(value).split())
    return str(value)


def check_fixture(parser: ReleaseParser, case: Dict[str, Any]) -> List[str]:
    """
    Compare one fixture against the parser output.

    Only non-empty expected fields are checked; list fields are compared
    sorted. The reconstructed input must equal the original.

    Returns:
        Mismatch descriptions (empty when the case passes)
    """
    name = case["input"]
    release = parser.parse(name)
    actual = release.to_dict()
    problems = []

    if str(release) != name:
        problems.append(f"round trip: {str(release)!r} != {name!r}")

    for field, expected in (case.get("expected") or {}).items():
        if expected in ("", 0, None):
            continue
        if field not in actual:
            problems.append(f"{field}: unknown field")
            continue
        if _comparable(field, actual[field]) != _comparable(field, expected):
            problems.append(f"{field}: expected {expected!r}, got {actual[field]!r}")
    return problems


def run_fixtures(parser: ReleaseParser, fixtures: List[Dict[str, Any]]) -> Dict[str, Any]:
    """Replay every fixture and summarize the results."""
    failures = []
    for case in fixtures:
        problems = check_fixture(parser, case)
        if problems:
            failures.append({'input': case["input"], 'problems': problems})
    return {
        'mode': 'fixtures',
        'total': len(fixtures),
        'passed': len(fixtures) - len(failures),
        'failed': len(failures),
        'failures': failures,
        'timestamp': datetime.now().isoformat()
    }


def write_excel_output(parsed: List[Tuple[str, Release]], output_path: Union[str, Path]) -> Path:
    """Write the results sheet and the per-type summary sheet."""
    counts = Counter(str(release.type) for _, release in parsed)
    return write_excel_workbook(output_path, [
        release_sheet("Results", parsed),
        summary_sheet("Summary", dict(counts)),
    ])


def write_json_metrics(metrics: Dict[str, Any], output_path: Union[str, Path]):
    """Write metrics to JSON file."""
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with output_path.open('w', encoding='utf-8') as f:
        json.dump(metrics, f, indent=2)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main evaluation harness entry point."""
    args = parse_arguments(argv)
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    parser = ReleaseParser()
    status = 0

    if args.fixtures:
        logger.info("Replaying fixtures from %s", args.fixtures)
        results = run_fixtures(parser, load_fixtures(args.fixtures))
        print(f"Fixtures: {results['passed']}/{results['total']} passed")
        for failure in results['failures']:
            print(f"\n  {failure['input']}")
            for problem in failure['problems']:
                print(f"    {problem}")
        if results['failed']:
            status = 1

    if not args.input:
        return status

    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    output_excel = Path(args.output_excel) if args.output_excel else Path("metrics") / f"batch-{timestamp}.xlsx"
    output_json = Path(args.output_json) if args.output_json else Path("metrics") / f"batch-{timestamp}.json"

    names = read_input_file(args.input, args.limit, sheet_name=args.sheet)
    logger.info("Found %s release names to process", len(names))

    parsed = []
    for idx, name in enumerate(names, 1):
        if idx % 1000 == 0:
            logger.info("Processed %s/%s...", idx, len(names))
        parsed.append((name, parser.parse(name)))

    metrics = calculate_batch_metrics(parsed)

    print("\n=== Metrics Summary ===")
    print(f"Total rows: {metrics['total_rows']}")
    print("\nRelease types:")
    for typ, count in metrics['type_histogram'].items():
        print(f"  {typ}: {count}")
    print("\nField coverage:")
    for field, coverage in metrics['field_coverage'].items():
        print(f"  {field}: {coverage:.2%}")
    print(f"\nRows with unused text: {metrics['rows_with_unused_text']}")

    if not args.no_write:
        if not args.skip_excel:
            logger.info("Writing Excel output to %s", output_excel)
            write_excel_output(parsed, output_excel)
        logger.info("Writing JSON metrics to %s", output_json)
        write_json_metrics(metrics, output_json)

    return status


if __name__ == '__main__':
    sys.exit(main())
