#!/usr/bin/env python3
"""
Excel report helpers for parsed releases.

Thin wrappers around openpyxl shared by the command line tool and the
evaluation harness: one table-styled sheet per data set, auto-sized columns
and optional highlighting of cells that need attention.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence

from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.table import Table, TableStyleInfo

from .release import Release

HighlightPredicate = Callable[[str, Any], bool]

# Release fields shown in report sheets, in column order
RELEASE_COLUMNS = (
    "type", "artist", "title", "subtitle", "alt", "year", "month", "day",
    "series", "episode", "seriesEpisodes", "platform", "arch", "source",
    "resolution", "collection", "version", "disc", "codec", "hdr", "audio",
    "channels", "other", "cut", "edition", "language", "size", "region",
    "container", "genre", "id", "group", "meta", "site", "sum", "pass",
    "req", "ext", "unused",
)

MAX_COLUMN_WIDTH = 60


@dataclass(frozen=True)
class ExcelSheetData:
    """
    Describes a sheet to be written to the workbook.

    Attributes:
        name: Sheet/tab name.
        headers: Ordered list of column headers.
        rows: Row values already ordered to match headers.
        highlight: Optional predicate over (header, value) marking cells yellow.
        bold_headers: Headers whose non-empty cells are rendered bold.
    """

    name: str
    headers: Sequence[str]
    rows: Sequence[Sequence[Any]]
    highlight: Optional[HighlightPredicate] = None
    bold_headers: Sequence[str] = ()


def release_row(name: str, release: Release) -> List[Any]:
    """Input name followed by the report columns of a parsed release."""
    data = release.to_dict()
    return [name] + [data[column] for column in RELEASE_COLUMNS]


def release_sheet(name: str, parsed: Sequence[tuple]) -> ExcelSheetData:
    """
    Build a sheet from (input name, Release) pairs.

    Cells in the 'unused' column are highlighted when they hold leftover
    text, and titles are rendered bold.
    """
    return ExcelSheetData(
        name=name,
        headers=["input"] + list(RELEASE_COLUMNS),
        rows=[release_row(src, release) for src, release in parsed],
        highlight=lambda header, value: header == "unused" and bool(value),
        bold_headers=("title",),
    )


def summary_sheet(name: str, counts: Dict[str, int]) -> ExcelSheetData:
    """Two-column sheet of release type counts, most frequent first."""
    rows = sorted(counts.items(), key=lambda item: (-item[1], item[0]))
    return ExcelSheetData(name=name, headers=["type", "count"], rows=[list(r) for r in rows])


def _write_excel_sheet(ws, sheet: ExcelSheetData) -> None:
    """Render a single sheet using provided headers/rows and optional highlighting."""
    ws.title = sheet.name

    headers = list(sheet.headers)
    for col_idx, header in enumerate(headers, 1):
        ws.cell(row=1, column=col_idx, value=header)

    yellow_fill = PatternFill(start_color="FFFF00", end_color="FFFF00", fill_type="solid")
    bold_font = Font(bold=True)
    bold_columns = {headers.index(h) for h in sheet.bold_headers if h in headers}

    for row_idx, row in enumerate(sheet.rows, 2):
        for col_idx, value in enumerate(row, 1):
            cell = ws.cell(row=row_idx, column=col_idx, value=value)
            header = headers[col_idx - 1] if col_idx <= len(headers) else ""
            if sheet.highlight is not None and sheet.highlight(header, value):
                cell.fill = yellow_fill
            if (col_idx - 1) in bold_columns and value not in (None, ""):
                cell.font = bold_font

    for col_idx in range(1, len(headers) + 1):
        col_letter = get_column_letter(col_idx)
        max_length = len(headers[col_idx - 1])
        for cell in ws[col_letter]:
            if cell.value is not None:
                max_length = max(max_length, len(str(cell.value)))
        ws.column_dimensions[col_letter].width = min(max_length + 2, MAX_COLUMN_WIDTH)

    if sheet.rows:
        last_col = get_column_letter(len(headers))
        table = Table(
            displayName="".join(c for c in sheet.name if c.isalnum()) + "Table",
            ref=f"A1:{last_col}{len(sheet.rows) + 1}",
        )
        table.tableStyleInfo = TableStyleInfo(
            name="TableStyleMedium9",
            showFirstColumn=False,
            showLastColumn=False,
            showRowStripes=True,
            showColumnStripes=False,
        )
        ws.add_table(table)


def write_excel_workbook(output_path: Path | str, sheets: Sequence[ExcelSheetData]) -> Path:
    """
    Write a workbook consisting of the provided sheets.

    Args:
        output_path: Destination path for the workbook.
        sheets: Ordered sheet definitions to render.

    Returns:
        Path to the written workbook.
    """
    if not sheets:
        raise ValueError("At least one sheet must be provided to write a workbook.")

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    wb = Workbook()
    for idx, sheet in enumerate(sheets):
        ws = wb.active if idx == 0 else wb.create_sheet()
        _write_excel_sheet(ws, sheet)

    wb.save(output_path)
    return output_path
