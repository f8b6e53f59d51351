"""Sheet styling — banded row formatting and the summary report sheet."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import datetime
from typing import Any, Literal

from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from sheet_assistant.io import WorkbookStore

RowStyle = Literal["header", "band", "plain"]

# ── Style constants ──────────────────────────────────────────────

HEADER_FONT = Font(name="Calibri", bold=True, size=11, color="FFFFFF")
HEADER_FILL = PatternFill(start_color="2F5496", end_color="2F5496", fill_type="solid")
HEADER_ALIGN = Alignment(horizontal="center", vertical="center", wrap_text=True)

BODY_FONT = Font(name="Calibri", size=11)
BAND_FILL = PatternFill(start_color="D6E4F0", end_color="D6E4F0", fill_type="solid")
PLAIN_FILL = PatternFill(fill_type=None)
BODY_ALIGN = Alignment(vertical="center")

DECIMAL_FMT = '#,##0.00'
INT_FMT = '#,##0'

# Summary column name -> number format
_SUMMARY_FORMATS: dict[str, str] = {
    "Count": INT_FMT,
    "Sum": DECIMAL_FMT,
    "Average": DECIMAL_FMT,
}

_AUTO_WIDTH_SAMPLE_ROWS = 300
_EXCEL_FORMULA_PREFIXES = ("=", "+", "-", "@")


# ── Row formatting ───────────────────────────────────────────────


def row_style(row_index: int) -> RowStyle:
    """Style for the 0-based grid row *row_index*.

    Row 0 is the header; data rows alternate, starting with ``plain``.
    """
    if row_index < 0:
        raise ValueError("row_index must be >= 0")
    if row_index == 0:
        return "header"
    return "band" if row_index % 2 == 0 else "plain"


def _style_cell(cell: Any, style: RowStyle) -> None:
    if style == "header":
        cell.font = HEADER_FONT
        cell.fill = HEADER_FILL
        cell.alignment = HEADER_ALIGN
        return
    cell.font = BODY_FONT
    cell.fill = BAND_FILL if style == "band" else PLAIN_FILL
    cell.alignment = BODY_ALIGN


def format_rows(ws: Worksheet, rows: Iterable[int] | None = None) -> int:
    """Apply header/banded styling to the given 1-based *rows* of *ws*.

    Defaults to every row of the used range.  Returns the number of rows
    styled.
    """
    ncols = ws.max_column
    targets = range(1, ws.max_row + 1) if rows is None else rows
    count = 0
    for sheet_row in targets:
        if sheet_row < 1:
            raise ValueError("rows are 1-based and must be >= 1")
        style = row_style(sheet_row - 1)
        for c in range(1, ncols + 1):
            _style_cell(ws.cell(row=sheet_row, column=c), style)
        count += 1
    if rows is None and ws.max_row > 1:
        ws.freeze_panes = "A2"
    return count


# ── Summary sheet ────────────────────────────────────────────────


def _auto_width(ws: Worksheet) -> None:
    max_row = min(ws.max_row, _AUTO_WIDTH_SAMPLE_ROWS + 1)  # include header row
    for c_idx in range(1, ws.max_column + 1):
        letter = get_column_letter(c_idx)
        width = 0
        for row in ws.iter_rows(min_row=1, max_row=max_row, min_col=c_idx, max_col=c_idx):
            cell = row[0]
            width = max(width, len(str(cell.value or "")))
        width += 4
        ws.column_dimensions[letter].width = min(width, 30)


def _excel_value(val: Any) -> Any:
    if isinstance(val, datetime) and val.tzinfo:
        return val.replace(tzinfo=None)

    if isinstance(val, str):
        if val.startswith("'"):
            return val
        stripped = val.lstrip()
        if stripped and stripped[0] in _EXCEL_FORMULA_PREFIXES:
            return f"'{val}"

    return val


def write_summary_sheet(
    store: WorkbookStore, destination_name: str, rows: Sequence[Sequence[Any]]
) -> Worksheet:
    """Replace sheet *destination_name* with the summary table *rows*."""
    ws = store.write_table(
        destination_name, [[_excel_value(v) for v in row] for row in rows]
    )
    if not rows:
        return ws

    header = [str(v) for v in rows[0]]
    for c_idx, name in enumerate(header, 1):
        _style_cell(ws.cell(row=1, column=c_idx), "header")
        fmt = _SUMMARY_FORMATS.get(name)
        if fmt:
            for row in ws.iter_rows(min_row=2, max_row=ws.max_row, min_col=c_idx, max_col=c_idx):
                for cell in row:
                    cell.number_format = fmt
    ws.freeze_panes = "A2"
    _auto_width(ws)
    return ws
