"""Grid operations — load, summarize, deduplicate, threshold check.

Everything here is a pure function of its inputs except :func:`load_grid`,
which reads from a data source.
"""

from __future__ import annotations

from collections.abc import Hashable, Sequence
from datetime import date, datetime, time
from decimal import Decimal
from numbers import Integral
from typing import Any, Protocol

import pandas as pd

from sheet_assistant import SUMMARY_COLUMNS
from sheet_assistant.errors import EmptySource, NoNumericColumns
from sheet_assistant.models import (
    AlertEvent,
    ColumnStatistic,
    Grid,
    cell_kind,
    is_numeric_cell,
)

JOINED_KEY_SEPARATOR = "||"


class DataSource(Protocol):
    def get_grid(self, name: str) -> list[list[Any]]: ...


# ── Loading ──────────────────────────────────────────────────────


def load_grid(source: DataSource, source_name: str) -> Grid:
    """Read sheet *source_name* and split it into header + data rows.

    Raises
    ------
    SourceNotFound
        Propagated from *source* when the sheet does not exist.
    EmptySource
        If the sheet has fewer than two rows.
    """
    values = source.get_grid(source_name)
    if len(values) < 2:
        raise EmptySource(source_name, len(values))
    return Grid.from_values(values)


# ── Column aggregation ──────────────────────────────────────────


def _numeric_cells(grid: Grid, col: int) -> list[float]:
    return [float(row[col]) for row in grid.rows if is_numeric_cell(row[col])]


def summarize(grid: Grid) -> list[ColumnStatistic]:
    """Return one :class:`ColumnStatistic` per column holding numbers.

    Columns without a single numeric cell are left out.  Output follows the
    header's column order.

    Raises
    ------
    NoNumericColumns
        If no column has a numeric cell.
    """
    names = grid.column_names()
    stats: list[ColumnStatistic] = []
    for col, name in enumerate(names):
        nums = _numeric_cells(grid, col)
        if not nums:
            continue
        s = pd.Series(nums, dtype="float64")
        total = float(s.sum())
        stats.append(
            ColumnStatistic(
                name=name,
                count=len(nums),
                sum=total,
                average=total / len(nums),
                max=float(s.max()),
                min=float(s.min()),
            )
        )
    if not stats:
        raise NoNumericColumns()
    return stats


def summary_rows(stats: Sequence[ColumnStatistic]) -> list[list[Any]]:
    """Render *stats* as a table (header first) for the report sheet."""
    return [list(SUMMARY_COLUMNS), *(stat.to_row() for stat in stats)]


# ── Deduplication ───────────────────────────────────────────────


def _number_key(value: Any) -> int | float:
    # Integers stay exact; float() would merge ids above 2**53.
    if isinstance(value, Integral):
        return int(value)
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    number = float(value)
    return int(number) if number.is_integer() else number


def _typed_cell_key(value: Any) -> tuple[str, Hashable]:
    kind = cell_kind(value)
    if kind == "number":
        return kind, _number_key(value)
    if kind == "empty":
        return kind, ""
    if kind == "date":
        if isinstance(value, (datetime, date, time)):
            return kind, value.isoformat()
        return kind, str(value)
    if kind == "boolean":
        return kind, bool(value)
    return kind, str(value)


def duplicate_key(row: Sequence[Any], mode: str = "typed") -> Hashable:
    """Key under which two rows count as duplicates.

    ``typed`` compares ``(kind, value)`` pairs, so the text ``"10"`` and the
    number ``10`` differ.  ``joined`` concatenates the stringified cells with
    :data:`JOINED_KEY_SEPARATOR`.
    """
    if mode == "typed":
        return tuple(_typed_cell_key(v) for v in row)
    if mode == "joined":
        return JOINED_KEY_SEPARATOR.join("" if v is None else str(v) for v in row)
    raise ValueError(f"Invalid dedupe key mode: {mode!r}. Use typed/joined.")


def deduplicate(grid: Grid, key_mode: str = "typed") -> tuple[Grid, int]:
    """Drop data rows that repeat an earlier row; return ``(grid, removed)``.

    The header is never compared.  Kept rows stay in their original order.
    """
    seen: set[Hashable] = set()
    kept: list[list[Any]] = []
    removed = 0
    for row in grid.rows:
        key = duplicate_key(row, key_mode)
        if key in seen:
            removed += 1
            continue
        seen.add(key)
        kept.append(list(row))
    return Grid(header=list(grid.header), rows=kept), removed


# ── Threshold monitor ───────────────────────────────────────────


def check_threshold(
    row: Sequence[Any],
    row_index: int,
    watched_column: int,
    threshold: float,
    *,
    header: Sequence[Any] | None = None,
) -> AlertEvent | None:
    """Return an :class:`AlertEvent` if the watched cell is above *threshold*.

    *row_index* is the 0-based grid position (0 is the header, which never
    alerts).  Equality does not fire.
    """
    if row_index <= 0 or watched_column < 0 or watched_column >= len(row):
        return None
    value = row[watched_column]
    if not is_numeric_cell(value) or not float(value) > threshold:
        return None

    column_name = ""
    if header is not None and watched_column < len(header):
        column_name = Grid(header=list(header)).column_names()[watched_column]
    return AlertEvent(
        row_index=row_index,
        column_index=watched_column,
        value=float(value),
        threshold=float(threshold),
        column_name=column_name,
    )
