"""Data models used across the package — grid, column statistics, alerts."""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import date, datetime, time
from decimal import Decimal
from numbers import Integral, Real
from typing import Any, Literal

CellKind = Literal["number", "text", "boolean", "empty", "date"]


def _to_non_negative_int(value: Any, field_name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, Integral):
        raise TypeError(f"{field_name} must be an integer")
    result = int(value)
    if result < 0:
        raise ValueError(f"{field_name} must be >= 0")
    return result


# ── Cells ────────────────────────────────────────────────────────


def cell_kind(value: Any) -> CellKind:
    """Classify a raw cell value into one of the five semantic kinds."""
    # bool subclasses int, so it has to be checked first.
    if isinstance(value, bool):
        return "boolean"
    if value is None:
        return "empty"
    if isinstance(value, (Real, Decimal)):
        if math.isnan(float(value)):
            return "empty"
        return "number"
    if isinstance(value, (datetime, date, time)):
        return "date"
    if isinstance(value, str) and value == "":
        return "empty"
    return "text"


def is_numeric_cell(value: Any) -> bool:
    return cell_kind(value) == "number"


# ── Grid ─────────────────────────────────────────────────────────


@dataclass
class Grid:
    """Header row plus data rows, as read from a sheet.

    Data rows shorter than the header are padded with ``None``; longer rows
    keep their extra cells.
    """

    header: list[Any] = field(default_factory=list)
    rows: list[list[Any]] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.header = list(self.header)
        width = len(self.header)
        padded: list[list[Any]] = []
        for row in self.rows:
            values = list(row)
            if len(values) < width:
                values.extend([None] * (width - len(values)))
            padded.append(values)
        self.rows = padded

    @classmethod
    def from_values(cls, values: Sequence[Sequence[Any]]) -> Grid:
        if not values:
            return cls()
        return cls(header=list(values[0]), rows=[list(r) for r in values[1:]])

    def to_values(self) -> list[list[Any]]:
        return [list(self.header), *(list(r) for r in self.rows)]

    @property
    def width(self) -> int:
        return len(self.header)

    def column_names(self) -> list[str]:
        names: list[str] = []
        for idx, label in enumerate(self.header, start=1):
            text = "" if label is None else str(label).strip()
            names.append(text or f"Column {idx}")
        return names

    def __len__(self) -> int:
        return len(self.rows)


# ── Derived records ──────────────────────────────────────────────


@dataclass(frozen=True)
class ColumnStatistic:
    """Aggregate of the numeric cells of one column.

    ``sum`` and ``average`` keep full precision; rounding happens in
    :meth:`to_row` when the table is rendered.
    """

    name: str
    count: int
    sum: float
    average: float
    max: float
    min: float

    def __post_init__(self) -> None:
        object.__setattr__(self, "count", _to_non_negative_int(self.count, "count"))

    def to_row(self) -> list[Any]:
        return [
            self.name,
            self.count,
            round(self.sum, 2),
            round(self.average, 2),
            self.max,
            self.min,
        ]


@dataclass(frozen=True)
class AlertEvent:
    """A watched cell exceeded the threshold; lives for one notification."""

    row_index: int
    column_index: int
    value: float
    threshold: float
    column_name: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "row_index", _to_non_negative_int(self.row_index, "row_index"))
        object.__setattr__(
            self, "column_index", _to_non_negative_int(self.column_index, "column_index")
        )

    @property
    def sheet_row(self) -> int:
        """1-based row number as shown in the spreadsheet."""
        return self.row_index + 1
