from __future__ import annotations

import math
from datetime import date, datetime
from decimal import Decimal

import pytest

from sheet_assistant.models import AlertEvent, ColumnStatistic, Grid, cell_kind, is_numeric_cell


@pytest.mark.parametrize(
    ("value", "kind"),
    [
        (10, "number"),
        (2.5, "number"),
        (Decimal("1.10"), "number"),
        (True, "boolean"),
        (False, "boolean"),
        (None, "empty"),
        ("", "empty"),
        (math.nan, "empty"),
        (datetime(2024, 1, 1, 9, 30), "date"),
        (date(2024, 1, 1), "date"),
        ("10", "text"),
        ("x", "text"),
    ],
)
def test_cell_kind_classifies_values(value: object, kind: str) -> None:
    assert cell_kind(value) == kind


def test_booleans_are_not_numeric() -> None:
    assert not is_numeric_cell(True)
    assert is_numeric_cell(0)


def test_grid_from_values_splits_header_and_pads_short_rows() -> None:
    grid = Grid.from_values([["a", "b", "c"], [1, 2], [1, 2, 3, 4]])

    assert grid.header == ["a", "b", "c"]
    assert grid.rows == [[1, 2, None], [1, 2, 3, 4]]
    assert len(grid) == 2
    assert grid.width == 3


def test_grid_to_values_returns_copies() -> None:
    grid = Grid(header=["a"], rows=[[1]])

    values = grid.to_values()
    values[1][0] = 99

    assert grid.rows == [[1]]


def test_grid_column_names_fill_blank_labels() -> None:
    grid = Grid(header=["Amount", None, "  ", 2024])

    assert grid.column_names() == ["Amount", "Column 2", "Column 3", "2024"]


def test_column_statistic_rounds_only_when_rendered() -> None:
    stat = ColumnStatistic(name="x", count=3, sum=10.005 + 0.001, average=3.3353, max=5, min=1)

    assert stat.sum == pytest.approx(10.006)
    assert stat.to_row() == ["x", 3, 10.01, 3.34, 5, 1]


def test_column_statistic_rejects_bad_count() -> None:
    with pytest.raises(ValueError, match="count"):
        ColumnStatistic(name="x", count=-1, sum=0, average=0, max=0, min=0)

    with pytest.raises(TypeError, match="count"):
        ColumnStatistic(name="x", count=True, sum=0, average=0, max=0, min=0)  # type: ignore[arg-type]


def test_alert_event_sheet_row_is_one_based() -> None:
    event = AlertEvent(row_index=4, column_index=1, value=12.0, threshold=10.0)

    assert event.sheet_row == 5


def test_alert_event_rejects_negative_indices() -> None:
    with pytest.raises(ValueError, match="row_index"):
        AlertEvent(row_index=-1, column_index=0, value=1.0, threshold=0.0)
