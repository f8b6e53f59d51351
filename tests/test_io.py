from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path

import pytest
from openpyxl import Workbook, load_workbook

from sheet_assistant.errors import SourceNotFound
from sheet_assistant.io import WorkbookStore, read_json, write_json


def _make_workbook(path: Path, sheets: dict[str, list[list[object]]]) -> Path:
    wb = Workbook()
    active = wb.active
    if active is not None:
        wb.remove(active)
    for name, rows in sheets.items():
        ws = wb.create_sheet(title=name)
        for row in rows:
            ws.append(row)
    wb.save(path)
    return path


def test_open_missing_workbook_raises(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError, match="Workbook not found"):
        WorkbookStore.open(tmp_path / "missing.xlsx")


def test_open_rejects_unsupported_extension(tmp_path: Path) -> None:
    path = tmp_path / "data.csv"
    path.write_text("a,b\n", encoding="utf-8")

    with pytest.raises(ValueError, match="Unsupported file type"):
        WorkbookStore.open(path)


def test_get_grid_returns_rows_and_drops_trailing_blank_rows(tmp_path: Path) -> None:
    path = _make_workbook(
        tmp_path / "book.xlsx",
        {"Data": [["name", "amount"], ["a", 1], ["b", 2.5], [None, None]]},
    )
    store = WorkbookStore.open(path)

    assert store.get_grid("Data") == [["name", "amount"], ["a", 1], ["b", 2.5]]


def test_get_grid_on_empty_sheet_returns_no_rows(tmp_path: Path) -> None:
    path = _make_workbook(tmp_path / "book.xlsx", {"Data": []})

    assert WorkbookStore.open(path).get_grid("Data") == []


def test_missing_sheet_raises_source_not_found(tmp_path: Path) -> None:
    path = _make_workbook(tmp_path / "book.xlsx", {"Data": [["a"]]})
    store = WorkbookStore.open(path)

    with pytest.raises(SourceNotFound, match="Orders") as excinfo:
        store.get_grid("Orders")

    assert excinfo.value.available == ["Data"]
    assert isinstance(excinfo.value, LookupError)


def test_replace_grid_leaves_no_stale_trailing_rows(tmp_path: Path) -> None:
    path = _make_workbook(
        tmp_path / "book.xlsx",
        {"Data": [["h"], [1], [2], [3], [4]]},
    )
    store = WorkbookStore.open(path)

    store.replace_grid("Data", [["h"], [1]])
    store.save()

    reopened = WorkbookStore.open(path)
    assert reopened.get_grid("Data") == [["h"], [1]]
    assert reopened.worksheet("Data").max_row == 2


def test_write_table_replaces_sheet_in_place(tmp_path: Path) -> None:
    path = _make_workbook(
        tmp_path / "book.xlsx",
        {"Data": [["h"]], "Summary": [["old"], ["stale"], ["rows"]], "Notes": [["n"]]},
    )
    store = WorkbookStore.open(path)

    store.write_table("Summary", [["new"]])
    store.save()

    wb = load_workbook(path)
    assert wb.sheetnames == ["Data", "Summary", "Notes"]
    assert [list(r) for r in wb["Summary"].iter_rows(values_only=True)] == [["new"]]


def test_write_table_creates_missing_sheet(tmp_path: Path) -> None:
    path = _make_workbook(tmp_path / "book.xlsx", {"Data": [["h"]]})
    store = WorkbookStore.open(path)

    store.write_table("Summary", [["a", 1]])

    assert store.sheet_names() == ["Data", "Summary"]
    assert store.get_grid("Summary") == [["a", 1]]


def test_set_cell_is_one_based(tmp_path: Path) -> None:
    path = _make_workbook(tmp_path / "book.xlsx", {"Data": [["a", "b"], [1, 2]]})
    store = WorkbookStore.open(path)

    store.set_cell("Data", 2, 2, 20)

    assert store.get_grid("Data") == [["a", "b"], [1, 20]]
    with pytest.raises(ValueError, match="1-based"):
        store.set_cell("Data", 0, 1, "x")


def test_save_does_not_leave_temp_file(tmp_path: Path) -> None:
    path = _make_workbook(tmp_path / "book.xlsx", {"Data": [["a"]]})
    store = WorkbookStore.open(path)

    assert store.save() == path
    assert sorted(p.name for p in tmp_path.iterdir()) == ["book.xlsx"]


def test_write_json_is_deterministic_and_atomic(tmp_path: Path) -> None:
    out = tmp_path / "nested" / "data.json"

    write_json(out, {"b": 1, "a": datetime(2024, 1, 2, 3, 4, 5), "p": Path("x")})

    text = out.read_text(encoding="utf-8")
    assert text.endswith("\n")
    assert list(json.loads(text)) == ["a", "b", "p"]
    assert json.loads(text)["a"] == "2024-01-02T03:04:05"
    assert not (tmp_path / "nested" / "data.json.tmp").exists()


def test_write_json_rejects_unknown_types(tmp_path: Path) -> None:
    with pytest.raises(TypeError, match="not JSON serializable"):
        write_json(tmp_path / "x.json", {"x": object()})


def test_read_json_default_and_errors(tmp_path: Path) -> None:
    assert read_json(tmp_path / "missing.json", default={"k": 1}) == {"k": 1}

    broken = tmp_path / "broken.json"
    broken.write_text("{", encoding="utf-8")
    with pytest.raises(ValueError, match="Could not parse JSON"):
        read_json(broken)
