"""I/O helpers — workbook access and JSON artifacts."""

from __future__ import annotations

import json
from collections.abc import Sequence
from datetime import date, datetime
from pathlib import Path
from typing import Any

from openpyxl import Workbook, load_workbook
from openpyxl.worksheet.worksheet import Worksheet

from sheet_assistant.errors import SourceNotFound

_WORKBOOK_SUFFIXES = (".xlsx", ".xlsm", ".xltx", ".xltm")


# ── Workbook store ───────────────────────────────────────────────


def _is_blank_row(values: Sequence[Any]) -> bool:
    return all(v is None or v == "" for v in values)


class WorkbookStore:
    """Named-sheet access to one ``.xlsx`` workbook.

    Acts as both the data source (``get_grid`` / ``replace_grid``) and the
    report sink (``write_table``).  Changes stay in memory until
    :meth:`save`.
    """

    def __init__(self, path: Path, workbook: Workbook | None = None) -> None:
        self.path = Path(path)
        self._wb = workbook

    @classmethod
    def open(cls, path: Path) -> WorkbookStore:
        """Open an existing workbook.

        Raises
        ------
        FileNotFoundError
            If *path* does not exist.
        ValueError
            If the extension is not a supported workbook type.
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Workbook not found: {path}")
        if path.suffix.lower() not in _WORKBOOK_SUFFIXES:
            raise ValueError(f"Unsupported file type: {path.suffix!r}. Use .xlsx")
        keep_vba = path.suffix.lower() == ".xlsm"
        return cls(path, load_workbook(path, keep_vba=keep_vba))

    @property
    def workbook(self) -> Workbook:
        if self._wb is None:
            self._wb = load_workbook(self.path)
        return self._wb

    def sheet_names(self) -> list[str]:
        return list(self.workbook.sheetnames)

    def has_sheet(self, name: str) -> bool:
        return name in self.workbook.sheetnames

    def worksheet(self, name: str) -> Worksheet:
        if not self.has_sheet(name):
            raise SourceNotFound(name, self.sheet_names())
        return self.workbook[name]

    def get_grid(self, name: str) -> list[list[Any]]:
        """Return every row of the used range of sheet *name*.

        Trailing rows with no values are dropped; styled but empty rows at
        the bottom of a sheet are not data.
        """
        ws = self.worksheet(name)
        rows = [list(r) for r in ws.iter_rows(values_only=True)]
        while rows and _is_blank_row(rows[-1]):
            rows.pop()
        return rows

    def replace_grid(self, name: str, rows: Sequence[Sequence[Any]]) -> None:
        """Replace the whole content of sheet *name* with *rows*."""
        ws = self.worksheet(name)
        if ws.max_row:
            ws.delete_rows(1, ws.max_row)
        for values in rows:
            ws.append(list(values))

    def write_table(self, name: str, rows: Sequence[Sequence[Any]]) -> Worksheet:
        """Create sheet *name* (dropping any existing one) and write *rows*.

        An existing sheet keeps its position in the tab order.
        """
        wb = self.workbook
        index: int | None = None
        if name in wb.sheetnames:
            existing = wb[name]
            index = wb.sheetnames.index(name)
            wb.remove(existing)
        ws = wb.create_sheet(title=name, index=index)
        for values in rows:
            ws.append(list(values))
        return ws

    def set_cell(self, name: str, row: int, column: int, value: Any) -> None:
        """Write *value* into the 1-based (*row*, *column*) cell of sheet *name*."""
        if row < 1 or column < 1:
            raise ValueError("row and column are 1-based and must be >= 1")
        self.worksheet(name).cell(row=row, column=column, value=value)

    def save(self) -> Path:
        """Write the workbook back to :attr:`path` (atomic)."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_name(f"{self.path.stem}.tmp{self.path.suffix}")
        self.workbook.save(tmp_path)
        tmp_path.replace(self.path)
        return self.path


# ── JSON ─────────────────────────────────────────────────────────


def _json_default(obj: Any) -> Any:
    if isinstance(obj, Path):
        return str(obj)
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def write_json(path: Path, data: Any) -> Path:
    """Write *data* as pretty-printed JSON to *path* (atomic + deterministic)."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    payload = json.dumps(
        data,
        indent=2,
        sort_keys=True,
        ensure_ascii=False,
        default=_json_default,
    ) + "\n"
    tmp_path = path.with_suffix(path.suffix + ".tmp")
    tmp_path.write_text(payload, encoding="utf-8")
    tmp_path.replace(path)
    return path


def read_json(path: Path, default: Any = None) -> Any:
    """Load JSON from *path*; return *default* when the file does not exist."""
    path = Path(path)
    if not path.exists():
        return default
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValueError(f"Could not parse JSON {path}: {exc}") from exc
