"""Installed edit observers, persisted next to the workbook."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from sheet_assistant.io import read_json, write_json
from sheet_assistant.utils import utcnow_iso


def registry_path(workbook_path: Path) -> Path:
    workbook_path = Path(workbook_path)
    return workbook_path.with_name(f"{workbook_path.name}.triggers.json")


class TriggerRegistry:
    """``(event, handler)`` registrations stored as a JSON list."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    @classmethod
    def for_workbook(cls, workbook_path: Path) -> TriggerRegistry:
        return cls(registry_path(workbook_path))

    def _load(self) -> list[dict[str, Any]]:
        data = read_json(self.path, default={"triggers": []})
        triggers = data.get("triggers", []) if isinstance(data, dict) else None
        if not isinstance(triggers, list):
            raise ValueError(f"Malformed trigger registry: {self.path}")
        return [t for t in triggers if isinstance(t, dict)]

    def _store(self, triggers: list[dict[str, Any]]) -> None:
        write_json(self.path, {"triggers": triggers})

    def handlers(self, event: str = "edit") -> list[str]:
        return [str(t.get("handler")) for t in self._load() if t.get("event") == event]

    def is_installed(self, handler: str, event: str = "edit") -> bool:
        return handler in self.handlers(event)

    def install(self, handler: str, event: str = "edit") -> bool:
        """Register *handler* for *event*; ``False`` if it already was."""
        triggers = self._load()
        if any(t.get("handler") == handler and t.get("event") == event for t in triggers):
            return False
        triggers.append({"event": event, "handler": handler, "installed_at_utc": utcnow_iso()})
        self._store(triggers)
        return True

    def remove(self, handler: str) -> int:
        """Drop every registration of *handler*; return how many were removed."""
        triggers = self._load()
        remaining = [t for t in triggers if t.get("handler") != handler]
        removed = len(triggers) - len(remaining)
        if removed:
            self._store(remaining)
        return removed
