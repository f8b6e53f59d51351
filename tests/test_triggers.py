from __future__ import annotations

import json
from pathlib import Path

import pytest

from sheet_assistant.triggers import TriggerRegistry, registry_path


def test_registry_path_sits_next_to_workbook(tmp_path: Path) -> None:
    assert registry_path(tmp_path / "book.xlsx") == tmp_path / "book.xlsx.triggers.json"


def test_install_is_idempotent(tmp_path: Path) -> None:
    registry = TriggerRegistry(tmp_path / "t.json")

    assert registry.install("on_edit") is True
    assert registry.install("on_edit") is False

    assert registry.handlers("edit") == ["on_edit"]
    data = json.loads((tmp_path / "t.json").read_text(encoding="utf-8"))
    assert len(data["triggers"]) == 1
    assert data["triggers"][0]["event"] == "edit"


def test_remove_is_idempotent(tmp_path: Path) -> None:
    registry = TriggerRegistry(tmp_path / "t.json")
    registry.install("on_edit")
    registry.install("nightly", event="time")

    assert registry.remove("on_edit") == 1
    assert registry.remove("on_edit") == 0
    assert not registry.is_installed("on_edit")
    assert registry.handlers("time") == ["nightly"]


def test_remove_without_registry_file_does_not_create_one(tmp_path: Path) -> None:
    registry = TriggerRegistry(tmp_path / "t.json")

    assert registry.remove("on_edit") == 0
    assert not (tmp_path / "t.json").exists()


def test_malformed_registry_is_reported(tmp_path: Path) -> None:
    path = tmp_path / "t.json"
    path.write_text(json.dumps({"triggers": "nope"}), encoding="utf-8")

    with pytest.raises(ValueError, match="Malformed trigger registry"):
        TriggerRegistry(path).handlers()
