"""CLI entry point for sheet-assistant."""

from __future__ import annotations

import re
from collections.abc import Callable
from enum import Enum
from pathlib import Path
from typing import Any

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table as RichTable

from sheet_assistant import __version__
from sheet_assistant.commands import (
    MENU,
    CommandContext,
    CommandResult,
    dispatch,
    handle_edit,
)
from sheet_assistant.config import Settings, load_settings
from sheet_assistant.io import WorkbookStore
from sheet_assistant.notify import build_notifier

app = typer.Typer(
    name="sheet-assistant",
    help="sheet-assistant — Summaries, de-duplication and threshold alerts for workbooks.",
    add_completion=False,
    no_args_is_help=True,
)
console = Console()


class DedupeKeyOption(str, Enum):
    typed = "typed"
    joined = "joined"


def _noop(*_args: object, **_kwargs: object) -> None:
    return None


def _printer(quiet: bool) -> Callable[..., None]:
    return _noop if quiet else console.print


def _err(msg: str) -> None:
    console.print(f"[red]x[/red] {msg}")


# ── Helpers ──────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"sheet-assistant v{__version__}")
        raise typer.Exit()


_INT_RE = re.compile(r"^[+-]?\d+$")


def _parse_cell_value(raw: str) -> Any:
    """Interpret a typed-in cell value: number, boolean, empty or text."""
    text = raw.strip()
    if text == "":
        return None
    if _INT_RE.fullmatch(text):
        return int(text)
    lowered = text.lower()
    if lowered in {"true", "false"}:
        return lowered == "true"
    try:
        value = float(text)
    except ValueError:
        return raw
    if lowered in {"nan", "inf", "+inf", "-inf", "infinity", "-infinity"}:
        return raw
    return value


def _settings(profile: Path | None, **overrides: Any) -> Settings:
    try:
        return load_settings(profile, **overrides)
    except ValueError as exc:
        _err(str(exc))
        raise typer.Exit(code=2)


def _open_store(workbook: Path) -> WorkbookStore:
    try:
        return WorkbookStore.open(workbook)
    except (FileNotFoundError, ValueError, OSError) as exc:
        _err(str(exc))
        raise typer.Exit(code=2)


def _report(result: CommandResult, *, quiet: bool) -> None:
    if not result.ok:
        _err(result.message)
        raise typer.Exit(code=2 if result.fatal else 1)
    if not quiet:
        mark = "[green]v[/green]" if result.changed else "[blue]i[/blue]"
        console.print(f"{mark} {result.message}")


def _run(command_id: str, ctx: CommandContext, *, quiet: bool) -> None:
    try:
        result = dispatch(command_id, ctx)
    except Exception as exc:
        _err(f"Unexpected internal error: {exc}")
        raise typer.Exit(code=1)
    _report(result, quiet=quiet)


def _workbook_option() -> Any:
    return typer.Option(
        ..., "--workbook", "-w",
        help="Path to the .xlsx workbook.",
        exists=True, readable=True, dir_okay=False,
    )


def _profile_option() -> Any:
    return typer.Option(
        None, "--profile",
        help="Settings file with key=value lines (e.g. threshold=500).",
    )


def _source_option() -> Any:
    return typer.Option(None, "--source", "-s", help="Sheet holding the data.")


def _quiet_option() -> Any:
    return typer.Option(
        False, "--quiet", "-q", help="Suppress informational output.",
    )


# ── Callbacks ────────────────────────────────────────────────────


@app.callback()
def main(
    version: bool | None = typer.Option(
        None, "--version", "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """sheet-assistant CLI."""


# ── Menu commands ────────────────────────────────────────────────


@app.command()
def summary(
    workbook: Path = _workbook_option(),
    profile: Path | None = _profile_option(),
    source: str | None = _source_option(),
    dest: str | None = typer.Option(
        None, "--dest", "-d", help="Sheet receiving the summary table.",
    ),
    quiet: bool = _quiet_option(),
) -> None:
    """Generate Summary Report: count/sum/average/max/min per numeric column."""
    settings = _settings(profile, source_name=source, destination_name=dest)
    store = _open_store(workbook)
    echo = _printer(quiet)
    echo(f"[blue]>[/blue] Summarizing {settings.source_name!r} -> {settings.destination_name!r} …")
    _run("generate_summary", CommandContext(store, settings), quiet=quiet)


@app.command()
def dedupe(
    workbook: Path = _workbook_option(),
    profile: Path | None = _profile_option(),
    source: str | None = _source_option(),
    key: DedupeKeyOption | None = typer.Option(
        None, "--key",
        help="Duplicate key: typed (cell kind + value) or joined (legacy text join).",
    ),
    quiet: bool = _quiet_option(),
) -> None:
    """Remove Duplicate Rows, keeping the first occurrence of each row."""
    settings = _settings(
        profile, source_name=source, dedupe_key=key.value if key else None
    )
    store = _open_store(workbook)
    echo = _printer(quiet)
    echo(f"[blue]>[/blue] Removing duplicate rows from {settings.source_name!r} …")
    _run("remove_duplicates", CommandContext(store, settings), quiet=quiet)


@app.command("format")
def format_(
    workbook: Path = _workbook_option(),
    profile: Path | None = _profile_option(),
    source: str | None = _source_option(),
    quiet: bool = _quiet_option(),
) -> None:
    """Format All Rows: styled header and banded data rows."""
    settings = _settings(profile, source_name=source)
    store = _open_store(workbook)
    echo = _printer(quiet)
    echo(f"[blue]>[/blue] Formatting rows in {settings.source_name!r} …")
    _run("format_all_rows", CommandContext(store, settings), quiet=quiet)


@app.command("alerts-setup")
def alerts_setup(
    workbook: Path = _workbook_option(),
    profile: Path | None = _profile_option(),
    source: str | None = _source_option(),
    quiet: bool = _quiet_option(),
) -> None:
    """Install the edit observer that checks the watched column."""
    settings = _settings(profile, source_name=source)
    store = _open_store(workbook)
    echo = _printer(quiet)
    echo(f"[blue]>[/blue] Enabling threshold alerts on {settings.source_name!r} …")
    _run("setup_alerts", CommandContext(store, settings), quiet=quiet)


@app.command("alerts-remove")
def alerts_remove(
    workbook: Path = _workbook_option(),
    profile: Path | None = _profile_option(),
    quiet: bool = _quiet_option(),
) -> None:
    """Remove the threshold alert edit observer (safe to repeat)."""
    settings = _settings(profile)
    store = _open_store(workbook)
    echo = _printer(quiet)
    echo("[blue]>[/blue] Removing threshold alerts …")
    _run("remove_alerts", CommandContext(store, settings), quiet=quiet)


@app.command()
def about() -> None:
    """Show what this tool does."""
    result = dispatch("about", CommandContext(WorkbookStore(Path(".")), Settings()))
    console.print(Panel(result.message, title="About", border_style="blue"))


@app.command()
def menu() -> None:
    """List the menu entries and the command each one runs."""
    tbl = RichTable(title="Menu", show_lines=False)
    tbl.add_column("Entry", style="bold")
    tbl.add_column("Command")
    cli_names = {
        "generate_summary": "summary",
        "remove_duplicates": "dedupe",
        "format_all_rows": "format",
        "setup_alerts": "alerts-setup",
        "remove_alerts": "alerts-remove",
        "about": "about",
    }
    for label, command_id in MENU:
        tbl.add_row(label, f"sheet-assistant {cli_names[command_id]}")
    console.print(tbl)


# ── Edit event ───────────────────────────────────────────────────


@app.command()
def edit(
    workbook: Path = _workbook_option(),
    row: int = typer.Option(..., "--row", "-r", min=1, help="1-based sheet row."),
    column: int = typer.Option(..., "--column", "-c", min=1, help="1-based sheet column."),
    value: str = typer.Option(..., "--value", "-v", help="New cell value."),
    profile: Path | None = _profile_option(),
    source: str | None = _source_option(),
    threshold: float | None = typer.Option(
        None, "--threshold", help="Override the alert threshold.",
    ),
    quiet: bool = _quiet_option(),
) -> None:
    """Edit one cell, re-format its row and run the installed edit observers."""
    settings = _settings(profile, source_name=source, threshold=threshold)
    store = _open_store(workbook)
    ctx = CommandContext(store, settings, notifier=build_notifier(settings, console))
    try:
        outcome = handle_edit(ctx, row, column, _parse_cell_value(value))
    except Exception as exc:
        _err(f"Unexpected internal error: {exc}")
        raise typer.Exit(code=1)
    _report(outcome.result, quiet=quiet)
    if outcome.warning:
        console.print(f"[yellow]![/yellow] {outcome.warning}")
