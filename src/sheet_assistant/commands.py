"""Command dispatch — one menu entry, one operation, one message.

Each command takes a :class:`CommandContext`, runs a single operation and
returns a :class:`CommandResult`.  Expected failures are translated into the
result here; they never leave :func:`dispatch`.
"""

from __future__ import annotations

import smtplib
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from sheet_assistant import __version__
from sheet_assistant.config import Settings
from sheet_assistant.errors import (
    EmptySource,
    NoDuplicatesFound,
    NoNumericColumns,
    SourceNotFound,
)
from sheet_assistant.io import WorkbookStore
from sheet_assistant.models import AlertEvent
from sheet_assistant.notify import Notifier, render_alert, resolve_recipient
from sheet_assistant.pipeline import (
    check_threshold,
    deduplicate,
    load_grid,
    summarize,
    summary_rows,
)
from sheet_assistant.report import format_rows, write_summary_sheet
from sheet_assistant.triggers import TriggerRegistry

ALERT_HANDLER = "check_threshold_on_edit"


@dataclass
class CommandContext:
    store: WorkbookStore
    settings: Settings
    notifier: Notifier | None = None
    registry: TriggerRegistry | None = None

    def trigger_registry(self) -> TriggerRegistry:
        if self.registry is None:
            self.registry = TriggerRegistry.for_workbook(self.store.path)
        return self.registry


@dataclass(frozen=True)
class CommandResult:
    ok: bool
    message: str
    fatal: bool = False
    changed: bool = False


def _info(message: str, *, changed: bool = False) -> CommandResult:
    return CommandResult(ok=True, message=message, changed=changed)


def _fail(message: str) -> CommandResult:
    return CommandResult(ok=False, message=message, fatal=True)


# ── Commands ─────────────────────────────────────────────────────


def generate_summary(ctx: CommandContext) -> CommandResult:
    settings = ctx.settings
    try:
        grid = load_grid(ctx.store, settings.source_name)
        stats = summarize(grid)
    except SourceNotFound as exc:
        return _fail(str(exc))
    except (EmptySource, NoNumericColumns) as exc:
        return _info(f"Nothing to summarize: {exc}.")

    write_summary_sheet(ctx.store, settings.destination_name, summary_rows(stats))
    ctx.store.save()
    noun = "column" if len(stats) == 1 else "columns"
    return _info(
        f"Summary of {len(stats)} numeric {noun} written to {settings.destination_name!r}.",
        changed=True,
    )


def remove_duplicates(ctx: CommandContext) -> CommandResult:
    settings = ctx.settings
    try:
        grid = load_grid(ctx.store, settings.source_name)
        deduped, removed = deduplicate(grid, settings.dedupe_key)
        if removed == 0:
            raise NoDuplicatesFound()
    except SourceNotFound as exc:
        return _fail(str(exc))
    except EmptySource as exc:
        if exc.row_count == 0:
            return _fail(f"{exc}; nothing to deduplicate.")
        return _info(f"{exc}; nothing to deduplicate.")
    except NoDuplicatesFound as exc:
        return _info(f"{exc}.")

    ctx.store.replace_grid(settings.source_name, deduped.to_values())
    format_rows(ctx.store.worksheet(settings.source_name))
    ctx.store.save()
    noun = "row" if removed == 1 else "rows"
    return _info(f"Removed {removed} duplicate {noun}; {len(deduped)} remain.", changed=True)


def format_all_rows(ctx: CommandContext) -> CommandResult:
    try:
        ws = ctx.store.worksheet(ctx.settings.source_name)
    except SourceNotFound as exc:
        return _fail(str(exc))
    if not ctx.store.get_grid(ctx.settings.source_name):
        return _info(f"Sheet {ctx.settings.source_name!r} is empty; nothing to format.")
    styled = format_rows(ws)
    ctx.store.save()
    return _info(f"Formatted {styled} rows in {ctx.settings.source_name!r}.", changed=True)


def setup_alerts(ctx: CommandContext) -> CommandResult:
    settings = ctx.settings
    if not ctx.store.has_sheet(settings.source_name):
        return _fail(str(SourceNotFound(settings.source_name, ctx.store.sheet_names())))
    installed = ctx.trigger_registry().install(ALERT_HANDLER, event="edit")
    recipient = resolve_recipient(settings)
    rule = (
        f"column {settings.watched_column + 1} > {settings.threshold:g} "
        f"in {settings.source_name!r}, notifying {recipient}"
    )
    if not installed:
        return _info(f"Threshold alerts already active ({rule}).")
    return _info(f"Threshold alerts enabled ({rule}).", changed=True)


def remove_alerts(ctx: CommandContext) -> CommandResult:
    removed = ctx.trigger_registry().remove(ALERT_HANDLER)
    if not removed:
        return _info("No threshold alerts were active.")
    return _info("Threshold alerts removed.", changed=True)


def about(ctx: CommandContext) -> CommandResult:
    del ctx
    lines = [
        f"sheet-assistant v{__version__}",
        "Formats rows, summarizes numeric columns, removes duplicate rows",
        "and sends an alert when a watched column goes above a threshold.",
        "Menu: " + ", ".join(label for label, _ in MENU),
    ]
    return _info("\n".join(lines))


COMMANDS: dict[str, Callable[[CommandContext], CommandResult]] = {
    "generate_summary": generate_summary,
    "remove_duplicates": remove_duplicates,
    "format_all_rows": format_all_rows,
    "setup_alerts": setup_alerts,
    "remove_alerts": remove_alerts,
    "about": about,
}

MENU: list[tuple[str, str]] = [
    ("Generate Summary Report", "generate_summary"),
    ("Remove Duplicate Rows", "remove_duplicates"),
    ("Format All Rows", "format_all_rows"),
    ("Set Up Threshold Alerts", "setup_alerts"),
    ("Remove Threshold Alerts", "remove_alerts"),
    ("About", "about"),
]


def dispatch(command_id: str, ctx: CommandContext) -> CommandResult:
    """Run the command registered as *command_id*.

    Raises
    ------
    KeyError
        If *command_id* is not a known command.
    """
    try:
        command = COMMANDS[command_id]
    except KeyError:
        raise KeyError(f"Unknown command: {command_id!r}") from None
    return command(ctx)


# ── Edit events ──────────────────────────────────────────────────


@dataclass(frozen=True)
class EditOutcome:
    result: CommandResult
    alert: AlertEvent | None = None
    warning: str = ""


def handle_edit(ctx: CommandContext, row: int, column: int, value: Any) -> EditOutcome:
    """Write *value* at the 1-based (*row*, *column*) cell and run edit observers.

    The edited row is always re-styled. The threshold check only runs for an
    edit of the watched column while the alert handler is installed; an alert
    that cannot be delivered is reported in the message, not raised.
    """
    settings = ctx.settings
    try:
        ctx.store.set_cell(settings.source_name, row, column, value)
    except SourceNotFound as exc:
        return EditOutcome(_fail(str(exc)))

    format_rows(ctx.store.worksheet(settings.source_name), [row])
    ctx.store.save()

    alert: AlertEvent | None = None
    undelivered = ""
    watched = column - 1 == settings.watched_column
    if watched and ctx.trigger_registry().is_installed(ALERT_HANDLER, event="edit"):
        values = ctx.store.get_grid(settings.source_name)
        if row - 1 < len(values):
            alert = check_threshold(
                values[row - 1],
                row - 1,
                settings.watched_column,
                settings.threshold,
                header=values[0],
            )
        if alert is not None and ctx.notifier is not None:
            subject, body = render_alert(alert, settings.source_name)
            try:
                ctx.notifier.notify(resolve_recipient(settings), subject, body)
            except (smtplib.SMTPException, OSError) as exc:
                undelivered = str(exc) or type(exc).__name__

    message = f"Updated row {row}, column {column}."
    if alert is not None:
        message += f" Alert raised: {alert.value:g} > {alert.threshold:g}."
    warning = f"Alert could not be delivered: {undelivered}" if undelivered else ""
    return EditOutcome(_info(message, changed=True), alert, warning)
