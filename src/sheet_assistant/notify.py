"""Alert delivery — message rendering, recipient lookup, notifiers."""

from __future__ import annotations

import getpass
import smtplib
import socket
from email.message import EmailMessage
from typing import Protocol

from rich.console import Console
from rich.panel import Panel

from sheet_assistant.config import Settings
from sheet_assistant.models import AlertEvent
from sheet_assistant.utils import utcnow_iso


class Notifier(Protocol):
    def notify(self, recipient: str, subject: str, body: str) -> None: ...


def _fmt_number(value: float) -> str:
    return f"{value:g}" if value.is_integer() else f"{value:.2f}"


def render_alert(event: AlertEvent, source_name: str) -> tuple[str, str]:
    """Return ``(subject, body)`` for *event*."""
    column = event.column_name or f"column {event.column_index + 1}"
    subject = (
        f"Threshold alert: {column} = {_fmt_number(event.value)} "
        f"(row {event.sheet_row}, {source_name})"
    )
    body = "\n".join(
        [
            f"A value above the configured threshold was entered in sheet {source_name!r}.",
            "",
            f"Row:       {event.sheet_row}",
            f"Column:    {column}",
            f"Value:     {_fmt_number(event.value)}",
            f"Threshold: {_fmt_number(event.threshold)}",
            f"Detected:  {utcnow_iso()}",
        ]
    ) + "\n"
    return subject, body


def acting_user_address() -> str:
    """Best guess at the address of the user running the tool."""
    try:
        user = getpass.getuser()
    except (KeyError, OSError):
        # No login name in the environment or the password database.
        user = "user"
    host = socket.getfqdn() or "localhost"
    return f"{user}@{host}"


def resolve_recipient(settings: Settings) -> str:
    return settings.alert_recipient or acting_user_address()


class SmtpNotifier:
    """Send alerts through an SMTP relay; one connection per message."""

    def __init__(self, host: str, port: int = 25, sender: str = "", timeout: float = 10.0) -> None:
        self.host = host
        self.port = port
        self.sender = sender
        self.timeout = timeout

    def notify(self, recipient: str, subject: str, body: str) -> None:
        msg = EmailMessage()
        msg["From"] = self.sender or recipient
        msg["To"] = recipient
        msg["Subject"] = subject
        msg.set_content(body)
        with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as smtp:
            smtp.send_message(msg)


class ConsoleNotifier:
    """Print alerts instead of sending them (no SMTP host configured)."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def notify(self, recipient: str, subject: str, body: str) -> None:
        self.console.print(Panel(
            f"[bold]To:[/bold] {recipient}\n[bold]Subject:[/bold] {subject}\n\n{body}",
            title="Alert", border_style="yellow",
        ))


def build_notifier(settings: Settings, console: Console | None = None) -> Notifier:
    if settings.smtp_host:
        return SmtpNotifier(settings.smtp_host, settings.smtp_port, settings.sender)
    return ConsoleNotifier(console)
