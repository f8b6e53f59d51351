"""Run settings — an explicit value passed into every operation."""

from __future__ import annotations

import re
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any

DEDUPE_KEY_MODES = ("typed", "joined")


@dataclass(frozen=True)
class Settings:
    source_name: str = "Data"
    destination_name: str = "Summary"
    watched_column: int = 1
    threshold: float = 1000.0
    alert_recipient: str = ""
    dedupe_key: str = "typed"
    smtp_host: str = ""
    smtp_port: int = 25
    sender: str = ""

    def __post_init__(self) -> None:
        if not self.source_name.strip():
            raise ValueError("source_name must not be empty")
        if not self.destination_name.strip():
            raise ValueError("destination_name must not be empty")
        if self.source_name == self.destination_name:
            raise ValueError("destination_name must differ from source_name")
        if isinstance(self.watched_column, bool) or self.watched_column < 0:
            raise ValueError("watched_column must be >= 0")
        if self.dedupe_key not in DEDUPE_KEY_MODES:
            raise ValueError(
                f"Invalid dedupe_key: {self.dedupe_key!r}. Use {'/'.join(DEDUPE_KEY_MODES)}."
            )
        if not 1 <= self.smtp_port <= 65535:
            raise ValueError("smtp_port must be between 1 and 65535")


_FIELD_TYPES: dict[str, type] = {
    "source_name": str,
    "destination_name": str,
    "watched_column": int,
    "threshold": float,
    "alert_recipient": str,
    "dedupe_key": str,
    "smtp_host": str,
    "smtp_port": int,
    "sender": str,
}


def _normalize_key(name: str) -> str:
    return re.sub(r"[\s\-]+", "_", name.strip().lower())


def _coerce(key: str, raw: Any) -> Any:
    target = _FIELD_TYPES[key]
    if target is str:
        return str(raw).strip()
    if isinstance(raw, bool):
        raise ValueError(f"{key} must be a number")
    try:
        return target(raw)
    except (TypeError, ValueError) as exc:
        kind = "an integer" if target is int else "a number"
        raise ValueError(f"{key} must be {kind}, got {raw!r}") from exc


def _read_profile(profile: Path) -> dict[str, str]:
    """Return ``{key: value}`` pairs from a ``key=value`` profile file."""
    if not profile.exists():
        raise ValueError(f"Profile not found: {profile} (expected lines like threshold=500)")
    if profile.is_dir():
        raise ValueError(f"Profile is a directory, not a file: {profile}")
    try:
        text = profile.read_text(encoding="utf-8")
    except OSError as exc:
        raise ValueError(f"Cannot read profile {profile}: {exc}") from exc

    values: dict[str, str] = {}
    for lineno, line in enumerate(text.splitlines(), start=1):
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        if "=" not in stripped:
            raise ValueError(f"{profile}:{lineno}: expected key=value, got {stripped!r}")
        key, value = stripped.split("=", 1)
        values[_normalize_key(key)] = value.strip()
    return values


def load_settings(profile: Path | None = None, **overrides: Any) -> Settings:
    """Build :class:`Settings` from defaults, a profile file, then *overrides*.

    Overrides whose value is ``None`` are ignored so CLI options can be passed
    straight through.
    """
    known = {f.name for f in fields(Settings)}
    raw: dict[str, Any] = {}
    if profile is not None:
        raw.update(_read_profile(Path(profile)))
    raw.update({_normalize_key(k): v for k, v in overrides.items() if v is not None})

    unknown = sorted(set(raw) - known)
    if unknown:
        raise ValueError(f"Unknown setting(s): {', '.join(unknown)}")

    values = {key: _coerce(key, value) for key, value in raw.items()}
    return replace(Settings(), **values) if values else Settings()
