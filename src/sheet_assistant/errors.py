"""Error kinds raised by the data operations and translated by ``commands``."""

from __future__ import annotations


class SheetAssistantError(Exception):
    """Base class for every expected, user-reportable failure."""


class SourceNotFound(SheetAssistantError, LookupError):
    def __init__(self, source_name: str, available: list[str] | None = None) -> None:
        self.source_name = source_name
        self.available = list(available or [])
        message = f"Sheet not found: {source_name!r}"
        if self.available:
            message += f" (available: {', '.join(self.available)})"
        super().__init__(message)


class EmptySource(SheetAssistantError):
    """Fewer than two rows (header + one data row) in the source."""

    def __init__(self, source_name: str, row_count: int) -> None:
        self.source_name = source_name
        self.row_count = row_count
        if row_count == 0:
            message = f"Sheet {source_name!r} is empty"
        else:
            message = f"Sheet {source_name!r} has a header but no data rows"
        super().__init__(message)


class NoNumericColumns(SheetAssistantError):
    def __init__(self) -> None:
        super().__init__("No numeric columns to summarize")


class NoDuplicatesFound(SheetAssistantError):
    def __init__(self) -> None:
        super().__init__("No duplicate rows found")
