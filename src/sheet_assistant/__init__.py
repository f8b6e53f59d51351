"""sheet-assistant — Summaries, de-duplication and threshold alerts for workbooks."""

__version__ = "0.2.0"

SUMMARY_COLUMNS: list[str] = ["Column", "Count", "Sum", "Average", "Max", "Min"]
