"""Build report generation."""

from perfpublisher.reporting.reporter import MAX_HISTORY, Reporter

__all__ = [
    "MAX_HISTORY",
    "Reporter",
]
