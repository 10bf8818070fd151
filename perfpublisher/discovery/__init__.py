"""Report discovery: finding, selecting, and archiving Gatling reports."""

from perfpublisher.discovery.archive import BuildSimulation, archive_reports, read_global_stats
from perfpublisher.discovery.reports import (
    ReportDirectory,
    discover_report_directories,
    select_reports,
    simulation_id,
)

__all__ = [
    "BuildSimulation",
    "ReportDirectory",
    "archive_reports",
    "discover_report_directories",
    "read_global_stats",
    "select_reports",
    "simulation_id",
]
