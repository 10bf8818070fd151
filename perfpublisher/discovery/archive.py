"""Archive selected report directories into the build's own directory.

Each report is copied to ``<build_dir>/<archive_dir_name>/<report name>``
so it outlives the workspace, and its global statistics are summarised
for the build report.
"""

from __future__ import annotations

import json
import shutil
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from perfpublisher.discovery.reports import ReportDirectory, simulation_id
from perfpublisher.errors import MalformedReportDirectoryName


@dataclass
class BuildSimulation:
    """An archived report belonging to the current build."""

    simulation_name: str
    directory: Path
    global_stats: dict[str, Any] | None


def _total(stats: dict[str, Any], key: str) -> Any:
    value = stats.get(key)
    if isinstance(value, dict):
        return value.get("total")
    return value


def read_global_stats(
    report_dir: str | Path,
    marker: str = "global_stats.json",
) -> dict[str, Any] | None:
    """Summarise the global statistics of a report.

    Args:
        report_dir: Report directory containing ``js/global_stats.json``.
        marker: Statistics file name to look for.

    Returns:
        Dict with requests, ok, ko, ko_percent, mean_response_time and
        requests_per_second, or None if the file is missing or unreadable.
    """
    files = sorted(Path(report_dir).rglob(marker))
    if not files:
        return None
    try:
        stats = json.loads(files[0].read_text())
    except (json.JSONDecodeError, OSError):
        return None
    if not isinstance(stats, dict):
        return None

    requests = stats.get("numberOfRequests") or {}
    total = requests.get("total") or 0
    ko = requests.get("ko") or 0
    ko_percent = round(ko * 100.0 / total) if total else 0
    return {
        "requests": total,
        "ok": requests.get("ok") or 0,
        "ko": ko,
        "ko_percent": ko_percent,
        "mean_response_time": _total(stats, "meanResponseTime"),
        "requests_per_second": _total(stats, "meanNumberOfRequestsPerSecond"),
    }


def archive_reports(
    reports: list[ReportDirectory],
    build_dir: str | Path,
    archive_dir_name: str = "simulations",
    marker: str = "global_stats.json",
) -> list[BuildSimulation]:
    """Copy selected reports into the build directory.

    A report that cannot be archived (malformed name, archive directory
    already present, copy failure) is reported on stderr and skipped;
    the remaining reports are still archived.

    Args:
        reports: Reports selected for the current build.
        build_dir: Root directory of the build's own files.
        archive_dir_name: Sub-directory holding the archived reports.
        marker: Statistics file name inside each report.

    Returns:
        One BuildSimulation per archived report, in input order.
    """
    archive_root = Path(build_dir) / archive_dir_name
    archive_root.mkdir(parents=True, exist_ok=True)

    simulations: list[BuildSimulation] = []
    for report in reports:
        try:
            simulation = simulation_id(report.name)
        except MalformedReportDirectoryName as e:
            print(f"Error: {e}; report not archived", file=sys.stderr)
            continue

        destination = archive_root / report.name
        try:
            shutil.copytree(report.path, destination)
        except FileExistsError:
            print(
                f"Could not create simulation archive directory "
                f"'{destination}': already exists",
                file=sys.stderr,
            )
            continue
        except (OSError, shutil.Error) as e:
            print(f"Error archiving report '{report.name}': {e}", file=sys.stderr)
            continue

        simulations.append(BuildSimulation(
            simulation_name=simulation,
            directory=destination,
            global_stats=read_global_stats(destination, marker),
        ))

    return simulations
