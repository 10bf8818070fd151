"""Discover Gatling report directories and select the ones from this build.

A Gatling run writes one report directory per simulation, named
``<simulationId>-<runSuffix>`` and containing ``js/global_stats.json``.
Workspaces are usually reused between builds, so older report
directories are still lying around; only directories modified after the
build started belong to the current build.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

from perfpublisher.errors import MalformedReportDirectoryName, NoReportsFound


@dataclass(frozen=True)
class ReportDirectory:
    """A candidate report directory found in a build workspace."""

    path: Path
    last_modified_at: datetime

    @property
    def name(self) -> str:
        return self.path.name

    @classmethod
    def from_path(cls, path: str | Path) -> ReportDirectory:
        """Create a ReportDirectory stamped with the directory's mtime."""
        report_path = Path(path)
        mtime = report_path.stat().st_mtime
        return cls(
            path=report_path,
            last_modified_at=datetime.fromtimestamp(mtime, tz=timezone.utc),
        )


def simulation_id(name: str) -> str:
    """Extract the simulation identifier from a report directory name.

    The name is split on its last ``-``; everything before it identifies
    the simulation, everything after is the run suffix.

    Args:
        name: Directory name, e.g. ``checkout-20240101120000``.

    Returns:
        The simulation identifier, e.g. ``checkout``.

    Raises:
        MalformedReportDirectoryName: If the name has no ``-`` or nothing
            precedes it.
    """
    head, sep, _ = name.rpartition("-")
    if not sep or not head:
        raise MalformedReportDirectoryName(name)
    return head


def discover_report_directories(
    workspace: str | Path,
    marker: str = "global_stats.json",
) -> list[ReportDirectory]:
    """Find every report directory below *workspace*.

    A report directory is the grandparent of a *marker* file
    (``<report>/js/global_stats.json``).  Each directory is returned once,
    ordered by path.

    Raises:
        NoReportsFound: If no marker file exists in the workspace.
    """
    workspace_path = Path(workspace)
    markers = sorted(workspace_path.rglob(marker))
    if not markers:
        raise NoReportsFound(
            f"Could not find a Gatling report in {workspace_path}"
        )

    folders: list[Path] = []
    seen: set[Path] = set()
    for marker_path in markers:
        folder = marker_path.parent.parent
        if folder in seen:
            continue
        seen.add(folder)
        folders.append(folder)

    return [ReportDirectory.from_path(folder) for folder in sorted(folders)]


def ensure_aware(moment: datetime) -> datetime:
    """Return *moment* with a timezone; naive values are taken as local time."""
    if moment.tzinfo is None or moment.utcoffset() is None:
        return moment.astimezone()
    return moment


def select_reports(
    candidates: list[ReportDirectory],
    build_start: datetime,
) -> list[ReportDirectory]:
    """Keep the candidates produced during the current build.

    A candidate is kept iff it was modified strictly after *build_start*.
    A directory whose mtime equals the build start was at most touched by
    a rerun, not regenerated, so it is dropped.  Relative order is kept.

    Args:
        candidates: Report directories found in the workspace.
        build_start: When the current build started; a naive value is
            taken as local time.

    Returns:
        The selected directories; may be empty.
    """
    build_start = ensure_aware(build_start)
    selected: list[ReportDirectory] = []
    for candidate in candidates:
        if ensure_aware(candidate.last_modified_at) > build_start:
            print(f"Adding report '{candidate.name}'", file=sys.stderr)
            selected.append(candidate)
        else:
            print(
                f"Skipping report '{candidate.name}': not modified since "
                f"build start",
                file=sys.stderr,
            )
    return selected
