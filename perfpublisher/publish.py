"""End-of-build publishing of Gatling load test results.

Discovers the reports a build produced, archives them, reads their
assertions, and derives the trend graph links and the build description.
A build without new reports ends early with a neutral ``no_reports``
outcome; problems with a single report or assertion are collected as
diagnostics and do not stop the rest of the build's processing.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from pathlib import Path

from perfpublisher.analysis.records import AssertionRecord, load_assertion_records
from perfpublisher.analysis.verdict import aggregate
from perfpublisher.config import PublisherConfig
from perfpublisher.discovery.archive import BuildSimulation, archive_reports
from perfpublisher.discovery.reports import (
    discover_report_directories,
    ensure_aware,
    select_reports,
)
from perfpublisher.errors import NoReportsFound, ReportParseError
from perfpublisher.trends.target_env import target_env_links_for_project
from perfpublisher.trends.url_builder import TrendGraphLink, TrendURLBuilder

STATUS_PUBLISHED = "published"
STATUS_NO_REPORTS = "no_reports"


@dataclass
class PublishResult:
    """Everything published for one build."""

    status: str
    simulations: list[BuildSimulation] = field(default_factory=list)
    assertions: list[AssertionRecord] = field(default_factory=list)
    trend_links: list[TrendGraphLink] = field(default_factory=list)
    target_env_links: list[TrendGraphLink] = field(default_factory=list)
    description: str = ""
    diagnostics: list[str] = field(default_factory=list)


def publish(
    workspace: str | Path,
    build_dir: str | Path,
    build_start: datetime,
    project_name: str,
    from_time: datetime | None = None,
    config: PublisherConfig | None = None,
    pool: str | None = None,
    build_end: datetime | None = None,
) -> PublishResult:
    """Publish the load test results of one build.

    Args:
        workspace: Build workspace to search for reports.
        build_dir: Build directory reports are archived into.
        build_start: When the build started; older reports are ignored.
        project_name: Build project name (encodes brand and environment).
        from_time: Start of the trend graphs' range; None graphs the
            last month.
        config: Publisher configuration; defaults when None.
        pool: Application server pool under test; when given, target
            environment graphs spanning the build are linked too.
        build_end: End of the build run; defaults to now.

    Returns:
        PublishResult with status ``published`` or ``no_reports``.
    """
    config = config or PublisherConfig()
    build_start = ensure_aware(build_start)

    try:
        candidates = discover_report_directories(workspace, config.report_marker)
    except NoReportsFound as e:
        print(str(e), file=sys.stderr)
        return PublishResult(status=STATUS_NO_REPORTS)

    selected = select_reports(candidates, build_start)
    if not selected:
        print("No newer Gatling reports to archive.", file=sys.stderr)
        return PublishResult(status=STATUS_NO_REPORTS)

    result = PublishResult(status=STATUS_PUBLISHED)
    print("Archiving Gatling reports...", file=sys.stderr)
    result.simulations = archive_reports(
        selected,
        build_dir,
        archive_dir_name=config.archive_dir_name,
        marker=config.report_marker,
    )
    archived = {sim.directory.name for sim in result.simulations}
    for report in selected:
        if report.name not in archived:
            result.diagnostics.append(f"report '{report.name}' was not archived")

    for simulation in result.simulations:
        try:
            records = load_assertion_records(
                simulation.directory,
                project_name,
                filename=config.assertions_file,
            )
        except ReportParseError as e:
            print(f"Error: {e}", file=sys.stderr)
            result.diagnostics.append(str(e))
            continue
        result.assertions.extend(records)

    builder = TrendURLBuilder(config)
    result.trend_links = builder.build_links(from_time, result.assertions)

    if pool:
        end = ensure_aware(build_end) if build_end else datetime.now(tz=timezone.utc)
        result.target_env_links = target_env_links_for_project(
            project_name, pool, build_start, max(end - build_start, timedelta(0)), config,
        )

    print("Setting build description...", file=sys.stderr)
    result.description = aggregate(result.assertions)
    return result
