"""YAML build report for published load test results.

Records what a build published: the archived simulations with their
global statistics, every assertion with its outcome, the trend graph
links, and the build description.  Supports a rolling per-simulation
history of assertion outcomes carried over from the previous report.
"""

from __future__ import annotations

import datetime
from pathlib import Path
from typing import Any

import yaml

from perfpublisher.analysis.records import AssertionRecord
from perfpublisher.discovery.archive import BuildSimulation
from perfpublisher.publish import STATUS_NO_REPORTS, PublishResult

# Maximum rolling history entries per simulation
MAX_HISTORY = 500


class Reporter:
    """Collects a build's publish result and generates YAML reports."""

    def __init__(self) -> None:
        self.result: PublishResult | None = None
        self.project_name: str | None = None
        self.build_start: datetime.datetime | None = None

    def set_build_info(
        self,
        project_name: str,
        build_start: datetime.datetime | None = None,
    ) -> None:
        """Set the project and build start the report is about.

        Args:
            project_name: Build project name.
            build_start: When the build started.
        """
        self.project_name = project_name
        self.build_start = build_start

    def set_result(self, result: PublishResult) -> None:
        """Set the publish result to report on.

        Args:
            result: Outcome of ``publish()`` for this build.
        """
        self.result = result

    def generate_report(self) -> dict[str, Any]:
        """Generate the report data structure.

        Returns:
            Dictionary representing the full report, suitable for
            YAML serialization.
        """
        now = datetime.datetime.now(tz=datetime.timezone.utc).isoformat()
        result = self.result or PublishResult(status=STATUS_NO_REPORTS)

        report: dict[str, Any] = {
            "generated_at": now,
            "status": result.status,
            "summary": self._compute_summary(result),
        }

        if self.project_name:
            report["project"] = self.project_name
        if self.build_start is not None:
            report["build_start"] = self.build_start.isoformat()

        report["simulations"] = [
            self._format_simulation(s) for s in result.simulations
        ]
        report["assertions"] = [
            self._format_assertion(a) for a in result.assertions
        ]
        report["trend_graphs"] = [
            {"name": link.display_name, "url": link.url}
            for link in result.trend_links
        ]
        if result.target_env_links:
            report["target_env_graphs"] = [
                {"name": link.display_name, "url": link.url}
                for link in result.target_env_links
            ]
        report["description"] = result.description

        if result.diagnostics:
            report["diagnostics"] = list(result.diagnostics)

        return {"report": report}

    def generate_report_with_history(
        self, existing_report_path: Path | None = None,
    ) -> dict[str, Any]:
        """Generate report with rolling history appended.

        Reads an existing report, extracts per-simulation history,
        appends this build's outcome, and trims to MAX_HISTORY entries.

        Args:
            existing_report_path: Path to existing YAML report (optional).

        Returns:
            Report dict with history included.
        """
        report = self.generate_report()

        existing_history: dict[str, list[dict[str, Any]]] = {}
        if existing_report_path and existing_report_path.exists():
            try:
                with open(existing_report_path) as f:
                    existing = yaml.safe_load(f)
                if existing and "report" in existing:
                    existing_history = existing["report"].get("history", {}) or {}
            except (yaml.YAMLError, OSError):
                existing_history = {}

        history: dict[str, list[dict[str, Any]]] = dict(existing_history)
        result = self.result or PublishResult(status=STATUS_NO_REPORTS)
        for simulation, records in _group_by_simulation(result.assertions).items():
            failed = sum(1 for r in records if not r.status)
            entry = {
                "status": "failed" if failed else "passed",
                "assertions": len(records),
                "failed": failed,
                "timestamp": report["report"]["generated_at"],
            }
            history.setdefault(simulation, []).append(entry)
            if len(history[simulation]) > MAX_HISTORY:
                history[simulation] = history[simulation][-MAX_HISTORY:]

        report["report"]["history"] = history
        return report

    def write_yaml(self, path: Path) -> None:
        """Write the report as a YAML file.

        Args:
            path: File path to write the YAML report to.
        """
        self._dump(self.generate_report(), path)

    def write_yaml_with_history(
        self, path: Path, existing_path: Path | None = None,
    ) -> None:
        """Write report with rolling history as YAML.

        Args:
            path: File path to write.
            existing_path: Path to existing report for history (optional).
        """
        self._dump(self.generate_report_with_history(existing_path), path)

    @staticmethod
    def _dump(report: dict[str, Any], path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            yaml.dump(
                report,
                f,
                default_flow_style=False,
                sort_keys=False,
                allow_unicode=True,
            )

    def _compute_summary(self, result: PublishResult) -> dict[str, int]:
        """Count simulations, assertions, failures and trend graphs."""
        failed = sum(1 for a in result.assertions if not a.status)
        return {
            "simulations": len(result.simulations),
            "assertions": len(result.assertions),
            "passed": len(result.assertions) - failed,
            "failed": failed,
            "trend_graphs": len(result.trend_links),
        }

    def _format_simulation(self, simulation: BuildSimulation) -> dict[str, Any]:
        entry: dict[str, Any] = {
            "name": simulation.simulation_name,
            "directory": str(simulation.directory),
        }
        if simulation.global_stats is not None:
            entry["global_stats"] = simulation.global_stats
        return entry

    def _format_assertion(self, record: AssertionRecord) -> dict[str, Any]:
        return {
            "simulation": record.simulation_name,
            "scenario": record.scenario_name,
            "request": record.request_name,
            "type": record.assertion_type,
            "message": record.message,
            "actual": record.actual_value,
            "expected": record.expected_value,
            "status": "passed" if record.status else "failed",
        }


def _group_by_simulation(
    records: list[AssertionRecord],
) -> dict[str, list[AssertionRecord]]:
    grouped: dict[str, list[AssertionRecord]] = {}
    for record in records:
        grouped.setdefault(record.simulation_name, []).append(record)
    return grouped
