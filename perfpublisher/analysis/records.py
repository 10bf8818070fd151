"""Assertion records read from a Gatling report's assertions.json.

Each report directory holds one or more ``assertions.json`` files of the
form::

    {
      "simulation": "com.acme.load.OAuth2Simulation",
      "assertions": [
        {
          "requestName": "authorize",
          "scenarioName": "login",
          "assertionType": "95th percentile response time",
          "message": "authorize 95th percentile response time is less than 1000",
          "status": false,
          "values": [1200],
          "conditionValues": [1000]
        }
      ]
    }

Value lists are flattened to comma-joined strings so they can be shown
as-is in build descriptions.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from perfpublisher.errors import ReportParseError


@dataclass
class AssertionRecord:
    """One evaluated assertion from a load test run."""

    project_name: str
    simulation_name: str
    scenario_name: str
    request_name: str
    message: str  # "authorize 95th percentile response time is less than 1000"
    assertion_type: str  # "95th percentile response time"
    actual_value: str  # may be a comma-joined list
    expected_value: str  # may be a comma-joined list
    status: bool  # True = passed


def _join_values(values: Any) -> str:
    """Join a JSON value list with commas; scalars become strings."""
    if values is None:
        return ""
    if isinstance(values, list):
        return ",".join(_format_value(v) for v in values)
    return _format_value(values)


def _format_value(value: Any) -> str:
    # 1000.0 reads better as 1000
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _parse_status(raw: Any) -> bool:
    if isinstance(raw, str):
        return raw.strip().lower() == "true"
    return bool(raw)


def parse_assertions(
    data: dict[str, Any],
    project_name: str,
) -> list[AssertionRecord]:
    """Convert one decoded assertions.json document into records.

    Unknown keys are ignored; missing string fields become empty strings.

    Args:
        data: Decoded JSON document with ``simulation`` and ``assertions``.
        project_name: Build project name stamped onto every record.

    Returns:
        List of AssertionRecord, in document order.

    Raises:
        ReportParseError: If the document is not an object or its
            ``assertions`` entry is not a list.
    """
    if not isinstance(data, dict):
        raise ReportParseError("assertions document is not a JSON object")

    simulation = str(data.get("simulation") or "")
    assertions = data.get("assertions", [])
    if not isinstance(assertions, list):
        raise ReportParseError("'assertions' entry is not a list")

    records: list[AssertionRecord] = []
    for entry in assertions:
        if not isinstance(entry, dict):
            continue
        records.append(AssertionRecord(
            project_name=project_name,
            simulation_name=simulation,
            scenario_name=str(entry.get("scenarioName") or ""),
            request_name=str(entry.get("requestName") or ""),
            message=str(entry.get("message") or ""),
            assertion_type=str(entry.get("assertionType") or ""),
            actual_value=_join_values(entry.get("values")),
            expected_value=_join_values(entry.get("conditionValues")),
            status=_parse_status(entry.get("status", False)),
        ))
    return records


def load_assertion_records(
    report_dir: str | Path,
    project_name: str,
    filename: str = "assertions.json",
) -> list[AssertionRecord]:
    """Load every assertion record found below a report directory.

    Args:
        report_dir: Report (or archived report) directory to search.
        project_name: Build project name stamped onto every record.
        filename: Assertion results file name to look for.

    Returns:
        Records from all matching files, files visited in sorted order.

    Raises:
        ReportParseError: If no assertion file exists, or one cannot be
            read or decoded.
    """
    report_path = Path(report_dir)
    files = sorted(report_path.rglob(filename))
    if not files:
        raise ReportParseError(
            f"Could not find {filename} in report folder {report_path}"
        )

    records: list[AssertionRecord] = []
    for file_path in files:
        try:
            data = json.loads(file_path.read_text())
        except (json.JSONDecodeError, OSError) as e:
            raise ReportParseError(f"Cannot read {file_path}: {e}") from e
        records.extend(parse_assertions(data, project_name))
    return records
