"""Tests for assertion record parsing."""

from __future__ import annotations

import json
import tempfile
from pathlib import Path

import pytest

from perfpublisher.analysis.records import (
    AssertionRecord,
    load_assertion_records,
    parse_assertions,
)
from perfpublisher.errors import ReportParseError

PROJECT = "Web_Performance_Tests-kappa-apiserver_OAuth2Simulation"


def _document(**overrides):
    entry = {
        "requestName": "authorize",
        "scenarioName": "login",
        "assertionType": "95th percentile response time",
        "message": "authorize 95th percentile response time is less than 1000",
        "status": False,
        "values": [1200],
        "conditionValues": [1000],
    }
    entry.update(overrides)
    return {"simulation": "com.acme.load.OAuth2Simulation", "assertions": [entry]}


class TestParseAssertions:
    """Tests for parse_assertions."""

    def test_single_assertion(self):
        """All fields are mapped onto the record."""
        records = parse_assertions(_document(), PROJECT)
        assert records == [AssertionRecord(
            project_name=PROJECT,
            simulation_name="com.acme.load.OAuth2Simulation",
            scenario_name="login",
            request_name="authorize",
            message="authorize 95th percentile response time is less than 1000",
            assertion_type="95th percentile response time",
            actual_value="1200",
            expected_value="1000",
            status=False,
        )]

    def test_value_lists_are_comma_joined(self):
        """Multi-valued conditions are joined with commas."""
        records = parse_assertions(
            _document(values=[1.5, 3], conditionValues=[0, 5]), PROJECT,
        )
        assert records[0].actual_value == "1.5,3"
        assert records[0].expected_value == "0,5"

    def test_integral_floats_drop_fraction(self):
        """1000.0 is rendered as 1000."""
        records = parse_assertions(_document(values=[1000.0]), PROJECT)
        assert records[0].actual_value == "1000"

    def test_missing_fields_default_to_empty(self):
        """Absent keys give empty strings and a failed status."""
        records = parse_assertions({"assertions": [{}]}, PROJECT)
        record = records[0]
        assert record.simulation_name == ""
        assert record.request_name == ""
        assert record.actual_value == ""
        assert record.status is False

    def test_string_status(self):
        """A 'true' string status counts as passed."""
        records = parse_assertions(_document(status="true"), PROJECT)
        assert records[0].status is True

    def test_unknown_keys_ignored(self):
        """Extra keys in entries are ignored."""
        records = parse_assertions(_document(extra="x"), PROJECT)
        assert len(records) == 1

    def test_non_object_entries_skipped(self):
        """Entries that are not objects are skipped."""
        data = _document()
        data["assertions"].append("garbage")
        assert len(parse_assertions(data, PROJECT)) == 1

    def test_assertions_not_a_list_raises(self):
        """A non-list assertions entry is a parse error."""
        with pytest.raises(ReportParseError):
            parse_assertions({"assertions": "nope"}, PROJECT)

    def test_document_not_an_object_raises(self):
        """A non-object document is a parse error."""
        with pytest.raises(ReportParseError):
            parse_assertions([], PROJECT)


class TestLoadAssertionRecords:
    """Tests for load_assertion_records."""

    def test_loads_nested_file(self):
        """assertions.json is found anywhere below the report directory."""
        with tempfile.TemporaryDirectory() as tmpdir:
            js_dir = Path(tmpdir) / "js"
            js_dir.mkdir()
            (js_dir / "assertions.json").write_text(json.dumps(_document()))

            records = load_assertion_records(tmpdir, PROJECT)
            assert len(records) == 1
            assert records[0].project_name == PROJECT

    def test_multiple_files_concatenate(self):
        """Records from several files are concatenated in path order."""
        with tempfile.TemporaryDirectory() as tmpdir:
            for sub, request in (("a", "first"), ("b", "second")):
                d = Path(tmpdir) / sub
                d.mkdir()
                (d / "assertions.json").write_text(
                    json.dumps(_document(requestName=request))
                )

            records = load_assertion_records(tmpdir, PROJECT)
            assert [r.request_name for r in records] == ["first", "second"]

    def test_missing_file_raises(self):
        """No assertions.json is a per-report parse error."""
        with tempfile.TemporaryDirectory() as tmpdir:
            with pytest.raises(ReportParseError):
                load_assertion_records(tmpdir, PROJECT)

    def test_invalid_json_raises(self):
        """Undecodable JSON is a per-report parse error."""
        with tempfile.TemporaryDirectory() as tmpdir:
            (Path(tmpdir) / "assertions.json").write_text("{ invalid json }")
            with pytest.raises(ReportParseError):
                load_assertion_records(tmpdir, PROJECT)

    def test_custom_filename(self):
        """A different assertion file name can be configured."""
        with tempfile.TemporaryDirectory() as tmpdir:
            (Path(tmpdir) / "checks.json").write_text(json.dumps(_document()))
            records = load_assertion_records(tmpdir, PROJECT, filename="checks.json")
            assert len(records) == 1
