"""Unit tests for the command-line entry point."""

from __future__ import annotations

import json
import os
import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path
from unittest.mock import patch

import pytest
import yaml

from perfpublisher.main import (
    cmd_config,
    cmd_publish,
    cmd_shift_url,
    main,
    parse_args,
    parse_timestamp,
)
from perfpublisher.config import PublisherConfig
from perfpublisher.publish import PublishResult

BUILD_START = "2024-01-01T12:00:00+00:00"
PROJECT = "Web_Performance_Tests-kappa-apiserver"


def _make_report(workspace: Path, name: str) -> Path:
    report = workspace / name
    js_dir = report / "js"
    js_dir.mkdir(parents=True)
    (js_dir / "global_stats.json").write_text("{}")
    (js_dir / "assertions.json").write_text(json.dumps({
        "simulation": "com.acme.load.CheckoutSimulation",
        "assertions": [{
            "requestName": "checkout",
            "scenarioName": "buy",
            "assertionType": "95th percentile response time",
            "message": "checkout 95th percentile response time is less than 800",
            "status": False,
            "values": [950],
            "conditionValues": [800],
        }],
    }))
    stamp = datetime.fromisoformat(BUILD_START).timestamp() + 60
    os.utime(report, (stamp, stamp))
    return report


class TestParseTimestamp:
    """Tests for timestamp parsing."""

    def test_iso(self):
        assert parse_timestamp(BUILD_START) == datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)

    def test_zulu(self):
        """A trailing Z means UTC."""
        assert parse_timestamp("2024-01-01T12:00:00Z").utcoffset() == timedelta(0)

    def test_epoch_millis(self):
        """A run of digits is epoch milliseconds."""
        assert parse_timestamp("1704110400000") == datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)

    def test_naive_becomes_aware(self):
        """A naive timestamp is given the local offset."""
        assert parse_timestamp("2024-01-01T12:00:00").tzinfo is not None

    def test_invalid_raises(self):
        with pytest.raises(ValueError):
            parse_timestamp("yesterday")


class TestParseArgs:
    """Tests for argument parsing."""

    def test_publish_command(self):
        """Parse publish subcommand."""
        args = parse_args([
            "publish", "--build-dir", "/builds/42", "--build-start", BUILD_START,
            "--project-name", PROJECT,
        ])
        assert args.command == "publish"
        assert args.build_dir == Path("/builds/42")
        assert args.workspace == Path(".")
        assert args.from_time is None
        assert args.output is None

    def test_publish_options(self):
        """Parse optional publish arguments."""
        args = parse_args([
            "publish", "--workspace", "/ws", "--build-dir", "/b",
            "--build-start", BUILD_START, "--project-name", PROJECT,
            "--from", "2023-12-01T00:00:00", "--config-file", "/etc/pp.json",
            "--output", "/b/report.yaml",
        ])
        assert args.workspace == Path("/ws")
        assert args.from_time == "2023-12-01T00:00:00"
        assert args.config_file == Path("/etc/pp.json")
        assert args.output == Path("/b/report.yaml")

    def test_publish_pool_options(self):
        """Parse target environment options."""
        args = parse_args([
            "publish", "--build-dir", "/b", "--build-start", BUILD_START,
            "--project-name", PROJECT, "--pool", "app",
            "--build-end", "2024-01-01T12:30:00+00:00",
        ])
        assert args.pool == "app"
        assert args.build_end == "2024-01-01T12:30:00+00:00"

    def test_publish_requires_build_dir(self):
        with pytest.raises(SystemExit):
            parse_args(["publish", "--build-start", BUILD_START, "--project-name", PROJECT])

    def test_shift_url_command(self):
        """Parse shift-url subcommand."""
        args = parse_args(["shift-url", "--url", "http://g/render?from=x", "--days", "7"])
        assert args.command == "shift-url"
        assert args.days == "7"


class TestCmdPublish:
    """Tests for the publish subcommand."""

    def test_invalid_build_start(self, capsys):
        """An unparseable build start returns 1."""
        args = parse_args([
            "publish", "--build-dir", "/b", "--build-start", "soon",
            "--project-name", PROJECT,
        ])
        assert cmd_publish(args) == 1
        assert "invalid timestamp" in capsys.readouterr().err

    def test_no_reports(self, capsys):
        """Nothing to publish is a success."""
        with tempfile.TemporaryDirectory() as tmpdir:
            args = parse_args([
                "publish", "--workspace", tmpdir, "--build-dir", str(Path(tmpdir) / "b"),
                "--build-start", BUILD_START, "--project-name", PROJECT,
            ])
            assert cmd_publish(args) == 0
            assert "No newer Gatling reports to archive." in capsys.readouterr().out

    def test_publish_writes_report(self, capsys):
        """Published results are printed and written as YAML."""
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            _make_report(root / "workspace", "checkout-1")
            output = root / "build" / "report.yaml"
            args = parse_args([
                "publish", "--workspace", str(root / "workspace"),
                "--build-dir", str(root / "build"), "--build-start", BUILD_START,
                "--project-name", PROJECT, "--from", "1704110400000",
                "--output", str(output),
            ])

            assert cmd_publish(args) == 0

            out = capsys.readouterr().out
            assert "Archived 1 simulation(s)" in out
            assert "checkout - 95th percentile response time:" in out
            assert "<b>PERFORMANCE</b><br>checkout&nbsp;95th=950,&nbsp;expect<800;<br>" in out

            data = yaml.safe_load(output.read_text())
            assert data["report"]["status"] == "published"
            assert data["report"]["project"] == PROJECT
            assert data["report"]["summary"]["failed"] == 1
            assert "com.acme.load.CheckoutSimulation" in data["report"]["history"]

    def test_publish_with_pool(self, capsys):
        """Target environment graphs are printed when a pool is given."""
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            _make_report(root / "workspace", "checkout-1")
            args = parse_args([
                "publish", "--workspace", str(root / "workspace"),
                "--build-dir", str(root / "build"), "--build-start", BUILD_START,
                "--project-name", PROJECT, "--pool", "app",
                "--build-end", "2024-01-01T12:30:00+00:00",
            ])

            assert cmd_publish(args) == 0

            out = capsys.readouterr().out
            assert "Target environment graphs:" in out
            assert "pool_cpu_user_usage: http://graphite.localdomain/render?target=sfly.kappa." in out

    def test_invalid_build_end(self, capsys):
        args = parse_args([
            "publish", "--build-dir", "/b", "--build-start", BUILD_START,
            "--project-name", PROJECT, "--build-end", "later",
        ])
        assert cmd_publish(args) == 1
        assert "invalid timestamp" in capsys.readouterr().err

    def test_config_file_used(self):
        """The config file is passed on to publish()."""
        with tempfile.TemporaryDirectory() as tmpdir:
            config_path = Path(tmpdir) / ".perfpublisher"
            config_path.write_text(json.dumps({"graphite_url": "http://other/render?"}))
            args = parse_args([
                "publish", "--workspace", tmpdir, "--build-dir", tmpdir,
                "--build-start", BUILD_START, "--project-name", PROJECT,
                "--config-file", str(config_path),
            ])
            with patch("perfpublisher.main.publish",
                       return_value=PublishResult(status="no_reports")) as mock_publish:
                assert cmd_publish(args) == 0
            config = mock_publish.call_args.kwargs["config"]
            assert config.graphite_url == "http://other/render?"


class TestCmdConfig:
    """Tests for the config subcommand."""

    def test_show_defaults(self, capsys):
        """Without updates the effective config is printed, nothing written."""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / ".perfpublisher"
            assert main(["config", "--config-file", str(path)]) == 0
            shown = json.loads(capsys.readouterr().out)
            assert shown["primary_brand"] == "sfly"
            assert not path.exists()

    def test_update_and_save(self, capsys):
        """Updates are written to the file and used on the next load."""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / ".perfpublisher"
            assert main([
                "config", "--config-file", str(path),
                "--graphite-url", "https://stats.example/render?",
                "--brand", "ls=Lifetouch",
                "--pool", "ApplicationServer=app",
            ]) == 0
            assert "Config written to" in capsys.readouterr().out

            cfg = PublisherConfig(path)
            assert cfg.graphite_url == "https://stats.example/render?"
            assert cfg.brands["ls"] == "Lifetouch"
            assert cfg.server_pools == {"applicationserver": "app"}

    def test_malformed_pair(self, capsys):
        """A --brand value without '=' is rejected."""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / ".perfpublisher"
            args = parse_args(["config", "--config-file", str(path), "--brand", "ls"])
            assert cmd_config(args) == 1
            assert "KEY=VALUE" in capsys.readouterr().err
            assert not path.exists()


class TestCmdShiftUrl:
    """Tests for the shift-url subcommand."""

    def test_prints_shifted_url(self, capsys):
        args = parse_args(["shift-url", "--url", "http://g/render?from=-1months", "--days", "7"])
        assert cmd_shift_url(args) == 0
        out = capsys.readouterr().out.strip()
        assert out.startswith("http://g/render?from=")
        assert out != "http://g/render?from=-1months"

    def test_invalid_days_prints_original(self, capsys):
        """An invalid offset prints the URL unchanged."""
        args = parse_args(["shift-url", "--url", "http://g/render?from=-1months", "--days", "x"])
        assert cmd_shift_url(args) == 0
        assert capsys.readouterr().out.strip() == "http://g/render?from=-1months"


class TestMain:
    """Tests for main dispatch."""

    def test_no_command(self):
        """No command shows help."""
        with pytest.raises(SystemExit):
            main([])

    def test_dispatch_shift_url(self, capsys):
        assert main(["shift-url", "--url", "http://g/render?a=1", "--days", "3"]) == 0
        assert capsys.readouterr().out.strip() == "http://g/render?a=1"
