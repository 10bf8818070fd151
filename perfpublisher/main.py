"""Command-line entry point for publishing load test results.

Provides the publish subcommand, run at the end of a build to archive
the build's Gatling reports and derive trend graphs and a build
description, the shift-url subcommand, which moves the start of a trend
graph URL's time range, and the config subcommand, which shows or
updates the .perfpublisher file.
"""

from __future__ import annotations

import argparse
import json
import sys
from datetime import datetime, timezone
from pathlib import Path

from perfpublisher.config import PublisherConfig
from perfpublisher.publish import STATUS_NO_REPORTS, publish
from perfpublisher.reporting.reporter import Reporter
from perfpublisher.trends.date_shift import shift_from_date


def parse_timestamp(text: str) -> datetime:
    """Parse an ISO 8601 timestamp or epoch milliseconds.

    Naive timestamps are taken as local time.

    Raises:
        ValueError: If *text* is neither form.
    """
    text = text.strip()
    if text.isdigit():
        return datetime.fromtimestamp(int(text) / 1000.0, tz=timezone.utc)
    parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.astimezone()
    return parsed


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Publish Gatling load test results of a build"
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # publish subcommand
    publish_parser = subparsers.add_parser(
        "publish",
        help="Archive this build's reports and derive trend graphs and a description",
    )
    publish_parser.add_argument(
        "--workspace",
        type=Path,
        default=Path("."),
        help="Build workspace to search for reports (default: current directory)",
    )
    publish_parser.add_argument(
        "--build-dir",
        type=Path,
        required=True,
        help="Build directory to archive reports into",
    )
    publish_parser.add_argument(
        "--build-start",
        type=str,
        required=True,
        help="Build start time, ISO 8601 or epoch milliseconds",
    )
    publish_parser.add_argument(
        "--project-name",
        type=str,
        required=True,
        help="Project name, e.g. Web_Performance_Tests-kappa-apiserver",
    )
    publish_parser.add_argument(
        "--from",
        dest="from_time",
        type=str,
        default=None,
        help="Start of the trend graph range (default: the last month)",
    )
    publish_parser.add_argument(
        "--config-file",
        type=Path,
        default=None,
        help="Path to the .perfpublisher JSON config file",
    )
    publish_parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Path to write the YAML build report",
    )
    publish_parser.add_argument(
        "--pool",
        type=str,
        default=None,
        help="Application server pool under test; links target environment graphs",
    )
    publish_parser.add_argument(
        "--build-end",
        type=str,
        default=None,
        help="End of the build run for target environment graphs (default: now)",
    )

    # config subcommand
    config_parser = subparsers.add_parser(
        "config",
        help="Show or update the .perfpublisher config file",
    )
    config_parser.add_argument(
        "--config-file",
        type=Path,
        default=Path(".perfpublisher"),
        help="Path to the config file (default: ./.perfpublisher)",
    )
    config_parser.add_argument(
        "--graphite-url",
        type=str,
        default=None,
        help="Render endpoint trend URLs start with, ending in 'render?'",
    )
    config_parser.add_argument(
        "--primary-brand",
        type=str,
        default=None,
        help="Brand whose environments are addressed without a prefix",
    )
    config_parser.add_argument(
        "--brand",
        action="append",
        default=[],
        metavar="SHORT=NAME",
        help="Add or rename a brand (repeatable)",
    )
    config_parser.add_argument(
        "--pool",
        action="append",
        default=[],
        metavar="LONG=SHORT",
        help="Add a server pool short name (repeatable)",
    )

    # shift-url subcommand
    shift_parser = subparsers.add_parser(
        "shift-url",
        help="Move a trend graph URL's start date to N days ago",
    )
    shift_parser.add_argument(
        "--url",
        type=str,
        required=True,
        help="Trend graph URL to rewrite",
    )
    shift_parser.add_argument(
        "--days",
        type=str,
        required=True,
        help="Number of days back the graph should start",
    )

    return parser.parse_args(argv)


def cmd_publish(args: argparse.Namespace) -> int:
    """Handle publish subcommand.

    Returns:
        Exit code: 0 when published or when there was nothing to publish,
        1 on invalid arguments.
    """
    try:
        build_start = parse_timestamp(args.build_start)
        from_time = parse_timestamp(args.from_time) if args.from_time else None
        build_end = parse_timestamp(args.build_end) if args.build_end else None
    except ValueError as e:
        print(f"Error: invalid timestamp: {e}", file=sys.stderr)
        return 1

    config = PublisherConfig(args.config_file)

    result = publish(
        workspace=args.workspace,
        build_dir=args.build_dir,
        build_start=build_start,
        project_name=args.project_name,
        from_time=from_time,
        config=config,
        pool=args.pool,
        build_end=build_end,
    )

    if args.output:
        reporter = Reporter()
        reporter.set_build_info(args.project_name, build_start)
        reporter.set_result(result)
        reporter.write_yaml_with_history(args.output, args.output)
        print(f"Report written to {args.output}")

    if result.status == STATUS_NO_REPORTS:
        print("No newer Gatling reports to archive.")
        return 0

    print(f"Archived {len(result.simulations)} simulation(s)")
    for link in result.trend_links:
        print(f"  {link.display_name}: {link.url}")
    if result.target_env_links:
        print("Target environment graphs:")
        for link in result.target_env_links:
            print(f"  {link.display_name}: {link.url}")
    for diagnostic in result.diagnostics:
        print(f"  warning: {diagnostic}")
    if result.description:
        print(result.description)
    return 0


def _parse_pairs(pairs: list[str], option: str) -> dict[str, str]:
    """Parse repeated KEY=VALUE options into a dict with lower-case keys."""
    parsed: dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key.strip() or not value.strip():
            raise ValueError(f"{option} expects KEY=VALUE, got {pair!r}")
        parsed[key.strip().lower()] = value.strip()
    return parsed


def cmd_config(args: argparse.Namespace) -> int:
    """Handle config subcommand.

    Without update options, prints the effective configuration.  With
    any, applies them and writes the config file.

    Returns:
        Exit code: 0 on success, 1 on malformed options.
    """
    try:
        brands = _parse_pairs(args.brand, "--brand")
        pools = _parse_pairs(args.pool, "--pool")
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    config = PublisherConfig(args.config_file)
    updating = (
        args.graphite_url is not None
        or args.primary_brand is not None
        or brands
        or pools
    )
    if updating:
        config.set_config(
            graphite_url=args.graphite_url,
            primary_brand=args.primary_brand,
            brands=brands,
            server_pools=pools,
        )
        config.save()
        print(f"Config written to {config.path}")

    print(json.dumps(config.config, indent=2))
    return 0


def cmd_shift_url(args: argparse.Namespace) -> int:
    """Handle shift-url subcommand."""
    print(shift_from_date(args.url, args.days))
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    if args.command is None:
        parse_args(["--help"])
        return 1

    if args.command == "publish":
        return cmd_publish(args)
    elif args.command == "config":
        return cmd_config(args)
    elif args.command == "shift-url":
        return cmd_shift_url(args)
    else:
        print(f"Unknown command: {args.command}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
