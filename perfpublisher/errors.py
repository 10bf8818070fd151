"""Exception types raised while publishing load test results.

Per-assertion and per-report errors are caught by the batch code that
produced them, so a single bad record never aborts the rest of a build.
"""

from __future__ import annotations


class PublisherError(Exception):
    """Base class for all perfpublisher errors."""


class UnrecognizedMetricKind(PublisherError, ValueError):
    """An assertion label matches none of the known metric patterns."""

    def __init__(self, assertion_type: str | None) -> None:
        super().__init__(f"Unexpected assertion type: {assertion_type!r}")
        self.assertion_type = assertion_type


class MalformedReportDirectoryName(PublisherError, ValueError):
    """A report directory name has no ``<simulation>-<suffix>`` shape."""

    def __init__(self, name: str) -> None:
        super().__init__(
            f"Report directory name has no simulation id: {name!r}"
        )
        self.name = name


class NoReportsFound(PublisherError):
    """No report marker file exists anywhere in the workspace."""


class UnrecognizedBrandOrEnvironment(PublisherError, ValueError):
    """A project name does not follow the brand/environment convention."""

    def __init__(self, project_name: str | None) -> None:
        super().__init__(
            f"Cannot resolve brand/environment from project: {project_name!r}"
        )
        self.project_name = project_name


class MalformedShiftTarget(PublisherError, ValueError):
    """A day offset is not an integer, or the URL has no from= parameter."""


class ReportParseError(PublisherError):
    """A report directory holds no readable assertion results."""
