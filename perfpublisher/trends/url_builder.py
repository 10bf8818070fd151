"""Trend graph URL synthesis for load test assertions.

Turns one assertion record into a Graphite render URL showing the
asserted statistic's history for that request.  KO assertions and
projects whose brand/environment cannot be resolved get no graph of
their own; they are skipped rather than treated as errors.
"""

from __future__ import annotations

import re
import sys
from dataclasses import dataclass
from datetime import datetime
from typing import Any
from urllib.parse import quote_plus

from perfpublisher.analysis.classifier import (
    THROUGHPUT,
    classify_metric_kind,
    is_performance_metric,
    metric_path_segment,
)
from perfpublisher.analysis.records import AssertionRecord
from perfpublisher.config import PublisherConfig
from perfpublisher.trends.brand import resolve_brand_environment
from perfpublisher.trends.templates import TrendURLTemplate, fill_template

GRAPHITE_DATE_FORMAT = "%H:%M_%Y%m%d"
DEFAULT_FROM = "-1months"

PERFORMANCE_METRIC_LABEL_THROUGHPUT = "Requests_per_second"
PERFORMANCE_METRIC_LABEL_RESPONSE_TIME = "Response_Time_in_ms"

GLOBAL_REQUEST_NAME = "Global"
GLOBAL_REQUEST_METRIC_NAME = "Global_Information"

_UNSAFE_METRIC_CHARS = re.compile(r"[^\w.\-_]", re.ASCII)


@dataclass
class TrendGraphLink:
    """A trend graph URL with the text it is displayed under."""

    url: str
    display_name: str


def graphite_sanitize(data: str) -> str:
    """Replace characters that are not valid in a metric path with ``_``."""
    return _UNSAFE_METRIC_CHARS.sub("_", data)


def request_metric_name(request_name: str) -> str:
    """Map a request name to its metric path segment."""
    if request_name == GLOBAL_REQUEST_NAME:
        return GLOBAL_REQUEST_METRIC_NAME
    return graphite_sanitize(request_name)


def simulation_metric_name(simulation_name: str) -> str:
    """Map a (possibly fully-qualified) simulation class to its path segment.

    ``com.acme.load.OAuth2Simulation`` becomes ``oauth2simulation``.
    """
    return graphite_sanitize(simulation_name.split(".")[-1].lower())


def format_graphite_date(value: Any) -> str:
    """Format a datetime as ``HH:MM_YYYYMMDD``.

    Anything that cannot be formatted (None included) falls back to the
    relative range ``-1months`` instead of failing.
    """
    try:
        return value.strftime(GRAPHITE_DATE_FORMAT)
    except (AttributeError, ValueError, TypeError):
        print(
            f"trend urls: cannot format from time {value!r}; "
            f"defaulting range to {DEFAULT_FROM}",
            file=sys.stderr,
        )
        return DEFAULT_FROM


def _encode(value: str) -> str:
    return quote_plus(value, safe="*")


class TrendURLBuilder:
    """Builds Graphite trend graph URLs for assertion records."""

    def __init__(
        self,
        config: PublisherConfig | None = None,
        template: TrendURLTemplate | None = None,
    ) -> None:
        self.config = config or PublisherConfig()
        self.template = template or TrendURLTemplate(
            root_url=self.config.graphite_url,
        )

    def build_values(
        self,
        from_time: datetime | None,
        assertion: AssertionRecord,
    ) -> dict[str, str] | None:
        """Build the URL-encoded placeholder values for one assertion.

        Args:
            from_time: Start of the graphed range.
            assertion: The assertion to graph.

        Returns:
            Placeholder name to encoded value, or None when the assertion
            is not graphable (unresolved brand/environment or KO kind).

        Raises:
            UnrecognizedMetricKind: If the assertion label matches no
                known metric.
        """
        brand_env = resolve_brand_environment(
            assertion.project_name,
            self.config.brands,
            self.config.primary_brand,
        )
        if not brand_env.recognized:
            return None

        kind = classify_metric_kind(assertion.assertion_type)
        if not is_performance_metric(kind):
            return None

        if kind == THROUGHPUT:
            metric_label = PERFORMANCE_METRIC_LABEL_THROUGHPUT
            summarize_method = "min"
        else:
            metric_label = PERFORMANCE_METRIC_LABEL_RESPONSE_TIME
            summarize_method = "max"

        raw = {
            "env": brand_env.environment_key or "",
            "simName": simulation_metric_name(assertion.simulation_name),
            "reqName": request_metric_name(assertion.request_name),
            "assertName": metric_path_segment(kind),
            "assertDescr": assertion.assertion_type,
            "projName": assertion.project_name,
            "performanceMetricLabel": metric_label,
            "fromDateTime": format_graphite_date(from_time),
            "performanceStatSummarizeMethod": summarize_method,
        }
        return {name: _encode(value) for name, value in raw.items()}

    def build(
        self,
        from_time: datetime | None,
        assertion: AssertionRecord,
    ) -> str | None:
        """Build the trend graph URL for one assertion.

        Returns None when the assertion is skipped (see build_values).

        Raises:
            UnrecognizedMetricKind: If the assertion label matches no
                known metric.
        """
        values = self.build_values(from_time, assertion)
        if values is None:
            return None
        return fill_template(self.template.combined(), values)

    def build_links(
        self,
        from_time: datetime | None,
        assertions: list[AssertionRecord],
    ) -> list[TrendGraphLink]:
        """Build trend graph links for a batch of assertions.

        Skipped assertions are omitted.  An assertion that fails to build
        is reported on stderr and omitted; the rest of the batch goes on.
        Links keep the input order.
        """
        links: list[TrendGraphLink] = []
        for assertion in assertions:
            try:
                url = self.build(from_time, assertion)
            except Exception as e:
                print(
                    f"trend urls: failed to generate url for assertion data\n"
                    f"  Project Name: {assertion.project_name}\n"
                    f"  {assertion!r}\n"
                    f"  {e}",
                    file=sys.stderr,
                )
                continue
            if url is None:
                continue
            links.append(TrendGraphLink(
                url=url,
                display_name=f"{assertion.request_name} - {assertion.assertion_type}",
            ))
        return links

    def build_urls(
        self,
        from_time: datetime | None,
        assertions: list[AssertionRecord],
    ) -> list[str]:
        """Like build_links, returning the URLs only."""
        return [link.url for link in self.build_links(from_time, assertions)]
