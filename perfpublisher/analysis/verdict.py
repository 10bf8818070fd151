"""Build verdict text from failed assertions.

Produces the HTML fragment used as a build description: a bold
conclusion saying whether the build failed on KO assertions (requests
that errored), on performance thresholds, or on both, followed by one
line per failed assertion.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from perfpublisher.analysis.classifier import (
    KO,
    UNKNOWN,
    classify_metric_kind,
    classify_operator,
    metric_short_label,
    operator_symbol,
)
from perfpublisher.analysis.records import AssertionRecord
from perfpublisher.errors import UnrecognizedMetricKind

NBSP = "&nbsp;"


@dataclass
class VerdictTally:
    """Result of folding over a build's assertion records."""

    lines: list[str] = field(default_factory=list)
    failed_count: int = 0
    hard_failure_count: int = 0


def _kind_or_none(record: AssertionRecord) -> str | None:
    try:
        return classify_metric_kind(record.assertion_type)
    except UnrecognizedMetricKind:
        return None


def describe_failure(record: AssertionRecord) -> str:
    """Render the one-line HTML description of a failed assertion.

    When both the metric kind and the comparison resolve, the line is
    compact, e.g. ``authorize&nbsp;95th=1200,&nbsp;expect<1000;<br>``.
    Otherwise the raw message is shown with the status and actual value.
    """
    kind = _kind_or_none(record)
    operator = classify_operator(record.message)

    if kind is not None and operator != UNKNOWN:
        request = record.request_name.replace(" ", NBSP)
        return (
            f"{request}{NBSP}{metric_short_label(kind)}={record.actual_value},"
            f"{NBSP}expect{operator_symbol(operator)}{record.expected_value};<br>"
        )

    message = record.message.replace(" ", NBSP)
    status = "true" if record.status else "false"
    return f"{message}:{status}-Actual{NBSP}Value:{record.actual_value};<br>"


def tally_failures(records: list[AssertionRecord]) -> VerdictTally:
    """Fold over *records*, collecting description lines for failures.

    Args:
        records: All assertion records of a build, in parse order.

    Returns:
        VerdictTally with one line per failed record, the failed count,
        and how many of those failures were KO (hard) failures.
    """
    tally = VerdictTally()
    for record in records:
        if record.status:
            continue
        tally.failed_count += 1
        if _kind_or_none(record) == KO:
            tally.hard_failure_count += 1
        tally.lines.append(describe_failure(record))
    return tally


def conclusion(tally: VerdictTally) -> str:
    """Return the bold verdict heading for a tally with failures."""
    if tally.hard_failure_count == tally.failed_count:
        return "<b>KO</b>"
    if tally.hard_failure_count == 0:
        return "<b>PERFORMANCE</b>"
    return "<b>KO AND PERFORMANCE</b>"


def aggregate(records: list[AssertionRecord]) -> str:
    """Build the HTML build description for a list of assertion records.

    Returns an empty string when no assertion failed.
    """
    tally = tally_failures(records)
    if tally.failed_count == 0:
        return ""
    return conclusion(tally) + "<br>" + "".join(tally.lines)
