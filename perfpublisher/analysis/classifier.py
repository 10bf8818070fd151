"""Assertion classification by label substrings.

Gatling writes assertion labels and messages as free text ("95th
percentile response time", "authorize 95th percentile response time is
less than 1000").  Labels are mapped to a canonical metric kind and
messages to a comparison operator by substring containment.  Labels can
contain more than one known substring, so the pattern tables below are
evaluated top to bottom and the first match wins.
"""

from __future__ import annotations

from perfpublisher.errors import UnrecognizedMetricKind

# Metric kinds
P50 = "p50"
P80 = "p80"
P95 = "p95"
P99 = "p99"
MEAN = "mean"
MIN = "min"
MAX = "max"
STDDEV = "stddev"
THROUGHPUT = "throughput"
KO = "ko"

METRIC_KINDS = frozenset({
    P50, P80, P95, P99, MEAN, MIN, MAX, STDDEV, THROUGHPUT, KO,
})

# Comparison operators
GREATER_THAN = "greaterThan"
LESS_THAN = "lessThan"
WITHIN = "within"
EQUAL_TO = "equalTo"
UNKNOWN = "unknown"

OPERATORS = frozenset({GREATER_THAN, LESS_THAN, WITHIN, EQUAL_TO, UNKNOWN})

# (substring, kind) in priority order.
METRIC_KIND_PATTERNS: tuple[tuple[str, str], ...] = (
    ("50th", P50),
    ("80th", P80),
    ("95th", P95),
    ("99th", P99),
    ("requests per second", THROUGHPUT),
    ("mean", MEAN),
    ("percentage of failed requests", KO),
    ("min", MIN),
    ("max", MAX),
    ("standard deviation", STDDEV),
)

# (substring, operator) in priority order.
OPERATOR_PATTERNS: tuple[tuple[str, str], ...] = (
    ("is greater than", GREATER_THAN),
    ("is less than", LESS_THAN),
    ("is in", WITHIN),
    ("is equal to", EQUAL_TO),
)

# Metric name segment under load.summary.<env>.<sim>.<req>.all
_METRIC_PATH_SEGMENTS: dict[str, str] = {
    P50: "percentiles50",
    P80: "percentiles80",
    P95: "percentiles95",
    P99: "percentiles99",
    MEAN: "mean",
    MIN: "min",
    MAX: "max",
    STDDEV: "stddev",
    THROUGHPUT: "throughput",
    KO: "ko",
}

_METRIC_SHORT_LABELS: dict[str, str] = {
    P50: "50th",
    P80: "80th",
    P95: "95th",
    P99: "99th",
    THROUGHPUT: "req/s",
    MEAN: "mean",
    KO: "KO%",
    MIN: "min",
    MAX: "max",
    STDDEV: "stddev",
}

_OPERATOR_SYMBOLS: dict[str, str] = {
    GREATER_THAN: ">",
    LESS_THAN: "<",
    WITHIN: "in",
    EQUAL_TO: "=",
}


def classify_metric_kind(assertion_type: str | None) -> str:
    """Map an assertion label to its metric kind.

    Args:
        assertion_type: Free-text metric label, e.g.
            "95th percentile response time".

    Returns:
        One of the METRIC_KINDS constants.

    Raises:
        UnrecognizedMetricKind: If no pattern matches (or the label is
            None).
    """
    if assertion_type is None:
        raise UnrecognizedMetricKind(assertion_type)
    for pattern, kind in METRIC_KIND_PATTERNS:
        if pattern in assertion_type:
            return kind
    raise UnrecognizedMetricKind(assertion_type)


def classify_operator(message: str | None) -> str:
    """Map an assertion message to its comparison operator.

    Returns UNKNOWN when the message names no known comparison.
    """
    if not message:
        return UNKNOWN
    for pattern, operator in OPERATOR_PATTERNS:
        if pattern in message:
            return operator
    return UNKNOWN


def classify(assertion_type: str | None, message: str | None) -> tuple[str, str]:
    """Classify an assertion into ``(metric_kind, operator)``.

    The operator is derived from *message* independently of the label.

    Raises:
        UnrecognizedMetricKind: If the label matches no metric pattern.
    """
    return classify_metric_kind(assertion_type), classify_operator(message)


def is_performance_metric(kind: str | None) -> bool:
    """Return True for kinds that get their own trend graph (all but KO)."""
    return kind is not None and kind != KO


def metric_path_segment(kind: str) -> str:
    """Return the metrics backend name for *kind*, e.g. ``percentiles95``."""
    return _METRIC_PATH_SEGMENTS[kind]


def metric_short_label(kind: str) -> str:
    """Return the compact label used in build descriptions, e.g. ``95th``."""
    return _METRIC_SHORT_LABELS[kind]


def operator_symbol(operator: str) -> str | None:
    """Return the display symbol for *operator*, or None when unknown."""
    return _OPERATOR_SYMBOLS.get(operator)
