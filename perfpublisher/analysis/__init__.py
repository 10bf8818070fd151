"""Assertion analysis: record parsing, classification, and build verdicts."""

from perfpublisher.analysis.classifier import classify, classify_metric_kind, classify_operator
from perfpublisher.analysis.records import AssertionRecord, load_assertion_records, parse_assertions
from perfpublisher.analysis.verdict import VerdictTally, aggregate, describe_failure, tally_failures

__all__ = [
    "AssertionRecord",
    "VerdictTally",
    "aggregate",
    "classify",
    "classify_metric_kind",
    "classify_operator",
    "describe_failure",
    "load_assertion_records",
    "parse_assertions",
    "tally_failures",
]
