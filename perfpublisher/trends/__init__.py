"""Trend graphs: brand/environment resolution and Graphite URL building."""

from perfpublisher.trends.brand import BrandEnvironment, parse_project_name, resolve_brand_environment
from perfpublisher.trends.date_shift import shift_from_date
from perfpublisher.trends.templates import TrendURLTemplate, fill_template
from perfpublisher.trends.url_builder import TrendGraphLink, TrendURLBuilder

__all__ = [
    "BrandEnvironment",
    "TrendGraphLink",
    "TrendURLBuilder",
    "TrendURLTemplate",
    "fill_template",
    "parse_project_name",
    "resolve_brand_environment",
    "shift_from_date",
]
