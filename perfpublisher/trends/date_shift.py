"""Rewrite the start of a trend graph's time range.

Lets a viewer widen or narrow a graph to the last N days without
rebuilding its URL.  This runs from display code, so a bad offset or an
unexpected URL leaves the URL unchanged instead of raising.
"""

from __future__ import annotations

import re
import sys
from datetime import datetime, timedelta
from typing import Any
from urllib.parse import quote_plus

from perfpublisher.errors import MalformedShiftTarget
from perfpublisher.trends.url_builder import GRAPHITE_DATE_FORMAT

# The from= parameter's value, up to the next parameter or the end.
_FROM_PARAM_RE = re.compile(r"(?<=[?&])from=[^&]*")
_DAY_OFFSET_RE = re.compile(r"[+-]?[0-9]+")


def _parse_day_offset(day_offset: Any) -> int:
    if isinstance(day_offset, bool) or day_offset is None:
        raise MalformedShiftTarget(f"invalid day offset: {day_offset!r}")
    if isinstance(day_offset, int):
        return day_offset
    text = str(day_offset)
    if not _DAY_OFFSET_RE.fullmatch(text):
        raise MalformedShiftTarget(f"invalid day offset: {day_offset!r}")
    return int(text)


def replace_from_param(url: str, value: str) -> str:
    """Replace the value of the ``from=`` query parameter.

    Args:
        url: URL containing a ``from=`` parameter.
        value: New, already encoded, parameter value.

    Returns:
        The URL with only the ``from=`` value changed.

    Raises:
        MalformedShiftTarget: If the URL has no ``from=`` parameter.
    """
    match = _FROM_PARAM_RE.search(url)
    if match is None:
        raise MalformedShiftTarget("url has no from= parameter")
    return url[:match.start()] + "from=" + value + url[match.end():]


def shift_from_date(
    url: str,
    day_offset: int | str | None,
    now: datetime | None = None,
) -> str:
    """Point a trend graph URL's ``from=`` parameter at N days ago.

    Args:
        url: A previously built trend graph URL.
        day_offset: Number of days back, as an int or a numeric string.
        now: Reference time; defaults to the current local time.

    Returns:
        The rewritten URL, or *url* unchanged when the offset is not an
        integer or the URL has no ``from=`` parameter.
    """
    try:
        days = _parse_day_offset(day_offset)
        reference = now if now is not None else datetime.now()
        from_date = reference - timedelta(days=days)
        encoded = quote_plus(from_date.strftime(GRAPHITE_DATE_FORMAT))
        return replace_from_param(url, encoded)
    except (MalformedShiftTarget, OverflowError) as e:
        print(
            f"date shift: failed to modify url from date, returning it "
            f"unchanged: {e}",
            file=sys.stderr,
        )
        return url
