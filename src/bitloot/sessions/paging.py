"""
Query-string coercion for the sessions list.

Bad paging input is clamped, never rejected: the dashboard sends whatever
the URL holds.
"""

from __future__ import annotations

import re

_LEADING_INT_RE = re.compile(r"\s*([+-]?\d+)")


def _leading_int(raw: str | None) -> int | None:
    # "3abc" -> 3, "abc" -> None
    if raw is None:
        return None
    m = _LEADING_INT_RE.match(raw)
    return int(m.group(1)) if m else None


def coerce_page(raw: str | None) -> int:
    value = _leading_int(raw)
    if not value:
        return 1
    return max(1, value)


def coerce_limit(raw: str | None, *, default: int = 10, maximum: int = 50) -> int:
    value = _leading_int(raw)
    if not value:
        value = default
    return min(maximum, max(1, value))
