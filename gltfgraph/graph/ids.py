"""Utility helpers for generating resource names and timestamps."""
from __future__ import annotations

import datetime as _dt
from typing import Iterable


def unique_name(template: str, taken: Iterable[str], *, start: int = 0) -> str:
    """Return the first ``template.format(n)`` (``n >= start``) not already ``taken``."""

    used = set(taken)
    index = start
    while True:
        candidate = template.format(index)
        if candidate not in used:
            return candidate
        index += 1


def utc_now() -> str:
    """Return the current UTC time formatted as an ISO 8601 string."""

    return _dt.datetime.now(_dt.timezone.utc).isoformat()
