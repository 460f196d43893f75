"""Free-text travel duration parsing."""

from __future__ import annotations

import re

_HOURS_PATTERN = re.compile(r"(\d+)\s*hour")
_MINUTES_PATTERN = re.compile(r"(\d+)\s*min")


def parse_duration(text: str) -> int:
    """Convert a duration such as ``"1 hour 30 minutes"`` to milliseconds.

    Only the first integer before ``hour`` and the first before ``min`` count;
    everything else is ignored and missing parts contribute zero. Values are not
    range-checked, so ``"90 minutes"`` is 90 minutes.
    """
    total_minutes = 0
    hours_match = _HOURS_PATTERN.search(text)
    minutes_match = _MINUTES_PATTERN.search(text)
    if hours_match:
        total_minutes += int(hours_match.group(1)) * 60
    if minutes_match:
        total_minutes += int(minutes_match.group(1))
    return total_minutes * 60 * 1000
