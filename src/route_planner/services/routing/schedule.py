"""Arrival time derivation for an ordered route."""

from __future__ import annotations

from datetime import datetime, timedelta, tzinfo
from typing import Any, Sequence

from ...errors import SchemaViolation
from .duration import parse_duration


def format_arrival_time(moment: datetime) -> str:
    """Render ``moment`` as ``h:mm AM/PM`` without a leading zero on the hour."""
    hour = moment.hour % 12 or 12
    meridiem = "AM" if moment.hour < 12 else "PM"
    return f"{hour}:{moment.minute:02d} {meridiem}"


def compute_schedule(
    route: Sequence[dict[str, Any]],
    start: datetime,
    tz: tzinfo | None = None,
) -> list[dict[str, Any]]:
    """Attach ``estimatedArrivalTime`` to every step of ``route``.

    The ETA of step ``i`` is ``start`` plus the parsed durations of steps ``1..i``.
    ``start`` is sampled once by the caller, so the result is fully determined by
    its inputs. When ``tz`` is given the running instant is rendered in that zone.
    Input steps are not modified; every original field is copied verbatim.

    Raises:
        SchemaViolation: a duration pushes the running instant outside the
            representable datetime range.
    """
    current = start
    processed: list[dict[str, Any]] = []
    for index, step in enumerate(route, start=1):
        try:
            current = current + timedelta(milliseconds=parse_duration(step["travelTimeFromPrevious"]))
            local = current.astimezone(tz) if tz is not None else current
        except OverflowError as exc:
            raise SchemaViolation(
                f"step[{index}].travelTimeFromPrevious",
                f"Route step {index} has an out-of-range travel time {step['travelTimeFromPrevious']!r}.",
            ) from exc
        processed.append({**step, "estimatedArrivalTime": format_arrival_time(local)})
    return processed
