"""Extraction and schema validation of oracle route replies."""

from __future__ import annotations

import json
import logging
from typing import Any

from ...errors import MalformedResponse, SchemaViolation
from ...models.domain import ValidatedRoute

logger = logging.getLogger(__name__)


def extract_json_payload(raw_text: str) -> Any:
    """Parse the span between the first ``{`` and the last ``}`` of ``raw_text``.

    The oracle may wrap its JSON in prose or code fences; anything outside the
    outermost braces is discarded.
    """
    start = raw_text.find("{")
    end = raw_text.rfind("}")
    if start == -1 or end == -1 or end < start:
        raise MalformedResponse("Oracle response does not contain a JSON object.")

    candidate = raw_text[start : end + 1]
    try:
        return json.loads(candidate)
    except json.JSONDecodeError as exc:
        logger.warning(f"Oracle JSON payload could not be parsed: {exc}")
        raise MalformedResponse(f"Oracle response contains invalid JSON: {exc}") from exc


def validate_route_payload(payload: Any) -> ValidatedRoute:
    """Check the parsed payload shape and return it unchanged as a ``ValidatedRoute``.

    Rules, each with its own ``SchemaViolation`` field:
        route                           must be a list
        totalTravelTime                 must be a non-empty string
        step[i].travelTimeFromPrevious  every step must carry a string duration (1-based i)
    """
    if not isinstance(payload, dict):
        raise SchemaViolation("route", "Oracle response is not a JSON object with a 'route' array.")

    route = payload.get("route")
    if not isinstance(route, list):
        raise SchemaViolation("route", "Oracle response is missing the 'route' array.")

    total_travel_time = payload.get("totalTravelTime")
    if not isinstance(total_travel_time, str) or not total_travel_time:
        raise SchemaViolation("totalTravelTime", "Oracle response is missing the 'totalTravelTime' string.")

    for index, step in enumerate(route, start=1):
        if not isinstance(step, dict) or not isinstance(step.get("travelTimeFromPrevious"), str):
            raise SchemaViolation(
                f"step[{index}].travelTimeFromPrevious",
                f"Route step {index} is missing 'travelTimeFromPrevious'.",
            )

    return ValidatedRoute(route=route, total_travel_time=total_travel_time)


def parse_route_response(raw_text: str) -> ValidatedRoute:
    return validate_route_payload(extract_json_payload(raw_text))


def check_stop_sequence(route: list[dict[str, Any]]) -> None:
    """Require ``stop`` values to be exactly ``1..n`` in array order."""
    for index, step in enumerate(route, start=1):
        stop = step.get("stop")
        if isinstance(stop, bool) or not isinstance(stop, int) or stop != index:
            raise SchemaViolation(
                f"step[{index}].stop",
                f"Route step {index} has stop number {stop!r}; expected {index}.",
            )
