"""Composition of optimization requests for the route oracle."""

from __future__ import annotations

import json
from typing import Iterable, Optional, Sequence

from ...config import settings
from ...errors import InvalidInput
from ...models.domain import Location, RouteRequest

ROUND_TRIP_INSTRUCTION = "The final stop must be back at the warehouse."
ONE_WAY_INSTRUCTION = "The final stop must be the last delivery address."

_EXAMPLE_RESPONSE = {
    "route": [
        {
            "stop": 1,
            "address": "12 Example St, Suburb NSW 2000",
            "instructions": "Leave the warehouse heading north, turn left onto Example St.",
            "travelTimeFromPrevious": "9 minutes",
        },
        {
            "stop": 2,
            "address": "48 Sample Rd, Suburb NSW 2000",
            "instructions": "Continue on Example St, turn right onto Sample Rd.",
            "travelTimeFromPrevious": "14 minutes",
        },
    ],
    "totalTravelTime": "23 minutes",
}

_PROMPT_TEMPLATE = """
You are a route planning specialist for a delivery service operating in {region}.
Work out the shortest driving route that visits every delivery destination below and
estimate the driving time between consecutive stops using current map data.

Start point (warehouse): {warehouse}
Delivery destinations:
{deliveries}

The route starts at the warehouse. {final_stop_instruction}

Respond with exactly one JSON object with two top-level keys, "route" and "totalTravelTime":
- "route": an array with one object per stop, in driving order, each with
  - "stop": the position of the stop as a number, starting at 1
  - "address": the full address of the stop
  - "instructions": short driving directions from the previous stop (from the warehouse for stop 1)
  - "travelTimeFromPrevious": driving time from the previous stop as text, e.g. "15 minutes"
- "totalTravelTime": the driving time for the whole route as text, e.g. "1 hour 20 minutes"

Example:
{example}

Return only the JSON object. Do not add notes, markdown or any text outside it.
"""


def split_address_block(text: str) -> list[str]:
    """Split a newline-separated address block, dropping blank lines."""
    return clean_addresses(text.splitlines())


def clean_addresses(addresses: Iterable[str]) -> list[str]:
    return [address.strip() for address in addresses if address and address.strip()]


def build_route_request(
    start_address: str,
    delivery_addresses: Sequence[str],
    round_trip: bool = False,
    location: Optional[Location] = None,
    *,
    region: str | None = None,
) -> RouteRequest:
    """Validate inputs and compose the oracle request.

    Raises:
        InvalidInput: blank warehouse address or no non-blank delivery address.
    """
    warehouse = (start_address or "").strip()
    if not warehouse:
        raise InvalidInput("Please enter a starting warehouse address.")

    deliveries = tuple(clean_addresses(delivery_addresses))
    if not deliveries:
        raise InvalidInput("Please enter at least one delivery address.")

    final_stop_instruction = ROUND_TRIP_INSTRUCTION if round_trip else ONE_WAY_INSTRUCTION
    enumerated = "\n".join(f"{index}. {address}" for index, address in enumerate(deliveries, start=1))
    prompt = _PROMPT_TEMPLATE.format(
        region=region or settings.service_region,
        warehouse=warehouse,
        deliveries=enumerated,
        final_stop_instruction=final_stop_instruction,
        example=json.dumps(_EXAMPLE_RESPONSE, indent=2),
    ).strip()

    return RouteRequest(
        warehouse=warehouse,
        deliveries=deliveries,
        round_trip=round_trip,
        final_stop_instruction=final_stop_instruction,
        prompt=prompt,
        location=location,
    )
