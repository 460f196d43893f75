"""Exception types raised by the route planning pipeline."""

from __future__ import annotations


class RoutePlannerError(Exception):
    """Base class for every failure surfaced by the planner."""


class InvalidInput(RoutePlannerError, ValueError):
    """The caller supplied a blank warehouse or no usable delivery address."""


class OracleMisconfigured(RoutePlannerError):
    """Credentials for the route oracle are missing."""


class OracleUnavailable(RoutePlannerError, ConnectionError):
    """The oracle call could not complete (network, auth, quota)."""


class MalformedResponse(RoutePlannerError):
    """The oracle reply does not contain a parseable JSON object."""


class SchemaViolation(MalformedResponse):
    """The oracle reply parsed but a required field is missing or mistyped."""

    def __init__(self, field: str, message: str | None = None) -> None:
        self.field = field
        super().__init__(message or f"Oracle response has a missing or invalid '{field}'.")


class NotFound(RoutePlannerError, LookupError):
    """No saved route exists with the requested id."""

    def __init__(self, route_id: str) -> None:
        self.route_id = route_id
        super().__init__(f"Saved route '{route_id}' not found.")


class OptimizationInProgress(RoutePlannerError):
    """Another optimization is already running on the same optimizer."""
