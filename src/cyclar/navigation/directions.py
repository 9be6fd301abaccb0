"""
Directions provider client for cyclAR.

Requests bicycle routes from a Google Directions style JSON API and
normalizes them into ordered DirectionStep lists.
"""

import logging
import os

import requests

from ..core.models import (
    Coordinate,
    Direction,
    DirectionStep,
    Origin,
    RouteRequest,
    RouteResult,
    strip_markup,
)

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://maps.googleapis.com/maps/api/directions/json"

# Provider statuses that will not go away by asking again
FATAL_STATUSES = frozenset({"REQUEST_DENIED", "INVALID_REQUEST"})


class DirectionsError(Exception):
    """Raised when the directions provider cannot produce a route."""

    def __init__(self, message: str, fatal: bool = False):
        super().__init__(message)
        self.fatal = fatal


def classify_maneuver(maneuver: str, instruction: str = "") -> Direction:
    """
    Derive the simplified direction tag for a step.

    Args:
        maneuver: Provider maneuver code, e.g. 'turn-slight-left'.
        instruction: Instruction text, used when the maneuver code is empty.

    Returns:
        LEFT if the text mentions 'left', RIGHT if it mentions 'right',
        STRAIGHT otherwise.
    """
    source = (maneuver or instruction or "").lower()
    if "left" in source:
        return Direction.LEFT
    if "right" in source:
        return Direction.RIGHT
    return Direction.STRAIGHT


def parse_step(raw: dict) -> DirectionStep:
    """Build a DirectionStep from one provider step object."""
    instruction = raw.get("html_instructions") or raw.get("instructions") or ""
    maneuver = raw.get("maneuver") or ""
    distance = raw.get("distance") or {}
    if isinstance(distance, dict):
        distance_text = distance.get("text") or ""
    else:
        distance_text = str(distance)

    return DirectionStep(
        instruction=instruction,
        maneuver=maneuver,
        direction=classify_maneuver(maneuver, strip_markup(instruction)),
        distance=distance_text,
    )


def parse_route(payload: dict) -> list[DirectionStep]:
    """
    Flatten the first route of a provider response into steps.

    Legs are walked in order and their steps appended in order, so the
    result runs from start to destination.
    """
    routes = payload.get("routes") or []
    if not routes:
        return []

    steps = []
    for leg in routes[0].get("legs") or []:
        for raw in leg.get("steps") or []:
            steps.append(parse_step(raw))
    return steps


class DirectionsClient:
    """
    HTTP client for the directions provider.

    Sole responsibility:
    - Build the request (origin, destination, bicycle travel mode)
    - Validate the provider status
    - Return normalized RouteResult values, never raise
    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str = DEFAULT_BASE_URL,
        mode: str = "bicycling",
        timeout: float | None = 10,
        session: requests.Session | None = None,
    ):
        """
        Initialize the directions client.

        Args:
            api_key: Provider API key. Requests without one are sent anyway and
                     the provider's refusal is reported as an error.
            base_url: Directions endpoint URL.
            mode: Travel mode passed to the provider.
            timeout: Request timeout in seconds.
            session: HTTP session to use. A new requests.Session if omitted.
        """
        self.api_key = api_key
        self.base_url = base_url
        self.mode = mode
        self.timeout = timeout
        self.session = session if session is not None else requests.Session()

        if not self.api_key:
            logger.warning("Directions API key not configured")

    @classmethod
    def from_config(cls, config: dict, session: requests.Session | None = None) -> "DirectionsClient":
        """
        Create a client from the 'directions' config section.

        The API key is read from the environment variable named by
        'api_key_env' so it never lives in the YAML files.
        """
        api_key_env = config.get("api_key_env", "GOOGLE_MAPS_API_KEY")
        return cls(
            api_key=os.environ.get(api_key_env),
            base_url=config.get("base_url") or DEFAULT_BASE_URL,
            mode=config.get("mode", "bicycling"),
            timeout=config.get("timeout", 10),
            session=session,
        )

    def fetch_route(self, origin: Origin, destination: str) -> RouteResult:
        """
        Fetch a bicycle route and normalize it.

        Args:
            origin: Place text or a Coordinate.
            destination: Place text.

        Returns:
            RouteResult with the ordered steps, or an error message.
        """
        request = RouteRequest(origin=origin, destination=destination)
        try:
            steps = self._request(request)
        except DirectionsError as e:
            logger.warning(f"Route request failed: {e}")
            return RouteResult.failure(str(e), fatal=e.fatal)

        logger.debug(f"Route {request.origin_query!r} -> {destination!r}: {len(steps)} steps")
        return RouteResult.success(steps)

    def _request(self, request: RouteRequest) -> list[DirectionStep]:
        """Perform the HTTP call. Raises DirectionsError on any failure."""
        params = {
            "origin": request.origin_query,
            "destination": request.destination,
            "mode": self.mode,
        }
        if self.api_key:
            params["key"] = self.api_key

        try:
            response = self.session.get(self.base_url, params=params, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise DirectionsError(f"Directions request failed: {e}") from e

        try:
            data = response.json()
        except ValueError as e:
            raise DirectionsError("Malformed directions response") from e

        if not isinstance(data, dict):
            raise DirectionsError("Malformed directions response")

        status = data.get("status", "OK")
        if status == "ZERO_RESULTS":
            return []
        if status != "OK":
            message = data.get("error_message") or "no details"
            raise DirectionsError(
                f"Directions provider error: {status} ({message})",
                fatal=status in FATAL_STATUSES,
            )

        try:
            return parse_route(data)
        except (AttributeError, TypeError) as e:
            raise DirectionsError("Malformed directions response") from e


def describe_origin(origin: Origin) -> str:
    """Human-readable origin for logs and labels."""
    if isinstance(origin, Coordinate):
        return f"({origin.latitude:.5f}, {origin.longitude:.5f})"
    return origin
