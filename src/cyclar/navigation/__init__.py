"""Route fetching, live refresh and position sources."""

from .directions import DirectionsClient, DirectionsError, classify_maneuver
from .display_state import DisplayState
from .position import (
    NmeaPositionProvider,
    PositionProvider,
    PositionStatus,
    StaticPositionProvider,
    get_position_provider,
)
from .route_refresher import LiveSession, RouteRefresher

__all__ = [
    "DirectionsClient",
    "DirectionsError",
    "DisplayState",
    "LiveSession",
    "NmeaPositionProvider",
    "PositionProvider",
    "PositionStatus",
    "RouteRefresher",
    "StaticPositionProvider",
    "classify_maneuver",
    "get_position_provider",
]
