"""Core components for cyclAR."""

from .config import Config
from .models import (
    DEVICE_COMMANDS,
    CommandResult,
    Coordinate,
    Direction,
    DirectionStep,
    LiveState,
    LiveUpdate,
    RouteRequest,
    RouteResult,
    command_for,
)

__all__ = [
    "Config",
    "DEVICE_COMMANDS",
    "CommandResult",
    "Coordinate",
    "Direction",
    "DirectionStep",
    "LiveState",
    "LiveUpdate",
    "RouteRequest",
    "RouteResult",
    "command_for",
]
