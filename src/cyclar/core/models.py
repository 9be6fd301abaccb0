"""
Navigation and device data structures.
"""

import html
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

_TAG_RE = re.compile(r"<[^>]+>")
_SPACE_RE = re.compile(r"\s+")

# Tokens understood by the handlebar device firmware
DEVICE_COMMANDS = ("left", "right", "up")

WAITING_FOR_POSITION = "Waiting for position..."


def strip_markup(text: str) -> str:
    """Remove HTML tags and entities from provider instruction text."""
    return _SPACE_RE.sub(" ", html.unescape(_TAG_RE.sub(" ", text or ""))).strip()


class Direction(Enum):
    """Simplified direction tag used for icons and device commands."""

    LEFT = "LEFT"
    RIGHT = "RIGHT"
    STRAIGHT = "STRAIGHT"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Coordinate:
    """Latitude/longitude pair in decimal degrees."""

    latitude: float
    longitude: float

    def as_query(self) -> str:
        """Render as the 'lat,lng' form directions providers accept."""
        return f"{self.latitude},{self.longitude}"


@dataclass(frozen=True)
class DirectionStep:
    """
    One instruction in a route.

    Attributes:
        instruction: Instruction text as sent by the provider (may contain markup)
        maneuver: Provider maneuver code such as 'turn-left' (may be empty)
        direction: Simplified direction tag derived from the maneuver
        distance: Distance to the next maneuver as display text
    """

    instruction: str
    maneuver: str
    direction: Direction
    distance: str

    @property
    def text(self) -> str:
        """Instruction with markup removed, for display."""
        return strip_markup(self.instruction)

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dictionary."""
        return {
            "instruction": self.text,
            "maneuver": self.maneuver,
            "direction": self.direction.value,
            "distance": self.distance,
        }


Origin = str | Coordinate


@dataclass(frozen=True)
class RouteRequest:
    """Origin (place text or coordinate) and destination place text."""

    origin: Origin
    destination: str

    @property
    def origin_query(self) -> str:
        if isinstance(self.origin, Coordinate):
            return self.origin.as_query()
        return self.origin


@dataclass(frozen=True)
class RouteResult:
    """Outcome of a single route fetch."""

    steps: tuple[DirectionStep, ...] = ()
    error: str | None = None
    fatal: bool = False

    @classmethod
    def success(cls, steps) -> "RouteResult":
        return cls(steps=tuple(steps))

    @classmethod
    def failure(cls, message: str, fatal: bool = False) -> "RouteResult":
        return cls(error=message, fatal=fatal)

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class CommandResult:
    """Outcome of a device command. `status` is the raw response body."""

    command: str
    status: str = ""
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def command_for(direction: Direction) -> str:
    """Map a direction tag to the device command token."""
    if direction == Direction.LEFT:
        return "left"
    if direction == Direction.RIGHT:
        return "right"
    return "up"


class LiveState(Enum):
    """Kinds of update delivered by the live refresh loop."""

    UPDATED = "updated"
    WAITING = "waiting"
    ERROR = "error"
    STOPPED = "stopped"


@dataclass(frozen=True)
class LiveUpdate:
    """A single update from the live refresh loop."""

    state: LiveState
    steps: tuple[DirectionStep, ...] = field(default_factory=tuple)
    message: str = ""

    @classmethod
    def updated(cls, steps) -> "LiveUpdate":
        return cls(LiveState.UPDATED, steps=tuple(steps))

    @classmethod
    def waiting(cls, message: str = WAITING_FOR_POSITION) -> "LiveUpdate":
        return cls(LiveState.WAITING, message=message)

    @classmethod
    def failed(cls, message: str) -> "LiveUpdate":
        return cls(LiveState.ERROR, message=message)

    @classmethod
    def stopped(cls, message: str = "") -> "LiveUpdate":
        return cls(LiveState.STOPPED, message=message)
