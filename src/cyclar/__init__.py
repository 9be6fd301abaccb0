"""
cyclAR - Bicycle directions with a handlebar device

Fetches bicycle routes, keeps them fresh from the rider's position in live
mode, and drives a network-attached ESP32 with direction commands.
"""

__version__ = "0.1.0"
__author__ = "cyclAR Team"

from .core.models import Direction, DirectionStep, RouteResult
from .device.command_sender import DeviceCommandSender
from .navigation.directions import DirectionsClient
from .navigation.route_refresher import RouteRefresher

__all__ = [
    "Direction",
    "DirectionStep",
    "DirectionsClient",
    "DeviceCommandSender",
    "RouteRefresher",
    "RouteResult",
    "__version__",
]
