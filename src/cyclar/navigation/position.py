"""
Position provider abstraction.

Exposes the latest known position as a queryable value plus a change
notification channel, independent of any platform location service:
- StaticPositionProvider: fixed or manually fed position (desktop, tests)
- NmeaPositionProvider: serial NMEA GPS receiver via pyserial + pynmea2
"""

import logging
import threading
import time
from enum import Enum
from typing import Callable, Protocol, runtime_checkable

import pynmea2
import serial

from ..core.models import Coordinate

logger = logging.getLogger(__name__)

PERMISSION_DENIED_MESSAGE = "Location permission denied. Enable it in Settings."

PositionCallback = Callable[[Coordinate], None]


class PositionStatus(Enum):
    """Authorization/availability of the location source."""

    NOT_DETERMINED = "not_determined"
    AUTHORIZED = "authorized"
    DENIED = "denied"
    UNAVAILABLE = "unavailable"


@runtime_checkable
class PositionProvider(Protocol):
    """Protocol for position sources read by the live refresh loop."""

    def latest(self) -> Coordinate | None:
        """Latest known position, or None when there is no fix yet."""
        ...

    @property
    def status(self) -> PositionStatus:
        ...

    @property
    def last_error(self) -> str | None:
        """Message explaining why no position is available, if known."""
        ...

    def subscribe(self, callback: PositionCallback) -> None:
        ...

    def unsubscribe(self, callback: PositionCallback) -> None:
        ...

    def start(self) -> bool:
        ...

    def stop(self) -> None:
        ...


class ObservablePosition:
    """
    Thread-safe latest-position holder with change notification.

    Subscribers are called from whichever thread reports the update; UI code
    should hop back to its own thread before touching widgets.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._current: Coordinate | None = None
        self._status = PositionStatus.NOT_DETERMINED
        self._last_error: str | None = None
        self._subscribers: list[PositionCallback] = []

    def latest(self) -> Coordinate | None:
        with self._lock:
            return self._current

    @property
    def status(self) -> PositionStatus:
        return self._status

    @property
    def last_error(self) -> str | None:
        return self._last_error

    def subscribe(self, callback: PositionCallback) -> None:
        with self._lock:
            if callback not in self._subscribers:
                self._subscribers.append(callback)

    def unsubscribe(self, callback: PositionCallback) -> None:
        with self._lock:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

    def update(self, latitude: float, longitude: float) -> Coordinate:
        """Record a new fix and notify subscribers."""
        coordinate = Coordinate(latitude, longitude)
        with self._lock:
            self._current = coordinate
            self._status = PositionStatus.AUTHORIZED
            self._last_error = None
            subscribers = list(self._subscribers)

        logger.debug(f"Updated location: {latitude:.6f}, {longitude:.6f}")
        for callback in subscribers:
            callback(coordinate)
        return coordinate

    def fail(self, message: str, status: PositionStatus = PositionStatus.UNAVAILABLE) -> None:
        """
        Record why no position is available.

        The last known fix is kept unless access was denied outright.
        """
        with self._lock:
            self._status = status
            self._last_error = message
            if status == PositionStatus.DENIED:
                self._current = None
        logger.warning(f"Location error: {message}")

    def deny(self) -> None:
        """Record a location permission denial."""
        self.fail(PERMISSION_DENIED_MESSAGE, PositionStatus.DENIED)

    def start(self) -> bool:
        return True

    def stop(self) -> None:
        pass


class StaticPositionProvider(ObservablePosition):
    """Position fed by hand or fixed at construction."""

    def __init__(self, coordinate: Coordinate | None = None):
        super().__init__()
        if coordinate is not None:
            self.update(coordinate.latitude, coordinate.longitude)


class NmeaPositionProvider(ObservablePosition):
    """
    GPS receiver on a serial port speaking NMEA 0183.

    A background thread reads sentences and updates the position on every
    GGA or RMC sentence that carries a valid fix.
    """

    def __init__(self, port: str, baudrate: int = 9600, read_timeout: float = 1.0):
        """
        Initialize the NMEA provider.

        Args:
            port: Serial device, e.g. /dev/ttyUSB0 or COM3.
            baudrate: Serial baud rate (NEO-6M modules default to 9600).
            read_timeout: Serial read timeout in seconds.
        """
        super().__init__()
        self.port = port
        self.baudrate = baudrate
        self.read_timeout = read_timeout

        self._serial: serial.Serial | None = None
        self._thread: threading.Thread | None = None
        self._running = False

    def _open(self) -> bool:
        try:
            self._serial = serial.Serial(self.port, self.baudrate, timeout=self.read_timeout)
        except serial.SerialException as e:
            self.fail(f"GPS unavailable: {e}")
            return False
        logger.info(f"GPS opened on {self.port} @ {self.baudrate}")
        return True

    def start(self) -> bool:
        """Open the serial port and start the reader thread."""
        if self._running:
            logger.warning("NmeaPositionProvider already running")
            return True

        if not self._open():
            return False

        self._running = True
        self._thread = threading.Thread(
            target=self._reader_loop,
            name="NmeaPositionProvider",
            daemon=True,
        )
        self._thread.start()
        return True

    def stop(self) -> None:
        """Stop the reader thread and close the port."""
        self._running = False
        if self._thread is not None:
            self._thread.join(timeout=2.0)
            self._thread = None
        if self._serial is not None:
            self._serial.close()
            self._serial = None
        logger.info("GPS stopped")

    def request_once(self, timeout: float = 5.0) -> Coordinate | None:
        """
        Read sentences until a single fix arrives or the timeout expires.

        Opens the port for the duration of the call when the reader thread
        is not running.
        """
        if self._running:
            deadline = time.monotonic() + timeout
            while time.monotonic() < deadline:
                current = self.latest()
                if current is not None:
                    return current
                time.sleep(0.1)
            return None

        if not self._open():
            return None
        try:
            deadline = time.monotonic() + timeout
            while time.monotonic() < deadline:
                fix = self._read_fix()
                if fix is not None:
                    return self.update(*fix)
            return None
        finally:
            self._serial.close()
            self._serial = None

    def _reader_loop(self) -> None:
        logger.debug("NMEA reader loop started")
        while self._running:
            try:
                fix = self._read_fix()
            except serial.SerialException as e:
                self.fail(f"GPS connection lost: {e}")
                self._running = False
                break
            if fix is not None:
                self.update(*fix)
        logger.debug("NMEA reader loop exited")

    def _read_fix(self) -> tuple[float, float] | None:
        line = self._serial.readline().decode("ascii", errors="replace").strip()
        if not line:
            return None
        return parse_nmea_fix(line)


def parse_nmea_fix(sentence: str) -> tuple[float, float] | None:
    """
    Extract (latitude, longitude) from a GGA or RMC sentence.

    Returns None for other sentence types, sentences without a fix, and
    sentences that fail to parse.
    """
    try:
        msg = pynmea2.parse(sentence)
    except pynmea2.ParseError:
        return None

    if msg.sentence_type == "GGA":
        if not msg.gps_qual:
            return None
    elif msg.sentence_type == "RMC":
        if msg.status != "A":
            return None
    else:
        return None

    if not msg.lat or not msg.lon:
        return None
    try:
        return (float(msg.latitude), float(msg.longitude))
    except ValueError:
        # Garbled coordinate fields from line noise
        return None


def get_position_provider(config: dict) -> PositionProvider:
    """
    Factory function for the configured position source.

    Args:
        config: 'position' configuration section.

    Returns:
        PositionProvider instance (not started).
    """
    source = config.get("source", "static")

    if source == "nmea":
        logger.info("Using NmeaPositionProvider")
        return NmeaPositionProvider(
            port=config.get("port", "/dev/ttyUSB0"),
            baudrate=config.get("baudrate", 9600),
        )

    if source == "static":
        latitude = config.get("latitude")
        longitude = config.get("longitude")
        coordinate = None
        if latitude is not None and longitude is not None:
            coordinate = Coordinate(float(latitude), float(longitude))
        logger.info("Using StaticPositionProvider")
        return StaticPositionProvider(coordinate)

    raise ValueError(f"Unknown position source: {source!r}")
