"""
Route refresher for cyclAR.

Runs route fetches off the UI thread and redelivers results on the UI
clock. Owns the live-mode session: one recurring timer that re-fetches
directions from the latest known position.
"""

import itertools
import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Callable

from ..core.models import LiveUpdate, Origin, RouteResult, WAITING_FOR_POSITION
from .directions import DirectionsClient, describe_origin
from .position import PositionProvider

logger = logging.getLogger(__name__)

DEFAULT_LIVE_INTERVAL = 4.0
DEFAULT_LIVE_STEP_LIMIT = 2


def spawn_thread(target: Callable[[], None]) -> threading.Thread:
    """Run a blocking callable on a daemon thread."""
    thread = threading.Thread(target=target, name="RouteRequest", daemon=True)
    thread.start()
    return thread


@dataclass
class LiveSession:
    """
    State of one live-mode run.

    Attributes:
        destination: Destination place text for every refresh.
        position_provider: Source of the origin for each tick.
        on_update: Callback receiving LiveUpdate values on the UI thread.
        interval: Seconds between ticks.
        active: Liveness token; results for an inactive session are dropped.
        timer: Clock event handle of the recurring timer.
        last_error: Most recent error, cleared by a success or by stop().
        in_flight: True while a request for this session is outstanding.
    """

    destination: str
    position_provider: PositionProvider
    on_update: Callable[[LiveUpdate], None]
    interval: float = DEFAULT_LIVE_INTERVAL
    active: bool = True
    timer: Any = None
    last_error: str | None = None
    in_flight: bool = False
    ticks: int = field(default=0, repr=False)

    def stop(self) -> None:
        """Cancel the timer and invalidate outstanding results."""
        self.active = False
        if self.timer is not None:
            self.timer.cancel()
            self.timer = None
        self.last_error = None
        self.in_flight = False


class RouteRefresher:
    """
    Fetches routes once (preview) or repeatedly (live mode).

    Network calls run through `spawn` (a daemon thread by default); results
    are handed back through `clock.schedule_once` so every callback runs on
    the UI thread. Each request carries a sequence number and a result older
    than one already delivered is discarded.
    """

    def __init__(
        self,
        directions: DirectionsClient,
        clock: Any = None,
        spawn: Callable[[Callable[[], None]], Any] | None = None,
        live_step_limit: int = DEFAULT_LIVE_STEP_LIMIT,
    ):
        """
        Initialize the refresher.

        Args:
            directions: Client with a fetch_route(origin, destination) method.
            clock: Scheduler with schedule_interval/schedule_once (Kivy Clock
                   when omitted).
            spawn: Callable that runs a function off the UI thread.
            live_step_limit: Steps kept from each live refresh.
        """
        self.directions = directions
        self._clock = clock
        self._spawn = spawn or spawn_thread
        self.live_step_limit = live_step_limit

        self._sequence = itertools.count(1)
        self._delivered_seq = 0
        self._session: LiveSession | None = None

    @property
    def clock(self) -> Any:
        if self._clock is None:
            from kivy.clock import Clock

            self._clock = Clock
        return self._clock

    # ------------------------------------------------------------------
    # One-shot route
    # ------------------------------------------------------------------

    def fetch_route(self, origin: Origin, destination: str) -> RouteResult:
        """Fetch a route synchronously on the calling thread."""
        return self.directions.fetch_route(origin, destination)

    def request_route(
        self,
        origin: Origin,
        destination: str,
        on_result: Callable[[RouteResult], None],
    ) -> int:
        """
        Fetch the full route in the background (preview).

        Args:
            origin: Place text or Coordinate.
            destination: Place text.
            on_result: Called on the UI thread with the RouteResult.

        Returns:
            Sequence number of the request.
        """
        seq = next(self._sequence)
        logger.info(f"Route preview #{seq}: {describe_origin(origin)} -> {destination}")

        def deliver(result: RouteResult) -> None:
            if self._is_stale(seq):
                return
            on_result(result)

        self._dispatch(origin, destination, deliver)
        return seq

    # ------------------------------------------------------------------
    # Live mode
    # ------------------------------------------------------------------

    def start_live_refresh(
        self,
        interval_seconds: float,
        position_provider: PositionProvider,
        destination: str,
        on_update: Callable[[LiveUpdate], None],
    ) -> LiveSession:
        """
        Start periodic refreshes from the latest known position.

        Any running session is stopped first so only one timer exists.

        Returns:
            The new LiveSession.
        """
        self.stop_live_refresh()

        session = LiveSession(
            destination=destination,
            position_provider=position_provider,
            on_update=on_update,
            interval=interval_seconds,
        )
        session.timer = self.clock.schedule_interval(
            lambda dt: self._tick(session), interval_seconds
        )
        self._session = session
        logger.info(f"Live refresh started: every {interval_seconds}s to {destination}")
        return session

    def stop_live_refresh(self) -> None:
        """Stop the live session, if any."""
        session = self._session
        if session is None:
            return

        session.stop()
        self._session = None
        logger.info(f"Live refresh stopped after {session.ticks} ticks")

    @property
    def session(self) -> LiveSession | None:
        return self._session

    @property
    def is_live(self) -> bool:
        return self._session is not None and self._session.active

    def _tick(self, session: LiveSession) -> bool | None:
        """Timer callback. Returning False unschedules the Kivy event."""
        if not session.active:
            return False

        session.ticks += 1

        if session.in_flight:
            logger.debug("Live tick skipped: previous request still in flight")
            return None

        position = session.position_provider.latest()
        if position is None:
            message = session.position_provider.last_error or WAITING_FOR_POSITION
            session.on_update(LiveUpdate.waiting(message))
            return None

        seq = next(self._sequence)
        session.in_flight = True

        def deliver(result: RouteResult) -> None:
            if not session.active:
                logger.debug(f"Discarding live result #{seq}: session stopped")
                return
            session.in_flight = False
            if self._is_stale(seq):
                return
            self._deliver_live(session, result)

        try:
            self._dispatch(position, session.destination, deliver)
        except RuntimeError as e:
            session.in_flight = False
            logger.error(f"Could not start live route request: {e}")
            session.last_error = f"Route request failed: {e}"
            session.on_update(LiveUpdate.failed(session.last_error))
        return None

    def _deliver_live(self, session: LiveSession, result: RouteResult) -> None:
        if result.ok:
            session.last_error = None
            session.on_update(LiveUpdate.updated(result.steps[: self.live_step_limit]))
            return

        session.last_error = result.error
        session.on_update(LiveUpdate.failed(result.error))

        if result.fatal:
            logger.error(f"Live refresh stopping on fatal provider error: {result.error}")
            self.stop_live_refresh()
            session.on_update(LiveUpdate.stopped(result.error))

    # ------------------------------------------------------------------
    # Plumbing
    # ------------------------------------------------------------------

    def _dispatch(
        self,
        origin: Origin,
        destination: str,
        deliver: Callable[[RouteResult], None],
    ) -> None:
        """Fetch off the UI thread, then hand the result back on the clock."""

        def work() -> None:
            try:
                result = self.directions.fetch_route(origin, destination)
            except Exception as e:
                logger.exception("Unexpected error fetching route")
                result = RouteResult.failure(f"Route request failed: {e}")
            self.clock.schedule_once(lambda dt: deliver(result), 0)

        self._spawn(work)

    def _is_stale(self, seq: int) -> bool:
        """Check and record delivery order. Runs on the UI thread."""
        if seq < self._delivered_seq:
            logger.debug(f"Discarding result #{seq}: #{self._delivered_seq} already delivered")
            return True
        self._delivered_seq = seq
        return False
