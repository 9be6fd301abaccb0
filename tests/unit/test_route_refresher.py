"""
Unit tests for RouteRefresher preview and live mode.
"""

import pytest

from cyclar.core.models import (
    Coordinate,
    Direction,
    DirectionStep,
    LiveState,
    RouteResult,
    WAITING_FOR_POSITION,
)
from cyclar.navigation.position import StaticPositionProvider
from cyclar.navigation.route_refresher import RouteRefresher


def steps(count):
    return [
        DirectionStep(f"Step {i}", "", Direction.STRAIGHT, f"{i} mi") for i in range(count)
    ]


class StubDirections:
    """Directions client returning queued results and recording calls."""

    def __init__(self, *results):
        self.results = list(results)
        self.calls = []

    def fetch_route(self, origin, destination):
        self.calls.append((origin, destination))
        if self.results:
            return self.results.pop(0)
        return RouteResult.success([])


class DeferredSpawn:
    """Holds background work until the test releases it."""

    def __init__(self):
        self.pending = []

    def __call__(self, target):
        self.pending.append(target)

    def run_next(self):
        self.pending.pop(0)()


def run_now(target):
    target()


@pytest.fixture
def position():
    return StaticPositionProvider(Coordinate(39.9526, -75.1652))


@pytest.fixture
def updates():
    return []


class TestPreview:
    """Tests for the one-shot route path."""

    def test_result_delivered_on_clock(self, fake_clock):
        directions = StubDirections(RouteResult.success(steps(5)))
        refresher = RouteRefresher(directions, clock=fake_clock, spawn=run_now)
        received = []

        refresher.request_route("Home", "Work", received.append)
        assert received == []

        fake_clock.flush()
        assert len(received) == 1
        assert len(received[0].steps) == 5  # preview is never truncated
        assert directions.calls == [("Home", "Work")]

    def test_stale_result_discarded(self, fake_clock):
        directions = StubDirections(
            RouteResult.success(steps(1)), RouteResult.success(steps(3))
        )
        spawn = DeferredSpawn()
        refresher = RouteRefresher(directions, clock=fake_clock, spawn=spawn)
        received = []

        refresher.request_route("A", "B", received.append)
        refresher.request_route("A", "C", received.append)

        # Second request completes first
        second = spawn.pending.pop(1)
        second()
        fake_clock.flush()
        spawn.run_next()
        fake_clock.flush()

        assert len(received) == 1
        assert directions.calls[0] == ("A", "C")

    def test_fetch_route_is_synchronous(self, fake_clock):
        directions = StubDirections(RouteResult.failure("boom"))
        refresher = RouteRefresher(directions, clock=fake_clock, spawn=run_now)

        result = refresher.fetch_route("A", "B")

        assert result.error == "boom"


class TestLiveRefresh:
    """Tests for the recurring live session."""

    def test_truncates_to_first_two_steps(self, fake_clock, position, updates):
        directions = StubDirections(RouteResult.success(steps(5)))
        refresher = RouteRefresher(directions, clock=fake_clock, spawn=run_now)

        refresher.start_live_refresh(4, position, "Walnut St", updates.append)
        fake_clock.advance(4)

        assert len(updates) == 1
        assert updates[0].state == LiveState.UPDATED
        assert [s.text for s in updates[0].steps] == ["Step 0", "Step 1"]

    def test_uses_latest_position_as_origin(self, fake_clock, position, updates):
        directions = StubDirections()
        refresher = RouteRefresher(directions, clock=fake_clock, spawn=run_now)

        refresher.start_live_refresh(4, position, "Walnut St", updates.append)
        fake_clock.advance(4)
        position.update(40.0, -75.0)
        fake_clock.advance(4)

        assert directions.calls == [
            (Coordinate(39.9526, -75.1652), "Walnut St"),
            (Coordinate(40.0, -75.0), "Walnut St"),
        ]

    def test_no_fix_reports_waiting(self, fake_clock, updates):
        directions = StubDirections()
        refresher = RouteRefresher(directions, clock=fake_clock, spawn=run_now)

        refresher.start_live_refresh(4, StaticPositionProvider(), "Walnut St", updates.append)
        fake_clock.advance(4)

        assert directions.calls == []
        assert len(updates) == 1
        assert updates[0].state == LiveState.WAITING
        assert updates[0].message == WAITING_FOR_POSITION
        assert refresher.is_live

    def test_permission_message_passed_through(self, fake_clock, updates):
        provider = StaticPositionProvider()
        provider.deny()
        refresher = RouteRefresher(StubDirections(), clock=fake_clock, spawn=run_now)

        refresher.start_live_refresh(4, provider, "Walnut St", updates.append)
        fake_clock.advance(4)

        assert updates[0].state == LiveState.WAITING
        assert "permission denied" in updates[0].message.lower()

    def test_stop_discards_in_flight_result(self, fake_clock, position, updates):
        """Stopping before a slow call resolves drops its result."""
        directions = StubDirections(RouteResult.success(steps(3)))
        spawn = DeferredSpawn()
        refresher = RouteRefresher(directions, clock=fake_clock, spawn=spawn)

        session = refresher.start_live_refresh(4, position, "Walnut St", updates.append)
        fake_clock.advance(4)
        assert len(spawn.pending) == 1

        refresher.stop_live_refresh()
        spawn.run_next()
        fake_clock.advance(10)

        assert updates == []
        assert not session.active
        assert session.timer is None
        assert not refresher.is_live

    def test_failed_tick_keeps_ticking(self, fake_clock, position, updates):
        directions = StubDirections(
            RouteResult.failure("Directions request failed: timeout"),
            RouteResult.success(steps(2)),
        )
        refresher = RouteRefresher(directions, clock=fake_clock, spawn=run_now)

        session = refresher.start_live_refresh(4, position, "Walnut St", updates.append)
        fake_clock.advance(4)
        assert updates[-1].state == LiveState.ERROR
        assert session.last_error == "Directions request failed: timeout"

        fake_clock.advance(4)
        assert updates[-1].state == LiveState.UPDATED
        assert session.last_error is None

    def test_fatal_error_stops_session(self, fake_clock, position, updates):
        directions = StubDirections(RouteResult.failure("REQUEST_DENIED", fatal=True))
        refresher = RouteRefresher(directions, clock=fake_clock, spawn=run_now)

        refresher.start_live_refresh(4, position, "Walnut St", updates.append)
        fake_clock.advance(20)

        assert [u.state for u in updates] == [LiveState.ERROR, LiveState.STOPPED]
        assert len(directions.calls) == 1
        assert not refresher.is_live
        assert fake_clock.active_intervals == []

    def test_in_flight_guard_skips_overlapping_ticks(self, fake_clock, position, updates):
        directions = StubDirections()
        spawn = DeferredSpawn()
        refresher = RouteRefresher(directions, clock=fake_clock, spawn=spawn)

        refresher.start_live_refresh(4, position, "Walnut St", updates.append)
        fake_clock.advance(12)

        assert len(spawn.pending) == 1

        spawn.run_next()
        fake_clock.flush()
        fake_clock.advance(4)

        assert len(spawn.pending) == 1

    def test_preview_supersedes_in_flight_tick(self, fake_clock, position, updates):
        """A preview delivered first makes the older live result stale."""
        directions = StubDirections(RouteResult.success(steps(5)), RouteResult.success(steps(3)))
        spawn = DeferredSpawn()
        refresher = RouteRefresher(directions, clock=fake_clock, spawn=spawn)
        previews = []

        session = refresher.start_live_refresh(4, position, "Walnut St", updates.append)
        fake_clock.advance(4)
        refresher.request_route("Home", "Walnut St", previews.append)
        assert len(spawn.pending) == 2

        spawn.pending.pop(1)()
        fake_clock.flush()
        spawn.run_next()
        fake_clock.flush()

        assert len(previews) == 1
        assert updates == []
        assert session.in_flight is False

        fake_clock.advance(4)
        assert len(spawn.pending) == 1

    def test_spawn_failure_clears_in_flight(self, fake_clock, position, updates):
        directions = StubDirections(RouteResult.success(steps(2)))
        attempts = []

        def flaky_spawn(target):
            attempts.append(target)
            if len(attempts) == 1:
                raise RuntimeError("can't start new thread")
            target()

        refresher = RouteRefresher(directions, clock=fake_clock, spawn=flaky_spawn)

        session = refresher.start_live_refresh(4, position, "Walnut St", updates.append)
        fake_clock.advance(4)

        assert session.in_flight is False
        assert updates[-1].state == LiveState.ERROR
        assert "can't start new thread" in updates[-1].message
        assert refresher.is_live

        fake_clock.advance(4)

        assert len(directions.calls) == 1
        assert updates[-1].state == LiveState.UPDATED

    def test_double_start_leaves_one_timer(self, fake_clock, position, updates):
        directions = StubDirections()
        refresher = RouteRefresher(directions, clock=fake_clock, spawn=run_now)

        first = refresher.start_live_refresh(4, position, "Walnut St", updates.append)
        second = refresher.start_live_refresh(4, position, "Walnut St", updates.append)
        fake_clock.advance(16)

        assert len(fake_clock.active_intervals) == 1
        assert not first.active
        assert second.active
        assert len(directions.calls) == 4
        assert second.ticks == 4

    def test_stop_without_session_is_noop(self, fake_clock):
        refresher = RouteRefresher(StubDirections(), clock=fake_clock, spawn=run_now)

        refresher.stop_live_refresh()

        assert refresher.session is None
