"""
Pytest fixtures for cyclAR tests.

Provides common test fixtures including:
- A fake Kivy clock driven by hand
- Factories for a fake HTTP session and canned responses
- Directions provider payload builders (make_step, make_payload)
"""

import json

import pytest
import requests


class FakeEvent:
    """Stand-in for a Kivy ClockEvent."""

    def __init__(self, callback, timeout, due, once):
        self.callback = callback
        self.timeout = timeout
        self.due = due
        self.once = once
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class FakeClock:
    """
    Manually advanced clock with the Kivy Clock scheduling API.

    schedule_once callbacks with a zero timeout run on the next advance().
    """

    def __init__(self):
        self.time = 0.0
        self.events: list[FakeEvent] = []

    def schedule_interval(self, callback, timeout):
        event = FakeEvent(callback, timeout, self.time + timeout, once=False)
        self.events.append(event)
        return event

    def schedule_once(self, callback, timeout=0):
        event = FakeEvent(callback, timeout, self.time + timeout, once=True)
        self.events.append(event)
        return event

    def advance(self, seconds: float = 0.0) -> None:
        target = self.time + seconds
        while True:
            due = [e for e in self.events if not e.cancelled and e.due <= target]
            if not due:
                break
            event = min(due, key=lambda e: e.due)
            self.time = event.due
            if event.once:
                event.cancelled = True
                event.callback(event.timeout)
            else:
                event.due += event.timeout
                if event.callback(event.timeout) is False:
                    event.cancelled = True
        self.time = target

    def flush(self) -> None:
        """Run callbacks that are already due."""
        self.advance(0)

    @property
    def active_intervals(self) -> list[FakeEvent]:
        return [e for e in self.events if not e.once and not e.cancelled]


class FakeResponse:
    """Minimal requests.Response stand-in."""

    def __init__(self, status_code=200, json_data=None, text=None):
        self.status_code = status_code
        self._json = json_data
        if text is None:
            text = json.dumps(json_data) if json_data is not None else ""
        self.text = text

    def json(self):
        if self._json is None:
            raise requests.exceptions.JSONDecodeError("Expecting value", self.text, 0)
        return self._json

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error", response=self)


class FakeSession:
    """
    Records requests and replies with queued responses or exceptions.

    With `echo=True`, POSTs reply with their own body.
    """

    def __init__(self, responses=None, echo=False):
        self.responses = list(responses or [])
        self.echo = echo
        self.calls = []

    def _next(self, method, url, **kwargs):
        self.calls.append({"method": method, "url": url, **kwargs})
        if self.echo:
            data = kwargs.get("data") or b""
            if isinstance(data, bytes):
                data = data.decode("utf-8")
            return FakeResponse(200, text=data)
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def get(self, url, **kwargs):
        return self._next("GET", url, **kwargs)

    def post(self, url, **kwargs):
        return self._next("POST", url, **kwargs)


def build_step(instruction="Head north", maneuver=None, distance="0.1 mi"):
    """Build one provider step object."""
    step = {
        "html_instructions": instruction,
        "distance": {"text": distance, "value": 160},
    }
    if maneuver is not None:
        step["maneuver"] = maneuver
    return step


def build_payload(*legs, status="OK"):
    """Build a provider response; each leg is a list of step objects."""
    if status != "OK":
        return {"status": status, "routes": []}
    return {
        "status": "OK",
        "routes": [{"legs": [{"steps": list(steps)} for steps in legs]}],
    }


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def make_response():
    """Factory for canned HTTP responses."""
    return FakeResponse


@pytest.fixture
def make_session():
    """Factory for a recording HTTP session: make_session(*responses, echo=False)."""

    def _make(*responses, echo=False):
        return FakeSession(responses, echo=echo)

    return _make


@pytest.fixture
def make_step():
    return build_step


@pytest.fixture
def make_payload():
    return build_payload


@pytest.fixture
def five_step_payload():
    """Provider response with five steps across two legs."""
    return build_payload(
        [
            build_step("Head <b>north</b> on <b>Broad St</b>", distance="0.2 mi"),
            build_step("Turn <b>left</b> onto <b>Walnut St</b>", "turn-left", "0.5 mi"),
            build_step("Turn <b>right</b> onto <b>33rd St</b>", "turn-right", "0.3 mi"),
        ],
        [
            build_step("Slight left toward the bridge", "turn-slight-left", "400 ft"),
            build_step("Continue onto <b>Spruce St</b>", "straight", "1.1 mi"),
        ],
    )


@pytest.fixture
def test_config(tmp_path):
    """Config directory with a minimal default.yaml."""
    (tmp_path / "default.yaml").write_text(
        "\n".join([
            "app:",
            "  version: 9.9.9",
            "directions:",
            "  api_key_env: CYCLAR_TEST_KEY",
            "  mode: bicycling",
            "  timeout: 5",
            "live:",
            "  interval: 4",
            "  step_limit: 2",
            "device:",
            "  url: http://device.local",
            "  path: /command",
            "web:",
            "  history_size: 3",
        ]),
        encoding="utf-8",
    )
    return tmp_path
