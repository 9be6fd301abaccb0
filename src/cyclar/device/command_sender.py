"""
Device command sender for the handlebar ESP32.

Posts a short command token to the device's HTTP endpoint. Best effort:
no retry, no acknowledgment, no ordering between consecutive commands.
"""

import logging
import threading
from typing import Any, Callable

import requests

from ..core.models import DEVICE_COMMANDS, CommandResult, Direction, command_for

logger = logging.getLogger(__name__)


class DeviceCommandSender:
    """
    Sends command tokens ("left", "right", "up") to the device.

    The token is sent verbatim as a text/plain POST body. The response body
    is returned unparsed as the status string.
    """

    def __init__(
        self,
        base_url: str,
        path: str = "/command",
        timeout: float | None = None,
        session: requests.Session | None = None,
        clock: Any = None,
        spawn: Callable[[Callable[[], None]], Any] | None = None,
    ):
        """
        Initialize the sender.

        Args:
            base_url: Device address, e.g. http://192.168.4.1
            path: Endpoint path receiving the command.
            timeout: Request timeout in seconds. None keeps the transport default.
            session: HTTP session to use. A new requests.Session if omitted.
            clock: Scheduler used to hand async results back to the UI thread.
            spawn: Callable that runs a function off the UI thread.
        """
        self.url = base_url.rstrip("/") + "/" + path.lstrip("/")
        self.timeout = timeout
        self.session = session if session is not None else requests.Session()
        self._clock = clock
        self._spawn = spawn or self._spawn_thread

    @classmethod
    def from_config(cls, config: dict, **kwargs) -> "DeviceCommandSender":
        """Create a sender from the 'device' config section."""
        return cls(
            base_url=config.get("url", "http://192.168.4.1"),
            path=config.get("path", "/command"),
            timeout=config.get("timeout"),
            **kwargs,
        )

    @property
    def clock(self) -> Any:
        if self._clock is None:
            from kivy.clock import Clock

            self._clock = Clock
        return self._clock

    def send(self, command: str) -> CommandResult:
        """
        Send one command and wait for the response.

        Args:
            command: Command token, passed through unchanged.

        Returns:
            CommandResult with the response body, or an error description.
        """
        if command not in DEVICE_COMMANDS:
            logger.warning(f"Sending unrecognized device command: {command!r}")

        try:
            response = self.session.post(
                self.url,
                data=command.encode("utf-8"),
                headers={"Content-Type": "text/plain"},
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.HTTPError as e:
            status = e.response.status_code if e.response is not None else "?"
            body = e.response.text.strip() if e.response is not None else ""
            message = f"Device returned HTTP {status}"
            if body:
                message += f": {body}"
            logger.warning(f"Device command {command!r} failed: {message}")
            return CommandResult(command=command, error=message)
        except requests.RequestException as e:
            message = f"Device unreachable: {e}"
            logger.warning(f"Device command {command!r} failed: {message}")
            return CommandResult(command=command, error=message)

        logger.info(f"Device command {command!r} -> {response.text!r}")
        return CommandResult(command=command, status=response.text)

    def send_async(
        self,
        command: str,
        on_result: Callable[[CommandResult], None] | None = None,
    ) -> None:
        """
        Send a command in the background.

        Args:
            command: Command token.
            on_result: Called on the UI thread with the CommandResult.
        """
        def _send():
            result = self.send(command)
            if on_result is not None:
                self.clock.schedule_once(lambda dt: on_result(result), 0)

        self._spawn(_send)

    def send_direction(
        self,
        direction: Direction,
        on_result: Callable[[CommandResult], None] | None = None,
    ) -> None:
        """Send the command matching a direction tag in the background."""
        self.send_async(command_for(direction), on_result)

    @staticmethod
    def _spawn_thread(target: Callable[[], None]) -> threading.Thread:
        thread = threading.Thread(target=target, name="DeviceCommand", daemon=True)
        thread.start()
        return thread
