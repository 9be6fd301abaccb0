"""
Live mode toggle button for cyclAR.

Round button that pulses while live navigation is refreshing.
"""

import logging
from enum import Enum
from typing import Callable

from kivy.animation import Animation
from kivy.graphics import Color, Ellipse
from kivy.uix.button import Button

logger = logging.getLogger(__name__)


class LiveButtonState(Enum):
    """Live button states."""

    IDLE = "idle"
    LIVE = "live"


class LiveButton(Button):
    """
    Live mode toggle with animated states.

    States:
    - IDLE: Gray circle with "LIVE" text
    - LIVE: Green pulsing circle with "STOP" text
    """

    def __init__(
        self,
        on_toggle: Callable[[bool], None] | None = None,
        **kwargs,
    ):
        """
        Initialize the live button.

        Args:
            on_toggle: Callback when live mode changes. Called with True when
                       live mode is switched on, False when switched off.
        """
        kwargs.setdefault("size_hint", (None, None))
        kwargs.setdefault("size", (80, 80))
        kwargs.setdefault("text", "LIVE")
        kwargs.setdefault("font_size", "14sp")
        kwargs.setdefault("bold", True)

        super().__init__(**kwargs)

        self._state = LiveButtonState.IDLE
        self._on_toggle = on_toggle
        self._pulse_animation: Animation | None = None

        self._idle_color = (0.4, 0.4, 0.4, 1.0)  # Gray
        self._live_color = (0.1, 0.7, 0.2, 1.0)  # Green

        self.background_color = (0, 0, 0, 0)
        self.color = (1, 1, 1, 1)

        self._draw_background()
        self.bind(pos=self._update_background, size=self._update_background)
        self.bind(on_press=self._on_press)

    def _draw_background(self):
        """Draw circular button background."""
        self.canvas.before.clear()
        with self.canvas.before:
            if self._state == LiveButtonState.LIVE:
                Color(*self._live_color)
            else:
                Color(*self._idle_color)

            radius = min(self.width, self.height) / 2 - 4
            self._circle = Ellipse(
                pos=(self.center_x - radius, self.center_y - radius),
                size=(radius * 2, radius * 2),
            )

    def _update_background(self, *args):
        self._draw_background()

    def _on_press(self, instance):
        if self._state == LiveButtonState.IDLE:
            self._set_state(True, notify=True)
        else:
            self._set_state(False, notify=True)

    def _set_state(self, live: bool, notify: bool) -> None:
        if live == self.is_live:
            return

        if live:
            self._state = LiveButtonState.LIVE
            self.text = "STOP"
            self._start_pulse()
        else:
            self._state = LiveButtonState.IDLE
            self.text = "LIVE"
            self._stop_pulse()
        self._draw_background()

        if notify and self._on_toggle:
            self._on_toggle(live)

        logger.info(f"LiveButton: live mode {'on' if live else 'off'}")

    def _start_pulse(self):
        if self._pulse_animation:
            self._pulse_animation.cancel(self)

        self._pulse_animation = Animation(opacity=0.6, duration=0.6) + Animation(
            opacity=1.0, duration=0.6
        )
        self._pulse_animation.repeat = True
        self._pulse_animation.start(self)

    def _stop_pulse(self):
        if self._pulse_animation:
            self._pulse_animation.cancel(self)
            self._pulse_animation = None
        self.opacity = 1.0

    @property
    def is_live(self) -> bool:
        return self._state == LiveButtonState.LIVE

    def set_live(self, live: bool):
        """
        Set live state programmatically (without triggering callback).

        Args:
            live: True for live, False for idle.
        """
        self._set_state(live, notify=False)
