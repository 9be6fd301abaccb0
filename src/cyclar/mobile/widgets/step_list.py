"""
Direction step list widget for cyclAR.

Shows the route as rows of arrow, instruction and distance.
"""

import logging

from kivy.graphics import Color, RoundedRectangle
from kivy.uix.boxlayout import BoxLayout
from kivy.uix.label import Label
from kivy.uix.scrollview import ScrollView

from ...core.models import Direction, DirectionStep

logger = logging.getLogger(__name__)


DIRECTION_ARROWS = {
    Direction.LEFT: "<",
    Direction.RIGHT: ">",
    Direction.STRAIGHT: "^",
}

# (R, G, B, A) - normalized 0-1
DIRECTION_COLORS = {
    Direction.LEFT: (0.2, 0.6, 1.0, 1.0),  # Blue
    Direction.RIGHT: (1.0, 0.65, 0.0, 1.0),  # Orange
    Direction.STRAIGHT: (0.0, 0.8, 0.0, 1.0),  # Green
}


class StepRow(BoxLayout):
    """
    One route step.

    ┌────┬───────────────────────────┬────────┐
    │ <  │ Turn left onto Walnut St  │ 0.2 mi │
    └────┴───────────────────────────┴────────┘
    """

    def __init__(self, step: DirectionStep, **kwargs):
        kwargs.setdefault("orientation", "horizontal")
        kwargs.setdefault("size_hint_y", None)
        kwargs.setdefault("height", 56)
        kwargs.setdefault("padding", [10, 5, 10, 5])
        kwargs.setdefault("spacing", 10)
        super().__init__(**kwargs)

        self.step = step

        arrow = Label(
            text=DIRECTION_ARROWS[step.direction],
            font_size="26sp",
            bold=True,
            color=DIRECTION_COLORS[step.direction],
            size_hint=(None, 1),
            width=40,
        )
        instruction = Label(
            text=step.text or "Continue",
            font_size="15sp",
            halign="left",
            valign="middle",
            size_hint=(1, 1),
        )
        instruction.bind(size=instruction.setter("text_size"))
        distance = Label(
            text=step.distance,
            font_size="13sp",
            color=(0.8, 0.8, 0.8, 1),
            size_hint=(None, 1),
            width=80,
        )

        self.add_widget(arrow)
        self.add_widget(instruction)
        self.add_widget(distance)

        with self.canvas.before:
            Color(0, 0, 0, 0.6)
            self._bg_rect = RoundedRectangle(pos=self.pos, size=self.size, radius=[8])
        self.bind(pos=self._update_background, size=self._update_background)

    def _update_background(self, *args):
        self._bg_rect.pos = self.pos
        self._bg_rect.size = self.size


class StepList(ScrollView):
    """Scrollable list of StepRows, replaced wholesale on every update."""

    def __init__(self, **kwargs):
        super().__init__(**kwargs)

        self._rows = BoxLayout(orientation="vertical", size_hint_y=None, spacing=6)
        self._rows.bind(minimum_height=self._rows.setter("height"))
        self.add_widget(self._rows)

        self._empty_label = Label(
            text="No directions yet",
            font_size="15sp",
            color=(0.6, 0.6, 0.6, 1),
            size_hint_y=None,
            height=56,
        )
        self._rows.add_widget(self._empty_label)

    def set_steps(self, steps: tuple[DirectionStep, ...]) -> None:
        """
        Show a new step list.

        Args:
            steps: Ordered steps, start to destination.
        """
        self._rows.clear_widgets()
        if not steps:
            self._rows.add_widget(self._empty_label)
            return

        for step in steps:
            self._rows.add_widget(StepRow(step))
        self.scroll_y = 1
        logger.debug(f"StepList showing {len(steps)} steps")
