"""
Main screen for cyclAR mobile app.

Route inputs, live toggle, direction list and handlebar device controls.
"""

import logging

from kivy.uix.boxlayout import BoxLayout
from kivy.uix.button import Button
from kivy.uix.label import Label
from kivy.uix.textinput import TextInput

from ...core.config import Config
from ...core.models import CommandResult, LiveState, LiveUpdate, RouteResult, command_for
from ...device.command_sender import DeviceCommandSender
from ...navigation.display_state import DisplayState
from ...navigation.position import PositionProvider
from ...navigation.route_refresher import RouteRefresher
from ..widgets.live_button import LiveButton
from ..widgets.step_list import StepList

logger = logging.getLogger(__name__)


class MainScreen(BoxLayout):
    """
    Main screen with route controls and directions.

    Layout:
    ┌─────────────────────────────────────┐
    │  From: [____________________]       │
    │  To:   [____________________]       │
    │  [Preview]                 (LIVE)   │
    │  status / error line                │
    │  ┌───────────────────────────────┐  │
    │  │ <  Turn left onto ...  0.2 mi │  │
    │  │ ^  Continue ...        1.1 mi │  │
    │  └───────────────────────────────┘  │
    │  [Left]     [Up]     [Right]        │
    │  device status                      │
    └─────────────────────────────────────┘
    """

    def __init__(
        self,
        refresher: RouteRefresher,
        command_sender: DeviceCommandSender,
        position_provider: PositionProvider,
        config: Config,
        **kwargs,
    ):
        """
        Initialize the main screen.

        Args:
            refresher: Route refresher (preview and live mode).
            command_sender: Handlebar device sender.
            position_provider: Position source for live mode.
            config: Application configuration.
        """
        kwargs.setdefault("orientation", "vertical")
        kwargs.setdefault("padding", [15, 15, 15, 15])
        kwargs.setdefault("spacing", 10)
        super().__init__(**kwargs)

        self.refresher = refresher
        self.command_sender = command_sender
        self.position_provider = position_provider
        self.config = config

        self.state = DisplayState()
        self.live_interval = config.get("live.interval", 4)
        self.follow_live = config.get("device.follow_live", False)

        self._create_ui()

    def _create_ui(self):
        """Create all UI components."""
        self.origin_input = self._add_input("From", self.config.get("route.origin", ""))
        self.destination_input = self._add_input("To", self.config.get("route.destination", ""))

        controls = BoxLayout(orientation="horizontal", size_hint_y=None, height=80, spacing=20)
        preview_btn = Button(text="Preview", size_hint=(None, 1), width=140, font_size="16sp")
        preview_btn.bind(on_press=self._on_preview_press)
        controls.add_widget(preview_btn)
        controls.add_widget(BoxLayout(size_hint=(1, 1)))
        self.live_button = LiveButton(on_toggle=self._on_live_toggle)
        controls.add_widget(self.live_button)
        self.add_widget(controls)

        self.status_label = Label(
            text="",
            font_size="14sp",
            color=(1, 0.4, 0.4, 1),
            size_hint_y=None,
            height=30,
        )
        self.add_widget(self.status_label)

        self.step_list = StepList(size_hint=(1, 1))
        self.add_widget(self.step_list)

        self._create_device_bar()

    def _add_input(self, label: str, initial: str) -> TextInput:
        row = BoxLayout(orientation="horizontal", size_hint_y=None, height=44, spacing=10)
        row.add_widget(Label(text=label, font_size="15sp", size_hint=(None, 1), width=60))
        text_input = TextInput(text=initial or "", multiline=False, font_size="15sp")
        row.add_widget(text_input)
        self.add_widget(row)
        return text_input

    def _create_device_bar(self):
        """Create bottom bar with device command buttons."""
        device_bar = BoxLayout(orientation="horizontal", size_hint_y=None, height=70, spacing=20)
        for label, command in (("Left", "left"), ("Up", "up"), ("Right", "right")):
            btn = Button(text=label, font_size="16sp")
            btn.bind(on_press=lambda instance, cmd=command: self._send_command(cmd))
            device_bar.add_widget(btn)
        self.add_widget(device_bar)

        self.device_label = Label(
            text="Device: idle",
            font_size="13sp",
            color=(0.8, 0.8, 0.8, 1),
            size_hint_y=None,
            height=26,
        )
        self.add_widget(self.device_label)

    # ------------------------------------------------------------------
    # Route
    # ------------------------------------------------------------------

    def _on_preview_press(self, instance):
        """Fetch the full route once."""
        destination = self.destination_input.text.strip()
        origin = self.origin_input.text.strip() or self.position_provider.latest()
        if origin is None:
            self._show_error("Enter a start point or wait for a position fix")
            return

        self.state.advisory = "Loading route..."
        self._render()
        self.refresher.request_route(origin, destination, self._on_route_result)

    def _on_route_result(self, result: RouteResult) -> None:
        """Apply a preview result (UI thread)."""
        self.state.apply_route_result(result)
        self._render()

    def _on_live_toggle(self, is_live: bool) -> None:
        """
        Handle live toggle from the live button.

        Args:
            is_live: True if live mode was switched on, False if off.
        """
        if is_live:
            destination = self.destination_input.text.strip()
            if not destination:
                self.live_button.set_live(False)
                self._show_error("Enter a destination first")
                return
            self.refresher.start_live_refresh(
                self.live_interval,
                self.position_provider,
                destination,
                self._on_live_update,
            )
            self.state.live_started()
        else:
            self.refresher.stop_live_refresh()
            self.state.clear_messages()
        self._render()

    def _on_live_update(self, update: LiveUpdate) -> None:
        """Apply a live update (UI thread)."""
        self.state.apply_live_update(update)
        if update.state == LiveState.STOPPED:
            self.live_button.set_live(False)
        elif update.state == LiveState.UPDATED and self.follow_live and update.steps:
            self.command_sender.send_async(
                command_for(update.steps[0].direction), self._on_command_result
            )
        self._render()

    # ------------------------------------------------------------------
    # Device
    # ------------------------------------------------------------------

    def _send_command(self, command: str) -> None:
        self.device_label.text = f"Device: sending {command}..."
        self.command_sender.send_async(command, self._on_command_result)

    def _on_command_result(self, result: CommandResult) -> None:
        if result.ok:
            self.device_label.text = f"Device: {result.status or 'ok'}"
        else:
            self.device_label.text = f"Device error: {result.error}"

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def _show_error(self, message: str) -> None:
        self.state.error = message
        self._render()

    def _render(self) -> None:
        self.step_list.set_steps(self.state.steps)
        self.status_label.text = self.state.message
        if self.state.error:
            self.status_label.color = (1, 0.4, 0.4, 1)
        else:
            self.status_label.color = (0.8, 0.8, 0.8, 1)

    def shutdown(self) -> None:
        """Stop live refresh when the app closes."""
        self.refresher.stop_live_refresh()
