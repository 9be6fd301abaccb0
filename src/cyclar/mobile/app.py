"""
cyclAR Kivy Application - bicycle directions with a handlebar device.

Main entry point for the Kivy-based mobile/desktop application.
"""

import logging
import os
import platform as sys_platform

# Prevent Kivy from consuming command-line arguments
os.environ["KIVY_NO_ARGS"] = "1"

from kivy.app import App
from kivy.clock import Clock
from kivy.core.window import Window
from kivy.logger import Logger

from ..core.config import Config
from ..device.command_sender import DeviceCommandSender
from ..navigation.directions import DirectionsClient
from ..navigation.position import get_position_provider
from ..navigation.route_refresher import RouteRefresher
from .screens.main_screen import MainScreen

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


class CyclarApp(App):
    """
    Main cyclAR Kivy application.

    Coordinates:
    - Directions (via DirectionsClient + RouteRefresher)
    - Position (via PositionProvider)
    - Handlebar device (via DeviceCommandSender)
    - UI updates (via MainScreen)
    """

    def __init__(self, app_config: Config | None = None, **kwargs):
        """
        Initialize the cyclAR app.

        Args:
            app_config: Optional Config object. If not provided, loads from default location.
        """
        super().__init__(**kwargs)

        # app_config avoids clashing with Kivy's own App.config
        if app_config is None:
            app_config = Config()
        self.app_config = app_config

        self.platform_type = self._detect_platform()

        self.position_provider = None
        self.refresher = None
        self.command_sender = None
        self.main_screen = None

        Logger.info(f"cyclAR: Initialized on {sys_platform.system()} ({self.platform_type})")

    def _detect_platform(self) -> str:
        """Detect current platform type."""
        if sys_platform.system() == "Linux":
            try:
                import android  # noqa: F401
                return "android"
            except ImportError:
                return "desktop"
        return "desktop"

    def build(self):
        """Build the application UI."""
        if self.platform_type == "desktop":
            Window.size = (480, 860)
            self.title = "cyclAR - Bike Directions"

        directions = DirectionsClient.from_config(self.app_config["directions"])
        self.refresher = RouteRefresher(
            directions,
            clock=Clock,
            live_step_limit=self.app_config.get("live.step_limit", 2),
        )
        Logger.info("cyclAR: Directions client initialized")

        self.command_sender = DeviceCommandSender.from_config(
            self.app_config["device"], clock=Clock
        )
        Logger.info(f"cyclAR: Device endpoint {self.command_sender.url}")

        self.position_provider = get_position_provider(self.app_config["position"])
        Logger.info(
            f"cyclAR: Position provider initialized ({type(self.position_provider).__name__})"
        )

        self.main_screen = MainScreen(
            refresher=self.refresher,
            command_sender=self.command_sender,
            position_provider=self.position_provider,
            config=self.app_config,
        )
        return self.main_screen

    def on_start(self):
        """Called when the application starts."""
        Logger.info("cyclAR: Application starting")

        if self.position_provider.start():
            Logger.info("cyclAR: Position updates started")
        else:
            Logger.error(f"cyclAR: Position unavailable: {self.position_provider.last_error}")

    def on_stop(self):
        """Called when the application stops."""
        Logger.info("cyclAR: Application stopping")

        if self.main_screen:
            self.main_screen.shutdown()

        if self.position_provider:
            self.position_provider.stop()

        Logger.info("cyclAR: Application stopped")


def run_mobile_app(config: Config | None = None):
    """
    Run the cyclAR mobile/desktop Kivy application.

    Args:
        config: Optional Config object.
    """
    app = CyclarApp(app_config=config)
    app.run()
