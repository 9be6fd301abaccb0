"""
Flask application factory for the cyclAR device emulator.

Stands in for the handlebar ESP32 during desktop development:
- Receives direction commands and echoes them back
- Keeps a short history of received commands
- Health check
"""

import logging
from collections import deque

from flask import Flask

from ..core.config import Config

logger = logging.getLogger(__name__)


def create_app(config: Config | None = None) -> Flask:
    """
    Application factory for the emulator.

    Args:
        config: cyclAR configuration, or None to load defaults

    Returns:
        Configured Flask application
    """
    app = Flask(__name__)

    if config is None:
        config = Config()

    app.config["CYCLAR_CONFIG"] = config
    app.config["COMMAND_LOG"] = deque(maxlen=config.get("web.history_size", 50))

    from .routes import device

    app.register_blueprint(device.bp)

    @app.route("/health")
    def health() -> dict:
        """Health check endpoint."""
        return {"status": "ok", "version": config.get("app.version", "0.1.0")}

    logger.info("Device emulator app created")
    return app
