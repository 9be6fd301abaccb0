"""
Emulated ESP32 routes.

POST the command token as the request body; the body is echoed back the
way the handlebar firmware acknowledges it.
"""

import logging
from datetime import datetime

from flask import Blueprint, current_app, jsonify, request

logger = logging.getLogger(__name__)

bp = Blueprint("device", __name__)


@bp.route("/command", methods=["POST"])
def receive_command():
    """
    Receive a command token.

    Returns:
        The command text, unchanged
    """
    command = request.get_data(as_text=True).strip()
    if not command:
        return "No command provided", 400

    current_app.config["COMMAND_LOG"].append({
        "command": command,
        "received_at": datetime.now().isoformat(timespec="seconds"),
    })
    logger.info(f"Emulated device received: {command}")

    return command, 200, {"Content-Type": "text/plain; charset=utf-8"}


@bp.route("/api/commands")
def list_commands():
    """
    List received commands, oldest first.

    Returns:
        JSON with the command history
    """
    return jsonify({"commands": list(current_app.config["COMMAND_LOG"])})
