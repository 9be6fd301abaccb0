"""
cyclAR CLI entry point.

Usage:
    python -m cyclar                         # Run the Kivy app
    python -m cyclar --route "A" "B"         # Print a route preview
    python -m cyclar --send left             # Send one device command
    python -m cyclar --emulate-device        # Run the ESP32 emulator
    python -m cyclar --help                  # Show help
"""

import argparse
import logging
import os
import sys
from pathlib import Path

from .core.config import Config
from .core.models import DEVICE_COMMANDS
from .device.command_sender import DeviceCommandSender
from .navigation.directions import DirectionsClient


def setup_logging(config: Config) -> None:
    """Configure logging based on config."""
    log_config = config["logging"]
    level = getattr(logging, log_config.get("level", "INFO"))

    log_file = log_config.get("file", "logs/cyclar.log")
    Path(log_file).parent.mkdir(parents=True, exist_ok=True)

    logging.basicConfig(
        level=level,
        format=log_config.get("format", "%(asctime)s - %(name)s - %(levelname)s - %(message)s"),
        handlers=[
            logging.StreamHandler(sys.stdout),
            logging.FileHandler(log_file),
        ],
    )


def run_route_preview(config: Config, origin: str, destination: str) -> int:
    """Fetch a route once and print the steps."""
    client = DirectionsClient.from_config(config["directions"])
    result = client.fetch_route(origin, destination)

    if not result.ok:
        print(f"Error: {result.error}", file=sys.stderr)
        return 1

    if not result.steps:
        print("No steps returned")
        return 0

    for i, step in enumerate(result.steps, start=1):
        print(f"{i:2d}. [{step.direction.value:<8}] {step.text}  ({step.distance})")
    return 0


def run_send_command(config: Config, command: str) -> int:
    """Send one command to the device and print its reply."""
    sender = DeviceCommandSender.from_config(config["device"])
    result = sender.send(command)

    if not result.ok:
        print(f"Error: {result.error}", file=sys.stderr)
        return 1

    print(result.status)
    return 0


def run_device_emulator(config: Config) -> None:
    """Start the Flask ESP32 emulator."""
    logger = logging.getLogger(__name__)

    from .web.app import create_app

    app = create_app(config)

    web_config = config["web"]
    host = web_config.get("host", "0.0.0.0")
    port = web_config.get("port", 8080)
    debug = config.get("app.debug", False)

    logger.info(f"Device emulator starting at http://{host}:{port}")
    app.run(host=host, port=port, debug=debug, threaded=True)


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="cyclAR - Bicycle directions with a handlebar device",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
Examples:
    python -m cyclar                                  Run the app
    python -m cyclar --route "Penn Station" "Walnut St"
    python -m cyclar --send left                      Commands: {", ".join(DEVICE_COMMANDS)}
    python -m cyclar --emulate-device                 Local ESP32 stand-in
        """,
    )

    mode = parser.add_mutually_exclusive_group()
    mode.add_argument(
        "--route", nargs=2, metavar=("ORIGIN", "DESTINATION"), help="Print a route preview"
    )
    mode.add_argument("--send", metavar="COMMAND", help="Send one command to the device")
    mode.add_argument(
        "--emulate-device", action="store_true", help="Run the device emulator web server"
    )
    parser.add_argument(
        "--device", type=str, help="Device base URL (overrides config)"
    )
    parser.add_argument(
        "--config", type=str, help="Path to configuration directory"
    )
    parser.add_argument(
        "--debug", action="store_true", help="Enable debug mode"
    )

    args = parser.parse_args()

    config_dir = Path(args.config) if args.config else None
    config = Config(config_dir)

    if args.device:
        os.environ["CYCLAR_DEVICE_URL"] = args.device
        config.reload()

    if args.debug:
        os.environ["CYCLAR_LOGGING_LEVEL"] = "DEBUG"
        os.environ["CYCLAR_APP_DEBUG"] = "true"
        config.reload()

    setup_logging(config)

    logger = logging.getLogger(__name__)
    logger.info("cyclAR starting...")
    logger.info(f"Environment: {config.env}")

    if args.route:
        sys.exit(run_route_preview(config, *args.route))
    elif args.send:
        sys.exit(run_send_command(config, args.send))
    elif args.emulate_device:
        run_device_emulator(config)
    else:
        from .mobile.app import run_mobile_app

        run_mobile_app(config)


if __name__ == "__main__":
    main()
