"""Handlebar device control."""

from .command_sender import DeviceCommandSender

__all__ = ["DeviceCommandSender"]
