"""
cyclAR Mobile - Cross-platform Kivy UI for bicycle directions.

This module provides a Kivy-based user interface that works on:
- Desktop (Windows, macOS, Linux)
- Mobile (Android, iOS)

Features:
- Route preview from a typed start point or the current position
- Live mode refreshing the next maneuvers from the position source
- Handlebar device buttons (left / up / right)
"""

from .app import CyclarApp

__all__ = ["CyclarApp"]
