"""Screen modules for cyclAR mobile UI."""

from .main_screen import MainScreen

__all__ = ["MainScreen"]
