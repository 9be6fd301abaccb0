"""Development web services for cyclAR."""

from .app import create_app

__all__ = ["create_app"]
