"""Command-line interface (``pra``)."""

from .main import app

__all__ = ["app"]
