"""Command line interface for geomarcos."""

from .main import app, run

__all__ = ["app", "run"]
