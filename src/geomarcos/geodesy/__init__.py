"""Coordinate reference system transforms."""

from .projection import SIRGAS2000_GEOGRAPHIC, ProjectionError, Projector, default_projector

__all__ = ["SIRGAS2000_GEOGRAPHIC", "ProjectionError", "Projector", "default_projector"]
