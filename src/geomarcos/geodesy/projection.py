"""SIRGAS 2000 geographic <-> UTM transforms backed by :mod:`pyproj`."""
from __future__ import annotations

import logging
import math
from functools import lru_cache
from typing import Tuple

from pyproj import CRS, Transformer
from pyproj.exceptions import ProjError

from ..validation.classifier import UTM_22S, UtmBounds

__all__ = ["ProjectionError", "Projector", "SIRGAS2000_GEOGRAPHIC", "default_projector"]

LOGGER = logging.getLogger(__name__)

SIRGAS2000_GEOGRAPHIC = 4674


class ProjectionError(RuntimeError):
    """Raised when a coordinate cannot be transformed."""


@lru_cache(maxsize=16)
def _transformer(source_epsg: int, target_epsg: int) -> Transformer:
    return Transformer.from_crs(CRS.from_epsg(source_epsg), CRS.from_epsg(target_epsg), always_xy=True)


class Projector:
    """Transform between SIRGAS 2000 geographic coordinates and one UTM zone.

    All pairs are ``(x, y)`` ordered: ``(lon, lat)`` on the geographic side
    and ``(e, n)`` on the projected side.
    """

    def __init__(self, bounds: UtmBounds = UTM_22S, *, source_epsg: int = SIRGAS2000_GEOGRAPHIC) -> None:
        self.bounds = bounds
        self.source_epsg = int(source_epsg)
        self.target_epsg = bounds.epsg

    def __repr__(self) -> str:  # pragma: no cover - debugging helper
        return f"Projector(EPSG:{self.source_epsg} -> EPSG:{self.target_epsg})"

    def to_projected(self, lon: float, lat: float) -> Tuple[float, float]:
        """Return ``(e, n)`` in metres for a geographic ``(lon, lat)`` pair."""

        return self._transform(self.source_epsg, self.target_epsg, lon, lat)

    def to_geographic(self, e: float, n: float) -> Tuple[float, float]:
        """Return ``(lon, lat)`` in decimal degrees for a projected ``(e, n)`` pair."""

        return self._transform(self.target_epsg, self.source_epsg, e, n)

    @staticmethod
    def _transform(source: int, target: int, x: float, y: float) -> Tuple[float, float]:
        try:
            out_x, out_y = _transformer(source, target).transform(float(x), float(y), errcheck=True)
        except (ProjError, TypeError, ValueError) as exc:
            raise ProjectionError(f"EPSG:{source} -> EPSG:{target} failed for ({x}, {y}): {exc}") from exc
        if not (math.isfinite(out_x) and math.isfinite(out_y)):
            raise ProjectionError(f"EPSG:{source} -> EPSG:{target} returned non-finite values for ({x}, {y})")
        LOGGER.debug("projected (%s, %s) -> (%.3f, %.3f)", x, y, out_x, out_y)
        return float(out_x), float(out_y)


@lru_cache(maxsize=1)
def default_projector() -> Projector:
    """Projector for SIRGAS 2000 -> SIRGAS 2000 / UTM zone 22S."""

    return Projector()
