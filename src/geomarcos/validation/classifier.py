"""Range based classification of coordinate pairs.

The same rules are used when vertices are freshly parsed from text and when
persisted markers are revalidated or corrected, so a stored coordinate is
never judged by a different yardstick than the one that accepted it.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

__all__ = [
    "ABSURD_LIMIT",
    "BRAZIL_BOUNDS",
    "Classification",
    "CoordinateKind",
    "GeoBounds",
    "UTM_22S",
    "UtmBounds",
    "classify",
    "classify_conversion",
    "describe",
    "is_valid",
    "looks_geographic",
]

ABSURD_LIMIT = 99_999_999.0


class CoordinateKind(str, Enum):
    """Encoding a coordinate pair is declared in."""

    PROJECTED = "PROJECTED"
    GEOGRAPHIC = "GEOGRAPHIC"


class Classification(str, Enum):
    PROJECTED_VALID = "PROJECTED_VALID"
    LOCAL_VALID = "LOCAL_VALID"
    GEOGRAPHIC_VALID = "GEOGRAPHIC_VALID"
    OUT_OF_RANGE = "OUT_OF_RANGE"
    NULL_VALUES = "NULL_VALUES"
    ABSURD_VALUES = "ABSURD_VALUES"
    GEOGRAPHIC_MISTAKEN_FOR_PROJECTED = "GEOGRAPHIC_MISTAKEN_FOR_PROJECTED"
    CONVERSION_FAILED = "CONVERSION_FAILED"


_VALID = frozenset(
    {
        Classification.PROJECTED_VALID,
        Classification.LOCAL_VALID,
        Classification.GEOGRAPHIC_VALID,
    }
)

_DESCRIPTIONS = {
    Classification.PROJECTED_VALID: "Coordenadas UTM válidas",
    Classification.LOCAL_VALID: "Coordenadas em sistema local de levantamento",
    Classification.GEOGRAPHIC_VALID: "Coordenadas geográficas válidas",
    Classification.OUT_OF_RANGE: "Coordenadas UTM fora do range válido para a zona configurada",
    Classification.NULL_VALUES: "Coordenadas nulas ou zeradas",
    Classification.ABSURD_VALUES: "Valores numéricos inválidos ou absurdos",
    Classification.GEOGRAPHIC_MISTAKEN_FOR_PROJECTED: "Coordenadas geográficas (graus) gravadas como UTM",
    Classification.CONVERSION_FAILED: "Falha na conversão de coordenadas",
}


@dataclass(frozen=True)
class UtmBounds:
    """Envelope of accepted projected values for one UTM zone.

    Only zone 22S is established; other zones reuse the generic envelope
    until a multi-zone policy exists.
    """

    zone: int = 22
    south: bool = True
    min_e: float = 166_000.0
    max_e: float = 834_000.0
    min_n: float = 0.0
    max_n: float = 10_000_000.0
    other_zone_e: Tuple[float, float] = (100_000.0, 900_000.0)
    other_zone_n: Tuple[float, float] = (1_000_000.0, 10_000_000.0)
    local_limit: float = 100_000.0

    @property
    def epsg(self) -> int:
        """SIRGAS 2000 / UTM EPSG code for the zone (31960 + zone in the south)."""

        if self.south and 17 <= self.zone <= 25:
            return 31960 + self.zone
        if not self.south and 17 <= self.zone <= 22:
            return 31954 + self.zone
        raise ValueError(f"No SIRGAS 2000 EPSG code for zone {self.zone}{'S' if self.south else 'N'}")

    def in_zone(self, e: float, n: float) -> bool:
        return self.min_e <= e <= self.max_e and self.min_n <= n <= self.max_n

    def in_other_zone(self, e: float, n: float) -> bool:
        lo_e, hi_e = self.other_zone_e
        lo_n, hi_n = self.other_zone_n
        return lo_e <= e <= hi_e and lo_n <= n <= hi_n

    def is_local(self, e: float, n: float) -> bool:
        return e < self.local_limit and n < self.local_limit


@dataclass(frozen=True)
class GeoBounds:
    """Latitude/longitude box in decimal degrees."""

    min_lat: float
    max_lat: float
    min_lon: float
    max_lon: float

    def contains(self, lon: float, lat: float) -> bool:
        return self.min_lat <= lat <= self.max_lat and self.min_lon <= lon <= self.max_lon


UTM_22S = UtmBounds()
BRAZIL_BOUNDS = GeoBounds(min_lat=-34.0, max_lat=6.0, min_lon=-74.0, max_lon=-34.0)
# Wider box used to spot degrees stored in projected columns.
_MISENCODED_BOX = GeoBounds(min_lat=-35.0, max_lat=6.0, min_lon=-75.0, max_lon=-30.0)


def _is_missing(value: Optional[float]) -> bool:
    return value is None or value == 0


def _is_absurd(value: float) -> bool:
    return not math.isfinite(value) or abs(value) > ABSURD_LIMIT


def looks_geographic(e: float, n: float) -> bool:
    """Return ``True`` when a "projected" pair has decimal-degree magnitude."""

    if abs(e) < 1000 and abs(n) < 1000:
        return True
    return _MISENCODED_BOX.contains(e, n)


def classify(
    e: Optional[float],
    n: Optional[float],
    declared_kind: CoordinateKind | str = CoordinateKind.PROJECTED,
    bounds: UtmBounds = UTM_22S,
) -> Classification:
    """Classify a coordinate pair.

    For ``GEOGRAPHIC`` pairs ``e`` is the longitude and ``n`` the latitude.
    """

    kind = CoordinateKind(declared_kind)
    if _is_missing(e) or _is_missing(n):
        return Classification.NULL_VALUES
    try:
        e = float(e)  # type: ignore[arg-type]
        n = float(n)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return Classification.ABSURD_VALUES
    if _is_absurd(e) or _is_absurd(n):
        return Classification.ABSURD_VALUES

    if kind is CoordinateKind.GEOGRAPHIC:
        if -90.0 <= n <= 90.0 and -180.0 <= e <= 180.0:
            return Classification.GEOGRAPHIC_VALID
        return Classification.OUT_OF_RANGE

    if looks_geographic(e, n):
        return Classification.GEOGRAPHIC_MISTAKEN_FOR_PROJECTED
    if bounds.in_zone(e, n) or bounds.in_other_zone(e, n):
        return Classification.PROJECTED_VALID
    if bounds.is_local(e, n):
        return Classification.LOCAL_VALID
    return Classification.OUT_OF_RANGE


def classify_conversion(
    lon: float,
    lat: float,
    projected: Optional[Tuple[float, float]],
    bounds: UtmBounds = UTM_22S,
    region: GeoBounds = BRAZIL_BOUNDS,
) -> Classification:
    """Judge the projected point obtained from a geographic ``(lon, lat)`` pair.

    A transform that produced nothing, or a source point outside ``region``,
    yields ``CONVERSION_FAILED`` even when the angles were individually valid.
    """

    source = classify(lon, lat, CoordinateKind.GEOGRAPHIC, bounds)
    if source is not Classification.GEOGRAPHIC_VALID:
        return source
    if projected is None or not region.contains(lon, lat):
        return Classification.CONVERSION_FAILED
    e, n = projected
    if _is_absurd(e) or _is_absurd(n):
        return Classification.CONVERSION_FAILED
    return classify(e, n, CoordinateKind.PROJECTED, bounds)


def is_valid(result: Classification) -> bool:
    return result in _VALID


def describe(result: Classification | str) -> str:
    """Human readable (Portuguese) description stored alongside invalid markers."""

    try:
        return _DESCRIPTIONS[Classification(result)]
    except ValueError:
        return "Erro desconhecido"
