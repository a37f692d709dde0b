"""Coordinate classification shared by extraction and marker maintenance."""

from .classifier import (
    BRAZIL_BOUNDS,
    UTM_22S,
    Classification,
    CoordinateKind,
    GeoBounds,
    UtmBounds,
    classify,
    classify_conversion,
    describe,
    is_valid,
    looks_geographic,
)

__all__ = [
    "BRAZIL_BOUNDS",
    "UTM_22S",
    "Classification",
    "CoordinateKind",
    "GeoBounds",
    "UtmBounds",
    "classify",
    "classify_conversion",
    "describe",
    "is_valid",
    "looks_geographic",
]
