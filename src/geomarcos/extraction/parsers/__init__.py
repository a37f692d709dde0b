"""Parser primitives for coordinate and measure tokens."""

from .dms import AngleMatch, dms_to_decimal, parse_angle
from .numbers import CoordinateParseError, NumberFormat, parse_number_br

__all__ = [
    "AngleMatch",
    "CoordinateParseError",
    "NumberFormat",
    "dms_to_decimal",
    "parse_angle",
    "parse_number_br",
]
