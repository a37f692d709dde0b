"""Convert degrees-minutes-seconds strings into decimal degrees."""
from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Optional

from .numbers import CoordinateParseError

__all__ = ["AngleMatch", "dms_to_decimal", "parse_angle"]

_DECIMAL_PATTERN = re.compile(r"^\s*([+-]?\d+[.,]\d+)\s*[°º]?\s*([NSWEOL])?\s*$", re.IGNORECASE)
_DMS_PATTERN = re.compile(
    r"([+-]?\d+)\s*[°º]\s*(\d+)\s*['’′\"]\s*(\d+(?:[.,]\d*)?)\s*(?:[\"″”']{1,2})?\s*([NSWEOL])?",
    re.IGNORECASE,
)
_NEGATIVE_DIRECTIONS = frozenset({"S", "W", "O"})


@dataclass(frozen=True)
class AngleMatch:
    """Components of a parsed angular token."""

    degrees: int
    minutes: int
    seconds: float
    direction: Optional[str]
    negative: bool

    @property
    def decimal(self) -> float:
        value = abs(self.degrees) + self.minutes / 60.0 + self.seconds / 3600.0
        return -value if self.negative else value


def parse_angle(raw: str) -> AngleMatch:
    """Split an angular token such as ``-49°28'14,978"`` or ``25°19'04,439"S``."""

    if not raw or not raw.strip():
        raise CoordinateParseError("Empty angular value")
    match = _DMS_PATTERN.search(raw.strip())
    if match is None:
        raise CoordinateParseError(f"Cannot parse DMS value from '{raw}'")
    deg_raw, min_raw, sec_raw, direction = match.groups()
    try:
        seconds = float(sec_raw.replace(",", ".").rstrip("."))
    except ValueError as exc:
        raise CoordinateParseError(f"Invalid seconds in '{raw}'") from exc
    direction = direction.upper() if direction else None
    negative = deg_raw.startswith("-") or direction in _NEGATIVE_DIRECTIONS
    return AngleMatch(
        degrees=int(deg_raw),
        minutes=int(min_raw),
        seconds=seconds,
        direction=direction,
        negative=negative,
    )


def dms_to_decimal(raw: str) -> float:
    """Return the decimal-degree value of ``raw``.

    Plain decimal tokens (``-25.3151``) are returned unchanged; DMS tokens are
    converted with ``|deg| + min/60 + sec/3600`` and made negative when the
    degree is negative or the hemisphere letter is S, W or O (Oeste).
    """

    if raw is None:
        raise CoordinateParseError("Empty angular value")
    decimal_match = _DECIMAL_PATTERN.match(raw)
    if decimal_match:
        value = float(decimal_match.group(1).replace(",", "."))
        direction = (decimal_match.group(2) or "").upper()
        if direction in _NEGATIVE_DIRECTIONS and value > 0:
            value = -value
        return value

    value = parse_angle(raw).decimal
    if not math.isfinite(value):
        raise CoordinateParseError(f"Invalid angular value: {raw!r}")
    return value
