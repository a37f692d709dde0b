"""Utilities to parse Brazilian-formatted numbers found in survey documents.

Coordinates and measures in a *memorial descritivo* are written either in the
Brazilian convention (``7.187.922,29``) or with a plain decimal point
(``7162638.648``).  The default heuristic looks only at the comma: when a
comma is present every dot is a thousands separator, otherwise the dot is the
decimal separator.

Known limitation: a value such as ``"1.234"`` is read as ``1.234`` by the
heuristic even if the author meant one thousand two hundred thirty-four.
There is no reliable way to tell the two apart from the token alone, so
callers that know the document convention should pass an explicit
:class:`NumberFormat` instead of relying on ``AUTO``.
"""
from __future__ import annotations

import math
import re
from enum import Enum

__all__ = [
    "CoordinateParseError",
    "NumberFormat",
    "parse_number_br",
]

_STRIP_CHARS = str.maketrans({" ": "", "\u00A0": ""})


class CoordinateParseError(ValueError):
    """Raised when a numeric token cannot be turned into a float."""


class NumberFormat(str, Enum):
    """Decimal convention of a numeric token."""

    AUTO = "auto"
    BR = "br"
    INTERNATIONAL = "international"


def _normalize_numeric_string(raw: str, number_format: NumberFormat) -> str:
    candidate = raw.translate(_STRIP_CHARS).strip()
    candidate = re.sub(r"[^0-9,\.\-\+]+", "", candidate)
    if not any(ch.isdigit() for ch in candidate):
        raise CoordinateParseError(f"Cannot parse numeric value from '{raw}'")

    if number_format is NumberFormat.AUTO:
        number_format = NumberFormat.BR if "," in candidate else NumberFormat.INTERNATIONAL

    if number_format is NumberFormat.BR:
        candidate = candidate.replace(".", "")
        head, sep, tail = candidate.rpartition(",")
        if sep:
            candidate = head.replace(",", "") + "." + tail
    else:
        candidate = candidate.replace(",", "")
    return candidate


def parse_number_br(raw: str, number_format: NumberFormat | str = NumberFormat.AUTO) -> float:
    """Parse a coordinate or measure token into a float.

    ``"627.110,28"`` gives ``627110.28`` and ``"757919.735"`` gives
    ``757919.735``.  ``number_format`` forces a convention when the document
    is known to use one.
    """

    if raw is None:
        raise CoordinateParseError("Cannot parse numeric value from None")
    normalized = _normalize_numeric_string(str(raw), NumberFormat(number_format))
    if normalized.endswith("."):
        normalized = normalized[:-1]
    try:
        value = float(normalized)
    except ValueError as exc:
        raise CoordinateParseError(f"Invalid numeric value: {raw!r}") from exc
    if not math.isfinite(value):
        raise CoordinateParseError(f"Invalid numeric value: {raw!r}")
    return value
