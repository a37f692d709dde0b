"""Named regex rules recognising vertex declarations in survey documents."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Sequence, Tuple

from ..validation.classifier import CoordinateKind

__all__ = [
    "AxisOrder",
    "DEFAULT_VERTEX_RULES",
    "PatternRule",
    "PatternValidationError",
    "RuleMatch",
    "build_rule",
    "compile_rules",
]

_FLAGS = re.IGNORECASE | re.UNICODE

_QUOTE = "'\"‘’“”"
_MARKER = r"(?:MARCO|VÉRTICE|VERTICE)"
_FHV_NAME = r"(FHV-[MPV]-\d+)"
_QUOTED_NAME = rf"[{_QUOTE}]([^{_QUOTE}()]+?)[{_QUOTE}]"
_UTM_PAIR = r"\(E\s*=?\s*([\d.,]+)\s*M\s+E\s+N\s*=?\s*([\d.,]+)\s*M\)"
_UTM_PAIR_LOOSE = r"\(E\s*=?\s*([\d.,]+)\s*M\s+(?:E\s+)?N\s*=?\s*([\d.,]+)\s*M\)"
_NOT_MARKER = rf"(?:(?!{_MARKER}).)"
_DMS = r"(-?\d+\s*[°º]\s*\d+\s*['′’]\s*\d+(?:[,.]\d*)?\s*[\"″”']{0,2})"
_DMS_LOOSE_LAT = r"([\d°º'′\"″.,\s]+[NS])"
_DMS_LOOSE_LON = r"([\d°º'′\"″.,\s]+[WEOL])"


class AxisOrder(str, Enum):
    """Order in which a geographic rule captures its two angles."""

    LON_LAT = "LON_LAT"
    LAT_LON = "LAT_LON"


class PatternValidationError(ValueError):
    """Raised when at least one rule definition cannot be compiled."""

    def __init__(self, errors: Sequence[Dict[str, Any]]):
        self.errors: List[Dict[str, Any]] = list(errors)
        summary = ", ".join(f"{err.get('name')}: {err.get('regex')} -> {err.get('error')}" for err in self.errors)
        super().__init__(f"Invalid vertex rules: {summary}")


@dataclass(frozen=True)
class RuleMatch:
    """Raw captures of a single rule occurrence."""

    rule: str
    name: Optional[str]
    first: Optional[str]
    second: Optional[str]
    span: Tuple[int, int]


@dataclass(frozen=True)
class PatternRule:
    """One textual idiom for declaring a vertex and its coordinate pair.

    Rules hold no scan state: :meth:`find_all` builds a fresh iterator on
    every call, so applying a rule twice to the same text yields the same
    matches.
    """

    name: str
    coordinate_kind: CoordinateKind
    pattern: re.Pattern[str]
    name_group: int | str = 1
    first_group: int | str = 2
    second_group: int | str = 3
    order: AxisOrder = AxisOrder.LON_LAT

    @staticmethod
    def _group(match: re.Match[str], key: int | str) -> Optional[str]:
        try:
            value = match.group(key)
        except IndexError:
            return None
        if value is None:
            return None
        value = value.strip()
        return value or None

    def iter_matches(self, text: str) -> Iterator[RuleMatch]:
        for match in self.pattern.finditer(text):
            yield RuleMatch(
                rule=self.name,
                name=self._group(match, self.name_group),
                first=self._group(match, self.first_group),
                second=self._group(match, self.second_group),
                span=match.span(),
            )

    def find_all(self, text: str) -> List[RuleMatch]:
        """Every non-overlapping occurrence of the rule in ``text``."""

        return list(self.iter_matches(text))


def build_rule(
    name: str,
    coordinate_kind: CoordinateKind | str,
    regex: str,
    *,
    name_group: int | str = 1,
    first_group: int | str = 2,
    second_group: int | str = 3,
    order: AxisOrder | str = AxisOrder.LON_LAT,
) -> PatternRule:
    """Compile ``regex`` into a :class:`PatternRule`."""

    try:
        compiled = re.compile(regex, flags=_FLAGS)
    except re.error as exc:
        raise PatternValidationError([{"name": name, "regex": regex, "error": str(exc)}]) from exc
    return PatternRule(
        name=name,
        coordinate_kind=CoordinateKind(coordinate_kind),
        pattern=compiled,
        name_group=name_group,
        first_group=first_group,
        second_group=second_group,
        order=AxisOrder(order),
    )


def compile_rules(specs: Iterable[Mapping[str, Any]]) -> Tuple[PatternRule, ...]:
    """Build rules from plain mappings (e.g. loaded from JSON or YAML).

    Each mapping needs ``name``, ``kind`` and ``regex``; ``groups`` (a list of
    three group references) and ``order`` are optional.
    """

    rules: List[PatternRule] = []
    errors: List[Dict[str, Any]] = []
    for item in specs:
        name = str(item.get("name") or f"RULE_{len(rules) + len(errors) + 1}")
        regex = item.get("regex")
        if not isinstance(regex, str) or not regex:
            errors.append({"name": name, "regex": regex, "error": "missing regex"})
            continue
        groups = list(item.get("groups") or (1, 2, 3))
        if len(groups) != 3:
            errors.append({"name": name, "regex": regex, "error": "groups must list three captures"})
            continue
        try:
            rules.append(
                build_rule(
                    name,
                    item.get("kind", CoordinateKind.PROJECTED),
                    regex,
                    name_group=groups[0],
                    first_group=groups[1],
                    second_group=groups[2],
                    order=item.get("order", AxisOrder.LON_LAT),
                )
            )
        except PatternValidationError as exc:
            errors.extend(exc.errors)
        except ValueError as exc:
            errors.append({"name": name, "regex": regex, "error": str(exc)})
    if errors:
        raise PatternValidationError(errors)
    return tuple(rules)


DEFAULT_VERTEX_RULES: Tuple[PatternRule, ...] = (
    # marco 'V01' (E=672.338,25 m e N=7.187.922,29 m)
    build_rule(
        "UTM_QUOTED_INLINE",
        CoordinateKind.PROJECTED,
        rf"{_MARKER}\s+{_QUOTED_NAME}\s*{_NOT_MARKER}*?{_UTM_PAIR}",
    ),
    # marco FHV-M-3403 (E= 627.110,28 m e N= 7.097.954,68 m)
    build_rule(
        "UTM_FHV_INLINE",
        CoordinateKind.PROJECTED,
        rf"{_MARKER}\s+{_FHV_NAME}\s*{_NOT_MARKER}*?{_UTM_PAIR_LOOSE}",
    ),
    # vértice FHV-M-0159 ... Longitude:-49°28'14,978", Latitude:-25°18'54,615"
    build_rule(
        "GEO_DMS_LONGITUDE_FIRST",
        CoordinateKind.GEOGRAPHIC,
        rf"{_MARKER}\s+(FHV-[MPV]-\d+|[A-Z0-9-]+)(?:(?!{_MARKER})[\s\S]){{0,300}}?LONGITUDE\s*:?\s*{_DMS}"
        rf"(?:\s*,?\s*LATITUDE\s*:?\s*{_DMS})?",
        order=AxisOrder.LON_LAT,
    ),
    # VÉRTICE V-001, DE COORDENADAS LAT 25°19'04,439"S, LONG 49°31'42,042"W
    build_rule(
        "GEO_DMS_LATITUDE_FIRST",
        CoordinateKind.GEOGRAPHIC,
        rf"{_MARKER}\s+([A-Z0-9-]+)\s*,?\s*DE\s+COORDENADAS\s+(?:LATITUDE|LAT)\s*:?\s*{_DMS_LOOSE_LAT}"
        rf"\s*,\s*(?:LONGITUDE|LONG)\s*:?\s*{_DMS_LOOSE_LON}",
        order=AxisOrder.LAT_LON,
    ),
    # até o marco 'V02' (E=672.395,08 m e N=7.187.911,77 m)
    build_rule(
        "UTM_QUOTED_UNTIL_MARKER",
        CoordinateKind.PROJECTED,
        rf"AT[ÉE]\s+O\s+{_MARKER}\s+{_QUOTED_NAME}\s*{_UTM_PAIR}",
    ),
    # até o marco FHV-M-3489 (E=627.371,18 m e N=7.097.924,76 m)
    build_rule(
        "UTM_FHV_UNTIL_MARKER",
        CoordinateKind.PROJECTED,
        rf"AT[ÉE]\s+O\s+{_MARKER}\s+{_FHV_NAME}\s*{_UTM_PAIR_LOOSE}",
    ),
)
