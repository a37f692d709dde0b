"""Collapse repeated declarations of the same physical vertex."""
from __future__ import annotations

from typing import Iterable, List, Set, Tuple

from .formats import ExtractedVertex

__all__ = ["Deduplicator", "deduplicate"]


class Deduplicator:
    """Keep the first vertex seen for each ``(name, e, n)`` key.

    Coordinates are compared rounded to centimetres.  A vertex quoted once in
    a "from marker X" clause and again in "to marker X", or matched by two
    rules, is the same vertex and is dropped without being reported as an
    error.
    """

    def __init__(self) -> None:
        self._seen: Set[Tuple[str, float, float]] = set()
        self.duplicates = 0

    def accept(self, vertex: ExtractedVertex) -> bool:
        key = vertex.key
        if key in self._seen:
            self.duplicates += 1
            return False
        self._seen.add(key)
        return True

    def __len__(self) -> int:
        return len(self._seen)


def deduplicate(vertices: Iterable[ExtractedVertex]) -> List[ExtractedVertex]:
    dedup = Deduplicator()
    return [vertex for vertex in vertices if dedup.accept(vertex)]
