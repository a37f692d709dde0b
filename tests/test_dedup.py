from geomarcos.extraction.dedup import Deduplicator, deduplicate
from geomarcos.extraction.formats import ExtractedVertex
from geomarcos.validation.classifier import Classification, CoordinateKind


def _vertex(name: str, e: float, n: float, rule: str = "R") -> ExtractedVertex:
    return ExtractedVertex(
        name=name,
        encoding=CoordinateKind.PROJECTED,
        raw_pair=(str(e), str(n)),
        canonical_e=e,
        canonical_n=n,
        classification=Classification.PROJECTED_VALID,
        rule=rule,
    )


def test_first_occurrence_wins() -> None:
    first = _vertex("V01", 672338.25, 7187922.29, rule="A")
    again = _vertex("V01", 672338.251, 7187922.289, rule="B")
    other = _vertex("V02", 672395.08, 7187911.77)
    assert deduplicate([first, again, other]) == [first, other]


def test_same_name_different_position_is_kept() -> None:
    dedup = Deduplicator()
    assert dedup.accept(_vertex("V01", 672338.25, 7187922.29))
    assert dedup.accept(_vertex("V01", 672340.25, 7187922.29))
    assert not dedup.accept(_vertex("V01", 672338.25, 7187922.29))
    assert dedup.duplicates == 1
    assert len(dedup) == 2
