import math

import pytest

from geomarcos.validation.classifier import (
    UTM_22S,
    Classification,
    CoordinateKind,
    UtmBounds,
    classify,
    classify_conversion,
    describe,
    is_valid,
    looks_geographic,
)


@pytest.mark.parametrize(
    "e, n, expected",
    [
        (672338.25, 7187922.29, Classification.PROJECTED_VALID),
        (-49.28, -25.31, Classification.GEOGRAPHIC_MISTAKEN_FOR_PROJECTED),
        (0, 0, Classification.NULL_VALUES),
        (None, 7187922.29, Classification.NULL_VALUES),
        (672338.25, 0.0, Classification.NULL_VALUES),
        (1e9, 7187922.29, Classification.ABSURD_VALUES),
        (math.nan, 7187922.29, Classification.ABSURD_VALUES),
        (math.inf, 7187922.29, Classification.ABSURD_VALUES),
        ("abc", 7187922.29, Classification.ABSURD_VALUES),
        (5000.0, 8000.0, Classification.LOCAL_VALID),
        (950000.0, 7000000.0, Classification.OUT_OF_RANGE),
        (120000.0, 8000000.0, Classification.PROJECTED_VALID),
    ],
)
def test_classify_projected(e, n, expected: Classification) -> None:
    assert classify(e, n, CoordinateKind.PROJECTED) is expected


def test_classify_geographic() -> None:
    assert classify(-49.47, -25.31, CoordinateKind.GEOGRAPHIC) is Classification.GEOGRAPHIC_VALID
    assert classify(-200.0, 10.0, "GEOGRAPHIC") is Classification.OUT_OF_RANGE
    assert classify(-49.47, 95.0, CoordinateKind.GEOGRAPHIC) is Classification.OUT_OF_RANGE


def test_classify_is_deterministic() -> None:
    results = {classify(-49.28, -25.31) for _ in range(5)}
    assert results == {Classification.GEOGRAPHIC_MISTAKEN_FOR_PROJECTED}


def test_looks_geographic() -> None:
    assert looks_geographic(-49.28, -25.31)
    assert looks_geographic(-60.0, 2.0)
    assert not looks_geographic(672338.25, 7187922.29)


def test_classify_conversion_outcomes() -> None:
    assert classify_conversion(-49.47, -25.32, (653900.0, 7198600.0)) is Classification.PROJECTED_VALID
    assert classify_conversion(-49.47, -25.32, None) is Classification.CONVERSION_FAILED
    assert classify_conversion(-20.0, -10.0, (400000.0, 8000000.0)) is Classification.CONVERSION_FAILED
    assert classify_conversion(-49.47, -25.32, (math.inf, 1.0)) is Classification.CONVERSION_FAILED
    assert classify_conversion(0, -25.32, (1.0, 1.0)) is Classification.NULL_VALUES


def test_validity_and_descriptions() -> None:
    assert is_valid(Classification.PROJECTED_VALID)
    assert is_valid(Classification.LOCAL_VALID)
    assert not is_valid(Classification.CONVERSION_FAILED)
    assert describe(Classification.NULL_VALUES) == "Coordenadas nulas ou zeradas"
    assert describe("ABSURD_VALUES") == "Valores numéricos inválidos ou absurdos"
    assert describe("SOMETHING_ELSE") == "Erro desconhecido"


def test_utm_bounds_epsg() -> None:
    assert UTM_22S.epsg == 31982
    assert UtmBounds(zone=23).epsg == 31983
    assert UtmBounds(zone=22, south=False).epsg == 31976
    with pytest.raises(ValueError):
        UtmBounds(zone=40).epsg
