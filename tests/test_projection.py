import math

import pytest

from geomarcos.geodesy.projection import ProjectionError, Projector, default_projector
from geomarcos.validation.classifier import UtmBounds

# GRS80 ellipsoid (SIRGAS 2000)
_A = 6378137.0
_F = 1 / 298.257222101
_K0 = 0.9996


def _reference_utm(lon: float, lat: float, zone: int = 22) -> tuple[float, float]:
    """Snyder's transverse Mercator series (USGS PP 1395, eqs. 8-9 to 8-10)."""

    e2 = 2 * _F - _F**2
    ep2 = e2 / (1 - e2)
    phi = math.radians(lat)
    lam = math.radians(lon)
    lam0 = math.radians(-183 + 6 * zone)

    n = _A / math.sqrt(1 - e2 * math.sin(phi) ** 2)
    t = math.tan(phi) ** 2
    c = ep2 * math.cos(phi) ** 2
    a = (lam - lam0) * math.cos(phi)
    m = _A * (
        (1 - e2 / 4 - 3 * e2**2 / 64 - 5 * e2**3 / 256) * phi
        - (3 * e2 / 8 + 3 * e2**2 / 32 + 45 * e2**3 / 1024) * math.sin(2 * phi)
        + (15 * e2**2 / 256 + 45 * e2**3 / 1024) * math.sin(4 * phi)
        - (35 * e2**3 / 3072) * math.sin(6 * phi)
    )

    x = _K0 * n * (a + (1 - t + c) * a**3 / 6 + (5 - 18 * t + t**2 + 72 * c - 58 * ep2) * a**5 / 120)
    y = _K0 * (
        m
        + n
        * math.tan(phi)
        * (
            a**2 / 2
            + (5 - t + 9 * c + 4 * c**2) * a**4 / 24
            + (61 - 58 * t + t**2 + 600 * c - 330 * ep2) * a**6 / 720
        )
    )
    return x + 500_000.0, y + 10_000_000.0


@pytest.mark.parametrize(
    "lon, lat",
    [
        (-49.470827, -25.315171),
        (-51.0, -25.0),
        (-49.528345, -25.317900),
        (-52.5, -30.0),
    ],
)
def test_to_projected_matches_reference_series(lon: float, lat: float) -> None:
    e, n = default_projector().to_projected(lon, lat)
    ref_e, ref_n = _reference_utm(lon, lat)
    assert e == pytest.approx(ref_e, abs=1.0)
    assert n == pytest.approx(ref_n, abs=1.0)


def test_to_geographic_inverts_projection() -> None:
    projector = Projector()
    e, n = projector.to_projected(-49.470827, -25.315171)
    lon, lat = projector.to_geographic(e, n)
    assert lon == pytest.approx(-49.470827, abs=1e-7)
    assert lat == pytest.approx(-25.315171, abs=1e-7)


def test_projector_targets_configured_zone() -> None:
    projector = Projector(UtmBounds(zone=23))
    assert projector.target_epsg == 31983
    e, _ = projector.to_projected(-45.0, -23.0)
    assert e == pytest.approx(500_000.0, abs=0.01)


def test_invalid_input_raises_projection_error() -> None:
    with pytest.raises(ProjectionError):
        default_projector().to_projected("abc", -25.0)
    with pytest.raises(ProjectionError):
        default_projector().to_projected(math.inf, -25.0)
