import random

import pytest

from pinboundary.boundary.sampling import estimate_radius_m, sample_radial_points
from pinboundary.errors import DegenerateRing
from pinboundary.models import GeoPoint, Viewport
from pinboundary.spatial.geodesy import great_circle_distance_m

CENTER = GeoPoint(lat=23.0330, lng=72.5714)


def _viewport(half_span_deg: float) -> Viewport:
    return Viewport(
        northeast=GeoPoint(lat=CENTER.lat + half_span_deg, lng=CENTER.lng + half_span_deg),
        southwest=GeoPoint(lat=CENTER.lat - half_span_deg, lng=CENTER.lng - half_span_deg),
    )


def test_estimate_radius_default_without_viewport() -> None:
    assert estimate_radius_m(None) == 1000.0


def test_estimate_radius_half_diagonal_in_range() -> None:
    vp = _viewport(0.00636)
    expected = great_circle_distance_m(vp.southwest, vp.northeast) / 2.0
    assert 500.0 < expected < 3000.0
    assert estimate_radius_m(vp) == pytest.approx(expected)


@pytest.mark.parametrize("half_span_deg", [0.0, 0.0001, 0.002, 0.01, 0.05, 0.5, 5.0])
def test_estimate_radius_is_clamped(half_span_deg: float) -> None:
    r = estimate_radius_m(_viewport(half_span_deg))
    assert 500.0 <= r <= 3000.0


def test_estimate_radius_clamp_edges() -> None:
    assert estimate_radius_m(_viewport(0.0001)) == 500.0
    assert estimate_radius_m(_viewport(1.0)) == 3000.0


def test_sample_radial_points_angles_and_jitter_bounds() -> None:
    points = sample_radial_points(CENTER, 1000.0, 180, rng=random.Random(7))
    assert len(points) == 180
    assert [p.angle for p in points] == [i * 2.0 for i in range(180)]
    for p in points:
        d = great_circle_distance_m(CENTER, p.point)
        assert 850.0 - 1e-6 <= d <= 1150.0 + 1e-6


def test_sample_radial_points_is_reproducible_with_seed() -> None:
    a = sample_radial_points(CENTER, 1000.0, 36, rng=random.Random(42))
    b = sample_radial_points(CENTER, 1000.0, 36, rng=random.Random(42))
    c = sample_radial_points(CENTER, 1000.0, 36, rng=random.Random(43))
    assert a == b
    assert a != c


def test_sample_radial_points_jitter_is_not_a_circle() -> None:
    points = sample_radial_points(CENTER, 1000.0, 180, rng=random.Random(1))
    distances = {round(great_circle_distance_m(CENTER, p.point), 3) for p in points}
    assert len(distances) > 1


def test_sample_radial_points_validation() -> None:
    with pytest.raises(DegenerateRing):
        sample_radial_points(CENTER, 1000.0, 2)
    with pytest.raises(ValueError):
        sample_radial_points(CENTER, 0.0, 180)
