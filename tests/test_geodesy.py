import numpy as np
import pytest

from pinboundary.models import GeoPoint
from pinboundary.spatial.geodesy import EARTH_RADIUS_M, destination_point, destination_points, great_circle_distance_m


def test_great_circle_distance_one_degree_latitude() -> None:
    d = great_circle_distance_m(GeoPoint(lat=0.0, lng=0.0), GeoPoint(lat=1.0, lng=0.0))
    assert d == pytest.approx(EARTH_RADIUS_M * np.pi / 180.0, rel=1e-9)


def test_great_circle_distance_is_symmetric_and_zero_on_self() -> None:
    a = GeoPoint(lat=23.0330, lng=72.5714)
    b = GeoPoint(lat=23.0500, lng=72.6000)
    assert great_circle_distance_m(a, a) == 0.0
    assert great_circle_distance_m(a, b) == pytest.approx(great_circle_distance_m(b, a))


def test_destination_point_travels_requested_distance() -> None:
    origin = GeoPoint(lat=23.0330, lng=72.5714)
    for bearing in (0.0, 45.0, 90.0, 200.0, 359.0):
        dest = destination_point(origin, bearing, 1500.0)
        assert great_circle_distance_m(origin, dest) == pytest.approx(1500.0, abs=1e-3)


def test_destination_point_bearings() -> None:
    origin = GeoPoint(lat=23.0330, lng=72.5714)
    north = destination_point(origin, 0.0, 1000.0)
    east = destination_point(origin, 90.0, 1000.0)
    assert north.lat > origin.lat
    assert north.lng == pytest.approx(origin.lng, abs=1e-9)
    assert east.lng > origin.lng
    assert east.lat == pytest.approx(origin.lat, abs=1e-4)


def test_destination_points_shape_mismatch() -> None:
    with pytest.raises(ValueError):
        destination_points(GeoPoint(lat=0.0, lng=0.0), np.array([0.0, 90.0]), np.array([100.0]))
