import pytest

from core.navigation import bearing_deg, haversine_m, local_offset_m, offset_point, step_toward
from core.telemetry import GeoPoint

HOME = GeoPoint(34.0522, -118.2437)


def test_haversine_one_degree_at_equator():
    assert haversine_m(GeoPoint(0, 0), GeoPoint(0, 1)) == pytest.approx(111195, rel=1e-3)
    assert haversine_m(HOME, HOME) == 0.0


def test_bearing_cardinal_directions():
    assert bearing_deg(GeoPoint(0, 0), GeoPoint(1, 0)) == pytest.approx(0.0)
    assert bearing_deg(GeoPoint(0, 0), GeoPoint(0, 1)) == pytest.approx(90.0)
    assert bearing_deg(GeoPoint(0, 0), GeoPoint(-1, 0)) == pytest.approx(180.0)
    assert bearing_deg(GeoPoint(0, 0), GeoPoint(0, -1)) == pytest.approx(270.0)


def test_offset_point_round_trip():
    point = offset_point(HOME, 40.0, -25.0)
    north, east = local_offset_m(HOME, point)
    assert north == pytest.approx(40.0)
    assert east == pytest.approx(-25.0)
    assert haversine_m(HOME, point) == pytest.approx((40.0 ** 2 + 25.0 ** 2) ** 0.5, rel=1e-3)


def test_step_toward_moves_fixed_distance():
    target = offset_point(HOME, 100.0, 0.0)
    moved, reached = step_toward(HOME, target, 5.0)
    assert not reached
    assert haversine_m(HOME, moved) == pytest.approx(5.0, rel=1e-3)


def test_step_toward_snaps_onto_target():
    target = offset_point(HOME, 3.0, 0.0)
    moved, reached = step_toward(HOME, target, 5.0)
    assert reached
    assert moved == target
