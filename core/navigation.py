"""
Navigation helpers for the simulated flight
Great-circle distance, bearing and fixed-step waypoint following on WGS84
coordinates. Survey areas are a few hundred metres across, so stepping uses
a local flat-earth (equirectangular) frame around the current position.
"""

import math
from typing import Tuple

import numpy as np

from core.telemetry import GeoPoint

EARTH_RADIUS_M = 6371000.0
ARRIVAL_TOLERANCE_M = 0.001


def haversine_m(a: GeoPoint, b: GeoPoint) -> float:
    """Great-circle distance between two points in metres."""
    phi1 = math.radians(a.lat)
    phi2 = math.radians(b.lat)
    dphi = math.radians(b.lat - a.lat)
    dlambda = math.radians(b.lon - a.lon)
    h = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlambda / 2) ** 2
    return 2 * EARTH_RADIUS_M * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def bearing_deg(a: GeoPoint, b: GeoPoint) -> float:
    """Initial bearing from a to b, degrees clockwise from north in [0, 360)."""
    phi1 = math.radians(a.lat)
    phi2 = math.radians(b.lat)
    dlambda = math.radians(b.lon - a.lon)
    y = math.sin(dlambda) * math.cos(phi2)
    x = math.cos(phi1) * math.sin(phi2) - math.sin(phi1) * math.cos(phi2) * math.cos(dlambda)
    return math.degrees(math.atan2(y, x)) % 360.0


def _metres_per_degree(lat: float) -> np.ndarray:
    """(north, east) metres per degree of (lat, lon) at the given latitude."""
    m_per_deg = math.radians(1.0) * EARTH_RADIUS_M
    return np.array([m_per_deg, m_per_deg * max(math.cos(math.radians(lat)), 1e-6)])


def step_toward(current: GeoPoint, target: GeoPoint, step_m: float) -> Tuple[GeoPoint, bool]:
    """Move at most ``step_m`` metres from current toward target.

    Returns (new_position, reached). When the target is within one step
    the new position snaps exactly onto it."""
    scale = _metres_per_degree(current.lat)
    offset = (np.array(target.as_tuple()) - np.array(current.as_tuple())) * scale
    distance = float(np.linalg.norm(offset))

    if distance <= step_m + ARRIVAL_TOLERANCE_M:
        return target, True

    direction = offset / distance
    moved = np.array(current.as_tuple()) + direction * step_m / scale
    return GeoPoint(float(moved[0]), float(moved[1])), False


def offset_point(origin: GeoPoint, north_m: float, east_m: float) -> GeoPoint:
    """Point displaced from origin by metres north/east."""
    scale = _metres_per_degree(origin.lat)
    return GeoPoint(origin.lat + north_m / scale[0], origin.lon + east_m / scale[1])


def local_offset_m(origin: GeoPoint, point: GeoPoint) -> Tuple[float, float]:
    """(north, east) metres of point relative to origin."""
    scale = _metres_per_degree(origin.lat)
    delta = (np.array(point.as_tuple()) - np.array(origin.as_tuple())) * scale
    return float(delta[0]), float(delta[1])
