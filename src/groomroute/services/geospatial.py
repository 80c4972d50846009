"""Geospatial helper functions."""

from __future__ import annotations

import math
from typing import Iterable, Optional

EARTH_RADIUS_MILES = 3959.0
EARTH_RADIUS_KM = 6371.0


def _central_angle(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    return 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def haversine_miles(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Compute distance in miles between two coordinates using the Haversine formula."""

    return EARTH_RADIUS_MILES * _central_angle(lat1, lon1, lat2, lon2)


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Compute distance in kilometres between two coordinates using the Haversine formula."""

    return EARTH_RADIUS_KM * _central_angle(lat1, lon1, lat2, lon2)


def nearest_distance_miles(
    lat: float, lon: float, points: Iterable[tuple[float, float]]
) -> Optional[float]:
    """Return the distance to the closest of ``points``, or None when there are none."""

    distances = [haversine_miles(lat, lon, p_lat, p_lon) for p_lat, p_lon in points]
    return min(distances) if distances else None
