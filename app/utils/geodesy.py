"""
Geodesy utilities for distances and areas on the Earth's surface.
"""
import math
from typing import Optional, Sequence, Tuple

import numpy as np
from pyproj import Geod

from app.config import settings

# WGS84 ellipsoid used for geodesic cross-checks
_GEOD = Geod(ellps="WGS84")


def haversine_distance(
    lat1: float,
    lon1: float,
    lat2: float,
    lon2: float,
    radius: Optional[float] = None,
) -> float:
    """
    Great-circle distance between two points using the haversine formula.

    Args:
        lat1: Latitude of the first point in degrees
        lon1: Longitude of the first point in degrees
        lat2: Latitude of the second point in degrees
        lon2: Longitude of the second point in degrees
        radius: Sphere radius in meters (defaults to the mean Earth radius)

    Returns:
        Distance in meters
    """
    r = radius or settings.earth_radius_m
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    delta_phi = math.radians(lat2 - lat1)
    delta_lambda = math.radians(lon2 - lon1)

    a = (
        math.sin(delta_phi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(delta_lambda / 2) ** 2
    )
    # Rounding can push a fractionally outside [0, 1]
    a = min(1.0, max(0.0, a))
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return r * c


def project_equirectangular(
    coordinates: Sequence[Tuple[float, float]],
    radius: Optional[float] = None,
) -> np.ndarray:
    """
    Project lat/lon coordinates to local planar meters.

    Uses an equirectangular approximation scaled at the mean latitude of the
    input, which is accurate for field-sized polygons away from the poles.

    Args:
        coordinates: Sequence of (latitude, longitude) tuples in degrees
        radius: Sphere radius in meters (defaults to the mean Earth radius)

    Returns:
        (n, 2) array of (x, y) coordinates in meters
    """
    if len(coordinates) == 0:
        raise ValueError("Coordinates list cannot be empty")

    r = radius or settings.earth_radius_m
    points = np.radians(np.asarray(coordinates, dtype=float))
    lat = points[:, 0]
    lon = points[:, 1]
    lat0 = np.mean(lat)

    x = lon * r * np.cos(lat0)
    y = lat * r
    return np.column_stack((x, y))


def shoelace_area(projected: np.ndarray) -> float:
    """
    Area of a simple polygon from its ordered planar vertices.

    The ring is closed implicitly. Vertices are centered before summing,
    which leaves the result unchanged but keeps the products small.

    Args:
        projected: (n, 2) array of planar (x, y) coordinates

    Returns:
        Unsigned area in square units of the input
    """
    centered = projected - projected.mean(axis=0)
    x = centered[:, 0]
    y = centered[:, 1]
    signed_area_x2 = np.sum(x * np.roll(y, -1) - np.roll(x, -1) * y)
    return float(abs(signed_area_x2) / 2)


def geodesic_area_m2(coordinates: Sequence[Tuple[float, float]]) -> float:
    """
    Area of a polygon on the WGS84 ellipsoid.

    Args:
        coordinates: Sequence of (latitude, longitude) tuples in degrees

    Returns:
        Unsigned area in m²
    """
    lats = [lat for lat, _ in coordinates]
    lons = [lon for _, lon in coordinates]
    area, _ = _GEOD.polygon_area_perimeter(lons, lats)
    return abs(area)
