"""
Domain service: Zone area estimation from boundary polygons.

Areas are computed by projecting the boundary onto a local equirectangular
plane and applying the shoelace formula. This is not a true geodesic area;
it drifts for very large or near-polar polygons, so the geodesic figure is
reported next to it.
"""
from typing import Any, Iterable, Optional, Sequence
import logging

from shapely.errors import GEOSException
from shapely.geometry import Polygon

from app.domain.models import AreaEstimate, AreaSource, GeoPoint, ZoneData
from app.utils.geodesy import (
    geodesic_area_m2,
    project_equirectangular,
    shoelace_area,
)

logger = logging.getLogger(__name__)

SQUARE_METERS_PER_HECTARE = 10_000.0
MIN_BOUNDARY_POINTS = 3


def _to_lat_lon(point: Any) -> tuple[float, float]:
    if isinstance(point, GeoPoint):
        return (point.latitude, point.longitude)
    if isinstance(point, (tuple, list)):
        lat, lon = point
        return (float(lat), float(lon))
    geo = GeoPoint.model_validate(point)
    return (geo.latitude, geo.longitude)


def _coordinates(points: Optional[Iterable[Any]]) -> list[tuple[float, float]]:
    if not points:
        return []
    return [_to_lat_lon(p) for p in points]


def _is_simple(projected) -> bool:
    try:
        return Polygon(projected).is_valid
    except (ValueError, GEOSException):
        # Rings closing onto themselves with fewer than 3 distinct vertices
        return False


def estimate_area_hectares(points: Optional[Sequence[Any]]) -> float:
    """
    Estimate the area enclosed by a boundary in hectares.

    Args:
        points: Ordered boundary vertices as GeoPoints, lat/lon mappings
            or (latitude, longitude) tuples

    Returns:
        Area in hectares; 0 when fewer than 3 points are given
    """
    coordinates = _coordinates(points)
    if len(coordinates) < MIN_BOUNDARY_POINTS:
        return 0.0

    projected = project_equirectangular(coordinates)
    return shoelace_area(projected) / SQUARE_METERS_PER_HECTARE


class BoundaryAreaEstimator:
    """
    Domain service for zone areas.

    Distinguishes "no usable boundary" from a genuine zero-area polygon so
    callers can fall back to a stored value.
    """

    def estimate(self, points: Optional[Sequence[Any]]) -> AreaEstimate:
        """
        Estimate the area of a boundary.

        Args:
            points: Ordered boundary vertices

        Returns:
            AreaEstimate with source BOUNDARY, or UNKNOWN for < 3 points
        """
        coordinates = _coordinates(points)
        if len(coordinates) < MIN_BOUNDARY_POINTS:
            logger.debug(f"Boundary has {len(coordinates)} points, area unknown")
            return AreaEstimate(
                hectares=0.0,
                source=AreaSource.UNKNOWN,
                point_count=len(coordinates),
            )

        projected = project_equirectangular(coordinates)
        hectares = shoelace_area(projected) / SQUARE_METERS_PER_HECTARE
        is_simple = _is_simple(projected)
        geodesic = geodesic_area_m2(coordinates) / SQUARE_METERS_PER_HECTARE

        if not is_simple:
            logger.warning(
                f"Boundary with {len(coordinates)} points is not a simple polygon; "
                f"area {hectares:.4f} ha may be wrong"
            )
        logger.debug(f"Boundary area: {hectares:.4f} ha (geodesic {geodesic:.4f} ha)")

        return AreaEstimate(
            hectares=hectares,
            source=AreaSource.BOUNDARY,
            point_count=len(coordinates),
            is_simple=is_simple,
            geodesic_hectares=geodesic,
        )

    def resolve_zone_area(self, zone: ZoneData) -> AreaEstimate:
        """
        Area of a zone, falling back to its stored value.

        Args:
            zone: Zone with boundary and stored area (m²)

        Returns:
            AreaEstimate from the boundary, the stored area, or UNKNOWN
        """
        estimate = self.estimate(zone.boundaries)
        if estimate.has_data:
            return estimate

        stored = zone.area or 0.0
        if stored > 0:
            logger.info(f"Zone {zone.id} has no usable boundary, using stored area")
            return AreaEstimate(
                hectares=stored / SQUARE_METERS_PER_HECTARE,
                source=AreaSource.STORED,
                point_count=estimate.point_count,
            )

        logger.info(f"No area data available for zone {zone.id}")
        return estimate
