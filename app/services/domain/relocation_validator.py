"""
Domain service: Plausibility check for manual tree relocations.

A tree's coordinates may only be corrected by a small distance; anything
larger is far more likely to be a mis-tap or a GPS jump than a real move.
Rejections are returned as values, never raised.
"""
from typing import Optional
import logging
import math

from app.config import settings
from app.domain.models import (
    GeoPoint,
    RejectionReason,
    RelocationResult,
    TreeData,
)
from app.utils.geodesy import haversine_distance

logger = logging.getLogger(__name__)


def _in_range(value: float, limit: float) -> bool:
    # NaN fails both comparisons
    return -limit <= value <= limit


class RelocationValidator:
    """
    Domain service for validating proposed tree positions.

    Only checks the proposal against the position it is given; it does not
    resolve concurrent relocations of the same tree.
    """

    def __init__(self, max_distance_m: Optional[float] = None):
        """
        Initialize the validator.

        Args:
            max_distance_m: Default maximum move in meters
        """
        self.max_distance_m = (
            max_distance_m if max_distance_m is not None
            else settings.relocation_max_distance_m
        )

    def validate(
        self,
        previous: Optional[GeoPoint],
        proposed: GeoPoint,
        max_distance_m: Optional[float] = None,
    ) -> RelocationResult:
        """
        Validate a proposed relocation.

        Args:
            previous: Last confirmed position, or None if the tree never had one
            proposed: New position
            max_distance_m: Override for the maximum move in meters

        Returns:
            RelocationResult; accepted or carrying the rejection reason
        """
        limit = self.max_distance_m if max_distance_m is None else max_distance_m

        if not _in_range(proposed.latitude, 90.0):
            return self._out_of_range("latitude", proposed.latitude, limit)
        if not _in_range(proposed.longitude, 180.0):
            return self._out_of_range("longitude", proposed.longitude, limit)

        if previous is None:
            return RelocationResult(accepted=True, max_distance_m=limit)

        distance = haversine_distance(
            previous.latitude,
            previous.longitude,
            proposed.latitude,
            proposed.longitude,
        )

        if distance > limit:
            logger.warning(
                f"Rejected relocation of {distance:.1f}m (limit {limit:.1f}m)"
            )
            return RelocationResult(
                accepted=False,
                reason=RejectionReason.TOO_FAR_FROM_PREVIOUS,
                distance_m=distance,
                max_distance_m=limit,
                message=(
                    f"New position is {distance:.1f}m from the previous one; "
                    f"only moves within {limit:g}m are allowed"
                ),
            )

        logger.debug(f"Accepted relocation of {distance:.2f}m")
        return RelocationResult(accepted=True, distance_m=distance, max_distance_m=limit)

    def apply(
        self,
        tree: TreeData,
        proposed: GeoPoint,
        max_distance_m: Optional[float] = None,
    ) -> tuple[TreeData, RelocationResult]:
        """
        Validate a relocation and return the tree as it should be stored.

        The returned tree is the original, untouched, when the move is
        rejected. Accepted manual moves reset the GPS accuracy to 0.

        Args:
            tree: Tree with its current stored position
            proposed: New position
            max_distance_m: Override for the maximum move in meters

        Returns:
            Tuple of (tree to persist, validation result)
        """
        result = self.validate(tree.position, proposed, max_distance_m)
        if not result.accepted:
            return tree, result

        moved = tree.model_copy(
            update={
                "latitude": proposed.latitude,
                "longitude": proposed.longitude,
                "gps_accuracy": 0.0,
            }
        )
        return moved, result

    def _out_of_range(self, bound: str, value: float, limit: float) -> RelocationResult:
        display = "NaN" if math.isnan(value) else f"{value:g}"
        return RelocationResult(
            accepted=False,
            reason=RejectionReason.OUT_OF_RANGE,
            max_distance_m=limit,
            violated_bound=bound,
            message=f"{bound.capitalize()} {display} is out of range",
        )


def validate_relocation(
    previous: Optional[GeoPoint],
    proposed: GeoPoint,
    max_distance_m: Optional[float] = None,
) -> RelocationResult:
    """Validate a relocation with the configured default threshold."""
    return RelocationValidator().validate(previous, proposed, max_distance_m)


def apply_relocation(
    tree: TreeData,
    proposed: GeoPoint,
    max_distance_m: Optional[float] = None,
) -> tuple[TreeData, RelocationResult]:
    """Validate a relocation and return the tree as it should be stored."""
    return RelocationValidator().apply(tree, proposed, max_distance_m)
