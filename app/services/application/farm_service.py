"""
Application service: Orchestration layer for farm record checks.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from app.domain.models import (
    AreaEstimate,
    GeoPoint,
    PhaseResult,
    RelocationResult,
    TreeData,
)
from app.infrastructure.external_api_client import FarmRecordsClient
from app.services.domain.boundary_area_estimator import BoundaryAreaEstimator
from app.services.domain.relocation_validator import RelocationValidator
from app.services.domain.season_phase_classifier import SeasonPhaseClassifier


@dataclass
class TreeSeasonStatus:
    """A tree's season phase together with the count to show for it."""
    tree: TreeData
    phase: PhaseResult
    current_count: int


class FarmService:
    """
    Application service for farm-related checks.

    Orchestrates data fetching and domain service execution.
    Follows the application layer pattern - no business logic here,
    only coordination between infrastructure and domain layers.
    Nothing is written back; callers persist results themselves.
    """

    def __init__(
        self,
        api_client: FarmRecordsClient,
        classifier: SeasonPhaseClassifier,
        relocation_validator: RelocationValidator,
        area_estimator: BoundaryAreaEstimator,
        clock: Callable[[], datetime],
    ):
        """
        Initialize the service with dependencies.

        Args:
            api_client: Farm-records API client for data fetching
            classifier: Season phase classifier
            relocation_validator: Relocation plausibility validator
            area_estimator: Boundary area estimator
            clock: Returns the current time
        """
        self.api_client = api_client
        self.classifier = classifier
        self.relocation_validator = relocation_validator
        self.area_estimator = area_estimator
        self.clock = clock

    async def get_tree_season_status(
        self,
        farm_id: str,
        tree_id: str,
    ) -> TreeSeasonStatus:
        """
        Classify a tree against its farm's most recent season.

        This method orchestrates:
        1. Fetching the tree
        2. Fetching the farm's latest season record
        3. Resolving the tree's prior count and classifying its phase

        Args:
            farm_id: Unique identifier for the farm
            tree_id: Unique identifier for the tree

        Returns:
            TreeSeasonStatus with the phase and the count to display

        Raises:
            ExternalAPIError: If data fetching fails
        """
        tree = await self.api_client.get_tree(farm_id, tree_id)
        season = await self.api_client.get_latest_season(farm_id)

        phase = self.classifier.classify_record(self.clock(), season, tree.id)
        current_count = 0 if phase.should_reset_count else (tree.manual_fruit_count or 0)

        return TreeSeasonStatus(tree=tree, phase=phase, current_count=current_count)

    async def validate_tree_relocation(
        self,
        farm_id: str,
        tree_id: str,
        proposed: GeoPoint,
        max_distance_m: Optional[float] = None,
    ) -> tuple[TreeData, RelocationResult]:
        """
        Validate a proposed position for a tree against its stored one.

        Args:
            farm_id: Unique identifier for the farm
            tree_id: Unique identifier for the tree
            proposed: New position
            max_distance_m: Optional override for the maximum move

        Returns:
            Tuple of (tree as it should be persisted, validation result)

        Raises:
            ExternalAPIError: If data fetching fails
        """
        tree = await self.api_client.get_tree(farm_id, tree_id)
        return self.relocation_validator.apply(tree, proposed, max_distance_m)

    async def get_zone_area(self, farm_id: str, zone_id: str) -> AreaEstimate:
        """
        Area of a zone from its boundary, or its stored value.

        Args:
            farm_id: Unique identifier for the farm
            zone_id: Unique identifier for the zone

        Returns:
            AreaEstimate

        Raises:
            ExternalAPIError: If data fetching fails
        """
        zone = await self.api_client.get_zone(farm_id, zone_id)
        return self.area_estimator.resolve_zone_area(zone)
