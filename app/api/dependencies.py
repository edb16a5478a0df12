"""
Dependency injection for FastAPI.
"""
from datetime import datetime, timezone
from typing import Annotated, Callable
from fastapi import Depends

from app.infrastructure.external_api_client import (
    FarmRecordsClient,
    get_api_client,
)
from app.services.domain.boundary_area_estimator import BoundaryAreaEstimator
from app.services.domain.relocation_validator import RelocationValidator
from app.services.domain.season_phase_classifier import SeasonPhaseClassifier
from app.services.application.farm_service import FarmService


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def get_clock() -> Callable[[], datetime]:
    """
    Dependency factory for the current-time source.

    Returns:
        Callable returning the current UTC time
    """
    return _utc_now


def get_season_phase_classifier() -> SeasonPhaseClassifier:
    return SeasonPhaseClassifier()


def get_relocation_validator() -> RelocationValidator:
    return RelocationValidator()


def get_boundary_area_estimator() -> BoundaryAreaEstimator:
    return BoundaryAreaEstimator()


def get_farm_service(
    api_client: Annotated[FarmRecordsClient, Depends(get_api_client)],
    classifier: Annotated[SeasonPhaseClassifier, Depends(get_season_phase_classifier)],
    relocation_validator: Annotated[RelocationValidator, Depends(get_relocation_validator)],
    area_estimator: Annotated[BoundaryAreaEstimator, Depends(get_boundary_area_estimator)],
    clock: Annotated[Callable[[], datetime], Depends(get_clock)],
) -> FarmService:
    """
    Dependency factory for FarmService.

    Args:
        api_client: Farm-records API client (injected)
        classifier: Season phase classifier (injected)
        relocation_validator: Relocation validator (injected)
        area_estimator: Boundary area estimator (injected)
        clock: Current-time source (injected)

    Returns:
        FarmService instance
    """
    return FarmService(
        api_client=api_client,
        classifier=classifier,
        relocation_validator=relocation_validator,
        area_estimator=area_estimator,
        clock=clock,
    )


# Type aliases for cleaner route signatures
FarmServiceDep = Annotated[FarmService, Depends(get_farm_service)]
ClockDep = Annotated[Callable[[], datetime], Depends(get_clock)]
ClassifierDep = Annotated[SeasonPhaseClassifier, Depends(get_season_phase_classifier)]
RelocationValidatorDep = Annotated[RelocationValidator, Depends(get_relocation_validator)]
AreaEstimatorDep = Annotated[BoundaryAreaEstimator, Depends(get_boundary_area_estimator)]
