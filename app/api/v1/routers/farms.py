"""
API router for farm record endpoints.
"""
from fastapi import APIRouter, HTTPException, Path, Request
from typing import Annotated
import logging

from app.api.dependencies import FarmServiceDep
from app.api.rate_limit import DEFAULT_LIMIT, RATE_LIMIT_RESPONSE, limiter
from app.api.v1.models.requests import RelocationRequest
from app.api.v1.models.responses import (
    TreeRelocationResponse,
    TreeSeasonPhaseResponse,
    ZoneAreaResponse,
)
from app.infrastructure.external_api_client import ExternalAPIError

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/farms",
    tags=["farms"],
)

_UPSTREAM_RESPONSES = {
    404: {"description": "Farm, tree or zone not found"},
    502: {"description": "Farm-records API failure"},
    **RATE_LIMIT_RESPONSE,
}


def _to_http_error(error: ExternalAPIError, what: str) -> HTTPException:
    if error.status_code == 404:
        return HTTPException(status_code=404, detail=f"{what} not found")
    logger.error(f"Farm-records API error: {error.message}")
    return HTTPException(
        status_code=502,
        detail=f"Failed to fetch farm records: {error.message}",
    )


@router.get(
    "/{farm_id}/trees/{tree_id}/season-phase",
    response_model=TreeSeasonPhaseResponse,
    summary="Get a tree's season phase",
    description="""
    Classify where a tree is in its production cycle.

    Uses the farm's most recent season record: the tree's prior count is
    read from the record's per-tree breakdown and the phase is derived from
    the number of 30-day months since the season closed. The current count
    is reported as 0 whenever the tally has been reset.
    """,
    responses=_UPSTREAM_RESPONSES,
)
@limiter.limit(DEFAULT_LIMIT)
async def get_tree_season_phase(
    request: Request,
    farm_id: Annotated[str, Path(description="Unique identifier for the farm")],
    tree_id: Annotated[str, Path(description="Unique identifier for the tree")],
    farm_service: FarmServiceDep,
) -> TreeSeasonPhaseResponse:
    try:
        status = await farm_service.get_tree_season_status(farm_id, tree_id)
    except ExternalAPIError as e:
        raise _to_http_error(e, f"Tree '{tree_id}' of farm '{farm_id}'")

    return TreeSeasonPhaseResponse(
        farm_id=farm_id,
        tree_id=tree_id,
        phase=status.phase,
        current_count=status.current_count,
    )


@router.post(
    "/{farm_id}/trees/{tree_id}/relocation",
    response_model=TreeRelocationResponse,
    summary="Validate a tree relocation",
    description="""
    Check a manually entered position against the tree's stored one.

    The move is rejected when the proposal is outside valid latitude or
    longitude ranges, or further than the allowed distance (5 m by default)
    from the stored position. Trees without a stored position accept any
    valid proposal. Nothing is written; the returned position is the one
    the caller should persist.
    """,
    responses=_UPSTREAM_RESPONSES,
)
@limiter.limit(DEFAULT_LIMIT)
async def validate_tree_relocation(
    request: Request,
    farm_id: Annotated[str, Path(description="Unique identifier for the farm")],
    tree_id: Annotated[str, Path(description="Unique identifier for the tree")],
    payload: RelocationRequest,
    farm_service: FarmServiceDep,
) -> TreeRelocationResponse:
    try:
        tree, result = await farm_service.validate_tree_relocation(
            farm_id, tree_id, payload.proposed, payload.max_distance_m
        )
    except ExternalAPIError as e:
        raise _to_http_error(e, f"Tree '{tree_id}' of farm '{farm_id}'")

    return TreeRelocationResponse(
        farm_id=farm_id,
        tree_id=tree_id,
        result=result,
        position=tree.position,
    )


@router.get(
    "/{farm_id}/zones/{zone_id}/area",
    response_model=ZoneAreaResponse,
    summary="Get a zone's area",
    description="""
    Area of a zone in hectares.

    Computed from the zone boundary when it has at least 3 points, otherwise
    taken from the stored area. `source` is `unknown` when neither is
    available.
    """,
    responses=_UPSTREAM_RESPONSES,
)
@limiter.limit(DEFAULT_LIMIT)
async def get_zone_area(
    request: Request,
    farm_id: Annotated[str, Path(description="Unique identifier for the farm")],
    zone_id: Annotated[str, Path(description="Unique identifier for the zone")],
    farm_service: FarmServiceDep,
) -> ZoneAreaResponse:
    try:
        area = await farm_service.get_zone_area(farm_id, zone_id)
    except ExternalAPIError as e:
        raise _to_http_error(e, f"Zone '{zone_id}' of farm '{farm_id}'")

    return ZoneAreaResponse(farm_id=farm_id, zone_id=zone_id, area=area)
