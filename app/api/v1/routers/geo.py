"""
API router for stateless geometry checks.
"""
from fastapi import APIRouter, Request

from app.api.dependencies import AreaEstimatorDep, RelocationValidatorDep
from app.api.rate_limit import DEFAULT_LIMIT, RATE_LIMIT_RESPONSE, limiter
from app.api.v1.models.requests import AreaRequest, RelocationCheckRequest
from app.domain.models import AreaEstimate, RelocationResult


router = APIRouter(
    prefix="/geo",
    tags=["geo"],
)


@router.post(
    "/relocation",
    response_model=RelocationResult,
    summary="Validate a relocation",
    description="""
    Validate a proposed position against an explicit previous position.
    Rejections are returned with status 200 and `accepted: false`.
    """,
    responses=RATE_LIMIT_RESPONSE,
)
@limiter.limit(DEFAULT_LIMIT)
async def check_relocation(
    request: Request,
    payload: RelocationCheckRequest,
    validator: RelocationValidatorDep,
) -> RelocationResult:
    return validator.validate(payload.previous, payload.proposed, payload.max_distance_m)


@router.post(
    "/area",
    response_model=AreaEstimate,
    summary="Estimate a boundary's area",
    description="""
    Area in hectares enclosed by an ordered list of points, using an
    equirectangular projection and the shoelace formula. Fewer than 3
    points gives `source: unknown`.
    """,
    responses=RATE_LIMIT_RESPONSE,
)
@limiter.limit(DEFAULT_LIMIT)
async def estimate_area(
    request: Request,
    payload: AreaRequest,
    estimator: AreaEstimatorDep,
) -> AreaEstimate:
    return estimator.estimate(payload.points)
