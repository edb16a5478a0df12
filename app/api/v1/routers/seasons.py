"""
API router for stateless season checks.
"""
from fastapi import APIRouter, Request

from app.api.dependencies import ClassifierDep, ClockDep
from app.api.rate_limit import DEFAULT_LIMIT, RATE_LIMIT_RESPONSE, limiter
from app.api.v1.models.requests import PhaseRequest
from app.domain.models import CalendarSeason, PhaseResult
from app.services.domain.season_phase_classifier import season_for_date


router = APIRouter(
    prefix="/seasons",
    tags=["seasons"],
)


@router.post(
    "/phase",
    response_model=PhaseResult,
    summary="Classify a season phase",
    description="""
    Classify the production phase from the last season's end date.
    Without an end date or record the phase is `new_tree`; with a record
    but no end date the end date is estimated from the harvest calendar.
    """,
    responses=RATE_LIMIT_RESPONSE,
)
@limiter.limit(DEFAULT_LIMIT)
async def classify_phase(
    request: Request,
    payload: PhaseRequest,
    classifier: ClassifierDep,
    clock: ClockDep,
) -> PhaseResult:
    now = payload.now or clock()
    return classifier.classify(
        now,
        payload.last_season_end_date,
        record_exists=payload.record_exists,
        prior_count=payload.prior_count,
    )


@router.get(
    "/current",
    response_model=CalendarSeason,
    summary="Get the current calendar season",
    responses=RATE_LIMIT_RESPONSE,
)
@limiter.limit(DEFAULT_LIMIT)
async def current_season(request: Request, clock: ClockDep) -> CalendarSeason:
    return season_for_date(clock())
