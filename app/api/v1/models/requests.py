"""
API request models using Pydantic.
"""
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field

from app.domain.models import GeoPoint


class RelocationRequest(BaseModel):
    """Proposed new position for a stored tree."""
    proposed: GeoPoint
    max_distance_m: Optional[float] = Field(
        default=None,
        gt=0,
        description="Override for the maximum allowed move in meters",
    )


class RelocationCheckRequest(RelocationRequest):
    """Proposed position checked against an explicit previous one."""
    previous: Optional[GeoPoint] = Field(
        default=None,
        description="Last confirmed position; omit when the tree never had one",
    )


class AreaRequest(BaseModel):
    """Boundary to measure."""
    points: List[GeoPoint] = Field(
        description="Ordered boundary vertices; first and last are joined implicitly",
    )


class PhaseRequest(BaseModel):
    """Inputs for a stateless phase classification."""
    now: Optional[datetime] = Field(
        default=None,
        description="Current time; defaults to the server clock",
    )
    last_season_end_date: Optional[datetime] = None
    record_exists: bool = Field(
        default=False,
        description="A season record exists even if it carries no end date",
    )
    prior_count: int = Field(default=0, ge=0)
