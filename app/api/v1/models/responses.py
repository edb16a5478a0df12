"""
API response models using Pydantic.
"""
from typing import Optional
from pydantic import BaseModel, Field

from app.domain.models import (
    AreaEstimate,
    GeoPoint,
    PhaseResult,
    RelocationResult,
)


class TreeSeasonPhaseResponse(BaseModel):
    """Response model for a tree's season phase."""
    farm_id: str = Field(description="Unique identifier for the farm")
    tree_id: str = Field(description="Unique identifier for the tree")
    phase: PhaseResult
    current_count: int = Field(
        description="Fruit count to show now; 0 when the tally has been reset"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "farm_id": "farm_1",
                "tree_id": "tree_42",
                "phase": {
                    "phase": "post_harvest",
                    "next_phase": "growing",
                    "months_since_harvest": 1,
                    "season_end_date": "2026-09-08T00:00:00Z",
                    "end_date_estimated": False,
                    "season_year": 2026,
                    "next_season_year": None,
                    "months_until_next_phase": None,
                    "last_count": 120,
                    "should_reset_count": True,
                },
                "current_count": 0,
            }
        }


class TreeRelocationResponse(BaseModel):
    """Response model for a tree relocation check."""
    farm_id: str
    tree_id: str
    result: RelocationResult
    position: Optional[GeoPoint] = Field(
        default=None,
        description="Position to persist; unchanged when the move is rejected",
    )


class ZoneAreaResponse(BaseModel):
    """Response model for a zone area."""
    farm_id: str
    zone_id: str
    area: AreaEstimate
