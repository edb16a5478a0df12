"""
Domain models for farm, tree, zone and season data.

These models represent the core domain entities and should be independent
of any infrastructure concerns (API clients, databases, etc.). Field names
written by older clients of the document store are accepted as aliases.
"""
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from pydantic import AliasChoices, BaseModel, Field, ValidationError, field_validator


class GeoPoint(BaseModel):
    """A geographic position in decimal degrees."""
    latitude: float = Field(
        validation_alias=AliasChoices("latitude", "lat", "_lat"),
        description="Latitude in degrees",
    )
    longitude: float = Field(
        validation_alias=AliasChoices("longitude", "lng", "lon", "_long"),
        description="Longitude in degrees",
    )


class SeasonRecord(BaseModel):
    """A completed production season for a farm."""
    id: Optional[str] = None
    name: Optional[str] = None
    end_date: Optional[datetime] = Field(
        default=None,
        validation_alias=AliasChoices("end_date", "endDate"),
    )
    per_tree_breakdown: dict[Any, Any] = Field(
        default_factory=dict,
        validation_alias=AliasChoices(
            "per_tree_breakdown", "perTreeBreakdown", "perEntityBreakdown"
        ),
        description="Plant id -> yield entry of any legacy shape",
    )

    @field_validator("end_date", mode="before")
    @classmethod
    def _coerce_store_timestamp(cls, value: Any) -> Any:
        # Document-store timestamps arrive as {"seconds": ..., "nanoseconds": ...}
        if isinstance(value, dict):
            seconds = value.get("seconds", value.get("_seconds"))
            if seconds is None:
                return None
            if isinstance(seconds, bool) or not isinstance(seconds, (int, float)):
                return value
            nanos = value.get("nanoseconds", value.get("_nanoseconds")) or 0
            return datetime.fromtimestamp(seconds + nanos / 1e9, tz=timezone.utc)
        return value

    @field_validator("per_tree_breakdown", mode="before")
    @classmethod
    def _coerce_breakdown(cls, value: Any) -> Any:
        if not isinstance(value, dict):
            return {}
        return value


class TreeData(BaseModel):
    """Individual tree data."""
    id: str
    farm_id: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("farm_id", "farmId"),
    )
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    manual_fruit_count: Optional[int] = Field(
        default=0,
        validation_alias=AliasChoices("manual_fruit_count", "manualFruitCount"),
        description="Current-season fruit tally",
    )
    gps_accuracy: Optional[float] = Field(
        default=None,
        validation_alias=AliasChoices("gps_accuracy", "gpsAccuracy"),
    )

    @property
    def position(self) -> Optional[GeoPoint]:
        if self.latitude is None or self.longitude is None:
            return None
        return GeoPoint(latitude=self.latitude, longitude=self.longitude)


class ZoneData(BaseModel):
    """A zone of a farm with its boundary polygon."""
    id: str
    name: Optional[str] = None
    boundaries: list[GeoPoint] = Field(
        default_factory=list,
        validation_alias=AliasChoices(
            "boundary", "boundaries", "coordinates", "polygon", "points"
        ),
        description="Ordered boundary vertices; first and last are implicitly joined",
    )
    area: Optional[float] = Field(
        default=0.0,
        description="Previously stored area in m²",
    )

    @field_validator("boundaries", mode="before")
    @classmethod
    def _discard_unusable_boundary(cls, value: Any) -> Any:
        # One malformed vertex makes the ring unusable; the stored area applies instead
        if not isinstance(value, (list, tuple)):
            return []
        points = []
        for point in value:
            if isinstance(point, GeoPoint):
                points.append(point)
                continue
            try:
                points.append(GeoPoint.model_validate(point))
            except ValidationError:
                return []
        return points


class SeasonPhase(str, Enum):
    """Stage of a fruit tree's annual production cycle."""
    NEW_TREE = "new_tree"
    CURRENT_SEASON = "current_season"
    POST_HARVEST = "post_harvest"
    GROWING = "growing"
    FLOWERING = "flowering"
    NEW_SEASON = "new_season"


class PhaseResult(BaseModel):
    """Outcome of classifying a tree against its last season."""
    phase: SeasonPhase
    next_phase: Optional[SeasonPhase] = None
    months_since_harvest: Optional[int] = None
    season_end_date: Optional[datetime] = None
    end_date_estimated: bool = False
    season_year: Optional[int] = None
    next_season_year: Optional[int] = None
    months_until_next_phase: Optional[int] = None
    last_count: Optional[int] = None
    should_reset_count: bool = False


class CalendarSeason(BaseModel):
    """Season a calendar date falls in under the regional harvest calendar."""
    year: int
    phase: str


class RejectionReason(str, Enum):
    """Why a relocation was refused."""
    OUT_OF_RANGE = "out_of_range"
    TOO_FAR_FROM_PREVIOUS = "too_far_from_previous"


class RelocationResult(BaseModel):
    """Outcome of validating a manual tree relocation."""
    accepted: bool
    reason: Optional[RejectionReason] = None
    distance_m: Optional[float] = Field(
        default=None,
        description="Great-circle distance from the previous position",
    )
    max_distance_m: float
    violated_bound: Optional[str] = Field(
        default=None,
        description="'latitude' or 'longitude' when the proposal is out of range",
    )
    message: Optional[str] = None


class AreaSource(str, Enum):
    """Where an area figure came from."""
    BOUNDARY = "boundary"
    STORED = "stored"
    UNKNOWN = "unknown"


class AreaEstimate(BaseModel):
    """Area of a zone in hectares."""
    hectares: float
    source: AreaSource
    point_count: int = 0
    is_simple: Optional[bool] = Field(
        default=None,
        description="False when the boundary ring self-intersects",
    )
    geodesic_hectares: Optional[float] = None

    @property
    def has_data(self) -> bool:
        return self.source != AreaSource.UNKNOWN
