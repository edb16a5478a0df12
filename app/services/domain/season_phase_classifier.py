"""
Domain service: Season phase classification for fruit trees.

Maps the time elapsed since the last season closed onto a discrete
production phase:

    months < 0      current_season  (last season still open)
    0  .. 3         post_harvest    (tally restarts at zero)
    4  .. 9         growing
    10 .. 12        flowering
    > 12            new_season

Months are flat 30-day blocks, not calendar months. The current time is
always passed in by the caller.
"""
from calendar import monthrange
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Hashable, Optional
import logging

from app.config import settings
from app.domain.models import (
    CalendarSeason,
    PhaseResult,
    SeasonPhase,
    SeasonRecord,
)
from app.services.domain.season_breakdown_resolver import resolve_count

logger = logging.getLogger(__name__)


@dataclass
class HarvestCalendar:
    """Regional harvest calendar used by the classifier."""

    days_per_month: int = 30
    """Length of one 'month' when counting months since harvest"""

    cutoff_month: int = 8
    """Before this month (1-12) a missing end date is assumed to be last year's"""

    fallback_end_month: int = 9
    """Month of the estimated end date when a record has none"""

    fallback_end_day: int = 30
    """Day of the estimated end date"""

    post_harvest_months: int = 3
    growing_months: int = 9
    flowering_months: int = 12

    def __post_init__(self):
        if self.days_per_month < 1:
            raise ValueError(f"days_per_month must be positive, got {self.days_per_month}")
        for name in ("cutoff_month", "fallback_end_month"):
            month = getattr(self, name)
            if not 1 <= month <= 12:
                raise ValueError(f"{name} must be a month (1-12), got {month}")
        # Must exist in every year, so February stops at 28
        last_day = monthrange(2001, self.fallback_end_month)[1]
        if not 1 <= self.fallback_end_day <= last_day:
            raise ValueError(
                f"fallback_end_day {self.fallback_end_day} does not exist "
                f"in month {self.fallback_end_month}"
            )
        if not 0 <= self.post_harvest_months < self.growing_months < self.flowering_months:
            raise ValueError("phase thresholds must increase: post_harvest < growing < flowering")

    @classmethod
    def from_settings(cls) -> "HarvestCalendar":
        return cls(
            days_per_month=settings.season_days_per_month,
            cutoff_month=settings.season_harvest_cutoff_month,
            fallback_end_month=settings.season_fallback_end_month,
            fallback_end_day=settings.season_fallback_end_day,
        )


# Expected phase after each phase
NEXT_PHASE: dict[SeasonPhase, Optional[SeasonPhase]] = {
    SeasonPhase.NEW_TREE: None,
    SeasonPhase.CURRENT_SEASON: SeasonPhase.POST_HARVEST,
    SeasonPhase.POST_HARVEST: SeasonPhase.GROWING,
    SeasonPhase.GROWING: SeasonPhase.FLOWERING,
    SeasonPhase.FLOWERING: SeasonPhase.NEW_SEASON,
    SeasonPhase.NEW_SEASON: SeasonPhase.POST_HARVEST,
}

# Phases in which the current tally starts again from zero
RESET_PHASES = frozenset({SeasonPhase.CURRENT_SEASON, SeasonPhase.POST_HARVEST})


def _as_utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


class SeasonPhaseClassifier:
    """
    Domain service for classifying where a tree is in its production cycle.

    Pure and deterministic: the same (now, end date) pair always gives the
    same result.
    """

    def __init__(self, calendar: Optional[HarvestCalendar] = None):
        """
        Initialize the classifier.

        Args:
            calendar: Harvest calendar (defaults to the configured one)
        """
        self.calendar = calendar or HarvestCalendar.from_settings()

    def estimate_season_end(self, now: datetime) -> datetime:
        """
        Guess when the last season closed for a record without an end date.

        Args:
            now: Current time

        Returns:
            Estimated end date in the timezone of ``now``
        """
        year = now.year if now.month >= self.calendar.cutoff_month else now.year - 1
        return datetime(
            year,
            self.calendar.fallback_end_month,
            self.calendar.fallback_end_day,
            tzinfo=now.tzinfo,
        )

    def months_since(self, now: datetime, end_date: datetime) -> int:
        """Whole flat months from end_date to now, floored (negative when end_date is ahead)."""
        return (_as_utc(now) - _as_utc(end_date)) // timedelta(days=self.calendar.days_per_month)

    def phase_for_months(self, months: int) -> SeasonPhase:
        if months < 0:
            return SeasonPhase.CURRENT_SEASON
        if months <= self.calendar.post_harvest_months:
            return SeasonPhase.POST_HARVEST
        if months <= self.calendar.growing_months:
            return SeasonPhase.GROWING
        if months <= self.calendar.flowering_months:
            return SeasonPhase.FLOWERING
        return SeasonPhase.NEW_SEASON

    def classify(
        self,
        now: datetime,
        last_season_end_date: Optional[datetime] = None,
        *,
        record_exists: bool = False,
        prior_count: int = 0,
    ) -> PhaseResult:
        """
        Classify the production phase relative to the last season.

        Args:
            now: Current time
            last_season_end_date: When the last season closed, if known
            record_exists: Whether a season record exists even though it has no end date
            prior_count: Tree's count in the last season

        Returns:
            PhaseResult for the tree
        """
        if last_season_end_date is None and not record_exists:
            return PhaseResult(
                phase=SeasonPhase.NEW_TREE,
                next_phase=NEXT_PHASE[SeasonPhase.NEW_TREE],
            )

        now = _as_utc(now)
        estimated = last_season_end_date is None
        if estimated:
            end_date = self.estimate_season_end(now)
            logger.debug(f"Season record has no end date, assuming {end_date.date()}")
        else:
            end_date = _as_utc(last_season_end_date)

        months = self.months_since(now, end_date)
        phase = self.phase_for_months(months)
        season_year = end_date.year

        months_until_next = None
        if phase == SeasonPhase.GROWING:
            months_until_next = max(1, self.calendar.growing_months - months)

        next_season_year = season_year + 1 if phase == SeasonPhase.NEW_SEASON else None

        logger.debug(f"Classified {months} months since harvest as {phase.value}")

        return PhaseResult(
            phase=phase,
            next_phase=NEXT_PHASE[phase],
            months_since_harvest=months,
            season_end_date=end_date,
            end_date_estimated=estimated,
            season_year=season_year,
            next_season_year=next_season_year,
            months_until_next_phase=months_until_next,
            last_count=prior_count,
            should_reset_count=phase in RESET_PHASES,
        )

    def classify_record(
        self,
        now: datetime,
        record: Optional[SeasonRecord],
        plant_id: Hashable,
    ) -> PhaseResult:
        """
        Classify a tree against the farm's most recent season record.

        Args:
            now: Current time
            record: Most recent season record, or None when the farm has none
            plant_id: Tree identifier used to look up its prior count

        Returns:
            PhaseResult for the tree
        """
        if record is None:
            return self.classify(now)

        prior_count = resolve_count(record.per_tree_breakdown, plant_id)
        return self.classify(
            now,
            record.end_date,
            record_exists=True,
            prior_count=prior_count,
        )


def season_for_date(moment: date) -> CalendarSeason:
    """
    Calendar season a date belongs to.

    Apr-Jun is preparation, Jul-Sep the active season, Oct-Dec post-season;
    Jan-Mar is off-season and belongs to the previous year's season.

    Args:
        moment: Date or datetime

    Returns:
        CalendarSeason with the season year and phase
    """
    month = moment.month
    year = moment.year

    if 4 <= month <= 6:
        return CalendarSeason(year=year, phase="pre_season")
    if 7 <= month <= 9:
        return CalendarSeason(year=year, phase="in_season")
    if 10 <= month <= 12:
        return CalendarSeason(year=year, phase="post_season")
    return CalendarSeason(year=year - 1, phase="off_season")
