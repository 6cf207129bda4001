"""Menstrual cycle forecast from a user profile.

Calendar-only projection anchored on the last period start:

- Next period start (last period + cycle length)
- Period end (last period + period length, exclusive)
- Ovulation (a fixed luteal phase before the next period)
- Fertile window (a few days before ovulation through ovulation, inclusive)
- Fertility level for the reference day (High / Medium / Low)

Estimates only — never a medical guarantee.  The cycle day keeps growing
past the cycle length when a period is late; there is no wraparound.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date

from src.models.profile import FertilityLevel, UserProfile
from src.tracking.config_loader import TrackingConfig, get_tracking_config
from src.tracking.date_math import add_days, days_between, parse_date

logger = logging.getLogger("cyclecare.tracking.cycle_projector")


@dataclass
class CycleProjection:
    """Derived cycle forecast.  Recomputed on every read, never stored.

    Attributes:
        next_period_start: Predicted first day of the next period.
        period_end:        First day after the current period (exclusive end).
        ovulation_date:    Estimated ovulation day.
        fertile_start:     First day of the fertile window.
        fertile_end:       Last day of the fertile window (== ovulation_date).
        current_cycle_day: 1-indexed day of the current cycle.
        is_in_period:      last_period_date <= today < period_end.
        is_fertile:        fertile_start <= today <= fertile_end.
        fertility_level:   High / Medium / Low for the reference day.
        cycle_length:      Cycle length the projection was built from.
        period_length:     Period length the projection was built from.
    """

    next_period_start: date
    period_end: date
    ovulation_date: date
    fertile_start: date
    fertile_end: date
    current_cycle_day: int
    is_in_period: bool
    is_fertile: bool
    fertility_level: FertilityLevel
    cycle_length: int
    period_length: int

    @property
    def status(self) -> str:
        """Headline label for the reference day."""
        if self.is_in_period:
            return "Period"
        if self.fertility_level is FertilityLevel.high:
            return "High Fertility"
        if self.fertility_level is FertilityLevel.medium:
            return "Medium Fertility"
        return "Cycle Day"


class CycleProjector:
    """Project the current cycle from a profile.

    Usage::

        projector = CycleProjector()
        projection = projector.project(profile)
        if projection is None:
            ...  # profile incomplete, ask the user to fix it
        print(projection.next_period_start, projection.fertility_level)
    """

    def __init__(self, config: TrackingConfig | None = None) -> None:
        self._config = config or get_tracking_config()

    @property
    def _cycle_config(self):
        return self._config.cycle

    def project(
        self,
        profile: UserProfile,
        as_of_date: date | None = None,
    ) -> CycleProjection | None:
        """Build the forecast for ``profile``.

        Args:
            profile:    Stored user profile.
            as_of_date: Reference day (defaults to today).

        Returns:
            CycleProjection, or None when the last period date is missing or
            unparseable, or a cycle/period length is missing or not positive.
        """
        return self.project_from(
            profile.last_period_date,
            profile.cycle_length,
            profile.period_length,
            as_of_date=as_of_date,
        )

    def project_from(
        self,
        last_period_date: object,
        cycle_length: int | None,
        period_length: int | None,
        as_of_date: date | None = None,
    ) -> CycleProjection | None:
        """Build the forecast from raw inputs.  See ``project``."""
        last_period = parse_date(last_period_date)
        if last_period is None or not cycle_length or not period_length:
            logger.debug(
                "No cycle projection: last_period=%r cycle_length=%r period_length=%r",
                last_period_date, cycle_length, period_length,
            )
            return None
        if cycle_length <= 0 or period_length <= 0:
            return None

        cc = self._cycle_config
        today = as_of_date or date.today()

        next_period = add_days(last_period, cycle_length)
        period_end = add_days(last_period, period_length)
        ovulation = add_days(next_period, -cc.luteal_phase_days)
        fertile_start = add_days(ovulation, -cc.fertile_days_before_ovulation)
        fertile_end = ovulation

        return CycleProjection(
            next_period_start=next_period,
            period_end=period_end,
            ovulation_date=ovulation,
            fertile_start=fertile_start,
            fertile_end=fertile_end,
            current_cycle_day=days_between(last_period, today) + 1,
            is_in_period=last_period <= today < period_end,
            is_fertile=fertile_start <= today <= fertile_end,
            fertility_level=self.fertility_level(ovulation, today),
            cycle_length=cycle_length,
            period_length=period_length,
        )

    def fertility_level(self, ovulation_date: date, day: date) -> FertilityLevel:
        """Classify ``day`` relative to ovulation.

        High on ovulation day and the two days before it, Medium for the
        three days before that, Low on every other day (including any day
        after ovulation).
        """
        cc = self._cycle_config
        days_before = (ovulation_date - day).days
        if 0 <= days_before < cc.high_fertility_days:
            return FertilityLevel.high
        if cc.high_fertility_days <= days_before < cc.high_fertility_days + cc.medium_fertility_days:
            return FertilityLevel.medium
        return FertilityLevel.low
