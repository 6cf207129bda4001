"""Gestational week from an estimated due date.

Conception is estimated a full term (280 days) before the due date and the
elapsed days since then are split into weeks and days.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import date

from src.tracking.config_loader import Milestone, TrackingConfig, get_tracking_config
from src.tracking.date_math import add_days, days_between, parse_date

logger = logging.getLogger("cyclecare.tracking.pregnancy_projector")


@dataclass
class PregnancyProjection:
    """Derived pregnancy progress.

    Attributes:
        gestational_week: ceil(days pregnant / 7).
        extra_days:       days pregnant mod 7, always 0–6.
        days_pregnant:    Whole days since the conception estimate.
        milestone:        Weekly note for this week (or the next one ahead).
    """

    gestational_week: int
    extra_days: int
    days_pregnant: int
    milestone: Milestone


class PregnancyProjector:
    def __init__(self, config: TrackingConfig | None = None) -> None:
        self._config = config or get_tracking_config()

    def project(
        self,
        due_date: object,
        as_of_date: date | None = None,
    ) -> PregnancyProjection | None:
        """Project gestational week/day from ``due_date``.

        The elapsed days are an absolute difference, so a reference day
        before the conception estimate still yields a positive count.

        Args:
            due_date:   Stored due date (``date`` or ISO string).
            as_of_date: Reference day (defaults to today).

        Returns:
            PregnancyProjection, or None if the due date is missing/unparseable.
        """
        due = parse_date(due_date)
        if due is None:
            logger.debug("No pregnancy projection: due_date=%r", due_date)
            return None

        pc = self._config.pregnancy
        today = as_of_date or date.today()
        conception = add_days(due, -pc.full_term_days)
        days_pregnant = days_between(conception, today)
        week = math.ceil(days_pregnant / 7)

        return PregnancyProjection(
            gestational_week=week,
            extra_days=days_pregnant % 7,
            days_pregnant=days_pregnant,
            milestone=pc.milestone_for(week),
        )
