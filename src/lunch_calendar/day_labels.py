"""Rotating day labels (e.g. Red/White days) assigned across school days."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import date

from lunch_calendar.models import DayLabel, ProcessedMonth

logger = logging.getLogger(__name__)


def school_days(month: ProcessedMonth) -> list[date]:
    """Dates that take a rotation slot: a menu is served and school is in."""
    return sorted(day.date for day in month.days if day.is_school_day)


def build_cycle(
    days: Sequence[date],
    cycle: Sequence[DayLabel],
    anchor: date | None = None,
) -> dict[date, DayLabel]:
    """Assign ``cycle`` labels to ``days`` (ascending school days).

    The anchor date, when it is one of ``days``, receives ``cycle[0]``.
    An anchor outside ``days`` falls back to the first school day rather
    than counting school days across the month boundary.
    """
    if not cycle or not days:
        return {}

    anchor_index = 0
    if anchor is not None:
        try:
            anchor_index = list(days).index(anchor)
        except ValueError:
            logger.debug("Day label anchor %s not in this month; using first school day", anchor)

    return {d: cycle[(i - anchor_index) % len(cycle)] for i, d in enumerate(days)}


def label_month(
    month: ProcessedMonth,
    cycle: Sequence[DayLabel],
    anchor: date | None = None,
) -> dict[date, DayLabel]:
    return build_cycle(school_days(month), cycle, anchor)
