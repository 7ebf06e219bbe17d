"""Academic calendar lookup: which dates carry a note (holiday, early release)."""

from __future__ import annotations

import logging
from datetime import date, datetime

from lunch_calendar.models import MenuFeed

logger = logging.getLogger(__name__)

FEED_DATE_FORMAT = "%m/%d/%Y"


def parse_feed_date(raw: str) -> date | None:
    """Parse an ``M/d/yyyy`` feed date. Returns None if unparseable."""
    try:
        return datetime.strptime(raw.strip(), FEED_DATE_FORMAT).date()
    except (ValueError, AttributeError):
        return None


def format_feed_date(d: date) -> str:
    """Format a date the way feed day keys are written (no zero padding)."""
    return f"{d.month}/{d.day}/{d.year}"


def build_academic_index(feed: MenuFeed) -> dict[date, str]:
    """Map each annotated date to its note.

    Later entries for the same date replace earlier ones. Entries whose
    date cannot be parsed are skipped.
    """
    index: dict[date, str] = {}
    for entry in feed.academic_days:
        if not entry.note:
            continue
        parsed = parse_feed_date(entry.date)
        if parsed is None:
            logger.debug("Skipping academic note with bad date: %r", entry.date)
            continue
        index[parsed] = entry.note
    return index
