"""Suggest a day-label cycle from a school's Finalsite calendar page."""

from __future__ import annotations

import json
import logging
import re
import sys
from collections.abc import Sequence
from datetime import date

import requests
from bs4 import BeautifulSoup

from lunch_calendar.models import DayLabel

logger = logging.getLogger(__name__)

DEFAULT_CALENDAR_URL = "https://cms.isd194.org/news-and-events/calendar"
FALLBACK_LABEL_COLOR = "#6c757d"

LABEL_COLORS = {
    "red": "#dc3545",
    "white": "#adb5bd",
    "blue": "#0d6efd",
    "gold": "#ffc107",
    "green": "#198754",
    "silver": "#adb5bd",
    "black": "#212529",
    "orange": "#fd7e14",
    "purple": "#6f42c1",
}

# "Red Day", "A Day", "Day B"
ROTATION_TITLE = re.compile(
    r"^(?:(?:Red|White|Blue|Gold|Green|Silver|Black|Orange|Purple|[A-Z])\s*Day|Day\s*[A-Z])$",
    re.IGNORECASE,
)
_DAY_SUFFIX = re.compile(r"\s*Day$", re.IGNORECASE)


def _calendar_date(tag) -> date | None:
    # data-month is 0-indexed
    try:
        return date(int(tag["data-year"]), int(tag["data-month"]) + 1, int(tag["data-day"]))
    except (KeyError, ValueError):
        return None


def parse_day_labels(html: str) -> list[tuple[date, str]]:
    """Extract (date, title) pairs for rotation-day events, sorted by date.

    Event titles belong to the closest preceding ``fsCalendarDate`` element.
    """
    soup = BeautifulSoup(html, "html.parser")
    entries: list[tuple[date, str]] = []
    current: date | None = None

    for tag in soup.find_all(class_=["fsCalendarDate", "fsCalendarEventTitle"]):
        classes = tag.get("class") or []
        if "fsCalendarDate" in classes:
            current = _calendar_date(tag)
            continue
        title = (tag.get("title") or "").strip()
        if current is not None and ROTATION_TITLE.match(title):
            entries.append((current, title))

    entries.sort(key=lambda e: e[0])
    logger.info("Found %d day label entries", len(entries))
    return entries


def label_name(title: str) -> str:
    """Strip a trailing " Day"; titles like "Day B" are kept as-is."""
    return _DAY_SUFFIX.sub("", title).strip() or title


def label_color(name: str) -> str:
    return LABEL_COLORS.get(name.lower(), FALLBACK_LABEL_COLOR)


def suggest_cycle(entries: Sequence[tuple[date, str]]) -> tuple[list[DayLabel], date | None]:
    """Distinct labels in order of first appearance, plus the anchor date.

    The anchor is the date of the first entry, which carries ``cycle[0]``.
    """
    seen: set[str] = set()
    cycle: list[DayLabel] = []
    for _, title in entries:
        name = label_name(title)
        if name.lower() in seen:
            continue
        seen.add(name.lower())
        cycle.append(DayLabel(label=name, color=label_color(name)))

    anchor = entries[0][0] if entries else None
    return cycle, anchor


def fetch_day_labels(
    url: str = DEFAULT_CALENDAR_URL,
    session: requests.Session | None = None,
) -> list[tuple[date, str]]:
    """Download and parse a calendar page. Request errors propagate."""
    logger.info("Fetching day labels from %s", url)
    getter = session or requests
    response = getter.get(url, timeout=10)
    response.raise_for_status()
    return parse_day_labels(response.text)


def run_day_labels(url: str = DEFAULT_CALENDAR_URL, output_format: str = "table") -> None:
    """CLI entry point for day-labels command."""
    try:
        entries = fetch_day_labels(url)
    except requests.RequestException as e:
        print(f"Could not fetch {url}: {e}", file=sys.stderr)
        sys.exit(1)

    cycle, anchor = suggest_cycle(entries)
    if not cycle:
        logger.warning("No day labels found on %s", url)
        return

    if output_format == "json":
        data = {
            "cycle": [{"label": d.label, "color": d.color} for d in cycle],
            "start_date": anchor.isoformat() if anchor else None,
            "entries": [{"date": d.isoformat(), "label": label} for d, label in entries],
        }
        print(json.dumps(data, indent=2))
    else:
        print(f"Cycle: {' / '.join(d.label for d in cycle)}")
        print(f"Start date: {anchor.isoformat() if anchor else '-'}")
        for d, label in entries:
            print(f"  {d.isoformat()}  {label}")
