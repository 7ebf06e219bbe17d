"""Generation pipeline: load menu data, analyze, render, and write the calendar."""

from __future__ import annotations

import calendar
import json
import logging
import sys
import threading
from collections.abc import Collection, Sequence
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from pathlib import Path

from lunch_calendar.analyzer import analyze
from lunch_calendar.config import (
    apply_cli_overrides,
    build_render_options,
    build_selections,
    forced_home_weekdays,
    load_settings,
)
from lunch_calendar.har import load_capture
from lunch_calendar.linq_client import FeedError, FeedErrorKind, LinqConnectClient, public_menu_url
from lunch_calendar.models import (
    AllergyItem,
    Building,
    CalendarRenderOptions,
    DistrictLookup,
    MenuFeed,
    MenuSelections,
    ProcessedMonth,
)
from lunch_calendar.renderer import CodeImage, render_calendar
from lunch_calendar.themes import CalendarTheme, find_theme, suggest_theme

logger = logging.getLogger(__name__)

# Hour after which today's lunch is over and the day is crossed out
SCHOOL_DAY_OVER_HOUR = 15


@dataclass
class MenuSources:
    feed: MenuFeed
    allergens: list[AllergyItem]
    district: DistrictLookup
    building: Building | None
    identifier: str


def past_day_cutoff(now: datetime) -> date:
    """First date that is not crossed out: today once school is out, else yesterday."""
    if now.hour >= SCHOOL_DAY_OVER_HOUR:
        return now.date()
    return now.date() - timedelta(days=1)


def month_bounds(year: int, month: int) -> tuple[date, date]:
    return date(year, month, 1), date(year, month, calendar.monthrange(year, month)[1])


def build_calendar(
    feed: MenuFeed,
    selections: MenuSelections,
    year: int,
    month: int,
    theme: CalendarTheme,
    options: CalendarRenderOptions,
    allergen_names: Sequence[str] = (),
    forced_home_days: Collection[int] = frozenset(),
    code_image: CodeImage | None = None,
) -> tuple[ProcessedMonth, str]:
    """Analyze one month and render it."""
    processed = analyze(feed, selections, year, month)
    html = render_calendar(processed, allergen_names, forced_home_days, theme, options, code_image)
    return processed, html


class GenerationRunner:
    """Runs generations one at a time on a background worker.

    Submitting a new request cancels the previous one if it has not started
    yet. A request that is already running finishes before the next starts.
    """

    def __init__(self):
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="calendar")
        self._lock = threading.Lock()
        self._pending: Future | None = None

    def submit(self, *args, **kwargs) -> Future:
        """Queue ``build_calendar(*args, **kwargs)``."""
        with self._lock:
            if self._pending is not None and self._pending.cancel():
                logger.debug("Cancelled superseded generation")
            self._pending = self._executor.submit(build_calendar, *args, **kwargs)
            return self._pending

    def shutdown(self) -> None:
        self._executor.shutdown(wait=True)

    def __enter__(self) -> GenerationRunner:
        return self

    def __exit__(self, *exc) -> None:
        self.shutdown()


def resolve_allergens(
    catalog: Sequence[AllergyItem],
    names: Sequence[str],
) -> tuple[frozenset[str], list[str]]:
    """Map allergen names to ids, case-insensitively. Unknown names are skipped."""
    by_name = {item.name.lower(): item for item in catalog}
    ids: set[str] = set()
    matched: list[str] = []
    for name in names:
        item = by_name.get(name.strip().lower())
        if item is None:
            logger.warning("Unknown allergen %r ignored", name)
            continue
        ids.add(item.allergy_id)
        matched.append(item.name)
    return frozenset(ids), matched


def pick_building(district: DistrictLookup, query: str | None) -> Building | None:
    """First building whose name contains ``query``; the first building if no query."""
    if not district.buildings:
        return None
    if not query:
        return district.buildings[0]
    for building in district.buildings:
        if query.lower() in building.name.lower():
            return building
    raise FeedError(FeedErrorKind.NOT_FOUND, f"No building matching {query!r} in {district.district_name}")


def resolve_theme(settings: dict, month: int) -> CalendarTheme:
    hidden = settings.get("hidden_themes") or []
    name = settings.get("theme")
    if name:
        theme = find_theme(name)
        if theme is not None:
            return theme
        logger.warning("Unknown theme %r, picking one for the month", name)
    return suggest_theme(month, hidden)


def load_sources(settings: dict, year: int, month: int, har: Path | None = None) -> MenuSources:
    """Menu, allergen catalog, and district from a capture file or the live API."""
    query = settings["district"]["building"]

    if har is not None:
        capture = load_capture(har)
        return MenuSources(
            feed=capture.feed,
            allergens=capture.allergens,
            district=capture.district,
            building=pick_building(capture.district, query),
            identifier=capture.district.identifier or settings["district"]["identifier"],
        )

    identifier = settings["district"]["identifier"]
    client = LinqConnectClient(user_agent=settings.get("user_agent"))
    district = client.fetch_district_lookup(identifier)
    building = pick_building(district, query)
    if building is None:
        raise FeedError(FeedErrorKind.NOT_FOUND, f"District {district.district_name} has no buildings")
    allergens = client.fetch_allergen_catalog(district.district_id)
    start, end = month_bounds(year, month)
    feed = client.fetch_menu(building.building_id, district.district_id, start, end)
    return MenuSources(feed, allergens, district, building, identifier)


def _load_settings_or_exit(settings_path: Path | None, **overrides: object) -> dict:
    try:
        return apply_cli_overrides(load_settings(settings_path), **overrides)
    except ValueError as e:
        print(f"Invalid settings: {e}", file=sys.stderr)
        sys.exit(1)


def _load_sources_or_exit(settings: dict, year: int, month: int, har: Path | None) -> MenuSources:
    from rich.progress import Progress, SpinnerColumn, TextColumn

    from lunch_calendar.log import stderr_console

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=stderr_console,
        transient=True,
    ) as progress:
        progress.add_task("Loading menu data...", total=None)
        try:
            return load_sources(settings, year, month, har)
        except FeedError as e:
            logger.error("Could not load menu data (%s): %s", e.kind.value, e.message)
            if har is None:
                print(
                    "Menu download failed. Save the LINQ Connect menu page as a HAR file "
                    "in your browser and re-run with --har <file>.",
                    file=sys.stderr,
                )
            sys.exit(1)


def run_generate(
    settings_path: Path | None = None,
    year: int | None = None,
    month: int | None = None,
    har: Path | None = None,
    output: Path | None = None,
    now: datetime | None = None,
    **overrides: object,
) -> Path:
    """CLI entry point for generate command."""
    now = now or datetime.now()
    year = year or now.year
    month = month or now.month
    settings = _load_settings_or_exit(settings_path, **overrides)
    session = settings["session"]

    sources = _load_sources_or_exit(settings, year, month, har)
    allergen_ids, allergen_names = resolve_allergens(sources.allergens, settings["allergens"])

    building_name = sources.building.name if sources.building else None
    source_url = (
        public_menu_url(sources.identifier, sources.building.building_id)
        if sources.building
        else None
    )
    try:
        options = build_render_options(settings, source_url, past_day_cutoff(now))
        forced_home = forced_home_weekdays(settings, session)
    except ValueError as e:
        print(f"Invalid settings: {e}", file=sys.stderr)
        sys.exit(1)
    theme = resolve_theme(settings, month)

    with GenerationRunner() as runner:
        processed, html = runner.submit(
            sources.feed,
            build_selections(settings, allergen_ids, building_name),
            year,
            month,
            theme,
            options,
            allergen_names=allergen_names,
            forced_home_days=forced_home,
        ).result()

    safe_days = sum(1 for d in processed.days if d.any_line_safe and not d.is_no_school)
    school_days = sum(1 for d in processed.days if d.is_school_day)
    logger.info("%d of %d school days have a safe option", safe_days, school_days)

    out_path = output or Path(f"LunchCalendar_{year:04d}-{month:02d}.html")
    out_path.write_text(html, encoding="utf-8")
    print(f"Calendar saved to {out_path}")
    return out_path


def format_allergens_table(items: Sequence[AllergyItem]) -> str:
    lines = []
    header = f"{'#':<4} {'Allergen':<24} {'Id'}"
    lines.append(header)
    lines.append("-" * len(header))
    for item in items:
        lines.append(f"{item.sort_order:<4} {item.name:<24} {item.allergy_id}")
    return "\n".join(lines)


def run_allergens(
    settings_path: Path | None = None,
    har: Path | None = None,
    output_format: str = "table",
    **overrides: object,
) -> None:
    """CLI entry point for allergens command."""
    now = datetime.now()
    settings = _load_settings_or_exit(settings_path, **overrides)
    sources = _load_sources_or_exit(settings, now.year, now.month, har)

    if output_format == "json":
        data = [
            {"id": a.allergy_id, "name": a.name, "sort_order": a.sort_order}
            for a in sources.allergens
        ]
        print(json.dumps(data, indent=2))
    else:
        print(format_allergens_table(sources.allergens))


def format_district_table(district: DistrictLookup) -> str:
    lines = [f"{district.district_name} ({district.district_id})", ""]
    header = f"{'Building':<40} {'Id'}"
    lines.append(header)
    lines.append("-" * len(header))
    for building in district.buildings:
        lines.append(f"{building.name:<40} {building.building_id}")
    if district.menu_notification:
        lines.append("")
        lines.append(district.menu_notification)
    return "\n".join(lines)


def run_lookup(
    identifier: str,
    user_agent: str | None = None,
    output_format: str = "table",
) -> None:
    """CLI entry point for lookup command."""
    client = LinqConnectClient(user_agent=user_agent)
    try:
        district = client.fetch_district_lookup(identifier)
    except FeedError as e:
        print(f"Lookup failed ({e.kind.value}): {e.message}", file=sys.stderr)
        sys.exit(1)

    if output_format == "json":
        data = {
            "district_id": district.district_id,
            "district_name": district.district_name,
            "identifier": district.identifier,
            "buildings": [{"id": b.building_id, "name": b.name} for b in district.buildings],
            "menu_notification": district.menu_notification,
        }
        print(json.dumps(data, indent=2))
    else:
        print(format_district_table(district))
