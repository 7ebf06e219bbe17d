"""Classify each school day's serving lines for allergen safety and preference."""

from __future__ import annotations

import calendar
import logging
from collections.abc import Iterable, Iterator
from datetime import date

from lunch_calendar.academic import build_academic_index, parse_feed_date
from lunch_calendar.models import (
    FeedRecipe,
    MenuDay,
    MenuFeed,
    MenuPlan,
    MenuSelections,
    ProcessedDay,
    ProcessedLine,
    ProcessedMonth,
    RecipeItem,
    ServingSession,
)

logger = logging.getLogger(__name__)

COMPANION_PREFIX = "with "


def weekdays_in_month(year: int, month: int) -> Iterator[date]:
    """Yield Monday-Friday dates of the month in order."""
    _, last = calendar.monthrange(year, month)
    for day in range(1, last + 1):
        d = date(year, month, day)
        if d.weekday() < 5:
            yield d


def is_companion(recipe_name: str) -> bool:
    """'with Marinara' style items belong to the entree listed before them."""
    return recipe_name.lower().startswith(COMPANION_PREFIX)


def classify_category(
    recipes: Iterable[FeedRecipe],
    selections: MenuSelections,
) -> list[RecipeItem]:
    """Flag one entree category's recipes, in their given order.

    A companion item inherits the allergen status of the nearest preceding
    non-companion recipe. The carried flag starts False for every category.
    """
    items: list[RecipeItem] = []
    parent_contains = False
    for recipe in recipes:
        contains = not selections.allergen_ids.isdisjoint(recipe.allergens)
        if is_companion(recipe.name):
            contains = contains or parent_contains
        else:
            parent_contains = contains

        logger.debug(
            "Recipe %r allergens=%s contains_selected=%s",
            recipe.name,
            ",".join(recipe.allergens),
            contains,
        )
        items.append(
            RecipeItem(
                name=recipe.name,
                contains_allergen=contains,
                is_not_preferred=not contains and recipe.name in selections.not_preferred,
                is_favorite=(
                    not contains
                    and recipe.name in selections.favorites
                    and recipe.name not in selections.not_preferred
                ),
            )
        )
    return items


def extract_entrees(menu_day: MenuDay | None, selections: MenuSelections) -> list[RecipeItem]:
    """Classified entrees of one plan on one day; sides are never inspected."""
    if menu_day is None:
        return []
    entrees: list[RecipeItem] = []
    for meal in menu_day.meals:
        for category in meal.categories:
            if not category.is_entree:
                continue
            entrees.extend(classify_category(category.recipes, selections))
    return entrees


def index_plan_days(plan: MenuPlan) -> dict[date, MenuDay]:
    """Index a plan's days by date. Days with unparseable dates are dropped."""
    index: dict[date, MenuDay] = {}
    for menu_day in plan.days:
        parsed = parse_feed_date(menu_day.date)
        if parsed is not None:
            index[parsed] = menu_day
    return index


def find_session(feed: MenuFeed, session_name: str) -> ServingSession | None:
    wanted = session_name.strip().lower()
    for session in feed.sessions:
        if session.name.strip().lower() == wanted:
            return session
    return None


def build_line(plan_name: str, entrees: list[RecipeItem]) -> ProcessedLine:
    is_safe = any(not e.contains_allergen and not e.is_not_preferred for e in entrees)
    return ProcessedLine(plan_name=plan_name, is_safe=is_safe, entrees=tuple(entrees))


def analyze(
    feed: MenuFeed,
    selections: MenuSelections,
    year: int,
    month: int,
) -> ProcessedMonth:
    """Build the per-day, per-line safety classification for one month.

    An unknown session yields every weekday with only academic notes set.
    """
    logger.info(
        "Analyzing %d/%d session=%s with %d selected allergens",
        month,
        year,
        selections.session_name,
        len(selections.allergen_ids),
    )
    notes = build_academic_index(feed)
    session = find_session(feed, selections.session_name)

    if session is None:
        logger.warning("No %s session found in menu data", selections.session_name)
        days = tuple(
            ProcessedDay(date=d, academic_note=notes.get(d))
            for d in weekdays_in_month(year, month)
        )
        return ProcessedMonth(
            year=year,
            month=month,
            days=days,
            building_name=selections.building_name,
        )

    plan_indexes: list[tuple[str, dict[date, MenuDay]]] = []
    for plan in session.plans:
        day_index = index_plan_days(plan)
        plan_indexes.append((plan.name, day_index))
        logger.info("Found plan: %s with %d days", plan.name, len(day_index))

    days: list[ProcessedDay] = []
    for d in weekdays_in_month(year, month):
        lines = tuple(
            build_line(plan_name, extract_entrees(day_index.get(d), selections))
            for plan_name, day_index in plan_indexes
        )
        day = ProcessedDay(date=d, lines=lines, academic_note=notes.get(d))
        logger.debug(
            "Day %s: %d/%d lines safe, note=%s",
            d.isoformat(),
            sum(1 for line in lines if line.is_safe),
            len(lines),
            day.academic_note,
        )
        days.append(day)

    return ProcessedMonth(
        year=year,
        month=month,
        days=tuple(days),
        building_name=selections.building_name,
        session_name=session.name,
    )
