"""Decode LINQ Connect JSON payloads into feed models."""

from __future__ import annotations

import logging

from lunch_calendar.models import (
    AcademicCalendarDay,
    AllergyItem,
    Building,
    DistrictLookup,
    FeedRecipe,
    Meal,
    MenuDay,
    MenuFeed,
    MenuPlan,
    RecipeCategory,
    ServingSession,
)

logger = logging.getLogger(__name__)


def _list(data: dict, key: str) -> list:
    value = data.get(key)
    return value if isinstance(value, list) else []


def _str(data: dict, key: str) -> str:
    value = data.get(key)
    return "" if value is None else str(value)


def _parse_recipe(raw: dict) -> FeedRecipe:
    return FeedRecipe(
        name=_str(raw, "RecipeName"),
        allergens=[str(a) for a in _list(raw, "Allergens")],
    )


def _parse_category(raw: dict) -> RecipeCategory:
    is_entree = raw.get("IsEntree")
    return RecipeCategory(
        name=_str(raw, "CategoryName"),
        is_entree=True if is_entree is None else bool(is_entree),
        recipes=[_parse_recipe(r) for r in _list(raw, "Recipes")],
    )


def _parse_day(raw: dict) -> MenuDay:
    meals = [
        Meal(
            name=_str(m, "MenuMealName"),
            categories=[_parse_category(c) for c in _list(m, "RecipeCategories")],
        )
        for m in _list(raw, "MenuMeals")
    ]
    return MenuDay(date=_str(raw, "Date"), meals=meals)


def parse_menu_feed(data: dict) -> MenuFeed:
    """Parse a FamilyMenu response body.

    Missing keys become empty values; academic calendar days without a date
    or note are dropped.
    """
    sessions = []
    for raw_session in _list(data, "FamilyMenuSessions"):
        plans = [
            MenuPlan(
                name=_str(p, "MenuPlanName"),
                days=[_parse_day(d) for d in _list(p, "Days")],
            )
            for p in _list(raw_session, "MenuPlans")
        ]
        sessions.append(ServingSession(name=_str(raw_session, "ServingSession"), plans=plans))

    academic_days = []
    for cal in _list(data, "AcademicCalendars"):
        for raw_day in _list(cal, "Days"):
            day_str = _str(raw_day, "Date")
            note = _str(raw_day, "Note")
            if day_str and note:
                academic_days.append(AcademicCalendarDay(date=day_str, note=note))

    logger.debug(
        "Decoded feed: %d sessions, %d academic notes",
        len(sessions),
        len(academic_days),
    )
    return MenuFeed(sessions=sessions, academic_days=academic_days)


def parse_allergen_catalog(data: list) -> list[AllergyItem]:
    """Parse a FamilyAllergy response body, ordered by SortOrder."""
    items = [
        AllergyItem(
            allergy_id=_str(raw, "AllergyId"),
            name=_str(raw, "Name"),
            sort_order=int(raw.get("SortOrder") or 0),
        )
        for raw in data or []
        if isinstance(raw, dict)
    ]
    return sorted(items, key=lambda a: a.sort_order)


def parse_district_lookup(data: dict) -> DistrictLookup:
    """Parse a FamilyMenuIdentifier response body."""
    buildings = [
        Building(building_id=_str(b, "BuildingId"), name=_str(b, "Name"))
        for b in _list(data, "Buildings")
    ]
    return DistrictLookup(
        district_id=_str(data, "DistrictId"),
        district_name=_str(data, "DistrictName"),
        buildings=buildings,
        identifier=_str(data, "Identifier"),
        menu_notification=data.get("MenuNotification"),
    )
