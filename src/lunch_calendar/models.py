"""Shared data models: raw menu feed, analyzed month, and render inputs."""

from __future__ import annotations

import calendar
from dataclasses import dataclass, field
from datetime import date
from enum import Enum


# Raw feed (as served by LINQ Connect)


@dataclass
class FeedRecipe:
    name: str
    allergens: list[str] = field(default_factory=list)


@dataclass
class RecipeCategory:
    name: str = ""
    is_entree: bool = True
    recipes: list[FeedRecipe] = field(default_factory=list)


@dataclass
class Meal:
    name: str = ""
    categories: list[RecipeCategory] = field(default_factory=list)


@dataclass
class MenuDay:
    date: str  # M/d/yyyy
    meals: list[Meal] = field(default_factory=list)


@dataclass
class MenuPlan:
    name: str
    days: list[MenuDay] = field(default_factory=list)


@dataclass
class ServingSession:
    name: str
    plans: list[MenuPlan] = field(default_factory=list)


@dataclass
class AcademicCalendarDay:
    date: str  # M/d/yyyy
    note: str


@dataclass
class MenuFeed:
    sessions: list[ServingSession] = field(default_factory=list)
    academic_days: list[AcademicCalendarDay] = field(default_factory=list)


@dataclass
class AllergyItem:
    allergy_id: str
    name: str
    sort_order: int = 0


@dataclass
class Building:
    building_id: str
    name: str


@dataclass
class DistrictLookup:
    district_id: str
    district_name: str
    buildings: list[Building] = field(default_factory=list)
    identifier: str = ""
    menu_notification: str | None = None


# Analyzed month


@dataclass(frozen=True)
class RecipeItem:
    """An entree flagged for allergen safety and preference.

    ``is_not_preferred`` and ``is_favorite`` are only ever set on
    allergen-free items.
    """
    name: str
    contains_allergen: bool = False
    is_not_preferred: bool = False
    is_favorite: bool = False


@dataclass(frozen=True)
class ProcessedLine:
    plan_name: str
    is_safe: bool
    entrees: tuple[RecipeItem, ...] = ()


@dataclass(frozen=True)
class ProcessedDay:
    date: date
    lines: tuple[ProcessedLine, ...] = ()
    academic_note: str | None = None

    @property
    def is_no_school(self) -> bool:
        return self.academic_note is not None and "no school" in self.academic_note.lower()

    @property
    def has_special_note(self) -> bool:
        return self.academic_note is not None and not self.is_no_school

    @property
    def any_line_safe(self) -> bool:
        return any(line.is_safe for line in self.lines)

    @property
    def has_menu(self) -> bool:
        return any(line.entrees for line in self.lines)

    @property
    def is_school_day(self) -> bool:
        """A day that consumes a slot in the day-label rotation."""
        return self.has_menu and not self.is_no_school


@dataclass(frozen=True)
class ProcessedMonth:
    year: int
    month: int
    days: tuple[ProcessedDay, ...] = ()
    building_name: str | None = None
    session_name: str | None = None

    @property
    def display_name(self) -> str:
        return f"{calendar.month_name[self.month]} {self.year}"

    def plan_names(self) -> list[str]:
        """Distinct plan names in encounter order."""
        seen: dict[str, None] = {}
        for day in self.days:
            for line in day.lines:
                seen.setdefault(line.plan_name, None)
        return list(seen)


# Render inputs


class LayoutMode(Enum):
    LIST = "List"
    ICONS_LEFT = "IconsLeft"
    ICONS_RIGHT = "IconsRight"

    @property
    def is_grid(self) -> bool:
        return self is not LayoutMode.LIST


class LabelCorner(Enum):
    TOP_RIGHT = "TopRight"
    TOP_LEFT = "TopLeft"
    BOTTOM_RIGHT = "BottomRight"
    BOTTOM_LEFT = "BottomLeft"


@dataclass(frozen=True)
class DayLabel:
    label: str
    color: str = "#6c757d"


@dataclass(frozen=True)
class HolidayOverride:
    emoji: str
    custom_message: str | None = None


@dataclass(frozen=True)
class MenuSelections:
    """User choices that drive the analysis of one month."""
    allergen_ids: frozenset[str] = frozenset()
    not_preferred: frozenset[str] = frozenset()
    favorites: frozenset[str] = frozenset()
    session_name: str = "Lunch"
    building_name: str | None = None


@dataclass(frozen=True)
class CalendarRenderOptions:
    """Everything the renderer needs beyond the month, allergens and theme.

    ``past_cutoff`` is the first date that is *not* crossed out; leave it
    ``None`` to disable past-day marking.
    """
    layout_mode: LayoutMode = LayoutMode.LIST
    plan_label_overrides: dict[str, str] = field(default_factory=dict)
    plan_icon_overrides: dict[str, str] = field(default_factory=dict)
    plan_display_order: tuple[str, ...] = ()
    show_unsafe_lines: bool = False
    unsafe_line_message: str = "No safe options"
    holiday_overrides: dict[str, HolidayOverride] = field(default_factory=dict)
    past_cutoff: date | None = None
    day_label_cycle: tuple[DayLabel, ...] = ()
    day_label_start: date | None = None
    day_label_corner: LabelCorner = LabelCorner.TOP_RIGHT
    show_share_footer: bool = False
    source_url: str | None = None

    def plan_label(self, plan_name: str) -> str:
        return self.plan_label_overrides.get(plan_name) or plan_name
