import pytest
from datetime import date

from lunch_calendar.models import (
    AcademicCalendarDay,
    FeedRecipe,
    Meal,
    MenuDay,
    MenuFeed,
    MenuPlan,
    MenuSelections,
    ProcessedDay,
    ProcessedLine,
    ProcessedMonth,
    RecipeCategory,
    RecipeItem,
    ServingSession,
)

MILK = "milk-uuid"
EGG = "egg-uuid"


def entree_day(day: str, *recipes: FeedRecipe, sides: tuple[FeedRecipe, ...] = ()) -> MenuDay:
    categories = [RecipeCategory(name="Entree", is_entree=True, recipes=list(recipes))]
    if sides:
        categories.append(RecipeCategory(name="Sides", is_entree=False, recipes=list(sides)))
    return MenuDay(date=day, meals=[Meal(name="Lunch", categories=categories)])


@pytest.fixture
def make_feed():
    """Build a MenuFeed from {plan name: [MenuDay, ...]} plus academic notes."""

    def _make(plans: dict[str, list[MenuDay]], notes: dict[str, str] | None = None,
              session: str = "Lunch") -> MenuFeed:
        return MenuFeed(
            sessions=[
                ServingSession(
                    name=session,
                    plans=[MenuPlan(name=name, days=days) for name, days in plans.items()],
                )
            ],
            academic_days=[AcademicCalendarDay(date=d, note=n) for d, n in (notes or {}).items()],
        )

    return _make


@pytest.fixture
def february_feed(make_feed) -> MenuFeed:
    """Two lines over the first school week of February 2026."""
    return make_feed(
        {
            "Lunch - MS": [
                entree_day("2/1/2026", FeedRecipe("Sunday Brunch")),
                entree_day("2/2/2026", FeedRecipe("Pizza")),
                entree_day("2/3/2026", FeedRecipe("Cheese Pizza", [MILK])),
                entree_day("2/4/2026", FeedRecipe("Tacos")),
                entree_day("2/5/2026", FeedRecipe("Mac and Cheese", [MILK])),
                entree_day("2/16/2026", FeedRecipe("Holiday Special")),
            ],
            "Grill": [
                entree_day("2/2/2026", FeedRecipe("Burger")),
                entree_day("2/3/2026", FeedRecipe("Grilled Cheese", [MILK])),
                entree_day("2/5/2026", FeedRecipe("Chicken Sandwich")),
            ],
        },
        notes={
            "2/16/2026": "Presidents Day - No School",
            "2/4/2026": "Early Dismissal 1:30 PM",
            "13/45/2026": "Bad date",
        },
    )


@pytest.fixture
def milk_free() -> MenuSelections:
    return MenuSelections(allergen_ids=frozenset({MILK}), building_name="Kenwood Trail MS")


def safe_line(plan: str, *names: str) -> ProcessedLine:
    return ProcessedLine(plan_name=plan, is_safe=True,
                         entrees=tuple(RecipeItem(name=n) for n in names))


def unsafe_line(plan: str, *names: str) -> ProcessedLine:
    return ProcessedLine(plan_name=plan, is_safe=False,
                         entrees=tuple(RecipeItem(name=n, contains_allergen=True) for n in names))


@pytest.fixture
def small_month() -> ProcessedMonth:
    """February 2026 with a handful of hand-classified days."""
    return ProcessedMonth(
        year=2026,
        month=2,
        building_name="Kenwood Trail MS",
        session_name="Lunch",
        days=(
            ProcessedDay(date(2026, 2, 2), lines=(safe_line("Lunch - MS", "Pizza"),
                                                  unsafe_line("Grill", "Cheeseburger"))),
            ProcessedDay(date(2026, 2, 3), lines=(unsafe_line("Lunch - MS", "Cheese Pizza"),
                                                  unsafe_line("Grill", "Grilled Cheese"))),
            ProcessedDay(date(2026, 2, 4), lines=(safe_line("Lunch - MS", "Tacos"),),
                         academic_note="Early Dismissal 1:30 PM"),
            ProcessedDay(date(2026, 2, 5), lines=(safe_line("Lunch - MS", "Chicken Nuggets"),)),
            ProcessedDay(date(2026, 2, 6), lines=(
                ProcessedLine("Lunch - MS", True, (
                    RecipeItem("Fish Sticks", is_not_preferred=True),
                    RecipeItem("Corn Dog", is_favorite=True),
                )),
            )),
            ProcessedDay(date(2026, 2, 16), academic_note="Presidents Day - No School"),
            ProcessedDay(date(2026, 2, 17), academic_note="Teacher Workshop"),
        ),
    )


@pytest.fixture
def menu_day():
    return entree_day
