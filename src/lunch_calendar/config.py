"""Settings loading with defaults, CLI override merging, and render options."""

from __future__ import annotations

import copy
from datetime import date
from pathlib import Path

import yaml

from lunch_calendar.holidays import DEFAULT_HOLIDAY_OVERRIDES
from lunch_calendar.models import (
    CalendarRenderOptions,
    DayLabel,
    HolidayOverride,
    LabelCorner,
    LayoutMode,
    MenuSelections,
)

DEFAULT_SETTINGS_PATH = Path.home() / ".config" / "lunch-calendar" / "settings.yaml"

WEEKDAYS = ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]

DEFAULTS = {
    "district": {
        "identifier": "YVAM38",
        "district_id": "47ce70b9-238e-ea11-bd68-f554d510c22b",
        "district_name": "Lakeville Area Schools",
        "building": None,
    },
    "session": "Lunch",
    "allergens": [],
    "forced_home_days": {},
    "not_preferred": {},
    "favorites": {},
    "theme": None,
    "hidden_themes": [],
    "layout": "IconsLeft",
    "plan_labels": {},
    "plan_icons": {},
    "plan_order": [],
    "show_unsafe_lines": True,
    "unsafe_line_message": "No safe options",
    "holiday_overrides": {
        keyword: {"emoji": override.emoji}
        for keyword, override in DEFAULT_HOLIDAY_OVERRIDES.items()
    },
    "cross_out_past_days": True,
    "day_labels": {
        "enabled": True,
        "cycle": [
            {"label": "Red", "color": "#dc3545"},
            {"label": "White", "color": "#adb5bd"},
        ],
        "start_date": None,
        "corner": "TopRight",
    },
    "share_footer": False,
    "user_agent": None,
}


def deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge override into base, returning a new dict."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def load_settings(path: Path | None = None) -> dict:
    """Load settings from YAML, falling back to defaults.

    Raises ValueError when the file names an unknown layout, label corner,
    or weekday.
    """
    settings_path = path or DEFAULT_SETTINGS_PATH

    if settings_path.exists():
        with open(settings_path, encoding="utf-8") as f:
            user_settings = yaml.safe_load(f) or {}
        if not isinstance(user_settings, dict):
            raise ValueError(f"{settings_path}: expected a mapping at the top level")
        settings = deep_merge(copy.deepcopy(DEFAULTS), user_settings)
    else:
        settings = copy.deepcopy(DEFAULTS)

    parse_layout(settings["layout"])
    parse_corner(settings["day_labels"]["corner"])
    for days in (settings["forced_home_days"] or {}).values():
        parse_weekdays(days or [])
    return settings


def apply_cli_overrides(settings: dict, **overrides: object) -> dict:
    """Apply CLI argument overrides to settings.

    Supports flat keys that map into nested settings:
      session -> session
      building -> district.building
      identifier -> district.identifier
      allergens -> allergens (comma-separated names)
      theme -> theme
      layout -> layout
      share_footer -> share_footer
    """
    if overrides.get("session") is not None:
        settings["session"] = overrides["session"]
    if overrides.get("building") is not None:
        settings["district"]["building"] = overrides["building"]
    if overrides.get("identifier") is not None:
        settings["district"]["identifier"] = overrides["identifier"]
    if overrides.get("allergens") is not None:
        names = str(overrides["allergens"])
        settings["allergens"] = [n.strip() for n in names.split(",") if n.strip()]
    if overrides.get("theme") is not None:
        settings["theme"] = overrides["theme"]
    if overrides.get("layout") is not None:
        parse_layout(str(overrides["layout"]))
        settings["layout"] = overrides["layout"]
    if overrides.get("share_footer") is not None:
        settings["share_footer"] = bool(overrides["share_footer"])

    return settings


def parse_layout(value: str) -> LayoutMode:
    for mode in LayoutMode:
        if mode.value.lower() == str(value).lower():
            return mode
    raise ValueError(f"Unknown layout {value!r}; expected one of {[m.value for m in LayoutMode]}")


def parse_corner(value: str) -> LabelCorner:
    for corner in LabelCorner:
        if corner.value.lower() == str(value).lower():
            return corner
    raise ValueError(f"Unknown label corner {value!r}; expected one of {[c.value for c in LabelCorner]}")


def parse_weekdays(names: list[str]) -> set[int]:
    """Weekday names to ``date.weekday()`` numbers."""
    result = set()
    for name in names:
        key = str(name).strip().lower()
        if key not in WEEKDAYS:
            raise ValueError(f"Unknown weekday {name!r}")
        result.add(WEEKDAYS.index(key))
    return result


def for_session(section: dict | None, session: str) -> list:
    """Per-session list from a settings section, matched case-insensitively."""
    for key, value in (section or {}).items():
        if str(key).lower() == session.lower():
            return list(value or [])
    return []


def forced_home_weekdays(settings: dict, session: str) -> set[int]:
    return parse_weekdays(for_session(settings["forced_home_days"], session))


def build_selections(
    settings: dict,
    allergen_ids: frozenset[str],
    building_name: str | None = None,
) -> MenuSelections:
    session = settings["session"]
    return MenuSelections(
        allergen_ids=allergen_ids,
        not_preferred=frozenset(for_session(settings["not_preferred"], session)),
        favorites=frozenset(for_session(settings["favorites"], session)),
        session_name=session,
        building_name=building_name,
    )


def _as_date(value: object) -> date | None:
    if value is None or value == "":
        return None
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value))


def build_render_options(
    settings: dict,
    source_url: str | None,
    today: date | None,
) -> CalendarRenderOptions:
    """Assemble the immutable render options for one generation.

    ``today`` is the past-day cutoff; it is dropped when crossing out past
    days is turned off.
    """
    labels = settings["day_labels"]
    cycle: tuple[DayLabel, ...] = ()
    if labels.get("enabled"):
        cycle = tuple(
            DayLabel(label=str(slot["label"]), color=str(slot.get("color") or "#6c757d"))
            for slot in labels.get("cycle") or []
        )

    holiday_overrides = {
        str(keyword).lower(): HolidayOverride(
            emoji=str(value.get("emoji", "")),
            custom_message=value.get("message"),
        )
        for keyword, value in (settings["holiday_overrides"] or {}).items()
        if isinstance(value, dict) and value.get("emoji")
    }

    return CalendarRenderOptions(
        layout_mode=parse_layout(settings["layout"]),
        plan_label_overrides=dict(settings["plan_labels"] or {}),
        plan_icon_overrides=dict(settings["plan_icons"] or {}),
        plan_display_order=tuple(settings["plan_order"] or ()),
        show_unsafe_lines=bool(settings["show_unsafe_lines"]),
        unsafe_line_message=str(settings["unsafe_line_message"]),
        holiday_overrides=holiday_overrides,
        past_cutoff=today if settings["cross_out_past_days"] else None,
        day_label_cycle=cycle,
        day_label_start=_as_date(labels.get("start_date")),
        day_label_corner=parse_corner(labels.get("corner") or "TopRight"),
        show_share_footer=bool(settings["share_footer"]),
        source_url=source_url,
    )
