"""Emoji and message for no-school days."""

from __future__ import annotations

import re
from collections.abc import Mapping

from lunch_calendar.models import HolidayOverride

HOUSE = "\U0001F3E0"
SNOWFLAKE = "❄️"
TURKEY = "\U0001F983"
US_FLAG = "\U0001F1FA\U0001F1F8"
FIST = "✊"
BLOSSOM = "\U0001F338"
BOOKS = "\U0001F4DA"

# Checked in order; first keyword found in the note wins.
BUILTIN_HOLIDAY_EMOJI: list[tuple[tuple[str, ...], str]] = [
    (("winter break", "christmas"), SNOWFLAKE),
    (("thanksgiving",), TURKEY),
    (("president",), US_FLAG),
    (("mlk", "martin luther king"), FIST),
    (("memorial",), US_FLAG),
    (("labor",), US_FLAG),
    (("spring break",), BLOSSOM),
    (("teacher",), BOOKS),
]

# Same table in override form, used to seed the settings file.
DEFAULT_HOLIDAY_OVERRIDES: dict[str, HolidayOverride] = {
    keyword: HolidayOverride(emoji=emoji)
    for keywords, emoji in BUILTIN_HOLIDAY_EMOJI
    for keyword in keywords
}

_DASH_SUFFIX = re.compile(r"\s-\s*no school.*$", re.IGNORECASE)
_BARE_SUFFIX = re.compile(r"\s*-?\s+no school\s*$", re.IGNORECASE)


def builtin_holiday_emoji(note: str) -> str:
    lower = note.lower()
    for keywords, emoji in BUILTIN_HOLIDAY_EMOJI:
        if any(k in lower for k in keywords):
            return emoji
    return HOUSE


def resolve_holiday(
    note: str,
    overrides: Mapping[str, HolidayOverride] | None = None,
) -> tuple[str, str]:
    """Return (emoji, message) for an academic note.

    User overrides are tried first, in mapping order, by case-insensitive
    substring match of the keyword. An override without a custom message
    keeps the note text. Empty keywords are ignored.
    """
    lower = note.lower()
    for keyword, override in (overrides or {}).items():
        key = keyword.strip().lower()
        if key and key in lower:
            return override.emoji, override.custom_message or note
    return builtin_holiday_emoji(note), note


def clean_no_school_note(message: str) -> str:
    """Drop a trailing "- No School" / "No School" from a display message.

    A message that is nothing but "No School" is returned unchanged.
    """
    stripped = _DASH_SUFFIX.sub("", message)
    if stripped == message:
        stripped = _BARE_SUFFIX.sub("", message)
    stripped = stripped.strip()
    return stripped or message
