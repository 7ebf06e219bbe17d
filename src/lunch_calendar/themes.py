"""Built-in calendar color themes and month-based auto-suggestion."""

from __future__ import annotations

import calendar
import json
from collections.abc import Iterable
from dataclasses import dataclass


@dataclass(frozen=True)
class CalendarTheme:
    name: str
    emoji: str
    category: str  # Seasonal, Fun, Basic
    header_bg: str
    header_fg: str
    title_color: str
    safe_color: str
    favorite_star: str
    favorite_border: str
    favorite_bg: str
    home_badge_bg: str
    accent_border: str
    body_bg: str
    cell_pattern: str | None = None
    suggested_month: int | None = None
    suggested_month2: int | None = None

    def suggests(self, month: int) -> bool:
        return month in (self.suggested_month, self.suggested_month2)


def _dots(color: str, size: int = 1) -> str:
    return f"radial-gradient(circle, {color} {size}px, transparent {size}px)"


# Ordered so auto-suggestion finds the most specific holiday theme first.
THEMES: list[CalendarTheme] = [
    # Seasonal
    CalendarTheme(
        "New Year", "\U0001F386", "Seasonal",
        header_bg="#212121", header_fg="#ffd700", title_color="#212121",
        safe_color="#1b5e20", favorite_star="#ffd700", favorite_border="#ffd700",
        favorite_bg="#fffde7", home_badge_bg="#c62828", accent_border="#bdbdbd",
        body_bg="#fafafa", cell_pattern=_dots("#fffde7"), suggested_month=1,
    ),
    CalendarTheme(
        "Valentines", "\U0001F495", "Seasonal",
        header_bg="#c2185b", header_fg="#ffffff", title_color="#ad1457",
        safe_color="#880e4f", favorite_star="#e91e63", favorite_border="#f06292",
        favorite_bg="#fce4ec", home_badge_bg="#d32f2f", accent_border="#f8bbd0",
        body_bg="#fff0f3", cell_pattern=_dots("#fce4ec"), suggested_month=2,
    ),
    CalendarTheme(
        "St. Patrick's", "☘️", "Seasonal",
        header_bg="#2e7d32", header_fg="#ffffff", title_color="#1b5e20",
        safe_color="#1b5e20", favorite_star="#ffd700", favorite_border="#66bb6a",
        favorite_bg="#e8f5e9", home_badge_bg="#c62828", accent_border="#a5d6a7",
        body_bg="#f1f8e9", cell_pattern=_dots("#e8f5e9"), suggested_month=3,
    ),
    CalendarTheme(
        "Easter", "\U0001F423", "Seasonal",
        header_bg="#ec407a", header_fg="#ffffff", title_color="#ad1457",
        safe_color="#1b5e20", favorite_star="#ff8f00", favorite_border="#f48fb1",
        favorite_bg="#fce4ec", home_badge_bg="#7b1fa2", accent_border="#f8bbd0",
        body_bg="#fff8e1", cell_pattern=_dots("#e1f5fe"), suggested_month=4,
    ),
    CalendarTheme(
        "Spring", "\U0001F338", "Seasonal",
        header_bg="#2e7d32", header_fg="#ffffff", title_color="#1b5e20",
        safe_color="#1b5e20", favorite_star="#ff6d00", favorite_border="#81c784",
        favorite_bg="#e8f5e9", home_badge_bg="#c62828", accent_border="#c8e6c9",
        body_bg="#f1f8e9", suggested_month2=5,
    ),
    CalendarTheme(
        "Summer", "☀️", "Seasonal",
        header_bg="#0277bd", header_fg="#ffffff", title_color="#01579b",
        safe_color="#1b5e20", favorite_star="#ff8f00", favorite_border="#4fc3f7",
        favorite_bg="#e1f5fe", home_badge_bg="#d84315", accent_border="#b3e5fc",
        body_bg="#fffde7", cell_pattern=_dots("#fff9c4"), suggested_month=6,
    ),
    CalendarTheme(
        "Fourth of July", "\U0001F386", "Seasonal",
        header_bg="#1565c0", header_fg="#ffffff", title_color="#b71c1c",
        safe_color="#1b5e20", favorite_star="#ff8f00", favorite_border="#ef5350",
        favorite_bg="#ffebee", home_badge_bg="#b71c1c", accent_border="#bbdefb",
        body_bg="#f5f5f5", cell_pattern=_dots("#e3f2fd"), suggested_month=7,
    ),
    CalendarTheme(
        "Back to School", "\U0001F392", "Seasonal",
        header_bg="#1a237e", header_fg="#ffeb3b", title_color="#1a237e",
        safe_color="#1b5e20", favorite_star="#ff8f00", favorite_border="#5c6bc0",
        favorite_bg="#e8eaf6", home_badge_bg="#c62828", accent_border="#9fa8da",
        body_bg="#fffde7", suggested_month=8,
    ),
    CalendarTheme(
        "Fall", "\U0001F342", "Seasonal",
        header_bg="#4e342e", header_fg="#ffcc80", title_color="#3e2723",
        safe_color="#1b5e20", favorite_star="#ff8f00", favorite_border="#a1887f",
        favorite_bg="#efebe9", home_badge_bg="#bf360c", accent_border="#bcaaa4",
        body_bg="#fff3e0", cell_pattern=_dots("#efebe9"), suggested_month=9,
    ),
    CalendarTheme(
        "Spooky", "\U0001F383", "Seasonal",
        header_bg="#212121", header_fg="#ff6d00", title_color="#e65100",
        safe_color="#1b5e20", favorite_star="#ff6d00", favorite_border="#ff9800",
        favorite_bg="#fff3e0", home_badge_bg="#6a1b9a", accent_border="#424242",
        body_bg="#1a1a2e", cell_pattern=_dots("#2d2d44"), suggested_month=10,
    ),
    CalendarTheme(
        "Thanksgiving", "\U0001F983", "Seasonal",
        header_bg="#4e342e", header_fg="#ffe0b2", title_color="#3e2723",
        safe_color="#1b5e20", favorite_star="#ff8f00", favorite_border="#a1887f",
        favorite_bg="#efebe9", home_badge_bg="#bf360c", accent_border="#d7ccc8",
        body_bg="#fff8e1", cell_pattern=_dots("#fff3e0"), suggested_month=11,
    ),
    CalendarTheme(
        "Winter", "❄️", "Seasonal",
        header_bg="#1565c0", header_fg="#e3f2fd", title_color="#0d47a1",
        safe_color="#1a237e", favorite_star="#ffd600", favorite_border="#90caf9",
        favorite_bg="#e3f2fd", home_badge_bg="#c62828", accent_border="#bbdefb",
        body_bg="#f5f9ff", cell_pattern=_dots("#e3f2fd", 2), suggested_month=12,
    ),
    # Fun
    CalendarTheme(
        "Cardinal", "\U0001F426", "Fun",
        header_bg="#b71c1c", header_fg="#ffffff", title_color="#b71c1c",
        safe_color="#1b5e20", favorite_star="#ff8f00", favorite_border="#ef5350",
        favorite_bg="#ffebee", home_badge_bg="#c62828", accent_border="#ef9a9a",
        body_bg="#fff8f0", cell_pattern=_dots("#ffebee"),
    ),
    CalendarTheme(
        "Blue Jay", "\U0001F426\u200d\u2b1b", "Fun",
        header_bg="#1565c0", header_fg="#ffffff", title_color="#0d47a1",
        safe_color="#1b5e20", favorite_star="#ff8f00", favorite_border="#42a5f5",
        favorite_bg="#e3f2fd", home_badge_bg="#c62828", accent_border="#90caf9",
        body_bg="#f0f9ff", cell_pattern=_dots("#e3f2fd"),
    ),
    CalendarTheme(
        "Cats", "\U0001F431", "Fun",
        header_bg="#e65100", header_fg="#ffffff", title_color="#bf360c",
        safe_color="#33691e", favorite_star="#ff8f00", favorite_border="#ffb74d",
        favorite_bg="#fff3e0", home_badge_bg="#c62828", accent_border="#ffcc80",
        body_bg="#fff8f0",
    ),
    CalendarTheme(
        "Dinosaurs", "\U0001F995", "Fun",
        header_bg="#33691e", header_fg="#ffffff", title_color="#33691e",
        safe_color="#1b5e20", favorite_star="#ff6d00", favorite_border="#8bc34a",
        favorite_bg="#f1f8e9", home_badge_bg="#bf360c", accent_border="#a5d6a7",
        body_bg="#f9fbe7",
    ),
    CalendarTheme(
        "Princess", "\U0001F451", "Fun",
        header_bg="#7b1fa2", header_fg="#ffffff", title_color="#6a1b9a",
        safe_color="#4a148c", favorite_star="#ff6ff2", favorite_border="#ce93d8",
        favorite_bg="#f3e5f5", home_badge_bg="#ab47bc", accent_border="#e1bee7",
        body_bg="#fdf2ff", cell_pattern=_dots("#f3e5f5"),
    ),
    CalendarTheme(
        "Robots", "\U0001F916", "Fun",
        header_bg="#455a64", header_fg="#00e5ff", title_color="#37474f",
        safe_color="#004d40", favorite_star="#ff6d00", favorite_border="#00bcd4",
        favorite_bg="#e0f7fa", home_badge_bg="#bf360c", accent_border="#90a4ae",
        body_bg="#eceff1",
        cell_pattern=(
            "linear-gradient(90deg, #eceff1 1px, transparent 1px), "
            "linear-gradient(#eceff1 1px, transparent 1px)"
        ),
    ),
    CalendarTheme(
        "Unicorn", "\U0001F984", "Fun",
        header_bg="#7b1fa2", header_fg="#ffffff", title_color="#6a1b9a",
        safe_color="#1b5e20", favorite_star="#ff6ff2", favorite_border="#ce93d8",
        favorite_bg="#f3e5f5", home_badge_bg="#e91e63", accent_border="#e1bee7",
        body_bg="#fce4ec",
        cell_pattern=(
            "linear-gradient(135deg, #f3e5f5 0%, #e1f5fe 25%, #fff9c4 50%, "
            "#fce4ec 75%, #e8f5e9 100%)"
        ),
    ),
    # Basic
    CalendarTheme(
        "Default", "\U0001F4C5", "Basic",
        header_bg="#343a40", header_fg="#ffffff", title_color="#212529",
        safe_color="#155724", favorite_star="#ff8c00", favorite_border="#ff8c00",
        favorite_bg="#fff8f0", home_badge_bg="#dc3545", accent_border="#dee2e6",
        body_bg="#ffffff",
    ),
]

DEFAULT_THEME = THEMES[-1]


def find_theme(name: str | None) -> CalendarTheme | None:
    """Look up a theme by name, case-insensitively."""
    if not name:
        return None
    wanted = name.strip().lower()
    for theme in THEMES:
        if theme.name.lower() == wanted:
            return theme
    return None


def visible_themes(hidden: Iterable[str] = ()) -> list[CalendarTheme]:
    hidden_lower = {h.lower() for h in hidden}
    return [t for t in THEMES if t.name.lower() not in hidden_lower]


def suggest_theme(month: int, hidden: Iterable[str] = ()) -> CalendarTheme:
    """First visible theme suggested for ``month``, else Default."""
    for theme in visible_themes(hidden):
        if theme.suggests(month):
            return theme
    return DEFAULT_THEME


def themes_by_category(hidden: Iterable[str] = ()) -> dict[str, list[CalendarTheme]]:
    grouped: dict[str, list[CalendarTheme]] = {}
    for theme in visible_themes(hidden):
        grouped.setdefault(theme.category, []).append(theme)
    return grouped


def format_themes_table(
    grouped: dict[str, list[CalendarTheme]],
    suggested: CalendarTheme | None = None,
) -> str:
    lines = []
    for category, themes in grouped.items():
        lines.append(f"{category}:")
        for theme in themes:
            months = [m for m in (theme.suggested_month, theme.suggested_month2) if m]
            months_str = ", ".join(calendar.month_abbr[m] for m in months)
            marker = "*" if theme is suggested else " "
            lines.append(f" {marker} {theme.emoji} {theme.name:<18} {months_str}")
        lines.append("")
    return "\n".join(lines).rstrip()


def run_themes(
    month: int | None = None,
    hidden: Iterable[str] = (),
    output_format: str = "table",
) -> None:
    """CLI entry point for themes command."""
    grouped = themes_by_category(hidden)

    if output_format == "json":
        data = [
            {
                "name": t.name,
                "emoji": t.emoji,
                "category": t.category,
                "suggested_months": [m for m in (t.suggested_month, t.suggested_month2) if m],
                "header_bg": t.header_bg,
                "safe_color": t.safe_color,
            }
            for themes in grouped.values()
            for t in themes
        ]
        print(json.dumps(data, indent=2, ensure_ascii=False))
    else:
        suggested = suggest_theme(month, hidden) if month else None
        print(format_themes_table(grouped, suggested))
