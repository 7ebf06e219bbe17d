"""Render an analyzed month as a self-contained, printable HTML calendar."""

from __future__ import annotations

import base64
import calendar
import logging
from collections.abc import Callable, Collection, Mapping, Sequence
from datetime import date, timedelta
from html import escape

from lunch_calendar.day_labels import label_month
from lunch_calendar.holidays import HOUSE, clean_no_school_note, resolve_holiday
from lunch_calendar.models import (
    CalendarRenderOptions,
    DayLabel,
    LayoutMode,
    ProcessedDay,
    ProcessedLine,
    ProcessedMonth,
)
from lunch_calendar.palette import PlanBadge, assign_plan_palette, order_plan_names
from lunch_calendar.share import PROJECT_URL, qr_png
from lunch_calendar.styles import build_css, label_border_property
from lunch_calendar.themes import CalendarTheme

logger = logging.getLogger(__name__)

WEEKDAY_HEADERS = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday"]
SAFE_ICON = "✅"
UNSAFE_ICON = "⛔"
STAR = "&#9733;"

SOURCE_CODE_TEXT = "Scan to view the full school menu online"
PROJECT_CODE_TEXT = "Want your own allergen-friendly lunch calendar? Scan to learn more!"

CodeImage = Callable[[str], bytes]


def filter_label(allergen_names: Sequence[str]) -> str:
    """Headline fragment describing the active allergen filter."""
    if not allergen_names:
        return "No Allergen Filter"
    if len(allergen_names) == 1 and allergen_names[0].lower() == "milk":
        return "Dairy-Free"
    return ", ".join(allergen_names) + " Free"


class _CalendarWriter:
    """Accumulates markup for one render call."""

    def __init__(
        self,
        month: ProcessedMonth,
        forced_home_days: Collection[int],
        theme: CalendarTheme,
        options: CalendarRenderOptions,
    ):
        self.month = month
        self.forced_home_days = forced_home_days
        self.theme = theme
        self.options = options
        self.session_label = month.session_name or "Lunch"
        self.palette = assign_plan_palette(month.plan_names())
        self.plan_order = order_plan_names(self.palette, options.plan_display_order)
        self.labels: dict[date, DayLabel] = label_month(
            month, options.day_label_cycle, options.day_label_start,
        )
        self.lines: list[str] = []

    def emit(self, text: str) -> None:
        self.lines.append(text)

    def is_past(self, day: date) -> bool:
        cutoff = self.options.past_cutoff
        return cutoff is not None and day < cutoff

    # Document

    def head(self, css: str) -> None:
        title = f"{escape(self.month.display_name)} {escape(self.session_label)} Calendar"
        self.emit("<!DOCTYPE html>")
        self.emit('<html lang="en">')
        self.emit("<head>")
        self.emit('<meta charset="UTF-8">')
        self.emit(f"<title>{title}</title>")
        self.emit("<style>")
        self.emit(css)
        self.emit("</style>")
        self.emit("</head>")
        self.emit('<body style="width:10.5in;">')

    def header(self, allergen_names: Sequence[str]) -> None:
        emoji = self.theme.emoji
        self.emit(
            f"<h1>{emoji} {escape(self.month.display_name)} &mdash; "
            f"{escape(filter_label(allergen_names))} {escape(self.session_label)} Calendar {emoji}</h1>"
        )
        if self.month.building_name is not None:
            self.emit(f"<h2>{escape(self.month.building_name)}</h2>")

    def legend(self) -> None:
        self.emit('<div class="legend">')
        self.emit('<span class="legend-item"><span class="swatch safe-swatch"></span> Safe options available</span>')
        self.emit(f'<span class="legend-item"><span class="favorite-star">{STAR}</span> Favorite item</span>')
        self.emit(
            f'<span class="legend-item"><span class="badge home">{HOUSE} {escape(self.session_label)} from Home</span>'
            " No safe options / forced home day</span>"
        )
        self.emit(f'<span class="legend-item"><span class="swatch no-school-swatch"></span> {HOUSE} No School</span>')
        for plan_name in self.plan_order:
            badge = self.palette[plan_name]
            label = escape(self.options.plan_label(plan_name))
            self.emit(f'<span class="legend-item"><span class="badge {badge.css_class}">{label}</span></span>')
        self.emit("</div>")

    def table(self) -> None:
        by_date = {day.date: day for day in self.month.days}
        first = date(self.month.year, self.month.month, 1)
        last = first.replace(day=calendar.monthrange(first.year, first.month)[1])
        current = first - timedelta(days=first.weekday())

        self.emit("<table>")
        self.emit("<thead><tr>")
        self.emit("".join(f"<th>{name}</th>" for name in WEEKDAY_HEADERS))
        self.emit("</tr></thead>")
        self.emit("<tbody>")
        while current <= last:
            self.emit("<tr>")
            for offset in range(5):
                cell_date = current + timedelta(days=offset)
                if cell_date.month != self.month.month:
                    self.emit('<td class="empty"></td>')
                elif cell_date in by_date:
                    self.day_cell(by_date[cell_date])
                else:
                    self.missing_cell(cell_date)
            self.emit("</tr>")
            current += timedelta(days=7)
        self.emit("</tbody>")
        self.emit("</table>")

    # Cells

    def missing_cell(self, cell_date: date) -> None:
        classes = "no-school past-day" if self.is_past(cell_date) else "no-school"
        self.emit(f'<td class="{classes}"><div class="day-number">{cell_date.day}</div></td>')

    def closed_cell(self, day: ProcessedDay) -> None:
        """No-school day, or a weekday with no menu."""
        classes = "no-school past-day" if self.is_past(day.date) else "no-school"
        self.emit(f'<td class="{classes}">')
        self.emit(f'<div class="day-number">{day.date.day}</div>')
        if day.academic_note is not None:
            emoji, message = resolve_holiday(day.academic_note, self.options.holiday_overrides)
            self.emit(f'<div class="no-school-emoji">{emoji}</div>')
            self.emit(f'<div class="no-school-note">{escape(clean_no_school_note(message))}</div>')
        self.emit("</td>")

    def day_cell(self, day: ProcessedDay) -> None:
        if day.is_no_school or not day.has_menu:
            self.closed_cell(day)
            return

        past = self.is_past(day.date)
        label = self.labels.get(day.date)
        has_favorite = any(
            item.is_favorite and not item.contains_allergen
            for line in day.lines
            for item in line.entrees
        )
        forced_home = day.date.weekday() in self.forced_home_days
        home_day = not day.any_line_safe or forced_home

        classes = []
        if has_favorite:
            classes.append("favorite-day")
        if past:
            classes.append("past-day")
        class_attr = f' class="{" ".join(classes)}"' if classes else ""
        style_attr = ' style="position:relative;"' if label is not None or past else ""
        self.emit(f"<td{class_attr}{style_attr}>")

        if label is not None:
            border = label_border_property(self.options.day_label_corner)
            self.emit(f'<div class="day-label" style="{border}: {label.color};"></div>')
            self.emit(f'<div class="day-label-text">{escape(label.label)}</div>')

        self.emit(f'<div class="day-number">{day.date.day}</div>')
        if day.has_special_note:
            self.emit(f'<div class="special-note">{escape(day.academic_note)}</div>')

        lines_by_plan: dict[str, ProcessedLine] = {}
        for line in day.lines:
            lines_by_plan.setdefault(line.plan_name, line)
        if self.options.layout_mode.is_grid:
            self.grid_layout(lines_by_plan, forced_home)
        else:
            self.list_layout(lines_by_plan, home_day, forced_home)
        self.emit("</td>")

    def list_layout(
        self,
        lines_by_plan: Mapping[str, ProcessedLine],
        home_day: bool,
        forced_home: bool,
    ) -> None:
        for plan_name in self.plan_order:
            line = lines_by_plan.get(plan_name)
            if line is None or not line.entrees:
                continue
            allergen_safe = any(not item.contains_allergen for item in line.entrees)
            if not allergen_safe and not self.options.show_unsafe_lines:
                continue

            section = "plan-section"
            if not allergen_safe:
                section += " unsafe"
            elif forced_home:
                section += " forced-home"
            self.emit(f'<div class="{section}">')
            badge = self.palette[plan_name]
            self.emit(
                f'<div><span class="badge {badge.css_class}">'
                f"{escape(self.options.plan_label(plan_name))}</span></div>"
            )
            if allergen_safe:
                self.entree_items(line)
            else:
                self.emit(f'<div class="not-preferred-item">{escape(self.options.unsafe_line_message)}</div>')
            self.emit("</div>")

        if home_day:
            self.emit(f'<div><span class="badge home">{HOUSE} {escape(self.session_label)} from Home</span></div>')

    def grid_layout(self, lines_by_plan: Mapping[str, ProcessedLine], forced_home: bool) -> None:
        buttons_left = self.options.layout_mode is LayoutMode.ICONS_LEFT
        self.emit(f'<div class="day-grid {"buttons-left" if buttons_left else "buttons-right"}">')

        for plan_name in self.plan_order:
            line = lines_by_plan.get(plan_name)
            allergen_safe = line is not None and any(not item.contains_allergen for item in line.entrees)
            if not allergen_safe and not self.options.show_unsafe_lines:
                continue

            badge: PlanBadge = self.palette[plan_name]
            icon = (self.options.plan_icon_overrides.get(plan_name) or "").strip()
            if not icon:
                icon = SAFE_ICON if allergen_safe else UNSAFE_ICON
            if not allergen_safe:
                state = "btn-off"
            elif forced_home:
                state = "btn-forced-home"
            else:
                state = ""

            button = (
                f'<div class="grid-btn {badge.css_class} {state}"><span class="grid-icon">{icon}</span>'
                f'<span class="grid-label">{escape(self.options.plan_label(plan_name))}</span></div>'
            )
            self.emit('<div class="grid-row">')
            if buttons_left:
                self.emit(button)
            self.emit(f'<div class="grid-items" style="background:{badge.color}1a">')
            if allergen_safe:
                self.entree_items(line)
            else:
                self.emit(f'<div class="not-preferred-item">{escape(self.options.unsafe_line_message)}</div>')
            self.emit("</div>")
            if not buttons_left:
                self.emit(button)
            self.emit("</div>")

        button = (
            f'<div class="grid-btn btn-home"><span class="grid-icon">{HOUSE}</span>'
            '<span class="grid-label">Home</span></div>'
        )
        items = (
            f'<div class="grid-items" style="background:{self.theme.home_badge_bg}1a">'
            f'<div class="safe-item">Home {escape(self.session_label)}</div></div>'
        )
        self.emit('<div class="grid-row">')
        self.emit(button if buttons_left else items)
        self.emit(items if buttons_left else button)
        self.emit("</div>")
        self.emit("</div>")

    def entree_items(self, line: ProcessedLine) -> None:
        for item in line.entrees:
            if item.contains_allergen:
                continue
            name = escape(item.name)
            if item.is_not_preferred:
                self.emit(f'<div class="not-preferred-item">{name}</div>')
            elif item.is_favorite:
                self.emit(f'<div class="favorite-item"><span class="favorite-star">{STAR}</span> {name}</div>')
            else:
                self.emit(f'<div class="safe-item">{name}</div>')

    # Footer

    def share_footer(self, code_image: CodeImage, project_url: str) -> None:
        self.emit('<div class="share-footer">')
        if self.options.source_url:
            self.share_group(code_image(self.options.source_url), "Menu source QR code", SOURCE_CODE_TEXT)
        self.share_group(code_image(project_url), "Project QR code", PROJECT_CODE_TEXT)
        self.emit("</div>")

    def share_group(self, png: bytes, alt: str, text: str) -> None:
        encoded = base64.b64encode(png).decode("ascii")
        self.emit('<div class="share-group">')
        self.emit(f'<img src="data:image/png;base64,{encoded}" alt="{alt}" />')
        self.emit(f'<span class="share-text">{text}</span>')
        self.emit("</div>")


def render_calendar(
    month: ProcessedMonth,
    allergen_names: Sequence[str],
    forced_home_days: Collection[int],
    theme: CalendarTheme,
    options: CalendarRenderOptions | None = None,
    code_image: CodeImage | None = None,
) -> str:
    """Render ``month`` to a complete HTML document.

    ``forced_home_days`` holds ``date.weekday()`` numbers (Monday is 0).
    ``code_image`` turns a URL into PNG bytes for the share footer; it
    defaults to the QR generator in ``lunch_calendar.share``. The output
    depends only on the arguments, so identical inputs give identical
    markup.
    """
    options = options or CalendarRenderOptions()
    logger.info("Rendering %s calendar with theme %s", month.display_name, theme.name)

    writer = _CalendarWriter(month, forced_home_days, theme, options)
    writer.head(build_css(theme, options.day_label_corner, writer.palette))
    writer.header(allergen_names)
    writer.legend()
    writer.table()
    if options.show_share_footer:
        writer.share_footer(code_image or qr_png, PROJECT_URL)
    writer.emit("</body>")
    writer.emit("</html>")

    html = "\n".join(writer.lines) + "\n"
    logger.info("Rendered calendar: %d characters", len(html))
    return html
