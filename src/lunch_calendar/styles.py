"""Inline stylesheet for the printable calendar."""

from __future__ import annotations

from collections.abc import Mapping

from lunch_calendar.models import LabelCorner
from lunch_calendar.palette import PlanBadge
from lunch_calendar.themes import CalendarTheme

NO_SCHOOL_BG = "#e9ecef"

BASE_CSS = """\
@page {{ size: landscape; margin: 0.25in; }}
* {{ box-sizing: border-box; margin: 0; padding: 0; }}
body {{
  font-family: 'Segoe UI', Arial, sans-serif;
  font-size: 11px;
  padding: 0.25in;
  background: {body_bg};
}}
body, td, th, .badge, .swatch, .grid-btn, .grid-items, .day-label {{
  print-color-adjust: exact;
  -webkit-print-color-adjust: exact;
}}
h1 {{ font-size: 18px; margin-bottom: 2px; text-align: center; color: {title_color}; }}
h2 {{ font-size: 13px; font-weight: normal; color: #666; margin-bottom: 6px; text-align: center; }}
.legend {{
  display: flex; gap: 12px; justify-content: center; flex-wrap: wrap;
  margin-bottom: 6px; font-size: 10px;
}}
.legend-item {{ display: flex; align-items: center; gap: 4px; }}
.swatch {{ display: inline-block; width: 14px; height: 14px; border-radius: 2px; }}
.safe-swatch {{ background: {safe_color}; }}
.no-school-swatch {{ background: {no_school_bg}; }}
table {{ width: 100%; border-collapse: collapse; table-layout: fixed; }}
th {{ background: {header_bg}; color: {header_fg}; padding: 4px; text-align: center; font-size: 12px; }}
td {{ border: 1px solid {accent_border}; padding: 3px 4px; vertical-align: top; overflow: hidden; }}
td.empty {{ background: #f8f9fa; }}
td.no-school {{ background: {no_school_bg}; color: #6c757d; vertical-align: middle; text-align: center; }}
.day-number {{ font-size: 14px; font-weight: bold; margin-bottom: 2px; }}
.badge {{
  display: inline-block; padding: 1px 5px; border-radius: 3px;
  color: white; font-size: 9px; font-weight: bold; margin-bottom: 1px;
}}
.badge.home {{ background: {home_badge_bg}; }}
.plan-section {{ margin-bottom: 2px; }}
.plan-section.forced-home .badge, .plan-section.forced-home .safe-item {{ opacity: 0.5; filter: grayscale(0.6); }}
.plan-section.unsafe .badge {{ background: #ccc !important; color: #f0f0f0; }}
.safe-item, .favorite-item {{ color: {safe_color}; font-weight: bold; font-size: 10px; }}
.favorite-star {{ color: {favorite_star}; font-size: 11px; }}
.favorite-day {{ border: 2px solid {favorite_border} !important; background: {favorite_bg}; }}
.not-preferred-item {{ color: #6c757d; font-style: italic; font-size: 10px; }}
.no-school-note {{ font-style: italic; font-size: 11px; margin-top: 4px; text-align: center; }}
.no-school-emoji {{ font-size: 20px; text-align: center; }}
.special-note {{ font-size: 9px; color: #856404; font-style: italic; }}
.day-grid {{ display: grid; gap: 2px 3px; }}
.day-grid.buttons-left {{ grid-template-columns: 38px 1fr; }}
.day-grid.buttons-right {{ grid-template-columns: 1fr 38px; }}
.grid-row {{ display: contents; }}
.grid-btn {{
  display: flex; flex-direction: column; align-items: center; justify-content: center;
  padding: 1px 2px; border-radius: 4px; color: white; font-weight: 700;
  text-align: center; line-height: 1; min-height: 22px; overflow: hidden;
  box-shadow: 0 1px 0 rgba(0,0,0,0.2), inset 0 1px 0 rgba(255,255,255,0.2);
}}
.grid-btn .grid-icon {{ font-size: 12px; line-height: 1; }}
.grid-btn .grid-label {{
  font-size: 6px; line-height: 1; white-space: nowrap;
  text-overflow: ellipsis; overflow: hidden; max-width: 100%;
}}
.grid-btn.btn-off {{ background: #ccc !important; color: #f0f0f0; box-shadow: none; opacity: 0.5; }}
.grid-btn.btn-forced-home {{ opacity: 0.5; filter: grayscale(0.6); box-shadow: none; }}
.grid-btn.btn-home {{ background: {home_badge_bg}; }}
.grid-items {{ min-width: 0; padding: 1px 3px; border-radius: 3px; }}
td.past-day {{ position: relative; opacity: 0.45; }}
td.past-day::after {{
  content: '\\2715'; position: absolute; top: 50%; left: 50%;
  transform: translate(-50%, -50%); font-size: 48px; font-weight: bold;
  color: rgba(0, 0, 0, 0.12); pointer-events: none;
}}
.day-label {{ position: absolute; width: 0; height: 0; border-style: solid; border-color: transparent; }}
.day-label-text {{
  position: absolute; font-size: 7px; font-weight: bold; color: white;
  transform-origin: center; pointer-events: none; white-space: nowrap;
}}
.share-footer {{
  margin-top: 12px; padding: 8px 16px; font-size: 11px; color: #6c757d;
  border-top: 1px solid #dee2e6; display: flex; align-items: center;
  justify-content: center; gap: 24px;
}}
.share-footer .share-group {{ display: flex; align-items: center; gap: 8px; }}
.share-footer img {{ width: 64px; height: 64px; }}
.share-footer .share-text {{ font-size: 12px; color: #495057; }}
@media print {{
  body {{ padding: 0; margin: 0; zoom: 1 !important; }}
  table {{ page-break-inside: avoid; }}
  tr, td {{ page-break-inside: avoid; }}
}}
"""

# corner -> (border-width, triangle position, text position, text rotation, colored border side)
CORNER_GEOMETRY: dict[LabelCorner, tuple[str, str, str, str, str]] = {
    LabelCorner.TOP_RIGHT: (
        "0 32px 32px 0", "top:0;right:0;", "top:2px;right:1px;", "rotate(45deg)", "border-right-color",
    ),
    LabelCorner.TOP_LEFT: (
        "0 0 32px 32px", "top:0;left:0;", "top:2px;left:1px;", "rotate(-45deg)", "border-left-color",
    ),
    LabelCorner.BOTTOM_RIGHT: (
        "32px 0 0 32px", "bottom:0;right:0;", "bottom:2px;right:1px;", "rotate(-45deg)", "border-left-color",
    ),
    LabelCorner.BOTTOM_LEFT: (
        "32px 32px 0 0", "bottom:0;left:0;", "bottom:2px;left:1px;", "rotate(45deg)", "border-right-color",
    ),
}


def label_border_property(corner: LabelCorner) -> str:
    return CORNER_GEOMETRY[corner][4]


def build_css(
    theme: CalendarTheme,
    corner: LabelCorner,
    palette: Mapping[str, PlanBadge],
) -> str:
    """Full stylesheet: theme colors, label corner, and one rule per plan color."""
    parts = [
        BASE_CSS.format(
            body_bg=theme.body_bg,
            title_color=theme.title_color,
            safe_color=theme.safe_color,
            no_school_bg=NO_SCHOOL_BG,
            header_bg=theme.header_bg,
            header_fg=theme.header_fg,
            accent_border=theme.accent_border,
            home_badge_bg=theme.home_badge_bg,
            favorite_star=theme.favorite_star,
            favorite_border=theme.favorite_border,
            favorite_bg=theme.favorite_bg,
        )
    ]

    border_width, triangle_pos, text_pos, rotation, _ = CORNER_GEOMETRY[corner]
    parts.append(f".day-label {{ border-width:{border_width};{triangle_pos} }}\n")
    parts.append(f".day-label-text {{ {text_pos}transform:{rotation}; }}\n")

    if theme.cell_pattern:
        parts.append(f"td {{ background-image: {theme.cell_pattern}; background-size: 20px 20px; }}\n")
        parts.append("td.empty, td.no-school { background-image: none; }\n")

    for badge in palette.values():
        parts.append(f".{badge.css_class} {{ background: {badge.color}; }}\n")
        parts.append(f".grid-btn.{badge.css_class} {{ background: {badge.color}; }}\n")

    return "".join(parts)
