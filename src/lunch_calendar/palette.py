"""Per-plan badge colors and plan display ordering."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

LINE_PALETTE = [
    "#0d6efd",
    "#6f42c1",
    "#d63384",
    "#fd7e14",
    "#20c997",
    "#0dcaf0",
    "#6610f2",
    "#e83e8c",
    "#198754",
    "#dc3545",
]


@dataclass(frozen=True)
class PlanBadge:
    css_class: str
    color: str


def assign_plan_palette(plan_names: Iterable[str]) -> dict[str, PlanBadge]:
    """Give each distinct plan a CSS class and color.

    Names are sorted alphabetically first so the assignment only depends on
    which plans exist, not on feed order. Colors wrap after ten plans.
    """
    palette: dict[str, PlanBadge] = {}
    for i, name in enumerate(sorted(set(plan_names))):
        palette[name] = PlanBadge(
            css_class=f"line-{i}",
            color=LINE_PALETTE[i % len(LINE_PALETTE)],
        )
    return palette


def order_plan_names(plan_names: Iterable[str], display_order: Iterable[str] = ()) -> list[str]:
    """User-ordered plans first, then the rest alphabetically.

    Names in ``display_order`` that are not known plans are ignored.
    """
    remaining = set(plan_names)
    ordered: list[str] = []
    for name in display_order:
        if name in remaining:
            remaining.remove(name)
            ordered.append(name)
    ordered.extend(sorted(remaining))
    return ordered
