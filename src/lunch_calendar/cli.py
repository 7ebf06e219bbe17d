"""CLI entry point for the lunch calendar."""

from __future__ import annotations

import argparse
from pathlib import Path

from lunch_calendar.config import DEFAULT_SETTINGS_PATH
from lunch_calendar.log import LOG_LEVELS


def get_settings_path(args: argparse.Namespace) -> Path:
    return Path(args.settings) if args.settings else DEFAULT_SETTINGS_PATH


def cmd_generate(args: argparse.Namespace) -> None:
    from lunch_calendar.generate import run_generate

    run_generate(
        settings_path=get_settings_path(args),
        year=args.year,
        month=args.month,
        har=Path(args.har) if args.har else None,
        output=Path(args.output) if args.output else None,
        session=args.session,
        building=args.building,
        allergens=args.allergens,
        theme=args.theme,
        layout=args.layout,
        share_footer=True if args.share_footer else None,
    )


def cmd_allergens(args: argparse.Namespace) -> None:
    from lunch_calendar.generate import run_allergens

    run_allergens(
        settings_path=get_settings_path(args),
        har=Path(args.har) if args.har else None,
        output_format=args.format,
    )


def cmd_lookup(args: argparse.Namespace) -> None:
    from lunch_calendar.generate import run_lookup

    run_lookup(identifier=args.identifier, output_format=args.format)


def cmd_themes(args: argparse.Namespace) -> None:
    from lunch_calendar.config import load_settings
    from lunch_calendar.themes import run_themes

    hidden = load_settings(get_settings_path(args))["hidden_themes"] or []
    run_themes(month=args.month, hidden=hidden, output_format=args.format)


def cmd_day_labels(args: argparse.Namespace) -> None:
    from lunch_calendar.label_source import DEFAULT_CALENDAR_URL, run_day_labels

    run_day_labels(url=args.url or DEFAULT_CALENDAR_URL, output_format=args.format)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lunch-calendar",
        description="Printable allergen-aware school lunch calendars from LINQ Connect menus",
    )
    parser.add_argument(
        "--settings",
        type=str,
        default=None,
        help=f"Path to settings YAML (default: {DEFAULT_SETTINGS_PATH})",
    )
    parser.add_argument(
        "--log-level",
        choices=LOG_LEVELS,
        default="info",
        help="Logging verbosity (default: info)",
    )
    parser.add_argument(
        "--log-file",
        type=str,
        default=None,
        help="Also write logs to this file",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    # generate
    p_gen = sub.add_parser("generate", help="Build the HTML calendar for one month")
    p_gen.add_argument("--year", type=int, help="Calendar year (default: this year)")
    p_gen.add_argument("--month", type=int, choices=range(1, 13), metavar="1-12",
                       help="Calendar month (default: this month)")
    p_gen.add_argument("--har", type=str, help="Read menu data from a saved HAR capture")
    p_gen.add_argument("--output", "-o", type=str,
                       help="Output file (default: LunchCalendar_YYYY-MM.html)")
    p_gen.add_argument("--session", type=str, help="Serving session, e.g. Lunch or Breakfast")
    p_gen.add_argument("--building", type=str, help="Building name (substring match)")
    p_gen.add_argument("--allergens", type=str, help="Comma-separated allergen names")
    p_gen.add_argument("--theme", type=str, help="Theme name (default: suggested for the month)")
    p_gen.add_argument("--layout", type=str, choices=["List", "IconsLeft", "IconsRight"])
    p_gen.add_argument(
        "--share-footer", action="store_true", help="Add QR codes for the menu and project"
    )
    p_gen.set_defaults(func=cmd_generate)

    # allergens
    p_all = sub.add_parser("allergens", help="List the district's allergen catalog")
    p_all.add_argument("--har", type=str, help="Read from a saved HAR capture")
    p_all.add_argument("--format", type=str, choices=["json", "table"], default="table")
    p_all.set_defaults(func=cmd_allergens)

    # lookup
    p_look = sub.add_parser("lookup", help="Show the district and buildings for a menu code")
    p_look.add_argument("identifier", type=str, help="Menu identifier, e.g. YVAM38")
    p_look.add_argument("--format", type=str, choices=["json", "table"], default="table")
    p_look.set_defaults(func=cmd_lookup)

    # themes
    p_themes = sub.add_parser("themes", help="List calendar themes")
    p_themes.add_argument("--month", type=int, choices=range(1, 13), metavar="1-12",
                          help="Mark the theme suggested for this month")
    p_themes.add_argument("--format", type=str, choices=["json", "table"], default="table")
    p_themes.set_defaults(func=cmd_themes)

    # day-labels
    p_labels = sub.add_parser("day-labels", help="Suggest a day label cycle from a school calendar page")
    p_labels.add_argument("--url", type=str, help="Finalsite calendar page URL")
    p_labels.add_argument("--format", type=str, choices=["json", "table"], default="table")
    p_labels.set_defaults(func=cmd_day_labels)

    return parser


def main() -> None:
    from lunch_calendar.log import setup_logging

    parser = build_parser()
    args = parser.parse_args()

    log_file = Path(args.log_file) if args.log_file else None
    setup_logging(level=args.log_level, log_file=log_file)

    args.func(args)


if __name__ == "__main__":
    main()
