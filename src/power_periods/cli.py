"""CLI for querying power on/off statistics from an event file."""

import argparse
import logging
import sys

from pydantic import BaseModel, TypeAdapter

from power_periods.config import LOG_LEVELS, get_settings
from power_periods.daily import DayBucket
from power_periods.event import PowerEvent, validate_datetime
from power_periods.source import FileEventSource
from power_periods.statistics import PowerStatistics

_BUCKETS = TypeAdapter(list[DayBucket])
_EVENTS = TypeAdapter(list[PowerEvent])


def _print_model(model: BaseModel) -> None:
    print(model.model_dump_json(by_alias=True))


def _print_list(adapter: TypeAdapter, values: list) -> None:
    print(adapter.dump_json(values, by_alias=True).decode())


def _build_parser(settings) -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--events",
        default=str(settings.events_file),
        help=f"Event file, .json records or '<timestamp> ON|OFF' lines "
        f"(default: {settings.events_file}).",
    )
    common.add_argument(
        "--utc-offset",
        type=float,
        default=settings.utc_offset_hours,
        help=f"Fixed local UTC offset in hours (default: {settings.utc_offset_hours:g}).",
    )
    common.add_argument(
        "--now",
        help="Treat this timestamp as the current instant (default: system clock).",
    )
    common.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        default=settings.log_level.upper(),
        help=f"Logging level (default: {settings.log_level}).",
    )

    parser = argparse.ArgumentParser(
        prog="power-periods",
        description="Reconstruct power on/off periods and statistics from events.",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    for name, help_text in (
        ("stats", "Periods and on/off totals for a date window."),
        ("daily", "Per-day on/off totals for a date window."),
    ):
        sub = commands.add_parser(name, parents=[common], help=help_text)
        sub.add_argument("start_date", help="First local date, YYYY-MM-DD.")
        sub.add_argument("end_date", help="Last local date, YYYY-MM-DD.")

    events = commands.add_parser("events", parents=[common], help="List events.")
    events.add_argument("--start-date", help="First local date, YYYY-MM-DD.")
    events.add_argument("--end-date", help="Last local date, YYYY-MM-DD.")
    events.add_argument("--limit", type=int, help="Only the most recent N events.")

    commands.add_parser(
        "summary", parents=[common], help="Event history overview, last 7 and 30 days."
    )
    return parser


def _fail(exc: Exception) -> None:
    print(f"error: {exc}", file=sys.stderr)
    sys.exit(1)


def main(argv: list[str] | None = None) -> None:
    try:
        settings = get_settings()
    except ValueError as exc:
        _fail(exc)
    args = _build_parser(settings).parse_args(argv)

    logging.basicConfig(
        level=args.log_level,
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    service = PowerStatistics(
        FileEventSource(args.events), utc_offset_hours=args.utc_offset
    )

    try:
        now = validate_datetime(args.now) if args.now else None
        if args.command == "stats":
            _print_model(
                service.calculate_statistics(args.start_date, args.end_date, now)
            )
        elif args.command == "daily":
            buckets = service.get_daily_statistics(args.start_date, args.end_date, now)
            _print_list(_BUCKETS, buckets)
        elif args.command == "events":
            if args.start_date or args.end_date:
                found = service.get_events_by_date_range(
                    args.start_date, args.end_date, limit=args.limit
                )
            else:
                found = service.get_events(limit=args.limit)
            _print_list(_EVENTS, found)
        else:
            _print_model(service.summary(now))
    except (ValueError, OverflowError) as exc:
        _fail(exc)
