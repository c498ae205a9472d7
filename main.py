"""
GrowthHub Core — Entry Point.

    python main.py calendar [YEAR MONTH]
    python main.py schedule "Post A" "Post B" --weekdays 1 3
    python main.py session [--email E [--company C] | --clear]
"""

import argparse
import asyncio
import logging
from datetime import date

from growthhub.config import settings

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL, logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)

from growthhub.core.calendar_grid import get_week_number, get_week_rows, is_today
from growthhub.core.content_scheduler import generate_schedule, schedule_is_complete
from growthhub.data.asset_store import AssetStore


def _print_calendar(year: int, month: int) -> None:
    print(f"{year}-{month:02d}")
    print("Wk   Mo   Tu   We   Th   Fr   Sa   Su")
    for week in get_week_rows(year, month):
        cells = []
        for day in week:
            label = f"{day.date.day:2d}"
            if is_today(day.date):
                label = f"*{label}*"
            elif not day.is_current_month:
                label = f"[{label}]"
            else:
                label = f" {label} "
            cells.append(label)
        print(f"{get_week_number(week[0].date):2d}  " + " ".join(cells))


def _print_schedule(items: list[str], weekdays: list[int], skip: list[str]) -> None:
    schedule = generate_schedule(items, weekdays, set(skip))
    for key, item in schedule.items():
        print(f"{key}  {item}")
    if not schedule_is_complete(items, schedule):
        print(f"Warning: only {len(schedule)} of {len(items)} items could be scheduled.")


async def _session(email: str | None, company: str | None, clear: bool) -> None:
    store = AssetStore()
    if clear:
        await store.clear_last_session()
        print("Last session cleared.")
    elif email:
        await store.set_last_session(email, company)
        print(f"Last session set to {email}.")
    else:
        session = await store.get_last_session()
        if session is None:
            print("No saved session.")
        else:
            company_text = f" ({session.company_id})" if session.company_id else ""
            print(f"Last session: {session.email}{company_text}")
    if store.is_using_fallback_mode():
        print("Note: durable storage unavailable, running in memory only.")


def main() -> None:
    parser = argparse.ArgumentParser(prog="growthhub")
    sub = parser.add_subparsers(dest="command", required=True)

    cal = sub.add_parser("calendar", help="Print a month grid")
    cal.add_argument("year", type=int, nargs="?")
    cal.add_argument("month", type=int, nargs="?")

    sch = sub.add_parser("schedule", help="Assign items to free weekdays")
    sch.add_argument("items", nargs="+")
    sch.add_argument("--weekdays", type=int, nargs="+", required=True,
                     help="0=Sunday .. 6=Saturday")
    sch.add_argument("--skip", nargs="*", default=[], help="Taken YYYY-MM-DD dates")

    ses = sub.add_parser("session", help="Show, set or clear the last session")
    ses.add_argument("--email")
    ses.add_argument("--company")
    ses.add_argument("--clear", action="store_true")

    args = parser.parse_args()

    if args.command == "calendar":
        today = date.today()
        _print_calendar(args.year or today.year, args.month or today.month)
    elif args.command == "schedule":
        _print_schedule(args.items, args.weekdays, args.skip)
    else:
        asyncio.run(_session(args.email, args.company, args.clear))


if __name__ == "__main__":
    main()
