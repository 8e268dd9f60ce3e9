"""
Command-line entry point for the garage calendar.

Renders the Day/Week/Month layout of a bookings export, or lists the
free slots for a set of services on a date.

Usage:
    python main.py render --bookings bookings.json --mode Week --date 2025-03-18
    python main.py render --bookings bookings.json --mode Day --date 2025-03-18 --bay 2
    python main.py slots --bookings bookings.json --garage garage.json \\
        --date 2025-03-18 --services oil-change,mot
"""

import argparse
import asyncio
import json
import logging
import sys
from datetime import date
from pathlib import Path

from garage_calendar.config import settings
from garage_calendar.schemas.garage_schema import Garage
from garage_calendar.schemas.layout_schema import DayColumn, DayLayout, MonthLayout, ViewMode, WeekLayout
from garage_calendar.schemas.slot_schema import SlotRequest
from garage_calendar.store import ScheduleStore
from garage_calendar.tools.availability import LocalSlotSource

logger = logging.getLogger(__name__)


def _load_json(path: str):
    file_path = Path(path)
    if not file_path.exists():
        logger.error("File not found: %s", file_path)
        sys.exit(1)
    return json.loads(file_path.read_text(encoding="utf-8"))


def _load_store(path: str) -> ScheduleStore:
    data = _load_json(path)
    raw = data.get("bookings", []) if isinstance(data, dict) else data
    store = ScheduleStore()
    kept = store.load_raw(raw)
    logger.info("Loaded %d booking(s) from %s", kept, path)
    return store


def _format_column(column: DayColumn) -> list[str]:
    lines = [f"{column.day.isoformat()} ({column.day.strftime('%a')})"]
    if not column.blocks:
        lines.append("  (no bookings)")
    for block in column.blocks:
        start = int(block.top_px / settings.layout.pixels_per_minute)
        lines.append(
            f"  {start // 60:02d}:{start % 60:02d} +{int(block.height_px)}px "
            f"lane {block.stack_offset_index} left {block.left_px}px "
            f"[{block.detail.value}] {block.headline}"
        )
        for service in block.services:
            lines.append(f"      - {service.name} {service.technician}".rstrip())
    return lines


def format_layout(layout) -> str:
    """Plain-text rendering of a layout for the terminal."""
    lines: list[str] = []
    if isinstance(layout, DayLayout):
        lines.extend(_format_column(layout.column))
    elif isinstance(layout, WeekLayout):
        for column in layout.columns:
            lines.extend(_format_column(column))
    elif isinstance(layout, MonthLayout):
        lines.append(" | ".join(f"{d:<14}" for d in ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]))
        for week in layout.weeks:
            for cell in week:
                if cell.day is None or not cell.entries:
                    continue
                summary = ", ".join(e.label for e in cell.entries)
                more = f" {cell.more_label}" if cell.more_label else ""
                lines.append(f"  {cell.day.isoformat()}: {summary}{more}")
    return "\n".join(lines)


def _cmd_render(args: argparse.Namespace) -> None:
    store = _load_store(args.bookings)
    store.set_view_mode(ViewMode(args.mode))
    store.set_selected_date(date.fromisoformat(args.date))
    store.set_selected_bay(args.bay)
    sys.stdout.write(format_layout(store.layout()) + "\n")


def _cmd_slots(args: argparse.Namespace) -> None:
    store = _load_store(args.bookings)
    garage = Garage.model_validate(_load_json(args.garage))
    source = LocalSlotSource(
        store.bookings,
        bays=garage.bays,
        technicians=garage.technicians,
        business_hours=garage.business_hours,
        bay_breaks=garage.bay_breaks,
    )
    request = SlotRequest(
        garage_id=garage.id,
        date=date.fromisoformat(args.date),
        service_ids=[s.strip() for s in args.services.split(",") if s.strip()],
    )
    slots = asyncio.run(source.fetch_slots(request))
    if not slots:
        sys.stdout.write("No slots available. Please select a service and date.\n")
        return
    for slot in slots:
        services = "; ".join(
            f"{svc.service.name} {svc.start_time:%H:%M}-{svc.end_time:%H:%M} "
            f"({svc.technician.first_name} {svc.technician.last_name})"
            for svc in slot.services
        )
        sys.stdout.write(f"{slot.bay.name}: {services}\n")


def main() -> None:
    parser = argparse.ArgumentParser(description="Garage scheduling calendar tools.")
    sub = parser.add_subparsers(dest="command", required=True)

    render = sub.add_parser("render", help="Print the calendar layout for a view.")
    render.add_argument("--bookings", required=True, help="Path to a bookings JSON export.")
    render.add_argument("--mode", choices=[m.value for m in ViewMode], default=ViewMode.WEEK.value)
    render.add_argument("--date", default=date.today().isoformat(), help="Reference date (YYYY-MM-DD).")
    render.add_argument("--bay", default="all", help="Bay number to show, or 'all'.")
    render.set_defaults(func=_cmd_render)

    slots = sub.add_parser("slots", help="List free slots for services on a date.")
    slots.add_argument("--bookings", required=True, help="Path to a bookings JSON export.")
    slots.add_argument("--garage", required=True, help="Path to a garage JSON (bays, technicians, hours).")
    slots.add_argument("--date", required=True, help="Date to search (YYYY-MM-DD).")
    slots.add_argument("--services", required=True, help="Comma-separated service ids.")
    slots.set_defaults(func=_cmd_slots)

    args = parser.parse_args()
    args.func(args)


if __name__ == "__main__":
    main()
