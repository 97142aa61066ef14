#!/usr/bin/env python3
"""
Interactive local booking harness (no HTTP surface).

Usage:
  python3 scripts/book_local.py

What it does:
- Builds one BookingCoordinator through the project wiring
- Lets you pick a date, a service and a time, then submit contact details
- Prints the state after every transition
"""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from slot_booking.domain.entities.contact_info import ContactInfo
from slot_booking.domain.entities.selection_state import SelectionState
from slot_booking.domain.entities.time_window import parse_calendar_day
from slot_booking.wiring.dependencies import build_coordinator, shutdown_dependencies

HELP = """Commands:
  dates              list available dates
  date YYYY-MM-DD    choose a date
  services           list services
  service NAME       choose a service
  times              list times for the chosen date and service
  time HH:MM         choose a time
  submit NAME EMAIL  submit the booking
  refresh            refetch windows
  /quit              exit
"""


def _print_state(state: SelectionState) -> None:
    print(
        f"  phase={state.phase.value} date={state.chosen_date} "
        f"service={state.service.name if state.service else None} "
        f"time={state.slot.start.strftime('%H:%M') if state.slot else None}"
    )
    if state.availability_error:
        print(f"  ! {state.availability_error}")
    if state.catalog_error:
        print(f"  ! {state.catalog_error}")
    if state.last_error:
        print(f"  ! {state.last_error.kind.value}: {state.last_error.message}")
        for field, message in state.last_error.field_errors.items():
            print(f"    {field}: {message}")
    if state.redirect_url:
        print(f"  -> redirect to {state.redirect_url}")


async def _handle(coordinator, command: str, args: list[str]) -> None:
    if command == "dates":
        for day in sorted(coordinator.available_dates):
            print(f"  {day.isoformat()}")
    elif command == "date" and args:
        coordinator.choose_date(parse_calendar_day(args[0]))
    elif command == "services":
        for service in coordinator.services:
            print(f"  {service.name} ({service.duration_minutes} min)")
    elif command == "service" and args:
        coordinator.choose_service(" ".join(args))
    elif command == "times":
        if not coordinator.slots:
            print("  No times available for this day and service.")
        for slot in coordinator.slots:
            print(f"  {slot.start.strftime('%H:%M')} - {slot.end.strftime('%H:%M')}")
    elif command == "time" and args:
        match = [s for s in coordinator.slots if s.start.strftime("%H:%M") == args[0]]
        if not match:
            print("  That time is not offered.")
            return
        coordinator.choose_time(match[0])
    elif command == "submit" and len(args) >= 2:
        result = await coordinator.submit(ContactInfo(name=" ".join(args[:-1]), email=args[-1]))
        print(f"  result: {result.action}")
        if result.confirmation:
            print(f"  booked {result.confirmation.service_name} at {result.confirmation.slot.start.isoformat()}")
    elif command == "refresh":
        await coordinator.refresh()
    else:
        print(HELP)


async def main() -> None:
    coordinator = build_coordinator()
    coordinator.subscribe(_print_state)
    print("\nLocal Booking Harness")
    print("-" * 60)
    print(HELP)
    await coordinator.load()

    try:
        while True:
            try:
                line = input("> ").strip()
            except (EOFError, KeyboardInterrupt):
                print()
                break
            if not line:
                continue
            if line == "/quit":
                break
            command, *args = line.split()
            try:
                await _handle(coordinator, command.lower(), args)
            except ValueError as e:
                print(f"  ! {e}")
    finally:
        await shutdown_dependencies()


if __name__ == "__main__":
    asyncio.run(main())
