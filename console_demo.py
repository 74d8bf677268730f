"""
Offline console demo: drives the scheduling engine against the seeded
in-memory stores. No database, no network calls.

Usage:
    python console_demo.py
    python console_demo.py --scenario race
    python console_demo.py --scenario waitlist
"""

import argparse
import asyncio
import shlex
from datetime import date, datetime, time, timedelta
from typing import Optional

from booking_engine.config import settings
from booking_engine.engine import SchedulingEngine
from booking_engine.errors import SchedulingError
from booking_engine.logging_context import new_request_id
from booking_engine.scheduling.intervals import Interval
from booking_engine.utils import combine_local, day_of_week

BLUE = "\033[94m"
GREEN = "\033[92m"
YELLOW = "\033[93m"
RED = "\033[91m"
DIM = "\033[2m"
RESET = "\033[0m"
BOLD = "\033[1m"

DEMO_CLIENT = {"name": "Jane Doe", "email": "jane@phaceskin.com.au", "phone": "0412 345 678"}
RIVAL_CLIENT = {"name": "Sam Lee", "email": "sam@phaceskin.com.au", "phone": "0400 111 222"}


def next_weekday(target: int, today: Optional[date] = None) -> date:
    """Next date strictly after ``today`` falling on ``target`` (0 = Sunday)."""
    day = (today or date.today()) + timedelta(days=1)
    while day_of_week(day) != target:
        day += timedelta(days=1)
    return day


class ConsoleDemo:
    """Runs scripted scheduling scenarios and a small command shell."""

    def __init__(self) -> None:
        self.engine = SchedulingEngine.in_memory()
        self.tz = settings.scheduling.tz
        self.monday = next_weekday(1)

    def say(self, text: str) -> None:
        print(f"{GREEN}{text}{RESET}")

    def system_log(self, text: str) -> None:
        print(f"{DIM}  >> {text}{RESET}")

    def error(self, exc: SchedulingError) -> None:
        retry = " (retryable)" if exc.retryable else ""
        print(f"{RED}{type(exc).__name__}{retry}: {exc.message}{RESET}")

    def _fmt(self, slot: Interval) -> str:
        return slot.start.astimezone(self.tz).strftime("%H:%M")

    def _banner(self, title: str) -> None:
        print()
        print(f"{BOLD}{'=' * 60}{RESET}")
        print(f"{BOLD}  BOOKING ENGINE - {title}{RESET}")
        print(f"{BOLD}  Business: {settings.business.name} ({settings.scheduling.business_timezone}){RESET}")
        print(f"{BOLD}{'=' * 60}{RESET}")

    async def show_availability(
        self, service_id: str, staff_id: str, day: date, addon_ids: Optional[list[str]] = None
    ) -> list[Interval]:
        result = await self.engine.get_availability(service_id, staff_id, day, addon_ids)
        self.system_log(
            f"{service_id} + {addon_ids or []} with {staff_id}: "
            f"{result.total_duration} min, ${result.total_price}"
        )
        if result.slots:
            starts = ", ".join(self._fmt(s) for s in result.slots)
            self.say(f"{len(result.slots)} slots on {day.isoformat()}: {starts}")
        else:
            self.say(result.message)
        self.system_log(
            f"staff_available={result.staff_available} is_fully_booked={result.is_fully_booked}"
        )
        return result.slots

    # ------------------------------------------------------------------ #
    # Scenarios
    # ------------------------------------------------------------------ #

    async def scenario_availability(self) -> None:
        await self.show_availability("signature-facial", "staff-amelia", self.monday)
        await self.show_availability(
            "signature-facial", "staff-amelia", self.monday, ["led-therapy", "dermaplaning"]
        )
        sunday = next_weekday(0)
        await self.show_availability("signature-facial", "staff-amelia", sunday)

    async def scenario_booking(self) -> None:
        slots = await self.show_availability("signature-facial", "staff-amelia", self.monday)
        chosen = slots[4]
        appointment = await self.engine.create_appointment(
            "signature-facial", "staff-amelia", chosen.start, client=DEMO_CLIENT
        )
        self.say(f"Booked {appointment.id} at {self._fmt(chosen)} ({appointment.status.value})")
        await self.show_availability("signature-facial", "staff-amelia", self.monday)

        confirmed = await self.engine.update_appointment_status(appointment.id, "confirmed")
        self.say(f"{confirmed.id} is now {confirmed.status.value}")
        try:
            await self.engine.update_appointment_status(appointment.id, "requested")
        except SchedulingError as exc:
            self.error(exc)

    async def scenario_race(self) -> None:
        start = combine_local(self.monday, time(11, 0), self.tz)
        self.system_log(f"Two clients book staff-amelia at {start.isoformat()} concurrently")
        outcomes = await asyncio.gather(
            self.engine.create_appointment("signature-facial", "staff-amelia", start, client=DEMO_CLIENT),
            self.engine.create_appointment("hydrafacial", "staff-amelia", start, client=RIVAL_CLIENT),
            return_exceptions=True,
        )
        for outcome in outcomes:
            if isinstance(outcome, SchedulingError):
                self.error(outcome)
            else:
                self.say(f"Booked {outcome.id} for {outcome.client.name}")

    async def scenario_recurring(self) -> None:
        lunch_start = combine_local(self.monday, time(12, 0), self.tz)
        record = await self.engine.create_blocked_time(
            "staff-amelia",
            lunch_start,
            lunch_start + timedelta(hours=1),
            reason="Team meeting",
            recurring={"frequency": "weekly", "until": lunch_start + timedelta(weeks=3)},
        )
        self.say(f"Stored blocked time {record.id} (weekly, 4 occurrences)")
        window_end = lunch_start + timedelta(weeks=6)
        for occurrence in await self.engine.list_blocked_intervals(
            "staff-amelia", lunch_start - timedelta(hours=12), window_end
        ):
            self.system_log(f"Blocked {occurrence.start.isoformat()} - {occurrence.end.isoformat()}")
        await self.show_availability("signature-facial", "staff-amelia", self.monday + timedelta(weeks=2))

    async def scenario_waitlist(self) -> None:
        start = combine_local(self.monday, time(9, 0), self.tz)
        appointment = await self.engine.create_appointment(
            "signature-facial", "staff-amelia", start, client=RIVAL_CLIENT
        )
        entry = await self.engine.add_to_waitlist(
            "signature-facial", DEMO_CLIENT, [self.monday], ["staff-amelia"], notes="Mornings only"
        )
        self.say(f"Waitlist entry {entry.id} is {entry.status.value}")

        await self.engine.update_appointment_status(appointment.id, "cancelled")
        self.say(f"Cancelled {appointment.id}")
        for contacted in await self.engine.list_waitlist("contacted"):
            self.say(f"Waitlist entry {contacted.id} is {contacted.status.value}: {contacted.notes}")

    SCENARIOS = {
        "availability": scenario_availability,
        "booking": scenario_booking,
        "race": scenario_race,
        "recurring": scenario_recurring,
        "waitlist": scenario_waitlist,
    }

    async def run_scenario(self, scenario: str) -> None:
        """Auto-play a pre-scripted scenario for demo purposes."""
        handler = self.SCENARIOS.get(scenario)
        if handler is None:
            print(f"{RED}Unknown scenario: {scenario}{RESET}")
            return

        self._banner(f"Scenario: {scenario}")
        new_request_id("DEMO")
        try:
            await handler(self)
        except SchedulingError as exc:
            self.error(exc)
        print(f"{BOLD}{'=' * 60}{RESET}")

    # ------------------------------------------------------------------ #
    # Interactive shell
    # ------------------------------------------------------------------ #

    HELP = (
        "Commands:\n"
        "  avail <service> <staff> <YYYY-MM-DD> [addon ...]\n"
        "  book <service> <staff> <YYYY-MM-DDTHH:MM> [addon ...]\n"
        "  status <appointment-id> <status>\n"
        "  staff <service>\n"
        "  quit"
    )

    async def _handle(self, words: list[str]) -> None:
        command, args = words[0].lower(), words[1:]
        if command == "avail" and len(args) >= 3:
            await self.show_availability(args[0], args[1], args[2], args[3:])
        elif command == "book" and len(args) >= 3:
            start = datetime.fromisoformat(args[2]) if "T" in args[2] else args[2]
            appointment = await self.engine.create_appointment(
                args[0], args[1], start, args[3:], client=DEMO_CLIENT
            )
            self.say(f"Booked {appointment.id}: {appointment.start_time.isoformat()}")
        elif command == "status" and len(args) == 2:
            appointment = await self.engine.update_appointment_status(args[0], args[1])
            self.say(f"{appointment.id} is now {appointment.status.value}")
        elif command == "staff" and len(args) == 1:
            for member in await self.engine.list_staff_for_service(args[0]):
                self.say(f"{member.id}: {member.name}")
        else:
            print(self.HELP)

    async def run(self) -> None:
        self._banner("Console Demo")
        print(self.HELP)
        while True:
            line = input(f"\n{BLUE}> {RESET}").strip()
            if not line:
                continue
            if line.lower() in ("quit", "exit", "q"):
                print(f"\n{DIM}Session ended.{RESET}")
                return
            new_request_id("DEMO")
            try:
                await self._handle(shlex.split(line))
            except SchedulingError as exc:
                self.error(exc)
            except ValueError as exc:
                print(f"{YELLOW}{exc}{RESET}")


def main() -> None:
    parser = argparse.ArgumentParser(description="Offline scheduling engine demo")
    parser.add_argument(
        "--scenario",
        choices=sorted(ConsoleDemo.SCENARIOS),
        default=None,
        help="Auto-play a pre-scripted scenario instead of interactive mode",
    )
    args = parser.parse_args()

    demo = ConsoleDemo()
    if args.scenario:
        asyncio.run(demo.run_scenario(args.scenario))
    else:
        asyncio.run(demo.run())


if __name__ == "__main__":
    main()
