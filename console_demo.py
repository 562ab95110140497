"""
Offline console demo: walks the availability and booking flow end to end.

Runs against the seeded in-memory catalog and ledger through the same
operations an API layer would call. No network, no database.

Usage:
    python console_demo.py
    python console_demo.py --scenario race
    python console_demo.py --scenario review
"""

import argparse
import asyncio
from datetime import date, timedelta
from typing import Any

from booking_core.config import settings
from booking_core.tools import operations

BLUE = "\033[94m"
GREEN = "\033[92m"
YELLOW = "\033[93m"
RED = "\033[91m"
DIM = "\033[2m"
RESET = "\033[0m"
BOLD = "\033[1m"

PROVIDER_ID = "1"
SERVICE_ID = "1"


def next_monday(today: date) -> date:
    return today + timedelta(days=(7 - today.weekday()) % 7 or 7)


class ConsoleSession:
    """Plays scripted booking scenarios in the terminal."""

    def __init__(self) -> None:
        self.system = operations.reset()
        self.day = next_monday(date.today()).isoformat()

    def step(self, text: str) -> None:
        print(f"\n{BLUE}{BOLD}>> {text}{RESET}")

    def show(self, result: Any) -> None:
        color = GREEN if result.get("success") else RED
        print(f"{color}{result['message']}{RESET}")
        error = result.get("error")
        if error:
            print(f"{DIM}  code={error['code']} retryable={error['retryable']}{RESET}")

    def show_slots(self, result: Any) -> None:
        self.show(result)
        starts = [s["start"] for s in result.get("available_slots", [])]
        if starts:
            print(f"{DIM}  {' '.join(starts)}{RESET}")

    SCENARIOS: tuple[str, ...] = ("booking", "race", "review")

    def run_scenario(self, scenario: str) -> None:
        if scenario not in self.SCENARIOS:
            print(f"{RED}Unknown scenario: {scenario}{RESET}")
            return

        print()
        print(f"{BOLD}{'=' * 60}{RESET}")
        print(f"{BOLD}  BOOKING CORE - Scenario: {scenario}{RESET}")
        print(f"{BOLD}  Slot granularity: {settings.scheduling.slot_granularity_minutes} min{RESET}")
        print(f"{BOLD}{'=' * 60}{RESET}")

        asyncio.run(getattr(self, f"_scenario_{scenario}")())

        print(f"\n{BOLD}{'=' * 60}{RESET}")
        print(f"{BOLD}  Scenario '{scenario}' complete.{RESET}")
        print(f"{BOLD}{'=' * 60}{RESET}")

    async def _scenario_booking(self) -> None:
        self.step(f"Availability for provider {PROVIDER_ID}, service {SERVICE_ID} on {self.day}")
        self.show_slots(operations.get_availability(PROVIDER_ID, SERVICE_ID, self.day))

        self.step("Book 10:00")
        result = await operations.post_booking("2", PROVIDER_ID, SERVICE_ID, self.day, "10:00")
        self.show(result)

        self.step("Availability again")
        self.show_slots(operations.get_availability(PROVIDER_ID, SERVICE_ID, self.day))

        self.step("Book 10:00 a second time")
        retry = await operations.post_booking("3", PROVIDER_ID, SERVICE_ID, self.day, "10:00")
        self.show(retry)
        if retry.get("next_available"):
            print(f"{YELLOW}  Next available: {retry['next_available']['start']}{RESET}")

    async def _scenario_race(self) -> None:
        self.step("Five customers request 14:00 at the same moment")
        results = await asyncio.gather(*[
            operations.post_booking(f"C{i}", PROVIDER_ID, SERVICE_ID, self.day, "14:00")
            for i in range(5)
        ])
        for result in results:
            self.show(result)
        winners = sum(1 for r in results if r["success"])
        print(f"{DIM}  {winners} booking(s) committed{RESET}")

    async def _scenario_review(self) -> None:
        self.step("Book, confirm and complete an appointment")
        created = await operations.post_booking("2", PROVIDER_ID, SERVICE_ID, self.day, "11:00")
        self.show(created)
        booking_id = created["booking"]["id"]
        for status in ("confirmed", "completed"):
            self.show(await operations.patch_booking_status(booking_id, status))

        self.step("Leave a 5-star review")
        review = await operations.post_review(booking_id, "2", PROVIDER_ID, SERVICE_ID, 5, "Great cut")
        self.show(review)
        if review.get("provider"):
            provider = review["provider"]
            print(f"{DIM}  rating={provider['rating']:.2f} reviews={provider['review_count']}{RESET}")

        self.step("Try to review the same booking again")
        self.show(await operations.post_review(booking_id, "2", PROVIDER_ID, SERVICE_ID, 4))

        self.step("Try to reopen the completed booking")
        self.show(await operations.patch_booking_status(booking_id, "pending"))


def main() -> None:
    parser = argparse.ArgumentParser(description="Offline console demo")
    parser.add_argument(
        "--scenario",
        choices=list(ConsoleSession.SCENARIOS),
        default="booking",
        help="Scripted scenario to play",
    )
    args = parser.parse_args()

    ConsoleSession().run_scenario(args.scenario)


if __name__ == "__main__":
    main()
