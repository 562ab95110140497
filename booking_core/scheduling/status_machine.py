"""
Transition table for booking status changes.

Every allowed status change is listed explicitly. Anything not in the
table, including any change out of a terminal status, is rejected with
an error naming the transitions that are allowed.

Usage:
    machine = BookingStatusMachine()
    machine.transition(BookingStatus.PENDING, BookingStatus.CONFIRMED)
    machine.is_terminal(BookingStatus.COMPLETED)  # True
"""

import logging
from dataclasses import dataclass

from booking_core.errors import InvalidTransitionError
from booking_core.schemas.booking_schema import BookingStatus

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StatusTransition:
    """A single valid status change and the action that causes it."""
    from_status: BookingStatus
    to_status: BookingStatus
    action: str


class BookingStatusMachine:
    """Validates booking status changes against a fixed transition table."""

    TRANSITIONS: list[StatusTransition] = [
        StatusTransition(BookingStatus.PENDING, BookingStatus.CONFIRMED,
                         "provider_confirms"),
        StatusTransition(BookingStatus.PENDING, BookingStatus.CANCELLED,
                         "cancelled"),
        StatusTransition(BookingStatus.CONFIRMED, BookingStatus.CANCELLED,
                         "cancelled"),
        StatusTransition(BookingStatus.CONFIRMED, BookingStatus.COMPLETED,
                         "provider_marks_done"),
    ]

    TERMINAL_STATUSES = frozenset({BookingStatus.CANCELLED, BookingStatus.COMPLETED})

    def transition(
        self, current: BookingStatus, target: BookingStatus
    ) -> StatusTransition:
        """
        Look up the transition from ``current`` to ``target``.

        Raises:
            InvalidTransitionError: If the table has no such transition.
        """
        for t in self.TRANSITIONS:
            if t.from_status == current and t.to_status == target:
                logger.debug(
                    "Status transition: %s -> %s (%s)",
                    current.value, target.value, t.action,
                )
                return t

        valid = [s.value for s in self.get_valid_targets(current)]
        raise InvalidTransitionError(
            f"No valid transition from '{current.value}' to '{target.value}'. "
            f"Valid targets: {valid}",
            details={"from": current.value, "to": target.value, "valid": valid},
        )

    def get_valid_targets(self, current: BookingStatus) -> list[BookingStatus]:
        """Return all statuses reachable from ``current`` in one step."""
        return [t.to_status for t in self.TRANSITIONS if t.from_status == current]

    def is_terminal(self, status: BookingStatus) -> bool:
        return status in self.TERMINAL_STATUSES
