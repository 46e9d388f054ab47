from __future__ import annotations

import logging
from datetime import date
from typing import Iterable, Optional

from coopassign.domain import Availability, Slot
from coopassign.result_types import Level, RuleViolation
from coopassign.rules.base import Constraint
from coopassign.rules.helpers import (
    Window,
    format_window,
    resolve_assignments,
    task_window,
)
from coopassign.snapshot import DomainSnapshot, RuleContext

logger = logging.getLogger(__name__)


class AvailabilityMismatchConstraint(Constraint):
    """Flag assignments that contradict the person's declared slot for the day."""

    id = "availability-mismatch"
    level = Level.HARD
    description = "A person must be available for the tasks they are assigned to."

    def evaluate(
        self, ctx: RuleContext, snapshot: DomainSnapshot
    ) -> list[RuleViolation]:
        default_minutes = int(
            self.setting("default_duration_minutes", self.cfg.DEFAULT_DURATION_MINUTES)
        )
        midday = int(self.setting("midday_minutes", self.cfg.MIDDAY_MINUTES))
        slots = _slot_index(snapshot.availability)

        out: list[RuleViolation] = []
        for r in resolve_assignments(snapshot, self.cfg):
            slot = slots.get((r.person.id, r.task.date))
            if slot is None:
                # no record: unknown, not a denial
                continue
            window = task_window(r.task, default_minutes)
            if not slot_conflicts(slot, window, midday):
                continue
            message = (
                f"{r.person.label} is not available for '{r.task.label}' on "
                f"{r.task.date.isoformat()}: declared {slot.value}, "
                f"task runs {format_window(window)}"
            )
            out.append(self.violation(ctx, message, [r.assignment.id]))
        return out


def slot_conflicts(slot: Slot, window: Window, midday: int) -> bool:
    """
    NONE always conflicts. AM conflicts with a window starting at or after
    midday, PM with one ending at or before midday. All-day tasks only
    conflict with NONE.
    """
    if slot is Slot.NONE:
        return True
    if window is None or slot is Slot.FULL:
        return False
    start, end = window
    if slot is Slot.AM:
        return start >= midday
    return end <= midday


def _slot_index(
    records: Iterable[Availability],
) -> dict[tuple[str, date], Optional[Slot]]:
    """(person, date) -> slot. Contradicting duplicates map to None (unknown)."""
    index: dict[tuple[str, date], Optional[Slot]] = {}
    for rec in records:
        key = (rec.person_id, rec.date)
        if key in index and index[key] is not rec.slot:
            logger.debug(
                "Conflicting availability records for %s on %s; ignoring both",
                rec.person_id,
                rec.date,
            )
            index[key] = None
        elif key not in index:
            index[key] = rec.slot
    return index
