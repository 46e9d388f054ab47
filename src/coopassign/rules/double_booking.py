from __future__ import annotations

from collections import defaultdict
from datetime import date

from coopassign.result_types import Level, RuleViolation
from coopassign.rules.base import Constraint
from coopassign.rules.helpers import (
    ResolvedAssignment,
    Window,
    format_window,
    resolve_assignments,
    task_window,
    window_sort_key,
    windows_overlap,
)
from coopassign.snapshot import DomainSnapshot, RuleContext


class DoubleBookingConstraint(Constraint):
    """
    Flag a person assigned to two tasks whose windows overlap on the same date.

    Settings (ConstraintSpec):
      • default_duration_minutes:
          window length for tasks without an end time or own duration.
          Falls back to EngineConfig.DEFAULT_DURATION_MINUTES.
    """

    id = "double-booking"
    level = Level.HARD
    description = "A person cannot work two overlapping tasks."

    def evaluate(
        self, ctx: RuleContext, snapshot: DomainSnapshot
    ) -> list[RuleViolation]:
        default_minutes = int(
            self.setting("default_duration_minutes", self.cfg.DEFAULT_DURATION_MINUTES)
        )

        per_person_day: dict[tuple[str, date], list[ResolvedAssignment]] = (
            defaultdict(list)
        )
        for r in resolve_assignments(snapshot, self.cfg):
            per_person_day[(r.person.id, r.task.date)].append(r)

        windows: dict[str, Window] = {}

        def window_of(r: ResolvedAssignment) -> Window:
            if r.task.id not in windows:
                windows[r.task.id] = task_window(r.task, default_minutes)
            return windows[r.task.id]

        found: list[tuple[tuple[date, str, str, str], RuleViolation]] = []
        seen: set[frozenset[str]] = set()

        for (person_id, day), items in per_person_day.items():
            # earlier task first so each pair reads the same way for any input order
            items.sort(
                key=lambda r: (window_sort_key(window_of(r)), r.task.id, r.assignment.id)
            )
            for i, first in enumerate(items):
                for second in items[i + 1 :]:
                    # same task twice is a duplicate record, not a double-booking
                    if first.task.id == second.task.id:
                        continue
                    w1, w2 = window_of(first), window_of(second)
                    if not windows_overlap(w1, w2):
                        continue
                    pair = frozenset((first.assignment.id, second.assignment.id))
                    if pair in seen:
                        continue
                    seen.add(pair)
                    message = (
                        f"{first.person.label} is double-booked on {day.isoformat()}: "
                        f"'{first.task.label}' ({format_window(w1)}) overlaps "
                        f"'{second.task.label}' ({format_window(w2)})"
                    )
                    found.append(
                        (
                            (day, person_id, first.task.id, second.task.id),
                            self.violation(
                                ctx,
                                message,
                                [first.assignment.id, second.assignment.id],
                            ),
                        )
                    )

        found.sort(key=lambda item: item[0])
        return [v for _, v in found]
