from __future__ import annotations

from collections import defaultdict

from coopassign.result_types import Level, RuleViolation
from coopassign.rules.base import Constraint
from coopassign.rules.helpers import ResolvedAssignment, resolve_assignments
from coopassign.snapshot import DomainSnapshot, RuleContext


class TaskCapacityConstraint(Constraint):
    """Advise when more distinct people are assigned to a task than it requires."""

    id = "task-capacity"
    level = Level.SOFT
    description = "A task should not be staffed beyond its required headcount."

    def evaluate(
        self, ctx: RuleContext, snapshot: DomainSnapshot
    ) -> list[RuleViolation]:
        per_task: dict[str, list[ResolvedAssignment]] = defaultdict(list)
        for r in resolve_assignments(snapshot, self.cfg):
            per_task[r.task.id].append(r)

        out: list[RuleViolation] = []
        for task_id in sorted(per_task):
            items = per_task[task_id]
            task = items[0].task
            people = {r.person.id for r in items}
            if len(people) <= task.required:
                continue
            message = (
                f"'{task.label}' on {task.date.isoformat()} has {len(people)} people "
                f"assigned but requires {task.required}"
            )
            affected = sorted(r.assignment.id for r in items)
            out.append(self.violation(ctx, message, affected))
        return out
