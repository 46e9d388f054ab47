from __future__ import annotations

from coopassign.result_types import Level, RuleViolation
from coopassign.rules.base import Constraint
from coopassign.rules.helpers import resolve_assignments
from coopassign.snapshot import DomainSnapshot, RuleContext


class RoleSkillConstraint(Constraint):
    """
    Advise when someone fills a role missing from their skills. A person with
    no skills listed is treated as unknown and never flagged.
    """

    id = "role-skill"
    level = Level.SOFT
    description = "Assigned people should hold the skill for the task role."

    def evaluate(
        self, ctx: RuleContext, snapshot: DomainSnapshot
    ) -> list[RuleViolation]:
        out: list[RuleViolation] = []
        for r in resolve_assignments(snapshot, self.cfg):
            role = r.assignment.role or r.task.role
            if not role or not r.person.skills or role in r.person.skills:
                continue
            message = (
                f"{r.person.label} is assigned as {role} for '{r.task.label}' on "
                f"{r.task.date.isoformat()} without that skill"
            )
            out.append(self.violation(ctx, message, [r.assignment.id]))
        return out
