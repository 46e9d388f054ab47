from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Optional

from coopassign.config import EngineConfig
from coopassign.domain import Assignment, AssignmentStatus
from coopassign.engine import evaluate
from coopassign.errors import AssignmentBlockedError
from coopassign.result_types import Level, RuleViolation
from coopassign.rules.registry import ConstraintRegistry
from coopassign.snapshot import RuleContext
from coopassign.storage import DateRange, StorageAdapter, TenantContext, load_snapshot

logger = logging.getLogger(__name__)


@dataclass
class Confirmation:
    assignment: Assignment
    advisories: list[RuleViolation]


def _find_assignment(
    storage: StorageAdapter, tenant: TenantContext, assignment_id: str
) -> Assignment:
    for a in storage.list_assignments(tenant):
        if a.id == assignment_id:
            return a
    raise LookupError(f"Assignment '{assignment_id}' does not exist.")


def check_assignment(
    storage: StorageAdapter,
    registry: ConstraintRegistry,
    ctx: RuleContext,
    assignment_id: str,
    *,
    date_range: Optional[DateRange] = None,
    cfg: EngineConfig | None = None,
) -> list[RuleViolation]:
    """
    Violations that name `assignment_id`.

    The snapshot covers `date_range` widened to include the task's date, or
    only that date when no range is given. Hard conflicts are same-day, so the
    range only changes what the fairness rule sees: pass the roster period to
    get the same advisories as a full `evaluate` over it.
    """
    tenant = TenantContext(tenant_id=ctx.tenant_id, actor_id=ctx.actor_id)
    assignment = _find_assignment(storage, tenant, assignment_id)
    task = next(
        (t for t in storage.list_tasks(tenant) if t.id == assignment.task_id), None
    )
    if task is None:
        raise LookupError(
            f"Task '{assignment.task_id}' of assignment '{assignment_id}' does not exist."
        )
    if date_range is None:
        window = DateRange(task.date, task.date)
    else:
        window = DateRange(
            min(date_range.start, task.date), max(date_range.end, task.date)
        )
    snapshot = load_snapshot(storage, tenant, window)
    return [
        v
        for v in evaluate(registry, ctx, snapshot, cfg=cfg)
        if assignment_id in v.affected_assignments
    ]


def confirm_assignment(
    storage: StorageAdapter,
    registry: ConstraintRegistry,
    ctx: RuleContext,
    assignment_id: str,
    *,
    date_range: Optional[DateRange] = None,
    cfg: EngineConfig | None = None,
) -> Confirmation:
    """
    Mark an assignment confirmed unless a hard violation names it.

    Raises AssignmentBlockedError carrying the hard violations. Soft violations
    never block and are returned as advisories; `date_range` is passed on to
    `check_assignment`.
    """
    found = check_assignment(
        storage, registry, ctx, assignment_id, date_range=date_range, cfg=cfg
    )
    hard = [v for v in found if v.level is Level.HARD]
    if hard:
        raise AssignmentBlockedError(assignment_id, hard)

    tenant = TenantContext(tenant_id=ctx.tenant_id, actor_id=ctx.actor_id)
    current = _find_assignment(storage, tenant, assignment_id)
    stored = storage.upsert_assignment(
        tenant, replace(current, status=AssignmentStatus.CONFIRMED)
    )
    advisories = [v for v in found if v.level is Level.SOFT]
    if advisories:
        logger.info(
            "Confirmed %s with %d advisory violation(s)", assignment_id, len(advisories)
        )
    return Confirmation(assignment=stored, advisories=advisories)
