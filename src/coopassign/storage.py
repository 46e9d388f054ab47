from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date
from typing import Iterable, Optional, Protocol

from coopassign.domain import Assignment, Availability, Person, Task
from coopassign.snapshot import DomainSnapshot


@dataclass(frozen=True)
class TenantContext:
    tenant_id: str
    actor_id: str


@dataclass(frozen=True)
class DateRange:
    """Inclusive range of ISO dates."""

    start: date
    end: date

    def __post_init__(self) -> None:
        if self.end < self.start:
            raise ValueError("DateRange.end must not be before DateRange.start.")

    def __contains__(self, day: object) -> bool:
        return isinstance(day, date) and self.start <= day <= self.end


class StorageAdapter(Protocol):
    """Read side for snapshots plus the assignment write path."""

    def list_persons(self, ctx: TenantContext) -> list[Person]: ...

    def list_availability(
        self, ctx: TenantContext, date_range: Optional[DateRange] = None
    ) -> list[Availability]: ...

    def list_tasks(
        self, ctx: TenantContext, date_range: Optional[DateRange] = None
    ) -> list[Task]: ...

    def list_assignments(
        self, ctx: TenantContext, task_ids: Optional[Iterable[str]] = None
    ) -> list[Assignment]: ...

    def upsert_assignment(
        self, ctx: TenantContext, assignment: Assignment
    ) -> Assignment: ...


class InMemoryStorage:
    """Dict-backed StorageAdapter keyed by tenant, used by tests and tooling."""

    def __init__(
        self,
        persons: Iterable[Person] = (),
        availability: Iterable[Availability] = (),
        tasks: Iterable[Task] = (),
        assignments: Iterable[Assignment] = (),
    ) -> None:
        self._persons = list(persons)
        self._availability = list(availability)
        self._tasks = list(tasks)
        self._assignments: dict[str, Assignment] = {a.id: a for a in assignments}

    def list_persons(self, ctx: TenantContext) -> list[Person]:
        return sorted(
            (p for p in self._persons if p.tenant_id == ctx.tenant_id),
            key=lambda p: p.id,
        )

    def list_availability(
        self, ctx: TenantContext, date_range: Optional[DateRange] = None
    ) -> list[Availability]:
        return sorted(
            (
                a
                for a in self._availability
                if a.tenant_id == ctx.tenant_id
                and (date_range is None or a.date in date_range)
            ),
            key=lambda a: (a.date, a.person_id),
        )

    def list_tasks(
        self, ctx: TenantContext, date_range: Optional[DateRange] = None
    ) -> list[Task]:
        return sorted(
            (
                t
                for t in self._tasks
                if t.tenant_id == ctx.tenant_id
                and (date_range is None or t.date in date_range)
            ),
            key=lambda t: (t.date, t.id),
        )

    def list_assignments(
        self, ctx: TenantContext, task_ids: Optional[Iterable[str]] = None
    ) -> list[Assignment]:
        wanted = None if task_ids is None else set(task_ids)
        return sorted(
            (
                a
                for a in self._assignments.values()
                if a.tenant_id == ctx.tenant_id
                and (wanted is None or a.task_id in wanted)
            ),
            key=lambda a: a.id,
        )

    def upsert_assignment(
        self, ctx: TenantContext, assignment: Assignment
    ) -> Assignment:
        stored = replace(assignment, tenant_id=ctx.tenant_id)
        self._assignments[stored.id] = stored
        return stored


def load_snapshot(
    storage: StorageAdapter, ctx: TenantContext, date_range: DateRange
) -> DomainSnapshot:
    """
    Read everything one evaluation over `date_range` needs: tasks and
    availability in the range, the assignments of those tasks, and all persons.
    """
    tasks = storage.list_tasks(ctx, date_range)
    return DomainSnapshot(
        tasks=tuple(tasks),
        assignments=tuple(storage.list_assignments(ctx, [t.id for t in tasks])),
        persons=tuple(storage.list_persons(ctx)),
        availability=tuple(storage.list_availability(ctx, date_range)),
    )
