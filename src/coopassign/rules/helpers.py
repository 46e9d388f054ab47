from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import time
from typing import Optional

from coopassign.config import EngineConfig
from coopassign.domain import Assignment, Person, Task, TaskStatus
from coopassign.snapshot import DomainSnapshot

logger = logging.getLogger(__name__)

MINUTES_PER_DAY = 24 * 60

# [start, end) in minutes after midnight of the task date; None means all-day
Window = Optional[tuple[int, int]]


@dataclass(frozen=True)
class ResolvedAssignment:
    assignment: Assignment
    task: Task
    person: Person


def _minutes(t: time) -> int:
    return t.hour * 60 + t.minute


def task_window(task: Task, default_minutes: int) -> Window:
    """
    Minute window of a task. An end time at or before the start runs past
    midnight. A missing end uses the task's own duration, then the default.
    """
    if task.start_time is None:
        return None
    start = _minutes(task.start_time)
    if task.end_time is not None:
        end = _minutes(task.end_time)
        if end <= start:
            end += MINUTES_PER_DAY
    else:
        end = start + int(task.duration_minutes or default_minutes)
    return start, end


def windows_overlap(a: Window, b: Window) -> bool:
    """Half-open interval overlap; an all-day window overlaps everything."""
    if a is None or b is None:
        return True
    return a[0] < b[1] and b[0] < a[1]


def window_hours(window: Window) -> Optional[float]:
    if window is None:
        return None
    return (window[1] - window[0]) / 60.0


def format_window(window: Window) -> str:
    if window is None:
        return "all day"
    start, end = window
    return f"{start // 60:02d}:{start % 60:02d}-{(end // 60) % 24:02d}:{end % 60:02d}"


def window_sort_key(window: Window) -> int:
    return -1 if window is None else window[0]


def is_active(task: Task, cfg: EngineConfig) -> bool:
    """Whether a task takes part in conflict detection."""
    if task.status is TaskStatus.CANCELLED:
        return False
    if task.status is TaskStatus.POSTPONED and cfg.EXEMPT_POSTPONED:
        return False
    return True


def resolve_assignments(
    snapshot: DomainSnapshot,
    cfg: EngineConfig,
    *,
    include_inactive: bool = False,
) -> list[ResolvedAssignment]:
    """
    Join assignments to their task and person.

    Assignments pointing at a task or person missing from the snapshot are
    skipped and logged at debug level.
    Result is ordered by task date, person id, task id, assignment id.
    """
    tasks = snapshot.tasks_by_id()
    persons = snapshot.persons_by_id()
    out: list[ResolvedAssignment] = []
    for a in snapshot.assignments:
        task = tasks.get(a.task_id)
        person = persons.get(a.person_id)
        if task is None or person is None:
            logger.debug(
                "Skipping assignment %s: task=%s person=%s not in snapshot",
                a.id,
                a.task_id,
                a.person_id,
            )
            continue
        if not include_inactive and not is_active(task, cfg):
            continue
        out.append(ResolvedAssignment(assignment=a, task=task, person=person))
    out.sort(key=lambda r: (r.task.date, r.person.id, r.task.id, r.assignment.id))
    return out
