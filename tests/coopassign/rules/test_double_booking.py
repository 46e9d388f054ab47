from __future__ import annotations

from coopassign.config import EngineConfig
from coopassign.domain import Assignment, Person, Task
from coopassign.result_types import Level
from coopassign.rules.double_booking import DoubleBookingConstraint
from coopassign.snapshot import DomainSnapshot


def _snapshot(tasks, assignments, persons=None) -> DomainSnapshot:
    if persons is None:
        ids = sorted({a.person_id for a in assignments})
        persons = [Person(id=pid, display_name=pid.title()) for pid in ids]
    return DomainSnapshot(
        tasks=tasks, assignments=assignments, persons=persons, availability=[]
    )


def _ken_tasks() -> list[Task]:
    return [
        Task(id="A", date="2025-08-10", title="Game A", start_time="09:00", end_time="10:30"),
        Task(id="B", date="2025-08-10", title="Game B", start_time="10:00", end_time="11:30"),
    ]


def test_overlapping_drafts_give_one_hard_violation(ctx) -> None:
    assignments = [
        Assignment(id="a1", task_id="A", person_id="ken"),
        Assignment(id="a2", task_id="B", person_id="ken"),
    ]
    out = DoubleBookingConstraint().evaluate(ctx, _snapshot(_ken_tasks(), assignments))
    assert len(out) == 1
    v = out[0]
    assert v.level is Level.HARD
    assert v.affected_assignments == ("a1", "a2")
    assert "Ken" in v.message and "Game A" in v.message and "Game B" in v.message
    assert v.constraint_id == "double-booking"
    assert v.tenant_id == "league-1"


def test_result_does_not_depend_on_insertion_order(ctx) -> None:
    assignments = [
        Assignment(id="a1", task_id="A", person_id="ken"),
        Assignment(id="a2", task_id="B", person_id="ken"),
    ]
    forward = DoubleBookingConstraint().evaluate(
        ctx, _snapshot(_ken_tasks(), assignments)
    )
    backward = DoubleBookingConstraint().evaluate(
        ctx, _snapshot(_ken_tasks()[::-1], assignments[::-1])
    )
    assert forward == backward


def test_cancelled_task_is_ignored(ctx) -> None:
    tasks = _ken_tasks()
    tasks[1] = Task(
        id="B", date="2025-08-10", start_time="10:00", end_time="11:30", status="cancelled"
    )
    assignments = [
        Assignment(id="a1", task_id="A", person_id="ken"),
        Assignment(id="a2", task_id="B", person_id="ken"),
    ]
    assert DoubleBookingConstraint().evaluate(ctx, _snapshot(tasks, assignments)) == []


def test_postponed_task_policy_is_configurable(ctx) -> None:
    tasks = _ken_tasks()
    tasks[1] = Task(
        id="B", date="2025-08-10", start_time="10:00", end_time="11:30", status="postponed"
    )
    assignments = [
        Assignment(id="a1", task_id="A", person_id="ken"),
        Assignment(id="a2", task_id="B", person_id="ken"),
    ]
    snap = _snapshot(tasks, assignments)
    assert DoubleBookingConstraint().evaluate(ctx, snap) == []
    strict = DoubleBookingConstraint(EngineConfig(EXEMPT_POSTPONED=False))
    assert len(strict.evaluate(ctx, snap)) == 1


def test_touching_windows_do_not_overlap(ctx) -> None:
    tasks = [
        Task(id="A", date="2025-08-10", start_time="09:00", end_time="10:00"),
        Task(id="B", date="2025-08-10", start_time="10:00", end_time="11:00"),
    ]
    assignments = [
        Assignment(id="a1", task_id="A", person_id="ken"),
        Assignment(id="a2", task_id="B", person_id="ken"),
    ]
    assert DoubleBookingConstraint().evaluate(ctx, _snapshot(tasks, assignments)) == []


def test_all_day_task_overlaps_any_timed_task(ctx) -> None:
    tasks = [
        Task(id="A", date="2025-08-10", title="Tournament"),
        Task(id="B", date="2025-08-10", start_time="18:00", end_time="19:00"),
        Task(id="C", date="2025-08-11", start_time="18:00", end_time="19:00"),
    ]
    assignments = [
        Assignment(id="a1", task_id="A", person_id="ken"),
        Assignment(id="a2", task_id="B", person_id="ken"),
        Assignment(id="a3", task_id="C", person_id="ken"),
    ]
    out = DoubleBookingConstraint().evaluate(ctx, _snapshot(tasks, assignments))
    assert [v.affected_assignments for v in out] == [("a1", "a2")]
    assert "all day" in out[0].message


def test_missing_end_uses_task_duration_then_default(ctx) -> None:
    tasks = [
        Task(id="A", date="2025-08-10", start_time="09:00"),
        Task(id="B", date="2025-08-10", start_time="10:30", end_time="11:00"),
    ]
    assignments = [
        Assignment(id="a1", task_id="A", person_id="ken"),
        Assignment(id="a2", task_id="B", person_id="ken"),
    ]
    snap = _snapshot(tasks, assignments)
    # default 120 minutes reaches 11:00
    assert len(DoubleBookingConstraint().evaluate(ctx, snap)) == 1
    # a 60 minute default ends at 10:00
    assert DoubleBookingConstraint(default_duration_minutes=60).evaluate(ctx, snap) == []

    tasks[0] = Task(id="A", date="2025-08-10", start_time="09:00", duration_minutes=60)
    assert DoubleBookingConstraint().evaluate(ctx, _snapshot(tasks, assignments)) == []


def test_same_task_twice_is_not_a_double_booking(ctx) -> None:
    assignments = [
        Assignment(id="a1", task_id="A", person_id="ken"),
        Assignment(id="a2", task_id="A", person_id="ken"),
    ]
    out = DoubleBookingConstraint().evaluate(ctx, _snapshot(_ken_tasks(), assignments))
    assert out == []


def test_different_people_do_not_conflict(ctx) -> None:
    assignments = [
        Assignment(id="a1", task_id="A", person_id="ken"),
        Assignment(id="a2", task_id="B", person_id="ume"),
    ]
    out = DoubleBookingConstraint().evaluate(ctx, _snapshot(_ken_tasks(), assignments))
    assert out == []


def test_dangling_assignment_is_skipped(ctx) -> None:
    assignments = [
        Assignment(id="a1", task_id="A", person_id="ken"),
        Assignment(id="a2", task_id="missing", person_id="ken"),
    ]
    out = DoubleBookingConstraint().evaluate(ctx, _snapshot(_ken_tasks(), assignments))
    assert out == []


def test_violations_are_ordered_by_date_person_task(ctx) -> None:
    tasks = [
        Task(id="T1", date="2025-08-11", start_time="09:00", end_time="10:00"),
        Task(id="T2", date="2025-08-11", start_time="09:30", end_time="10:30"),
        Task(id="T3", date="2025-08-10", start_time="09:00", end_time="10:00"),
        Task(id="T4", date="2025-08-10", start_time="09:30", end_time="10:30"),
    ]
    assignments = [
        Assignment(id="x1", task_id="T1", person_id="amy"),
        Assignment(id="x2", task_id="T2", person_id="amy"),
        Assignment(id="x3", task_id="T3", person_id="zed"),
        Assignment(id="x4", task_id="T4", person_id="zed"),
        Assignment(id="x5", task_id="T3", person_id="amy"),
        Assignment(id="x6", task_id="T4", person_id="amy"),
    ]
    out = DoubleBookingConstraint().evaluate(ctx, _snapshot(tasks, assignments))
    assert [v.affected_assignments for v in out] == [
        ("x5", "x6"),  # 2025-08-10, amy
        ("x3", "x4"),  # 2025-08-10, zed
        ("x1", "x2"),  # 2025-08-11, amy
    ]


def test_three_way_overlap_reports_each_pair(ctx) -> None:
    tasks = [
        Task(id="A", date="2025-08-10", start_time="09:00", end_time="12:00"),
        Task(id="B", date="2025-08-10", start_time="10:00", end_time="11:00"),
        Task(id="C", date="2025-08-10", start_time="11:30", end_time="13:00"),
    ]
    assignments = [
        Assignment(id="a1", task_id="A", person_id="ken"),
        Assignment(id="a2", task_id="B", person_id="ken"),
        Assignment(id="a3", task_id="C", person_id="ken"),
    ]
    out = DoubleBookingConstraint().evaluate(ctx, _snapshot(tasks, assignments))
    assert sorted(v.affected_assignments for v in out) == [("a1", "a2"), ("a1", "a3")]
