from __future__ import annotations

from coopassign.domain import Assignment, Person, Task
from coopassign.result_types import Level
from coopassign.rules.capacity import TaskCapacityConstraint
from coopassign.rules.skills import RoleSkillConstraint
from coopassign.snapshot import DomainSnapshot


def test_capacity_flags_overstaffed_task(ctx) -> None:
    snap = DomainSnapshot(
        tasks=[
            Task(id="T1", date="2025-08-10", title="Final", required=2),
            Task(id="T2", date="2025-08-10", required=2, status="cancelled"),
        ],
        assignments=[
            Assignment(id="a3", task_id="T1", person_id="p3"),
            Assignment(id="a1", task_id="T1", person_id="p1"),
            Assignment(id="a2", task_id="T1", person_id="p2"),
            Assignment(id="a4", task_id="T1", person_id="p1"),
            Assignment(id="b1", task_id="T2", person_id="p1"),
            Assignment(id="b2", task_id="T2", person_id="p2"),
            Assignment(id="b3", task_id="T2", person_id="p3"),
        ],
        persons=[Person(id="p1"), Person(id="p2"), Person(id="p3")],
        availability=[],
    )
    out = TaskCapacityConstraint().evaluate(ctx, snap)
    assert len(out) == 1
    assert out[0].level is Level.SOFT
    assert out[0].affected_assignments == ("a1", "a2", "a3", "a4")
    assert "3 people" in out[0].message and "requires 2" in out[0].message


def test_capacity_counts_distinct_people(ctx) -> None:
    snap = DomainSnapshot(
        tasks=[Task(id="T1", date="2025-08-10", required=1)],
        assignments=[
            Assignment(id="a1", task_id="T1", person_id="p1"),
            Assignment(id="a2", task_id="T1", person_id="p1"),
        ],
        persons=[Person(id="p1")],
        availability=[],
    )
    assert TaskCapacityConstraint().evaluate(ctx, snap) == []


def test_role_skill_mismatch(ctx) -> None:
    snap = DomainSnapshot(
        tasks=[
            Task(id="T1", date="2025-08-10", title="Game", role="plate"),
            Task(id="T2", date="2025-08-11", role="plate"),
            Task(id="T3", date="2025-08-12"),
        ],
        assignments=[
            Assignment(id="a1", task_id="T1", person_id="ken"),
            Assignment(id="a2", task_id="T1", person_id="newbie"),
            Assignment(id="a3", task_id="T2", person_id="ume", role="base"),
            Assignment(id="a4", task_id="T3", person_id="ken"),
        ],
        persons=[
            Person(id="ken", display_name="Ken", skills=["base"]),
            Person(id="ume", skills=["base"]),
            Person(id="newbie"),
        ],
        availability=[],
    )
    out = RoleSkillConstraint().evaluate(ctx, snap)
    assert [v.affected_assignments for v in out] == [("a1",)]
    assert "Ken" in out[0].message and "plate" in out[0].message
