from __future__ import annotations

import logging
from datetime import date, datetime, timezone

import pytest

from coopassign.domain import Assignment, Person, Task
from coopassign.errors import MalformedSnapshotError
from coopassign.snapshot import DomainSnapshot, RuleContext, build_snapshot


def _docs() -> dict:
    return {
        "persons": [{"id": "ken", "displayName": "Ken"}],
        "availability": [{"personId": "ken", "date": "2025-08-10", "slot": "FULL"}],
        "tasks": [
            {"id": "t1", "date": "2025-08-10", "startTime": "09:00"},
            {"id": "t2", "date": "2025-08-12"},
        ],
        "assignments": [{"id": "a1", "taskId": "t1", "personId": "ken"}],
    }


def test_build_snapshot_parses_all_collections() -> None:
    snap = build_snapshot(_docs())
    assert [t.id for t in snap.tasks] == ["t1", "t2"]
    assert snap.assignments[0].task_id == "t1"
    assert snap.persons_by_id()["ken"].display_name == "Ken"
    assert snap.date_range() == (date(2025, 8, 10), date(2025, 8, 12))


@pytest.mark.parametrize("missing", ["tasks", "assignments", "persons", "availability"])
def test_build_snapshot_requires_every_collection(missing: str) -> None:
    docs = _docs()
    del docs[missing]
    with pytest.raises(MalformedSnapshotError, match=missing):
        build_snapshot(docs)


def test_build_snapshot_skips_malformed_records(caplog) -> None:
    docs = _docs()
    docs["assignments"].append({"id": "broken", "personId": "ken"})
    docs["tasks"].append({"id": "t3", "date": "not-a-date"})
    with caplog.at_level(logging.WARNING, logger="coopassign.snapshot"):
        snap = build_snapshot(docs)
    assert [a.id for a in snap.assignments] == ["a1"]
    assert [t.id for t in snap.tasks] == ["t1", "t2"]
    assert "Skipping malformed" in caplog.text


def test_build_snapshot_rejects_non_list_collection() -> None:
    docs = _docs()
    docs["tasks"] = None
    with pytest.raises(MalformedSnapshotError):
        build_snapshot(docs)
    with pytest.raises(MalformedSnapshotError):
        build_snapshot(["tasks"])  # type: ignore[arg-type]


def test_domain_snapshot_rejects_missing_collection() -> None:
    with pytest.raises(MalformedSnapshotError):
        DomainSnapshot(tasks=None, assignments=(), persons=(), availability=())  # type: ignore[arg-type]


def test_snapshot_stores_tuples_and_empty_range() -> None:
    snap = DomainSnapshot(tasks=[], assignments=[], persons=[], availability=[])
    assert snap.tasks == ()
    assert snap.date_range() is None


def test_for_tenant_keeps_unstamped_and_matching_records() -> None:
    snap = DomainSnapshot(
        tasks=[
            Task(id="t1", date="2025-08-10", tenant_id="league-1"),
            Task(id="t2", date="2025-08-10", tenant_id="league-2"),
            Task(id="t3", date="2025-08-10"),
        ],
        assignments=[Assignment(id="a1", task_id="t2", person_id="p", tenant_id="league-2")],
        persons=[Person(id="p")],
        availability=[],
    )
    scoped = snap.for_tenant("league-1")
    assert [t.id for t in scoped.tasks] == ["t1", "t3"]
    assert scoped.assignments == ()
    assert len(snap.tasks) == 3


def test_rule_context_accepts_iso_timestamp() -> None:
    ctx = RuleContext(tenant_id="t", actor_id="u", timestamp="2025-08-01T12:00:00+00:00")
    assert ctx.timestamp == datetime(2025, 8, 1, 12, 0, tzinfo=timezone.utc)
    assert ctx.detected_at == "2025-08-01T12:00:00+00:00"
    with pytest.raises(TypeError):
        RuleContext(tenant_id="t", actor_id="u", timestamp=12)  # type: ignore[arg-type]
