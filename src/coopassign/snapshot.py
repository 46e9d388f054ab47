from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any, Callable, Iterable, Mapping, Optional, TypeVar

from coopassign.domain import Assignment, Availability, Person, Task
from coopassign.errors import MalformedSnapshotError

logger = logging.getLogger(__name__)

T = TypeVar("T")

COLLECTIONS = ("tasks", "assignments", "persons", "availability")


@dataclass(frozen=True)
class RuleContext:
    """Calling context handed to every constraint. Carries no mutable state."""

    tenant_id: str
    actor_id: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self) -> None:
        if isinstance(self.timestamp, str):
            object.__setattr__(
                self, "timestamp", datetime.fromisoformat(self.timestamp)
            )
        elif not isinstance(self.timestamp, datetime):
            raise TypeError("RuleContext.timestamp must be a datetime or ISO string.")

    @property
    def detected_at(self) -> str:
        return self.timestamp.isoformat()


@dataclass(frozen=True)
class DomainSnapshot:
    """
    Read-only view of the records one evaluation works on.

    Collections are stored as tuples. Lookup tables are rebuilt by every call to
    the *_by_id helpers so nothing derived outlives a single evaluation.
    """

    tasks: tuple[Task, ...]
    assignments: tuple[Assignment, ...]
    persons: tuple[Person, ...]
    availability: tuple[Availability, ...]

    def __post_init__(self) -> None:
        for name in COLLECTIONS:
            value = getattr(self, name)
            if value is None or isinstance(value, (str, bytes, Mapping)):
                raise MalformedSnapshotError(
                    f"Snapshot field '{name}' must be a collection of records."
                )
            try:
                object.__setattr__(self, name, tuple(value))
            except TypeError as exc:
                raise MalformedSnapshotError(
                    f"Snapshot field '{name}' must be a collection of records."
                ) from exc

    def tasks_by_id(self) -> dict[str, Task]:
        return {t.id: t for t in self.tasks}

    def persons_by_id(self) -> dict[str, Person]:
        return {p.id: p for p in self.persons}

    def date_range(self) -> Optional[tuple[date, date]]:
        """Earliest and latest task date, or None for a snapshot without tasks."""
        if not self.tasks:
            return None
        dates = [t.date for t in self.tasks]
        return min(dates), max(dates)

    def for_tenant(self, tenant_id: str) -> DomainSnapshot:
        """Drop records stamped with a different tenant. Unstamped records stay."""

        def keep(items: Iterable[Any]) -> tuple[Any, ...]:
            return tuple(i for i in items if not i.tenant_id or i.tenant_id == tenant_id)

        return DomainSnapshot(
            tasks=keep(self.tasks),
            assignments=keep(self.assignments),
            persons=keep(self.persons),
            availability=keep(self.availability),
        )


def _parse_records(
    name: str, docs: Any, parse: Callable[[Mapping[str, Any]], T]
) -> list[T]:
    if docs is None or isinstance(docs, (str, bytes, Mapping)):
        raise MalformedSnapshotError(f"Snapshot field '{name}' must be a list.")
    out: list[T] = []
    for doc in docs:
        try:
            out.append(parse(doc))
        except (KeyError, TypeError, ValueError) as exc:
            logger.warning("Skipping malformed %s record %r: %s", name, doc, exc)
    return out


def build_snapshot(data: Mapping[str, Any]) -> DomainSnapshot:
    """
    Build a DomainSnapshot from plain documents (camelCase keys, as stored).

    All four collections must be present; a missing one means the snapshot
    itself is broken and raises MalformedSnapshotError. Individual records that
    fail to parse are logged and skipped.
    """
    if not isinstance(data, Mapping):
        raise MalformedSnapshotError("Snapshot must be a mapping of collections.")
    missing = [name for name in COLLECTIONS if name not in data]
    if missing:
        raise MalformedSnapshotError(
            f"Snapshot is missing required collections: {', '.join(missing)}"
        )
    return DomainSnapshot(
        tasks=tuple(_parse_records("tasks", data["tasks"], Task.from_mapping)),
        assignments=tuple(
            _parse_records("assignments", data["assignments"], Assignment.from_mapping)
        ),
        persons=tuple(_parse_records("persons", data["persons"], Person.from_mapping)),
        availability=tuple(
            _parse_records(
                "availability", data["availability"], Availability.from_mapping
            )
        ),
    )
