from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time
from enum import Enum
from typing import Any, Iterable, Mapping, Optional


class Slot(str, Enum):
    """Declared availability for one person on one date."""

    NONE = "NONE"
    AM = "AM"
    PM = "PM"
    FULL = "FULL"


class TaskStatus(str, Enum):
    SCHEDULED = "scheduled"
    CANCELLED = "cancelled"
    POSTPONED = "postponed"


class AssignmentStatus(str, Enum):
    DRAFT = "draft"
    CONFIRMED = "confirmed"


def to_date(value: Any) -> date:
    """Accept date, datetime or an ISO string ("2025-10-21" or a full timestamp)."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value)
        except ValueError:
            return datetime.fromisoformat(value).date()
    raise TypeError(f"Expected a date or ISO date string, got {type(value)!r}")


def to_time(value: Any) -> Optional[time]:
    """Accept time, "HH:mm"/"HH:mm:ss" strings, or None/"" for an unset time."""
    if value is None or value == "":
        return None
    if isinstance(value, time):
        return value
    if isinstance(value, str):
        return time.fromisoformat(value)
    raise TypeError(f"Expected a time or 'HH:mm' string, got {type(value)!r}")


def _dedup(values: Iterable[str]) -> tuple[str, ...]:
    seen: set[str] = set()
    out: list[str] = []
    for val in values:
        if val not in seen:
            seen.add(val)
            out.append(val)
    return tuple(out)


@dataclass(frozen=True, slots=True)
class Person:
    """
    Someone who can be assigned to tasks. `tags` are free-form labels (they may
    encode a grade), `skills` are the roles the person may fill.
    """

    id: str
    display_name: str = ""
    tags: tuple[str, ...] = field(default_factory=tuple)
    skills: tuple[str, ...] = field(default_factory=tuple)
    tenant_id: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "tags", _dedup(self.tags))
        object.__setattr__(self, "skills", _dedup(self.skills))

    @property
    def label(self) -> str:
        return self.display_name or self.id

    @classmethod
    def from_mapping(cls, doc: Mapping[str, Any]) -> Person:
        return cls(
            id=str(doc["id"]),
            display_name=str(doc.get("displayName") or ""),
            tags=tuple(doc.get("tags") or ()),
            skills=tuple(doc.get("skills") or ()),
            tenant_id=str(doc.get("tenantId") or ""),
        )


@dataclass(frozen=True, slots=True)
class Availability:
    person_id: str
    date: date
    slot: Slot
    id: str = ""
    tenant_id: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "date", to_date(self.date))
        object.__setattr__(self, "slot", Slot(self.slot))

    @classmethod
    def from_mapping(cls, doc: Mapping[str, Any]) -> Availability:
        return cls(
            person_id=str(doc["personId"]),
            date=doc["date"],
            slot=doc["slot"],
            id=str(doc.get("id") or ""),
            tenant_id=str(doc.get("tenantId") or ""),
        )


@dataclass(frozen=True, slots=True)
class Task:
    """
    A dated work item. Without a start time the task is all-day. Without an end
    time the window is closed by `duration_minutes`, or by the configured
    default duration when that is unset too.
    """

    id: str
    date: date
    title: str = ""
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    required: int = 1
    role: Optional[str] = None
    status: TaskStatus = TaskStatus.SCHEDULED
    duration_minutes: Optional[int] = None
    venue: Optional[str] = None
    tenant_id: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "date", to_date(self.date))
        object.__setattr__(self, "start_time", to_time(self.start_time))
        object.__setattr__(self, "end_time", to_time(self.end_time))
        object.__setattr__(self, "status", TaskStatus(self.status))
        if self.required < 0:
            raise ValueError("Task.required must be non-negative.")
        if self.duration_minutes is not None and self.duration_minutes <= 0:
            raise ValueError("Task.duration_minutes must be > 0 when set.")

    @property
    def is_all_day(self) -> bool:
        return self.start_time is None

    @property
    def label(self) -> str:
        return self.title or self.id

    @classmethod
    def from_mapping(cls, doc: Mapping[str, Any]) -> Task:
        duration = doc.get("durationMinutes")
        return cls(
            id=str(doc["id"]),
            date=doc["date"],
            title=str(doc.get("title") or ""),
            start_time=doc.get("startTime"),
            end_time=doc.get("endTime"),
            required=int(doc.get("required", 1)),
            role=doc.get("role") or None,
            status=doc.get("status") or TaskStatus.SCHEDULED,
            duration_minutes=int(duration) if duration is not None else None,
            venue=doc.get("venueName") or doc.get("venue") or None,
            tenant_id=str(doc.get("tenantId") or ""),
        )


@dataclass(frozen=True, slots=True)
class Assignment:
    id: str
    task_id: str
    person_id: str
    status: AssignmentStatus = AssignmentStatus.DRAFT
    role: Optional[str] = None
    tenant_id: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "status", AssignmentStatus(self.status))

    @classmethod
    def from_mapping(cls, doc: Mapping[str, Any]) -> Assignment:
        return cls(
            id=str(doc["id"]),
            task_id=str(doc["taskId"]),
            person_id=str(doc["personId"]),
            status=doc.get("status") or AssignmentStatus.DRAFT,
            role=doc.get("role") or None,
            tenant_id=str(doc.get("tenantId") or ""),
        )
