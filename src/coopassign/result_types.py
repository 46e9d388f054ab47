# coopassign/result_types.py
from __future__ import annotations

import hashlib
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Optional


class Level(str, Enum):
    HARD = "hard"
    SOFT = "soft"


def _ordered_unique(ids: tuple[str, ...]) -> tuple[str, ...]:
    seen: set[str] = set()
    out: list[str] = []
    for aid in ids:
        if aid not in seen:
            seen.add(aid)
            out.append(aid)
    return tuple(out)


@dataclass(frozen=True)
class RuleViolation:
    """One finding produced by a constraint. Computed fresh on every evaluation."""

    level: Level
    message: str
    affected_assignments: tuple[str, ...]
    detected_at: str  # ISO timestamp of the evaluation
    constraint_id: str = ""
    tenant_id: str = ""
    id: str = field(default="", compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "level", Level(self.level))
        affected = _ordered_unique(tuple(self.affected_assignments))
        object.__setattr__(self, "affected_assignments", affected)
        if not self.id:
            object.__setattr__(self, "id", self._stable_id())

    def _stable_id(self) -> str:
        parts = [self.constraint_id, self.level.value, self.message]
        raw = "|".join(parts + sorted(self.affected_assignments))
        return hashlib.sha1(raw.encode("utf-8")).hexdigest()[:16]

    @property
    def dedup_key(self) -> tuple[Level, str, frozenset[str]]:
        """Violations with equal keys are duplicates regardless of source rule."""
        return (self.level, self.message, frozenset(self.affected_assignments))

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "tenantId": self.tenant_id,
            "constraintId": self.constraint_id,
            "level": self.level.value,
            "message": self.message,
            "affectedAssignments": list(self.affected_assignments),
            "detectedAt": self.detected_at,
        }


@dataclass(frozen=True)
class DistributionMetric:
    """Per-person workload over [period_start, period_end] (inclusive)."""

    person_id: str
    period_start: date
    period_end: date
    total_assignments: int
    total_hours: Optional[float] = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "personId": self.person_id,
            "periodStart": self.period_start.isoformat(),
            "periodEnd": self.period_end.isoformat(),
            "totalAssignments": self.total_assignments,
        }
        if self.total_hours is not None:
            out["totalHours"] = self.total_hours
        return out


@dataclass
class EvaluationResult:
    """Structured output of an evaluation run."""

    violations: list[RuleViolation]
    metrics: list[DistributionMetric]

    @property
    def hard(self) -> list[RuleViolation]:
        return [v for v in self.violations if v.level is Level.HARD]

    @property
    def soft(self) -> list[RuleViolation]:
        return [v for v in self.violations if v.level is Level.SOFT]
