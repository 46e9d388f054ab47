from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Iterable, Optional

import numpy as np
import pandas as pd

from coopassign.config import EngineConfig
from coopassign.config import cfg as default_cfg
from coopassign.result_types import DistributionMetric
from coopassign.rules.helpers import resolve_assignments, task_window, window_hours
from coopassign.snapshot import DomainSnapshot

WORKLOAD_COLUMNS = ["person_id", "task_id", "assignment_id", "date", "hours"]


@dataclass(frozen=True)
class FairnessStats:
    """Population statistics behind the fairness threshold."""

    mean: float
    stddev: float
    threshold: float  # mean + k * stddev
    min_gap: float
    population: tuple[str, ...]

    def is_outlier(self, count: int) -> bool:
        return count > self.threshold and (count - self.mean) >= self.min_gap


def workload_frame(
    snapshot: DomainSnapshot,
    period_start: date,
    period_end: date,
    cfg: EngineConfig | None = None,
    include_inactive: bool | None = None,
) -> pd.DataFrame:
    """One row per assignment whose task falls in [period_start, period_end]."""
    C = cfg or default_cfg
    if include_inactive is None:
        include_inactive = C.COUNT_INACTIVE_FOR_FAIRNESS

    rows = []
    for r in resolve_assignments(snapshot, C, include_inactive=include_inactive):
        if not (period_start <= r.task.date <= period_end):
            continue
        window = task_window(r.task, C.DEFAULT_DURATION_MINUTES)
        rows.append(
            {
                "person_id": r.person.id,
                "task_id": r.task.id,
                "assignment_id": r.assignment.id,
                "date": r.task.date,
                "hours": window_hours(window),
            }
        )
    df = pd.DataFrame(rows, columns=WORKLOAD_COLUMNS)
    df["hours"] = pd.to_numeric(df["hours"], errors="coerce")
    return df


def compute_distribution_metrics(
    snapshot: DomainSnapshot,
    period_start: date | None = None,
    period_end: date | None = None,
    cfg: EngineConfig | None = None,
    include_inactive: bool | None = None,
) -> list[DistributionMetric]:
    """
    Per-person workload over the period (defaults to the snapshot's task date
    range). Every person in the snapshot gets a metric, zero counts included.
    A person is counted once per task even if assigned to it twice. Hours come
    from timed tasks only; all-day tasks add to the count but not the hours.
    """
    if period_start is None or period_end is None:
        span = snapshot.date_range()
        if span is None:
            return []
        period_start = period_start or span[0]
        period_end = period_end or span[1]
    if period_end < period_start:
        raise ValueError("period_end must not be before period_start.")

    df = workload_frame(snapshot, period_start, period_end, cfg, include_inactive)
    per_task = df.drop_duplicates(subset=["person_id", "task_id"])
    counts = per_task.groupby("person_id")["task_id"].nunique().to_dict()
    hours = per_task.groupby("person_id")["hours"].sum(min_count=1).to_dict()

    metrics: list[DistributionMetric] = []
    for person_id in sorted({p.id for p in snapshot.persons}):
        h = hours.get(person_id)
        metrics.append(
            DistributionMetric(
                person_id=person_id,
                period_start=period_start,
                period_end=period_end,
                total_assignments=int(counts.get(person_id, 0)),
                total_hours=None if h is None or pd.isna(h) else round(float(h), 2),
            )
        )
    return metrics


def fairness_stats(
    metrics: Iterable[DistributionMetric],
    population: Iterable[str],
    k: float,
    min_gap: float,
) -> Optional[FairnessStats]:
    """
    Mean and population standard deviation of assignment counts over the given
    person ids. Returns None when fewer than two persons take part.
    """
    members = set(population)
    by_person = {m.person_id: m.total_assignments for m in metrics}
    ids = tuple(sorted(pid for pid in members if pid in by_person))
    if len(ids) < 2:
        return None
    counts = np.array([by_person[pid] for pid in ids], dtype=float)
    mean = float(np.mean(counts))
    stddev = float(np.std(counts))
    return FairnessStats(
        mean=mean,
        stddev=stddev,
        threshold=mean + k * stddev,
        min_gap=min_gap,
        population=ids,
    )
