from __future__ import annotations

from coopassign.distribution import (
    compute_distribution_metrics,
    fairness_stats,
    workload_frame,
)
from coopassign.result_types import Level, RuleViolation
from coopassign.rules.base import Constraint
from coopassign.snapshot import DomainSnapshot, RuleContext


class DistributionFairnessConstraint(Constraint):
    """
    Advise when one person carries far more assignments than the rest.

    The window is the snapshot's task date range. Only persons with at least one
    availability record inside it form the population, so people who never made
    themselves available do not drag the mean down.

    Settings (ConstraintSpec):
      • k (>=0):
          stddev multiplier. A count must exceed mean + k * stddev.
          Example: counts [1,1,1,1,9] give mean 2.6, stddev 3.2 and with k=1.5 a
          threshold of 7.4, so only the 9 is flagged.
      • min_gap (>=0):
          the count must also sit at least this far above the mean. Keeps tiny
          rosters quiet where one extra task already shifts the stddev.
    """

    id = "distribution-fairness"
    level = Level.SOFT
    description = "Workload should be spread evenly across available people."

    def evaluate(
        self, ctx: RuleContext, snapshot: DomainSnapshot
    ) -> list[RuleViolation]:
        span = snapshot.date_range()
        if span is None:
            return []
        start, end = span

        K = float(self.setting("k", self.cfg.FAIRNESS_K))
        MIN_GAP = float(self.setting("min_gap", self.cfg.FAIRNESS_MIN_GAP))

        known = {p.id for p in snapshot.persons}
        population = {
            a.person_id
            for a in snapshot.availability
            if start <= a.date <= end and a.person_id in known
        }
        metrics = compute_distribution_metrics(snapshot, start, end, self.cfg)
        # the threshold tracks the mean, so raising one count can un-flag another
        # person; only the own-count direction is monotonic
        stats = fairness_stats(metrics, population, K, MIN_GAP)
        if stats is None:
            return []

        df = workload_frame(snapshot, start, end, self.cfg).sort_values(
            ["date", "task_id", "assignment_id"]
        )
        labels = {p.id: p.label for p in snapshot.persons}

        out: list[RuleViolation] = []
        for m in metrics:
            if m.person_id not in population or not stats.is_outlier(
                m.total_assignments
            ):
                continue
            affected = df.loc[df["person_id"] == m.person_id, "assignment_id"]
            message = (
                f"{labels[m.person_id]} has {m.total_assignments} assignments between "
                f"{start.isoformat()} and {end.isoformat()} "
                f"(mean {stats.mean:.1f}, threshold {stats.threshold:.1f})"
            )
            out.append(self.violation(ctx, message, affected.tolist()))
        return out
