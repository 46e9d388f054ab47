from __future__ import annotations

from typing import Iterable

import pandas as pd

from coopassign.result_types import DistributionMetric, EvaluationResult, RuleViolation

VIOLATION_COLUMNS = ["level", "constraint", "message", "assignments"]
METRIC_COLUMNS = ["person_id", "total_assignments", "total_hours"]


def violations_frame(violations: Iterable[RuleViolation]) -> pd.DataFrame:
    """Tabular view of violations, in the order given."""
    rows = [
        {
            "level": v.level.value,
            "constraint": v.constraint_id,
            "message": v.message,
            "assignments": ", ".join(v.affected_assignments),
        }
        for v in violations
    ]
    return pd.DataFrame(rows, columns=VIOLATION_COLUMNS)


def metrics_frame(metrics: Iterable[DistributionMetric]) -> pd.DataFrame:
    """Workload table, busiest person first (ties by person id)."""
    df = pd.DataFrame(
        [
            {
                "person_id": m.person_id,
                "total_assignments": m.total_assignments,
                "total_hours": m.total_hours,
            }
            for m in metrics
        ],
        columns=METRIC_COLUMNS,
    )
    if df.empty:
        return df
    return df.sort_values(
        ["total_assignments", "person_id"], ascending=[False, True]
    ).reset_index(drop=True)


def _fmt_float(x: float | None, nd: int = 2) -> str:
    if x is None or pd.isna(x):
        return "nan"
    return f"{float(x):.{nd}f}"


def render_text_report(result: EvaluationResult, num_print_examples: int = 10) -> None:
    """Print a short operator summary of one evaluation."""
    hard, soft = result.hard, result.soft
    print(f"Violations: {len(hard)} hard, {len(soft)} soft")

    if result.violations:
        df_v = violations_frame(result.violations)
        print(f"\nViolations (top {num_print_examples}):")
        print(df_v.head(num_print_examples).to_string(index=False))
    else:
        print("\nNo violations.")

    df_m = metrics_frame(result.metrics)
    if df_m.empty:
        print("\nWorkload distribution: (no data)")
        return

    counts = df_m["total_assignments"]
    first = result.metrics[0]
    print(
        f"\nWorkload {first.period_start.isoformat()} .. {first.period_end.isoformat()}: "
        f"mean={_fmt_float(counts.mean())}, std={_fmt_float(counts.std(ddof=0))}, "
        f"max={int(counts.max())}"
    )
    print(f"\nBusiest people (top {num_print_examples}):")
    print(df_m.head(num_print_examples).to_string(index=False))
