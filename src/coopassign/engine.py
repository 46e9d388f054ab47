# src/coopassign/engine.py
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace
from datetime import date
from typing import Any, Mapping

from coopassign.config import EngineConfig
from coopassign.config import cfg as default_cfg
from coopassign.distribution import compute_distribution_metrics
from coopassign.errors import MalformedSnapshotError
from coopassign.result_types import EvaluationResult, Level, RuleViolation
from coopassign.rules.base import Constraint
from coopassign.rules.fairness import DistributionFairnessConstraint
from coopassign.rules.registry import ConstraintRegistry
from coopassign.snapshot import DomainSnapshot, RuleContext, build_snapshot

logger = logging.getLogger(__name__)

_LEVEL_RANK = {Level.HARD: 0, Level.SOFT: 1}


def _as_snapshot(snapshot: DomainSnapshot | Mapping[str, Any]) -> DomainSnapshot:
    if isinstance(snapshot, DomainSnapshot):
        return snapshot
    if isinstance(snapshot, Mapping):
        return build_snapshot(snapshot)
    raise MalformedSnapshotError(
        f"Expected a DomainSnapshot or mapping of collections, got {type(snapshot)!r}"
    )


def failure_violation(constraint_id: str, ctx: RuleContext) -> RuleViolation:
    """Stand-in for the output of a constraint that could not be evaluated."""
    return RuleViolation(
        level=Level.SOFT,
        message=f"constraint {constraint_id} failed to evaluate",
        affected_assignments=(),
        detected_at=ctx.detected_at,
        constraint_id=constraint_id,
        tenant_id=ctx.tenant_id,
    )


def _run_isolated(
    constraint: Constraint, ctx: RuleContext, snapshot: DomainSnapshot
) -> list[RuleViolation]:
    """Run one constraint; any failure becomes a single synthetic soft violation."""
    try:
        result = constraint.evaluate(ctx, snapshot)
    except Exception:
        logger.exception("Constraint %s failed to evaluate", constraint.id)
        return [failure_violation(constraint.id, ctx)]

    if not isinstance(result, list) or not all(
        isinstance(v, RuleViolation) for v in result
    ):
        logger.error(
            "Constraint %s returned %r instead of a list of RuleViolation",
            constraint.id,
            type(result),
        )
        return [failure_violation(constraint.id, ctx)]
    return [_stamp(v, constraint, ctx) for v in result]


def _stamp(v: RuleViolation, constraint: Constraint, ctx: RuleContext) -> RuleViolation:
    """Fill in a missing constraint or tenant id; the violation id is recomputed."""
    if v.constraint_id and v.tenant_id:
        return v
    return replace(
        v,
        constraint_id=v.constraint_id or constraint.id,
        tenant_id=v.tenant_id or ctx.tenant_id,
        id="",
    )


def sort_key(v: RuleViolation) -> tuple[Any, ...]:
    """Hard before soft, then detectedAt, then first affected assignment id."""
    first = v.affected_assignments[0] if v.affected_assignments else ""
    return (
        _LEVEL_RANK[v.level],
        v.detected_at,
        first,
        v.message,
        v.affected_assignments,
        v.constraint_id,
    )


def merge_violations(batches: list[list[RuleViolation]]) -> list[RuleViolation]:
    """Concatenate, order deterministically and drop exact duplicates."""
    merged = sorted((v for batch in batches for v in batch), key=sort_key)
    seen: set[tuple[Level, str, frozenset[str]]] = set()
    out: list[RuleViolation] = []
    for v in merged:
        if v.dedup_key in seen:
            continue
        seen.add(v.dedup_key)
        out.append(v)
    return out


def evaluate(
    registry: ConstraintRegistry,
    context: RuleContext,
    snapshot: DomainSnapshot | Mapping[str, Any],
    *,
    cfg: EngineConfig | None = None,
    max_workers: int | None = None,
) -> list[RuleViolation]:
    """
    Run every registered constraint against one snapshot.

    Parameters
    ----------
    registry:
        The constraints to run. Registration order does not affect the output.
    context:
        Tenant, actor and timestamp shared by all constraints. Records stamped
        with another tenant are left out before any constraint sees them.
    snapshot:
        A DomainSnapshot, or a mapping of the four collections which is passed
        through `build_snapshot`. A snapshot missing a collection raises
        MalformedSnapshotError. Apart from an invalid config (ValueError) this is
        the only failure that reaches the caller.
    cfg:
        When given, every constraint runs under this config instead of the one
        it was built with.
    max_workers:
        Threads used to run constraints. Defaults to `cfg.MAX_WORKERS`. The
        result is identical for any value.

    Returns
    -------
    list[RuleViolation]
        Deduplicated violations, hard before soft.
    """
    C = cfg or default_cfg
    if not isinstance(context, RuleContext):
        raise TypeError(f"context must be a RuleContext, got {type(context)!r}")
    C.validate()
    scoped = _as_snapshot(snapshot).for_tenant(context.tenant_id)

    constraints = _bind(registry, cfg)
    workers = int(max_workers if max_workers is not None else C.MAX_WORKERS)

    if workers > 1 and len(constraints) > 1:
        with ThreadPoolExecutor(max_workers=workers) as pool:
            batches = list(
                pool.map(lambda c: _run_isolated(c, context, scoped), constraints)
            )
    else:
        batches = [_run_isolated(c, context, scoped) for c in constraints]

    return merge_violations(batches)


def _bind(registry: ConstraintRegistry, cfg: EngineConfig | None) -> list[Constraint]:
    """Registered constraints, all running under `cfg` when one is given."""
    if cfg is None:
        return list(registry)
    return [c.with_config(cfg) for c in registry]


def _metrics_config(
    registry: ConstraintRegistry, cfg: EngineConfig | None
) -> EngineConfig:
    # metrics follow the fairness rule so both count the same tasks
    if cfg is not None:
        return cfg
    fairness = registry.get(DistributionFairnessConstraint.id)
    return fairness.cfg if fairness is not None else default_cfg


def evaluate_with_metrics(
    registry: ConstraintRegistry,
    context: RuleContext,
    snapshot: DomainSnapshot | Mapping[str, Any],
    period_start: date | None = None,
    period_end: date | None = None,
    *,
    cfg: EngineConfig | None = None,
    max_workers: int | None = None,
) -> EvaluationResult:
    """
    Violations plus per-person workload metrics for the same scoped snapshot.

    Without `cfg` the metrics use the config of the registered fairness
    constraint, so the counts match the ones it judged.
    """
    if not isinstance(context, RuleContext):
        raise TypeError(f"context must be a RuleContext, got {type(context)!r}")
    scoped = _as_snapshot(snapshot).for_tenant(context.tenant_id)
    violations = evaluate(registry, context, scoped, cfg=cfg, max_workers=max_workers)
    metrics = compute_distribution_metrics(
        scoped, period_start, period_end, _metrics_config(registry, cfg)
    )
    return EvaluationResult(violations=violations, metrics=metrics)
