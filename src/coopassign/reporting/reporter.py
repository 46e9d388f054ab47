from __future__ import annotations

from datetime import date
from typing import Any, Mapping

from coopassign.config import EngineConfig
from coopassign.config import cfg as default_cfg
from coopassign.engine import evaluate_with_metrics
from coopassign.result_types import EvaluationResult
from coopassign.rules.registry import ConstraintRegistry, build_registry
from coopassign.snapshot import DomainSnapshot, RuleContext

from .text_report import render_text_report


class Reporter:
    """Runs an evaluation with metrics and prints the operator summary."""

    def __init__(
        self,
        cfg: EngineConfig | None = None,
        registry: ConstraintRegistry | None = None,
        num_print_examples: int = 10,
        enable_printing: bool = True,
    ) -> None:
        self.cfg = cfg or default_cfg
        self.registry = registry if registry is not None else build_registry(cfg=self.cfg)
        self.num_print_examples = num_print_examples
        self.enable_printing = enable_printing

    def run(
        self,
        ctx: RuleContext,
        snapshot: DomainSnapshot | Mapping[str, Any],
        period_start: date | None = None,
        period_end: date | None = None,
    ) -> EvaluationResult:
        result = evaluate_with_metrics(
            self.registry, ctx, snapshot, period_start, period_end, cfg=self.cfg
        )
        if self.enable_printing:
            self.render_text_report(result)
        return result

    def render_text_report(self, result: EvaluationResult) -> None:
        """Public entry point for callers that want text reporting only."""
        render_text_report(result, num_print_examples=self.num_print_examples)
