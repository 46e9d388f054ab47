from .config import EngineConfig, cfg
from .domain import Assignment, Availability, Person, Slot, Task
from .engine import evaluate, evaluate_with_metrics
from .result_types import DistributionMetric, Level, RuleViolation
from .rules.registry import ConstraintRegistry, build_registry, register
from .snapshot import DomainSnapshot, RuleContext, build_snapshot

__all__ = [
    "EngineConfig",
    "cfg",
    "Person",
    "Availability",
    "Task",
    "Assignment",
    "Slot",
    "DomainSnapshot",
    "RuleContext",
    "build_snapshot",
    "ConstraintRegistry",
    "register",
    "build_registry",
    "evaluate",
    "evaluate_with_metrics",
    "RuleViolation",
    "DistributionMetric",
    "Level",
]
