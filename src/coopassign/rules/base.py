# src/coopassign/rules/base.py
from __future__ import annotations

import copy
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Type

from coopassign.config import EngineConfig
from coopassign.config import cfg as default_cfg
from coopassign.result_types import Level, RuleViolation
from coopassign.snapshot import DomainSnapshot, RuleContext

ConstraintFn = Callable[[RuleContext, DomainSnapshot], list[RuleViolation]]


@dataclass
class ConstraintSpec:
    cls: Type["Constraint"]
    enabled: bool = True
    settings: dict[str, Any] = field(default_factory=dict)


class Constraint(ABC):
    id: str = "constraint"
    level: Level = Level.SOFT
    description: str = ""

    def __init__(self, cfg: EngineConfig | None = None, **settings: Any) -> None:
        self.cfg: EngineConfig = cfg or default_cfg
        self._settings: dict[str, Any] = settings

    @abstractmethod
    def evaluate(
        self, ctx: RuleContext, snapshot: DomainSnapshot
    ) -> list[RuleViolation]:
        """Inspect the snapshot and return this constraint's findings."""

    def with_config(self, cfg: EngineConfig) -> Constraint:
        """Shallow copy of this constraint that runs under `cfg`."""
        bound = copy.copy(self)
        bound.cfg = cfg
        return bound

    # Helper for subclasses to read optional settings
    def setting(self, key: str, default: Any) -> Any:
        return self._settings.get(key, default)

    def violation(
        self, ctx: RuleContext, message: str, affected: Iterable[str]
    ) -> RuleViolation:
        return RuleViolation(
            level=self.level,
            message=message,
            affected_assignments=tuple(affected),
            detected_at=ctx.detected_at,
            constraint_id=self.id,
            tenant_id=ctx.tenant_id,
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self.id!r}, level={self.level.value})"


class FunctionConstraint(Constraint):
    """Wrap a plain `(ctx, snapshot) -> violations` function as a Constraint."""

    def __init__(
        self,
        id: str,
        level: Level | str,
        fn: ConstraintFn,
        description: str = "",
        cfg: EngineConfig | None = None,
    ) -> None:
        super().__init__(cfg)
        self.id = id
        self.level = Level(level)
        self.description = description
        self._fn = fn

    def evaluate(
        self, ctx: RuleContext, snapshot: DomainSnapshot
    ) -> list[RuleViolation]:
        return self._fn(ctx, snapshot)
