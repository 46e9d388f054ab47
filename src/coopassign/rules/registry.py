from __future__ import annotations

from typing import Any, Iterable, Iterator, Optional, Sequence, Tuple, Type

from coopassign.config import EngineConfig
from coopassign.errors import DuplicateConstraintIdError
from coopassign.rules.availability import AvailabilityMismatchConstraint
from coopassign.rules.base import Constraint, ConstraintSpec
from coopassign.rules.capacity import TaskCapacityConstraint
from coopassign.rules.double_booking import DoubleBookingConstraint
from coopassign.rules.fairness import DistributionFairnessConstraint
from coopassign.rules.skills import RoleSkillConstraint


class ConstraintRegistry:
    """
    Append-only id -> Constraint table.

    Constraints live in a tuple in registration order with an id -> position
    index next to it. `register` returns a new registry and refuses ids that
    are already taken; there is no way to remove an entry.
    """

    __slots__ = ("_constraints", "_index")

    def __init__(self, constraints: Iterable[Constraint] = ()) -> None:
        self._constraints: tuple[Constraint, ...] = ()
        self._index: dict[str, int] = {}
        for c in constraints:
            self._append(c)

    def _append(self, constraint: Constraint) -> None:
        if not isinstance(constraint, Constraint):
            raise TypeError(
                f"Only Constraint instances can be registered; got {type(constraint)!r}"
            )
        cid = getattr(constraint, "id", None)
        if not isinstance(cid, str) or not cid:
            raise ValueError("Constraint id must be a non-empty string.")
        if cid in self._index:
            raise DuplicateConstraintIdError(cid)
        self._index[cid] = len(self._constraints)
        self._constraints = self._constraints + (constraint,)

    def register(self, constraint: Constraint) -> ConstraintRegistry:
        return ConstraintRegistry(self._constraints + (constraint,))

    def get(self, constraint_id: str) -> Optional[Constraint]:
        pos = self._index.get(constraint_id)
        return None if pos is None else self._constraints[pos]

    def ids(self) -> list[str]:
        return [c.id for c in self._constraints]

    def __getitem__(self, constraint_id: str) -> Constraint:
        return self._constraints[self._index[constraint_id]]

    def __contains__(self, constraint_id: object) -> bool:
        return constraint_id in self._index

    def __iter__(self) -> Iterator[Constraint]:
        return iter(self._constraints)

    def __len__(self) -> int:
        return len(self._constraints)

    def __repr__(self) -> str:
        return f"ConstraintRegistry({self.ids()!r})"


def register(registry: ConstraintRegistry, constraint: Constraint) -> ConstraintRegistry:
    """Return a new registry with `constraint` added under its id."""
    return registry.register(constraint)


ConstraintTemplate = Tuple[Type[Constraint], bool, dict[str, Any]]

DOUBLE_BOOKING_TEMPLATE: ConstraintTemplate = (DoubleBookingConstraint, True, {})
AVAILABILITY_TEMPLATE: ConstraintTemplate = (AvailabilityMismatchConstraint, True, {})
FAIRNESS_TEMPLATE: ConstraintTemplate = (DistributionFairnessConstraint, True, {})
# off unless a deployment turns them on
TASK_CAPACITY_TEMPLATE: ConstraintTemplate = (TaskCapacityConstraint, False, {})
ROLE_SKILL_TEMPLATE: ConstraintTemplate = (RoleSkillConstraint, False, {})

_DEFAULT_TEMPLATES: list[ConstraintTemplate] = [
    DOUBLE_BOOKING_TEMPLATE,
    AVAILABILITY_TEMPLATE,
    FAIRNESS_TEMPLATE,
    TASK_CAPACITY_TEMPLATE,
    ROLE_SKILL_TEMPLATE,
]


def default_constraint_specs() -> list[ConstraintSpec]:
    """Return fresh copies of the default constraint specifications."""
    return [
        ConstraintSpec(cls=cls, enabled=enabled, settings=dict(settings))
        for cls, enabled, settings in _DEFAULT_TEMPLATES
    ]


def normalize_constraint_specs(
    items: Sequence[ConstraintSpec | Type[Constraint]] | None,
) -> list[ConstraintSpec]:
    """Turn user-provided constraints into ConstraintSpec objects."""
    if items is None:
        return default_constraint_specs()

    normalized: list[ConstraintSpec] = []
    for item in items:
        if isinstance(item, ConstraintSpec):
            normalized.append(item)
        elif isinstance(item, type) and issubclass(item, Constraint):
            normalized.append(ConstraintSpec(cls=item))
        else:
            raise TypeError(
                "Constraints must be ConstraintSpec instances or Constraint "
                f"subclasses; got {type(item)!r}"
            )
    return normalized


def build_registry(
    specs: Sequence[ConstraintSpec | Type[Constraint]] | None = None,
    cfg: EngineConfig | None = None,
) -> ConstraintRegistry:
    """Instantiate every enabled spec (defaults when None) into a registry."""
    return ConstraintRegistry(
        spec.cls(cfg, **spec.settings)
        for spec in normalize_constraint_specs(specs)
        if spec.enabled
    )
