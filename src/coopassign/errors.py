from __future__ import annotations

from typing import TYPE_CHECKING, Sequence

if TYPE_CHECKING:
    from coopassign.result_types import RuleViolation


class DuplicateConstraintIdError(ValueError):
    """Raised when a constraint id is registered twice."""

    def __init__(self, constraint_id: str) -> None:
        super().__init__(f"Constraint id '{constraint_id}' is already registered.")
        self.constraint_id = constraint_id


class MalformedSnapshotError(ValueError):
    """Raised when a snapshot is missing one of its top-level collections."""


class AssignmentBlockedError(RuntimeError):
    """Raised when hard violations prevent confirming an assignment."""

    def __init__(self, assignment_id: str, violations: Sequence[RuleViolation]):
        self.assignment_id = assignment_id
        self.violations = list(violations)
        reasons = "; ".join(v.message for v in self.violations)
        super().__init__(f"Assignment '{assignment_id}' is blocked: {reasons}")
