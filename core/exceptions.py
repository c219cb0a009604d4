# core/exceptions.py
from __future__ import annotations

from typing import Sequence


class DomainError(Exception):
    """Base class for domain-level errors."""
    def __init__(self, message: str, *, code: str | None = None):
        super().__init__(message)
        self.code = code or self.__class__.__name__


class ValidationError(DomainError):
    """Raised when data is invalid or violates constraints."""


class NotFoundError(DomainError):
    """Raised when an entity is not found."""


class BusinessRuleError(DomainError):
    """Raised when business rules are violated (e.g., circular dependencies)."""


class DanglingReferenceError(NotFoundError):
    """Raised when a dependency points at an identifier missing from the snapshot."""

    def __init__(self, missing_id: str, *, referenced_by: str | None = None):
        if referenced_by:
            message = (
                f"Cannot schedule project: '{referenced_by}' depends on unknown "
                f"task or milestone '{missing_id}'."
            )
        else:
            message = f"Cannot schedule project: unknown task or milestone '{missing_id}'."
        super().__init__(message, code="SCHEDULE_DANGLING_REFERENCE")
        self.missing_id = missing_id
        self.referenced_by = referenced_by


class CircularDependencyError(BusinessRuleError):
    """Raised when the dependency graph contains a cycle; `cycle` lists its nodes in order."""

    def __init__(self, cycle: Sequence[str]):
        self.cycle: list[str] = list(cycle)
        path = " -> ".join(self.cycle + self.cycle[:1])
        super().__init__(
            f"Cannot schedule project: circular dependency detected ({path}).",
            code="SCHEDULE_CYCLE",
        )


class JobCancelledError(RuntimeError):
    """Raised by scheduling runs when cancellation is requested."""
