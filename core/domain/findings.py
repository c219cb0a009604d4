from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from core.domain.enums import FindingKind


@dataclass(frozen=True)
class ScheduleFinding:
    """Advisory result of a scheduling run; returned to the caller, never raised."""

    kind: FindingKind
    message: str
    node_id: Optional[str] = None
    resource_id: Optional[str] = None
    day: Optional[date] = None
    hours: Optional[float] = None


__all__ = ["ScheduleFinding"]
