from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from core.domain.enums import ResourceKind
from core.domain.identifiers import generate_id


@dataclass(frozen=True)
class Resource:
    id: str
    name: str
    kind: ResourceKind = ResourceKind.LABOR
    bill_rate: float = 0.0
    flat_cost: float = 0.0
    calendar_id: Optional[str] = None
    availability_percent: float = 100.0

    @staticmethod
    def create(
        name: str,
        kind: ResourceKind = ResourceKind.LABOR,
        bill_rate: float = 0.0,
        flat_cost: float = 0.0,
        calendar_id: Optional[str] = None,
        availability_percent: float = 100.0,
    ) -> "Resource":
        return Resource(
            id=generate_id(),
            name=name,
            kind=kind,
            bill_rate=bill_rate,
            flat_cost=flat_cost,
            calendar_id=calendar_id,
            availability_percent=availability_percent,
        )


__all__ = ["Resource"]
