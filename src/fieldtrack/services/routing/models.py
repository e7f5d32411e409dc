"""Routing domain models."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from ...models.domain import Coordinate, Task


@dataclass(frozen=True, slots=True)
class RouteStop:
    task: Task
    coordinate: Optional[Coordinate]
    distance_from_prev_km: Optional[float]


@dataclass(frozen=True, slots=True)
class RouteSequence:
    """Ordered visit plan: placed stops first, unresolved tasks after them."""

    origin: Optional[Coordinate]
    stops: List[RouteStop]
    unresolved: List[Task]

    @property
    def tasks(self) -> list[Task]:
        return [stop.task for stop in self.stops] + list(self.unresolved)

    @property
    def total_distance_km(self) -> float:
        return sum(stop.distance_from_prev_km or 0.0 for stop in self.stops)
