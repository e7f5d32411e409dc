"""Visit ordering for a field worker's task list.

Two strategies are offered:

* greedy nearest neighbour from the worker's position, using haversine
  distances between resolved task coordinates;
* grouping by pincode, a plain stable sort that needs no coordinates.

Neither strategy drops or mutates tasks; they only reorder references.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from ...models.domain import Coordinate, Task
from ..geospatial import haversine_km
from .geocoder import GeocodeResolver
from .models import RouteSequence, RouteStop

logger = logging.getLogger(__name__)

# Sorts after every real pincode string.
MISSING_PINCODE_SENTINEL = "\U0010ffff"


class RouteSequencer:
    """Greedy nearest-neighbour sequencing over geocoded tasks."""

    def __init__(self, resolver: GeocodeResolver) -> None:
        self.resolver = resolver

    def plan(self, tasks: Sequence[Task], origin: Coordinate) -> RouteSequence:
        resolvable: list[tuple[Task, Coordinate]] = []
        unresolved: list[Task] = []
        for task in tasks:
            coordinate = self.resolver.resolve(task)
            if coordinate is None:
                unresolved.append(task)
            else:
                resolvable.append((task, coordinate))

        visited = [False] * len(resolvable)
        stops: list[RouteStop] = []
        current = origin
        for _ in range(len(resolvable)):
            best_index = -1
            best_distance = float("inf")
            for index, (_, coordinate) in enumerate(resolvable):
                if visited[index]:
                    continue
                distance = haversine_km(
                    current.latitude, current.longitude, coordinate.latitude, coordinate.longitude
                )
                # strict comparison keeps the earliest task on ties
                if distance < best_distance:
                    best_distance = distance
                    best_index = index
            if best_index == -1:
                # only reachable with NaN distances; keep remaining input order
                best_index = visited.index(False)
                best_distance = float("nan")
            visited[best_index] = True
            task, coordinate = resolvable[best_index]
            stops.append(RouteStop(task=task, coordinate=coordinate, distance_from_prev_km=best_distance))
            current = coordinate

        logger.debug("Sequenced %d tasks, %d unresolved", len(stops), len(unresolved))
        return RouteSequence(origin=origin, stops=stops, unresolved=unresolved)

    def sequence(self, tasks: Sequence[Task], origin: Coordinate) -> list[Task]:
        return self.plan(tasks, origin).tasks


def _pincode_key(task: Task) -> str:
    pincode: Optional[str] = task.pincode
    if pincode is None or not str(pincode).strip():
        return MISSING_PINCODE_SENTINEL
    return str(pincode)


def sequence_by_pincode(tasks: Sequence[Task]) -> list[Task]:
    """Group tasks by pincode; tasks without one go last, input order kept on ties."""

    return sorted(tasks, key=_pincode_key)
