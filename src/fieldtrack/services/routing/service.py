"""Route optimisation for a field worker's task list."""

from __future__ import annotations

import logging
from typing import Sequence

from ...config import settings
from ...data.pincode_repository import PincodeTable, get_pincode_table
from ...models.domain import OPEN_STATUSES, Coordinate, Task
from ...persistence import database
from ...schemas.routing import (
    CoordinateModel,
    OptimizedTaskModel,
    OptimizeRouteRequest,
    OptimizeRouteResponse,
)
from .geocoder import GeocodeResolver
from .models import RouteSequence
from .sequencer import RouteSequencer, sequence_by_pincode

logger = logging.getLogger(__name__)


def _load_tasks(payload: OptimizeRouteRequest) -> list[Task]:
    if payload.tasks is not None:
        return [
            Task(
                id=item.id,
                title=item.title,
                pincode=item.pincode.strip() if item.pincode else None,
                map_url=item.map_url,
                latitude=item.latitude,
                longitude=item.longitude,
            )
            for item in payload.tasks
        ]
    rows = database.fetch_tasks(assigned_to=payload.employee_id, statuses=OPEN_STATUSES)
    logger.info(f"Loaded {len(rows)} open tasks for employee {payload.employee_id}")
    return [Task.from_record(row) for row in rows]


def _round_km(value: float | None) -> float | None:
    if value is None:
        return None
    return round(value, 3)


def _distance_response(origin: CoordinateModel, route: RouteSequence) -> OptimizeRouteResponse:
    items: list[OptimizedTaskModel] = []
    for position, stop in enumerate(route.stops, start=1):
        items.append(
            OptimizedTaskModel(
                id=stop.task.id,
                title=stop.task.title,
                pincode=stop.task.pincode,
                sequence=position,
                resolved=True,
                latitude=stop.coordinate.latitude if stop.coordinate else None,
                longitude=stop.coordinate.longitude if stop.coordinate else None,
                distance_from_prev_km=_round_km(stop.distance_from_prev_km),
            )
        )
    offset = len(items)
    for position, task in enumerate(route.unresolved, start=offset + 1):
        items.append(
            OptimizedTaskModel(
                id=task.id,
                title=task.title,
                pincode=task.pincode,
                sequence=position,
                resolved=False,
            )
        )
    return OptimizeRouteResponse(
        mode="distance",
        origin=origin,
        resolved_count=len(route.stops),
        unresolved_count=len(route.unresolved),
        total_distance_km=round(route.total_distance_km, 3),
        tasks=items,
    )


def _pincode_response(origin: CoordinateModel, tasks: Sequence[Task]) -> OptimizeRouteResponse:
    ordered = sequence_by_pincode(tasks)
    return OptimizeRouteResponse(
        mode="pincode",
        origin=origin,
        tasks=[
            OptimizedTaskModel(id=task.id, title=task.title, pincode=task.pincode, sequence=position)
            for position, task in enumerate(ordered, start=1)
        ],
    )


def optimize_route(payload: OptimizeRouteRequest, pincodes: PincodeTable | None = None) -> OptimizeRouteResponse:
    """Order the requested tasks by greedy distance from the origin, or by pincode."""
    tasks = _load_tasks(payload)
    if len(tasks) > settings.max_tasks_per_route:
        raise ValueError(
            f"Too many tasks to sequence ({len(tasks)}); the limit is {settings.max_tasks_per_route}."
        )

    if payload.mode == "pincode":
        return _pincode_response(payload.origin, tasks)

    resolver = GeocodeResolver(pincodes if pincodes is not None else get_pincode_table())
    origin = Coordinate(latitude=payload.origin.latitude, longitude=payload.origin.longitude)
    route = RouteSequencer(resolver).plan(tasks, origin)
    logger.info(
        f"Route optimised: {len(route.stops)} placed, {len(route.unresolved)} unresolved, "
        f"{route.total_distance_km:.1f} km"
    )
    return _distance_response(payload.origin, route)
