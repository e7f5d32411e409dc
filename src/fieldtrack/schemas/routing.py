"""Routing request/response schemas."""

from __future__ import annotations

from typing import Any, List, Literal, Optional

from pydantic import AliasChoices, BaseModel, Field, model_validator


class CoordinateModel(BaseModel):
    latitude: float = Field(..., ge=-90, le=90, validation_alias=AliasChoices("latitude", "lat"))
    longitude: float = Field(..., ge=-180, le=180, validation_alias=AliasChoices("longitude", "lng"))


class RouteTaskInput(BaseModel):
    """Task supplied inline by the caller instead of being loaded from the database."""

    id: Any
    title: Optional[str] = None
    pincode: Optional[str] = None
    map_url: Optional[str] = Field(default=None, validation_alias=AliasChoices("mapUrl", "map_url"))
    # kept loose: unparseable values are treated as missing by the geocoder
    latitude: Optional[Any] = Field(default=None, validation_alias=AliasChoices("latitude", "lat", "_lat"))
    longitude: Optional[Any] = Field(default=None, validation_alias=AliasChoices("longitude", "lng", "_lng"))


class OptimizeRouteRequest(BaseModel):
    origin: CoordinateModel = Field(
        ..., validation_alias=AliasChoices("origin", "employeeLocation", "employee_location")
    )
    mode: Literal["distance", "pincode"] = "distance"
    employee_id: Optional[Any] = Field(
        default=None,
        validation_alias=AliasChoices("employeeId", "employee_id"),
        description="Load the employee's open tasks when no inline tasks are given.",
    )
    tasks: Optional[List[RouteTaskInput]] = None

    @model_validator(mode="after")
    def _require_task_source(self) -> "OptimizeRouteRequest":
        if self.tasks is None and self.employee_id in (None, ""):
            raise ValueError("Provide either 'tasks' or 'employeeId'.")
        return self


class OptimizedTaskModel(BaseModel):
    id: Any
    title: Optional[str] = None
    pincode: Optional[str] = None
    sequence: int
    resolved: Optional[bool] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    distance_from_prev_km: Optional[float] = None


class OptimizeRouteResponse(BaseModel):
    success: bool = True
    mode: str
    origin: CoordinateModel
    resolved_count: Optional[int] = None
    unresolved_count: Optional[int] = None
    total_distance_km: Optional[float] = None
    tasks: List[OptimizedTaskModel]
