"""Task request/response schemas.

The dashboard sends camelCase keys; snake_case is accepted as well.
"""

from __future__ import annotations

from typing import Any, List, Literal, Optional

from pydantic import AliasChoices, BaseModel, Field

TaskStatus = Literal["Unassigned", "Pending", "In Progress", "Completed", "Verified"]


def _alias(*names: str) -> AliasChoices:
    return AliasChoices(*names)


class TaskCreateRequest(BaseModel):
    title: str = Field(..., min_length=1)
    pincode: Optional[str] = None
    address: Optional[str] = None
    map_url: Optional[str] = Field(default=None, validation_alias=_alias("mapUrl", "map_url"))
    notes: Optional[str] = None
    client_name: Optional[str] = Field(default=None, validation_alias=_alias("clientName", "client_name"))
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    assigned_to: Optional[Any] = Field(default=None, validation_alias=_alias("assignedTo", "assigned_to"))
    created_by: Optional[Any] = Field(default=None, validation_alias=_alias("createdBy", "created_by"))
    created_by_name: Optional[str] = Field(
        default=None, validation_alias=_alias("createdByName", "created_by_name")
    )


class TaskUpdateRequest(BaseModel):
    title: Optional[str] = None
    pincode: Optional[str] = None
    address: Optional[str] = None
    notes: Optional[str] = None
    status: Optional[TaskStatus] = None
    assigned_to: Optional[Any] = Field(default=None, validation_alias=_alias("assignedTo", "assigned_to"))
    client_name: Optional[str] = Field(default=None, validation_alias=_alias("clientName", "client_name"))
    map_url: Optional[str] = Field(default=None, validation_alias=_alias("mapUrl", "map_url"))
    user_id: Optional[Any] = Field(default=None, validation_alias=_alias("userId", "user_id"))
    user_name: Optional[str] = Field(default=None, validation_alias=_alias("userName", "user_name"))


class StatusUpdateRequest(BaseModel):
    status: TaskStatus
    user_id: Optional[Any] = Field(default=None, validation_alias=_alias("userId", "user_id"))
    user_name: Optional[str] = Field(default=None, validation_alias=_alias("userName", "user_name"))
    completed_lat: Optional[float] = Field(
        default=None, ge=-90, le=90, validation_alias=_alias("completedLat", "completed_lat")
    )
    completed_lng: Optional[float] = Field(
        default=None, ge=-180, le=180, validation_alias=_alias("completedLng", "completed_lng")
    )


class AssignRequest(BaseModel):
    employee_id: Any = Field(..., validation_alias=_alias("employeeId", "employee_id"))
    admin_id: Optional[Any] = Field(default=None, validation_alias=_alias("adminId", "admin_id"))
    admin_name: Optional[str] = Field(default=None, validation_alias=_alias("adminName", "admin_name"))


class ReassignRequest(BaseModel):
    new_employee_id: Optional[Any] = Field(
        default=None, validation_alias=_alias("newEmployeeId", "new_employee_id")
    )
    user_id: Optional[Any] = Field(default=None, validation_alias=_alias("userId", "user_id"))
    user_name: Optional[str] = Field(default=None, validation_alias=_alias("userName", "user_name"))


class UnassignRequest(BaseModel):
    user_id: Optional[Any] = Field(default=None, validation_alias=_alias("userId", "user_id"))
    user_name: Optional[str] = Field(default=None, validation_alias=_alias("userName", "user_name"))


class ActionResponse(BaseModel):
    success: bool = True
    message: Optional[str] = None


class TaskCreatedResponse(BaseModel):
    success: bool = True
    task: dict


class BulkUploadResponse(BaseModel):
    success: bool = True
    message: str
    successCount: int
    errors: List[str]
    hasMoreErrors: bool
