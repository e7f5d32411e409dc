"""Dashboard report schemas."""

from __future__ import annotations

from pydantic import BaseModel


class AnalyticsResponse(BaseModel):
    totalTasks: int = 0
    assignedTasks: int = 0
    completedTasks: int = 0
    verifiedTasks: int = 0
    activeEmployees: int = 0
    admins: int = 0
