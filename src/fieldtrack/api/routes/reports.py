"""Export, analytics and activity log endpoints."""

from __future__ import annotations

import logging
from datetime import date

from fastapi import APIRouter, HTTPException, Query, status
from fastapi.responses import Response

from ...persistence.database import DatabaseUnavailableError
from ...schemas.reports import AnalyticsResponse
from ...services.tasks import compute_dashboard_analytics, export_filename, export_tasks_csv, list_activity

router = APIRouter(tags=["reports"])


@router.get("/export", response_class=Response, status_code=status.HTTP_200_OK)
def export_tasks(
    status_filter: str | None = Query(default=None, alias="status", description="Task status or 'all'"),
    employee_id: str | None = Query(default=None, alias="employeeId", description="Assignee user id or 'all'"),
    pincode: str | None = Query(default=None),
    search: str | None = Query(default=None, description="Matches title, client, pincode, notes or assignee"),
    start_date: date | None = Query(default=None, alias="startDate", description="Earliest assigned (or created) day"),
    end_date: date | None = Query(default=None, alias="endDate", description="Latest assigned (or created) day"),
) -> Response:
    try:
        content = export_tasks_csv(
            status=status_filter,
            employee_id=employee_id,
            pincode=pincode,
            search=search,
            start_date=start_date,
            end_date=end_date,
        )
    except DatabaseUnavailableError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc
    except Exception as exc:
        logging.exception(f"Export error: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Export failed.",
        ) from exc

    file_name = export_filename()
    return Response(
        content=content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{file_name}"'},
    )


@router.get("/analytics", response_model=AnalyticsResponse, status_code=status.HTTP_200_OK)
def get_analytics() -> AnalyticsResponse:
    try:
        return AnalyticsResponse(**compute_dashboard_analytics())
    except DatabaseUnavailableError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc
    except Exception as exc:
        logging.exception(f"Error computing analytics: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch analytics",
        ) from exc


@router.get("/activity-log", response_model=list[dict], status_code=status.HTTP_200_OK)
def get_activity_log(
    limit: int | None = Query(default=None, ge=1, le=1000, description="Number of most recent entries"),
) -> list[dict]:
    try:
        return list_activity(limit)
    except DatabaseUnavailableError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc
