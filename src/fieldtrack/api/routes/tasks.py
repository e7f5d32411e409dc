"""Task endpoints."""

from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter, File, Form, HTTPException, Query, UploadFile, status

from ...config import settings
from ...persistence.database import DatabaseUnavailableError
from ...schemas.tasks import (
    ActionResponse,
    AssignRequest,
    BulkUploadResponse,
    ReassignRequest,
    StatusUpdateRequest,
    TaskCreatedResponse,
    TaskCreateRequest,
    TaskUpdateRequest,
    UnassignRequest,
)
from ...services.tasks import service as task_service
from ...services.tasks.bulk_upload import UnsupportedFileError, process_bulk_upload

router = APIRouter(prefix="/tasks", tags=["tasks"])


def _unavailable(exc: DatabaseUnavailableError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc))


@router.get("", response_model=List[dict], status_code=status.HTTP_200_OK)
def list_tasks(
    status_filter: str | None = Query(default=None, alias="status", description="Task status or 'all'"),
    employee_id: str | None = Query(default=None, alias="employeeId", description="Assignee user id or 'all'"),
    pincode: str | None = Query(default=None),
    search: str | None = Query(default=None, description="Matches title, client, pincode or assignee"),
) -> List[dict]:
    try:
        return task_service.list_tasks(
            status=status_filter,
            employee_id=employee_id,
            pincode=pincode,
            search=search,
        )
    except DatabaseUnavailableError as exc:
        raise _unavailable(exc) from exc
    except Exception as exc:
        logging.exception(f"Error listing tasks: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to list tasks: {str(exc)}",
        ) from exc


@router.post("", response_model=TaskCreatedResponse, status_code=status.HTTP_200_OK)
def create_task(payload: TaskCreateRequest) -> TaskCreatedResponse:
    try:
        return TaskCreatedResponse(task=task_service.create_task(payload))
    except DatabaseUnavailableError as exc:
        raise _unavailable(exc) from exc
    except Exception as exc:
        logging.exception(f"Error creating task: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to create task: {str(exc)}",
        ) from exc


@router.post("/bulk-upload", response_model=BulkUploadResponse, status_code=status.HTTP_200_OK)
async def bulk_upload(
    excel_file: UploadFile = File(..., alias="excelFile"),
    admin_id: str | None = Form(default=None, alias="adminId"),
    admin_name: str | None = Form(default=None, alias="adminName"),
) -> BulkUploadResponse:
    """Create tasks from a .csv or .xlsx sheet; invalid rows are reported, not fatal."""
    if not excel_file.filename:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No file.")

    content = await excel_file.read()
    if len(content) > settings.max_upload_bytes:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"File exceeds {settings.max_upload_bytes} bytes.",
        )

    try:
        result = process_bulk_upload(
            excel_file.filename,
            content,
            admin_id=admin_id,
            admin_name=admin_name,
        )
    except UnsupportedFileError as exc:
        raise HTTPException(status_code=status.HTTP_415_UNSUPPORTED_MEDIA_TYPE, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except DatabaseUnavailableError as exc:
        raise _unavailable(exc) from exc
    except Exception as exc:
        logging.exception(f"Bulk upload failed: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Bulk upload failed: {str(exc)}",
        ) from exc

    limit = settings.bulk_error_limit
    return BulkUploadResponse(
        message=f"{result.success_count} tasks uploaded successfully.",
        successCount=result.success_count,
        errors=result.visible_errors(limit),
        hasMoreErrors=result.has_more_errors(limit),
    )


@router.get("/unassigned", response_model=List[dict], status_code=status.HTTP_200_OK)
def list_unassigned() -> List[dict]:
    try:
        return task_service.list_unassigned()
    except DatabaseUnavailableError as exc:
        raise _unavailable(exc) from exc


@router.post("/{task_id}/assign", response_model=ActionResponse, status_code=status.HTTP_200_OK)
def assign_task(task_id: str, payload: AssignRequest) -> ActionResponse:
    try:
        name = task_service.assign_task(task_id, payload)
        return ActionResponse(message=f"Assigned to {name}")
    except LookupError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except DatabaseUnavailableError as exc:
        raise _unavailable(exc) from exc
    except Exception as exc:
        logging.exception(f"Error assigning task {task_id}: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to assign task: {str(exc)}",
        ) from exc


@router.put("/{task_id}/reassign", response_model=ActionResponse, status_code=status.HTTP_200_OK)
def reassign_task(task_id: str, payload: ReassignRequest) -> ActionResponse:
    try:
        name = task_service.reassign_task(task_id, payload)
        return ActionResponse(message=f"Reassigned to {name}")
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except LookupError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except DatabaseUnavailableError as exc:
        raise _unavailable(exc) from exc
    except Exception as exc:
        logging.exception(f"Error reassigning task {task_id}: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to reassign task: {str(exc)}",
        ) from exc


@router.put("/{task_id}/status", response_model=ActionResponse, status_code=status.HTTP_200_OK)
def update_status(task_id: str, payload: StatusUpdateRequest) -> ActionResponse:
    try:
        task_service.set_status(task_id, payload)
        return ActionResponse(message=f"Status updated to {payload.status}")
    except LookupError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except DatabaseUnavailableError as exc:
        raise _unavailable(exc) from exc
    except Exception as exc:
        logging.exception(f"Error updating status of task {task_id}: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to update status: {str(exc)}",
        ) from exc


@router.post("/{task_id}/unassign", response_model=ActionResponse, status_code=status.HTTP_200_OK)
def unassign_task(task_id: str, payload: UnassignRequest) -> ActionResponse:
    try:
        task_service.unassign_task(task_id, payload)
        return ActionResponse(message="Task moved to unassigned pool")
    except LookupError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except DatabaseUnavailableError as exc:
        raise _unavailable(exc) from exc
    except Exception as exc:
        logging.exception(f"Error unassigning task {task_id}: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to unassign task: {str(exc)}",
        ) from exc


@router.put("/{task_id}", response_model=ActionResponse, status_code=status.HTTP_200_OK)
def update_task(task_id: str, payload: TaskUpdateRequest) -> ActionResponse:
    try:
        task_service.update_task(task_id, payload)
        return ActionResponse(message="Updated")
    except LookupError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except DatabaseUnavailableError as exc:
        raise _unavailable(exc) from exc
    except Exception as exc:
        logging.exception(f"Error updating task {task_id}: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to update task: {str(exc)}",
        ) from exc


@router.delete("/{task_id}", response_model=ActionResponse, status_code=status.HTTP_200_OK)
def delete_task(
    task_id: str,
    admin_id: str | None = Query(default=None, alias="adminId"),
    admin_name: str | None = Query(default=None, alias="adminName"),
) -> ActionResponse:
    try:
        task_service.delete_task(task_id, admin_id=admin_id, admin_name=admin_name)
        return ActionResponse(message=f"Task {task_id} deleted")
    except LookupError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except DatabaseUnavailableError as exc:
        raise _unavailable(exc) from exc
    except Exception as exc:
        logging.exception(f"Error deleting task {task_id}: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to delete task: {str(exc)}",
        ) from exc
