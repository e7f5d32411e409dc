"""Task lifecycle operations: create, edit, assign, status changes."""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from typing import Any, Optional

from ...persistence import database
from ...schemas.tasks import (
    AssignRequest,
    ReassignRequest,
    StatusUpdateRequest,
    TaskCreateRequest,
    TaskUpdateRequest,
    UnassignRequest,
)
from ..routing.geocoder import extract_coordinates
from .activity import log_activity

logger = logging.getLogger(__name__)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _today() -> str:
    return date.today().isoformat()


def _is_filter(value: Optional[str]) -> bool:
    return bool(value) and value != "all"


def _require_task(task_id: Any) -> dict:
    task = database.get_task(task_id)
    if task is None:
        raise LookupError(f"Task {task_id} not found")
    return task


def matches_search(
    task: dict,
    search: str,
    assignee_name: Optional[str] = None,
    *,
    include_notes: bool = False,
) -> bool:
    """Case-insensitive substring match on title, client, pincode and assignee name."""
    needle = search.lower()
    haystacks = [
        task.get("title") or "",
        task.get("client_name") or "",
        str(task.get("pincode") or ""),
        assignee_name or "",
    ]
    if include_notes:
        haystacks.append(task.get("notes") or "")
    return any(needle in str(text).lower() for text in haystacks)


def _completion_stamps(status: Optional[str]) -> dict[str, str]:
    if status == "Completed":
        return {"completed_at": _now()}
    if status == "Verified":
        return {"verified_at": _now()}
    return {}


def list_tasks(
    *,
    status: Optional[str] = None,
    employee_id: Optional[str] = None,
    pincode: Optional[str] = None,
    search: Optional[str] = None,
) -> list[dict]:
    """Return tasks newest first, decorated with assignee and display fields."""
    rows = database.fetch_tasks(
        status=status if _is_filter(status) else None,
        assigned_to=employee_id if _is_filter(employee_id) else None,
        pincode=pincode or None,
    )
    users = {str(user.get("id")): user for user in database.fetch_users()}

    formatted: list[dict] = []
    for row in rows:
        assignee = users.get(str(row.get("assigned_to"))) if row.get("assigned_to") is not None else None
        address = row.get("address") or ""
        formatted.append(
            {
                **row,
                "address": address,
                "map": "Yes" if address else "No",
                "clientName": row.get("client_name") or "-",
                "assignedToName": assignee.get("name") if assignee else "Unassigned",
            }
        )

    if not search:
        return formatted
    return [task for task in formatted if matches_search(task, search, task.get("assignedToName"))]


def list_unassigned() -> list[dict]:
    return database.fetch_tasks(status="Unassigned")


def create_task(payload: TaskCreateRequest) -> dict:
    latitude, longitude = payload.latitude, payload.longitude
    if payload.map_url and (not latitude or not longitude):
        coordinate = extract_coordinates(payload.map_url)
        if coordinate:
            latitude, longitude = coordinate.latitude, coordinate.longitude

    status = "Unassigned"
    assignee = None
    assigned_date = None
    if payload.assigned_to not in (None, "", "Unassigned"):
        status = "Pending"
        assignee = payload.assigned_to
        assigned_date = _today()

    record = {
        "title": payload.title,
        "pincode": payload.pincode.strip() if payload.pincode else payload.pincode,
        "address": payload.address or payload.map_url,
        "map_url": payload.map_url,
        "latitude": latitude,
        "longitude": longitude,
        "notes": payload.notes,
        "client_name": payload.client_name,
        "status": status,
        "assigned_to": assignee,
        "assigned_date": assigned_date,
        "created_by": payload.created_by,
    }
    task = database.insert_task(record)
    log_activity(payload.created_by, payload.created_by_name, "TASK_CREATED", task.get("id"), f"Created task: {payload.title}")
    return task


def update_task(task_id: Any, payload: TaskUpdateRequest) -> list[str]:
    """Apply the provided fields and return the human-readable change list."""
    current = _require_task(task_id)
    changes: dict[str, Any] = {"updated_at": _now()}
    described: list[str] = []

    if payload.title:
        changes["title"] = payload.title
        described.append("Title")
    if payload.pincode:
        changes["pincode"] = payload.pincode
        described.append(f"Pincode to {payload.pincode}")
    if payload.address:
        changes["address"] = payload.address
        described.append("Address")
    if payload.client_name:
        changes["client_name"] = payload.client_name
        described.append("Client Name")
    if payload.notes:
        changes["notes"] = payload.notes
        described.append("Notes")
    if "map_url" in payload.model_fields_set:
        changes["map_url"] = payload.map_url
        described.append("Map URL")
    if payload.status:
        changes["status"] = payload.status
        described.append(f"Status: {payload.status}")
        changes.update(_completion_stamps(payload.status))
    if payload.assigned_to not in (None, ""):
        changes["assigned_to"] = payload.assigned_to
        described.append("Reassigned Employee")
        effective_status = payload.status or current.get("status")
        if effective_status == "Unassigned":
            changes["status"] = "Pending"
            changes.setdefault("assigned_date", _today())

    database.update_task_record(task_id, changes)

    if payload.user_id:
        detail = f"Updated: {', '.join(described)}" if described else "Task details updated"
        log_activity(payload.user_id, payload.user_name, "TASK_UPDATED", task_id, detail)
    return described


def delete_task(task_id: Any, *, admin_id: Any = None, admin_name: Optional[str] = None) -> None:
    _require_task(task_id)
    if admin_id and admin_name:
        log_activity(admin_id, admin_name, "TASK_DELETED", task_id, f"Deleted task ID: {task_id}")
    database.delete_task_record(task_id)


def assign_task(task_id: Any, payload: AssignRequest) -> str:
    _require_task(task_id)
    employee = database.get_user(payload.employee_id)
    if employee is None:
        raise LookupError(f"Employee {payload.employee_id} not found")
    database.update_task_record(
        task_id,
        {
            "assigned_to": payload.employee_id,
            "assigned_date": _today(),
            "status": "Pending",
            "updated_at": _now(),
        },
    )
    log_activity(payload.admin_id, payload.admin_name, "TASK_ASSIGNED", task_id, f"Assigned to {employee.get('name')}")
    return employee.get("name") or ""


def reassign_task(task_id: Any, payload: ReassignRequest) -> str:
    if payload.new_employee_id in (None, ""):
        raise ValueError("Employee ID required")
    _require_task(task_id)
    employee = database.get_user(payload.new_employee_id)
    if employee is None:
        raise LookupError("Employee not found")
    database.update_task_record(
        task_id,
        {
            "assigned_to": payload.new_employee_id,
            "assigned_date": _today(),
            "status": "Pending",
            "updated_at": _now(),
        },
    )
    log_activity(payload.user_id, payload.user_name, "TASK_REASSIGNED", task_id, f"Reassigned to {employee.get('name')}")
    return employee.get("name") or ""


def unassign_task(task_id: Any, payload: UnassignRequest) -> None:
    _require_task(task_id)
    database.update_task_record(
        task_id,
        {"assigned_to": None, "status": "Unassigned", "updated_at": _now()},
    )
    log_activity(payload.user_id, payload.user_name, "TASK_UNASSIGNED", task_id, "Moved to unassigned pool")


def set_status(task_id: Any, payload: StatusUpdateRequest) -> None:
    _require_task(task_id)
    changes: dict[str, Any] = {"status": payload.status, "updated_at": _now()}
    changes.update(_completion_stamps(payload.status))
    if payload.status == "Completed" and payload.completed_lat is not None and payload.completed_lng is not None:
        changes["completed_latitude"] = payload.completed_lat
        changes["completed_longitude"] = payload.completed_lng
    database.update_task_record(task_id, changes)
    action = "TASK_" + payload.status.upper().replace(" ", "_")
    log_activity(payload.user_id, payload.user_name, action, task_id)
