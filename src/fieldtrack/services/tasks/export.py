"""CSV export of tasks with SLA status."""

from __future__ import annotations

import csv
import io
import logging
from datetime import date, datetime, timezone
from typing import Any, Optional, Sequence

from ...config import settings
from ...persistence import database
from .service import matches_search

logger = logging.getLogger(__name__)

EXPORT_COLUMNS = [
    "CaseID",
    "ClientName",
    "Employee",
    "EmployeeID",
    "Email",
    "Pincode",
    "Status",
    "AssignedDate",
    "CompletedDate",
    "Latitude",
    "Longitude",
    "MapURL",
    "Address",
    "Notes",
    "SLAStatus",
    "CreatedAt",
]


def _parse_timestamp(value: Any) -> Optional[datetime]:
    if value in (None, ""):
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    else:
        text = str(value).strip().replace("Z", "+00:00")
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def sla_status(task: dict, *, now: Optional[datetime] = None, target_hours: Optional[float] = None) -> str:
    """Classify a task against the assignment-to-completion target."""
    target = target_hours if target_hours is not None else settings.sla_hours
    assigned = _parse_timestamp(task.get("assigned_date"))
    if assigned is None:
        return "N/A"

    completed = _parse_timestamp(task.get("completed_at"))
    if completed is not None:
        hours = (completed - assigned).total_seconds() / 3600
        return "On Time" if hours <= target else "Overdue"

    if task.get("status") == "Pending":
        current = now or datetime.now(timezone.utc)
        hours = (current - assigned).total_seconds() / 3600
        return "In Progress" if hours <= target else "Overdue"
    return "N/A"


def _format_created(value: Any) -> str:
    parsed = _parse_timestamp(value)
    if parsed is None:
        return ""
    return parsed.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def _number(value: Any) -> Any:
    return "" if value in (None, "", 0) else value


def tasks_to_csv(tasks: Sequence[dict], users: Sequence[dict], *, now: Optional[datetime] = None) -> str:
    by_id = {str(user.get("id")): user for user in users}
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(EXPORT_COLUMNS)
    for task in tasks:
        employee = by_id.get(str(task.get("assigned_to"))) if task.get("assigned_to") is not None else None
        writer.writerow(
            [
                task.get("title") or "",
                task.get("client_name") or "",
                employee.get("name") if employee else "Unassigned",
                (employee.get("employee_id") or "") if employee else "",
                (employee.get("email") or "") if employee else "",
                task.get("pincode") or "",
                task.get("status") or "",
                task.get("assigned_date") or "",
                task.get("completed_at") or task.get("verified_at") or "",
                _number(task.get("latitude")),
                _number(task.get("longitude")),
                task.get("map_url") or "",
                task.get("address") or "",
                task.get("notes") or "",
                sla_status(task, now=now),
                _format_created(task.get("created_at")),
            ]
        )
    return buffer.getvalue()


def _task_day(task: dict) -> Optional[str]:
    # assignment date, falling back to the creation day
    assigned = task.get("assigned_date")
    if assigned:
        return str(assigned)[:10]
    created = task.get("created_at")
    if created:
        return str(created)[:10]
    return None


def filter_tasks(
    tasks: Sequence[dict],
    users: Sequence[dict],
    *,
    search: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> list[dict]:
    """Apply the free-text search and the inclusive date range to fetched tasks."""
    by_id = {str(user.get("id")): user for user in users}
    selected: list[dict] = []
    for task in tasks:
        if start_date or end_date:
            day = _task_day(task)
            if day is None:
                continue
            if start_date and day < start_date.isoformat():
                continue
            if end_date and day > end_date.isoformat():
                continue
        if search:
            employee = by_id.get(str(task.get("assigned_to"))) if task.get("assigned_to") is not None else None
            name = employee.get("name") if employee else None
            if not matches_search(task, search, name, include_notes=True):
                continue
        selected.append(task)
    return selected


def export_tasks_csv(
    *,
    status: Optional[str] = None,
    employee_id: Optional[str] = None,
    pincode: Optional[str] = None,
    search: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> str:
    tasks = database.fetch_tasks(
        status=status if status and status != "all" else None,
        assigned_to=employee_id if employee_id and employee_id != "all" else None,
        pincode=pincode or None,
    )
    users = database.fetch_users()
    selected = filter_tasks(tasks, users, search=search, start_date=start_date, end_date=end_date)
    logger.info(f"Exporting {len(selected)} of {len(tasks)} tasks")
    return tasks_to_csv(selected, users)


def export_filename(today: Optional[date] = None) -> str:
    return f"fieldtrack-export-{(today or date.today()).isoformat()}.csv"
