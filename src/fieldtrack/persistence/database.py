"""Database persistence for tasks, users and activity logs."""

from __future__ import annotations

import logging
from typing import Any, Iterable, Sequence

from ..db.supabase import get_supabase_client

logger = logging.getLogger(__name__)

TASKS_TABLE = "tasks"
USERS_TABLE = "users"
ACTIVITY_TABLE = "activity_logs"

EMPLOYEE_COLUMNS = "id, name, email, role, employee_id, phone, last_active, is_active"


class DatabaseUnavailableError(RuntimeError):
    """Raised when Supabase credentials are not configured."""


def _require_client():
    supabase = get_supabase_client()
    if not supabase:
        raise DatabaseUnavailableError(
            "Supabase not configured. Set FIELDTRACK_SUPABASE_URL and FIELDTRACK_SUPABASE_KEY environment variables."
        )
    return supabase


def _first(rows: Sequence[dict] | None) -> dict | None:
    if not rows:
        return None
    return rows[0]


# --------------------------------------------------------------------------- tasks


def fetch_tasks(
    *,
    status: str | None = None,
    assigned_to: Any = None,
    pincode: str | None = None,
    statuses: Iterable[str] | None = None,
) -> list[dict]:
    """Return task rows, newest first, filtered on the given columns."""
    supabase = _require_client()
    query = supabase.table(TASKS_TABLE).select("*").order("created_at", desc=True)
    if status:
        query = query.eq("status", status)
    if statuses:
        query = query.in_("status", list(statuses))
    if assigned_to is not None:
        query = query.eq("assigned_to", assigned_to)
    if pincode:
        query = query.eq("pincode", pincode)
    response = query.execute()
    return list(response.data or [])


def get_task(task_id: Any) -> dict | None:
    supabase = _require_client()
    response = supabase.table(TASKS_TABLE).select("*").eq("id", task_id).limit(1).execute()
    return _first(response.data)


def insert_task(record: dict[str, Any]) -> dict:
    supabase = _require_client()
    response = supabase.table(TASKS_TABLE).insert(record).execute()
    created = _first(response.data)
    if created is None:
        raise RuntimeError("Task insert returned no data")
    return created


def insert_tasks(records: list[dict[str, Any]]) -> int:
    """Insert all records in one request; the database applies it as a single statement."""
    if not records:
        return 0
    supabase = _require_client()
    logger.info(f"Batch inserting {len(records)} tasks")
    supabase.table(TASKS_TABLE).insert(records).execute()
    return len(records)


def update_task_record(task_id: Any, changes: dict[str, Any]) -> None:
    supabase = _require_client()
    supabase.table(TASKS_TABLE).update(changes).eq("id", task_id).execute()


def delete_task_record(task_id: Any) -> None:
    supabase = _require_client()
    supabase.table(TASKS_TABLE).delete().eq("id", task_id).execute()


def count_tasks(*, status: str | None = None, exclude_status: str | None = None) -> int:
    supabase = _require_client()
    query = supabase.table(TASKS_TABLE).select("id", count="exact")
    if status:
        query = query.eq("status", status)
    if exclude_status:
        query = query.neq("status", exclude_status)
    response = query.limit(1).execute()
    return response.count or 0


# --------------------------------------------------------------------------- users


def fetch_users() -> list[dict]:
    supabase = _require_client()
    response = supabase.table(USERS_TABLE).select("id, name, employee_id, email").execute()
    return list(response.data or [])


def fetch_employees() -> list[dict]:
    supabase = _require_client()
    response = (
        supabase.table(USERS_TABLE)
        .select(EMPLOYEE_COLUMNS)
        .eq("role", "employee")
        .order("name", desc=False)
        .execute()
    )
    return list(response.data or [])


def get_user(user_id: Any) -> dict | None:
    supabase = _require_client()
    response = supabase.table(USERS_TABLE).select(EMPLOYEE_COLUMNS).eq("id", user_id).limit(1).execute()
    return _first(response.data)


def find_active_employee(*, employee_id: str | None = None, email: str | None = None) -> dict | None:
    """Look up an active employee by employee id, falling back to e-mail."""
    if not employee_id and not email:
        return None
    supabase = _require_client()
    query = supabase.table(USERS_TABLE).select("id, name").eq("role", "employee").eq("is_active", True)
    if employee_id:
        query = query.eq("employee_id", employee_id)
    else:
        query = query.eq("email", email)
    response = query.limit(1).execute()
    return _first(response.data)


def count_users(*, role: str, active_only: bool = False) -> int:
    supabase = _require_client()
    query = supabase.table(USERS_TABLE).select("id", count="exact").eq("role", role)
    if active_only:
        query = query.eq("is_active", True)
    response = query.limit(1).execute()
    return response.count or 0


# --------------------------------------------------------------------------- activity


def insert_activity_log(entry: dict[str, Any]) -> None:
    supabase = _require_client()
    supabase.table(ACTIVITY_TABLE).insert(entry).execute()


def fetch_activity_logs(limit: int) -> list[dict]:
    supabase = _require_client()
    response = (
        supabase.table(ACTIVITY_TABLE)
        .select("*")
        .order("created_at", desc=True)
        .limit(limit)
        .execute()
    )
    return list(response.data or [])
