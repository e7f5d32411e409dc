"""Dashboard counters."""

from __future__ import annotations

from ...persistence import database


def compute_dashboard_analytics() -> dict:
    return {
        "totalTasks": database.count_tasks(),
        "assignedTasks": database.count_tasks(exclude_status="Unassigned"),
        "completedTasks": database.count_tasks(status="Completed"),
        "verifiedTasks": database.count_tasks(status="Verified"),
        "activeEmployees": database.count_users(role="employee", active_only=True),
        "admins": database.count_users(role="admin"),
    }


def list_employees() -> list[dict]:
    """Employees with the camelCase aliases the dashboard reads."""
    return [
        {
            **user,
            "employeeId": user.get("employee_id"),
            "lastActive": user.get("last_active"),
            "isActive": user.get("is_active"),
        }
        for user in database.fetch_employees()
    ]
