"""Task service helpers."""

from .activity import list_activity, log_activity
from .analytics import compute_dashboard_analytics, list_employees
from .bulk_upload import process_bulk_upload
from .export import export_filename, export_tasks_csv

__all__ = [
    "log_activity",
    "list_activity",
    "compute_dashboard_analytics",
    "list_employees",
    "process_bulk_upload",
    "export_tasks_csv",
    "export_filename",
]
