"""Route group exports."""

from . import employees, health, reports, routes, tasks

__all__ = ["tasks", "routes", "health", "employees", "reports"]
