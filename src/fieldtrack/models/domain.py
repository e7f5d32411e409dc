"""Domain models for field tasks, employees and coordinates."""

from dataclasses import dataclass, field
from typing import Any, Optional


TASK_STATUSES: tuple[str, ...] = ("Unassigned", "Pending", "In Progress", "Completed", "Verified")
OPEN_STATUSES: tuple[str, ...] = ("Pending", "In Progress")


@dataclass(frozen=True, slots=True)
class Coordinate:
    """A latitude/longitude pair in decimal degrees."""

    latitude: float
    longitude: float


@dataclass(slots=True)
class Task:
    """A verification task as stored in the ``tasks`` table.

    Coordinates are kept as received (numbers, numeric strings, blanks or
    None); interpreting them is the geocoder's job.
    """

    id: Any
    title: Optional[str] = None
    pincode: Optional[str] = None
    map_url: Optional[str] = None
    latitude: Any = None
    longitude: Any = None
    address: Optional[str] = None
    client_name: Optional[str] = None
    notes: Optional[str] = None
    status: str = "Unassigned"
    assigned_to: Any = None
    assigned_date: Optional[str] = None
    completed_at: Optional[str] = None
    verified_at: Optional[str] = None
    created_at: Optional[str] = None
    raw: dict = field(default_factory=dict)

    @classmethod
    def from_record(cls, record: dict) -> "Task":
        pincode = record.get("pincode")
        return cls(
            id=record.get("id"),
            title=record.get("title"),
            pincode=str(pincode).strip() if pincode not in (None, "") else None,
            map_url=record.get("map_url") or record.get("mapUrl") or None,
            latitude=record.get("latitude"),
            longitude=record.get("longitude"),
            address=record.get("address"),
            client_name=record.get("client_name"),
            notes=record.get("notes"),
            status=record.get("status") or "Unassigned",
            assigned_to=record.get("assigned_to"),
            assigned_date=record.get("assigned_date"),
            completed_at=record.get("completed_at"),
            verified_at=record.get("verified_at"),
            created_at=record.get("created_at"),
            raw=dict(record),
        )


@dataclass(slots=True)
class Employee:
    """Represents a field employee from the ``users`` table."""

    id: Any
    name: str
    email: Optional[str] = None
    employee_id: Optional[str] = None
    phone: Optional[str] = None
    is_active: bool = True
