"""Spreadsheet import of tasks.

Rows arrive with whatever headers the client's sheet uses ("Case ID",
"Request-ID", "PIN", ...). Headers are normalised to lowercase alphanumerics
and matched against alias lists; each row either becomes a task record or an
error message, and the valid rows are inserted together.
"""

from __future__ import annotations

import csv
import io
import logging
import re
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Any, Callable, Iterable, Optional

from openpyxl import load_workbook

from ...persistence import database
from ..routing.geocoder import coerce_float, extract_coordinates
from .activity import log_activity

logger = logging.getLogger(__name__)

SUPPORTED_SUFFIXES = frozenset({".csv", ".xlsx"})

FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "title": ("requestid", "caseid", "title", "id", "trackingid"),
    "pincode": ("pincode", "pin", "zip", "postalcode"),
    "client_name": ("individualname", "clientname", "client", "name"),
    "map_url": ("mapurl", "map", "link", "googlemap", "url"),
    "notes": ("notes", "note", "remarks"),
    "address": ("address", "location"),
    "employee_id": ("employeeid", "empid"),
    "employee_email": ("employeeemail", "email", "mail"),
    "latitude": ("latitude", "lat"),
    "longitude": ("longitude", "lng", "long"),
}

_HEADER_CLEANUP = re.compile(r"[^a-z0-9]")
_PINCODE_PATTERN = re.compile(r"^[0-9]{6}$")


class UnsupportedFileError(ValueError):
    """Raised for uploads whose extension is not a readable spreadsheet."""


@dataclass(slots=True)
class BulkUploadResult:
    success_count: int = 0
    errors: list[str] = field(default_factory=list)

    def visible_errors(self, limit: int) -> list[str]:
        return self.errors[:limit]

    def has_more_errors(self, limit: int) -> bool:
        return len(self.errors) > limit


def normalize_header(header: Any) -> str:
    return _HEADER_CLEANUP.sub("", str(header).lower())


def normalize_row(raw: dict[str, Any]) -> dict[str, Any]:
    row: dict[str, Any] = {}
    for key, value in raw.items():
        if key is None:
            continue
        row[normalize_header(key)] = value
    return row


def _pick(row: dict[str, Any], field_name: str) -> Any:
    for alias in FIELD_ALIASES[field_name]:
        value = row.get(alias)
        if isinstance(value, str):
            value = value.strip()
        if value not in (None, ""):
            return value
    return None


def _as_text(value: Any) -> str:
    # spreadsheets hand back 560001.0 for numeric cells
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def read_rows(filename: str, content: bytes) -> list[dict[str, Any]]:
    """Read the first worksheet (or the whole CSV) into header-keyed dicts."""
    suffix = Path(filename).suffix.lower()
    if suffix not in SUPPORTED_SUFFIXES:
        raise UnsupportedFileError(f"Only .csv and .xlsx files are supported. Got: {suffix or 'no extension'}")

    if suffix == ".csv":
        text = content.decode("utf-8-sig")
        reader = csv.DictReader(io.StringIO(text))
        return [dict(row) for row in reader if any(isinstance(value, str) and value.strip() for value in row.values())]

    workbook = load_workbook(filename=io.BytesIO(content), read_only=True, data_only=True)
    try:
        worksheet = workbook.worksheets[0]
        row_iter = worksheet.iter_rows(values_only=True)
        first_row = next(row_iter, None)
        if not first_row:
            return []
        headers = [str(cell) if cell is not None else "" for cell in first_row]
        rows: list[dict[str, Any]] = []
        for values in row_iter:
            if values is None or all(cell in (None, "") for cell in values):
                continue
            rows.append({headers[i]: cell for i, cell in enumerate(values) if i < len(headers) and headers[i]})
        return rows
    finally:
        workbook.close()


def build_task_record(
    raw: dict[str, Any],
    row_number: int,
    *,
    admin_id: Any = None,
    employee_lookup: Optional[Callable[..., Optional[dict]]] = None,
) -> dict[str, Any]:
    """Turn one spreadsheet row into a task record; raises ValueError with a row message."""
    row = normalize_row(raw)

    title = _pick(row, "title")
    if title is None:
        raise ValueError(f"Row {row_number}: Case ID/Title is missing")
    pincode = _pick(row, "pincode")
    if pincode is None:
        raise ValueError(f"Row {row_number}: Pincode is missing")
    pincode_text = _as_text(pincode)
    if not _PINCODE_PATTERN.match(pincode_text):
        raise ValueError(f"Row {row_number}: Invalid Pincode (must be 6 digits)")

    status = "Unassigned"
    assigned_to = None
    assigned_date = None
    employee_id = _pick(row, "employee_id")
    employee_email = _pick(row, "employee_email")
    if employee_id is not None or employee_email is not None:
        lookup = employee_lookup or database.find_active_employee
        employee = lookup(
            employee_id=_as_text(employee_id) if employee_id is not None else None,
            email=_as_text(employee_email).lower() if employee_email is not None else None,
        )
        if employee:
            assigned_to = employee.get("id")
            assigned_date = date.today().isoformat()
            status = "Pending"

    map_url = _pick(row, "map_url")
    latitude = coerce_float(_pick(row, "latitude"))
    longitude = coerce_float(_pick(row, "longitude"))
    if map_url and (not latitude or not longitude):
        coordinate = extract_coordinates(str(map_url))
        if coordinate:
            latitude, longitude = coordinate.latitude, coordinate.longitude

    return {
        "title": _as_text(title),
        "pincode": pincode_text,
        "client_name": _pick(row, "client_name") or "Unknown Client",
        "map_url": str(map_url) if map_url else None,
        "address": _pick(row, "address"),
        "latitude": latitude or None,
        "longitude": longitude or None,
        "notes": _pick(row, "notes"),
        "status": status,
        "assigned_to": assigned_to,
        "assigned_date": assigned_date,
        "created_by": admin_id,
    }


def import_rows(rows: Iterable[dict[str, Any]], *, admin_id: Any = None) -> tuple[list[dict[str, Any]], BulkUploadResult]:
    """Validate every row, collecting records and per-row errors."""
    result = BulkUploadResult()
    records: list[dict[str, Any]] = []
    for index, raw in enumerate(rows):
        row_number = index + 2  # header is row 1
        try:
            records.append(build_task_record(raw, row_number, admin_id=admin_id))
        except ValueError as exc:
            result.errors.append(str(exc))
            continue
        result.success_count += 1
    return records, result


def process_bulk_upload(
    filename: str,
    content: bytes,
    *,
    admin_id: Any = None,
    admin_name: Optional[str] = None,
) -> BulkUploadResult:
    rows = read_rows(filename, content)
    if not rows:
        raise ValueError("File is empty.")

    records, result = import_rows(rows, admin_id=admin_id)
    if records:
        database.insert_tasks(records)
    logger.info(f"Bulk upload {filename}: {result.success_count} tasks, {len(result.errors)} rejected rows")
    log_activity(admin_id, admin_name, "BULK_UPLOAD", None, f"Uploaded {result.success_count} tasks")
    return result
