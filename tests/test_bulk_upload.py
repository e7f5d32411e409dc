import io
import re
from datetime import date

import pytest
from openpyxl import Workbook

from fieldtrack.services.tasks import bulk_upload
from fieldtrack.services.tasks.bulk_upload import (
    BulkUploadResult,
    UnsupportedFileError,
    build_task_record,
    import_rows,
    normalize_header,
    process_bulk_upload,
    read_rows,
)


def _xlsx(rows: list[list]) -> bytes:
    workbook = Workbook()
    sheet = workbook.active
    for row in rows:
        sheet.append(row)
    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


def _no_employee(**_):
    return None


@pytest.mark.parametrize(
    "header,expected",
    [
        ("Case ID", "caseid"),
        ("Request-ID", "requestid"),
        ("  PIN  ", "pin"),
        ("Google_Map", "googlemap"),
        ("Employee E-mail", "employeeemail"),
    ],
)
def test_normalize_header(header, expected):
    assert normalize_header(header) == expected


def test_read_rows_from_csv_skips_blank_lines():
    content = "\ufeffCase ID,Pincode\nCASE-1,560001\n,\nCASE-2,560002\n".encode("utf-8")

    rows = read_rows("tasks.csv", content)

    assert rows == [{"Case ID": "CASE-1", "Pincode": "560001"}, {"Case ID": "CASE-2", "Pincode": "560002"}]


def test_read_rows_from_xlsx_uses_first_sheet():
    content = _xlsx([["Request ID", "PIN", "Notes"], ["REQ-9", 560001, "n/a"], [None, None, None]])

    rows = read_rows("tasks.XLSX", content)

    assert rows == [{"Request ID": "REQ-9", "PIN": 560001, "Notes": "n/a"}]


@pytest.mark.parametrize("filename", ["tasks.xls", "tasks.txt", "tasks"])
def test_read_rows_rejects_unsupported_files(filename):
    with pytest.raises(UnsupportedFileError):
        read_rows(filename, b"anything")


def test_build_task_record_maps_aliases():
    record = build_task_record(
        {
            "Tracking ID": "TRK-1",
            "Postal Code": "560001",
            "Individual Name": "Asha Rao",
            "Google Map": "https://maps.google.com/@12.9800,77.6000,15z",
            "Remarks": "Ring twice",
            "Location": "MG Road",
        },
        2,
        admin_id="admin-1",
        employee_lookup=_no_employee,
    )

    assert record["title"] == "TRK-1"
    assert record["pincode"] == "560001"
    assert record["client_name"] == "Asha Rao"
    assert record["notes"] == "Ring twice"
    assert record["address"] == "MG Road"
    assert (record["latitude"], record["longitude"]) == (12.98, 77.6)
    assert record["status"] == "Unassigned"
    assert record["created_by"] == "admin-1"


def test_build_task_record_prefers_sheet_coordinates_over_link():
    record = build_task_record(
        {"Case ID": "C1", "Pincode": "560001", "Lat": "13.1", "Lng": "77.7", "Map URL": "https://maps.google.com/?q=1.5,2.5"},
        2,
        employee_lookup=_no_employee,
    )

    assert (record["latitude"], record["longitude"]) == (13.1, 77.7)


def test_build_task_record_ignores_garbage_coordinates():
    record = build_task_record(
        {"Case ID": "C1", "Pincode": "560001", "Latitude": "n/a", "Longitude": "77.7"},
        2,
        employee_lookup=_no_employee,
    )

    assert record["latitude"] is None
    assert record["client_name"] == "Unknown Client"


def test_build_task_record_handles_numeric_cells():
    record = build_task_record({"Case ID": 1042.0, "Pincode": 560001.0}, 2, employee_lookup=_no_employee)

    assert record["title"] == "1042"
    assert record["pincode"] == "560001"


@pytest.mark.parametrize(
    "row,message",
    [
        ({"Pincode": "560001"}, "Row 5: Case ID/Title is missing"),
        ({"Case ID": "C1"}, "Row 5: Pincode is missing"),
        ({"Case ID": "C1", "Pincode": "5600"}, "Row 5: Invalid Pincode (must be 6 digits)"),
        ({"Case ID": "C1", "Pincode": "56O001"}, "Row 5: Invalid Pincode (must be 6 digits)"),
    ],
)
def test_build_task_record_row_errors(row, message):
    with pytest.raises(ValueError, match=re.escape(message)):
        build_task_record(row, 5, employee_lookup=_no_employee)


def test_build_task_record_assigns_known_employee():
    seen = {}

    def lookup(*, employee_id=None, email=None):
        seen.update(employee_id=employee_id, email=email)
        return {"id": 7, "name": "Ravi"}

    record = build_task_record(
        {"Case ID": "C1", "Pincode": "560001", "Employee Email": " Ravi@Example.com "},
        2,
        employee_lookup=lookup,
    )

    assert seen == {"employee_id": None, "email": "ravi@example.com"}
    assert record["assigned_to"] == 7
    assert record["status"] == "Pending"
    assert record["assigned_date"] == date.today().isoformat()


def test_build_task_record_unknown_employee_stays_unassigned():
    record = build_task_record(
        {"Case ID": "C1", "Pincode": "560001", "Emp ID": "EMP-404"},
        2,
        employee_lookup=_no_employee,
    )

    assert record["status"] == "Unassigned"
    assert record["assigned_to"] is None


def test_import_rows_numbers_errors_from_row_two(fake_db):
    rows = [
        {"Case ID": "C1", "Pincode": "560001"},
        {"Case ID": "", "Pincode": "560001"},
        {"Case ID": "C3", "Pincode": "12"},
    ]

    records, result = import_rows(rows)

    assert [record["title"] for record in records] == ["C1"]
    assert result.success_count == 1
    assert result.errors == ["Row 3: Case ID/Title is missing", "Row 4: Invalid Pincode (must be 6 digits)"]


def test_bulk_upload_result_truncates_errors():
    result = BulkUploadResult(errors=[f"Row {n}: Pincode is missing" for n in range(2, 27)])

    assert len(result.visible_errors(20)) == 20
    assert result.has_more_errors(20)
    assert not BulkUploadResult(errors=["one"]).has_more_errors(20)


def test_process_bulk_upload_inserts_valid_rows_and_logs(fake_db):
    fake_db.add_user(id=7, name="Ravi", employee_id="EMP-7", email="ravi@example.com")
    content = (
        "Case ID,Pincode,Employee ID,Client Name\n"
        "C1,560001,EMP-7,Asha\n"
        "C2,999,,Bala\n"
        "C3,560100,,Chitra\n"
    ).encode("utf-8")

    result = process_bulk_upload("upload.csv", content, admin_id="admin-1", admin_name="Admin")

    assert result.success_count == 2
    assert result.errors == ["Row 3: Invalid Pincode (must be 6 digits)"]
    tasks = fake_db.tables["tasks"]
    assert [task["title"] for task in tasks] == ["C1", "C3"]
    assert tasks[0]["assigned_to"] == 7
    assert tasks[0]["status"] == "Pending"
    assert tasks[1]["status"] == "Unassigned"
    assert [call for call in fake_db.calls if call == ("tasks", "insert")] == [("tasks", "insert")]
    assert fake_db.tables["activity_logs"][0]["action"] == "BULK_UPLOAD"
    assert fake_db.tables["activity_logs"][0]["details"] == "Uploaded 2 tasks"


def test_process_bulk_upload_from_xlsx(fake_db):
    content = _xlsx([["Case ID", "Pincode", "Map"], ["X1", 560002, "https://maps.google.com/?q=12.99,77.59"]])

    result = process_bulk_upload("sheet.xlsx", content)

    assert result.success_count == 1
    task = fake_db.tables["tasks"][0]
    assert task["pincode"] == "560002"
    assert (task["latitude"], task["longitude"]) == (12.99, 77.59)


def test_process_bulk_upload_with_no_valid_rows_skips_insert(fake_db):
    result = process_bulk_upload("upload.csv", b"Case ID,Pincode\n,560001\n")

    assert result.success_count == 0
    assert ("tasks", "insert") not in fake_db.calls


def test_process_bulk_upload_rejects_empty_file(fake_db):
    with pytest.raises(ValueError, match="File is empty"):
        process_bulk_upload("upload.csv", b"Case ID,Pincode\n")


def test_process_bulk_upload_uses_configured_lookup(monkeypatch, fake_db):
    calls = []

    def lookup(**kwargs):
        calls.append(kwargs)
        return None

    monkeypatch.setattr(bulk_upload.database, "find_active_employee", lookup)

    process_bulk_upload("upload.csv", b"Case ID,Pincode,EmpID\nC1,560001,E-1\n")

    assert calls == [{"employee_id": "E-1", "email": None}]
