import csv
import io

from app.core.classification import AttendanceRecord
from app.core.export import export_attendance_csv


def rec(builder_id, day, status, **extra):
    return AttendanceRecord.from_row({"student_id": builder_id, "date": day, "status": status, **extra})


def parse(content):
    return list(csv.reader(io.StringIO(content)))


def test_export_rows_and_columns(policy):
    records = [
        rec("b1", "2025-03-15", "present"),
        rec("b1", "2025-03-16", "absent", excuse_reason="doctor"),
        rec("b2", "2025-03-15", "late"),
        rec("b2", "2025-03-20", "present"),  # Thursday, dropped
        rec("b9", "2025-03-17", "present"),  # unknown builder, dropped
    ]
    rows = parse(export_attendance_csv(
        [("b1", "Ada Lovelace"), ("b2", "Grace Hopper")], records, policy=policy, today="2025-03-31",
    ))

    assert rows[0] == [
        "Builder", "Total Present", "Total Absent", "Attendance Score (%)", "2025-03-15", "2025-03-16",
    ]
    assert rows[1] == ["Ada Lovelace", "1", "1", "50", "present", "excused"]
    assert rows[2] == ["Grace Hopper", "1", "0", "100", "late", "N/A"]


def test_export_builder_without_records(policy):
    rows = parse(export_attendance_csv([("b1", "Ada Lovelace")], [], policy=policy, today="2025-03-31"))
    assert rows == [
        ["Builder", "Total Present", "Total Absent", "Attendance Score (%)"],
        ["Ada Lovelace", "0", "0", "0"],
    ]


def test_export_skips_future_records(policy):
    records = [rec("b1", "2025-03-15", "present"), rec("b1", "2025-04-01", "absent")]
    rows = parse(export_attendance_csv([("b1", "Ada Lovelace")], records, policy=policy, today="2025-03-31"))
    assert rows[0][4:] == ["2025-03-15"]
