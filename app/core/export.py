# app/core/export.py
import csv
import io
from collections import defaultdict
from datetime import date
from typing import Dict, Iterable, List, Optional, Tuple

from app.core.aggregation import attendance_rate
from app.core.classification import AttendanceRecord, Classification, normalize
from app.core.dates import DateLike, parse_calendar_date
from app.core.policy import AttendancePolicy, resolve_policy

BASE_HEADERS = ["Builder", "Total Present", "Total Absent", "Attendance Score (%)"]

_ATTENDED = (Classification.PRESENT, Classification.LATE)


def export_attendance_csv(
    builders: Iterable[Tuple[str, str]],
    records: Iterable[AttendanceRecord],
    policy: Optional[AttendancePolicy] = None,
    today: Optional[DateLike] = None,
) -> str:
    """
    CSV с историей посещаемости.

    builders: пары (builder_id, имя) в нужном порядке строк. Колонки дат:
    только учебные дни, за которые есть хотя бы одна запись; в ячейке
    итоговая классификация, "N/A" если записи нет.
    """
    policy = resolve_policy(policy)
    upper = parse_calendar_date(today) if today is not None else policy.today()
    builders = list(builders)
    known = {builder_id for builder_id, _ in builders}

    by_builder: Dict[str, Dict[date, Classification]] = defaultdict(dict)
    all_dates = set()
    for record in records:
        if record.builder_id not in known or record.date > upper:
            continue
        if not policy.calendar.is_class_day(record.date):
            continue
        by_builder[record.builder_id][record.date] = normalize(record, policy.schedule)
        all_dates.add(record.date)

    sorted_dates: List[date] = sorted(all_dates)

    output = io.StringIO()
    writer = csv.writer(output, lineterminator="\n")
    writer.writerow(BASE_HEADERS + [d.isoformat() for d in sorted_dates])

    for builder_id, name in builders:
        history = by_builder.get(builder_id, {})
        present = sum(1 for c in history.values() if c in _ATTENDED)
        absent = len(history) - present
        row = [name, present, absent, attendance_rate(present, len(history))]
        row.extend(history[d].value if d in history else "N/A" for d in sorted_dates)
        writer.writerow(row)

    return output.getvalue()
