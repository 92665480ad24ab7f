# schooldesk/services/attendance_matrix.py
"""
Сетка посещаемости "дата x ученик".

Одна и та же функция используется и для экрана, и для PDF, чтобы данные
в обоих местах совпадали.
"""
from typing import Optional

from sqlalchemy.orm import Session

from schooldesk.core.dates import DateInput, date_range, normalize_to_iso
from schooldesk.core.exceptions import NotFoundError
from schooldesk.crud import attendance as crud_attendance
from schooldesk.crud import school_class as crud_class
from schooldesk.schemas.attendance import AttendanceMatrix, StudentOut

PRESENT = "O"
ABSENT = "X"
LATE = "/"
UNMARKED = ""

STATUS_DISPLAY = {
    PRESENT: {"symbol": "⭕", "text": "Present", "color": "#d4edda", "text_color": "#155724"},
    ABSENT: {"symbol": "❌", "text": "Absent", "color": "#f8d7da", "text_color": "#721c24"},
    LATE: {"symbol": "⚠️", "text": "Late", "color": "#fff3cd", "text_color": "#856404"},
    UNMARKED: {"symbol": "-", "text": "Not marked", "color": "#e2e3e5", "text_color": "#6c757d"},
}


def format_attendance_status(status: Optional[str]) -> dict:
    return dict(STATUS_DISPLAY.get(status or UNMARKED, STATUS_DISPLAY[UNMARKED]))


def attendance_key(student_id: int, date: str) -> str:
    return f"{student_id}-{date}"


def build_attendance_matrix(
    db: Session,
    class_id: int,
    start_date: DateInput = None,
    end_date: DateInput = None,
) -> AttendanceMatrix:
    start = normalize_to_iso(start_date)
    end = normalize_to_iso(end_date)

    class_data = crud_class.get_class_info(db, class_id)
    if not class_data:
        raise NotFoundError("Класс не найден")

    students = crud_class.get_active_students(db, class_id)

    if start and end:
        # Все дни диапазона, даже без отметок: пустые дни должны быть видны
        dates = list(date_range(start, end))
    else:
        dates = crud_attendance.get_attendance_dates(db, class_id, start, end)

    attendance_map = {}
    for record in crud_attendance.get_class_attendance(db, class_id, start, end):
        # Дата из старых записей может быть в другом формате
        normalized = normalize_to_iso(record.date) or record.date
        attendance_map[attendance_key(record.student_id, normalized)] = record.status

    return AttendanceMatrix(
        students=[StudentOut.model_validate(s) for s in students],
        dates=dates,
        attendance_map=attendance_map,
        class_data=class_data,
        start_date=start,
        end_date=end,
    )
