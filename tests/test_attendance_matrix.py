import pytest

from schooldesk.core.exceptions import NotFoundError
from schooldesk.db.models import Student
from schooldesk.services.attendance_matrix import (
    ABSENT,
    LATE,
    PRESENT,
    attendance_key,
    build_attendance_matrix,
    format_attendance_status,
)


def test_every_day_of_range_is_present_without_records(db, school_class, students):
    matrix = build_attendance_matrix(db, school_class.id, "2026-02-01", "2026-02-05")

    assert matrix.dates == ["2026-02-01", "2026-02-02", "2026-02-03", "2026-02-04", "2026-02-05"]
    assert matrix.attendance_map == {}
    assert matrix.class_data.name == "Sunshine Kids"
    assert matrix.class_data.teacher_name == "Sarah Miller"


def test_only_active_students_regular_first(db, school_class, students):
    matrix = build_attendance_matrix(db, school_class.id, "2026-02-01", "2026-02-01")

    names = [s.name for s in matrix.students]
    assert "Emi" not in names
    assert names[:2] == ["Aiko", "Ben"]
    assert set(names[2:]) == {"Chika", "Daichi"}


def test_legacy_slash_date_uses_normalized_key(db, school_class, students, add_attendance):
    aiko = students[0]
    add_attendance(aiko, "02/03/2026", PRESENT)

    matrix = build_attendance_matrix(db, school_class.id, "2026-02-01", "2026-02-05")

    assert matrix.attendance_map == {attendance_key(aiko.id, "2026-02-03"): PRESENT}
    assert matrix.status_for(aiko.id, "2026-02-03") == PRESENT


def test_legacy_rows_outside_range_are_dropped(db, school_class, students, add_attendance):
    add_attendance(students[0], "03/03/2026", ABSENT)

    matrix = build_attendance_matrix(db, school_class.id, "2026-02-01", "2026-02-28")

    assert matrix.attendance_map == {}


def test_without_range_dates_come_from_records(db, school_class, students, add_attendance):
    add_attendance(students[0], "2026-02-04", PRESENT)
    add_attendance(students[1], "02/02/2026", LATE)
    add_attendance(students[2], "2026-02-04", ABSENT)

    matrix = build_attendance_matrix(db, school_class.id)

    assert matrix.dates == ["2026-02-02", "2026-02-04"]
    assert matrix.start_date is None and matrix.end_date is None
    assert len(matrix.attendance_map) == 3


def test_range_bounds_are_normalized(db, school_class, students):
    matrix = build_attendance_matrix(db, school_class.id, "02/01/2026", "2026-02-03T00:00:00Z")

    assert matrix.start_date == "2026-02-01"
    assert matrix.end_date == "2026-02-03"
    assert len(matrix.dates) == 3


def test_unknown_class(db):
    with pytest.raises(NotFoundError):
        build_attendance_matrix(db, 999, "2026-02-01", "2026-02-05")


def test_class_with_eight_students_and_two_lesson_days(db, school_class, add_attendance):
    roster = [Student(name=f"Student {i}", class_id=school_class.id) for i in range(1, 9)]
    db.add_all(roster)
    db.commit()
    for i, student in enumerate(roster[:4]):
        add_attendance(student, "2026-02-02", PRESENT if i % 2 == 0 else LATE)
    for student in roster[4:]:
        add_attendance(student, "2026-02-04", PRESENT)

    matrix = build_attendance_matrix(db, school_class.id, "2026-02-01", "2026-02-06")

    assert len(matrix.students) == 8
    assert len(matrix.dates) == 6
    assert len(matrix.attendance_map) == 8
    # Не отмеченные в этот день ученики не имеют ключа
    assert attendance_key(roster[0].id, "2026-02-04") not in matrix.attendance_map
    assert matrix.status_for(roster[0].id, "2026-02-04") == ""


def test_format_attendance_status():
    assert format_attendance_status(PRESENT)["text"] == "Present"
    assert format_attendance_status("?")["text"] == "Not marked"
    assert format_attendance_status(None)["symbol"] == "-"
    # Возвращается копия
    format_attendance_status(LATE)["text"] = "changed"
    assert format_attendance_status(LATE)["text"] == "Late"
