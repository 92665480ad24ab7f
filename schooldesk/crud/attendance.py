from typing import List, Optional

from sqlalchemy import and_, or_
from sqlalchemy.orm import Session

from schooldesk.core.dates import normalize_to_iso
from schooldesk.db.models.attendance import Attendance
from schooldesk.db.models.student import Student

ISO_LIKE = "____-__-__"


def _in_range(value: str, start: Optional[str], end: Optional[str]) -> bool:
    if start and value < start:
        return False
    if end and value > end:
        return False
    return True


def _bounded(query, start: Optional[str], end: Optional[str]):
    """
    Фильтр по диапазону дат. Записи со старым форматом даты (не YYYY-MM-DD)
    строкой не сравнить, поэтому они выбираются всегда и отсекаются уже
    после нормализации.
    """
    conditions = []
    if start:
        conditions.append(Attendance.date >= start)
    if end:
        conditions.append(Attendance.date <= end)
    if not conditions:
        return query
    return query.filter(or_(and_(*conditions), ~Attendance.date.like(ISO_LIKE)))


def get_class_attendance(
    db: Session, class_id: int, start: Optional[str] = None, end: Optional[str] = None
) -> List[Attendance]:
    rows = _bounded(db.query(Attendance).filter(Attendance.class_id == class_id), start, end).all()
    return [r for r in rows if _in_range(normalize_to_iso(r.date) or r.date, start, end)]


def get_attendance_dates(
    db: Session, class_id: int, start: Optional[str] = None, end: Optional[str] = None
) -> List[str]:
    query = db.query(Attendance.date).filter(Attendance.class_id == class_id).distinct()
    dates = set()
    for (raw,) in _bounded(query, start, end).all():
        value = normalize_to_iso(raw) or raw
        if _in_range(value, start, end):
            dates.add(value)
    return sorted(dates)


def list_attendance(
    db: Session,
    class_id: Optional[int] = None,
    student_id: Optional[int] = None,
    start: Optional[str] = None,
    end: Optional[str] = None,
):
    query = db.query(Attendance, Student).join(Student, Attendance.student_id == Student.id)
    if class_id:
        query = query.filter(Attendance.class_id == class_id)
    if student_id:
        query = query.filter(Attendance.student_id == student_id)
    result = []
    for record, student in _bounded(query, start, end).all():
        value = normalize_to_iso(record.date) or record.date
        if not _in_range(value, start, end):
            continue
        result.append({
            "id": record.id,
            "student_id": record.student_id,
            "class_id": record.class_id,
            "date": value,
            "status": record.status,
            "notes": record.notes,
            "time": record.time,
            "teacher_id": record.teacher_id,
            "student_name": student.name,
            "student_type": student.student_type,
        })
    result.sort(key=lambda r: (r["date"], r["student_type"] or "", r["student_name"]))
    return result


def get_attendance(db: Session, record_id: int) -> Optional[Attendance]:
    return db.query(Attendance).filter(Attendance.id == record_id).first()


def _find(db: Session, student_id: int, class_id: int, date: str) -> Optional[Attendance]:
    return db.query(Attendance).filter(
        Attendance.student_id == student_id,
        Attendance.class_id == class_id,
        Attendance.date == date,
    ).first()


def _apply_upsert(db: Session, student_id: int, class_id: int, date: str, **fields) -> Attendance:
    # Находим или создаём запись
    existing = _find(db, student_id, class_id, date)
    if existing:
        for name, value in fields.items():
            setattr(existing, name, value)
    else:
        existing = Attendance(student_id=student_id, class_id=class_id, date=date, **fields)
        db.add(existing)
    return existing


def upsert_attendance(
    db: Session,
    student_id: int,
    class_id: int,
    date: str,
    status: str = "",
    notes: Optional[str] = None,
    time: Optional[str] = None,
    teacher_id: Optional[int] = None,
) -> Attendance:
    record = _apply_upsert(
        db, student_id, class_id, date,
        status=status or "", notes=notes or "", time=time, teacher_id=teacher_id,
    )
    db.commit()
    db.refresh(record)
    return record


def bulk_upsert(db: Session, class_id: int, student_ids: List[int], date: str, status: str) -> int:
    for student_id in student_ids:
        _apply_upsert(db, student_id, class_id, date, status=status, notes="", time=None, teacher_id=None)
    db.commit()
    return len(student_ids)


def update_attendance(db: Session, record: Attendance, status: str, notes: Optional[str], teacher_id: Optional[int]):
    record.status = status or ""
    record.notes = notes or ""
    record.teacher_id = teacher_id
    db.commit()
    db.refresh(record)
    return record


def delete_attendance(db: Session, record: Attendance) -> None:
    db.delete(record)
    db.commit()


def count_on_date(db: Session, class_id: int, date: str) -> int:
    return db.query(Attendance).filter(Attendance.class_id == class_id, Attendance.date == date).count()


def move_attendance(db: Session, class_id: int, from_date: str, to_date: str) -> int:
    """Переносит все отметки класса с одной даты на другую (в одной транзакции)"""
    try:
        db.query(Attendance).filter(
            Attendance.class_id == class_id, Attendance.date == to_date
        ).delete(synchronize_session=False)
        moved = db.query(Attendance).filter(
            Attendance.class_id == class_id, Attendance.date == from_date
        ).update({Attendance.date: to_date}, synchronize_session=False)
        db.commit()
    except Exception:
        db.rollback()
        raise
    return moved
