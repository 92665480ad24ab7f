import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from schooldesk.api.deps import get_db, require_teacher
from schooldesk.core.dates import parse_date_param
from schooldesk.core.exceptions import NotFoundError, ValidationError
from schooldesk.crud import attendance as crud_attendance
from schooldesk.crud import school_class as crud_class
from schooldesk.db.models.user import User
from schooldesk.schemas.attendance import (
    AttendanceCreate,
    AttendanceMatrix,
    AttendanceOut,
    AttendanceUpdate,
    BulkAttendance,
    MoveAttendance,
)
from schooldesk.services.attendance_matrix import ABSENT, LATE, PRESENT, UNMARKED, build_attendance_matrix

logger = logging.getLogger(__name__)

router = APIRouter()

VALID_STATUSES = {PRESENT, ABSENT, LATE, UNMARKED}


def _check_status(status: str) -> None:
    if (status or "") not in VALID_STATUSES:
        raise ValidationError("Статус должен быть одним из: O, X, /, пусто")


# Записи посещаемости с фильтрами
@router.get("", response_model=List[AttendanceOut])
def list_attendance(
    class_id: Optional[int] = None,
    student_id: Optional[int] = None,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_teacher)
):
    return crud_attendance.list_attendance(
        db,
        class_id=class_id,
        student_id=student_id,
        start=parse_date_param(start_date, "start_date"),
        end=parse_date_param(end_date, "end_date"),
    )


# Сетка "дата x ученик" для класса
@router.get("/matrix", response_model=AttendanceMatrix)
def get_attendance_matrix(
    class_id: int,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_teacher)
):
    return build_attendance_matrix(
        db, class_id, parse_date_param(start_date, "start_date"), parse_date_param(end_date, "end_date")
    )


# Создать или обновить отметку
@router.post("", response_model=AttendanceOut)
def upsert_attendance(
    record: AttendanceCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_teacher)
):
    _check_status(record.status)
    date = parse_date_param(record.date)
    if not date:
        raise ValidationError("Поле date обязательно")

    # Проверяем, что ученик учится в этом классе
    students = {s.id for s in crud_class.get_active_students(db, record.class_id)}
    if record.student_id not in students:
        raise HTTPException(status_code=400, detail="Ученик не найден в классе")

    return crud_attendance.upsert_attendance(
        db,
        student_id=record.student_id,
        class_id=record.class_id,
        date=date,
        status=record.status,
        notes=record.notes,
        time=record.time,
        teacher_id=record.teacher_id or current_user.id,
    )


# Отметить весь класс одним статусом
@router.post("/bulk")
def bulk_mark(
    payload: BulkAttendance,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_teacher)
):
    _check_status(payload.status)
    date = parse_date_param(payload.date)
    if not date:
        raise ValidationError("Поле date обязательно")
    if not crud_class.get_class(db, payload.class_id):
        raise NotFoundError("Класс не найден")

    students = crud_class.get_active_students(db, payload.class_id)
    updated = crud_attendance.bulk_upsert(db, payload.class_id, [s.id for s in students], date, payload.status)
    logger.info(f"✅ [Attendance] Класс {payload.class_id}, {date}: отмечено {updated}")
    return {"updated": updated, "date": date}


# Перенести все отметки класса на другую дату
@router.post("/move")
def move_attendance(
    payload: MoveAttendance,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_teacher)
):
    from_date = parse_date_param(payload.from_date, "from_date")
    to_date = parse_date_param(payload.to_date, "to_date")
    if not from_date or not to_date:
        raise ValidationError("Поля from_date и to_date обязательны")
    if from_date == to_date:
        raise ValidationError("Даты from_date и to_date совпадают")
    if not crud_attendance.count_on_date(db, payload.class_id, from_date):
        raise NotFoundError("На эту дату нет отметок")

    moved = crud_attendance.move_attendance(db, payload.class_id, from_date, to_date)
    logger.info(f"✅ [Attendance] Класс {payload.class_id}: {moved} отметок {from_date} -> {to_date}")
    return {"moved": moved, "from_date": from_date, "to_date": to_date}


@router.put("/{record_id}", response_model=AttendanceOut)
def update_attendance(
    record_id: int,
    payload: AttendanceUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_teacher)
):
    _check_status(payload.status)
    record = crud_attendance.get_attendance(db, record_id)
    if not record:
        raise NotFoundError("Запись посещаемости не найдена")
    return crud_attendance.update_attendance(
        db, record, payload.status, payload.notes, payload.teacher_id or current_user.id
    )


@router.delete("/{record_id}")
def delete_attendance(
    record_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_teacher)
):
    record = crud_attendance.get_attendance(db, record_id)
    if not record:
        raise NotFoundError("Запись посещаемости не найдена")
    crud_attendance.delete_attendance(db, record)
    return {"message": "Запись удалена"}
