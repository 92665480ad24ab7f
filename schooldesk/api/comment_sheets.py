import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from schooldesk.api.deps import get_db, get_lesson_repository, require_teacher
from schooldesk.core.dates import parse_date_param
from schooldesk.core.exceptions import ConflictError, NotFoundError, ValidationError
from schooldesk.crud import school_class as crud_class
from schooldesk.crud.comment_sheet import TEXT_FIELDS, LessonRecordRepository
from schooldesk.db.models.user import User
from schooldesk.schemas.comment_sheet import CommentSheetCreate, CommentSheetOut, CommentSheetUpdate

logger = logging.getLogger(__name__)

router = APIRouter()


def _to_out(sheet) -> CommentSheetOut:
    out = CommentSheetOut.model_validate(sheet)
    out.teacher_name = sheet.teacher.full_name if sheet.teacher else None
    return out


@router.get("", response_model=List[CommentSheetOut])
def list_comment_sheets(
    class_id: Optional[int] = None,
    teacher_id: Optional[int] = None,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    db: Session = Depends(get_db),
    repo: LessonRecordRepository = Depends(get_lesson_repository),
    current_user: User = Depends(require_teacher)
):
    sheets = repo.list(
        db,
        class_id=class_id,
        teacher_id=teacher_id,
        start=parse_date_param(start_date, "start_date"),
        end=parse_date_param(end_date, "end_date"),
    )
    return [_to_out(s) for s in sheets]


@router.get("/by-date/{class_id}/{date}", response_model=CommentSheetOut)
def get_comment_sheet_by_date(
    class_id: int,
    date: str,
    db: Session = Depends(get_db),
    repo: LessonRecordRepository = Depends(get_lesson_repository),
    current_user: User = Depends(require_teacher)
):
    sheet = repo.get_by_class_and_date(db, class_id, parse_date_param(date))
    if not sheet:
        raise NotFoundError("Лист комментариев на эту дату не найден")
    return _to_out(sheet)


@router.get("/{sheet_id}", response_model=CommentSheetOut)
def get_comment_sheet(
    sheet_id: int,
    db: Session = Depends(get_db),
    repo: LessonRecordRepository = Depends(get_lesson_repository),
    current_user: User = Depends(require_teacher)
):
    sheet = repo.get(db, sheet_id)
    if not sheet:
        raise NotFoundError("Лист комментариев не найден")
    return _to_out(sheet)


@router.post("", response_model=CommentSheetOut, status_code=status.HTTP_201_CREATED)
def create_comment_sheet(
    payload: CommentSheetCreate,
    db: Session = Depends(get_db),
    repo: LessonRecordRepository = Depends(get_lesson_repository),
    current_user: User = Depends(require_teacher)
):
    date = parse_date_param(payload.date)
    if not date:
        raise ValidationError("Поле date обязательно")
    if not crud_class.get_class(db, payload.class_id):
        raise NotFoundError("Класс не найден")

    # Один лист на класс и дату
    existing = repo.get_by_class_and_date(db, payload.class_id, date)
    if existing:
        raise ConflictError("Лист комментариев на эту дату уже существует", existing_id=existing.id)

    texts = payload.model_dump(include=set(TEXT_FIELDS))
    try:
        sheet = repo.create(db, payload.class_id, payload.teacher_id, date, **texts)
    except IntegrityError:
        db.rollback()
        existing = repo.get_by_class_and_date(db, payload.class_id, date)
        raise ConflictError(
            "Лист комментариев на эту дату уже существует", existing_id=existing.id if existing else None
        )
    logger.info(f"✅ [Comment sheets] Создан лист {sheet.id} ({repo.table_name}) для класса {payload.class_id} на {date}")
    return _to_out(sheet)


@router.put("/{sheet_id}", response_model=CommentSheetOut)
def update_comment_sheet(
    sheet_id: int,
    payload: CommentSheetUpdate,
    db: Session = Depends(get_db),
    repo: LessonRecordRepository = Depends(get_lesson_repository),
    current_user: User = Depends(require_teacher)
):
    sheet = repo.get(db, sheet_id)
    if not sheet:
        raise NotFoundError("Лист комментариев не найден")
    texts = payload.model_dump(include=set(TEXT_FIELDS))
    return _to_out(repo.update(db, sheet, payload.teacher_id, **texts))


@router.delete("/{sheet_id}")
def delete_comment_sheet(
    sheet_id: int,
    db: Session = Depends(get_db),
    repo: LessonRecordRepository = Depends(get_lesson_repository),
    current_user: User = Depends(require_teacher)
):
    sheet = repo.get(db, sheet_id)
    if not sheet:
        raise NotFoundError("Лист комментариев не найден")
    repo.delete(db, sheet)
    return {"message": "Лист комментариев удалён"}
