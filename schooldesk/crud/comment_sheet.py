"""
Листы комментариев учителя (по одному на класс и дату).

До переименования таблица называлась lesson_reports. Какая из двух таблиц
есть в базе, определяется один раз при старте (detect_lesson_repository),
дальше все запросы идут через выбранный репозиторий.
"""
import logging
from collections import Counter
from typing import Iterable, List, Optional

from sqlalchemy import inspect
from sqlalchemy.orm import Session

from schooldesk.db.models.comment_sheet import LessonReport, TeacherCommentSheet
from schooldesk.db.models.user import User

logger = logging.getLogger(__name__)

TEXT_FIELDS = ("target_topic", "vocabulary", "mistakes", "strengths", "comments")


class LessonRecordRepository:
    model = TeacherCommentSheet

    @property
    def table_name(self) -> str:
        return self.model.__tablename__

    def get(self, db: Session, sheet_id: int):
        return db.query(self.model).filter(self.model.id == sheet_id).first()

    def get_by_class_and_date(self, db: Session, class_id: int, date: str):
        return db.query(self.model).filter(
            self.model.class_id == class_id,
            self.model.date == date,
        ).first()

    def list_for_range(self, db: Session, class_id: int, start: str, end: str):
        """Занятия класса в диапазоне дат, по возрастанию даты"""
        return (
            db.query(self.model)
            .filter(
                self.model.class_id == class_id,
                self.model.date >= start,
                self.model.date <= end,
            )
            .order_by(self.model.date.asc())
            .all()
        )

    def list(
        self,
        db: Session,
        class_id: Optional[int] = None,
        teacher_id: Optional[int] = None,
        start: Optional[str] = None,
        end: Optional[str] = None,
    ):
        query = db.query(self.model)
        if class_id:
            query = query.filter(self.model.class_id == class_id)
        if teacher_id:
            query = query.filter(self.model.teacher_id == teacher_id)
        if start:
            query = query.filter(self.model.date >= start)
        if end:
            query = query.filter(self.model.date <= end)
        return query.order_by(self.model.date.desc()).all()

    def create(self, db: Session, class_id: int, teacher_id: int, date: str, **texts):
        sheet = self.model(class_id=class_id, teacher_id=teacher_id, date=date)
        for name in TEXT_FIELDS:
            setattr(sheet, name, texts.get(name) or "")
        db.add(sheet)
        db.commit()
        db.refresh(sheet)
        return sheet

    def update(self, db: Session, sheet, teacher_id: int, **texts):
        sheet.teacher_id = teacher_id
        for name in TEXT_FIELDS:
            setattr(sheet, name, texts.get(name) or "")
        db.commit()
        db.refresh(sheet)
        return sheet

    def delete(self, db: Session, sheet) -> None:
        db.delete(sheet)
        db.commit()

    def available_months(self, db: Session, class_id: int) -> List[dict]:
        """Месяцы, за которые есть занятия: [{year, month, lesson_count}], новые первыми"""
        dates = db.query(self.model.date).filter(self.model.class_id == class_id).all()
        counts = Counter((int(d[:4]), int(d[5:7])) for (d,) in dates if d and len(d) >= 7)
        return [
            {"year": year, "month": month, "lesson_count": count}
            for (year, month), count in sorted(counts.items(), reverse=True)
        ]

    def teacher_names(self, db: Session, sheet_ids: Iterable[int]) -> List[str]:
        ids = [i for i in sheet_ids if i]
        if not ids:
            return []
        rows = (
            db.query(User.full_name)
            .join(self.model, self.model.teacher_id == User.id)
            .filter(self.model.id.in_(ids), User.full_name.isnot(None))
            .distinct()
            .order_by(User.full_name)
            .all()
        )
        return [name for (name,) in rows]


class CommentSheetRepository(LessonRecordRepository):
    model = TeacherCommentSheet


class LegacyLessonReportRepository(LessonRecordRepository):
    model = LessonReport


def detect_lesson_repository(bind) -> LessonRecordRepository:
    inspector = inspect(bind)
    if inspector.has_table(TeacherCommentSheet.__tablename__):
        return CommentSheetRepository()
    if inspector.has_table(LessonReport.__tablename__):
        logger.warning("⚠️ Таблица teacher_comment_sheets не найдена, используем lesson_reports")
        return LegacyLessonReportRepository()
    return CommentSheetRepository()
