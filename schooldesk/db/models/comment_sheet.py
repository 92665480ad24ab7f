# schooldesk/db/models/comment_sheet.py
from sqlalchemy import Column, Integer, String, Text, ForeignKey, DateTime, UniqueConstraint
from sqlalchemy.orm import declared_attr, relationship
from sqlalchemy.sql import func

from schooldesk.db.base import Base


class LessonRecordMixin:
    """Общие колонки листа комментариев учителя (одно занятие)"""

    id = Column(Integer, primary_key=True, index=True)
    date = Column(String, nullable=False)  # YYYY-MM-DD
    target_topic = Column(Text, default="")
    vocabulary = Column(Text, default="")
    mistakes = Column(Text, default="")
    strengths = Column(Text, default="")
    comments = Column(Text, default="")
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    @declared_attr
    def class_id(cls):
        return Column(Integer, ForeignKey("classes.id", ondelete="CASCADE"), nullable=False, index=True)

    @declared_attr
    def teacher_id(cls):
        return Column(Integer, ForeignKey("users.id"), nullable=False)

    @declared_attr
    def teacher(cls):
        return relationship("User")


class TeacherCommentSheet(LessonRecordMixin, Base):
    __tablename__ = "teacher_comment_sheets"
    __table_args__ = (
        UniqueConstraint("class_id", "date", name="uq_comment_sheet_class_date"),
    )


class LessonReport(LessonRecordMixin, Base):
    # Старое имя таблицы (до переименования в teacher_comment_sheets)
    __tablename__ = "lesson_reports"
    __table_args__ = (
        UniqueConstraint("class_id", "date", name="uq_lesson_report_class_date"),
    )
