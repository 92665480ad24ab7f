# schooldesk/db/__init__.py
# Этот файл гарантирует, что все модели импортированы при первом импорте schooldesk.db

from schooldesk.db.base import Base
from schooldesk.db.models import (
    User, SchoolClass, Student, Attendance, TeacherCommentSheet, LessonReport,
    MonthlyReport, MonthlyReportWeek, PdfHistory,
)


def init_db(bind) -> None:
    """Создаёт таблицы текущей схемы. Старую lesson_reports не создаём."""
    tables = [t for t in Base.metadata.sorted_tables if t.name != LessonReport.__tablename__]
    Base.metadata.create_all(bind=bind, tables=tables)


# Экспортируем Base и модели наружу
__all__ = [
    "Base", "init_db", "User", "SchoolClass", "Student", "Attendance",
    "TeacherCommentSheet", "LessonReport", "MonthlyReport", "MonthlyReportWeek", "PdfHistory",
]
