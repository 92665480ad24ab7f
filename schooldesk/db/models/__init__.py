from schooldesk.db.base import Base
from schooldesk.db.models.user import User
from schooldesk.db.models.school_class import SchoolClass
from schooldesk.db.models.student import Student
from schooldesk.db.models.attendance import Attendance
from schooldesk.db.models.comment_sheet import TeacherCommentSheet, LessonReport
from schooldesk.db.models.monthly_report import MonthlyReport, MonthlyReportWeek
from schooldesk.db.models.pdf_history import PdfHistory

__all__ = [
    "Base", "User", "SchoolClass", "Student", "Attendance",
    "TeacherCommentSheet", "LessonReport", "MonthlyReport", "MonthlyReportWeek", "PdfHistory",
]
