# schooldesk/db/models/attendance.py
from sqlalchemy import Column, Integer, String, Text, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship

from schooldesk.db.base import Base


class Attendance(Base):
    __tablename__ = "attendance"
    __table_args__ = (
        UniqueConstraint("student_id", "class_id", "date", name="uq_attendance_student_class_date"),
    )

    id = Column(Integer, primary_key=True, index=True)
    student_id = Column(Integer, ForeignKey("students.id", ondelete="CASCADE"), nullable=False)
    class_id = Column(Integer, ForeignKey("classes.id", ondelete="CASCADE"), nullable=False, index=True)
    # Строка YYYY-MM-DD. В старых записях встречаются и другие форматы
    date = Column(String, nullable=False, index=True)

    # Статус посещения:
    # ""  — не отмечено
    # "O" — присутствовал
    # "X" — отсутствовал
    # "/" — опоздал
    status = Column(String, default="", nullable=False)
    notes = Column(Text, nullable=True)
    time = Column(String, nullable=True)
    teacher_id = Column(Integer, ForeignKey("users.id"), nullable=True)

    student = relationship("Student")
