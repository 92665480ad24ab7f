# schooldesk/db/models/monthly_report.py
from sqlalchemy import Column, Integer, String, Text, ForeignKey, DateTime, UniqueConstraint, Enum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from schooldesk.db.base import Base


class MonthlyReport(Base):
    __tablename__ = "monthly_reports"
    __table_args__ = (
        # Один отчёт на класс и точный диапазон дат
        UniqueConstraint("class_id", "start_date", "end_date", name="uq_monthly_report_class_range"),
    )

    id = Column(Integer, primary_key=True, index=True)
    class_id = Column(Integer, ForeignKey("classes.id", ondelete="CASCADE"), nullable=False, index=True)
    year = Column(Integer, nullable=False)
    month = Column(Integer, nullable=False)
    start_date = Column(String, nullable=False)
    end_date = Column(String, nullable=False)
    monthly_theme = Column(Text, default="")
    status = Column(Enum("draft", "published", name="report_status"), default="draft", nullable=False)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    pdf_url = Column(String, nullable=True)  # ключ в хранилище, не публичная ссылка
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    school_class = relationship("SchoolClass")
    author = relationship("User")
    weeks = relationship(
        "MonthlyReportWeek",
        back_populates="report",
        order_by="MonthlyReportWeek.week_number",
        cascade="all, delete-orphan",
    )


class MonthlyReportWeek(Base):
    __tablename__ = "monthly_report_weeks"
    __table_args__ = (
        UniqueConstraint("monthly_report_id", "week_number", name="uq_report_week_number"),
    )

    id = Column(Integer, primary_key=True, index=True)
    monthly_report_id = Column(Integer, ForeignKey("monthly_reports.id", ondelete="CASCADE"), nullable=False)
    week_number = Column(Integer, nullable=False)  # порядковый номер занятия, не ISO-неделя
    lesson_date = Column(String, nullable=True)
    target = Column(Text, default="")
    vocabulary = Column(Text, default="")
    phrase = Column(Text, default="")
    others = Column(Text, default="")
    teacher_comment_sheet_id = Column(Integer, nullable=True)

    report = relationship("MonthlyReport", back_populates="weeks")
