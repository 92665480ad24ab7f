# schooldesk/db/models/pdf_history.py
from sqlalchemy import Column, Integer, String, ForeignKey, DateTime
from sqlalchemy.sql import func

from schooldesk.db.base import Base


class PdfHistory(Base):
    __tablename__ = "pdf_history"

    id = Column(Integer, primary_key=True, index=True)
    filename = Column(String, nullable=False)
    type = Column(String, nullable=False)  # attendance_grid | monthly_report
    class_id = Column(Integer, ForeignKey("classes.id", ondelete="SET NULL"), nullable=True)
    storage_key = Column(String, nullable=False)
    file_size = Column(Integer, nullable=True)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
