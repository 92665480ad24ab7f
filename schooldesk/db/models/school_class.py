# schooldesk/db/models/school_class.py
from sqlalchemy import Column, Integer, String, Boolean, ForeignKey
from sqlalchemy.orm import relationship

from schooldesk.db.base import Base


class SchoolClass(Base):
    __tablename__ = "classes"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    teacher_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    schedule = Column(String, nullable=True)  # например, "Mon/Wed 10:00-11:30"
    color = Column(String, nullable=True)
    active = Column(Boolean, default=True, nullable=False)

    teacher = relationship("User")
    students = relationship("Student", back_populates="school_class")
