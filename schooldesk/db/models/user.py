# schooldesk/db/models/user.py
from sqlalchemy import Column, Integer, String, Enum, DateTime
from sqlalchemy.sql import func

from schooldesk.db.base import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String, unique=True, index=True, nullable=False)
    full_name = Column(String, nullable=False)
    role = Column(Enum("admin", "teacher", name="user_role"), nullable=False)  # только эти роли
    created_at = Column(DateTime(timezone=True), server_default=func.now())
