from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class CommentSheetFields(BaseModel):
    target_topic: Optional[str] = ""
    vocabulary: Optional[str] = ""
    mistakes: Optional[str] = ""
    strengths: Optional[str] = ""
    comments: Optional[str] = ""


class CommentSheetCreate(CommentSheetFields):
    class_id: int
    teacher_id: int
    date: str


class CommentSheetUpdate(CommentSheetFields):
    teacher_id: int


class CommentSheetOut(CommentSheetFields):
    id: int
    class_id: int
    teacher_id: int
    date: str
    teacher_name: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
