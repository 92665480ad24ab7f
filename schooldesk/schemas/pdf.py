from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class PdfExportOut(BaseModel):
    pdf_id: Optional[int] = None
    file_name: str
    key: str
    download_url: str
    size: int


class PdfHistoryOut(BaseModel):
    id: int
    filename: str
    type: str
    class_id: Optional[int] = None
    storage_key: str
    file_size: Optional[int] = None
    created_by: Optional[int] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class AttendanceGridRequest(BaseModel):
    start_date: Optional[str] = None
    end_date: Optional[str] = None
