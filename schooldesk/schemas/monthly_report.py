from pydantic import BaseModel, Field
from typing import Any, Dict, List, Literal, Optional
from datetime import datetime

ReportStatus = Literal["draft", "published"]


class ReportWeekIn(BaseModel):
    week_number: int
    lesson_date: Optional[str] = None
    target: str = ""
    vocabulary: str = ""
    phrase: str = ""
    others: str = ""
    teacher_comment_sheet_id: Optional[int] = None


class ReportWeekOut(ReportWeekIn):
    id: int
    monthly_report_id: int

    class Config:
        from_attributes = True


class ReportPeriod(BaseModel):
    start_date: str
    end_date: str
    year: int
    month: int


class ReportRangeRequest(BaseModel):
    class_id: int
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    year: Optional[int] = None
    month: Optional[int] = None


class AutoGenerateRequest(ReportRangeRequest):
    monthly_theme: Optional[str] = ""
    status: ReportStatus = "draft"


class MonthlyReportCreate(BaseModel):
    class_id: int
    year: int
    month: int
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    monthly_theme: Optional[str] = ""
    status: ReportStatus = "draft"
    weeks: List[ReportWeekIn] = Field(default_factory=list)


class MonthlyReportUpdate(BaseModel):
    monthly_theme: Optional[str] = ""
    status: ReportStatus = "draft"
    weeks: List[ReportWeekIn] = Field(default_factory=list)


class MonthlyReportOut(BaseModel):
    id: int
    class_id: int
    class_name: Optional[str] = None
    schedule: Optional[str] = None
    year: int
    month: int
    start_date: str
    end_date: str
    monthly_theme: Optional[str] = ""
    status: str
    created_by: Optional[int] = None
    created_by_name: Optional[str] = None
    pdf_url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    weeks: List[ReportWeekOut] = Field(default_factory=list)
    already_exists: bool = False


class PreviewOut(BaseModel):
    weeks: List[ReportWeekIn]
    lesson_count: int


class AvailableMonth(BaseModel):
    year: int
    month: int
    lesson_count: int


class LessonDetail(BaseModel):
    id: int
    date: str
    teacher_name: Optional[str] = None
    target_topic: str = ""
    vocabulary: str = ""
    mistakes: str = ""
    strengths: str = ""
    comments: str = ""


class TeacherComment(BaseModel):
    date: str
    comment: str


class LessonSummary(BaseModel):
    total_lessons: int
    lessons: List[LessonDetail]
    topics_covered: List[str]
    all_vocabulary: str
    common_mistakes: str
    overall_strengths: str
    teacher_comments: List[TeacherComment]


class StudentAttendanceSummary(BaseModel):
    student_name: str
    present: int
    absent: int
    late: int
    total: int
    rate: int


class AttendanceSummary(BaseModel):
    total_days: int
    records: Dict[int, StudentAttendanceSummary]


class PeriodInfo(ReportPeriod):
    month_name: str


class MonthlySummary(BaseModel):
    class_info: Dict[str, Any]
    period: PeriodInfo
    students: List[Dict[str, Any]]
    lesson_summary: LessonSummary
    attendance_summary: AttendanceSummary
