from pydantic import BaseModel
from typing import Dict, List, Optional


class StudentOut(BaseModel):
    id: int
    name: str
    class_id: Optional[int] = None
    student_type: str = "regular"
    color_code: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None

    class Config:
        from_attributes = True


class ClassOut(BaseModel):
    id: int
    name: str
    schedule: Optional[str] = None
    color: Optional[str] = None
    teacher_id: Optional[int] = None
    teacher_name: Optional[str] = None


class AttendanceBase(BaseModel):
    status: str = ""
    notes: Optional[str] = None
    time: Optional[str] = None
    teacher_id: Optional[int] = None


class AttendanceCreate(AttendanceBase):
    student_id: int
    class_id: int
    date: str  # любой поддерживаемый формат, сохраняется как YYYY-MM-DD


class AttendanceUpdate(AttendanceBase):
    pass


class AttendanceOut(AttendanceBase):
    id: int
    student_id: int
    class_id: int
    date: str
    student_name: Optional[str] = None
    student_type: Optional[str] = None

    class Config:
        from_attributes = True


class BulkAttendance(BaseModel):
    class_id: int
    date: str
    status: str


class MoveAttendance(BaseModel):
    class_id: int
    from_date: str
    to_date: str


class AttendanceMatrix(BaseModel):
    students: List[StudentOut]
    dates: List[str]
    # ключ "studentId-YYYY-MM-DD"; нет ключа — не отмечено
    attendance_map: Dict[str, str]
    class_data: ClassOut
    start_date: Optional[str] = None
    end_date: Optional[str] = None

    def status_for(self, student_id: int, date: str) -> str:
        return self.attendance_map.get(f"{student_id}-{date}", "")
