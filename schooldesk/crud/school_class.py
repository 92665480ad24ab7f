from typing import Optional

from sqlalchemy import case
from sqlalchemy.orm import Session

from schooldesk.db.models.school_class import SchoolClass
from schooldesk.db.models.student import Student
from schooldesk.schemas.attendance import ClassOut


def get_class(db: Session, class_id: int) -> Optional[SchoolClass]:
    return db.query(SchoolClass).filter(SchoolClass.id == class_id).first()


def get_class_info(db: Session, class_id: int) -> Optional[ClassOut]:
    """Класс вместе с именем учителя"""
    school_class = get_class(db, class_id)
    if not school_class:
        return None
    return ClassOut(
        id=school_class.id,
        name=school_class.name,
        schedule=school_class.schedule,
        color=school_class.color,
        teacher_id=school_class.teacher_id,
        teacher_name=school_class.teacher.full_name if school_class.teacher else None,
    )


def get_active_students(db: Session, class_id: int):
    # Сначала regular, потом trial/makeup, внутри — по имени
    return (
        db.query(Student)
        .filter(Student.class_id == class_id, Student.active.is_(True))
        .order_by(case((Student.student_type == "regular", 0), else_=1), Student.student_type, Student.name)
        .all()
    )
