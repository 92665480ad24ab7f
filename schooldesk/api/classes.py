from typing import List

from fastapi import APIRouter, Depends, Path
from sqlalchemy.orm import Session

from schooldesk.api.deps import get_db, require_teacher
from schooldesk.core.exceptions import NotFoundError
from schooldesk.crud import school_class as crud_class
from schooldesk.db.models.user import User
from schooldesk.schemas.attendance import StudentOut

router = APIRouter()


# Активные ученики класса: сначала regular, затем trial/makeup
@router.get("/{class_id}/students", response_model=List[StudentOut])
def get_students_by_class(
    class_id: int = Path(..., description="ID класса"),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_teacher)
):
    if not crud_class.get_class(db, class_id):
        raise NotFoundError("Класс не найден")
    return crud_class.get_active_students(db, class_id)
