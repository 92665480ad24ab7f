from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy.orm import Session

from schooldesk.core.security import decode_access_token
from schooldesk.crud import user as crud_user
from schooldesk.crud.comment_sheet import LessonRecordRepository, detect_lesson_repository
from schooldesk.db.models.user import User
from schooldesk.db.session import SessionLocal, engine

bearer_scheme = HTTPBearer(auto_error=False)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Не удалось проверить учётные данные",
        headers={"WWW-Authenticate": "Bearer"},
    )
    if not credentials:
        raise credentials_exception
    try:
        payload = decode_access_token(credentials.credentials)
        user_id = int(payload.get("sub"))
    except (JWTError, TypeError, ValueError):
        raise credentials_exception

    user = crud_user.get_user_by_id(db, user_id)
    if not user:
        raise credentials_exception
    return user


def require_teacher(current_user: User = Depends(get_current_user)) -> User:
    if current_user.role not in ("teacher", "admin"):
        raise HTTPException(status_code=403, detail="Только для учителей")
    return current_user


def get_lesson_repository(request: Request) -> LessonRecordRepository:
    repo = getattr(request.app.state, "lesson_repository", None)
    if repo is None:
        # Приложение поднято без lifespan — определяем сейчас
        repo = detect_lesson_repository(engine)
        request.app.state.lesson_repository = repo
    return repo
