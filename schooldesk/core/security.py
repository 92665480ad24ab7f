# schooldesk/core/security.py
from datetime import datetime, timedelta

from jose import jwt, JWTError

from schooldesk.core.config import settings


def create_access_token(data: dict, expires_delta: timedelta | None = None):
    to_encode = data.copy()
    expire = datetime.utcnow() + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> dict:
    """Декодирует JWT-токен и возвращает payload"""
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
        return payload
    except JWTError:
        raise JWTError("Could not validate credentials")


def create_download_token(key: str, expires_in: int) -> str:
    """Короткоживущий токен для скачивания файла из хранилища"""
    expire = datetime.utcnow() + timedelta(seconds=expires_in)
    return jwt.encode(
        {"key": key, "scope": "download", "exp": expire},
        settings.SECRET_KEY,
        algorithm=settings.ALGORITHM,
    )


def verify_download_token(token: str, key: str) -> bool:
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        return False
    return payload.get("scope") == "download" and payload.get("key") == key
