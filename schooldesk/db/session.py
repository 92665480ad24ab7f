# schooldesk/db/session.py
import logging
import time

from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker

from schooldesk.core.config import settings

logger = logging.getLogger(__name__)


def make_engine(url: str = settings.DATABASE_URL):
    if url.startswith("sqlite"):
        # SQLite: одно соединение на поток, пул не настраиваем
        return create_engine(url, connect_args={"check_same_thread": False})
    return create_engine(
        url,
        pool_pre_ping=True,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_recycle=settings.DB_POOL_RECYCLE,
    )


engine = make_engine()
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def check_database(bind=None) -> dict:
    """Проверка соединения с БД: {ok, latency_ms, error?}"""
    bind = bind or engine
    start = time.perf_counter()
    try:
        with bind.connect() as conn:
            conn.execute(text("SELECT 1"))
    except Exception as e:
        logger.error(f"❌ [DB] Проверка соединения не прошла: {e}")
        return {
            "ok": False,
            "latency_ms": round((time.perf_counter() - start) * 1000, 1),
            "error": str(e),
        }
    return {"ok": True, "latency_ms": round((time.perf_counter() - start) * 1000, 1)}
