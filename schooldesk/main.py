import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from schooldesk.api import attendance, classes, comment_sheets, monthly_reports, pdf
from schooldesk.api.deps import get_db
from schooldesk.core.config import settings
from schooldesk.core.exceptions import ConflictError, NotFoundError, StorageNotConfigured, ValidationError
from schooldesk.crud.comment_sheet import detect_lesson_repository
from schooldesk.db import init_db
from schooldesk.db.session import check_database, engine

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db(engine)
    # Какая таблица листов комментариев есть в базе, решаем один раз
    app.state.lesson_repository = detect_lesson_repository(engine)
    logger.info(f"🚀 Старт: листы комментариев из {app.state.lesson_repository.table_name}")
    yield


app = FastAPI(title="SchoolDesk", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return JSONResponse(status_code=400, content={"detail": exc.message})


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=404, content={"detail": exc.message})


@app.exception_handler(ConflictError)
async def conflict_handler(request: Request, exc: ConflictError):
    return JSONResponse(status_code=409, content={"detail": exc.message, "existing_id": exc.existing_id})


@app.exception_handler(StorageNotConfigured)
async def storage_handler(request: Request, exc: StorageNotConfigured):
    return JSONResponse(status_code=503, content={"detail": exc.message})


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.exception(f"❌ [DB] Ошибка при обработке {request.method} {request.url.path}")
    return JSONResponse(status_code=500, content={"detail": "Ошибка базы данных"})


@app.get("/api/health", tags=["health"])
def health(db: Session = Depends(get_db)):
    database = check_database(db.get_bind())
    return JSONResponse(
        status_code=200 if database["ok"] else 503,
        content={"status": "ok" if database["ok"] else "degraded", "database": database},
    )


app.include_router(classes.router, prefix="/api/classes", tags=["classes"])
app.include_router(attendance.router, prefix="/api/attendance", tags=["attendance"])
app.include_router(comment_sheets.router, prefix="/api/comment-sheets", tags=["comment-sheets"])
app.include_router(monthly_reports.router, prefix="/api/monthly-reports", tags=["monthly-reports"])
app.include_router(pdf.router, prefix="/api/pdf", tags=["pdf"])
