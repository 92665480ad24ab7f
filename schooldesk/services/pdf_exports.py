# schooldesk/services/pdf_exports.py
import logging
from typing import Optional

from sqlalchemy.orm import Session

from schooldesk.core.config import settings
from schooldesk.core.dates import parse_date_param
from schooldesk.core.exceptions import NotFoundError
from schooldesk.crud import monthly_report as crud_report
from schooldesk.crud import pdf_history as crud_pdf
from schooldesk.crud import school_class as crud_class
from schooldesk.crud.comment_sheet import LessonRecordRepository
from schooldesk.schemas.pdf import PdfExportOut
from schooldesk.services.attendance_matrix import build_attendance_matrix
from schooldesk.services.pdf_render import render_attendance_grid_pdf, render_monthly_report_pdf
from schooldesk.services.storage import BlobStore

logger = logging.getLogger(__name__)

ATTENDANCE_GRID = "attendance_grid"
MONTHLY_REPORT = "monthly_report"


def _safe(value: str) -> str:
    return "".join(c if c.isalnum() else "_" for c in value).strip("_") or "class"


def export_attendance_grid(
    db: Session,
    store: BlobStore,
    class_id: int,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    created_by: Optional[int] = None,
) -> PdfExportOut:
    start = parse_date_param(start_date, "start_date")
    end = parse_date_param(end_date, "end_date")
    matrix = build_attendance_matrix(db, class_id, start, end)
    pdf_bytes = render_attendance_grid_pdf(matrix, settings.SCHOOL_NAME)

    period = f"{matrix.start_date}_{matrix.end_date}" if matrix.start_date and matrix.end_date else "all"
    file_name = f"attendance_{_safe(matrix.class_data.name)}_{period}.pdf"
    uploaded = store.upload(pdf_bytes, file_name, {"class_id": class_id, "type": ATTENDANCE_GRID})

    entry = crud_pdf.create_entry(
        db, filename=file_name, type=ATTENDANCE_GRID, storage_key=uploaded.key,
        file_size=uploaded.size, class_id=class_id, created_by=created_by,
    )
    logger.info(f"✅ [PDF] Сетка посещаемости класса {class_id}: {uploaded.key}")
    return PdfExportOut(pdf_id=entry.id, file_name=file_name, key=uploaded.key, download_url=uploaded.url, size=uploaded.size)


def export_monthly_report(
    db: Session,
    repo: LessonRecordRepository,
    store: BlobStore,
    report_id: int,
    created_by: Optional[int] = None,
) -> PdfExportOut:
    report = crud_report.get_report(db, report_id)
    if not report:
        raise NotFoundError("Ежемесячный отчёт не найден")
    class_info = crud_class.get_class_info(db, report.class_id)
    if not class_info:
        raise NotFoundError("Класс не найден")

    teachers = repo.teacher_names(db, [w.teacher_comment_sheet_id for w in report.weeks])
    pdf_bytes = render_monthly_report_pdf(report, report.weeks, class_info, teachers, settings.SCHOOL_NAME)

    file_name = f"monthly_report_{_safe(class_info.name)}_{report.year}_{report.month:02d}.pdf"
    uploaded = store.upload(pdf_bytes, file_name, {"report_id": report.id, "type": MONTHLY_REPORT})

    old_key = report.pdf_url
    try:
        crud_report.set_pdf_key(db, report, uploaded.key)
    except Exception:
        db.rollback()
        store.delete(uploaded.key)
        raise

    # Старый файл удаляем только после commit нового ключа
    if old_key and old_key != uploaded.key:
        try:
            store.delete(old_key)
        except OSError:
            logger.exception(f"⚠️ [PDF] Не удалось удалить старый файл {old_key}")

    entry = crud_pdf.create_entry(
        db, filename=file_name, type=MONTHLY_REPORT, storage_key=uploaded.key,
        file_size=uploaded.size, class_id=report.class_id, created_by=created_by,
    )
    logger.info(f"✅ [PDF] Отчёт {report.id} загружен: {uploaded.key}")
    return PdfExportOut(pdf_id=entry.id, file_name=file_name, key=uploaded.key, download_url=uploaded.url, size=uploaded.size)


def report_download_url(db: Session, store: BlobStore, report_id: int) -> PdfExportOut:
    """Свежая подписанная ссылка на уже сгенерированный PDF отчёта"""
    report = crud_report.get_report(db, report_id)
    if not report:
        raise NotFoundError("Ежемесячный отчёт не найден")
    if not report.pdf_url:
        raise NotFoundError("PDF для этого отчёта ещё не сгенерирован")
    return PdfExportOut(
        file_name=report.pdf_url.rsplit("/", 1)[-1],
        key=report.pdf_url,
        download_url=store.download_url(report.pdf_url),
        size=len(store.read(report.pdf_url)),
    )
