import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from schooldesk.api.deps import get_db, get_lesson_repository, require_teacher
from schooldesk.core.dates import parse_date_param
from schooldesk.core.exceptions import NotFoundError
from schooldesk.crud import monthly_report as crud_report
from schooldesk.crud.comment_sheet import LessonRecordRepository
from schooldesk.db.models.user import User
from schooldesk.schemas.monthly_report import (
    AutoGenerateRequest,
    AvailableMonth,
    MonthlyReportCreate,
    MonthlyReportOut,
    MonthlyReportUpdate,
    MonthlySummary,
    PreviewOut,
    ReportRangeRequest,
    ReportStatus,
)
from schooldesk.schemas.pdf import PdfExportOut
from schooldesk.services import monthly_reports as report_service
from schooldesk.services import pdf_exports
from schooldesk.services.storage import BlobStore, get_blob_store

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_or_404(db: Session, report_id: int):
    report = crud_report.get_report(db, report_id)
    if not report:
        raise NotFoundError("Ежемесячный отчёт не найден")
    return report


@router.get("", response_model=List[MonthlyReportOut])
def list_monthly_reports(
    class_id: Optional[int] = None,
    year: Optional[int] = None,
    month: Optional[int] = None,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    status: Optional[ReportStatus] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_teacher)
):
    reports = crud_report.list_reports(
        db,
        class_id=class_id,
        year=year,
        month=month,
        start=parse_date_param(start_date, "start_date"),
        end=parse_date_param(end_date, "end_date"),
        status=status,
    )
    return [crud_report.to_out(r) for r in reports]


# Ручное создание отчёта; повторный запрос за тот же диапазон вернёт существующий
@router.post("", response_model=MonthlyReportOut, status_code=status.HTTP_201_CREATED)
def create_monthly_report(
    payload: MonthlyReportCreate,
    response: Response,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_teacher)
):
    report, already_exists = report_service.create_report(db, payload, created_by=current_user.id)
    if already_exists:
        response.status_code = status.HTTP_200_OK
    return crud_report.to_out(report, already_exists=already_exists)


# Недели из листов комментариев без сохранения
@router.post("/preview-generate", response_model=PreviewOut)
def preview_generate(
    payload: ReportRangeRequest,
    db: Session = Depends(get_db),
    repo: LessonRecordRepository = Depends(get_lesson_repository),
    current_user: User = Depends(require_teacher)
):
    return report_service.preview_weeks(
        db, repo, payload.class_id, payload.start_date, payload.end_date, payload.year, payload.month
    )


@router.post("/auto-generate", response_model=MonthlyReportOut, status_code=status.HTTP_201_CREATED)
def auto_generate(
    payload: AutoGenerateRequest,
    response: Response,
    db: Session = Depends(get_db),
    repo: LessonRecordRepository = Depends(get_lesson_repository),
    current_user: User = Depends(require_teacher)
):
    report, already_exists = report_service.auto_generate_report(
        db,
        repo,
        payload.class_id,
        start_date=payload.start_date,
        end_date=payload.end_date,
        year=payload.year,
        month=payload.month,
        monthly_theme=payload.monthly_theme,
        status=payload.status,
        created_by=current_user.id,
    )
    if already_exists:
        response.status_code = status.HTTP_200_OK
    return crud_report.to_out(report, already_exists=already_exists)


@router.get("/summary/{class_id}", response_model=MonthlySummary)
def get_monthly_summary(
    class_id: int,
    year: Optional[int] = None,
    month: Optional[int] = None,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    db: Session = Depends(get_db),
    repo: LessonRecordRepository = Depends(get_lesson_repository),
    current_user: User = Depends(require_teacher)
):
    return report_service.build_monthly_summary(db, repo, class_id, start_date, end_date, year, month)


@router.get("/available-months/{class_id}", response_model=List[AvailableMonth])
def get_available_months(
    class_id: int,
    db: Session = Depends(get_db),
    repo: LessonRecordRepository = Depends(get_lesson_repository),
    current_user: User = Depends(require_teacher)
):
    return repo.available_months(db, class_id)


@router.get("/{report_id}", response_model=MonthlyReportOut)
def get_monthly_report(
    report_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_teacher)
):
    return crud_report.to_out(_get_or_404(db, report_id))


@router.put("/{report_id}", response_model=MonthlyReportOut)
def update_monthly_report(
    report_id: int,
    payload: MonthlyReportUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_teacher)
):
    return crud_report.to_out(report_service.update_report(db, report_id, payload))


@router.delete("/{report_id}")
def delete_monthly_report(
    report_id: int,
    db: Session = Depends(get_db),
    store: BlobStore = Depends(get_blob_store),
    current_user: User = Depends(require_teacher)
):
    report = _get_or_404(db, report_id)
    pdf_key = report.pdf_url
    crud_report.delete_report(db, report)
    if pdf_key:
        store.delete(pdf_key)
    logger.info(f"🗑️ [Отчёты] Отчёт {report_id} удалён")
    return {"message": "Отчёт удалён"}


@router.post("/{report_id}/generate-pdf", response_model=PdfExportOut)
def generate_report_pdf(
    report_id: int,
    db: Session = Depends(get_db),
    repo: LessonRecordRepository = Depends(get_lesson_repository),
    store: BlobStore = Depends(get_blob_store),
    current_user: User = Depends(require_teacher)
):
    return pdf_exports.export_monthly_report(db, repo, store, report_id, created_by=current_user.id)


@router.get("/{report_id}/pdf", response_model=PdfExportOut)
def get_report_pdf_url(
    report_id: int,
    db: Session = Depends(get_db),
    store: BlobStore = Depends(get_blob_store),
    current_user: User = Depends(require_teacher)
):
    return pdf_exports.report_download_url(db, store, report_id)
