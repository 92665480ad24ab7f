from typing import List, Optional

from sqlalchemy.orm import Session

from schooldesk.db.models.monthly_report import MonthlyReport, MonthlyReportWeek
from schooldesk.schemas.monthly_report import MonthlyReportOut, ReportWeekIn, ReportWeekOut


def get_report(db: Session, report_id: int) -> Optional[MonthlyReport]:
    return db.query(MonthlyReport).filter(MonthlyReport.id == report_id).first()


def get_by_range(db: Session, class_id: int, start: str, end: str) -> Optional[MonthlyReport]:
    return db.query(MonthlyReport).filter(
        MonthlyReport.class_id == class_id,
        MonthlyReport.start_date == start,
        MonthlyReport.end_date == end,
    ).first()


def list_reports(
    db: Session,
    class_id: Optional[int] = None,
    year: Optional[int] = None,
    month: Optional[int] = None,
    start: Optional[str] = None,
    end: Optional[str] = None,
    status: Optional[str] = None,
) -> List[MonthlyReport]:
    query = db.query(MonthlyReport)
    if class_id:
        query = query.filter(MonthlyReport.class_id == class_id)
    if year:
        query = query.filter(MonthlyReport.year == year)
    if month:
        query = query.filter(MonthlyReport.month == month)
    if start:
        query = query.filter(MonthlyReport.start_date >= start)
    if end:
        query = query.filter(MonthlyReport.end_date <= end)
    if status:
        query = query.filter(MonthlyReport.status == status)
    return query.order_by(
        MonthlyReport.year.desc(), MonthlyReport.month.desc(), MonthlyReport.created_at.desc()
    ).all()


def add_report(db: Session, **fields) -> MonthlyReport:
    """Добавляет отчёт в текущую транзакцию (без commit)"""
    report = MonthlyReport(**fields)
    db.add(report)
    db.flush()
    return report


def add_weeks(db: Session, report: MonthlyReport, weeks: List[ReportWeekIn]) -> None:
    for week in weeks:
        report.weeks.append(MonthlyReportWeek(**week.model_dump()))
    db.flush()


def clear_weeks(db: Session, report: MonthlyReport) -> None:
    # delete-orphan удалит строки и уберёт их из identity map
    report.weeks.clear()
    db.flush()


def delete_report(db: Session, report: MonthlyReport) -> None:
    db.delete(report)
    db.commit()


def set_pdf_key(db: Session, report: MonthlyReport, key: str) -> None:
    report.pdf_url = key
    db.commit()


def to_out(report: MonthlyReport, already_exists: bool = False) -> MonthlyReportOut:
    school_class = report.school_class
    return MonthlyReportOut(
        id=report.id,
        class_id=report.class_id,
        class_name=school_class.name if school_class else None,
        schedule=school_class.schedule if school_class else None,
        year=report.year,
        month=report.month,
        start_date=report.start_date,
        end_date=report.end_date,
        monthly_theme=report.monthly_theme or "",
        status=report.status,
        created_by=report.created_by,
        created_by_name=report.author.full_name if report.author else None,
        pdf_url=report.pdf_url,
        created_at=report.created_at,
        updated_at=report.updated_at,
        weeks=[ReportWeekOut.model_validate(w) for w in report.weeks],
        already_exists=already_exists,
    )
