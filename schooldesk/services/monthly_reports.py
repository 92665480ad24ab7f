# schooldesk/services/monthly_reports.py
"""
Ежемесячные отчёты из листов комментариев учителя.

"Неделя" отчёта — это просто порядковый номер занятия внутри выбранного
диапазона дат, а не номер календарной недели. Если позже в диапазон
добавить занятие задним числом, номера у пересобранного отчёта сдвинутся.
"""
import calendar
import logging
from typing import Iterable, List, Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from schooldesk.core.dates import month_bounds, normalize_to_iso, to_date
from schooldesk.core.exceptions import NotFoundError, ValidationError
from schooldesk.crud import attendance as crud_attendance
from schooldesk.crud import monthly_report as crud_report
from schooldesk.crud import school_class as crud_class
from schooldesk.crud.comment_sheet import LessonRecordRepository
from schooldesk.db.models.monthly_report import MonthlyReport
from schooldesk.schemas.monthly_report import (
    AttendanceSummary,
    LessonDetail,
    LessonSummary,
    MonthlyReportCreate,
    MonthlyReportUpdate,
    MonthlySummary,
    PeriodInfo,
    PreviewOut,
    ReportPeriod,
    ReportWeekIn,
    StudentAttendanceSummary,
    TeacherComment,
)
from schooldesk.services.attendance_matrix import ABSENT, LATE, PRESENT

logger = logging.getLogger(__name__)

OTHERS_SEPARATOR = " | "


def resolve_report_period(
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    year: Optional[int] = None,
    month: Optional[int] = None,
) -> ReportPeriod:
    # start_date/end_date важнее year/month, если переданы оба варианта
    if start_date and end_date:
        start = normalize_to_iso(start_date)
        end = normalize_to_iso(end_date)
        if not start or not end:
            raise ValidationError("Некорректный формат даты. Ожидается YYYY-MM-DD")
        if start > end:
            raise ValidationError("start_date не может быть позже end_date")
        first = to_date(start)
        return ReportPeriod(start_date=start, end_date=end, year=first.year, month=first.month)

    if year and month:
        start, end = month_bounds(year, month)
        return ReportPeriod(start_date=start, end_date=end, year=year, month=month)

    raise ValidationError("Нужно указать (year и month) или (start_date и end_date)")


def build_weeks_from_lessons(lessons: Iterable) -> List[ReportWeekIn]:
    """Уроки должны быть отсортированы по дате"""
    weeks = []
    for index, lesson in enumerate(lessons):
        # В недельной таблице нет колонки strengths, поэтому strengths + comments идут в others
        others = OTHERS_SEPARATOR.join(part for part in (lesson.strengths, lesson.comments) if part)
        weeks.append(ReportWeekIn(
            week_number=index + 1,
            lesson_date=normalize_to_iso(lesson.date) or lesson.date,
            target=lesson.target_topic or "",
            vocabulary=lesson.vocabulary or "",
            phrase=lesson.mistakes or "",
            others=others,
            teacher_comment_sheet_id=lesson.id,
        ))
    return weeks


def dedupe_lines(texts: Iterable[Optional[str]]) -> str:
    """Склеивает текстовые блоки построчно, убирая пустые строки и точные повторы"""
    lines = (line.strip() for text in texts if text for line in text.split("\n"))
    return "\n".join(line for line in dict.fromkeys(lines) if line)


def summarize_lessons(lessons: List) -> LessonSummary:
    topics = [lesson.target_topic for lesson in lessons if lesson.target_topic]
    return LessonSummary(
        total_lessons=len(lessons),
        lessons=[
            LessonDetail(
                id=lesson.id,
                date=normalize_to_iso(lesson.date) or lesson.date,
                teacher_name=lesson.teacher.full_name if getattr(lesson, "teacher", None) else None,
                target_topic=lesson.target_topic or "",
                vocabulary=lesson.vocabulary or "",
                mistakes=lesson.mistakes or "",
                strengths=lesson.strengths or "",
                comments=lesson.comments or "",
            )
            for lesson in lessons
        ],
        topics_covered=list(dict.fromkeys(topics)),
        all_vocabulary=dedupe_lines(lesson.vocabulary for lesson in lessons),
        common_mistakes=dedupe_lines(lesson.mistakes for lesson in lessons),
        overall_strengths=dedupe_lines(lesson.strengths for lesson in lessons),
        teacher_comments=[
            TeacherComment(date=normalize_to_iso(lesson.date) or lesson.date, comment=lesson.comments)
            for lesson in lessons if lesson.comments
        ],
    )


def summarize_attendance(students: List, records: List) -> AttendanceSummary:
    summary = {}
    for student in students:
        statuses = [r.status for r in records if r.student_id == student.id]
        present = statuses.count(PRESENT)
        total = len(statuses)
        summary[student.id] = StudentAttendanceSummary(
            student_name=student.name,
            present=present,
            absent=statuses.count(ABSENT),
            late=statuses.count(LATE),
            total=total,
            # Нет ни одной записи — 0, а не "идеальная посещаемость"
            rate=round(present / total * 100) if total > 0 else 0,
        )
    total_days = len({normalize_to_iso(r.date) or r.date for r in records})
    return AttendanceSummary(total_days=total_days, records=summary)


def preview_weeks(
    db: Session,
    repo: LessonRecordRepository,
    class_id: int,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    year: Optional[int] = None,
    month: Optional[int] = None,
) -> PreviewOut:
    period = resolve_report_period(start_date, end_date, year, month)
    lessons = repo.list_for_range(db, class_id, period.start_date, period.end_date)
    weeks = build_weeks_from_lessons(lessons)
    if not weeks:
        logger.warning(f"⚠️ [Отчёты] Нет листов комментариев для класса {class_id} за {period.start_date}..{period.end_date}")
    return PreviewOut(weeks=weeks, lesson_count=len(weeks))


def _require_class(db: Session, class_id: int) -> None:
    if not crud_class.get_class(db, class_id):
        raise NotFoundError("Класс не найден")


def _existing_after_conflict(db: Session, class_id: int, period: ReportPeriod, error: IntegrityError) -> MonthlyReport:
    # Параллельный запрос успел создать такой же отчёт: отдаём его
    db.rollback()
    existing = crud_report.get_by_range(db, class_id, period.start_date, period.end_date)
    if not existing:
        raise error
    logger.info(f"ℹ️ [Отчёты] Отчёт {existing.id} создан параллельным запросом, возвращаем его")
    return existing


def auto_generate_report(
    db: Session,
    repo: LessonRecordRepository,
    class_id: int,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    year: Optional[int] = None,
    month: Optional[int] = None,
    monthly_theme: Optional[str] = "",
    status: str = "draft",
    created_by: Optional[int] = None,
) -> Tuple[MonthlyReport, bool]:
    """
    Создаёт отчёт из листов комментариев или возвращает уже существующий
    за точно такой же диапазон. Возвращает (отчёт, already_exists).
    """
    period = resolve_report_period(start_date, end_date, year, month)
    _require_class(db, class_id)

    try:
        existing = crud_report.get_by_range(db, class_id, period.start_date, period.end_date)
        if existing:
            db.rollback()
            logger.info(f"ℹ️ [Отчёты] Отчёт за {period.start_date}..{period.end_date} уже есть (id={existing.id})")
            return crud_report.get_report(db, existing.id), True

        lessons = repo.list_for_range(db, class_id, period.start_date, period.end_date)
        if not lessons:
            db.rollback()
            logger.warning(f"⚠️ [Отчёты] Нечего генерировать: класс {class_id}, {period.start_date}..{period.end_date}")
            raise ValidationError("Нет листов комментариев для этого класса и диапазона дат")

        report = crud_report.add_report(
            db,
            class_id=class_id,
            year=period.year,
            month=period.month,
            start_date=period.start_date,
            end_date=period.end_date,
            monthly_theme=monthly_theme or "",
            status=status or "draft",
            created_by=created_by,
        )
        crud_report.add_weeks(db, report, build_weeks_from_lessons(lessons))
        db.commit()
    except IntegrityError as e:
        return _existing_after_conflict(db, class_id, period, e), True
    except Exception:
        db.rollback()
        raise

    db.refresh(report)
    logger.info(f"✅ [Отчёты] Создан отчёт id={report.id}, занятий: {len(lessons)}")
    return report, False


def _check_week_numbers(weeks: List[ReportWeekIn]) -> None:
    numbers = [w.week_number for w in weeks]
    if any(n < 1 for n in numbers):
        raise ValidationError("week_number должен быть положительным")
    if len(numbers) != len(set(numbers)):
        raise ValidationError("week_number не должен повторяться")


def create_report(db: Session, payload: MonthlyReportCreate, created_by: Optional[int] = None) -> Tuple[MonthlyReport, bool]:
    """Отчёт с неделями, заполненными вручную"""
    start, end = month_bounds(payload.year, payload.month)
    if payload.start_date or payload.end_date:
        period = resolve_report_period(payload.start_date, payload.end_date)
        period = ReportPeriod(
            start_date=period.start_date, end_date=period.end_date, year=payload.year, month=payload.month
        )
    else:
        period = ReportPeriod(start_date=start, end_date=end, year=payload.year, month=payload.month)
    _check_week_numbers(payload.weeks)
    _require_class(db, payload.class_id)

    try:
        existing = crud_report.get_by_range(db, payload.class_id, period.start_date, period.end_date)
        if existing:
            db.rollback()
            return crud_report.get_report(db, existing.id), True

        report = crud_report.add_report(
            db,
            class_id=payload.class_id,
            year=period.year,
            month=period.month,
            start_date=period.start_date,
            end_date=period.end_date,
            monthly_theme=payload.monthly_theme or "",
            status=payload.status,
            created_by=created_by,
        )
        crud_report.add_weeks(db, report, payload.weeks)
        db.commit()
    except IntegrityError as e:
        return _existing_after_conflict(db, payload.class_id, period, e), True
    except Exception:
        db.rollback()
        raise

    db.refresh(report)
    return report, False


def update_report(db: Session, report_id: int, payload: MonthlyReportUpdate) -> MonthlyReport:
    """Меняет тему/статус и полностью заменяет недели"""
    _check_week_numbers(payload.weeks)
    report = crud_report.get_report(db, report_id)
    if not report:
        raise NotFoundError("Ежемесячный отчёт не найден")

    try:
        report.monthly_theme = payload.monthly_theme or ""
        report.status = payload.status
        crud_report.clear_weeks(db, report)
        crud_report.add_weeks(db, report, payload.weeks)
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(report)
    return report


def build_monthly_summary(
    db: Session,
    repo: LessonRecordRepository,
    class_id: int,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    year: Optional[int] = None,
    month: Optional[int] = None,
) -> MonthlySummary:
    period = resolve_report_period(start_date, end_date, year, month)
    class_info = crud_class.get_class_info(db, class_id)
    if not class_info:
        raise NotFoundError("Класс не найден")

    students = crud_class.get_active_students(db, class_id)
    lessons = repo.list_for_range(db, class_id, period.start_date, period.end_date)
    records = crud_attendance.get_class_attendance(db, class_id, period.start_date, period.end_date)

    return MonthlySummary(
        class_info={
            "id": class_info.id,
            "name": class_info.name,
            "teacher_name": class_info.teacher_name,
            "schedule": class_info.schedule,
        },
        period=PeriodInfo(**period.model_dump(), month_name=calendar.month_name[period.month]),
        students=[
            {"id": s.id, "name": s.name, "type": s.student_type, "email": s.email, "phone": s.phone}
            for s in students
        ],
        lesson_summary=summarize_lessons(lessons),
        attendance_summary=summarize_attendance(students, records),
    )
