from types import SimpleNamespace

import pytest
from sqlalchemy.exc import OperationalError

from schooldesk.core.exceptions import NotFoundError, ValidationError
from schooldesk.crud import monthly_report as crud_report
from schooldesk.crud import pdf_history as crud_pdf
from schooldesk.schemas.attendance import ClassOut
from schooldesk.services.attendance_matrix import PRESENT, build_attendance_matrix
from schooldesk.services.monthly_reports import auto_generate_report
from schooldesk.services.pdf_exports import export_attendance_grid, export_monthly_report, report_download_url
from schooldesk.services.pdf_render import chunk_dates, render_attendance_grid_pdf, render_monthly_report_pdf


def test_chunk_dates_fits_page_width():
    dates = [f"2026-01-{d:02d}" for d in range(1, 32)]

    chunks = chunk_dates(dates, name_col_width=130, min_date_col_width=28, content_width=785)

    # (785 - 130) // 28 = 23 колонки на страницу
    assert [len(c) for c in chunks] == [23, 8]
    assert sum(chunks, []) == dates


def test_chunk_dates_ignores_month_boundaries():
    dates = ["2026-01-30", "2026-01-31", "2026-02-01", "2026-02-02"]
    assert chunk_dates(dates, 100, 50, 250) == [dates[:3], dates[3:]]


def test_chunk_dates_edge_cases():
    assert chunk_dates([], 130, 28, 785) == []
    # Хотя бы одна дата на кусок, даже если страница слишком узкая
    assert chunk_dates(["2026-02-01", "2026-02-02"], 300, 50, 200) == [["2026-02-01"], ["2026-02-02"]]


def test_attendance_grid_pdf(db, school_class, students, add_attendance):
    add_attendance(students[0], "2026-02-02", PRESENT)
    matrix = build_attendance_matrix(db, school_class.id, "2026-01-01", "2026-02-28")

    pdf_bytes = render_attendance_grid_pdf(matrix, "Test School")

    assert pdf_bytes.startswith(b"%PDF")


def test_monthly_report_pdf():
    report = SimpleNamespace(year=2026, month=2, monthly_theme="Animals & <friends>")
    weeks = [
        SimpleNamespace(week_number=2, lesson_date="2026-02-09", target="Dogs", vocabulary="dog\ncat",
                        phrase="", others=""),
        SimpleNamespace(week_number=1, lesson_date="2026-02-02", target="Cats", vocabulary="",
                        phrase="I have a cat", others="Great | Nice"),
    ]
    class_info = ClassOut(id=1, name="Sunshine Kids", schedule="Mon/Wed")

    pdf_bytes = render_monthly_report_pdf(report, weeks, class_info, ["Sarah Miller"])

    assert pdf_bytes.startswith(b"%PDF")


def test_export_attendance_grid_records_history(db, store, school_class, students, teacher):
    result = export_attendance_grid(db, store, school_class.id, "2026-02-01", "2026-02-28", created_by=teacher.id)

    assert result.key.startswith("pdfs/")
    assert result.file_name == "attendance_Sunshine_Kids_2026-02-01_2026-02-28.pdf"
    assert store.read(result.key).startswith(b"%PDF")
    history = crud_pdf.list_entries(db, class_id=school_class.id)
    assert [(h.type, h.storage_key) for h in history] == [("attendance_grid", result.key)]


def test_export_attendance_grid_rejects_bad_date(db, store, school_class):
    with pytest.raises(ValidationError):
        export_attendance_grid(db, store, school_class.id, "not-a-date", "2026-02-28")


def test_export_monthly_report_replaces_previous_file(db, repo, store, school_class, teacher, add_sheet):
    add_sheet(school_class, teacher, "2026-02-02", target_topic="Colors")
    report, _ = auto_generate_report(db, repo, school_class.id, year=2026, month=2)

    first = export_monthly_report(db, repo, store, report.id, created_by=teacher.id)
    second = export_monthly_report(db, repo, store, report.id, created_by=teacher.id)

    db.refresh(report)
    assert report.pdf_url == second.key
    assert first.key != second.key
    with pytest.raises(NotFoundError):
        store.read(first.key)

    fresh = report_download_url(db, store, report.id)
    assert fresh.key == second.key
    assert "token=" in fresh.download_url


def test_failed_key_commit_keeps_previous_file(db, repo, store, school_class, teacher, add_sheet, monkeypatch):
    add_sheet(school_class, teacher, "2026-02-02", target_topic="Colors")
    report, _ = auto_generate_report(db, repo, school_class.id, year=2026, month=2)
    first = export_monthly_report(db, repo, store, report.id, created_by=teacher.id)

    def failing_set_pdf_key(session, target, key):
        raise OperationalError("UPDATE monthly_reports", {}, Exception("database is locked"))

    monkeypatch.setattr(crud_report, "set_pdf_key", failing_set_pdf_key)

    with pytest.raises(OperationalError):
        export_monthly_report(db, repo, store, report.id, created_by=teacher.id)

    db.refresh(report)
    assert report.pdf_url == first.key
    assert store.read(report.pdf_url).startswith(b"%PDF")
    # Новый файл не остаётся сиротой
    assert [p.name for p in (store.root / "pdfs").iterdir()] == [first.key.rsplit("/", 1)[-1]]


def test_download_url_requires_generated_pdf(db, repo, store, school_class, teacher, add_sheet):
    add_sheet(school_class, teacher, "2026-02-02")
    report, _ = auto_generate_report(db, repo, school_class.id, year=2026, month=2)

    with pytest.raises(NotFoundError):
        report_download_url(db, store, report.id)
