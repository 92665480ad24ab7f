# schooldesk/services/pdf_render.py
"""
Рендер PDF через reportlab.

Сетка посещаемости берёт данные только из AttendanceMatrix: здесь ничего
не пересчитывается, только раскладывается по страницам.
"""
import calendar
import io
from typing import List, Optional, Sequence
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.platypus import PageBreak, Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from schooldesk.core.dates import format_display_date, format_short_date, normalize_to_iso, to_date
from schooldesk.schemas.attendance import AttendanceMatrix, ClassOut
from schooldesk.services.attendance_matrix import STATUS_DISPLAY

PAGE_MARGIN = 28
NAME_COL_WIDTH = 130
MIN_DATE_COL_WIDTH = 28

HEADER_COLOR = colors.HexColor("#2E7D32")
GRID_COLOR = colors.HexColor("#9ca3af")


def chunk_dates(
    dates: Sequence[str],
    name_col_width: float,
    min_date_col_width: float,
    content_width: float,
) -> List[List[str]]:
    """
    Режет ось дат на куски, которые помещаются по ширине страницы:
    name_col_width + len(chunk) * min_date_col_width <= content_width.
    Границы кусков не привязаны к месяцам.
    """
    size = max(1, int((content_width - name_col_width) // min_date_col_width))
    return [list(dates[i:i + size]) for i in range(0, len(dates), size)]


def _paragraph(text: Optional[str], style: ParagraphStyle) -> Paragraph:
    return Paragraph(escape(text or "").replace("\n", "<br/>"), style)


def _grid_table(matrix: AttendanceMatrix, students, dates: List[str], col_width: float) -> Table:
    rows = [["Student"] + [format_short_date(d) for d in dates]]
    style = [
        ("BACKGROUND", (0, 0), (-1, 0), HEADER_COLOR),
        ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("FONTSIZE", (0, 0), (-1, 0), 7),
        ("FONTSIZE", (0, 1), (-1, -1), 8),
        ("ALIGN", (1, 0), (-1, -1), "CENTER"),
        ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
        ("GRID", (0, 0), (-1, -1), 0.4, GRID_COLOR),
    ]
    for row_idx, student in enumerate(students, start=1):
        row = [student.name]
        for col_idx, d in enumerate(dates, start=1):
            status = matrix.status_for(student.id, d)
            row.append(status)
            if status in STATUS_DISPLAY and status:
                style.append(("BACKGROUND", (col_idx, row_idx), (col_idx, row_idx),
                              colors.HexColor(STATUS_DISPLAY[status]["color"])))
        rows.append(row)

    table = Table(rows, colWidths=[NAME_COL_WIDTH] + [col_width] * len(dates), repeatRows=1, hAlign="LEFT")
    table.setStyle(TableStyle(style))
    return table


def render_attendance_grid_pdf(matrix: AttendanceMatrix, school_name: str = "") -> bytes:
    buffer = io.BytesIO()
    pagesize = landscape(A4)
    content_width = pagesize[0] - 2 * PAGE_MARGIN
    doc = SimpleDocTemplate(
        buffer, pagesize=pagesize,
        leftMargin=PAGE_MARGIN, rightMargin=PAGE_MARGIN, topMargin=PAGE_MARGIN, bottomMargin=PAGE_MARGIN,
    )
    styles = getSampleStyleSheet()

    regular = [s for s in matrix.students if s.student_type == "regular"]
    others = [s for s in matrix.students if s.student_type != "regular"]

    if matrix.start_date and matrix.end_date:
        period = f"{format_display_date(matrix.start_date)} - {format_display_date(matrix.end_date)}"
    else:
        period = "All dates"

    chunks = chunk_dates(matrix.dates, NAME_COL_WIDTH, MIN_DATE_COL_WIDTH, content_width) or [[]]
    elements = []
    for index, dates in enumerate(chunks):
        if index:
            elements.append(PageBreak())
        if school_name:
            elements.append(_paragraph(school_name, styles["Heading3"]))
        elements.append(_paragraph(f"Attendance: {matrix.class_data.name}", styles["Title"]))
        elements.append(_paragraph(period, styles["Normal"]))
        elements.append(Spacer(1, 10))

        # Ширина колонки не меньше минимальной; последний кусок растягиваем до ширины страницы
        col_width = MIN_DATE_COL_WIDTH
        if dates:
            col_width = max(MIN_DATE_COL_WIDTH, (content_width - NAME_COL_WIDTH) / len(dates))
        for title, students in (("Regular students", regular), ("Trial / makeup students", others)):
            if not students:
                continue
            elements.append(_paragraph(title, styles["Heading4"]))
            elements.append(_grid_table(matrix, students, dates, col_width))
            elements.append(Spacer(1, 8))

    legend = ", ".join(f"{symbol} = {info['text']}" for symbol, info in STATUS_DISPLAY.items() if symbol)
    elements.append(_paragraph(legend, styles["Italic"]))

    doc.build(elements)
    pdf_value = buffer.getvalue()
    buffer.close()
    return pdf_value


def _week_date(value: Optional[str]) -> str:
    normalized = normalize_to_iso(value)
    return to_date(normalized).strftime("%m/%d") if normalized else (value or "")


def render_monthly_report_pdf(
    report,
    weeks,
    class_info: ClassOut,
    teachers: Sequence[str] = (),
    school_name: str = "",
) -> bytes:
    buffer = io.BytesIO()
    doc = SimpleDocTemplate(
        buffer, pagesize=A4,
        leftMargin=PAGE_MARGIN, rightMargin=PAGE_MARGIN, topMargin=PAGE_MARGIN, bottomMargin=PAGE_MARGIN,
    )
    styles = getSampleStyleSheet()
    title_style = ParagraphStyle(name="ReportTitle", parent=styles["Title"], fontSize=22, textColor=HEADER_COLOR)
    cell_style = ParagraphStyle(name="Cell", parent=styles["BodyText"], fontSize=8, leading=10)
    header_style = ParagraphStyle(name="HeaderCell", parent=cell_style, fontName="Helvetica-Bold", textColor=colors.white)

    class_line = class_info.name + (f", {class_info.schedule}" if class_info.schedule else "")
    elements = []
    if school_name:
        elements.append(_paragraph(school_name, styles["Heading3"]))
    elements += [
        _paragraph("Monthly Report", title_style),
        _paragraph(f"{calendar.month_name[report.month]} {report.year}", styles["Heading2"]),
        _paragraph(class_line, styles["Normal"]),
        Spacer(1, 12),
    ]
    if report.monthly_theme:
        elements.append(_paragraph(f"Monthly theme: {report.monthly_theme}", styles["Normal"]))
        elements.append(Spacer(1, 8))

    headers = ["Week", "Date", "Target", "Vocabulary", "Phrase", "Others"]
    rows = [[_paragraph(h, header_style) for h in headers]]
    for week in sorted(weeks, key=lambda w: w.week_number):
        rows.append([
            _paragraph(str(week.week_number), cell_style),
            _paragraph(_week_date(week.lesson_date), cell_style),
            _paragraph(week.target, cell_style),
            _paragraph(week.vocabulary, cell_style),
            _paragraph(week.phrase, cell_style),
            _paragraph(week.others, cell_style),
        ])

    content_width = A4[0] - 2 * PAGE_MARGIN
    fixed = 40 + 50
    text_col = (content_width - fixed) / 4
    table = Table(rows, colWidths=[40, 50] + [text_col] * 4, repeatRows=1, hAlign="LEFT")
    table.setStyle(TableStyle([
        ("BACKGROUND", (0, 0), (-1, 0), HEADER_COLOR),
        ("VALIGN", (0, 0), (-1, -1), "TOP"),
        ("GRID", (0, 0), (-1, -1), 0.4, GRID_COLOR),
        ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.HexColor("#F5F5F5"), colors.white]),
    ]))
    elements.append(table)

    if teachers:
        elements.append(Spacer(1, 12))
        elements.append(_paragraph(f"Teacher(s): {', '.join(teachers)}", styles["Normal"]))

    doc.build(elements)
    pdf_value = buffer.getvalue()
    buffer.close()
    return pdf_value
