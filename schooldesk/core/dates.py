# schooldesk/core/dates.py
"""
Нормализация дат.

Все даты внутри приложения хранятся и сравниваются как строки YYYY-MM-DD.
Любая дата, пришедшая от пользователя или из старых записей БД, сначала
проходит через normalize_to_iso().
"""
import calendar
import re
from datetime import MAXYEAR, MINYEAR, date, datetime, timedelta
from typing import Iterator, Optional, Tuple, Union

from schooldesk.core.exceptions import ValidationError

ISO_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
US_RE = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$")  # MM/DD/YYYY
DMY_RE = re.compile(r"^(\d{1,2})-(\d{1,2})-(\d{4})$")  # DD-MM-YYYY

# Прочие форматы, которые встречались в старых данных
FALLBACK_FORMATS = (
    "%Y/%m/%d",
    "%Y.%m.%d",
    "%d.%m.%Y",
    "%Y%m%d",
    "%d-%b-%Y",
)

SHORT_MONTHS = [
    "Jan.", "Feb.", "Mar.", "Apr.", "May", "June",
    "July", "Aug.", "Sept.", "Oct.", "Nov.", "Dec.",
]

DateInput = Union[str, date, datetime, None]


def _build(year: int, month: int, day: int) -> Optional[str]:
    try:
        return date(year, month, day).isoformat()
    except ValueError:
        return None


def normalize_to_iso(value: DateInput) -> Optional[str]:
    """
    Приводит дату к виду YYYY-MM-DD.
    Возвращает None, если распознать дату не удалось.
    None никогда не означает "сегодня".
    """
    if value is None or value == "":
        return None

    # date/datetime: берём календарные поля как есть, без перевода в UTC
    if isinstance(value, (date, datetime)):
        return _build(value.year, value.month, value.day)

    if not isinstance(value, str):
        return None

    date_only = value.strip().split("T")[0].split(" ")[0]
    if not date_only:
        return None

    if ISO_RE.match(date_only):
        year, month, day = (int(part) for part in date_only.split("-"))
        return _build(year, month, day)

    match = US_RE.match(date_only)
    if match:
        month, day, year = (int(part) for part in match.groups())
        return _build(year, month, day)

    match = DMY_RE.match(date_only)
    if match:
        day, month, year = (int(part) for part in match.groups())
        return _build(year, month, day)

    for fmt in FALLBACK_FORMATS:
        try:
            return datetime.strptime(date_only, fmt).date().isoformat()
        except ValueError:
            continue
    return None


def is_valid_iso_date(value) -> bool:
    if not value or not isinstance(value, str):
        return False
    return normalize_to_iso(value) is not None


def to_date(iso_value: str) -> date:
    return datetime.strptime(iso_value, "%Y-%m-%d").date()


def date_range(start: str, end: str) -> Iterator[str]:
    """Каждый календарный день от start до end включительно"""
    current = to_date(start)
    last = to_date(end)
    while current <= last:
        yield current.isoformat()
        current += timedelta(days=1)


def month_bounds(year: int, month: int) -> Tuple[str, str]:
    """Первый и последний день месяца (учитывает високосные годы)"""
    if month < 1 or month > 12:
        raise ValidationError("Месяц должен быть от 1 до 12")
    if year < MINYEAR or year > MAXYEAR:
        raise ValidationError(f"Год должен быть от {MINYEAR} до {MAXYEAR}")
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1).isoformat(), date(year, month, last_day).isoformat()


def format_display_date(iso_value: Optional[str]) -> str:
    if not iso_value:
        return "N/A"
    normalized = normalize_to_iso(iso_value)
    if not normalized:
        return "Invalid Date"
    d = to_date(normalized)
    return f"{d.strftime('%b')} {d.day}, {d.year}"


def format_short_date(iso_value: Optional[str]) -> str:
    normalized = normalize_to_iso(iso_value)
    if not normalized:
        return ""
    d = to_date(normalized)
    return f"{SHORT_MONTHS[d.month - 1]} {d.day}"


def parse_date_param(value: DateInput, field: str = "date") -> Optional[str]:
    """Дата из запроса: пусто -> None, нераспознанная -> ValidationError"""
    if value is None or value == "":
        return None
    normalized = normalize_to_iso(value)
    if not normalized:
        raise ValidationError(f"Некорректная дата в поле {field}. Ожидается YYYY-MM-DD")
    return normalized
