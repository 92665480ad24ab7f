# schooldesk/core/exceptions.py
from typing import Optional


class SchoolDeskError(Exception):
    """Базовая ошибка предметной области"""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(SchoolDeskError):
    """Некорректные или неполные входные данные"""


class NotFoundError(SchoolDeskError):
    """Класс, ученик, отчёт и т.п. не существует"""


class ConflictError(SchoolDeskError):
    """Запись уже существует"""

    def __init__(self, message: str, existing_id: Optional[int] = None):
        super().__init__(message)
        self.existing_id = existing_id


class StorageNotConfigured(SchoolDeskError):
    """Хранилище PDF не настроено"""
