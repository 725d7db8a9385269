from __future__ import annotations

from dataclasses import dataclass

from realty_import.domain.models import ImportErrorItem


@dataclass
class ImportAbortedError(Exception):
    """
    Назначение:
        Ошибка уровня файла, прерывающая импорт целиком.
    Инварианты/гарантии:
        - error.row == 0.
        - Перехватывается use-case и превращается в ImportResult с одной ошибкой.
    """

    error: ImportErrorItem

    def __str__(self) -> str:
        return f"{self.error.field}: {self.error.message}"


class CommissionInputError(ValueError):
    """
    Назначение:
        Недопустимые входные данные калькулятора комиссии.
    """

    def __init__(self, field: str, message: str) -> None:
        super().__init__(message)
        self.field = field
        self.message = message


class SourceFormatError(Exception):
    """
    Назначение:
        Неподдерживаемая структура входного JSON (клиенты/сделки).
    """


__all__ = ["ImportAbortedError", "CommissionInputError", "SourceFormatError"]
