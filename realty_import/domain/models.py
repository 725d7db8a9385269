from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from realty_import.domain.error_codes import ErrorCode


class DiagnosticStage(str, Enum):
    """
    Назначение:
        Этап импорта, на котором возникла диагностика.
    """

    FILE = "FILE"
    VALIDATE = "VALIDATE"
    MATCH = "MATCH"


class RowOutcome(str, Enum):
    INCLUDED = "included"
    SKIPPED = "skipped"
    ERRORED = "errored"


class TransactionStatus(str, Enum):
    ACTIVE = "Active"
    PENDING = "Pending"
    CLOSED = "Closed"


SIDES: tuple[str, ...] = ("seller", "buyer", "both")


@dataclass(frozen=True)
class ValidationErrorItem:
    """
    Назначение:
        Диагностика по одному полю строки, ещё не привязанная к номеру строки.
    """

    stage: DiagnosticStage
    code: ErrorCode
    field: str
    message: str
    value: str = ""


@dataclass(frozen=True)
class ImportErrorItem:
    """
    Назначение:
        Ошибка импорта, привязанная к строке файла.

    Поля:
        row: номер строки (1-based); 0 для ошибок уровня файла.
        field: логическое поле (address, price, client_name, file, headers, general, ...).
        message: человекочитаемое описание.
        value: исходное значение, вызвавшее ошибку.
    """

    row: int
    field: str
    message: str
    value: str
    code: ErrorCode = ErrorCode.UNEXPECTED_ERROR
    stage: DiagnosticStage = DiagnosticStage.VALIDATE

    @classmethod
    def from_item(cls, row: int, item: ValidationErrorItem) -> "ImportErrorItem":
        return cls(
            row=row,
            field=item.field,
            message=item.message,
            value=item.value,
            code=item.code,
            stage=item.stage,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "row": self.row,
            "field": self.field,
            "message": self.message,
            "value": self.value,
            "code": self.code.value,
            "stage": self.stage.value,
        }

    def describe(self) -> str:
        prefix = f"Row {self.row}" if self.row else "File"
        return f"{prefix}: {self.field} - {self.message}"


@dataclass(frozen=True)
class Client:
    """
    Назначение:
        Известный клиент CRM, к которому привязываются импортируемые сделки.
    """

    id: str
    name: str
    email: str | None = None
    phone: str | None = None
    type: str | None = None


@dataclass(frozen=True)
class ImportedTransaction:
    """
    Назначение:
        Нормализованная сделка, прошедшая валидацию и сопоставление клиента.

    Инварианты:
        - client_id не пустой.
        - price > 0.
    """

    address: str
    client_name: str
    client_id: str
    price: float
    commission_rate: float
    source: str | None = None
    side: str | None = None
    gross_commission: float | None = None
    net_commission: float | None = None
    broker_commission: float | None = None
    status: TransactionStatus = TransactionStatus.ACTIVE
    closing_date: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "address": self.address,
            "client_name": self.client_name,
            "client_id": self.client_id,
            "price": self.price,
            "commission_rate": self.commission_rate,
            "source": self.source,
            "side": self.side,
            "gross_commission": self.gross_commission,
            "net_commission": self.net_commission,
            "broker_commission": self.broker_commission,
            "status": self.status.value,
            "closing_date": self.closing_date,
        }

    def to_payload(self) -> dict[str, Any]:
        """
        Назначение:
            Payload для API создания сделки.

        Алгоритм:
            - gross_commission берётся из файла, иначе price * commission_rate / 100.
            - closing_date пустая -> None.
        """
        gross = self.gross_commission
        if not gross:
            gross = self.price * self.commission_rate / 100
        return {
            "address": self.address,
            "client_id": self.client_id,
            "price": self.price,
            "commission_rate": self.commission_rate,
            "gross_commission": gross,
            "net_commission": self.net_commission,
            "broker_commission": self.broker_commission,
            "status": (self.status or TransactionStatus.ACTIVE).value,
            "closing_date": self.closing_date or None,
        }


@dataclass(frozen=True)
class ImportResult:
    """
    Назначение:
        Итог одного запуска импорта.

    Поля:
        success: True тогда и только тогда, когда errors пуст.
        imported: количество строк в data.
        errors: ошибки строк и файла.
        data: сделки, готовые к созданию.
        warnings: нефатальные замечания (строки с ними всё равно импортируются).
        rows_total: число строк данных после заголовка.
        rows_skipped: строки, молча пропущенные эвристиками.
    """

    success: bool
    imported: int
    errors: tuple[ImportErrorItem, ...] = ()
    data: tuple[ImportedTransaction, ...] = ()
    warnings: tuple[ImportErrorItem, ...] = ()
    rows_total: int = 0
    rows_skipped: int = 0

    @property
    def errored_rows(self) -> int:
        return len({e.row for e in self.errors if e.row > 0})

    @classmethod
    def file_failure(cls, error: ImportErrorItem) -> "ImportResult":
        return cls(success=False, imported=0, errors=(error,))

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "imported": self.imported,
            "errors": [e.to_dict() for e in self.errors],
            "data": [t.to_dict() for t in self.data],
            "warnings": [w.to_dict() for w in self.warnings],
            "rows_total": self.rows_total,
            "rows_skipped": self.rows_skipped,
        }


@dataclass
class RowDecision:
    """
    Назначение:
        Результат обработки одной строки данных.
    """

    line_no: int
    outcome: RowOutcome
    transaction: ImportedTransaction | None = None
    errors: list[ImportErrorItem] = field(default_factory=list)
    warnings: list[ImportErrorItem] = field(default_factory=list)
    reason: str | None = None
