from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any

from realty_import.domain.models import ImportErrorItem, ImportResult


@dataclass
class ReportMeta:
    run_id: str
    command: str
    started_at: str
    finished_at: str | None = None
    duration_ms: int | None = None
    csv_path: str | None = None
    items_limit: int | None = None
    items_truncated: bool = False


@dataclass
class ReportSummary:
    """
    Назначение:
        Счётчики импорта за запуск.

    Инварианты:
        - rows_imported + rows_failed + rows_skipped == rows_total (для одного ImportResult).
        - errors_total/warnings_total считают все диагностики, даже не попавшие в items.
    """

    rows_total: int = 0
    rows_imported: int = 0
    rows_skipped: int = 0
    rows_failed: int = 0
    errors_total: int = 0
    warnings_total: int = 0
    by_field: dict[str, int] = field(default_factory=dict)

    def absorb(self, result: ImportResult) -> None:
        self.rows_total += result.rows_total
        self.rows_imported += result.imported
        self.rows_skipped += result.rows_skipped
        self.rows_failed += result.errored_rows

    def count(self, severity: str, fieldName: str) -> None:
        if severity == "error":
            self.errors_total += 1
        else:
            self.warnings_total += 1
        self.by_field[fieldName] = self.by_field.get(fieldName, 0) + 1


@dataclass
class ReportItem:
    status: str
    row: int
    field: str
    code: str
    message: str
    value: str

    @classmethod
    def from_error(cls, status: str, item: ImportErrorItem) -> "ReportItem":
        return cls(
            status=status,
            row=item.row,
            field=item.field,
            code=item.code.value,
            message=item.message,
            value=item.value,
        )


@dataclass
class ReportEnvelope:
    status: str
    meta: ReportMeta
    summary: ReportSummary
    items: list[ReportItem]
    context: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
