from __future__ import annotations

from realty_import.domain.models import (
    ImportErrorItem,
    ImportedTransaction,
    ImportResult,
    RowDecision,
    RowOutcome,
)


class ImportResultBuilder:
    """
    Назначение/ответственность:
        Локальный аккумулятор одного запуска импорта. Сам строки не обрабатывает,
        только сводит RowDecision в ImportResult.
    """

    def __init__(self) -> None:
        self.errors: list[ImportErrorItem] = []
        self.warnings: list[ImportErrorItem] = []
        self.data: list[ImportedTransaction] = []
        self.rows_total = 0
        self.rows_skipped = 0

    def add(self, decision: RowDecision) -> None:
        self.rows_total += 1
        if decision.outcome == RowOutcome.SKIPPED:
            self.rows_skipped += 1
            return
        if decision.outcome == RowOutcome.ERRORED:
            self.errors.extend(decision.errors)
            return
        if decision.transaction is None:
            raise ValueError(f"Included row without transaction at line {decision.line_no}")
        self.data.append(decision.transaction)
        self.warnings.extend(decision.warnings)

    def build(self) -> ImportResult:
        return ImportResult(
            success=len(self.errors) == 0,
            imported=len(self.data),
            errors=tuple(self.errors),
            data=tuple(self.data),
            warnings=tuple(self.warnings),
            rows_total=self.rows_total,
            rows_skipped=self.rows_skipped,
        )
