from __future__ import annotations

from typing import Any

from realty_import.common.clock import getNowIso
from realty_import.domain.models import ImportErrorItem, ImportResult
from realty_import.domain.reporting.models import ReportEnvelope, ReportItem, ReportMeta, ReportSummary


class ReportCollector:
    """
    Назначение/ответственность:
        Отчёт одного запуска команды: счётчики импорта, диагностика по строкам
        (не больше items_limit записей) и произвольный context (config, runtime, output, error).

    Статус:
        SUCCESS  нет ошибок строк и нет context.error
        PARTIAL  есть ошибки, но часть строк импортирована
        FAILED   иначе
    """

    def __init__(self, run_id: str, command: str, items_limit: int | None = None) -> None:
        self.meta = ReportMeta(run_id=run_id, command=command, started_at=getNowIso(), items_limit=items_limit)
        self.summary = ReportSummary()
        self.items: list[ReportItem] = []
        self.context: dict[str, Any] = {}

    def set_context(self, name: str, value: dict[str, Any]) -> None:
        self.context[name] = value

    def add_import_result(self, result: ImportResult) -> None:
        self.summary.absorb(result)
        for item in result.errors:
            self.add_item("error", item)
        for item in result.warnings:
            self.add_item("warning", item)

    def add_item(self, status: str, item: ImportErrorItem) -> None:
        self.summary.count(status, item.field)
        limit = self.meta.items_limit
        if limit is not None and len(self.items) >= limit:
            self.meta.items_truncated = True
            return
        self.items.append(ReportItem.from_error(status, item))

    @property
    def status(self) -> str:
        if self.summary.errors_total == 0 and "error" not in self.context:
            return "SUCCESS"
        return "PARTIAL" if self.summary.rows_imported else "FAILED"

    def finish(self, duration_ms: int) -> None:
        self.meta.finished_at = getNowIso()
        self.meta.duration_ms = duration_ms

    def build(self) -> ReportEnvelope:
        return ReportEnvelope(
            status=self.status,
            meta=self.meta,
            summary=self.summary,
            items=list(self.items),
            context=dict(self.context),
        )
