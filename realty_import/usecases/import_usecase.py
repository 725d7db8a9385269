from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable

from realty_import.common.sanitize import formatRowValues
from realty_import.domain.error_codes import ErrorCode
from realty_import.domain.exceptions import ImportAbortedError
from realty_import.domain.matching.client_index import ClientIndex
from realty_import.domain.models import (
    Client,
    DiagnosticStage,
    ImportErrorItem,
    ImportedTransaction,
    ImportResult,
    RowDecision,
    RowOutcome,
)
from realty_import.domain.reporting.import_result import ImportResultBuilder
from realty_import.domain.transform.column_map import detect_header
from realty_import.domain.transform.extractor import Extractor
from realty_import.domain.transform.source_record import SourceRecord
from realty_import.domain.validation.row_rules import RowNormalizer
from realty_import.domain.validation.skip_rules import SkipRules
from realty_import.infra.sources.csv_tokenizer import CsvTextSource, readCsvText
from realty_import.loggingSetup import logEvent


def _file_error(code: ErrorCode, message: str) -> ImportErrorItem:
    return ImportErrorItem(row=0, field="file", message=message, value="", code=code, stage=DiagnosticStage.FILE)


class TransactionImportUseCase:
    """
    Назначение/ответственность:
        Use-case импорта сделок из CSV: текст -> строки -> заголовок -> ColumnMap ->
        обработка строк -> ImportResult.

    Взаимодействия:
        - CsvTextSource разбирает текст.
        - ClientIndex строится один раз на запуск.
        - ImportResultBuilder сводит решения по строкам.

    Гарантии:
        - Детерминизм: одинаковые (текст, клиенты) дают одинаковый ImportResult.
        - Ошибка одной строки не прерывает импорт.
    """

    def __init__(
        self,
        skip_rules: SkipRules | None = None,
        normalizer: RowNormalizer | None = None,
        logger: logging.Logger | None = None,
        run_id: str = "",
    ) -> None:
        self.skip_rules = skip_rules or SkipRules()
        self.normalizer = normalizer or RowNormalizer()
        self.logger = logger
        self.run_id = run_id

    def run_file(self, path: str | Path, clients: Iterable[Client], encoding: str = "utf-8-sig") -> ImportResult:
        try:
            text = readCsvText(path, encoding=encoding)
        except (OSError, UnicodeDecodeError) as exc:
            self._log(logging.ERROR, f"CSV read error: {exc}")
            return ImportResult.file_failure(_file_error(ErrorCode.FILE_READ_ERROR, f"Failed to read CSV file: {exc}"))
        return self.run(text, clients)

    def run(self, text: str, clients: Iterable[Client]) -> ImportResult:
        rows = list(CsvTextSource(text))
        if not rows:
            self._log(logging.ERROR, "CSV file is empty")
            return ImportResult.file_failure(_file_error(ErrorCode.FILE_EMPTY, "CSV file is empty"))

        try:
            detection = detect_header(rows)
        except ImportAbortedError as exc:
            self._log(logging.ERROR, f"Import aborted: {exc}")
            return ImportResult.file_failure(exc.error)

        missing = detection.column_map.missing_fields()
        self._log(
            logging.INFO,
            f"header found line={detection.header.line_no} missing_columns={','.join(missing) or 'none'}",
        )

        index = ClientIndex(clients)
        extractor = Extractor(detection.column_map)
        builder = ImportResultBuilder()

        for record in rows[detection.data_start:]:
            try:
                decision = self.process_row(record, extractor, index)
            except Exception as exc:  # noqa: BLE001
                decision = RowDecision(
                    line_no=record.line_no,
                    outcome=RowOutcome.ERRORED,
                    errors=[
                        ImportErrorItem(
                            row=record.line_no,
                            field="general",
                            message=str(exc) or "Unknown error processing row",
                            value=formatRowValues(record.values),
                            code=ErrorCode.UNEXPECTED_ERROR,
                        )
                    ],
                )
            self._log_decision(decision)
            builder.add(decision)

        result = builder.build()
        self._log(
            logging.INFO,
            f"import done rows_total={result.rows_total} imported={result.imported} "
            f"skipped={result.rows_skipped} errors={len(result.errors)}",
        )
        return result

    def process_row(self, record: SourceRecord, extractor: Extractor, index: ClientIndex) -> RowDecision:
        """
        Назначение:
            Обработка одной строки данных.

        Алгоритм:
            1. Пустая строка или строка-итог -> SKIPPED.
            2. Нет адреса или цены -> SKIPPED.
            3. Правила полей; любые ошибки -> ERRORED (все ошибки полей строки).
            4. Поиск клиента; не найден -> ERRORED (одна ошибка).
            5. Иначе -> INCLUDED.
        """
        reason = self.skip_rules.skip_reason(record)
        if reason:
            return RowDecision(line_no=record.line_no, outcome=RowOutcome.SKIPPED, reason=reason)

        raw = extractor.extract(record)
        reason = self.skip_rules.incomplete_reason(raw)
        if reason:
            return RowDecision(line_no=record.line_no, outcome=RowOutcome.SKIPPED, reason=reason)

        normalized = self.normalizer.normalize(raw)
        warnings = [ImportErrorItem.from_item(record.line_no, w) for w in normalized.warnings]
        if not normalized.valid:
            return RowDecision(
                line_no=record.line_no,
                outcome=RowOutcome.ERRORED,
                errors=[ImportErrorItem.from_item(record.line_no, e) for e in normalized.errors],
                warnings=warnings,
            )

        values = normalized.values
        client_name = values["client_name"]
        client = index.find(client_name)
        if client is None:
            return RowDecision(
                line_no=record.line_no,
                outcome=RowOutcome.ERRORED,
                errors=[
                    ImportErrorItem(
                        row=record.line_no,
                        field="client_name",
                        message=f'Client "{client_name}" not found. Please create the client first.',
                        value=client_name,
                        code=ErrorCode.CLIENT_NOT_FOUND,
                        stage=DiagnosticStage.MATCH,
                    )
                ],
                warnings=warnings,
            )
        self._log_ambiguous(record.line_no, client_name, index)

        transaction = ImportedTransaction(
            address=values["address"],
            client_name=client_name,
            client_id=client.id,
            price=values["price"],
            commission_rate=values["commission_rate"],
            source=values["source"],
            side=values["side"],
            gross_commission=values["gross_commission"],
            net_commission=values["net_commission"],
            broker_commission=values["broker_commission"],
            status=values["status"],
            closing_date=values["closing_date"],
        )
        return RowDecision(
            line_no=record.line_no,
            outcome=RowOutcome.INCLUDED,
            transaction=transaction,
            warnings=warnings,
        )

    def _log_decision(self, decision: RowDecision) -> None:
        if decision.outcome == RowOutcome.SKIPPED:
            self._log(logging.DEBUG, f"skipped row line={decision.line_no} reason={decision.reason}")
        elif decision.outcome == RowOutcome.ERRORED:
            fields = ",".join(sorted({e.field for e in decision.errors}))
            self._log(logging.WARNING, f"invalid row line={decision.line_no} fields={fields}")

    def _log_ambiguous(self, line_no: int, client_name: str, index: ClientIndex) -> None:
        if self.logger is None:
            return
        candidates = index.candidates(client_name)
        if len(candidates) > 1:
            ids = ",".join(c.id for c in candidates)
            self._log(
                logging.WARNING,
                f"ambiguous client line={line_no} name={client_name!r} candidates={ids} chosen={candidates[0].id}",
            )

    def _log(self, level: int, message: str) -> None:
        if self.logger is None:
            return
        logEvent(self.logger, level, self.run_id, "import", message)
