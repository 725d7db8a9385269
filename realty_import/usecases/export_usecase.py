from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable

from realty_import.domain.export import ExportOptions, StoredTransaction, filter_transactions, generate_csv_content
from realty_import.loggingSetup import logEvent


class ExportUseCase:
    """
    Назначение/ответственность:
        Use-case экспорта сделок в CSV-файл.
    """

    def __init__(self, options: ExportOptions) -> None:
        self.options = options

    def run(
        self,
        transactions: Iterable[StoredTransaction],
        output: str | Path | None,
        output_dir: str | Path,
        logger: logging.Logger,
        run_id: str,
    ) -> tuple[str, int]:
        """
        Выходные данные:
            (путь к файлу, число выгруженных сделок)
        """
        items = list(transactions)
        exported = len(filter_transactions(items, self.options))
        content = generate_csv_content(items, self.options)

        path = Path(output) if output else Path(output_dir) / self.options.filename
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8", newline="") as f:
            f.write(content)

        logEvent(
            logger,
            logging.INFO,
            run_id,
            "export",
            f"export done total={len(items)} exported={exported} path={path}",
        )
        return str(path), exported
