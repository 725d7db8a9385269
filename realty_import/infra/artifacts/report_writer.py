from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from realty_import.domain.models import ImportResult
from realty_import.domain.reporting.collector import ReportCollector


def openReport(runId: str, command: str, configSources: list[str], itemsLimit: int | None) -> ReportCollector:
    report = ReportCollector(run_id=runId, command=command, items_limit=itemsLimit)
    report.set_context("config", {"sources": list(configSources)})
    return report


def closeReport(report: ReportCollector, durationMs: int, logFile: str, exitCode: int | None) -> None:
    report.set_context("runtime", {"log_file": logFile, "exit_code": exitCode})
    report.finish(duration_ms=durationMs)


def _dump(path: Path, data: Any) -> str:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")
    return str(path)


def writeReportJson(report: ReportCollector, reportDir: str) -> str:
    """
    Назначение:
        Пишет <reportDir>/report_<command>_<runId>.json.

    Выходные данные:
        Путь к файлу отчёта.
    """
    envelope = report.build()
    fileName = f"report_{envelope.meta.command}_{envelope.meta.run_id}.json"
    return _dump(Path(reportDir) / fileName, envelope.to_dict())


def writeImportPayloads(result: ImportResult, outputPath: str) -> str:
    """
    Назначение:
        Payload'ы импортированных сделок для API создания: {"transactions": [...]}.
    """
    return _dump(Path(outputPath), {"transactions": [t.to_payload() for t in result.data]})
