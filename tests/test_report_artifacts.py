import io
import json
import logging
import re
import sys
from datetime import datetime

from realty_import.common.clock import generate_run_id
from realty_import.common.sanitize import describeErrors, formatRowValues
from realty_import.domain.error_codes import ErrorCode
from realty_import.domain.models import ImportErrorItem, ImportResult
from realty_import.infra.artifacts.report_writer import closeReport, openReport, writeReportJson
from realty_import.loggingSetup import closeCommandLogger, createCommandLogger, mirrorStdStreams


def _error(row: int, field: str = "price") -> ImportErrorItem:
    return ImportErrorItem(row=row, field=field, message="bad", value="x", code=ErrorCode.INVALID_PRICE)


def test_report_counts_and_truncates_items(tmp_path):
    result = ImportResult(
        success=False,
        imported=1,
        errors=(_error(3), _error(3, "side"), _error(5)),
        rows_total=4,
        rows_skipped=1,
    )
    report = openReport("r1", "import", configSources=["env"], itemsLimit=2)
    report.add_import_result(result)
    closeReport(report, durationMs=12, logFile="x.log", exitCode=1)

    path = writeReportJson(report, str(tmp_path))
    data = json.loads((tmp_path / "report_import_r1.json").read_text(encoding="utf-8"))

    assert path.endswith("report_import_r1.json")
    assert data["status"] == "PARTIAL"
    assert data["summary"]["rows_failed"] == 2
    assert data["summary"]["errors_total"] == 3
    assert data["summary"]["by_field"] == {"price": 2, "side": 1}
    assert len(data["items"]) == 2
    assert data["meta"]["items_truncated"] is True
    assert data["meta"]["duration_ms"] == 12
    assert data["context"]["config"] == {"sources": ["env"]}
    assert data["context"]["runtime"]["exit_code"] == 1


def test_report_with_context_error_is_failed():
    report = openReport("r1", "validate", configSources=[], itemsLimit=None)
    report.set_context("error", {"code": "INPUT_FILE_MISSING"})
    assert report.build().status == "FAILED"


def test_run_id_is_time_prefixed():
    run_id = generate_run_id(datetime(2024, 3, 1, 10, 15, 0))
    assert re.fullmatch(r"20240301T101500-[0-9a-f]{8}", run_id)
    assert generate_run_id() != generate_run_id()


def test_row_preview_and_error_cap():
    assert formatRowValues(["1 Main", "John"]) == "1 Main, John"
    assert formatRowValues(["a" * 20], limit=10) == "aaaaaaa..."
    assert describeErrors(["a", "b", "c"], 2) == (["a", "b"], 1)
    assert describeErrors(["a"], 0) == (["a"], 0)


def test_console_output_is_mirrored_into_log(tmp_path, monkeypatch):
    logger, logPath = createCommandLogger("import", str(tmp_path), "r1", "INFO")
    target = io.StringIO()
    monkeypatch.setattr(sys, "stdout", target)
    try:
        with mirrorStdStreams(logger, "r1"):
            print("first line")
            sys.stdout.write("partial")
        assert sys.stdout is target
    finally:
        closeCommandLogger(logger)

    assert target.getvalue() == "first line\npartial"
    text = open(logPath, encoding="utf-8").read()
    assert "runId=r1 comp=stdout msg=first line" in text
    assert "msg=partial" in text
    assert logging.getLogger("realtyImport.import.r1").handlers == []
