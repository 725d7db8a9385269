from __future__ import annotations

import logging
import time
from datetime import date, datetime
from pathlib import Path

import typer

from realty_import.common.clock import generate_run_id, getDurationMs
from realty_import.common.sanitize import describeErrors
from realty_import.config import Settings, loadSettings
from realty_import.domain.commission import calculate_commission
from realty_import.domain.exceptions import CommissionInputError, SourceFormatError
from realty_import.domain.export import ExportOptions
from realty_import.domain.models import ImportResult, TransactionStatus
from realty_import.domain.validation.skip_rules import SkipRules
from realty_import.errors import AppError
from realty_import.infra.artifacts.report_writer import (
    closeReport,
    openReport,
    writeImportPayloads,
    writeReportJson,
)
from realty_import.infra.sources.client_source_json import loadClientsFromJson
from realty_import.infra.sources.transaction_source_json import loadTransactionsFromJson
from realty_import.loggingSetup import (
    closeCommandLogger,
    createCommandLogger,
    logEvent,
    mapLogLevel,
    mirrorStdStreams,
)
from realty_import.usecases.export_usecase import ExportUseCase
from realty_import.usecases.import_usecase import TransactionImportUseCase

app = typer.Typer(no_args_is_help=True, add_completion=False)

CONSOLE_ERRORS_LIMIT = 50


def ensureDir(path: str) -> None:
    Path(path).mkdir(parents=True, exist_ok=True)


def checkInputFile(path: str | None, optionName: str) -> str | None:
    """
    Назначение:
        Проверка обязательного входного файла команды.

    Выходные данные:
        Текст ошибки для консоли или None, если файл на месте.
    """
    if not path:
        return f"{optionName} is required"
    if not Path(path).is_file():
        return f"file not found: {path}"
    return None


def printRunHeader(runId: str, command: str, settings: Settings, sources: list[str]) -> None:
    typer.echo(
        f"run_id={runId} command={command} sources={sources} "
        f"log_level={settings.log_level} report_dir={settings.report_dir}"
    )


def printImportSummary(result: ImportResult) -> None:
    status = "OK" if result.success else "ERRORS"
    typer.echo(
        f"status={status} rows_total={result.rows_total} imported={result.imported} "
        f"skipped={result.rows_skipped} errors={len(result.errors)} warnings={len(result.warnings)}"
    )
    shown, hidden = describeErrors([e.describe() for e in result.errors], CONSOLE_ERRORS_LIMIT)
    for line in shown:
        typer.echo(f"  {line}")
    if hidden:
        typer.echo(f"  ... and {hidden} more errors (see report)")


def runWithReport(
    ctx: typer.Context,
    commandName: str,
    requiredFiles: dict[str, str | None],
    runner,
) -> None:
    """
    Назначение:
        Обвязка команды, работающей с файлами: логгер и файл лога, скелет отчёта,
        проверка входных файлов, дублирование консоли в лог.
        Отчёт report_<command>_<runId>.json пишется при любом исходе.

    Поведение:
        - Нет входного файла: ошибка в лог и report, exit code 2.
        - Иначе exit code, который вернул runner(logger, report).
    """
    runId = ctx.obj["runId"]
    settings: Settings = ctx.obj["settings"]
    sources = ctx.obj["sources"]

    startMonotonic = time.monotonic()
    logger, logFilePath = createCommandLogger(
        commandName=commandName,
        logDir=settings.log_dir,
        runId=runId,
        logLevel=settings.log_level,
    )
    report = openReport(runId, commandName, configSources=sources, itemsLimit=settings.report_items_limit)

    exitCode: int | None = None
    try:
        with mirrorStdStreams(logger, runId):
            logEvent(logger, logging.INFO, runId, "core", "Command started")
            printRunHeader(runId, commandName, settings, sources)

            for optionName, path in requiredFiles.items():
                problem = checkInputFile(path, optionName)
                if problem is None:
                    continue
                error = AppError.missing_input(optionName, path)
                logEvent(logger, logging.ERROR, runId, "input", error.message)
                report.set_context("error", error.to_dict())
                typer.echo(f"ERROR: {problem}", err=True)
                exitCode = 2
                break
            else:
                exitCode = runner(logger, report)
    finally:
        durationMs = getDurationMs(startMonotonic, time.monotonic())
        closeReport(report, durationMs=durationMs, logFile=logFilePath, exitCode=exitCode)
        reportPath = writeReportJson(report, settings.report_dir)
        logEvent(logger, logging.INFO, runId, "report", f"Report written: {reportPath} exit_code={exitCode}")
        closeCommandLogger(logger)

    raise typer.Exit(code=exitCode)


def runImportCommand(
    ctx: typer.Context,
    commandName: str,
    csvPath: str | None,
    clientsPath: str | None,
    outputPath: str | None,
    writePayloads: bool,
) -> None:
    runId = ctx.obj["runId"]
    settings: Settings = ctx.obj["settings"]

    def execute(logger, report) -> int:
        report.meta.csv_path = csvPath
        try:
            clients = loadClientsFromJson(clientsPath)
        except (OSError, SourceFormatError) as exc:
            error = AppError.bad_source("CLIENTS_SOURCE_ERROR", exc, clientsPath)
            report.set_context("error", error.to_dict())
            logEvent(logger, logging.ERROR, runId, "clients", f"Failed to load clients: {exc}")
            typer.echo(f"ERROR: failed to load clients: {exc}", err=True)
            return 2

        logEvent(logger, logging.INFO, runId, "clients", f"clients loaded count={len(clients)}")
        usecase = TransactionImportUseCase(
            skip_rules=SkipRules(markers=settings.skip_markers),
            logger=logger,
            run_id=runId,
        )
        result = usecase.run_file(csvPath, clients, encoding=settings.csv_encoding)
        report.add_import_result(result)
        printImportSummary(result)

        if any(e.code.is_file_level for e in result.errors):
            return 2

        if writePayloads and result.data:
            target = outputPath or str(Path(settings.report_dir) / f"import_{runId}.json")
            payloadPath = writeImportPayloads(result, target)
            report.set_context("output", {"payloads": payloadPath, "count": result.imported})
            typer.echo(f"payloads written: {payloadPath}")

        return 0 if result.success else 1

    runWithReport(
        ctx=ctx,
        commandName=commandName,
        requiredFiles={"--csv": csvPath, "--clients": clientsPath},
        runner=execute,
    )


def runExportCommand(
    ctx: typer.Context,
    transactionsPath: str | None,
    outputPath: str | None,
    options: ExportOptions,
) -> None:
    runId = ctx.obj["runId"]
    settings: Settings = ctx.obj["settings"]

    def execute(logger, report) -> int:
        try:
            transactions = loadTransactionsFromJson(transactionsPath)
        except (OSError, SourceFormatError) as exc:
            report.set_context("error", AppError.bad_source("TRANSACTIONS_SOURCE_ERROR", exc, transactionsPath).to_dict())
            logEvent(logger, logging.ERROR, runId, "export", f"Failed to load transactions: {exc}")
            typer.echo(f"ERROR: failed to load transactions: {exc}", err=True)
            return 2

        path, exported = ExportUseCase(options).run(
            transactions,
            output=outputPath,
            output_dir=settings.report_dir,
            logger=logger,
            run_id=runId,
        )
        report.set_context("output", {"csv": path, "count": exported})
        typer.echo(f"exported={exported} path={path}")
        return 0

    runWithReport(
        ctx=ctx,
        commandName="export",
        requiredFiles={"--transactions": transactionsPath},
        runner=execute,
    )


@app.callback()
def main(
    ctx: typer.Context,
    config: str | None = typer.Option(None, "--config", help="Path to config.yml"),
    runId: str | None = typer.Option(None, "--run-id", help="Run identifier. If omitted, generated from the start time."),
    logLevel: str | None = typer.Option(None, "--log-level", help="Log level: ERROR|WARN|INFO|DEBUG"),
    logDir: str | None = typer.Option(None, "--log-dir", help="Directory for logs."),
    reportDir: str | None = typer.Option(None, "--report-dir", help="Directory for reports."),
    csvEncoding: str | None = typer.Option(None, "--csv-encoding", help="Encoding of input CSV files"),
    reportItemsLimit: int | None = typer.Option(None, "--report-items-limit", help="Limit report items stored"),
):
    """
    Назначение:
        Глобальная инициализация CLI:
        - генерирует/принимает run_id
        - загружает настройки (CLI > ENV > config > defaults)
        - создаёт каталоги log/report
        - сохраняет всё в ctx.obj для подкоманд
    """
    if not runId:
        runId = generate_run_id()

    cliOverrides = {
        "log_level": logLevel,
        "log_dir": logDir,
        "report_dir": reportDir,
        "csv_encoding": csvEncoding,
        "report_items_limit": reportItemsLimit,
    }
    try:
        loaded = loadSettings(config_path=config, cli_overrides=cliOverrides)
        mapLogLevel(loaded.settings.log_level)
    except (TypeError, ValueError) as exc:
        typer.echo(f"ERROR: invalid settings: {exc}", err=True)
        raise typer.Exit(code=2)

    ensureDir(loaded.settings.log_dir)
    ensureDir(loaded.settings.report_dir)

    ctx.obj = {
        "runId": runId,
        "settings": loaded.settings,
        "sources": loaded.sources_used,
    }


@app.command()
def validate(
    ctx: typer.Context,
    csv: str | None = typer.Option(None, "--csv", help="Path to transactions CSV"),
    clients: str | None = typer.Option(None, "--clients", help="Path to known clients JSON"),
):
    """Check a transactions CSV against known clients without writing payloads."""
    runImportCommand(ctx, "validate", csv, clients, outputPath=None, writePayloads=False)


@app.command("import")
def importTransactions(
    ctx: typer.Context,
    csv: str | None = typer.Option(None, "--csv", help="Path to transactions CSV"),
    clients: str | None = typer.Option(None, "--clients", help="Path to known clients JSON"),
    output: str | None = typer.Option(None, "--output", help="Where to write transaction payloads JSON"),
):
    """Import a transactions CSV and write creation payloads for valid rows."""
    runImportCommand(ctx, "import", csv, clients, outputPath=output, writePayloads=True)


@app.command()
def export(
    ctx: typer.Context,
    transactions: str | None = typer.Option(None, "--transactions", help="Path to transactions JSON"),
    output: str | None = typer.Option(None, "--output", help="Output CSV path (default: report dir)"),
    dateFrom: datetime | None = typer.Option(None, "--from", formats=["%Y-%m-%d"], help="Created from (inclusive)"),
    dateTo: datetime | None = typer.Option(None, "--to", formats=["%Y-%m-%d"], help="Created to (inclusive)"),
    status: list[str] | None = typer.Option(None, "--status", help="Status filter, repeatable"),
    clientInfo: bool = typer.Option(True, "--client-info/--no-client-info", help="Include client columns"),
    commissionBreakdown: bool = typer.Option(
        True,
        "--commission-breakdown/--no-commission-breakdown",
        help="Append commission totals row",
    ),
):
    """Export transactions JSON to CSV."""
    allowed = {s.value.lower(): s.value for s in TransactionStatus}
    statuses: list[str] = []
    for value in status or []:
        normalized = allowed.get(value.strip().lower())
        if normalized is None:
            typer.echo(f"ERROR: unsupported status: {value}", err=True)
            raise typer.Exit(code=2)
        statuses.append(normalized)

    today = date.today()
    options = ExportOptions(
        date_from=dateFrom.date() if dateFrom else date(today.year, 1, 1),
        date_to=dateTo.date() if dateTo else today,
        statuses=tuple(statuses) if statuses else tuple(allowed.values()),
        include_client_info=clientInfo,
        include_commission_breakdown=commissionBreakdown,
    )
    runExportCommand(ctx, transactions, output, options)


@app.command()
def commission(
    ctx: typer.Context,
    price: float = typer.Option(..., "--price", help="Sale price"),
    rate: float = typer.Option(..., "--rate", help="Commission rate, percent"),
    brokerSplit: float | None = typer.Option(None, "--broker-split", help="Broker split, percent"),
):
    """Calculate gross, broker and net commission for a sale."""
    settings: Settings = ctx.obj["settings"]
    split = brokerSplit if brokerSplit is not None else settings.broker_split
    try:
        breakdown = calculate_commission(price, rate, split)
    except CommissionInputError as exc:
        typer.echo(f"ERROR: {exc.field}: {exc.message}", err=True)
        raise typer.Exit(code=2)

    formatted = breakdown.formatted()
    typer.echo(f"price={formatted['price_formatted']} rate={formatted['commission_rate_formatted']} split={formatted['broker_split_formatted']}")
    typer.echo(f"gross_commission={formatted['gross_commission_formatted']}")
    typer.echo(f"broker_commission={formatted['broker_commission_formatted']}")
    typer.echo(f"net_commission={formatted['net_commission_formatted']}")
