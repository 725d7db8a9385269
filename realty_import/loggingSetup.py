from __future__ import annotations

import logging
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, TextIO

LOG_FORMAT = "%(asctime)s %(levelname)s runId=%(runId)s comp=%(component)s msg=%(message)s"
LOG_DATEFMT = "%Y-%m-%dT%H:%M:%S%z"
LOGGER_PREFIX = "realtyImport"

LEVELS = {
    "ERROR": logging.ERROR,
    "WARN": logging.WARNING,
    "WARNING": logging.WARNING,
    "INFO": logging.INFO,
    "DEBUG": logging.DEBUG,
}


class RunContextFilter(logging.Filter):
    """
    Назначение:
        Подставляет runId и component в LogRecord, если их не передали через extra.
    """

    def __init__(self, runId: str, defaultComponent: str = "core"):
        super().__init__()
        self.runId = runId
        self.defaultComponent = defaultComponent

    def filter(self, record: logging.LogRecord) -> bool:
        record.runId = getattr(record, "runId", self.runId)
        record.component = getattr(record, "component", self.defaultComponent)
        return True


class MirroredStream:
    """
    Назначение:
        Замена sys.stdout/sys.stderr на время команды: текст уходит в исходный
        stream без изменений и построчно (непустые строки) в логгер.
    """

    def __init__(self, target: TextIO, logger: logging.Logger, level: int, runId: str, component: str):
        self.target = target
        self.logger = logger
        self.level = level
        self.extra = {"runId": runId, "component": component}
        self.pending = ""

    def write(self, s: str) -> int:
        written = self.target.write(s)
        self.pending += s
        *lines, self.pending = self.pending.split("\n")
        for line in lines:
            self._emit(line)
        return written

    def flush(self) -> None:
        self.target.flush()
        self._emit(self.pending)
        self.pending = ""

    def _emit(self, line: str) -> None:
        if line.strip():
            self.logger.log(self.level, line.rstrip(), extra=self.extra)


@contextmanager
def mirrorStdStreams(logger: logging.Logger, runId: str) -> Iterator[None]:
    """
    Назначение:
        Дублирует консольный вывод команды в её лог (stdout -> INFO, stderr -> ERROR).
        Исходные потоки восстанавливаются при любом выходе из блока.
    """
    originalStdout, originalStderr = sys.stdout, sys.stderr
    sys.stdout = MirroredStream(originalStdout, logger, logging.INFO, runId, "stdout")
    sys.stderr = MirroredStream(originalStderr, logger, logging.ERROR, runId, "stderr")
    try:
        yield
    finally:
        sys.stdout.flush()
        sys.stderr.flush()
        sys.stdout, sys.stderr = originalStdout, originalStderr


def mapLogLevel(levelName: str) -> int:
    value = (levelName or "").strip().upper()
    if value not in LEVELS:
        raise ValueError(f"Unsupported log level: {levelName}")
    return LEVELS[value]


def createCommandLogger(commandName: str, logDir: str, runId: str, logLevel: str) -> tuple[logging.Logger, str]:
    """
    Назначение:
        Логгер команды с отдельным файлом <command>_<runId>.log.

    Выходные данные:
        (logger, logFilePath)
    """
    level = mapLogLevel(logLevel)
    logPath = Path(logDir) / f"{commandName}_{runId}.log"
    logPath.parent.mkdir(parents=True, exist_ok=True)

    logger = logging.getLogger(f"{LOGGER_PREFIX}.{commandName}.{runId}")
    closeCommandLogger(logger)
    logger.propagate = False
    logger.setLevel(level)

    handler = logging.FileHandler(logPath, encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATEFMT))
    handler.addFilter(RunContextFilter(runId=runId))
    logger.addHandler(handler)

    return logger, str(logPath)


def closeCommandLogger(logger: logging.Logger) -> None:
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)


def logEvent(logger: logging.Logger, level: int, runId: str, component: str, message: str) -> None:
    logger.log(level, message, extra={"runId": runId, "component": component})
