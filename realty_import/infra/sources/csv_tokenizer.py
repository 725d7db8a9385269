from __future__ import annotations

import re
from pathlib import Path
from typing import Iterator

from realty_import.domain.transform.source_record import SourceRecord

LINE_SPLIT_RE = re.compile(r"\r\n|\r|\n")


def split_line(line: str) -> list[str]:
    """
    Назначение:
        Разбивает одну строку CSV на ячейки.

    Алгоритм:
        - Посимвольный проход с флагом in_quotes, который переключается на каждой '"'.
        - Запятая разделяет ячейки только вне кавычек.
        - Кавычки в значение не попадают, каждая ячейка тримится.

    Ограничения:
        - Экранирование "" внутри кавычек не поддерживается: это закрытие и повторное
          открытие кавычек, а не литерал.
    """
    cells: list[str] = []
    current: list[str] = []
    in_quotes = False
    for char in line:
        if char == '"':
            in_quotes = not in_quotes
        elif char == "," and not in_quotes:
            cells.append("".join(current).strip())
            current = []
        else:
            current.append(char)
    cells.append("".join(current).strip())
    return cells


def tokenize(text: str) -> Iterator[SourceRecord]:
    """
    Назначение:
        Превращает текст файла в последовательность SourceRecord.
        Пустые (после trim) строки пропускаются, номер строки остаётся физическим.
    """
    for line_no, line in enumerate(LINE_SPLIT_RE.split(text), start=1):
        if line.strip() == "":
            continue
        yield SourceRecord(
            line_no=line_no,
            record_id=f"line:{line_no}",
            values=tuple(split_line(line)),
        )


class CsvTextSource:
    """
    Назначение/ответственность:
        Источник строк поверх уже прочитанного текста.
        Каждая итерация заново разбирает текст, состояния между проходами нет.
    """

    def __init__(self, text: str) -> None:
        self.text = text

    def __iter__(self) -> Iterator[SourceRecord]:
        return tokenize(self.text)


def readCsvText(path: str | Path, encoding: str = "utf-8-sig") -> str:
    """
    Назначение:
        Читает файл целиком в память (единственная точка ввода-вывода импорта).
    """
    with open(path, "r", encoding=encoding, newline="") as f:
        return f.read()
