from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class SourceRecord:
    """
    Назначение:
        Одна строка CSV: упорядоченные обрезанные ячейки и номер физической строки файла.
    """

    line_no: int
    record_id: str
    values: tuple[str, ...]

    def cell(self, index: int) -> str:
        if index < 0 or index >= len(self.values):
            return ""
        return self.values[index]

    @property
    def is_blank(self) -> bool:
        return all(not value.strip() for value in self.values)
