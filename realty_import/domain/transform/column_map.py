from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterable, Mapping

from realty_import.domain.error_codes import ErrorCode
from realty_import.domain.exceptions import ImportAbortedError
from realty_import.domain.models import DiagnosticStage, ImportErrorItem
from realty_import.domain.transform.source_record import SourceRecord

ABSENT = -1

HeaderPredicate = Callable[[str], bool]


@dataclass(frozen=True)
class HeaderRule:
    """
    Назначение:
        Правило распознавания колонки по тексту заголовка (в нижнем регистре).
    """

    field: str
    predicate: HeaderPredicate

    def find(self, headers: list[str]) -> int:
        for index, header in enumerate(headers):
            if self.predicate(header):
                return index
        return ABSENT


HEADER_RULES: tuple[HeaderRule, ...] = (
    HeaderRule("address", lambda h: "address" in h),
    HeaderRule("client_name", lambda h: "name" in h),
    HeaderRule("source", lambda h: "source" in h),
    HeaderRule("side", lambda h: h == "s" or "side" in h),
    HeaderRule("price", lambda h: "price" in h),
    HeaderRule("commission_rate", lambda h: "comm" in h and "%" in h),
    HeaderRule("gross_commission", lambda h: "gross" in h and "comm" in h),
    HeaderRule("net_commission", lambda h: "net" in h and "comm" in h),
    HeaderRule("broker_commission", lambda h: "broker" in h),
    HeaderRule("closing_date", lambda h: "closing" in h or "date" in h),
    HeaderRule("status", lambda h: "status" in h),
)

FIELDS: tuple[str, ...] = tuple(rule.field for rule in HEADER_RULES)


@dataclass(frozen=True)
class ColumnMap:
    """
    Назначение:
        Сопоставление логического поля сделки и индекса колонки CSV.

    Инварианты:
        - Для каждого поля из FIELDS есть индекс; ABSENT (-1), если заголовок не найден.
    """

    indexes: Mapping[str, int]

    def index_of(self, field: str) -> int:
        return self.indexes.get(field, ABSENT)

    def has(self, field: str) -> bool:
        return self.index_of(field) != ABSENT

    def value(self, record: SourceRecord, field: str) -> str:
        index = self.index_of(field)
        if index == ABSENT:
            return ""
        return record.cell(index)

    def missing_fields(self) -> list[str]:
        return [name for name in FIELDS if not self.has(name)]


@dataclass(frozen=True)
class HeaderDetection:
    header: SourceRecord
    header_index: int
    data_start: int
    column_map: ColumnMap


def build_column_map(header_cells: Iterable[str], rules: tuple[HeaderRule, ...] = HEADER_RULES) -> ColumnMap:
    headers = [cell.lower().strip() for cell in header_cells]
    return ColumnMap(indexes={rule.field: rule.find(headers) for rule in rules})


def is_header_row(record: SourceRecord) -> bool:
    return any("address" in cell.lower() for cell in record.values)


def detect_header(rows: list[SourceRecord]) -> HeaderDetection:
    """
    Назначение:
        Находит строку заголовка и строит ColumnMap.

    Алгоритм:
        - Заголовок: первая строка, где хотя бы одна ячейка содержит "address".
        - Данные начинаются со следующей строки.

    Ошибки:
        - ImportAbortedError(field="headers"), если заголовок не найден.
    """
    for index, record in enumerate(rows):
        if is_header_row(record):
            return HeaderDetection(
                header=record,
                header_index=index,
                data_start=index + 1,
                column_map=build_column_map(record.values),
            )
    raise ImportAbortedError(
        ImportErrorItem(
            row=0,
            field="headers",
            message="Could not find header row with ADDRESS column",
            value="",
            code=ErrorCode.HEADERS_NOT_FOUND,
            stage=DiagnosticStage.FILE,
        )
    )
