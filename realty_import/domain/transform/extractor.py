from __future__ import annotations

from dataclasses import asdict, dataclass

from realty_import.domain.transform.column_map import ColumnMap
from realty_import.domain.transform.source_record import SourceRecord


@dataclass(frozen=True)
class RawTransaction:
    """
    Назначение:
        Сырые строковые значения полей строки после применения ColumnMap.
    """

    address: str
    client_name: str
    source: str
    side: str
    price: str
    commission_rate: str
    gross_commission: str
    net_commission: str
    broker_commission: str
    closing_date: str
    status: str

    def get(self, field: str) -> str:
        return getattr(self, field, "")

    def as_dict(self) -> dict[str, str]:
        return asdict(self)


class Extractor:
    """
    Назначение/ответственность:
        Извлекает значения полей из SourceRecord по ColumnMap.
        Отсутствующая колонка или пустая ячейка -> "" (price и commission_rate -> "0").
    """

    def __init__(self, column_map: ColumnMap) -> None:
        self.column_map = column_map

    def extract(self, record: SourceRecord) -> RawTransaction:
        value = self.column_map.value
        return RawTransaction(
            address=value(record, "address"),
            client_name=value(record, "client_name"),
            source=value(record, "source"),
            side=value(record, "side"),
            price=value(record, "price") or "0",
            commission_rate=value(record, "commission_rate") or "0",
            gross_commission=value(record, "gross_commission"),
            net_commission=value(record, "net_commission"),
            broker_commission=value(record, "broker_commission"),
            closing_date=value(record, "closing_date"),
            status=value(record, "status"),
        )
