from __future__ import annotations

from dataclasses import dataclass

from realty_import.domain.transform.extractor import RawTransaction
from realty_import.domain.transform.source_record import SourceRecord

DEFAULT_SKIP_MARKERS: tuple[str, ...] = ("total", "pending:", "sold:")
EMPTY_PRICES: tuple[str, ...] = ("", "0", "$0.00")


@dataclass(frozen=True)
class SkipRules:
    """
    Назначение:
        Эвристики молчаливого пропуска строк (итоги, подвалы выгрузок, заготовки).

    Контракт:
        - skip_reason(record) -> причина или None (до извлечения полей).
        - incomplete_reason(raw) -> причина или None (после извлечения полей).
        Пропущенная строка не считается ни импортированной, ни ошибочной.
    """

    markers: tuple[str, ...] = DEFAULT_SKIP_MARKERS

    def skip_reason(self, record: SourceRecord) -> str | None:
        if record.is_blank:
            return "blank"
        first = record.cell(0).lower()
        for marker in self.markers:
            if marker and marker in first:
                return f"marker:{marker}"
        return None

    def incomplete_reason(self, raw: RawTransaction) -> str | None:
        if not raw.address:
            return "no_address"
        if raw.price in EMPTY_PRICES:
            return "no_price"
        return None
