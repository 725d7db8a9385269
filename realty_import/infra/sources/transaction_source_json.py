from __future__ import annotations

from pathlib import Path
from typing import Any

from realty_import.domain.exceptions import SourceFormatError
from realty_import.domain.export import StoredTransaction
from realty_import.infra.sources.client_source_json import parseClient, readJsonList, toStrOrNone


def _to_float(item: dict[str, Any], key: str, required: bool = False) -> float | None:
    value = item.get(key)
    if value is None or value == "":
        if required:
            raise SourceFormatError(f"Transaction must contain {key}")
        return None
    if isinstance(value, bool):
        raise SourceFormatError(f"{key} must be a number")
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise SourceFormatError(f"{key} must be a number, got {value!r}") from exc


def parseStoredTransaction(item: Any) -> StoredTransaction:
    if not isinstance(item, dict):
        raise SourceFormatError("Transaction item must be an object")
    address = toStrOrNone(item.get("address"))
    if address is None:
        raise SourceFormatError("Transaction must contain address")
    client = item.get("client")
    return StoredTransaction(
        address=address,
        status=toStrOrNone(item.get("status")) or "Active",
        price=_to_float(item, "price", required=True) or 0.0,
        commission_rate=_to_float(item, "commission_rate") or 0.0,
        net_commission=_to_float(item, "net_commission"),
        broker_commission=_to_float(item, "broker_commission"),
        closing_date=toStrOrNone(item.get("closing_date")),
        created_at=toStrOrNone(item.get("created_at")),
        client=parseClient(client) if isinstance(client, dict) else None,
    )


def loadTransactionsFromJson(path: str | Path) -> list[StoredTransaction]:
    """
    Назначение:
        Загружает сделки (с вложенным client) для экспорта.
    """
    return [parseStoredTransaction(item) for item in readJsonList(path)]
