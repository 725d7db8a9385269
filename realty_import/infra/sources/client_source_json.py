from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from realty_import.domain.exceptions import SourceFormatError
from realty_import.domain.models import Client

LIST_KEYS: tuple[str, ...] = ("clients", "items", "data", "transactions")


def readJsonList(path: str | Path) -> list[Any]:
    """
    Назначение:
        Читает JSON-файл со списком объектов: сам список или объект с ключом
        clients/items/data/transactions.
    """
    try:
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
    except UnicodeDecodeError as exc:
        raise SourceFormatError(f"File {path} is not valid UTF-8: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise SourceFormatError(f"Invalid JSON in {path}: {exc}") from exc
    if isinstance(raw, list):
        return raw
    if isinstance(raw, dict):
        for key in LIST_KEYS:
            value = raw.get(key)
            if isinstance(value, list):
                return value
    raise SourceFormatError(f"Unsupported JSON structure in {path}")


def toStrOrNone(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, str):
        trimmed = value.strip()
        return trimmed or None
    return str(value)


def parseClient(item: Any) -> Client:
    if not isinstance(item, dict):
        raise SourceFormatError("Client item must be an object")
    client_id = toStrOrNone(item.get("id"))
    if client_id is None:
        raise SourceFormatError("Client must contain id")
    return Client(
        id=client_id,
        name=toStrOrNone(item.get("name")) or "",
        email=toStrOrNone(item.get("email")),
        phone=toStrOrNone(item.get("phone")),
        type=toStrOrNone(item.get("type")),
    )


def loadClientsFromJson(path: str | Path) -> list[Client]:
    """
    Назначение:
        Загружает известных клиентов CRM в исходном порядке (порядок важен для поиска).
    """
    return [parseClient(item) for item in readJsonList(path)]
