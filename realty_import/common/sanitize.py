from __future__ import annotations

from typing import Iterable

ROW_PREVIEW_LIMIT = 500


def formatRowValues(values: Iterable[str], limit: int = ROW_PREVIEW_LIMIT) -> str:
    """
    Назначение:
        Превью строки CSV для ошибки "general": ячейки через ", ", не длиннее limit.
    """
    text = ", ".join(values)
    if len(text) <= limit:
        return text
    return text[: max(limit - 3, 0)] + "..."


def describeErrors(messages: list[str], limit: int) -> tuple[list[str], int]:
    """
    Выходные данные:
        (первые limit строк для консоли, сколько строк не показано)
    """
    if limit <= 0 or len(messages) <= limit:
        return messages, 0
    return messages[:limit], len(messages) - limit
