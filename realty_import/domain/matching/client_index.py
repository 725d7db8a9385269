from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from realty_import.domain.models import Client


def normalize_name(value: str | None) -> str:
    if value is None:
        return ""
    return value.lower().strip()


@dataclass(frozen=True)
class IndexedClient:
    key: str
    client: Client


class ClientIndex:
    """
    Назначение/ответственность:
        Поиск клиента по свободному тексту имени. Строится один раз на запуск импорта.

    Алгоритм:
        - Имя нормализуется: нижний регистр + trim.
        - Совпадение: имя клиента содержит искомое или искомое содержит имя клиента.
        - Побеждает первый клиент в исходном порядке списка.
        - Результаты поиска кэшируются по нормализованному имени в пределах индекса.

    Ограничения:
        - Клиенты с пустым именем не индексируются (пустая строка совпала бы с любым именем).
    """

    def __init__(self, clients: Iterable[Client]) -> None:
        self._entries: tuple[IndexedClient, ...] = tuple(
            IndexedClient(key=normalize_name(client.name), client=client)
            for client in clients
            if normalize_name(client.name)
        )
        self._lookups: dict[str, Client | None] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def find(self, name: str | None) -> Client | None:
        search = normalize_name(name)
        if not search:
            return None
        if search in self._lookups:
            return self._lookups[search]
        found: Client | None = None
        for entry in self._entries:
            if search in entry.key or entry.key in search:
                found = entry.client
                break
        self._lookups[search] = found
        return found

    def find_id(self, name: str | None) -> str | None:
        client = self.find(name)
        return client.id if client else None

    def candidates(self, name: str | None) -> list[Client]:
        """
        Назначение:
            Все клиенты, подходящие под имя (для диагностики неоднозначных совпадений).
        """
        search = normalize_name(name)
        if not search:
            return []
        return [e.client for e in self._entries if search in e.key or e.key in search]
