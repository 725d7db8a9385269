from __future__ import annotations

import csv
import io
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Iterable

from realty_import.domain.commission import format_currency, format_percent
from realty_import.domain.models import Client, TransactionStatus

BASE_HEADERS: tuple[str, ...] = (
    "Address",
    "Status",
    "Price",
    "Commission Rate",
    "Gross Commission",
    "Net Commission",
    "Broker Commission",
    "Closing Date",
    "Created Date",
)
CLIENT_HEADERS: tuple[str, ...] = ("Client Name", "Client Email", "Client Phone", "Client Type")
TOTALS_LABEL = "TOTALS"


@dataclass(frozen=True)
class StoredTransaction:
    """
    Назначение:
        Сохранённая сделка CRM (с клиентом) как источник экспорта.
    """

    address: str
    status: str
    price: float
    commission_rate: float
    net_commission: float | None = None
    broker_commission: float | None = None
    closing_date: str | None = None
    created_at: str | None = None
    client: Client | None = None

    @property
    def gross_commission(self) -> float:
        return self.price * (self.commission_rate / 100)

    @property
    def created_date(self) -> date | None:
        return parse_created_date(self.created_at)


def parse_created_date(value: str | None) -> date | None:
    if not value:
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        return None


def _default_from() -> date:
    return date(date.today().year, 1, 1)


@dataclass(frozen=True)
class ExportOptions:
    """
    Назначение:
        Параметры экспорта: период по created_at (включительно), статусы и состав колонок.
    """

    date_from: date = field(default_factory=_default_from)
    date_to: date = field(default_factory=date.today)
    statuses: tuple[str, ...] = tuple(s.value for s in TransactionStatus)
    include_client_info: bool = True
    include_commission_breakdown: bool = True

    @property
    def filename(self) -> str:
        return f"transactions_{self.date_from.isoformat()}_to_{self.date_to.isoformat()}.csv"


def filter_transactions(transactions: Iterable[StoredTransaction], options: ExportOptions) -> list[StoredTransaction]:
    result: list[StoredTransaction] = []
    for transaction in transactions:
        created = transaction.created_date
        if created is None:
            continue
        if options.date_from <= created <= options.date_to and transaction.status in options.statuses:
            result.append(transaction)
    return result


def build_headers(options: ExportOptions) -> list[str]:
    headers = list(BASE_HEADERS)
    if options.include_client_info:
        headers[1:1] = CLIENT_HEADERS
    return headers


def build_row(transaction: StoredTransaction, options: ExportOptions) -> list[str]:
    created = transaction.created_date
    row = [
        transaction.address,
        transaction.status,
        format_currency(transaction.price),
        format_percent(transaction.commission_rate),
        format_currency(transaction.gross_commission),
        format_currency(transaction.net_commission),
        format_currency(transaction.broker_commission),
        transaction.closing_date or "",
        created.isoformat() if created else "",
    ]
    if options.include_client_info:
        client = transaction.client
        row[1:1] = [
            (client.name if client else "") or "",
            (client.email if client else "") or "",
            (client.phone if client else "") or "",
            (client.type if client else "") or "",
        ]
    return row


def build_totals_row(transactions: list[StoredTransaction], options: ExportOptions) -> list[str]:
    total_price = sum(t.price for t in transactions)
    total_gross = sum(t.gross_commission for t in transactions)
    total_net = sum(t.net_commission or 0 for t in transactions)
    total_broker = sum(t.broker_commission or 0 for t in transactions)
    row = [TOTALS_LABEL, "", format_currency(total_price)]
    if options.include_client_info:
        row[1:1] = ["", "", "", ""]
    row.extend(
        [
            "",
            format_currency(total_gross),
            format_currency(total_net),
            format_currency(total_broker),
            "",
            "",
        ]
    )
    return row


def generate_csv_content(transactions: Iterable[StoredTransaction], options: ExportOptions) -> str:
    """
    Назначение:
        Формирует CSV экспорта сделок.

    Алгоритм:
        - Фильтр по периоду created_at и статусам.
        - Gross commission всегда пересчитывается как price * rate / 100.
        - С разбивкой комиссий: пустая строка и строка TOTALS в конце.
        - Кавычки по правилам csv.QUOTE_MINIMAL, каждая строка завершается переводом строки.
    """
    filtered = filter_transactions(transactions, options)
    headers = build_headers(options)
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(headers)
    writer.writerows(build_row(t, options) for t in filtered)
    if options.include_commission_breakdown:
        writer.writerow([""] * len(headers))
        writer.writerow(build_totals_row(filtered, options))
    return buffer.getvalue()
