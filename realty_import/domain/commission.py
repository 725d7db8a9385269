from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from realty_import.domain.exceptions import CommissionInputError

DEFAULT_BROKER_SPLIT = 20.0


def format_number(value: float) -> str:
    """
    Назначение:
        Число без хвостового ".0": 3.0 -> "3", 2.5 -> "2.5".
    """
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


def format_currency(amount: float | None) -> str:
    """
    Назначение:
        Формат USD en-US: 1234.5 -> "$1,234.50", -3 -> "-$3.00", None -> "".
    """
    if amount is None:
        return ""
    sign = "-" if amount < 0 else ""
    return f"{sign}${abs(amount):,.2f}"


def format_percent(rate: float) -> str:
    return f"{format_number(rate)}%"


@dataclass(frozen=True)
class CommissionBreakdown:
    """
    Назначение:
        Разбивка комиссии по сделке.

    Инварианты:
        - gross_commission = broker_commission + net_commission.
    """

    price: float
    commission_rate: float
    broker_split: float
    gross_commission: float
    broker_commission: float
    net_commission: float

    def formatted(self) -> dict[str, str]:
        return {
            "price_formatted": format_currency(self.price),
            "gross_commission_formatted": format_currency(self.gross_commission),
            "broker_commission_formatted": format_currency(self.broker_commission),
            "net_commission_formatted": format_currency(self.net_commission),
            "commission_rate_formatted": format_percent(self.commission_rate),
            "broker_split_formatted": format_percent(self.broker_split),
        }

    def to_dict(self) -> dict[str, Any]:
        return {
            "price": self.price,
            "commission_rate": self.commission_rate,
            "broker_split": self.broker_split,
            "gross_commission": self.gross_commission,
            "broker_commission": self.broker_commission,
            "net_commission": self.net_commission,
            "breakdown": self.formatted(),
        }


def _check_percent(field: str, label: str, value: float) -> None:
    if value < 0:
        raise CommissionInputError(field, f"{label} cannot be negative")
    if value > 100:
        raise CommissionInputError(field, f"{label} cannot exceed 100%")


def calculate_commission(
    price: float,
    commission_rate: float,
    broker_split: float = DEFAULT_BROKER_SPLIT,
) -> CommissionBreakdown:
    """
    Назначение:
        Считает gross/broker/net комиссию.

    Алгоритм:
        gross = price * rate / 100
        broker = gross * split / 100
        net = gross - broker

    Ошибки:
        CommissionInputError: price <= 0, rate или split вне [0, 100].
    """
    if price <= 0:
        raise CommissionInputError("price", "Price must be positive")
    _check_percent("commission_rate", "Commission rate", commission_rate)
    _check_percent("broker_split", "Broker split", broker_split)

    gross = (price * commission_rate) / 100
    broker = (gross * broker_split) / 100
    return CommissionBreakdown(
        price=price,
        commission_rate=commission_rate,
        broker_split=broker_split,
        gross_commission=gross,
        broker_commission=broker,
        net_commission=gross - broker,
    )
