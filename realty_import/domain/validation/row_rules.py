from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Any, Callable, Optional

from realty_import.domain.error_codes import ErrorCode
from realty_import.domain.models import SIDES, DiagnosticStage, TransactionStatus, ValidationErrorItem
from realty_import.domain.transform.extractor import RawTransaction

FieldParser = Callable[[str, list[ValidationErrorItem], list[ValidationErrorItem]], Any]

# только ASCII-цифры: float() сам по себе принимает "1_000" и цифры других алфавитов
NUMBER_RE = re.compile(r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")


def parse_number(value: str) -> float:
    """
    Назначение:
        Строгий разбор десятичного числа с плавающей точкой.

    Ошибки:
        ValueError для пустых, нечисловых и бесконечных/NaN значений.
    """
    text = value.strip()
    if text == "":
        raise ValueError("Empty numeric value")
    if not NUMBER_RE.fullmatch(text):
        raise ValueError(f"Invalid numeric value: {value}")
    parsed = float(text)
    if not math.isfinite(parsed):
        raise ValueError(f"Non-finite numeric value: {value}")
    return parsed


def parse_currency(value: str) -> float:
    """
    Назначение:
        "$100,000.00" -> 100000.0. Удаляет '$' и разделители тысяч, без округления.
    """
    return parse_number(value.replace("$", "").replace(",", ""))


def parse_percent(value: str) -> float:
    """
    Назначение:
        "3.0%" и "3.0" -> 3.0.
    """
    return parse_number(value.replace("%", ""))


def normalize_status(value: str | None) -> TransactionStatus:
    """
    Назначение:
        Приводит свободный текст статуса к TransactionStatus.

    Алгоритм:
        - пусто -> Active
        - содержит "active" -> Active, "pending" -> Pending
        - содержит "closed" или "sold" -> Closed
        - иначе Active
    """
    if not value:
        return TransactionStatus.ACTIVE
    normalized = value.lower()
    if "active" in normalized:
        return TransactionStatus.ACTIVE
    if "pending" in normalized:
        return TransactionStatus.PENDING
    if "closed" in normalized or "sold" in normalized:
        return TransactionStatus.CLOSED
    return TransactionStatus.ACTIVE


def _error(code: ErrorCode, field: str, message: str, value: str) -> ValidationErrorItem:
    return ValidationErrorItem(stage=DiagnosticStage.VALIDATE, code=code, field=field, message=message, value=value)


def _price_parser(value: str, errors: list[ValidationErrorItem], _: list[ValidationErrorItem]) -> float | None:
    try:
        parsed = parse_currency(value)
    except ValueError:
        errors.append(_error(ErrorCode.INVALID_PRICE, "price", "Invalid price format", value))
        return None
    if parsed <= 0:
        errors.append(_error(ErrorCode.INVALID_PRICE, "price", "Price must be positive", value))
        return None
    return parsed


def _commission_rate_parser(value: str, errors: list[ValidationErrorItem], _: list[ValidationErrorItem]) -> float | None:
    try:
        return parse_percent(value)
    except ValueError:
        errors.append(
            _error(ErrorCode.INVALID_COMMISSION_RATE, "commission_rate", "Invalid commission rate format", value)
        )
        return None


def _optional_amount_parser(field: str) -> FieldParser:
    def _inner(value: str, _: list[ValidationErrorItem], warnings: list[ValidationErrorItem]) -> float | None:
        try:
            return parse_currency(value)
        except ValueError:
            # сумма необязательна: строка импортируется, поле обнуляется
            warnings.append(
                _error(ErrorCode.INVALID_COMMISSION_AMOUNT, field, f"{field} is not a number, ignored", value)
            )
            return None

    return _inner


def _side_parser(value: str, errors: list[ValidationErrorItem], _: list[ValidationErrorItem]) -> str | None:
    if value not in SIDES:
        errors.append(_error(ErrorCode.INVALID_SIDE, "side", f"Side must be one of: {', '.join(SIDES)}", value))
        return None
    return value


def _status_parser(value: str, _errors: list[ValidationErrorItem], _warnings: list[ValidationErrorItem]) -> TransactionStatus:
    return normalize_status(value)


@dataclass(frozen=True)
class FieldRule:
    """
    Назначение:
        Правило одного поля: берёт сырое значение, парсит, пишет диагностику.

    Контракт:
        - apply(raw, errors, warnings) -> parsed_value | None
        - Одна ошибка на поле; пустое значение необязательного поля -> empty.
    """

    name: str
    required: bool = False
    required_message: str | None = None
    parser: Optional[FieldParser] = None
    empty: Any = None

    def apply(self, raw: RawTransaction, errors: list[ValidationErrorItem], warnings: list[ValidationErrorItem]) -> Any:
        value = raw.get(self.name).strip()
        if value == "":
            if self.required:
                errors.append(
                    _error(
                        ErrorCode.REQUIRED_FIELD_MISSING,
                        self.name,
                        self.required_message or f"{self.name} is required",
                        value,
                    )
                )
            return self.empty
        if self.parser is None:
            return value
        return self.parser(value, errors, warnings)


TRANSACTION_RULES: tuple[FieldRule, ...] = (
    FieldRule("address", required=True, required_message="Address is required"),
    FieldRule("client_name", required=True, required_message="Client name is required"),
    FieldRule("source"),
    FieldRule("side", parser=_side_parser),
    FieldRule("price", required=True, required_message="Price is required", parser=_price_parser),
    FieldRule("commission_rate", parser=_commission_rate_parser, empty=0.0),
    FieldRule("gross_commission", parser=_optional_amount_parser("gross_commission")),
    FieldRule("net_commission", parser=_optional_amount_parser("net_commission")),
    FieldRule("broker_commission", parser=_optional_amount_parser("broker_commission")),
    FieldRule("closing_date"),
    FieldRule("status", parser=_status_parser, empty=TransactionStatus.ACTIVE),
)


@dataclass
class NormalizedRow:
    """
    Назначение:
        Результат применения правил к строке: значения и диагностика.
    """

    values: dict[str, Any]
    errors: list[ValidationErrorItem]
    warnings: list[ValidationErrorItem]

    @property
    def valid(self) -> bool:
        return not self.errors


class RowNormalizer:
    """
    Назначение/ответственность:
        Применяет все FieldRule к строке. Ошибки полей не прерывают проверку
        остальных полей, поэтому одна строка может дать несколько ошибок.
    """

    def __init__(self, rules: tuple[FieldRule, ...] = TRANSACTION_RULES) -> None:
        self.rules = rules

    def normalize(self, raw: RawTransaction) -> NormalizedRow:
        errors: list[ValidationErrorItem] = []
        warnings: list[ValidationErrorItem] = []
        values: dict[str, Any] = {}
        for rule in self.rules:
            values[rule.name] = rule.apply(raw, errors, warnings)
        return NormalizedRow(values=values, errors=errors, warnings=warnings)
