import pytest

from realty_import.domain.error_codes import ErrorCode
from realty_import.domain.models import TransactionStatus
from realty_import.domain.transform.extractor import RawTransaction
from realty_import.domain.validation.row_rules import (
    RowNormalizer,
    normalize_status,
    parse_currency,
    parse_number,
    parse_percent,
)


def _raw(**overrides) -> RawTransaction:
    values = {
        "address": "123 Main St",
        "client_name": "John Doe",
        "source": "referral",
        "side": "seller",
        "price": "$100000",
        "commission_rate": "3.0%",
        "gross_commission": "",
        "net_commission": "",
        "broker_commission": "",
        "closing_date": "",
        "status": "",
    }
    values.update(overrides)
    return RawTransaction(**values)


@pytest.mark.parametrize("value", ["$100,000.00", "100000", "100,000", "$100000"])
def test_parse_currency_variants(value):
    assert parse_currency(value) == 100000


@pytest.mark.parametrize("value", ["3.0%", "3.0"])
def test_parse_percent_variants(value):
    assert parse_percent(value) == 3.0


@pytest.mark.parametrize("value", ["", "abc", "12abc", "inf", "nan", "1_000", "\u0661\u0662\u0663", "1e999"])
def test_parse_number_rejects_malformed(value):
    with pytest.raises(ValueError):
        parse_number(value)


@pytest.mark.parametrize("value,expected", [("1000", 1000.0), ("-2.5", -2.5), (".5", 0.5), ("1e3", 1000.0)])
def test_parse_number_accepts_plain_decimal(value, expected):
    assert parse_number(value) == expected


def test_underscored_price_is_an_error():
    row = RowNormalizer().normalize(_raw(price="1_000"))
    assert [(e.field, e.message) for e in row.errors] == [("price", "Invalid price format")]


def test_normalize_status():
    assert normalize_status("") == TransactionStatus.ACTIVE
    assert normalize_status("Pending - inspection") == TransactionStatus.PENDING
    assert normalize_status("SOLD") == TransactionStatus.CLOSED
    assert normalize_status("whatever") == TransactionStatus.ACTIVE


def test_valid_row_normalizes_values():
    row = RowNormalizer().normalize(_raw(side="buyer", gross_commission="$3,000"))

    assert row.valid
    assert row.values["price"] == 100000
    assert row.values["commission_rate"] == 3.0
    assert row.values["side"] == "buyer"
    assert row.values["gross_commission"] == 3000
    assert row.values["net_commission"] is None
    assert row.values["status"] == TransactionStatus.ACTIVE


@pytest.mark.parametrize("value", ["Buyer", "SELLER", "Both"])
def test_side_is_case_sensitive(value):
    row = RowNormalizer().normalize(_raw(side=value))

    assert [(e.field, e.code, e.value) for e in row.errors] == [("side", ErrorCode.INVALID_SIDE, value)]
    assert row.values["side"] is None


def test_each_failing_field_gets_one_error():
    row = RowNormalizer().normalize(_raw(price="abc", commission_rate="x%", side="landlord"))

    assert not row.valid
    assert [(e.field, e.code) for e in row.errors] == [
        ("side", ErrorCode.INVALID_SIDE),
        ("price", ErrorCode.INVALID_PRICE),
        ("commission_rate", ErrorCode.INVALID_COMMISSION_RATE),
    ]
    assert row.errors[1].message == "Invalid price format"
    assert row.errors[1].value == "abc"


def test_negative_price_is_rejected():
    row = RowNormalizer().normalize(_raw(price="-5"))
    assert [e.message for e in row.errors] == ["Price must be positive"]


def test_missing_client_name_is_an_error():
    row = RowNormalizer().normalize(_raw(client_name=""))
    assert [(e.field, e.code) for e in row.errors] == [("client_name", ErrorCode.REQUIRED_FIELD_MISSING)]


def test_unparseable_commission_amount_is_a_warning():
    row = RowNormalizer().normalize(_raw(net_commission="n/a"))

    assert row.valid
    assert row.values["net_commission"] is None
    assert [(w.field, w.code) for w in row.warnings] == [("net_commission", ErrorCode.INVALID_COMMISSION_AMOUNT)]
