from realty_import.domain.transform.extractor import RawTransaction
from realty_import.domain.transform.source_record import SourceRecord
from realty_import.domain.validation.skip_rules import SkipRules


def _record(*values: str) -> SourceRecord:
    return SourceRecord(line_no=5, record_id="line:5", values=tuple(values))


def _raw(address: str, price: str) -> RawTransaction:
    return RawTransaction(
        address=address,
        client_name="John",
        source="",
        side="",
        price=price,
        commission_rate="0",
        gross_commission="",
        net_commission="",
        broker_commission="",
        closing_date="",
        status="",
    )


def test_blank_row_is_skipped():
    assert SkipRules().skip_reason(_record("", " ", "")) == "blank"


def test_footer_markers_are_skipped():
    rules = SkipRules()
    assert rules.skip_reason(_record("TOTAL: $50,000", "")) == "marker:total"
    assert rules.skip_reason(_record("Pending: 3", "")) == "marker:pending:"
    assert rules.skip_reason(_record("SOLD: 10", "")) == "marker:sold:"
    assert rules.skip_reason(_record("Totals:", "")) == "marker:total"


def test_regular_row_is_not_skipped():
    assert SkipRules().skip_reason(_record("123 Main St", "John")) is None


def test_custom_markers_replace_defaults():
    rules = SkipRules(markers=("subtotal",))
    assert rules.skip_reason(_record("TOTAL", "")) is None
    assert rules.skip_reason(_record("Subtotal Q1", "")) == "marker:subtotal"


def test_incomplete_rows():
    rules = SkipRules()
    assert rules.incomplete_reason(_raw("", "$100")) == "no_address"
    assert rules.incomplete_reason(_raw("1 Main", "0")) == "no_price"
    assert rules.incomplete_reason(_raw("1 Main", "$0.00")) == "no_price"
    assert rules.incomplete_reason(_raw("1 Main", "$100")) is None
