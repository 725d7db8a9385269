import pytest

from realty_import.domain.error_codes import ErrorCode
from realty_import.domain.exceptions import ImportAbortedError
from realty_import.domain.transform.column_map import ABSENT, build_column_map, detect_header
from realty_import.domain.transform.extractor import Extractor
from realty_import.domain.transform.source_record import SourceRecord


def _record(line_no: int, *values: str) -> SourceRecord:
    return SourceRecord(line_no=line_no, record_id=f"line:{line_no}", values=tuple(values))


def test_build_column_map_tolerates_header_variations():
    column_map = build_column_map(
        [
            "Property Address",
            "Client Name",
            "Lead Source",
            "S",
            "Sale Price",
            "COMM %",
            "Gross Comm.",
            "Net Comm$",
            "Broker Fee",
            "Closing Date",
        ]
    )

    assert column_map.index_of("address") == 0
    assert column_map.index_of("client_name") == 1
    assert column_map.index_of("source") == 2
    assert column_map.index_of("side") == 3
    assert column_map.index_of("price") == 4
    assert column_map.index_of("commission_rate") == 5
    assert column_map.index_of("gross_commission") == 6
    assert column_map.index_of("net_commission") == 7
    assert column_map.index_of("broker_commission") == 8
    assert column_map.index_of("closing_date") == 9
    assert column_map.index_of("status") == ABSENT


def test_first_matching_header_wins():
    column_map = build_column_map(["ADDRESS", "NAME", "AGENT NAME"])
    assert column_map.index_of("client_name") == 1


def test_missing_fields_are_absent_and_read_as_empty():
    column_map = build_column_map(["ADDRESS", "PRICE"])
    record = _record(2, "1 Main", "100")

    assert "client_name" in column_map.missing_fields()
    assert column_map.value(record, "client_name") == ""
    assert column_map.value(record, "address") == "1 Main"


def test_detect_header_skips_preamble_rows():
    rows = [
        _record(1, "Agent Report 2024"),
        _record(2, "", ""),
        _record(3, "ADDRESS", "NAME", "PRICE"),
        _record(4, "1 Main", "John", "100"),
    ]

    detection = detect_header(rows)
    assert detection.header.line_no == 3
    assert detection.data_start == 3
    assert detection.column_map.index_of("price") == 2


def test_detect_header_fails_without_address_column():
    rows = [_record(1, "NAME", "PRICE"), _record(2, "John", "100")]

    with pytest.raises(ImportAbortedError) as excinfo:
        detect_header(rows)

    error = excinfo.value.error
    assert error.field == "headers"
    assert error.row == 0
    assert error.code == ErrorCode.HEADERS_NOT_FOUND


def test_extractor_defaults_price_and_rate_to_zero():
    column_map = build_column_map(["ADDRESS", "NAME", "PRICE", "COMM %"])
    raw = Extractor(column_map).extract(_record(2, "1 Main", "John", "", ""))

    assert raw.price == "0"
    assert raw.commission_rate == "0"
    assert raw.side == ""
    assert raw.as_dict()["address"] == "1 Main"
