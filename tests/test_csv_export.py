import json
import logging
from datetime import date

import pytest

from realty_import.domain.exceptions import SourceFormatError
from realty_import.domain.export import ExportOptions, StoredTransaction, generate_csv_content
from realty_import.domain.models import Client
from realty_import.infra.sources.transaction_source_json import loadTransactionsFromJson
from realty_import.usecases.export_usecase import ExportUseCase

OPTIONS = ExportOptions(date_from=date(2024, 1, 1), date_to=date(2024, 12, 31))


def _transactions() -> list[StoredTransaction]:
    return [
        StoredTransaction(
            address="1 Main, Unit 2",
            status="Active",
            price=100000,
            commission_rate=3,
            net_commission=2400,
            broker_commission=600,
            closing_date="2024-06-01",
            created_at="2024-03-01T10:00:00Z",
            client=Client(id="c1", name="John Doe", email="john@example.com", type="buyer"),
        ),
        StoredTransaction(
            address="9 Old Rd",
            status="Closed",
            price=50000,
            commission_rate=2,
            created_at="2023-12-31T23:00:00Z",
        ),
        StoredTransaction(address="No Date Ln", status="Active", price=1000, commission_rate=1),
    ]


def test_cells_are_quoted_only_when_needed():
    transactions = [
        StoredTransaction(
            address='The "Loft"\nUnit 2',
            status="Active",
            price=1000,
            commission_rate=1,
            created_at="2024-03-01",
        )
    ]
    options = ExportOptions(
        date_from=date(2024, 1, 1),
        date_to=date(2024, 12, 31),
        include_client_info=False,
        include_commission_breakdown=False,
    )

    content = generate_csv_content(transactions, options)

    assert content.endswith("\n")
    assert '"The ""Loft""\nUnit 2",Active,"$1,000.00",1%,$10.00,,,,2024-03-01\n' in content


def test_generate_csv_with_client_info_and_totals():
    lines = generate_csv_content(_transactions(), OPTIONS).splitlines()

    assert lines[0] == (
        "Address,Client Name,Client Email,Client Phone,Client Type,Status,Price,Commission Rate,"
        "Gross Commission,Net Commission,Broker Commission,Closing Date,Created Date"
    )
    assert lines[1] == (
        '"1 Main, Unit 2",John Doe,john@example.com,,buyer,Active,"$100,000.00",3%,'
        '"$3,000.00","$2,400.00",$600.00,2024-06-01,2024-03-01'
    )
    assert lines[2] == "," * 12
    assert lines[3] == 'TOTALS,,,,,,"$100,000.00",,"$3,000.00","$2,400.00",$600.00,,'
    assert len(lines) == 4


def test_generate_csv_without_client_info_or_breakdown():
    options = ExportOptions(
        date_from=date(2023, 1, 1),
        date_to=date(2024, 12, 31),
        statuses=("Closed",),
        include_client_info=False,
        include_commission_breakdown=False,
    )
    lines = generate_csv_content(_transactions(), options).splitlines()

    assert lines[0].startswith("Address,Status,Price")
    assert lines[1] == '9 Old Rd,Closed,"$50,000.00",2%,"$1,000.00",,,,2023-12-31'
    assert len(lines) == 2


def test_export_filename():
    assert OPTIONS.filename == "transactions_2024-01-01_to_2024-12-31.csv"


def test_export_usecase_writes_file(tmp_path):
    logger = logging.getLogger("realtyImport.test.export")
    logger.addHandler(logging.NullHandler())

    path, exported = ExportUseCase(OPTIONS).run(
        _transactions(),
        output=None,
        output_dir=tmp_path,
        logger=logger,
        run_id="r1",
    )

    assert exported == 1
    assert path.endswith("transactions_2024-01-01_to_2024-12-31.csv")
    assert "1 Main, Unit 2" in (tmp_path / OPTIONS.filename).read_text(encoding="utf-8")


def test_load_transactions_from_json(tmp_path):
    source = tmp_path / "transactions.json"
    source.write_text(
        json.dumps(
            {
                "transactions": [
                    {
                        "address": "1 Main",
                        "price": "100000",
                        "commission_rate": 3,
                        "created_at": "2024-03-01T10:00:00Z",
                        "client": {"id": 7, "name": "John Doe"},
                    }
                ]
            }
        ),
        encoding="utf-8",
    )

    transactions = loadTransactionsFromJson(source)

    assert transactions[0].status == "Active"
    assert transactions[0].price == 100000
    assert transactions[0].client.id == "7"
    assert transactions[0].gross_commission == 3000


def test_load_transactions_rejects_missing_price(tmp_path):
    source = tmp_path / "transactions.json"
    source.write_text(json.dumps([{"address": "1 Main"}]), encoding="utf-8")

    with pytest.raises(SourceFormatError):
        loadTransactionsFromJson(source)
