from __future__ import annotations

import io
from datetime import UTC, datetime
from decimal import Decimal
from pathlib import Path

import pytest
from openpyxl import Workbook

from payrecon.domain.canonicalization import canonicalize_transaction
from payrecon.domain.errors import FatalIngestionError
from payrecon.domain.ledger import (
    LedgerFormat,
    find_header,
    ingest_ledger,
    ingest_ledger_file,
    resolve_columns,
)
from payrecon.domain.ledger.readers import read_table
from payrecon.domain.model import CanonicalStatus, TransactionKind
from tests.helpers.payments import SETTINGS, make_uid

BEPAID_HEADER = [
    "UID",
    "ID заказа",
    "Статус",
    "Описание",
    "Сумма",
    "Валюта",
    "Комиссия,%",
    "Комиссия за операцию",
    "Сумма комиссий",
    "Перечисленная сумма",
    "Тип транзакции",
    "Трекинг ID",
    "Дата создания",
    "Дата оплаты",
    "Сообщение",
]


def _csv_export() -> str:
    return "\n".join(
        [
            "Отчет по транзакциям",
            "UID;Статус;Тип;Сумма;Валюта;Дата;Номер карты",
            f'{make_uid(1).upper()};Успешный;Платеж;"1 234,56";BYN;15.01.2025 12:30;4111 **** 1111',
            "Итого;;;1234,56;;;",
            f"{make_uid(2)};Ошибка;Платеж;10,00;BYN;16.01.2025 10:00;",
            f"{make_uid(1)};Успешный;Платеж;1,00;BYN;17.01.2025 10:00;",
            "",
        ]
    )


def _workbook_bytes() -> bytes:
    workbook = Workbook()
    summary = workbook.active
    assert summary is not None
    summary.title = "Сводка"
    summary.append(["Итого операций", 2])
    summary.append(["Сумма", 160.5])

    operations = workbook.create_sheet("Операции")
    operations.append(["Выписка bePaid"])
    operations.append(["Период", "01.01.2025 - 31.01.2025"])
    operations.append(["Магазин", "Demo"])
    operations.append(
        ["ID транзакции", "Статус", "Тип операции", "Сумма", "Валюта", "Дата платежа", "Карта"]
    )
    operations.append(
        [make_uid(10), "Успешный", "Платеж", 150.5, "BYN", datetime(2025, 1, 15, 12, 0), "1111"]
    )
    operations.append(["Итого", None, None, 150.5, None, None, None])
    operations.append([make_uid(11), "Возврат", "Возврат", 10, "BYN", "16.01.2025 10:00", None])

    stream = io.BytesIO()
    workbook.save(stream)
    return stream.getvalue()


def test_delimited_export_in_legacy_encoding() -> None:
    result = ingest_ledger(_csv_export().encode("cp1251"), LedgerFormat.DELIMITED, SETTINGS)

    assert result.uids == [make_uid(1), make_uid(2)]
    first = result.transactions[0]
    assert first.raw_status == "Успешный"
    assert first.amount == Decimal("1234.56")
    assert first.currency == "BYN"
    assert first.paid_at == datetime(2025, 1, 15, 9, 30, tzinfo=UTC)
    assert first.card_last4 == "1111"
    assert result.transactions[1].amount == Decimal("10.00")
    assert result.skipped_rows == 1
    assert result.duplicate_rows == 1
    assert result.sheets_processed == ["csv"]


def test_comma_delimited_export_with_quoted_delimiters() -> None:
    text = "\n".join(
        [
            "uid,status,amount,description",
            f'{make_uid(3)},successful,"1,234.56","Course, advanced"',
        ]
    )

    result = ingest_ledger(text.encode("utf-8"), LedgerFormat.DELIMITED, SETTINGS)

    assert len(result.transactions) == 1
    transaction = result.transactions[0]
    assert transaction.amount == Decimal("1234.56")
    assert transaction.description == "Course, advanced"
    assert transaction.raw_type == "Платеж"
    assert transaction.currency == SETTINGS.default_currency


def test_workbook_header_offset_and_sheet_skipping() -> None:
    result = ingest_ledger(_workbook_bytes(), LedgerFormat.TABULAR, SETTINGS)

    assert result.sheets_processed == ["Операции"]
    assert result.skipped_sheets == 1
    assert result.skipped_rows == 1
    assert result.uids == [make_uid(10), make_uid(11)]
    paid, refund = result.transactions
    assert paid.amount == Decimal("150.5")
    assert paid.paid_at == datetime(2025, 1, 15, 9, 0, tzinfo=UTC)
    assert paid.card_last4 == "1111"
    assert refund.raw_type == "Возврат"
    assert refund.amount == Decimal(10)


def test_header_must_appear_within_the_first_fifteen_rows() -> None:
    header = ["UID", "Статус"]
    data = [make_uid(4), "Успешный"]
    preamble: list[list[object]] = [["пусто"] for _ in range(14)]

    found = read_table("late", [*preamble, header, data], SETTINGS)
    assert found is not None
    assert found.header_row == 14
    assert len(found.transactions) == 1

    too_late = read_table("too late", [["пусто"], *preamble, header, data], SETTINGS)
    assert too_late is None


def test_column_resolution_uses_priority_and_prefix_labels() -> None:
    columns = resolve_columns(["Сумма", "UID платежа", "Статус платежа", "Тип", "Дата создания"])

    assert columns is not None
    assert columns.uid == 1
    assert columns.status == 2
    assert columns.type == 3
    assert columns.amount == 0
    assert columns.date == 4
    assert columns.currency is None
    assert resolve_columns(["Сумма", "Статус"]) is None
    assert find_header([["a"], ["b"]]) is None


def test_bepaid_header_prefers_specific_labels_over_column_order() -> None:
    columns = resolve_columns(BEPAID_HEADER)

    assert columns is not None
    assert columns.amount == 4
    assert columns.type == 10
    assert columns.date == 13
    assert columns.message == 14
    assert columns.description == 3


def test_bepaid_refund_row_uses_transaction_type_and_payment_date() -> None:
    row = [
        make_uid(5),
        "order-5",
        "Успешный",
        "Курс",
        "150,00",
        "BYN",
        "2,5",
        "Платеж",
        "3,75",
        "146,25",
        "Возврат средств",
        "track-5",
        "14.01.2025 08:00",
        "15.01.2025 12:30",
        "",
    ]
    text = "\n".join([";".join(BEPAID_HEADER), ";".join(row)])

    result = ingest_ledger(text.encode("utf-8"), LedgerFormat.DELIMITED, SETTINGS)

    (transaction,) = result.transactions
    assert transaction.raw_type == "Возврат средств"
    assert transaction.amount == Decimal("150.00")
    assert transaction.paid_at == datetime(2025, 1, 15, 9, 30, tzinfo=UTC)
    canonical = canonicalize_transaction(transaction)
    assert canonical is not None
    assert canonical.status is CanonicalStatus.REFUNDED
    assert canonical.kind is TransactionKind.REFUND



def test_corrupt_workbook_is_fatal() -> None:
    with pytest.raises(FatalIngestionError):
        ingest_ledger(b"definitely not a zip archive", LedgerFormat.TABULAR, SETTINGS)


def test_export_without_identifier_column_yields_nothing() -> None:
    result = ingest_ledger("a;b\n1;2\n".encode(), LedgerFormat.DELIMITED, SETTINGS)

    assert result.transactions == []
    assert result.sheets_processed == []
    assert result.skipped_sheets == 1


def test_ledger_file_format_is_chosen_by_suffix(tmp_path: Path) -> None:
    path = tmp_path / "ledger.xlsx"
    path.write_bytes(_workbook_bytes())

    assert len(ingest_ledger_file(path, SETTINGS).transactions) == 2
    assert LedgerFormat.from_path(Path("export.CSV")) is LedgerFormat.DELIMITED
    with pytest.raises(FatalIngestionError):
        LedgerFormat.from_path(Path("export.pdf"))
    with pytest.raises(FatalIngestionError):
        ingest_ledger_file(tmp_path / "missing.csv", SETTINGS)


def test_comma_delimited_export_below_a_report_title() -> None:
    text = "\n".join(
        [
            "Отчет по транзакциям; январь 2025",
            "uid,status,amount",
            f"{make_uid(6)},successful,10",
        ]
    )

    result = ingest_ledger(text.encode("utf-8"), LedgerFormat.DELIMITED, SETTINGS)

    assert result.uids == [make_uid(6)]
    assert result.transactions[0].amount == Decimal(10)
    assert result.sheets_processed == ["csv"]
