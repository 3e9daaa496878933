"""Schema and translation checks for bePaid payloads."""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime

import pytest
from pydantic import ValidationError

from payrecon.adapters.bepaid import (
    TransactionListResponse,
    TransactionPayload,
    TransactionResponse,
    parse_transaction,
)
from tests.helpers.payments import SETTINGS

BepaidPayload = dict[str, object]
Shape = Callable[[BepaidPayload], object]


def test_transaction_payloads_parse(transaction_payloads: list[BepaidPayload]) -> None:
    for payload in transaction_payloads:
        transaction = TransactionPayload.model_validate(payload)
        assert transaction.uid
        assert transaction.status


def test_blank_strings_become_none(transaction_payloads: list[BepaidPayload]) -> None:
    refund = TransactionPayload.model_validate(transaction_payloads[1])
    failed = TransactionPayload.model_validate(transaction_payloads[2])

    assert refund.message is None
    assert refund.credit_card is not None
    assert refund.credit_card.last_4 == "1111"
    assert failed.credit_card is not None
    assert failed.credit_card.last_4 is None
    assert failed.credit_card.brand is None


@pytest.mark.parametrize(
    "shape",
    [
        lambda payload: {"transaction": payload},
        lambda payload: {"data": {"transaction": payload}},
        lambda payload: {"transactions": [payload]},
        lambda payload: payload,
    ],
)
def test_single_transaction_shapes(
    transaction_payloads: list[BepaidPayload],
    shape: Shape,
) -> None:
    payload = transaction_payloads[0]
    wrapped = shape(payload)

    response = TransactionResponse.model_validate(wrapped)

    assert response.transaction.uid == payload["uid"]


def test_alternate_uid_key_is_accepted() -> None:
    payload = TransactionPayload.model_validate(
        {"transaction_uid": "1a2b3c4d-0009-4e5f-8a9b-0c1d2e3f4a09", "status": "pending"}
    )

    assert payload.uid == "1a2b3c4d-0009-4e5f-8a9b-0c1d2e3f4a09"


def test_listing_without_uid_is_rejected() -> None:
    with pytest.raises(ValidationError):
        TransactionListResponse.model_validate({"transactions": [{"status": "successful"}]})


def test_translator_reads_naive_times_in_provider_zone(
    transaction_payloads: list[BepaidPayload],
) -> None:
    failed = parse_transaction(TransactionPayload.model_validate(transaction_payloads[2]), SETTINGS)

    assert failed is not None
    assert failed.paid_at == datetime(2025, 1, 17, 5, 0, tzinfo=UTC)
    assert failed.currency == "USD"
    assert failed.message == "Insufficient funds"
    assert failed.card_last4 is None


def test_translator_drops_non_standard_uids(transaction_payloads: list[BepaidPayload]) -> None:
    legacy = TransactionPayload.model_validate(transaction_payloads[3])

    assert parse_transaction(legacy, SETTINGS) is None
