"""Pydantic models describing bePaid gateway transaction payloads."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from decimal import Decimal
from typing import cast

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


def _unwrap_data(value: object, key: str) -> object:
    """Some gateway responses nest the payload under ``data``."""

    if isinstance(value, Mapping):
        mapping_value = cast(Mapping[str, object], value)
        nested = mapping_value.get("data")
        if key not in mapping_value and isinstance(nested, Mapping):
            return nested
    return value


class BepaidBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class CreditCardPayload(BepaidBaseModel):
    last_4: str | None = None
    brand: str | None = None
    holder: str | None = None

    _normalize_blanks = field_validator("last_4", "brand", "holder", mode="before")(_blank_to_none)

    @field_validator("last_4", mode="before")
    @classmethod
    def _stringify_last4(cls, value: object) -> object:
        return str(value) if isinstance(value, int) else value


class CustomerPayload(BepaidBaseModel):
    email: str | None = None

    _normalize_email = field_validator("email", mode="before")(_blank_to_none)


class TransactionPayload(BepaidBaseModel):
    uid: str
    status: str | None = None
    type: str | None = None
    amount: Decimal = Decimal(0)
    currency: str | None = None
    message: str | None = None
    description: str | None = None
    tracking_id: str | None = None
    paid_at: datetime | None = None
    created_at: datetime | None = None
    credit_card: CreditCardPayload | None = None
    customer: CustomerPayload | None = None

    @model_validator(mode="before")
    @classmethod
    def _accept_alternate_uid(cls, value: object) -> object:
        if isinstance(value, Mapping):
            data: dict[str, object] = dict(cast(Mapping[str, object], value))
            if "uid" not in data and "transaction_uid" in data:
                data["uid"] = data["transaction_uid"]
            return data
        return value

    _normalize_blanks = field_validator(
        "status",
        "type",
        "currency",
        "message",
        "description",
        "tracking_id",
        "paid_at",
        "created_at",
        mode="before",
    )(_blank_to_none)


class TransactionListResponse(BepaidBaseModel):
    transactions: list[TransactionPayload] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _normalize_shape(cls, value: object) -> object:
        return _unwrap_data(value, "transactions")


class TransactionResponse(BepaidBaseModel):
    transaction: TransactionPayload

    @model_validator(mode="before")
    @classmethod
    def _normalize_shape(cls, value: object) -> object:
        value = _unwrap_data(value, "transaction")
        if isinstance(value, Mapping):
            mapping_value = cast(Mapping[str, object], value)
            if "transaction" in mapping_value:
                return mapping_value
            listed = mapping_value.get("transactions")
            if isinstance(listed, list) and listed:
                return {"transaction": listed[0]}
            if "uid" in mapping_value or "transaction_uid" in mapping_value:
                return {"transaction": mapping_value}
        return value


__all__ = [
    "CreditCardPayload",
    "CustomerPayload",
    "TransactionListResponse",
    "TransactionPayload",
    "TransactionResponse",
]
