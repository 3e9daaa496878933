"""SQLAlchemy mapping metadata for the payment store."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from decimal import Decimal
from enum import StrEnum
from functools import cache
from typing import Final

from sqlalchemy import (
    Column,
    DateTime,
    Dialect,
    Enum,
    Index,
    String,
    Table,
    TypeDecorator,
    Uuid,
    orm,
)

from payrecon.domain.model import CanonicalStatus, PaymentRecord, TransactionKind

log = logging.getLogger(__name__)

CENT: Final[Decimal] = Decimal("0.01")


class UTCDateTime(TypeDecorator[datetime]):
    """Aware datetimes normalised to UTC; SQLite hands them back naive."""

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        aware = value if value.tzinfo is not None else value.replace(tzinfo=UTC)
        return aware.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None or value.tzinfo is not None:
            return value
        return value.replace(tzinfo=UTC)


class MoneyType(TypeDecorator[Decimal]):
    """Exact two-place decimal stored as text (SQLite has no native decimal)."""

    impl = String(32)
    cache_ok = True

    def process_bind_param(self, value: Decimal | None, dialect: Dialect) -> str | None:
        _ = dialect
        if value is None:
            return None
        return str(Decimal(value).quantize(CENT))

    def process_result_value(self, value: str | None, dialect: Dialect) -> Decimal | None:
        _ = dialect
        if value is None:
            return None
        return Decimal(value)


def _enum_values(enum_type: type[StrEnum]) -> list[str]:
    return [member.value for member in enum_type]


def _string_enum(enum_type: type[StrEnum], name: str) -> Enum:
    return Enum(
        enum_type,
        name=name,
        native_enum=False,
        create_constraint=True,
        length=32,
        values_callable=_enum_values,
    )


mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "pk": "pk_%(table_name)s",
}

payment_record_table = Table(
    "payment_record",
    mapper_registry.metadata,
    Column("id", Uuid(as_uuid=True), primary_key=True),
    Column("uid", String(64), nullable=False, unique=True),
    Column(
        "canonical_status",
        _string_enum(CanonicalStatus, "canonical_status"),
        nullable=False,
    ),
    Column(
        "transaction_type",
        _string_enum(TransactionKind, "transaction_type"),
        nullable=False,
    ),
    Column("amount", MoneyType, nullable=False),
    Column("currency", String(3), nullable=False),
    Column("paid_at", UTCDateTime, nullable=True),
    Column("customer_email", String, nullable=True),
    Column("card_brand", String(32), nullable=True),
    Column("card_last4", String(4), nullable=True),
    Column("description", String, nullable=True),
    Column("order_id", Uuid(as_uuid=True), nullable=True),
    Column("customer_id", Uuid(as_uuid=True), nullable=True),
    Column("origin", String(64), nullable=True),
    Column("created_at", UTCDateTime, nullable=False),
    Column("updated_at", UTCDateTime, nullable=True),
    Index("ix_payment_record_paid_at", "paid_at"),
)


@cache
def start_mappers() -> orm.registry:
    """Configure SQLAlchemy mappers for the payment model."""

    log.debug("Mapping PaymentRecord onto %s", payment_record_table.name)
    mapper_registry.map_imperatively(PaymentRecord, payment_record_table)
    return mapper_registry
