"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

from itertools import batched
from typing import TYPE_CHECKING, Final, cast

from sqlalchemy import select

from payrecon.adapters.sqlalchemy.mappings import payment_record_table
from payrecon.domain.errors import RecordWriteError
from payrecon.domain.model import PaymentRecord

if TYPE_CHECKING:
    from collections.abc import Iterable

    from sqlalchemy.orm import Session

    from payrecon.domain.model import PaymentUpdate
    from payrecon.domain.periods import Period

# Keeps IN (...) lists under SQLite's bound-parameter limit.
UID_BATCH_SIZE: Final[int] = 500


class SqlAlchemyPaymentRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def query_period(self, period: Period) -> list[PaymentRecord]:
        columns = payment_record_table.c
        stmt = (
            select(PaymentRecord)
            .where(columns.paid_at >= period.start)
            .where(columns.paid_at <= period.end)
            .order_by(columns.paid_at, columns.uid)
        )
        return list(self.session.execute(stmt).scalars())

    def find_by_uids(self, uids: Iterable[str]) -> list[PaymentRecord]:
        wanted = sorted(set(uids))
        found: list[PaymentRecord] = []
        for chunk in batched(wanted, UID_BATCH_SIZE):
            stmt = select(PaymentRecord).where(payment_record_table.c.uid.in_(chunk))
            found.extend(self.session.execute(stmt).scalars())
        return found

    def insert(self, record: PaymentRecord) -> None:
        self.session.add(record)
        self.session.flush()

    def update(self, uid: str, fields: PaymentUpdate) -> PaymentRecord:
        stmt = select(PaymentRecord).where(payment_record_table.c.uid == uid)
        record = self.session.execute(stmt).scalar_one_or_none()
        if record is None:
            raise RecordWriteError(uid, "no stored record with this uid")
        fields.apply_to(record)
        self.session.flush()
        return record


if TYPE_CHECKING:
    from payrecon.domain.ports.persistence import PaymentRepository

    _session_stub = cast("Session", object())
    _repo_check: PaymentRepository = SqlAlchemyPaymentRepository(_session_stub)
