"""SQLAlchemy adapter package for the payment store."""

from __future__ import annotations

from .mappings import mapper_registry, payment_record_table, start_mappers
from .repositories import SqlAlchemyPaymentRepository
from .unit_of_work import (
    SqlAlchemyPaymentUnitOfWork,
    StartupError,
    configured_engine,
    is_started,
    shutdown,
    startup,
)

__all__ = [
    "SqlAlchemyPaymentRepository",
    "SqlAlchemyPaymentUnitOfWork",
    "StartupError",
    "configured_engine",
    "is_started",
    "mapper_registry",
    "payment_record_table",
    "shutdown",
    "start_mappers",
    "startup",
]
