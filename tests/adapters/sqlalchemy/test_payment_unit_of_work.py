from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine

from payrecon.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyPaymentUnitOfWork,
    StartupError,
    configured_engine,
    is_started,
    shutdown,
    startup,
)
from tests.helpers.payments import JANUARY, make_record, make_uid

if TYPE_CHECKING:
    from collections.abc import Iterator

    from sqlalchemy.engine import Engine


@pytest.fixture(autouse=True)
def reset_unit_of_work_state() -> Iterator[None]:
    shutdown()
    yield
    shutdown()


def test_unit_of_work_requires_startup() -> None:
    assert not is_started()
    with pytest.raises(StartupError):
        SqlAlchemyPaymentUnitOfWork()


def test_startup_requires_force_for_reconfiguration() -> None:
    engine_a = create_engine("sqlite+pysqlite:///:memory:", future=True)
    engine_b = create_engine("sqlite+pysqlite:///:memory:", future=True)

    startup(engine=engine_a, force=True)

    with pytest.raises(StartupError):
        startup(engine=engine_b)

    startup(engine=engine_b, force=True)
    assert configured_engine() is engine_b
    assert is_started()


def test_repositories_require_an_open_unit_of_work(sqlite_engine: Engine) -> None:
    startup(engine=sqlite_engine, force=True)

    with pytest.raises(StartupError):
        _ = SqlAlchemyPaymentUnitOfWork().repositories


def test_committed_insert_is_visible_to_the_next_unit_of_work(sqlite_engine: Engine) -> None:
    startup(engine=sqlite_engine, force=True)

    with SqlAlchemyPaymentUnitOfWork() as uow:
        uow.repositories.payments.insert(make_record(make_uid(1)))
        uow.commit()

    with SqlAlchemyPaymentUnitOfWork() as uow:
        stored = uow.repositories.payments.query_period(JANUARY)

    assert [record.uid for record in stored] == [make_uid(1)]


def test_exception_rolls_back_pending_writes(sqlite_engine: Engine) -> None:
    startup(engine=sqlite_engine, force=True)

    with pytest.raises(RuntimeError), SqlAlchemyPaymentUnitOfWork() as uow:
        uow.repositories.payments.insert(make_record(make_uid(2)))
        raise RuntimeError("abort")

    with SqlAlchemyPaymentUnitOfWork() as uow:
        assert uow.repositories.payments.find_by_uids([make_uid(2)]) == []
