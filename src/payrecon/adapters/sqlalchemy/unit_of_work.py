"""Engine lifecycle and the SQLAlchemy payment unit of work."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING, Literal

from sqlalchemy import create_engine, make_url
from sqlalchemy.orm import Session, sessionmaker

from payrecon.adapters.sqlalchemy.mappings import start_mappers
from payrecon.adapters.sqlalchemy.migrations import upgrade_head
from payrecon.adapters.sqlalchemy.repositories import SqlAlchemyPaymentRepository
from payrecon.config import get_database_config
from payrecon.domain.ports.unit_of_work import PaymentRepositories

if TYPE_CHECKING:
    from types import TracebackType

    from sqlalchemy.engine import Engine

log = getLogger(__name__)


class StartupError(RuntimeError):
    """Raised when the payment store is used before ``startup`` or bound twice."""


class _StoreBinding:
    """Process-wide engine shared by every unit of work."""

    __slots__ = ("engine", "sessions")

    def __init__(self) -> None:
        self.engine: Engine | None = None
        self.sessions: sessionmaker[Session] | None = None

    def bind(self, engine: Engine | None) -> None:
        self.engine = engine
        self.sessions = (
            None if engine is None else sessionmaker(bind=engine, expire_on_commit=False)
        )


_BINDING = _StoreBinding()


def startup(
    *,
    engine: Engine | None = None,
    database_uri: str | None = None,
    force: bool = False,
) -> Engine:
    """Bind the payment store and migrate it to the newest schema."""

    if _BINDING.engine is not None and not force:
        raise StartupError("Payment store already started. Pass force=True to rebind it.")

    if engine is None:
        url = make_url(database_uri or get_database_config().uri)
        log.info("Opening payment store %s", url.render_as_string(hide_password=True))
        engine = create_engine(url, future=True)
    start_mappers()
    upgrade_head(engine=engine)
    _BINDING.bind(engine)
    return engine


def configured_engine() -> Engine | None:
    return _BINDING.engine


def is_started() -> bool:
    return _BINDING.engine is not None


def shutdown() -> None:
    """Dispose the bound engine; a later ``startup`` may bind a new one."""

    if _BINDING.engine is not None:
        _BINDING.engine.dispose()
    _BINDING.bind(None)


class SqlAlchemyPaymentUnitOfWork:
    """One store transaction; the engine opens one per planned action."""

    def __init__(self) -> None:
        if _BINDING.sessions is None:
            raise StartupError(
                "Payment store not started. Call payrecon.adapters.sqlalchemy.startup() first."
            )
        self._sessions = _BINDING.sessions
        self._session: Session | None = None
        self._repositories: PaymentRepositories | None = None

    def __enter__(self) -> SqlAlchemyPaymentUnitOfWork:
        if self._session is not None:
            raise StartupError("Unit of work is already open")
        self._session = self._sessions()
        self._repositories = PaymentRepositories(
            payments=SqlAlchemyPaymentRepository(self._session)
        )
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        session = self.session
        try:
            if exc_type is not None:
                session.rollback()
        finally:
            session.close()
            self._session = None
            self._repositories = None
        return False

    @property
    def session(self) -> Session:
        if self._session is None:
            raise StartupError("Unit of work is not open")
        return self._session

    @property
    def repositories(self) -> PaymentRepositories:
        if self._repositories is None:
            raise StartupError("Unit of work is not open")
        return self._repositories

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()


if TYPE_CHECKING:
    from payrecon.domain.ports.unit_of_work import PaymentUnitOfWork

    _uow_check: PaymentUnitOfWork = SqlAlchemyPaymentUnitOfWork()
