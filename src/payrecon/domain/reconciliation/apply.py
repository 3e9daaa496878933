"""Executor for planned store writes.

Each action runs in its own unit of work: a failure rolls back only that
record, is collected as a ``RecordError`` and the batch continues.
"""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from payrecon.domain.errors import RecordWriteError

from .contracts import ApplyResult, InsertAction, RecordError, UpdateAction

if TYPE_CHECKING:
    from collections.abc import Sequence

    from payrecon.domain.ports import PaymentRepository, PaymentUnitOfWorkFactory

    from .contracts import PlannedAction

log = getLogger(__name__)


def _write(repository: PaymentRepository, action: PlannedAction) -> None:
    match action:
        case InsertAction(record=record):
            repository.insert(record)
        case UpdateAction(uid=uid, fields=fields):
            repository.update(uid, fields)


def apply_action(uow_factory: PaymentUnitOfWorkFactory, action: PlannedAction) -> None:
    """Apply one action and commit; any failure surfaces as ``RecordWriteError``."""

    try:
        with uow_factory() as uow:
            _write(uow.repositories.payments, action)
            uow.commit()
    except RecordWriteError:
        raise
    except Exception as exc:
        raise RecordWriteError(action.uid, str(exc) or type(exc).__name__) from exc


def apply_actions(
    uow_factory: PaymentUnitOfWorkFactory,
    actions: Sequence[PlannedAction],
) -> ApplyResult:
    result = ApplyResult()
    for action in actions:
        try:
            apply_action(uow_factory, action)
        except RecordWriteError as exc:
            log.warning("Failed to %s payment %s: %s", action.action, action.uid, exc.reason)
            result.errors.append(RecordError(uid=action.uid, action=action.action, message=exc.reason))
            continue
        result.record_success(action.action)
    log.info(
        "Applied %d inserts and %d updates (%d failed)",
        result.inserted,
        result.updated,
        len(result.errors),
    )
    return result


__all__ = ["apply_action", "apply_actions"]
