"""Strategies for obtaining the ledger side from a live provider."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from payrecon.domain.errors import ProviderError, ProviderUnavailableError
from payrecon.domain.model import RequestedMode

from .contracts import FallbackFetch, ListFetch, RecordError, UidVerifyFetch

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from payrecon.domain.periods import Period
    from payrecon.domain.ports import LedgerProvider

    from .contracts import LedgerFetch

log = getLogger(__name__)


def fetch_list(provider: LedgerProvider, period: Period) -> ListFetch:
    listed = provider.list_transactions(period)
    log.info("Listed %d transactions over %d pages", len(listed.transactions), listed.pages)
    if listed.truncated:
        log.warning("Listing was cut off at page %d; the ledger may be incomplete", listed.pages)
    return ListFetch(
        transactions=list(listed.transactions),
        pages=listed.pages,
        truncated=listed.truncated,
    )


def fetch_uid_verify(
    provider: LedgerProvider,
    uids: Sequence[str],
    *,
    limit: int,
) -> UidVerifyFetch:
    """Look up each store UID at the provider, one request at a time.

    A UID the provider does not know is unverifiable; a failed lookup is
    recorded and the loop continues.
    """

    result = UidVerifyFetch(transactions=[], unchecked=list(uids[limit:]))
    for uid in uids[:limit]:
        result.checked += 1
        try:
            transaction = provider.get_transaction(uid)
        except ProviderError as exc:
            log.warning("Lookup of %s failed: %s", uid, exc)
            result.lookup_errors.append(RecordError(uid=uid, message=str(exc)))
            continue
        if transaction is None:
            result.unverifiable.append(uid)
            continue
        result.transactions.append(transaction)

    if result.unchecked:
        log.warning(
            "uid_verify limit %d reached; %d store UIDs left unchecked",
            limit,
            len(result.unchecked),
        )
    log.info(
        "Verified %d of %d UIDs (%d unverifiable, %d lookup errors)",
        len(result.transactions),
        result.checked,
        len(result.unverifiable),
        len(result.lookup_errors),
    )
    return result


def fetch_ledger(
    provider: LedgerProvider,
    period: Period,
    mode: RequestedMode,
    *,
    store_uids: Callable[[], Sequence[str]],
    uid_verify_limit: int,
) -> LedgerFetch:
    """Fetch the ledger with the requested strategy.

    Under ``auto`` a ``ProviderUnavailableError`` from the listing switches to
    uid_verify for the same period; any other provider failure propagates.
    """

    match mode:
        case RequestedMode.LIST:
            return fetch_list(provider, period)
        case RequestedMode.UID_VERIFY:
            return fetch_uid_verify(provider, store_uids(), limit=uid_verify_limit)
        case RequestedMode.AUTO:
            try:
                return fetch_list(provider, period)
            except ProviderUnavailableError as exc:
                reason = str(exc) or type(exc).__name__
                log.warning("Bulk listing unavailable (%s); falling back to uid_verify", reason)
                verified = fetch_uid_verify(provider, store_uids(), limit=uid_verify_limit)
                return FallbackFetch(result=verified, fallback_reason=reason)


__all__ = ["fetch_ledger", "fetch_list", "fetch_uid_verify"]
