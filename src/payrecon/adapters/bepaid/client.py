"""HTTP client for the bePaid gateway transaction endpoints."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import UTC
from logging import getLogger
from typing import TYPE_CHECKING, Final

import httpx
from pydantic import ValidationError

from payrecon.adapters.http_resilience import ResilienceConfig, ResilientClient, build_limiter
from payrecon.config import BepaidConfig, ReconcileSettings, default_settings, get_bepaid_config
from payrecon.domain.errors import ProviderError, ProviderUnavailableError
from payrecon.domain.ports.fetching import LedgerProvider, ListedLedger

from .schema import TransactionListResponse, TransactionResponse
from .translator import parse_transaction

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime

    from aiolimiter import AsyncLimiter

    from payrecon.domain.model import LedgerTransaction
    from payrecon.domain.periods import Period

log = getLogger(__name__)

# Statuses with which the gateway refuses bulk listing for this shop.
CAPABILITY_STATUSES: Final[frozenset[int]] = frozenset({401, 403, 404, 405})


def _default_client_factory(
    config: ResilienceConfig, limiter: AsyncLimiter | None
) -> ResilientClient:
    return ResilientClient(config, limiter=limiter)


def _isoformat(value: datetime) -> str:
    return value.astimezone(UTC).strftime("%Y-%m-%dT%H:%M:%SZ")


@dataclass(slots=True)
class BepaidLedgerProvider:
    """bePaid ledger reads; every client it opens draws on one shared rate limiter."""

    config: BepaidConfig = field(default_factory=get_bepaid_config)
    settings: ReconcileSettings = field(default_factory=default_settings)
    client_factory: Callable[[ResilienceConfig, AsyncLimiter | None], ResilientClient] = field(
        default=_default_client_factory
    )
    limiter: AsyncLimiter | None = None

    def __post_init__(self) -> None:
        if self.limiter is None:
            self.limiter = build_limiter(self.config.resilience.ratelimit)

    def list_transactions(self, period: Period) -> ListedLedger:
        return asyncio.run(self._list_async(period))

    def get_transaction(self, uid: str) -> LedgerTransaction | None:
        return asyncio.run(self._get_async(uid))

    async def _list_async(self, period: Period) -> ListedLedger:
        listed = ListedLedger()
        page_size = self.config.page_size
        async with self._open_client() as client:
            page = 1
            while True:
                params = httpx.QueryParams(
                    {
                        "created_at_from": _isoformat(period.start),
                        "created_at_to": _isoformat(period.end),
                        "per_page": page_size,
                        "page": page,
                    }
                )
                response = await self._perform_request(client, "/transactions", params=params)
                if response.status_code in CAPABILITY_STATUSES:
                    raise ProviderUnavailableError(
                        f"bePaid refused transaction listing: HTTP {response.status_code}",
                        status_code=response.status_code,
                    )
                self._raise_for_status(response)
                payload = self._validate(TransactionListResponse, response)

                listed.pages = page
                for item in payload.transactions:
                    transaction = parse_transaction(item, self.settings)
                    if transaction is not None:
                        listed.transactions.append(transaction)

                if len(payload.transactions) < page_size:
                    break
                if page >= self.config.max_pages:
                    log.warning("bePaid listing stopped at the %d page limit", self.config.max_pages)
                    listed.truncated = True
                    break
                page += 1
        return listed

    async def _get_async(self, uid: str) -> LedgerTransaction | None:
        async with self._open_client() as client:
            response = await self._perform_request(client, f"/transactions/{uid}")
        if response.status_code == httpx.codes.NOT_FOUND:
            return None
        if response.status_code in CAPABILITY_STATUSES:
            raise ProviderUnavailableError(
                f"bePaid refused lookup of {uid}: HTTP {response.status_code}",
                status_code=response.status_code,
            )
        self._raise_for_status(response)
        payload = self._validate(TransactionResponse, response)
        return parse_transaction(payload.transaction, self.settings)

    def _open_client(self) -> ResilientClient:
        return self.client_factory(self.config.resilience, self.limiter)

    async def _perform_request(
        self,
        client: ResilientClient,
        path: str,
        *,
        params: httpx.QueryParams | None = None,
    ) -> httpx.Response:
        try:
            return await client.get(
                path,
                params=params,
                headers={"Authorization": self.config.authorization_header},
            )
        except httpx.HTTPError as exc:
            raise ProviderError(f"bePaid request {path} failed: {exc}") from exc

    @staticmethod
    def _raise_for_status(response: httpx.Response) -> None:
        if response.is_success:
            return
        log.error("bePaid API error %s: %s", response.status_code, response.text[:200])
        raise ProviderError(
            f"bePaid returned HTTP {response.status_code}",
            status_code=response.status_code,
        )

    @staticmethod
    def _validate[TModel: (TransactionListResponse, TransactionResponse)](
        model: type[TModel],
        response: httpx.Response,
    ) -> TModel:
        try:
            return model.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            raise ProviderError(f"Unexpected bePaid payload: {exc}") from exc


if TYPE_CHECKING:
    _provider_check: LedgerProvider = BepaidLedgerProvider()
