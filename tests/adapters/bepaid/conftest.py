"""Shared fixtures for bePaid adapter tests."""

from __future__ import annotations

import json
from collections.abc import Callable
from dataclasses import replace
from pathlib import Path
from typing import TYPE_CHECKING

import httpx
import pytest

from payrecon.adapters.bepaid import BepaidLedgerProvider
from payrecon.adapters.http_resilience import ResilientClient, RetryPolicy
from payrecon.config import BepaidConfig, bepaid_resilience
from tests.helpers.payments import SETTINGS

if TYPE_CHECKING:
    from aiolimiter import AsyncLimiter

    from payrecon.config import ResilienceConfig

BepaidPayload = dict[str, object]
Handler = Callable[[httpx.Request], httpx.Response]
FIXTURES = Path(__file__).resolve().parents[2] / "data" / "bepaid"


@pytest.fixture(scope="session")
def transaction_payloads() -> list[BepaidPayload]:
    path = FIXTURES / "transactions.jsonl"
    payloads: list[BepaidPayload] = []
    for line in path.read_text(encoding="utf-8").splitlines():
        if line.strip():
            payloads.append(json.loads(line))
    return payloads


@pytest.fixture
def bepaid_config() -> BepaidConfig:
    resilience = replace(
        bepaid_resilience("https://gateway.test"),
        retry=RetryPolicy(total=0),
        ratelimit=None,
    )
    return BepaidConfig(
        shop_id="361",
        secret_key="secret",
        resilience=resilience,
        page_size=2,
        max_pages=5,
    )


@pytest.fixture
def make_provider(bepaid_config: BepaidConfig) -> Callable[[Handler], BepaidLedgerProvider]:
    def build(handler: Handler) -> BepaidLedgerProvider:
        def client_factory(
            config: ResilienceConfig, limiter: AsyncLimiter | None
        ) -> ResilientClient:
            return ResilientClient(
                config, transport=httpx.MockTransport(handler), limiter=limiter
            )

        return BepaidLedgerProvider(
            config=bepaid_config,
            settings=SETTINGS,
            client_factory=client_factory,
        )

    return build
