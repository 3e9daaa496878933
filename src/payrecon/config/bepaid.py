"""bePaid gateway configuration values."""

from __future__ import annotations

import base64
import os
from dataclasses import dataclass

from .env import require_env_vars
from .http_resilience import RateLimit, ResilienceConfig

BEPAID_BASE_URL = "https://gateway.bepaid.by"
BEPAID_TIMEOUT_SECONDS = 30.0
BEPAID_PAGE_SIZE = 100
BEPAID_MAX_PAGES = 100
BEPAID_API_VERSION = "3"


@dataclass(frozen=True)
class BepaidConfig:
    """Holds bePaid shop credentials and client settings."""

    shop_id: str
    secret_key: str
    resilience: ResilienceConfig
    page_size: int = BEPAID_PAGE_SIZE
    max_pages: int = BEPAID_MAX_PAGES

    @property
    def authorization_header(self) -> str:
        token = base64.b64encode(f"{self.shop_id}:{self.secret_key}".encode()).decode("ascii")
        return f"Basic {token}"


def bepaid_resilience(base_url: str = BEPAID_BASE_URL) -> ResilienceConfig:
    return ResilienceConfig(
        name="bepaid",
        base_url=base_url.rstrip("/"),
        timeout_seconds=BEPAID_TIMEOUT_SECONDS,
        ratelimit=RateLimit(max_calls=5, per_seconds=1.0),
        default_headers={"Accept": "application/json", "X-Api-Version": BEPAID_API_VERSION},
    )


def get_bepaid_config(*, resilience: ResilienceConfig | None = None) -> BepaidConfig:
    values = require_env_vars(("BEPAID_SHOP_ID", "BEPAID_SECRET_KEY"))
    base_url = os.getenv("BEPAID_BASE_URL") or BEPAID_BASE_URL
    return BepaidConfig(
        shop_id=values["BEPAID_SHOP_ID"],
        secret_key=values["BEPAID_SECRET_KEY"],
        resilience=resilience or bepaid_resilience(base_url),
    )
