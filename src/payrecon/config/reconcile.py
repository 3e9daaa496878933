"""Reconciliation run settings."""

from __future__ import annotations

import os
from dataclasses import dataclass
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .env import optional_env_int
from .errors import ConfigurationError

DEFAULT_PROVIDER_TZ = "Europe/Minsk"
DEFAULT_CURRENCY = "BYN"
DEFAULT_SAMPLE_LIMIT = 50
DEFAULT_UID_VERIFY_LIMIT = 2000


@dataclass(frozen=True, slots=True)
class ReconcileSettings:
    """Tunables shared by ingestion, fetching and reporting."""

    provider_tz: ZoneInfo
    default_currency: str = DEFAULT_CURRENCY
    sample_limit: int = DEFAULT_SAMPLE_LIMIT
    uid_verify_limit: int = DEFAULT_UID_VERIFY_LIMIT


def default_settings() -> ReconcileSettings:
    return ReconcileSettings(provider_tz=ZoneInfo(DEFAULT_PROVIDER_TZ))


def get_reconcile_settings() -> ReconcileSettings:
    tz_name = os.getenv("PAYRECON_PROVIDER_TZ") or DEFAULT_PROVIDER_TZ
    try:
        provider_tz = ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ConfigurationError(f"Unknown time zone in PAYRECON_PROVIDER_TZ: {tz_name}") from exc
    currency = (os.getenv("PAYRECON_DEFAULT_CURRENCY") or DEFAULT_CURRENCY).strip().upper()
    return ReconcileSettings(
        provider_tz=provider_tz,
        default_currency=currency,
        sample_limit=optional_env_int("PAYRECON_SAMPLE_LIMIT", DEFAULT_SAMPLE_LIMIT),
        uid_verify_limit=optional_env_int("PAYRECON_UID_VERIFY_LIMIT", DEFAULT_UID_VERIFY_LIMIT),
    )
