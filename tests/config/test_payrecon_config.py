from __future__ import annotations

import base64
from pathlib import Path  # noqa: TC003
from zoneinfo import ZoneInfo

import pytest

from payrecon.config import (
    ConfigurationError,
    MissingConfigurationError,
    get_bepaid_config,
    get_database_config,
    get_reconcile_settings,
    get_storage_config,
    optional_env_int,
    require_env_vars,
)
from payrecon.config.bepaid import BEPAID_BASE_URL
from payrecon.config.storage import DEFAULT_DB_FILENAME


def test_require_env_vars_lists_every_missing_name(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("FIRST_MISSING", raising=False)
    monkeypatch.setenv("SECOND_MISSING", "  ")

    with pytest.raises(MissingConfigurationError) as exc:
        require_env_vars(["SECOND_MISSING", "FIRST_MISSING"])

    assert "FIRST_MISSING, SECOND_MISSING" in str(exc.value)


def test_require_env_vars_strips_whitespace(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_VAR", "  value ")

    assert require_env_vars(["EXAMPLE_VAR"]) == {"EXAMPLE_VAR": "value"}


def test_optional_env_int(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("PAYRECON_TEST_INT", raising=False)
    assert optional_env_int("PAYRECON_TEST_INT", 7) == 7

    monkeypatch.setenv("PAYRECON_TEST_INT", " 12 ")
    assert optional_env_int("PAYRECON_TEST_INT", 7) == 12

    monkeypatch.setenv("PAYRECON_TEST_INT", "twelve")
    with pytest.raises(ConfigurationError):
        optional_env_int("PAYRECON_TEST_INT", 7)

    monkeypatch.setenv("PAYRECON_TEST_INT", "0")
    with pytest.raises(ConfigurationError):
        optional_env_int("PAYRECON_TEST_INT", 7)


def test_bepaid_config_requires_credentials(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("BEPAID_SHOP_ID", raising=False)
    monkeypatch.setenv("BEPAID_SECRET_KEY", "secret")

    with pytest.raises(MissingConfigurationError) as exc:
        get_bepaid_config()

    assert "BEPAID_SHOP_ID" in str(exc.value)


def test_bepaid_config_builds_basic_auth_and_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BEPAID_SHOP_ID", "361")
    monkeypatch.setenv("BEPAID_SECRET_KEY", "b8647b68")
    monkeypatch.delenv("BEPAID_BASE_URL", raising=False)

    config = get_bepaid_config()

    token = base64.b64decode(config.authorization_header.removeprefix("Basic ")).decode()
    assert token == "361:b8647b68"
    assert config.resilience.base_url == BEPAID_BASE_URL
    assert config.resilience.default_headers is not None
    assert config.resilience.default_headers["X-Api-Version"] == "3"


def test_bepaid_base_url_override_drops_trailing_slash(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BEPAID_SHOP_ID", "361")
    monkeypatch.setenv("BEPAID_SECRET_KEY", "secret")
    monkeypatch.setenv("BEPAID_BASE_URL", "https://sandbox.example/")

    assert get_bepaid_config().resilience.base_url == "https://sandbox.example"


def test_reconcile_settings_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "PAYRECON_PROVIDER_TZ",
        "PAYRECON_DEFAULT_CURRENCY",
        "PAYRECON_SAMPLE_LIMIT",
        "PAYRECON_UID_VERIFY_LIMIT",
    ):
        monkeypatch.delenv(name, raising=False)

    settings = get_reconcile_settings()

    assert settings.provider_tz == ZoneInfo("Europe/Minsk")
    assert settings.default_currency == "BYN"
    assert settings.sample_limit == 50
    assert settings.uid_verify_limit == 2000


def test_reconcile_settings_env_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PAYRECON_PROVIDER_TZ", "UTC")
    monkeypatch.setenv("PAYRECON_DEFAULT_CURRENCY", " usd ")
    monkeypatch.setenv("PAYRECON_SAMPLE_LIMIT", "5")
    monkeypatch.setenv("PAYRECON_UID_VERIFY_LIMIT", "10")

    settings = get_reconcile_settings()

    assert settings.provider_tz == ZoneInfo("UTC")
    assert settings.default_currency == "USD"
    assert settings.sample_limit == 5
    assert settings.uid_verify_limit == 10


def test_reconcile_settings_reject_unknown_zone(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PAYRECON_PROVIDER_TZ", "Mars/Olympus_Mons")

    with pytest.raises(ConfigurationError):
        get_reconcile_settings()


def test_database_config_prefers_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DATABASE_URI", "sqlite:///override.db")

    assert get_database_config().uri == "sqlite:///override.db"


def test_database_config_falls_back_to_data_dir(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
) -> None:
    monkeypatch.delenv("DATABASE_URI", raising=False)
    monkeypatch.setenv("PAYRECON_DATA_DIR", str(tmp_path / "data-dir"))

    uri = get_database_config().uri

    expected_path = (tmp_path / "data-dir" / DEFAULT_DB_FILENAME).resolve()
    assert uri == f"sqlite+pysqlite:///{expected_path}"
    assert expected_path.parent.exists()
    assert get_storage_config().database_path == expected_path
