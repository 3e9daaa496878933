from __future__ import annotations

from datetime import UTC, date, datetime

import pytest

from payrecon.domain.periods import Period, parse_iso_date
from tests.helpers.payments import MINSK


def test_period_bounds_follow_the_provider_time_zone() -> None:
    period = Period(date(2025, 1, 1), date(2025, 1, 31), MINSK)

    assert period.start == datetime(2024, 12, 31, 21, 0, tzinfo=UTC)
    assert period.end.date() == date(2025, 1, 31)
    assert period.end.hour == 20
    assert period.contains(datetime(2025, 1, 31, 20, 59, tzinfo=UTC))
    assert not period.contains(datetime(2025, 1, 31, 21, 0, tzinfo=UTC))
    assert period.as_dict() == {"from_date": "2025-01-01", "to_date": "2025-01-31"}


def test_period_rejects_reversed_dates_and_naive_moments() -> None:
    with pytest.raises(ValueError, match="start"):
        Period(date(2025, 2, 1), date(2025, 1, 1), MINSK)

    period = Period(date(2025, 1, 1), date(2025, 1, 1), MINSK)
    with pytest.raises(ValueError, match="timezone-aware"):
        period.contains(datetime(2025, 1, 1, 12, 0))  # noqa: DTZ001


def test_parse_iso_date() -> None:
    assert parse_iso_date(" 2025-03-01 ") == date(2025, 3, 1)
    with pytest.raises(ValueError, match="Invalid ISO date"):
        parse_iso_date("01.03.2025")
