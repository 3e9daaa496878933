"""Reconciliation periods expressed in the provider's local calendar."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, date, datetime, time
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from zoneinfo import ZoneInfo


def parse_iso_date(value: str) -> date:
    try:
        return date.fromisoformat(value.strip())
    except ValueError as exc:
        raise ValueError(f"Invalid ISO date: {value}") from exc


@dataclass(frozen=True, slots=True)
class Period:
    """Inclusive ``[from_date, to_date]`` range of calendar days in ``tz``."""

    from_date: date
    to_date: date
    tz: ZoneInfo

    def __post_init__(self) -> None:
        if self.from_date > self.to_date:
            raise ValueError("Period start must not be after its end")

    @property
    def start(self) -> datetime:
        """First instant of the period, in UTC."""

        return datetime.combine(self.from_date, time.min, tzinfo=self.tz).astimezone(UTC)

    @property
    def end(self) -> datetime:
        """Last instant of the period, in UTC."""

        return datetime.combine(self.to_date, time.max, tzinfo=self.tz).astimezone(UTC)

    def contains(self, moment: datetime) -> bool:
        if moment.tzinfo is None:
            raise ValueError("Period checks require timezone-aware datetimes")
        return self.start <= moment.astimezone(UTC) <= self.end

    def as_dict(self) -> dict[str, str]:
        return {"from_date": self.from_date.isoformat(), "to_date": self.to_date.isoformat()}


__all__ = ["Period", "parse_iso_date"]
