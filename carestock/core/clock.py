"""Date source used when purchase and usage events are stamped."""
from __future__ import annotations

import datetime
from typing import NamedTuple, Protocol


class Clock(Protocol):
    def today(self) -> datetime.date: ...


class SystemClock:
    """Local calendar date of the running process."""

    def today(self) -> datetime.date:
        return datetime.date.today()


class FixedClock:
    """Clock pinned to a given day; tests move it explicitly."""

    def __init__(self, day: datetime.date):
        self._day = day

    def today(self) -> datetime.date:
        return self._day

    def set(self, day: datetime.date) -> None:
        self._day = day

    def advance(self, days: int = 1) -> datetime.date:
        self._day = self._day + datetime.timedelta(days=days)
        return self._day


class MonthKey(NamedTuple):
    """Calendar year-month; orders chronologically."""

    year: int
    month: int

    @classmethod
    def of(cls, day: datetime.date) -> "MonthKey":
        return cls(day.year, day.month)

    @classmethod
    def parse(cls, text: str) -> "MonthKey":
        year, _, month = (text or "").strip().partition("-")
        key = cls(int(year), int(month))
        if not 1 <= key.month <= 12:
            raise ValueError(f"month out of range: {text!r}")
        return key

    def __str__(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"
