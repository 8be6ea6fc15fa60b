"""Domain models shared across services."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True, slots=True)
class Reading:
    """A single frequency reading parsed from an uploaded text file."""

    date_key: str
    frequency: float
    line_number: int = 0


@dataclass(frozen=True, slots=True)
class DailyStat:
    date: str
    min: float
    max: float
    count: int


@dataclass(frozen=True, slots=True)
class MonthlyStat:
    month: str
    min: float
    max: float
    count: int


@dataclass(frozen=True, slots=True)
class PeriodStat:
    """Statistics for one exact day or month; empty periods carry ``None`` extremes."""

    period: str
    min: Optional[float]
    max: Optional[float]
    count: int

    @property
    def is_empty(self) -> bool:
        return self.count == 0
