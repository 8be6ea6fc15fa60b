"""Pydantic schemas for the HTTP API layer."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from models.records import DailyStat, MonthlyStat, PeriodStat


class LoadDataResponse(BaseModel):
    """Response payload after storing an uploaded file."""

    message: str
    count: int = Field(..., ge=0, description="Number of readings persisted.")
    warnings: List[str] = Field(default_factory=list)


class StatRow(BaseModel):
    """Min/max/count for one day (``YYYY-MM-DD``) or month (``YYYY-MM``)."""

    date: str
    min: Optional[float] = None
    max: Optional[float] = None
    count: int = Field(..., ge=0)

    @classmethod
    def from_daily(cls, stat: DailyStat) -> "StatRow":
        return cls(date=stat.date, min=stat.min, max=stat.max, count=stat.count)

    @classmethod
    def from_monthly(cls, stat: MonthlyStat) -> "StatRow":
        return cls(date=stat.month, min=stat.min, max=stat.max, count=stat.count)

    @classmethod
    def from_period(cls, stat: PeriodStat) -> "StatRow":
        return cls(date=stat.period, min=stat.min, max=stat.max, count=stat.count)


class PageMeta(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total: int = Field(..., ge=0)
    page: int = Field(..., ge=1)
    total_pages: int = Field(..., ge=1, alias="totalPages")


class StatsPage(BaseModel):
    data: List[StatRow]
    meta: PageMeta


class PeriodResponse(BaseModel):
    """Aggregate for a single day or month; ``min``/``max`` are null when empty."""

    period: str
    min: Optional[float] = None
    max: Optional[float] = None
    count: int = Field(..., ge=0)

    @classmethod
    def from_stat(cls, stat: PeriodStat) -> "PeriodResponse":
        return cls(period=stat.period, min=stat.min, max=stat.max, count=stat.count)


class ParsePreviewResponse(BaseModel):
    """Locally parsed statistics for a file that was not stored."""

    count: int = Field(..., ge=0)
    warnings: List[str] = Field(default_factory=list)
    daily: List[StatRow] = Field(default_factory=list)
    monthly: List[StatRow] = Field(default_factory=list)
