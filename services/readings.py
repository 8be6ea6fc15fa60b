"""Coordinates parsing, persistence, and statistics queries for readings."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Generic, List, Optional, Tuple, TypeVar

from datastore.database import Database
from datastore.repository import ReadingRepository
from models.records import DailyStat, MonthlyStat, PeriodStat
from services.aggregator import Aggregator
from services.dates import month_bounds, month_key, resolve_date
from services.parser import ParseResult, parse_readings

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class LoadResult:
    count: int
    warnings: List[str] = field(default_factory=list)


@dataclass
class Page(Generic[T]):
    items: List[T]
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        return max(1, math.ceil(self.total / self.limit))


def decode_upload(contents: bytes) -> str:
    """Decode uploaded bytes as UTF-8 text, rejecting empty or binary input."""
    try:
        text = contents.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise ValueError("Uploaded file is not valid UTF-8 text.") from exc
    if not text:
        raise ValueError("Uploaded file is empty.")
    return text


class ReadingService:
    """Single entry point used by the HTTP API and the dashboard."""

    def __init__(self, database: Database, aggregator: Optional[Aggregator] = None) -> None:
        self.database = database
        self.aggregator = aggregator or Aggregator()

    def preview(self, text: str) -> ParseResult:
        """Parse without touching storage."""
        return parse_readings(text)

    def persist(self, result: ParseResult, filename: Optional[str] = None) -> LoadResult:
        rows: List[Tuple[date, float]] = []
        warnings = list(result.warnings)
        unsupported: set[str] = set()

        for reading in result.readings:
            try:
                day = resolve_date(reading.date_key)
            except ValueError:
                if reading.date_key not in unsupported:
                    unsupported.add(reading.date_key)
                    warnings.append(
                        f"Line {reading.line_number}: Unsupported date skipped ({reading.date_key})"
                    )
                continue
            rows.append((day, reading.frequency))

        with self.database.session() as session:
            count = ReadingRepository(session).bulk_insert(rows)

        logger.info(
            "Stored readings",
            extra={
                "upload_name": filename,
                "reading_count": count,
                "warning_count": len(warnings),
            },
        )
        return LoadResult(count=count, warnings=warnings)

    def load_text(self, text: str, filename: Optional[str] = None) -> LoadResult:
        return self.persist(self.preview(text), filename=filename)

    def daily_page(self, page: int, limit: int) -> Page[DailyStat]:
        with self.database.session() as session:
            repository = ReadingRepository(session)
            total = repository.count_days()
            items = repository.daily_stats(offset=(page - 1) * limit, limit=limit)
        logger.debug("Fetched daily stats", extra={"page": page, "limit": limit})
        return Page(items=items, total=total, page=page, limit=limit)

    def monthly_page(self, page: int, limit: int) -> Page[MonthlyStat]:
        with self.database.session() as session:
            daily = ReadingRepository(session).daily_stats()
        months = self.aggregator.monthly(daily)
        start = (page - 1) * limit
        return Page(items=months[start:start + limit], total=len(months), page=page, limit=limit)

    def month_stats(self, year: int, month: int) -> PeriodStat:
        start, end = month_bounds(year, month)
        return self._range_stats(month_key(year, month), start, end)

    def day_stats(self, year: int, month: int, day: int) -> PeriodStat:
        start = date(year, month, day)
        end = None if start == date.max else start + timedelta(days=1)
        return self._range_stats(start.isoformat(), start, end)

    def _range_stats(self, period: str, start: date, end: Optional[date]) -> PeriodStat:
        with self.database.session() as session:
            low, high, count = ReadingRepository(session).range_stats(start, end)
        logger.debug("Fetched period stats", extra={"period": period})
        return PeriodStat(period=period, min=low, max=high, count=count)
