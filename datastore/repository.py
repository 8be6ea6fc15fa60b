"""Queries and writes against the readings table."""

from __future__ import annotations

from datetime import date
from typing import List, Optional, Sequence, Tuple

from sqlalchemy import distinct, func, insert, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from datastore.models import ReadingRecord
from models.records import DailyStat


class StorageError(RuntimeError):
    """Raised when the relational store cannot complete a read or write."""


class ReadingRepository:

    def __init__(self, session: Session) -> None:
        self._session = session

    def bulk_insert(self, rows: Sequence[Tuple[date, float]]) -> int:
        """Insert all rows in one statement and one transaction."""
        if not rows:
            return 0
        try:
            self._session.execute(
                insert(ReadingRecord),
                [{"date": day, "frequency": frequency} for day, frequency in rows],
            )
            self._session.commit()
        except SQLAlchemyError as exc:
            self._session.rollback()
            raise StorageError("Failed to store readings.") from exc
        return len(rows)

    def count_days(self) -> int:
        stmt = select(func.count(distinct(ReadingRecord.date)))
        try:
            return int(self._session.scalar(stmt) or 0)
        except SQLAlchemyError as exc:
            raise StorageError("Failed to query readings.") from exc

    def daily_stats(
        self, offset: int = 0, limit: Optional[int] = None
    ) -> List[DailyStat]:
        """Per-day aggregates, newest date first."""
        stmt = (
            select(
                ReadingRecord.date,
                func.min(ReadingRecord.frequency),
                func.max(ReadingRecord.frequency),
                func.count(ReadingRecord.id),
            )
            .group_by(ReadingRecord.date)
            .order_by(ReadingRecord.date.desc())
            .offset(offset)
        )
        if limit is not None:
            stmt = stmt.limit(limit)

        try:
            rows = self._session.execute(stmt).all()
        except SQLAlchemyError as exc:
            raise StorageError("Failed to query readings.") from exc

        return [
            DailyStat(
                date=day.isoformat(),
                min=float(low),
                max=float(high),
                count=int(count),
            )
            for day, low, high, count in rows
        ]

    def range_stats(
        self, start: date, end: Optional[date]
    ) -> Tuple[Optional[float], Optional[float], int]:
        """Min, max and count over ``start <= date < end``.

        A None ``end`` leaves the range open.
        """
        stmt = select(
            func.min(ReadingRecord.frequency),
            func.max(ReadingRecord.frequency),
            func.count(ReadingRecord.id),
        ).where(ReadingRecord.date >= start)
        if end is not None:
            stmt = stmt.where(ReadingRecord.date < end)

        try:
            low, high, count = self._session.execute(stmt).one()
        except SQLAlchemyError as exc:
            raise StorageError("Failed to query readings.") from exc

        if not count:
            return None, None, 0
        return float(low), float(high), int(count)
