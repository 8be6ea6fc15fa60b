"""ORM table definitions."""

from __future__ import annotations

import datetime as dt

from sqlalchemy import Date, Float, Index, Integer
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


class ReadingRecord(Base):
    """One stored frequency reading, keyed by calendar day."""

    __tablename__ = "readings"
    __table_args__ = (Index("idx_readings_date", "date"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    frequency: Mapped[float] = mapped_column(Float, nullable=False)

    def __repr__(self) -> str:
        return f"ReadingRecord(id={self.id!r}, date={self.date!r}, frequency={self.frequency!r})"
