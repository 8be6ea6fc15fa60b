"""Aggregation logic for frequency readings."""

from __future__ import annotations

from typing import Dict, Iterable, List

from models.records import DailyStat, MonthlyStat, PeriodStat, Reading


class Aggregator:
    """Pure aggregation component that can be unit tested in isolation."""

    def daily(self, readings: Iterable[Reading]) -> List[DailyStat]:
        """Per-day min/max/count, newest date first."""
        groups: Dict[str, List[float]] = {}
        for reading in readings:
            groups.setdefault(reading.date_key, []).append(reading.frequency)

        stats = [
            DailyStat(date=key, min=min(values), max=max(values), count=len(values))
            for key, values in groups.items()
        ]
        stats.sort(key=lambda stat: stat.date, reverse=True)
        return stats

    def monthly(self, daily_stats: Iterable[DailyStat]) -> List[MonthlyStat]:
        """Roll daily stats up into calendar months, newest month first."""
        months: Dict[str, MonthlyStat] = {}
        for stat in daily_stats:
            if stat.count == 0:
                continue
            key = stat.date[:7]
            current = months.get(key)
            if current is None:
                months[key] = MonthlyStat(
                    month=key, min=stat.min, max=stat.max, count=stat.count
                )
                continue
            months[key] = MonthlyStat(
                month=key,
                min=min(current.min, stat.min),
                max=max(current.max, stat.max),
                count=current.count + stat.count,
            )

        return sorted(months.values(), key=lambda stat: stat.month, reverse=True)

    def monthly_from_readings(self, readings: Iterable[Reading]) -> List[MonthlyStat]:
        return self.monthly(self.daily(readings))

    def period(self, readings: Iterable[Reading], key: str) -> PeriodStat:
        """Stats for one exact day (``YYYY-MM-DD``) or month (``YYYY-MM``)."""
        if len(key) == 7:
            values = [r.frequency for r in readings if r.date_key[:7] == key]
        else:
            values = [r.frequency for r in readings if r.date_key == key]

        if not values:
            return PeriodStat(period=key, min=None, max=None, count=0)
        return PeriodStat(period=key, min=min(values), max=max(values), count=len(values))

    def filter_daily(self, stats: Iterable[DailyStat], term: str) -> List[DailyStat]:
        needle = term.strip()
        if not needle:
            return list(stats)
        return [stat for stat in stats if needle in stat.date]
