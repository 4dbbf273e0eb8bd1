"""
Calendar Service — days, the routines planned on them, and how well they went.

Progress statistics work with tiny histories: a single day is enough for a
mean, and the trend is an exponential moving average biased to recent days.
"""

from __future__ import annotations

import dataclasses
import logging
from datetime import date, timedelta
from typing import Iterable, List, Tuple

import numpy as np

from zendoggo.data.contracts import DayStore
from zendoggo.data.models import Day, Routine

logger = logging.getLogger(__name__)

EMA_ALPHA = 0.3


class CalendarService:
    def __init__(self, days: DayStore) -> None:
        self.days = days

    # ── Days ────────────────────────────────────────────────────────────────

    def get_or_create_day(self, day: date) -> Day:
        existing = self.days.get(day)
        if existing is not None:
            return existing
        created = Day.new(day)
        self.days.create(created)
        return created

    def assign_routines(self, day: date, routines: Iterable[Routine]) -> Day:
        """Replace the routines planned for a date (creating the Day if needed)."""
        updated = dataclasses.replace(self.get_or_create_day(day),
                                      routines=tuple(routines))
        self.days.update(updated)
        logger.debug("Day %s now has %d routines", day, len(updated.routines))
        return updated

    def days_in_range(self, start: date, end: date) -> List[Day]:
        return self.days.get_in_range(start, end)

    # ── Progress ────────────────────────────────────────────────────────────

    def progress_series(self, start: date, end: date) -> List[Tuple[date, float]]:
        """One (date, progress) per calendar day; days never planned count as 0."""
        if end < start:
            return []
        known = {d.date: d.progress for d in self.days.get_in_range(start, end)}
        span = (end - start).days + 1
        return [
            (start + timedelta(days=i), known.get(start + timedelta(days=i), 0.0))
            for i in range(span)
        ]

    def progress_summary(self, start: date, end: date) -> dict:
        series = self.progress_series(start, end)
        if not series:
            return self._empty_summary()
        values = np.array([p for _, p in series], dtype=float)
        return {
            "day_count": int(values.size),
            "mean_progress": float(np.mean(values)),
            "trend": self._exponential_moving_average(values),
            "completed_days": int(np.count_nonzero(values >= 1.0)),
            "best_day": series[int(np.argmax(values))][0],
        }

    @staticmethod
    def _exponential_moving_average(values, alpha: float = EMA_ALPHA) -> float:
        values = np.asarray(values, dtype=float)
        ema = values[0]
        for v in values[1:]:
            ema = alpha * v + (1 - alpha) * ema
        return float(ema)

    @staticmethod
    def _empty_summary() -> dict:
        return {
            "day_count": 0,
            "mean_progress": None,
            "trend": None,
            "completed_days": 0,
            "best_day": None,
        }


# ---------------------------------------------------------------------------
# Explanation (for interviews)
# ---------------------------------------------------------------------------
# What this file does:
#   Plans routines onto calendar days and summarises how complete those
#   days were.
#
# Key pieces:
#   - get_or_create_day / assign_routines: at most one Day per date.
#   - progress_series: one value per calendar day; unplanned days count as 0.
#   - progress_summary: numpy mean, count of fully completed days, best day,
#     and an EMA trend.
#
# Interviewer-friendly talking points:
#   1. EMA (alpha 0.3) weights recent days more than a plain mean, so the
#     trend reacts to a bad week faster.
#   2. An empty or reversed range returns the empty summary, not an error.
