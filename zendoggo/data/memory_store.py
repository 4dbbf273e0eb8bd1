"""
In-memory stores — one dict per entity kind, gone when the process exits.

Used for throwaway sessions and tests. There is no cross-entity integrity:
a Routine keeps the Task/Habit snapshots it was saved with, even if those
items are later edited or deleted in their own stores.
"""

from __future__ import annotations

import dataclasses
import logging
import threading
from datetime import date
from typing import Dict, List, Optional

from .models import Day, Habit, Routine, RoutineType, Task

logger = logging.getLogger(__name__)


class MemoryTaskStore:
    def __init__(self) -> None:
        self._tasks: Dict[str, Task] = {}
        self._lock = threading.Lock()

    def get_all(self) -> List[Task]:
        with self._lock:
            return list(self._tasks.values())

    def get(self, task_id: str) -> Optional[Task]:
        with self._lock:
            return self._tasks.get(task_id)

    def create(self, task: Task) -> None:
        with self._lock:
            self._tasks[task.id] = task

    def update(self, task: Task) -> None:
        with self._lock:
            self._tasks[task.id] = task

    def delete(self, task_id: str) -> None:
        with self._lock:
            self._tasks.pop(task_id, None)


class MemoryHabitStore:
    def __init__(self) -> None:
        self._habits: Dict[str, Habit] = {}
        self._lock = threading.Lock()

    def get_all(self) -> List[Habit]:
        with self._lock:
            return list(self._habits.values())

    def get(self, habit_id: str) -> Optional[Habit]:
        with self._lock:
            return self._habits.get(habit_id)

    def create(self, habit: Habit) -> None:
        with self._lock:
            self._habits[habit.id] = habit

    def update(self, habit: Habit) -> None:
        with self._lock:
            existing = self._habits.get(habit.id)
            if existing is not None:
                # streak only moves through update_streak()
                habit = dataclasses.replace(habit, streak=existing.streak)
            self._habits[habit.id] = habit

    def delete(self, habit_id: str) -> None:
        with self._lock:
            self._habits.pop(habit_id, None)

    def update_streak(self, habit_id: str, increment: bool) -> Optional[int]:
        with self._lock:
            habit = self._habits.get(habit_id)
            if habit is None:
                logger.debug("update_streak: no habit %s", habit_id)
                return None
            new_streak = habit.streak + 1 if increment else 0
            self._habits[habit_id] = dataclasses.replace(habit, streak=new_streak)
            return new_streak


class MemoryRoutineStore:
    def __init__(self) -> None:
        self._routines: Dict[str, Routine] = {}
        self._lock = threading.Lock()

    def get_all(self) -> List[Routine]:
        with self._lock:
            return list(self._routines.values())

    def get(self, routine_id: str) -> Optional[Routine]:
        with self._lock:
            return self._routines.get(routine_id)

    def create(self, routine: Routine) -> None:
        with self._lock:
            self._routines[routine.id] = routine

    def update(self, routine: Routine) -> None:
        with self._lock:
            self._routines[routine.id] = routine

    def delete(self, routine_id: str) -> None:
        with self._lock:
            self._routines.pop(routine_id, None)

    def get_by_type(self, routine_type: RoutineType) -> List[Routine]:
        with self._lock:
            return [r for r in self._routines.values() if r.type == routine_type]


class MemoryDayStore:
    """Keyed by date, so a second Day for the same date replaces the first."""

    def __init__(self) -> None:
        self._days: Dict[date, Day] = {}
        self._lock = threading.Lock()

    def get(self, day: date) -> Optional[Day]:
        with self._lock:
            return self._days.get(day)

    def create(self, day: Day) -> None:
        with self._lock:
            self._days[day.date] = day

    def update(self, day: Day) -> None:
        self.create(day)

    def get_in_range(self, start: date, end: date) -> List[Day]:
        with self._lock:
            hits = [d for d in self._days.values() if start <= d.date <= end]
        return sorted(hits, key=lambda d: d.date)


# ---------------------------------------------------------------------------
# Explanation (for interviews)
# ---------------------------------------------------------------------------
# What this file does:
#   Dict-backed stores for the "memory" backend and for tests.
#
# Key pieces:
#   - One dict and one lock per store. Every method holds the lock, so the
#     worker pool can call them from several threads.
#   - MemoryHabitStore keeps the stored streak on update(); only
#     update_streak() changes it, same as the SQLite store.
#   - MemoryDayStore is keyed by date, so there is at most one Day per date.
#
# Interviewer-friendly talking points:
#   1. Routines hold frozen Task/Habit values, so a routine here is a
#      snapshot. Deleting or renaming a task later does not reach into it.
#      The SQLite store joins live rows instead, so there the change shows.
#   2. update() of an unknown id inserts it, which is plain dict behaviour.
