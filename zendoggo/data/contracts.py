"""
Repository contracts — what every store must offer, whatever backs it.

Services and the UI depend on these Protocols, never on a concrete store, so
the in-memory and SQLite implementations are interchangeable at startup.

Shared rules:
  - get()/lookups return None on a miss; they never raise for "not found".
  - create() with an existing identity overwrites it (upsert).
  - update() replaces the whole record; there are no field-level patches.
  - delete() of an unknown identity is a no-op.
"""

from __future__ import annotations

from datetime import date
from typing import List, Optional, Protocol

from .models import Day, Habit, Routine, RoutineType, Task


class TaskStore(Protocol):
    def get_all(self) -> List[Task]: ...
    def get(self, task_id: str) -> Optional[Task]: ...
    def create(self, task: Task) -> None: ...
    def update(self, task: Task) -> None: ...
    def delete(self, task_id: str) -> None: ...


class HabitStore(Protocol):
    def get_all(self) -> List[Habit]: ...
    def get(self, habit_id: str) -> Optional[Habit]: ...
    def create(self, habit: Habit) -> None: ...

    def update(self, habit: Habit) -> None:
        """Replace name/description/completion. The stored streak is kept."""
        ...

    def delete(self, habit_id: str) -> None: ...

    def update_streak(self, habit_id: str, increment: bool) -> Optional[int]:
        """
        streak + 1 when increment, else reset to 0, as one atomic
        read-modify-write. Returns the new streak, or None if no such habit.
        """
        ...


class RoutineStore(Protocol):
    def get_all(self) -> List[Routine]: ...
    def get(self, routine_id: str) -> Optional[Routine]: ...
    def create(self, routine: Routine) -> None: ...

    def update(self, routine: Routine) -> None:
        """Replace the routine and its complete task/habit sets (no merging)."""
        ...

    def delete(self, routine_id: str) -> None: ...
    def get_by_type(self, routine_type: RoutineType) -> List[Routine]: ...


class DayStore(Protocol):
    def get(self, day: date) -> Optional[Day]: ...
    def create(self, day: Day) -> None: ...
    def update(self, day: Day) -> None: ...

    def get_in_range(self, start: date, end: date) -> List[Day]:
        """Days with start <= date <= end, ascending by date."""
        ...


# ---------------------------------------------------------------------------
# Explanation (for interviews)
# ---------------------------------------------------------------------------
# What this file does:
#   Declares the four store interfaces (tasks, habits, routines, days) as
#   typing.Protocol classes.
#
# Key pieces:
#   - Protocols are structural: MemoryTaskStore and SqliteTaskStore never
#     inherit from TaskStore, they just have the right methods.
#   - HabitStore.update_streak is the only field-level write in the layer.
#   - RoutineStore.get_by_type and DayStore.get_in_range are the two queries
#     the screens need beyond plain CRUD.
#
# Interviewer-friendly talking points:
#   1. bootstrap.open_stores is the only code that names a concrete class.
#   2. The same contract tests run against both backends, which is how we
#     know they are interchangeable.
