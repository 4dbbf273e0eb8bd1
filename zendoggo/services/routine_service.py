"""
Routine Service — what the routine screens do with tasks, habits and routines.

Handles: building the selection in the "add items" dialog, saving a routine's
full item sets, and the per-item actions (edit, delete, complete, streak)
that dispatch on TaskItem / HabitItem.
"""

from __future__ import annotations

import dataclasses
import logging
from typing import AbstractSet, FrozenSet, Iterable, List, Optional, TypeVar

from zendoggo.data.contracts import HabitStore, RoutineStore, TaskStore
from zendoggo.data.items import HabitItem, RoutineItem, TaskItem, items_of
from zendoggo.data.models import Habit, Routine, RoutineType, Task

logger = logging.getLogger(__name__)

T = TypeVar("T")


def toggle_selection(selection: AbstractSet[T], item: T, selected: bool) -> FrozenSet[T]:
    """Return a new selection with item added (selected) or removed."""
    if selected:
        return frozenset(selection) | {item}
    return frozenset(selection) - {item}


class RoutineService:
    def __init__(self, routines: RoutineStore, tasks: TaskStore,
                 habits: HabitStore) -> None:
        self.routines = routines
        self.tasks = tasks
        self.habits = habits

    # ── Routines ────────────────────────────────────────────────────────────

    def routines_for(self, routine_type: Optional[RoutineType] = None) -> List[Routine]:
        if routine_type is None:
            return self.routines.get_all()
        return self.routines.get_by_type(routine_type)

    def add_routine(self, routine: Routine) -> None:
        self.routines.create(routine)
        logger.info("Routine %r added (%s)", routine.name, routine.type.name)

    def save_items(self, routine: Routine, tasks: Iterable[Task],
                   habits: Iterable[Habit]) -> Routine:
        """
        Persist exactly these tasks and habits as the routine's members.

        The store replaces, it never merges, so the full desired sets are
        always sent.
        """
        updated = dataclasses.replace(
            routine, tasks=frozenset(tasks), habits=frozenset(habits)
        )
        self.routines.update(updated)
        return updated

    def delete_routine(self, routine_id: str) -> Optional[RoutineType]:
        """Delete and return the routine's type (to reload that tab), or None."""
        routine = self.routines.get(routine_id)
        if routine is None:
            return None
        self.routines.delete(routine_id)
        return routine.type

    # ── Item actions ────────────────────────────────────────────────────────

    def items_of(self, routine: Routine) -> List[RoutineItem]:
        return items_of(routine)

    def edit_item(self, item: RoutineItem) -> None:
        match item:
            case TaskItem(task=task):
                self.tasks.update(task)
            case HabitItem(habit=habit):
                self.habits.update(habit)
            case _:
                raise TypeError(f"not a routine item: {item!r}")

    def delete_item(self, item: RoutineItem) -> None:
        match item:
            case TaskItem(task=task):
                self.tasks.delete(task.id)
            case HabitItem(habit=habit):
                self.habits.delete(habit.id)
            case _:
                raise TypeError(f"not a routine item: {item!r}")

    def toggle_completed(self, item: RoutineItem) -> RoutineItem:
        """Flip completion and persist; returns the updated item."""
        match item:
            case TaskItem(task=task):
                task = dataclasses.replace(task, is_completed=not task.is_completed)
                self.tasks.update(task)
                return TaskItem(task)
            case HabitItem(habit=habit):
                habit = dataclasses.replace(habit, is_completed=not habit.is_completed)
                self.habits.update(habit)
                return HabitItem(habit)
            case _:
                raise TypeError(f"not a routine item: {item!r}")

    def increment_streak(self, item: RoutineItem) -> Optional[int]:
        """Only habits have streaks; tasks yield None."""
        match item:
            case HabitItem(habit=habit):
                return self.habits.update_streak(habit.id, increment=True)
            case TaskItem():
                return None
            case _:
                raise TypeError(f"not a routine item: {item!r}")

    def reset_streak(self, habit_id: str) -> Optional[int]:
        return self.habits.update_streak(habit_id, increment=False)


# ---------------------------------------------------------------------------
# Explanation (for interviews)
# ---------------------------------------------------------------------------
# What this file does:
#   The logic behind the routine screens, kept out of any widget so it can
#   be tested without a window.
#
# Key pieces:
#   - toggle_selection: pure function for the "add items" checkbox list.
#   - save_items: writes the full task and habit sets in one store call, so
#     the store replaces the links atomically.
#   - edit_item / delete_item / toggle_completed / increment_streak: one
#     `match` on TaskItem or HabitItem routes to the right store. Anything
#     else raises TypeError.
#
# Interviewer-friendly talking points:
#   1. The service receives store contracts, not concrete classes, so the
#     same code runs on the memory and SQLite backends.
#   2. Streaks go through update_streak, never through update(), so a
#     concurrent edit cannot clobber a count.
