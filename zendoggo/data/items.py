"""
Routine members as a closed tagged variant.

Screens that list "everything in a routine" hold RoutineItem values and
dispatch with `match`, instead of asking each object what class it is.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Union

from .models import Habit, Routine, Task


@dataclass(frozen=True)
class TaskItem:
    task: Task

    @property
    def id(self) -> str:
        return self.task.id

    @property
    def name(self) -> str:
        return self.task.name

    @property
    def is_completed(self) -> bool:
        return self.task.is_completed


@dataclass(frozen=True)
class HabitItem:
    habit: Habit

    @property
    def id(self) -> str:
        return self.habit.id

    @property
    def name(self) -> str:
        return self.habit.name

    @property
    def is_completed(self) -> bool:
        return self.habit.is_completed


RoutineItem = Union[TaskItem, HabitItem]


def items_of(routine: Routine) -> List[RoutineItem]:
    """Tasks first, then habits, each sorted by name for stable display."""
    tasks: List[RoutineItem] = [TaskItem(t) for t in sorted(routine.tasks, key=lambda t: (t.name, t.id))]
    habits: List[RoutineItem] = [HabitItem(h) for h in sorted(routine.habits, key=lambda h: (h.name, h.id))]
    return tasks + habits
