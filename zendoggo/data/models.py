"""
Data models for ZenDoggo.

Immutable value records for every item the tracker knows about. Stores hand
these back and forth; nothing in here touches SQL or the UI.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import date, datetime, time, timezone
from enum import Enum
from typing import FrozenSet, Optional, Tuple


def new_id() -> str:
    """Fresh opaque identity for a new entity."""
    return str(uuid.uuid4())


def utc_now() -> datetime:
    """Current UTC time at whole-second resolution (what the DB can hold)."""
    return datetime.now(timezone.utc).replace(microsecond=0)


class RoutineType(Enum):
    MORNING = "MORNING"
    AFTERNOON = "AFTERNOON"
    EVENING = "EVENING"
    NIGHT = "NIGHT"


@dataclass(frozen=True)
class Task:
    """A one-off to-do item."""
    id: str
    name: str
    created_at: datetime
    description: str = ""
    is_completed: bool = False
    scheduled_time: Optional[datetime] = None

    @classmethod
    def new(cls, name: str, description: str = "",
            scheduled_time: Optional[datetime] = None) -> "Task":
        return cls(id=new_id(), name=name, created_at=utc_now(),
                   description=description, scheduled_time=scheduled_time)


@dataclass(frozen=True)
class Habit:
    """A repeated behaviour with a streak counter."""
    id: str
    name: str
    created_at: datetime
    description: str = ""
    streak: int = 0
    is_completed: bool = False

    @classmethod
    def new(cls, name: str, description: str = "", streak: int = 0) -> "Habit":
        return cls(id=new_id(), name=name, created_at=utc_now(),
                   description=description, streak=streak)


@dataclass(frozen=True)
class Routine:
    """
    A named container of tasks and habits for one part of the day.

    tasks/habits are sets: order is irrelevant and the same item can only be
    attached once. They are view-time snapshots; the store decides what is
    actually linked.
    """
    id: str
    name: str
    type: RoutineType
    created_at: datetime
    tasks: FrozenSet[Task] = field(default_factory=frozenset)
    habits: FrozenSet[Habit] = field(default_factory=frozenset)
    start_time: Optional[time] = None
    end_time: Optional[time] = None

    @classmethod
    def new(cls, name: str, type: RoutineType,
            tasks=(), habits=(),
            start_time: Optional[time] = None,
            end_time: Optional[time] = None) -> "Routine":
        return cls(id=new_id(), name=name, type=type, created_at=utc_now(),
                   tasks=frozenset(tasks), habits=frozenset(habits),
                   start_time=start_time, end_time=end_time)

    @property
    def task_ids(self) -> FrozenSet[str]:
        return frozenset(t.id for t in self.tasks)

    @property
    def habit_ids(self) -> FrozenSet[str]:
        return frozenset(h.id for h in self.habits)


@dataclass(frozen=True)
class Day:
    """A calendar date and the routines planned for it."""
    id: str
    date: date
    routines: Tuple[Routine, ...] = ()

    @classmethod
    def new(cls, day: date, routines=()) -> "Day":
        return cls(id=new_id(), date=day, routines=tuple(routines))

    @property
    def progress(self) -> float:
        """Completed items / all items across every routine; 0.0 when empty."""
        total = sum(len(r.tasks) + len(r.habits) for r in self.routines)
        if total == 0:
            return 0.0
        done = sum(
            sum(1 for t in r.tasks if t.is_completed)
            + sum(1 for h in r.habits if h.is_completed)
            for r in self.routines
        )
        return done / total


# ---------------------------------------------------------------------------
# Explanation (for interviews)
# ---------------------------------------------------------------------------
# What this file does:
#   Defines the "shape" of Task, Habit, Routine and Day as frozen dataclasses.
#   They carry data only; stores and services do everything else.
#
# Key decisions:
#   - frozen=True gives value equality AND hashing on every field, so a Task
#     can sit in a Routine's frozenset and the "add items" dialog can toggle
#     it in and out of a selection set by plain equality.
#   - Identity and created_at are supplied by the caller (the new()
#     factories are the convenient way). Stores never invent them.
#   - utc_now() drops microseconds because the database stores whole epoch
#     seconds; a record written and read back compares equal.
#
# Interviewer-friendly talking points:
#   1. Immutability: "editing" a Task means dataclasses.replace() and an
#      update() call with the whole new record. No partial patches.
#   2. Day.progress guards the empty case instead of dividing by zero.
