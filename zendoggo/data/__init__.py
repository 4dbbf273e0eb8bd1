from .database import Database
from .models import Day, Habit, Routine, RoutineType, Task
from .items import HabitItem, RoutineItem, TaskItem
from .memory_store import MemoryDayStore, MemoryHabitStore, MemoryRoutineStore, MemoryTaskStore
from .repository import SqliteHabitStore, SqliteRoutineStore, SqliteTaskStore

__all__ = [
    "Database", "Day", "Habit", "Routine", "RoutineType", "Task",
    "HabitItem", "RoutineItem", "TaskItem",
    "MemoryDayStore", "MemoryHabitStore", "MemoryRoutineStore", "MemoryTaskStore",
    "SqliteHabitStore", "SqliteRoutineStore", "SqliteTaskStore",
]
