"""
Composition root — the one place that picks concrete stores.

Everything downstream receives a Stores bundle and only sees the contracts.
The entry point owns the bundle and closes it on shutdown.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .config import BACKEND_MEMORY, DEFAULT_CONFIG
from .data.contracts import DayStore, HabitStore, RoutineStore, TaskStore
from .data.database import Database
from .data.memory_store import (
    MemoryDayStore,
    MemoryHabitStore,
    MemoryRoutineStore,
    MemoryTaskStore,
)
from .data.repository import SqliteHabitStore, SqliteRoutineStore, SqliteTaskStore

logger = logging.getLogger(__name__)


@dataclass
class Stores:
    tasks: TaskStore
    habits: HabitStore
    routines: RoutineStore
    days: DayStore
    db: Optional[Database] = None

    def close(self) -> None:
        if self.db is not None:
            self.db.close()


def open_stores(config: Optional[dict] = None) -> Stores:
    config = config or DEFAULT_CONFIG
    # days have no table in the schema; they stay in memory for both backends
    days = MemoryDayStore()

    if config.get("backend") == BACKEND_MEMORY:
        logger.info("Using in-memory stores.")
        return Stores(
            tasks=MemoryTaskStore(),
            habits=MemoryHabitStore(),
            routines=MemoryRoutineStore(),
            days=days,
        )

    db = Database(Path(config.get("db_path") or DEFAULT_CONFIG["db_path"]))
    logger.info("Using SQLite stores at %s", db.db_path)
    return Stores(
        tasks=SqliteTaskStore(db),
        habits=SqliteHabitStore(db),
        routines=SqliteRoutineStore(db),
        days=days,
        db=db,
    )
