"""
Repository — the single place where SQL lives.

Durable implementations of the TaskStore, HabitStore and RoutineStore
contracts on top of a shared Database. Routine membership is stored only in
the routine_task / routine_habit link tables; a Routine's tasks and habits
are rebuilt from those tables every time it is read.
"""

from __future__ import annotations

import logging
import sqlite3
from typing import Dict, List, Optional, Sequence, Tuple

from .codecs import (
    decode_optional_time,
    decode_optional_timestamp,
    decode_timestamp,
    encode_optional_time,
    encode_optional_timestamp,
    encode_timestamp,
)
from .database import Database
from .models import Habit, Routine, RoutineType, Task

logger = logging.getLogger(__name__)


# ── Row mappers ─────────────────────────────────────────────────────────────

def _row_to_task(row: sqlite3.Row) -> Task:
    return Task(
        id=row["id"], name=row["name"],
        description=row["description"] or "",
        is_completed=bool(row["is_completed"]),
        created_at=decode_timestamp(row["created_at"]),
        scheduled_time=decode_optional_timestamp(row["scheduled_time"]),
    )


def _row_to_habit(row: sqlite3.Row) -> Habit:
    return Habit(
        id=row["id"], name=row["name"],
        description=row["description"] or "",
        streak=int(row["streak"] or 0),
        is_completed=bool(row["is_completed"]),
        created_at=decode_timestamp(row["created_at"]),
    )


class SqliteTaskStore:
    """TaskStore backed by the `task` table."""

    def __init__(self, db: Database) -> None:
        self.db = db

    def get_all(self) -> List[Task]:
        with self.db.transaction(write=False) as conn:
            rows = conn.execute(
                "SELECT * FROM task ORDER BY created_at, id"
            ).fetchall()
        return [_row_to_task(r) for r in rows]

    def get(self, task_id: str) -> Optional[Task]:
        with self.db.transaction(write=False) as conn:
            row = conn.execute(
                "SELECT * FROM task WHERE id = ?", (task_id,)
            ).fetchone()
        return _row_to_task(row) if row else None

    def create(self, task: Task) -> None:
        with self.db.transaction() as conn:
            conn.execute(
                """INSERT INTO task
                       (id, name, description, is_completed, created_at, scheduled_time)
                   VALUES (?, ?, ?, ?, ?, ?)
                   ON CONFLICT(id) DO UPDATE SET
                       name = excluded.name,
                       description = excluded.description,
                       is_completed = excluded.is_completed,
                       created_at = excluded.created_at,
                       scheduled_time = excluded.scheduled_time""",
                (
                    task.id, task.name, task.description, int(task.is_completed),
                    encode_timestamp(task.created_at),
                    encode_optional_timestamp(task.scheduled_time),
                ),
            )
        logger.debug("Task saved id=%s", task.id)

    def update(self, task: Task) -> None:
        with self.db.transaction() as conn:
            cur = conn.execute(
                """UPDATE task SET
                       name = ?, description = ?, is_completed = ?, scheduled_time = ?
                   WHERE id = ?""",
                (
                    task.name, task.description, int(task.is_completed),
                    encode_optional_timestamp(task.scheduled_time), task.id,
                ),
            )
        if cur.rowcount == 0:
            logger.debug("Task update ignored, no row id=%s", task.id)

    def delete(self, task_id: str) -> None:
        # link rows go with it via ON DELETE CASCADE
        with self.db.transaction() as conn:
            cur = conn.execute("DELETE FROM task WHERE id = ?", (task_id,))
        if cur.rowcount:
            logger.info("Deleted task %s", task_id)


class SqliteHabitStore:
    """HabitStore backed by the `habit` table."""

    def __init__(self, db: Database) -> None:
        self.db = db

    def get_all(self) -> List[Habit]:
        with self.db.transaction(write=False) as conn:
            rows = conn.execute(
                "SELECT * FROM habit ORDER BY created_at, id"
            ).fetchall()
        return [_row_to_habit(r) for r in rows]

    def get(self, habit_id: str) -> Optional[Habit]:
        with self.db.transaction(write=False) as conn:
            row = conn.execute(
                "SELECT * FROM habit WHERE id = ?", (habit_id,)
            ).fetchone()
        return _row_to_habit(row) if row else None

    def create(self, habit: Habit) -> None:
        with self.db.transaction() as conn:
            conn.execute(
                """INSERT INTO habit
                       (id, name, description, streak, is_completed, created_at)
                   VALUES (?, ?, ?, ?, ?, ?)
                   ON CONFLICT(id) DO UPDATE SET
                       name = excluded.name,
                       description = excluded.description,
                       streak = excluded.streak,
                       is_completed = excluded.is_completed,
                       created_at = excluded.created_at""",
                (
                    habit.id, habit.name, habit.description, habit.streak,
                    int(habit.is_completed), encode_timestamp(habit.created_at),
                ),
            )
        logger.debug("Habit saved id=%s", habit.id)

    def update(self, habit: Habit) -> None:
        # streak is deliberately absent: only update_streak() moves it
        with self.db.transaction() as conn:
            conn.execute(
                "UPDATE habit SET name = ?, description = ?, is_completed = ? WHERE id = ?",
                (habit.name, habit.description, int(habit.is_completed), habit.id),
            )

    def delete(self, habit_id: str) -> None:
        with self.db.transaction() as conn:
            cur = conn.execute("DELETE FROM habit WHERE id = ?", (habit_id,))
        if cur.rowcount:
            logger.info("Deleted habit %s", habit_id)

    def update_streak(self, habit_id: str, increment: bool) -> Optional[int]:
        with self.db.transaction() as conn:
            row = conn.execute(
                "SELECT streak FROM habit WHERE id = ?", (habit_id,)
            ).fetchone()
            if row is None:
                logger.debug("update_streak: no habit %s", habit_id)
                return None
            new_streak = row["streak"] + 1 if increment else 0
            conn.execute(
                "UPDATE habit SET streak = ? WHERE id = ?", (new_streak, habit_id)
            )
        logger.debug("Habit %s streak -> %d", habit_id, new_streak)
        return new_streak


# Both link tables in one pass; exactly one of task_id / habit_id is set per row.
_ROUTINE_ITEMS_SQL = """
SELECT rt.routine_id AS routine_id,
       t.id AS task_id, NULL AS habit_id,
       t.name, t.description, t.is_completed, t.created_at, t.scheduled_time,
       NULL AS streak
  FROM routine_task rt JOIN task t ON t.id = rt.task_id
 {task_where}
UNION ALL
SELECT rh.routine_id AS routine_id,
       NULL AS task_id, h.id AS habit_id,
       h.name, h.description, h.is_completed, h.created_at, NULL AS scheduled_time,
       h.streak
  FROM routine_habit rh JOIN habit h ON h.id = rh.habit_id
 {habit_where}
"""

_Items = Tuple[List[Task], List[Habit]]


class SqliteRoutineStore:
    """
    RoutineStore backed by `routine` plus the two link tables.

    Writes replace the whole link set inside one transaction; reads hydrate
    full Task/Habit records by joining the link rows against their tables.
    """

    def __init__(self, db: Database) -> None:
        self.db = db

    # ── Reads ───────────────────────────────────────────────────────────────

    def get_all(self) -> List[Routine]:
        with self.db.transaction(write=False) as conn:
            rows = conn.execute(
                "SELECT * FROM routine ORDER BY created_at, id"
            ).fetchall()
            items = self._fetch_items(conn, "", ())
        return [self._row_to_routine(r, items) for r in rows]

    def get(self, routine_id: str) -> Optional[Routine]:
        with self.db.transaction(write=False) as conn:
            row = conn.execute(
                "SELECT * FROM routine WHERE id = ?", (routine_id,)
            ).fetchone()
            if row is None:
                return None
            items = self._fetch_items(conn, "WHERE {link}.routine_id = ?", (routine_id,))
        return self._row_to_routine(row, items)

    def get_by_type(self, routine_type: RoutineType) -> List[Routine]:
        with self.db.transaction(write=False) as conn:
            rows = conn.execute(
                "SELECT * FROM routine WHERE type = ? ORDER BY created_at, id",
                (routine_type.name,),
            ).fetchall()
            items = self._fetch_items(
                conn,
                "WHERE {link}.routine_id IN (SELECT id FROM routine WHERE type = ?)",
                (routine_type.name,),
            )
        return [self._row_to_routine(r, items) for r in rows]

    # ── Writes ──────────────────────────────────────────────────────────────

    def create(self, routine: Routine) -> None:
        with self.db.transaction() as conn:
            conn.execute(
                """INSERT INTO routine
                       (id, name, type, start_time, end_time, created_at)
                   VALUES (?, ?, ?, ?, ?, ?)
                   ON CONFLICT(id) DO UPDATE SET
                       name = excluded.name,
                       type = excluded.type,
                       start_time = excluded.start_time,
                       end_time = excluded.end_time,
                       created_at = excluded.created_at""",
                (
                    routine.id, routine.name, routine.type.name,
                    encode_optional_time(routine.start_time),
                    encode_optional_time(routine.end_time),
                    encode_timestamp(routine.created_at),
                ),
            )
            # a duplicate create overwrites, so links are replaced as well
            self._replace_links(conn, routine)
        logger.debug("Routine created id=%s tasks=%d habits=%d",
                     routine.id, len(routine.tasks), len(routine.habits))

    def update(self, routine: Routine) -> None:
        with self.db.transaction() as conn:
            cur = conn.execute(
                """UPDATE routine SET
                       name = ?, type = ?, start_time = ?, end_time = ?
                   WHERE id = ?""",
                (
                    routine.name, routine.type.name,
                    encode_optional_time(routine.start_time),
                    encode_optional_time(routine.end_time),
                    routine.id,
                ),
            )
            if cur.rowcount == 0:
                logger.debug("Routine update ignored, no row id=%s", routine.id)
                return
            self._replace_links(conn, routine)
        logger.debug("Routine updated id=%s tasks=%d habits=%d",
                     routine.id, len(routine.tasks), len(routine.habits))

    def delete(self, routine_id: str) -> None:
        with self.db.transaction() as conn:
            conn.execute("DELETE FROM routine_task WHERE routine_id = ?", (routine_id,))
            conn.execute("DELETE FROM routine_habit WHERE routine_id = ?", (routine_id,))
            cur = conn.execute("DELETE FROM routine WHERE id = ?", (routine_id,))
        if cur.rowcount:
            logger.info("Deleted routine %s", routine_id)

    # ── Internal ────────────────────────────────────────────────────────────

    @staticmethod
    def _replace_links(conn: sqlite3.Connection, routine: Routine) -> None:
        """Full replacement of both link sets; caller owns the transaction."""
        conn.execute("DELETE FROM routine_task WHERE routine_id = ?", (routine.id,))
        conn.execute("DELETE FROM routine_habit WHERE routine_id = ?", (routine.id,))
        conn.executemany(
            "INSERT INTO routine_task (routine_id, task_id) VALUES (?, ?)",
            [(routine.id, task_id) for task_id in sorted(routine.task_ids)],
        )
        conn.executemany(
            "INSERT INTO routine_habit (routine_id, habit_id) VALUES (?, ?)",
            [(routine.id, habit_id) for habit_id in sorted(routine.habit_ids)],
        )

    @staticmethod
    def _fetch_items(conn: sqlite3.Connection, where: str,
                     params: Sequence) -> Dict[str, _Items]:
        """Link rows grouped by routine id, partitioned into tasks and habits."""
        sql = _ROUTINE_ITEMS_SQL.format(
            task_where=where.format(link="rt"),
            habit_where=where.format(link="rh"),
        )
        grouped: Dict[str, _Items] = {}
        for row in conn.execute(sql, (*params, *params)).fetchall():
            tasks, habits = grouped.setdefault(row["routine_id"], ([], []))
            if row["task_id"] is not None:
                tasks.append(Task(
                    id=row["task_id"], name=row["name"],
                    description=row["description"] or "",
                    is_completed=bool(row["is_completed"]),
                    created_at=decode_timestamp(row["created_at"]),
                    scheduled_time=decode_optional_timestamp(row["scheduled_time"]),
                ))
            elif row["habit_id"] is not None:
                habits.append(Habit(
                    id=row["habit_id"], name=row["name"],
                    description=row["description"] or "",
                    streak=int(row["streak"] or 0),
                    is_completed=bool(row["is_completed"]),
                    created_at=decode_timestamp(row["created_at"]),
                ))
        return grouped

    @staticmethod
    def _row_to_routine(row: sqlite3.Row, items: Dict[str, _Items]) -> Routine:
        tasks, habits = items.get(row["id"], ([], []))
        return Routine(
            id=row["id"], name=row["name"],
            type=RoutineType[row["type"]],
            tasks=frozenset(tasks), habits=frozenset(habits),
            start_time=decode_optional_time(row["start_time"]),
            end_time=decode_optional_time(row["end_time"]),
            created_at=decode_timestamp(row["created_at"]),
        )


# ---------------------------------------------------------------------------
# Explanation (for interviews)
# ---------------------------------------------------------------------------
# What this file does:
#   The durable stores are the ONLY place raw SQL lives. Services call
#   store.get()/create()/update() and get frozen dataclasses back.
#
# Key methods:
#   - SqliteRoutineStore.create/update: upsert the routine row, wipe its
#     link rows, insert one link per attached task/habit. One transaction,
#     so a reader never sees half the old links and half the new ones.
#   - SqliteRoutineStore._fetch_items: one UNION ALL over both link tables,
#     joined to the full task/habit rows, grouped by routine id. get_all()
#     hydrates every routine from a single query instead of N+1.
#   - SqliteHabitStore.update_streak: read and write inside the same
#     BEGIN IMMEDIATE transaction, so two concurrent increments both count.
#
# Data flow:
#   Service -> Store.method() -> Database.transaction() -> SQL
#   -> sqlite3.Row -> codecs -> dataclass model
#
# Interviewer-friendly talking points:
#   1. Link tables are authoritative. Routine.tasks is a read-time view,
#      which is why update() demands the complete desired set every time.
#   2. ON CONFLICT(id) DO UPDATE instead of INSERT OR REPLACE: REPLACE
#      deletes the old row first, which would fire the link cascades.
#   3. Full link replacement instead of diffing: simpler, and routines hold
#      a handful of items, so rewriting them costs nothing noticeable.
