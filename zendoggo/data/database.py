"""
SQLite database initialization and connection management.

Single responsibility: own the connection, create tables, hand out
transaction scopes. All actual queries live in repository.py.
"""

from __future__ import annotations

import logging
import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

logger = logging.getLogger(__name__)

# Default DB lives in the working directory the app is launched from
DEFAULT_DB_PATH = Path("zendoggo.db")
MEMORY_DB = ":memory:"

SCHEMA_SQL = """
-- Tasks ---------------------------------------------------------------------
CREATE TABLE IF NOT EXISTS task (
    id              TEXT    PRIMARY KEY NOT NULL,
    name            TEXT    NOT NULL,
    description     TEXT    NOT NULL DEFAULT '',
    is_completed    INTEGER NOT NULL DEFAULT 0,
    created_at      INTEGER NOT NULL,
    scheduled_time  INTEGER
);

-- Habits --------------------------------------------------------------------
CREATE TABLE IF NOT EXISTS habit (
    id              TEXT    PRIMARY KEY NOT NULL,
    name            TEXT    NOT NULL,
    description     TEXT    NOT NULL DEFAULT '',
    streak          INTEGER NOT NULL DEFAULT 0,
    is_completed    INTEGER NOT NULL DEFAULT 0,
    created_at      INTEGER NOT NULL
);

-- Routines ------------------------------------------------------------------
CREATE TABLE IF NOT EXISTS routine (
    id              TEXT    PRIMARY KEY NOT NULL,
    name            TEXT    NOT NULL,
    type            TEXT    NOT NULL,
    start_time      INTEGER,
    end_time        INTEGER,
    created_at      INTEGER NOT NULL
);

-- Routine <-> Task / Habit links ---------------------------------------------
CREATE TABLE IF NOT EXISTS routine_task (
    routine_id  TEXT NOT NULL REFERENCES routine(id) ON DELETE CASCADE,
    task_id     TEXT NOT NULL REFERENCES task(id)    ON DELETE CASCADE,
    PRIMARY KEY (routine_id, task_id)
);

CREATE TABLE IF NOT EXISTS routine_habit (
    routine_id  TEXT NOT NULL REFERENCES routine(id) ON DELETE CASCADE,
    habit_id    TEXT NOT NULL REFERENCES habit(id)   ON DELETE CASCADE,
    PRIMARY KEY (routine_id, habit_id)
);

-- Indexes for common queries -------------------------------------------------
CREATE INDEX IF NOT EXISTS idx_routine_type        ON routine(type);
CREATE INDEX IF NOT EXISTS idx_routine_task_task   ON routine_task(task_id);
CREATE INDEX IF NOT EXISTS idx_routine_habit_habit ON routine_habit(habit_id);
"""


class Database:
    """
    Owns the one SQLite connection the whole process shares.

    The connection is opened lazily on first use, exactly once, and the
    schema is ensured before anything else can run on it. A re-entrant lock
    serializes every statement and transaction on the shared connection.
    """

    def __init__(self, db_path: Optional[Path] = None) -> None:
        self.db_path = db_path or DEFAULT_DB_PATH
        self.conn: Optional[sqlite3.Connection] = None
        self._lock = threading.RLock()

    # -- lifecycle -----------------------------------------------------------

    def connect(self) -> sqlite3.Connection:
        """Open (or return existing) connection and ensure schema exists."""
        with self._lock:
            if self.conn is not None:
                return self.conn
            logger.info("Connecting to SQLite at %s", self.db_path)
            target = str(self.db_path)
            if target != MEMORY_DB:
                Path(target).parent.mkdir(parents=True, exist_ok=True)
            # isolation_level=None: we issue BEGIN/COMMIT ourselves
            conn = sqlite3.connect(target, check_same_thread=False,
                                   isolation_level=None, timeout=30.0)
            conn.row_factory = sqlite3.Row
            if target != MEMORY_DB:
                conn.execute("PRAGMA journal_mode=WAL")
            conn.execute("PRAGMA foreign_keys=ON")
            self.conn = conn
            self._create_tables()
            return conn

    def close(self) -> None:
        with self._lock:
            if self.conn:
                self.conn.close()
                self.conn = None
                logger.info("Database connection closed.")

    # -- transactions --------------------------------------------------------

    @contextmanager
    def transaction(self, write: bool = True) -> Iterator[sqlite3.Connection]:
        """
        One atomic unit of work on the shared connection.

        write=True takes SQLite's write lock up front (BEGIN IMMEDIATE) so a
        read-modify-write cannot interleave with another writer. Any
        exception rolls everything back and is re-raised unchanged.
        """
        conn = self.connect()
        with self._lock:
            conn.execute("BEGIN IMMEDIATE" if write else "BEGIN")
            try:
                yield conn
                conn.commit()
            except BaseException:
                conn.rollback()
                raise

    # -- internal ------------------------------------------------------------

    def _create_tables(self) -> None:
        assert self.conn is not None
        self.conn.executescript(SCHEMA_SQL)
        logger.info("Database schema ensured.")


# ---------------------------------------------------------------------------
# Explanation (for interviews)
# ---------------------------------------------------------------------------
# What this file does:
#   Manages the SQLite connection and makes sure all tables exist before the
#   first query runs.
#
# Key pieces:
#   - SCHEMA_SQL: three base tables (task, habit, routine) and two link
#     tables (routine_task, routine_habit). CREATE IF NOT EXISTS makes it
#     safe to run every launch.
#   - Database class: constructed once by the entry point and passed to the
#     stores. No module-level singleton.
#   - transaction(): the only way stores write. Everything inside commits
#     together or not at all.
#
# Interviewer-friendly talking points:
#   1. Foreign keys are OFF by default in SQLite; we turn them on so link
#      rows can't point at missing items, and ON DELETE CASCADE cleans
#      links up when a task or habit is deleted.
#   2. BEGIN IMMEDIATE vs deferred: an immediate transaction grabs the write
#      lock before reading, which is what makes the streak read-then-write
#      free of lost updates.
#   3. check_same_thread=False + our own RLock: one shared connection can be
#      used from worker threads without two statements interleaving.
