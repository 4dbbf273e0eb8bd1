"""
Seed Data Generator — fills the database with sample tasks, habits and routines.

Run: python scripts/seed_data.py [db_path]
"""

import random
import sys
from pathlib import Path
from datetime import time

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from zendoggo.data.database import DEFAULT_DB_PATH, Database
from zendoggo.data.models import Habit, Routine, RoutineType, Task
from zendoggo.data.repository import SqliteHabitStore, SqliteRoutineStore, SqliteTaskStore


def seed(db_path: Path = DEFAULT_DB_PATH) -> None:
    db = Database(db_path)
    tasks = SqliteTaskStore(db)
    habits = SqliteHabitStore(db)
    routines = SqliteRoutineStore(db)

    # ── Tasks & Habits ──────────────────────────────────────────────────
    task_names = ["Buy milk", "Answer email", "Water plants", "Pay rent",
                  "Call mom", "Clean desk", "Book dentist"]
    habit_names = ["Meditate", "Stretch", "Read 20 pages", "Journal",
                   "Drink water", "Walk the dog"]

    all_tasks = [Task.new(n) for n in task_names]
    all_habits = [Habit.new(n, streak=random.randint(0, 12)) for n in habit_names]
    for t in all_tasks:
        tasks.create(t)
    for h in all_habits:
        habits.create(h)

    # ── Routines ────────────────────────────────────────────────────────
    windows = {
        RoutineType.MORNING: (time(6, 30), time(9, 0)),
        RoutineType.AFTERNOON: (time(12, 0), time(14, 0)),
        RoutineType.EVENING: (time(18, 0), time(21, 0)),
        RoutineType.NIGHT: (time(22, 0), time(23, 30)),
    }
    for rtype, (start, end) in windows.items():
        routines.create(Routine.new(
            f"{rtype.name.title()} routine", rtype,
            tasks=random.sample(all_tasks, 2),
            habits=random.sample(all_habits, 2),
            start_time=start, end_time=end,
        ))

    db.close()
    print(f"Seeded {len(all_tasks)} tasks, {len(all_habits)} habits, "
          f"{len(windows)} routines into {db_path}.")


if __name__ == "__main__":
    target = Path(sys.argv[1]) if len(sys.argv) > 1 else DEFAULT_DB_PATH
    seed(target)


# ---------------------------------------------------------------------------
# Explanation (for interviews)
# ---------------------------------------------------------------------------
# What this script does:
#   Generates sample data so the routine screens have something to show on
#   a fresh install: a week's worth of chores, a handful of habits with
#   random streaks, and one routine per part of the day.
#
# Key points:
#   - Uses the same store classes as the app, so the link tables are filled
#     exactly the way a real "add items to routine" save fills them.
#   - The script supplies ids and created_at through the .new() factories,
#     just like the UI does.
