"""Unit tests for the service layer, worker pool, config and bootstrap."""

import json
import pytest
from datetime import date, datetime, timezone

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from PySide6.QtCore import QCoreApplication

from zendoggo.bootstrap import open_stores
from zendoggo.config import DEFAULT_CONFIG, load_config, save_config
from zendoggo.data.items import HabitItem, TaskItem
from zendoggo.data.memory_store import MemoryDayStore, MemoryTaskStore
from zendoggo.data.models import Habit, Routine, RoutineType, Task
from zendoggo.data.repository import SqliteRoutineStore
from zendoggo.services.calendar_service import CalendarService
from zendoggo.services.routine_service import RoutineService, toggle_selection
from zendoggo.services.worker import StoreWorker

T0 = datetime(2024, 3, 1, 8, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def stores():
    bundle = open_stores({"backend": "sqlite", "db_path": ":memory:"})
    yield bundle
    bundle.close()


@pytest.fixture
def svc(stores):
    return RoutineService(stores.routines, stores.tasks, stores.habits)


@pytest.fixture
def seeded(svc):
    """Service with one task, one habit and a morning routine holding both."""
    task = Task(id="t", name="Buy milk", created_at=T0)
    habit = Habit(id="h", name="Meditate", created_at=T0)
    svc.tasks.create(task)
    svc.habits.create(habit)
    routine = Routine(id="r", name="Wake up", type=RoutineType.MORNING, created_at=T0,
                      tasks=frozenset([task]), habits=frozenset([habit]))
    svc.add_routine(routine)
    return svc, routine


class TestRoutineService:
    def test_toggle_selection(self):
        a = Task(id="a", name="A", created_at=T0)
        sel = toggle_selection(frozenset(), a, True)
        assert sel == {a}
        assert toggle_selection(sel, a, True) == {a}
        assert toggle_selection(sel, Task(id="a", name="A", created_at=T0), False) == frozenset()

    def test_save_items_replaces_sets(self, seeded):
        svc, routine = seeded
        saved = svc.save_items(routine, tasks=[], habits=routine.habits)
        assert saved.tasks == frozenset()
        loaded = svc.routines.get("r")
        assert loaded.task_ids == set()
        assert loaded.habit_ids == {"h"}

    def test_items_dispatch_delete(self, seeded):
        svc, routine = seeded
        for item in svc.items_of(routine):
            svc.delete_item(item)
        assert svc.tasks.get("t") is None
        assert svc.habits.get("h") is None
        assert svc.routines.get("r").tasks == frozenset()

    def test_toggle_completed(self, seeded):
        svc, routine = seeded
        task_item, habit_item = svc.items_of(routine)
        assert svc.toggle_completed(task_item).is_completed
        assert svc.tasks.get("t").is_completed
        assert svc.toggle_completed(habit_item).is_completed
        assert svc.habits.get("h").is_completed

    def test_edit_item(self, seeded):
        svc, _ = seeded
        svc.edit_item(TaskItem(Task(id="t", name="Buy oat milk", created_at=T0)))
        assert svc.tasks.get("t").name == "Buy oat milk"

    def test_streak_only_for_habits(self, seeded):
        svc, routine = seeded
        task_item, habit_item = svc.items_of(routine)
        assert svc.increment_streak(task_item) is None
        assert svc.increment_streak(habit_item) == 1
        assert svc.increment_streak(habit_item) == 2
        assert svc.reset_streak("h") == 0

    def test_rejects_non_items(self, svc):
        with pytest.raises(TypeError):
            svc.delete_item(Task(id="x", name="X", created_at=T0))

    def test_delete_routine_returns_type(self, seeded):
        svc, _ = seeded
        assert svc.delete_routine("r") is RoutineType.MORNING
        assert svc.delete_routine("r") is None

    def test_routines_for(self, seeded):
        svc, _ = seeded
        assert [r.id for r in svc.routines_for(RoutineType.MORNING)] == ["r"]
        assert svc.routines_for(RoutineType.NIGHT) == []
        assert len(svc.routines_for()) == 1


class TestCalendarService:
    @pytest.fixture
    def cal(self):
        return CalendarService(MemoryDayStore())

    def _routine(self, done, total):
        tasks = [Task(id=f"t{i}", name=f"T{i}", created_at=T0, is_completed=i < done)
                 for i in range(total)]
        return Routine(id=f"r{done}-{total}", name="R", type=RoutineType.EVENING,
                       created_at=T0, tasks=frozenset(tasks))

    def test_get_or_create_is_stable(self, cal):
        d1 = cal.get_or_create_day(date(2024, 3, 1))
        d2 = cal.get_or_create_day(date(2024, 3, 1))
        assert d1 == d2

    def test_assign_routines(self, cal):
        day = cal.assign_routines(date(2024, 3, 1), [self._routine(1, 2)])
        assert day.progress == pytest.approx(0.5)
        assert cal.days.get(date(2024, 3, 1)).routines == day.routines

    def test_progress_series_fills_gaps(self, cal):
        cal.assign_routines(date(2024, 3, 1), [self._routine(2, 2)])
        cal.assign_routines(date(2024, 3, 3), [self._routine(1, 4)])
        series = cal.progress_series(date(2024, 3, 1), date(2024, 3, 3))
        assert series == [(date(2024, 3, 1), 1.0), (date(2024, 3, 2), 0.0),
                          (date(2024, 3, 3), 0.25)]

    def test_progress_summary(self, cal):
        cal.assign_routines(date(2024, 3, 1), [self._routine(2, 2)])
        cal.assign_routines(date(2024, 3, 2), [self._routine(0, 2)])
        summary = cal.progress_summary(date(2024, 3, 1), date(2024, 3, 2))
        assert summary["day_count"] == 2
        assert summary["mean_progress"] == pytest.approx(0.5)
        assert summary["completed_days"] == 1
        assert summary["best_day"] == date(2024, 3, 1)
        assert summary["trend"] == pytest.approx(0.7)

    def test_empty_range(self, cal):
        assert cal.progress_series(date(2024, 3, 2), date(2024, 3, 1)) == []
        assert cal.progress_summary(date(2024, 3, 2), date(2024, 3, 1))["mean_progress"] is None


@pytest.fixture(scope="module")
def qapp():
    return QCoreApplication.instance() or QCoreApplication([])


class TestStoreWorker:
    def test_submit_returns_result(self, qapp):
        store = MemoryTaskStore()
        store.create(Task(id="a", name="A", created_at=T0))
        worker = StoreWorker(2)
        future = worker.submit(store.get, "a")
        assert future.result(timeout=5).name == "A"
        assert worker.shutdown(5000)

    def test_failure_propagates_unchanged(self, qapp):
        def broken():
            raise ValueError("disk on fire")

        worker = StoreWorker(1)
        future = worker.submit(broken)
        with pytest.raises(ValueError, match="disk on fire"):
            future.result(timeout=5)
        worker.shutdown(5000)

    def test_concurrent_routine_writes(self, qapp, stores):
        routines = stores.routines
        assert isinstance(routines, SqliteRoutineStore)
        worker = StoreWorker(4)
        futures = [
            worker.submit(routines.create,
                          Routine(id=f"r{i}", name=f"R{i}", type=RoutineType.NIGHT,
                                  created_at=T0))
            for i in range(20)
        ]
        for f in futures:
            f.result(timeout=5)
        assert len(routines.get_by_type(RoutineType.NIGHT)) == 20
        worker.shutdown(5000)


class TestConfig:
    def test_defaults_when_missing(self, tmp_path):
        assert load_config(tmp_path / "none.json") == DEFAULT_CONFIG

    def test_merge_and_save(self, tmp_path):
        path = tmp_path / "cfg" / "zendoggo.json"
        save_config({"backend": "memory"}, path)
        cfg = load_config(path)
        assert cfg["backend"] == "memory"
        assert cfg["db_path"] == DEFAULT_CONFIG["db_path"]

    def test_bad_json_falls_back(self, tmp_path):
        path = tmp_path / "zendoggo.json"
        path.write_text("{not json", encoding="utf-8")
        assert load_config(path) == DEFAULT_CONFIG

    def test_unknown_backend(self, tmp_path):
        path = tmp_path / "zendoggo.json"
        path.write_text(json.dumps({"backend": "postgres"}), encoding="utf-8")
        assert load_config(path)["backend"] == "sqlite"


class TestBootstrap:
    def test_memory_backend_has_no_db(self):
        bundle = open_stores({"backend": "memory"})
        assert bundle.db is None
        bundle.close()

    def test_sqlite_backend_shares_one_database(self, tmp_path):
        bundle = open_stores({"backend": "sqlite", "db_path": str(tmp_path / "z.db")})
        assert bundle.routines.db is bundle.tasks.db is bundle.habits.db is bundle.db
        bundle.tasks.create(Task(id="a", name="A", created_at=T0))
        assert (tmp_path / "z.db").exists()
        bundle.close()
