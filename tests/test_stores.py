"""Contract tests: every store kind must behave the same through its Protocol."""

import dataclasses
import threading
import pytest
from datetime import date, datetime, timezone

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from zendoggo.bootstrap import open_stores
from zendoggo.data.memory_store import MemoryDayStore
from zendoggo.data.models import Day, Habit, Routine, RoutineType, Task

T0 = datetime(2024, 3, 1, 8, 0, 0, tzinfo=timezone.utc)


@pytest.fixture(params=["memory", "sqlite"])
def stores(request):
    bundle = open_stores({"backend": request.param, "db_path": ":memory:"})
    yield bundle
    bundle.close()


def _seed(stores):
    a = Task(id="a", name="Buy milk", created_at=T0)
    b = Habit(id="b", name="Meditate", created_at=T0)
    stores.tasks.create(a)
    stores.habits.create(b)
    return a, b


class TestTaskContract:
    def test_crud(self, stores):
        a, _ = _seed(stores)
        assert stores.tasks.get("a") == a
        done = dataclasses.replace(a, is_completed=True)
        stores.tasks.update(done)
        assert stores.tasks.get("a") == done
        stores.tasks.delete("a")
        assert stores.tasks.get("a") is None
        assert stores.tasks.get_all() == []

    def test_duplicate_create_is_upsert(self, stores):
        a, _ = _seed(stores)
        stores.tasks.create(dataclasses.replace(a, name="Buy bread"))
        assert [t.name for t in stores.tasks.get_all()] == ["Buy bread"]


class TestHabitContract:
    def test_streak_n_increments_then_reset(self, stores):
        _, b = _seed(stores)
        n = 6
        for i in range(n):
            assert stores.habits.update_streak(b.id, True) == i + 1
        assert stores.habits.get(b.id).streak == b.streak + n
        stores.habits.update_streak(b.id, False)
        assert stores.habits.get(b.id).streak == 0

    def test_generic_update_keeps_streak(self, stores):
        _, b = _seed(stores)
        stores.habits.update_streak(b.id, True)
        stores.habits.update(dataclasses.replace(b, name="Meditate 20 min", streak=99))
        stored = stores.habits.get(b.id)
        assert stored.name == "Meditate 20 min"
        assert stored.streak == 1

    def test_missing_habit(self, stores):
        assert stores.habits.get("zzz") is None
        assert stores.habits.update_streak("zzz", True) is None
        stores.habits.delete("zzz")


class TestRoutineContract:
    def test_link_round_trip_after_create_and_update(self, stores):
        a, b = _seed(stores)
        r = Routine(id="r", name="Wake up", type=RoutineType.MORNING, created_at=T0,
                    tasks=frozenset([a]), habits=frozenset([b]))
        stores.routines.create(r)
        got = stores.routines.get("r")
        assert got.task_ids == r.task_ids
        assert got.habit_ids == r.habit_ids

        r2 = dataclasses.replace(r, tasks=frozenset())
        stores.routines.update(r2)
        got = stores.routines.get("r")
        assert got.task_ids == set()
        assert got.habit_ids == {"b"}

    def test_get_by_type_is_subset_of_get_all(self, stores):
        for i, rtype in enumerate([RoutineType.MORNING, RoutineType.NIGHT,
                                   RoutineType.MORNING, RoutineType.EVENING]):
            stores.routines.create(Routine(id=f"r{i}", name=f"R{i}", type=rtype,
                                           created_at=T0))
        everything = stores.routines.get_all()
        for rtype in RoutineType:
            expected = {r.id for r in everything if r.type == rtype}
            assert {r.id for r in stores.routines.get_by_type(rtype)} == expected

    def test_delete_is_idempotent(self, stores):
        a, b = _seed(stores)
        stores.routines.create(Routine(id="r", name="R", type=RoutineType.NIGHT,
                                       created_at=T0, tasks=frozenset([a]),
                                       habits=frozenset([b])))
        stores.routines.delete("r")
        stores.routines.delete("r")
        assert stores.routines.get("r") is None
        assert stores.routines.get_all() == []


class TestRoutineItemLifetime:
    """The volatile store keeps what it was given; the durable one follows the item tables."""

    def _routine_with(self, bundle):
        a, b = _seed(bundle)
        bundle.routines.create(Routine(id="r", name="Wake up", type=RoutineType.MORNING,
                                       created_at=T0, tasks=frozenset([a]),
                                       habits=frozenset([b])))
        return a, b

    def test_memory_routine_keeps_deleted_and_edited_items(self):
        bundle = open_stores({"backend": "memory"})
        a, b = self._routine_with(bundle)
        bundle.tasks.delete(a.id)
        bundle.habits.update(dataclasses.replace(b, name="Meditate 20 min"))
        got = bundle.routines.get("r")
        assert got.task_ids == {"a"}
        assert next(iter(got.habits)).name == "Meditate"
        bundle.close()

    def test_sqlite_routine_drops_deleted_and_shows_edited_items(self):
        bundle = open_stores({"backend": "sqlite", "db_path": ":memory:"})
        a, b = self._routine_with(bundle)
        bundle.tasks.delete(a.id)
        bundle.habits.update(dataclasses.replace(b, name="Meditate 20 min"))
        got = bundle.routines.get("r")
        assert got.task_ids == set()
        assert next(iter(got.habits)).name == "Meditate 20 min"
        bundle.close()

    def test_readers_only_see_whole_link_sets(self, tmp_path):
        bundle = open_stores({"backend": "sqlite", "db_path": str(tmp_path / "z.db")})
        t1, t2, t3 = (Task(id=f"t{i}", name=f"T{i}", created_at=T0) for i in (1, 2, 3))
        for t in (t1, t2, t3):
            bundle.tasks.create(t)
        base = Routine(id="r", name="Evening", type=RoutineType.EVENING, created_at=T0,
                       tasks=frozenset([t1, t2]))
        bundle.routines.create(base)
        allowed = ({"t1", "t2"}, {"t3"})
        seen, done = [], threading.Event()

        def read():
            while True:
                seen.append(bundle.routines.get("r").task_ids)
                if done.is_set():
                    break

        readers = [threading.Thread(target=read) for _ in range(3)]
        for r in readers:
            r.start()
        for i in range(60):
            tasks = frozenset([t3]) if i % 2 == 0 else frozenset([t1, t2])
            bundle.routines.update(dataclasses.replace(base, tasks=tasks))
        done.set()
        for r in readers:
            r.join()

        assert seen
        assert all(ids in allowed for ids in seen)
        assert bundle.routines.get("r").task_ids == {"t1", "t2"}
        bundle.close()


class TestDayStore:
    @pytest.fixture
    def days(self):
        return MemoryDayStore()

    def test_get_missing(self, days):
        assert days.get(date(2024, 1, 1)) is None

    def test_in_range_sorted_and_inclusive(self, days):
        for d in (date(2024, 3, 5), date(2024, 3, 1), date(2024, 3, 3), date(2024, 3, 9)):
            days.create(Day.new(d))
        got = days.get_in_range(date(2024, 3, 1), date(2024, 3, 5))
        assert [d.date for d in got] == [date(2024, 3, 1), date(2024, 3, 3), date(2024, 3, 5)]

    def test_one_day_per_date(self, days):
        days.create(Day.new(date(2024, 3, 1)))
        replacement = Day.new(date(2024, 3, 1))
        days.update(replacement)
        assert days.get(date(2024, 3, 1)) == replacement
        assert len(days.get_in_range(date(2024, 1, 1), date(2024, 12, 31))) == 1
