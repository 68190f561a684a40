"""Tests for the task registry."""

import json
from datetime import datetime, timedelta
from unittest.mock import MagicMock

import pytest

from organizer.adapters.json_store import JsonTaskStore
from organizer.core.errors import NotFoundError, StorageError, ValidationError
from organizer.core.tasks import Priority, Status, TaskUpdate, task_to_dict
from organizer.registry import TaskRegistry


class RecordingObserver:
    def __init__(self, log=None, name="obs"):
        self.snapshots = []
        self.log = log
        self.name = name

    def receives(self, tasks):
        self.snapshots.append(tasks)
        if self.log is not None:
            self.log.append(self.name)


class FailingObserver:
    def receives(self, tasks):
        raise RuntimeError("render failed")


@pytest.fixture
def now():
    return datetime(2025, 1, 15, 9, 0)


@pytest.fixture
def store(tmp_path):
    return JsonTaskStore(tmp_path)


@pytest.fixture
def registry(store, now):
    return TaskRegistry(store, clock=lambda: now)


@pytest.fixture
def observer(registry):
    obs = RecordingObserver()
    registry.add_observer(obs)
    return obs


def add(registry, title="Task", deadline="2025-01-20T12:00", priority="Medium"):
    return registry.create(title, "", deadline, priority)


class TestCreate:
    def test_creates_todo_task(self, registry, observer, now):
        task = registry.create("Buy milk", "", "2025-01-01T12:00", "High")

        assert task.status is Status.TODO
        assert task.id
        assert task.created_at == now
        assert task.priority is Priority.HIGH
        assert len(registry) == 1
        assert len(observer.snapshots) == 1
        assert [t.id for t in observer.snapshots[0]] == [task.id]

    def test_persists(self, registry, store):
        task = add(registry)
        assert [r["id"] for r in store.load()] == [task.id]

    @pytest.mark.parametrize(
        "title,deadline,priority",
        [("", "2025-01-20T12:00", "High"), ("Buy", "", "High"), ("Buy", "2025-01-20T12:00", ""),
         ("   ", "2025-01-20T12:00", "High"), (None, "2025-01-20T12:00", "High")],
    )
    def test_missing_fields_raise_and_leave_registry_unchanged(
        self, registry, observer, store, title, deadline, priority
    ):
        add(registry, "Existing")
        observer.snapshots.clear()

        with pytest.raises(ValidationError):
            registry.create(title, "", deadline, priority)

        assert [t.title for t in registry.get_all()] == ["Existing"]
        assert observer.snapshots == []
        assert len(store.load()) == 1

    def test_unencodable_title_rejected(self, registry, observer, store):
        with pytest.raises(ValidationError, match="cannot be stored"):
            registry.create("bad \udcff title", "", "2025-01-20T12:00", "High")

        assert len(registry) == 0
        assert observer.snapshots == []
        assert store.load() == []

    def test_insertion_order(self, registry):
        for title in ("one", "two", "three"):
            add(registry, title)
        assert [t.title for t in registry.get_all()] == ["one", "two", "three"]

    def test_saves_before_notifying(self, now):
        calls = []
        store = MagicMock()
        store.save.side_effect = lambda tasks: calls.append("save") or True
        registry = TaskRegistry(store, clock=lambda: now)
        registry.add_observer(RecordingObserver(log=calls, name="notify"))

        add(registry)

        assert calls == ["save", "notify"]


class TestUpdate:
    def test_changes_only_status(self, registry):
        task = add(registry)
        updated = registry.update(task.id, {"status": "Completed"})

        assert updated.status is Status.COMPLETED
        assert updated.id == task.id
        assert updated.created_at == task.created_at
        assert updated.title == task.title
        assert updated.deadline == task.deadline

    def test_ignores_id_and_created_at(self, registry):
        task = add(registry)
        updated = registry.update(
            task.id, {"id": "hijack", "createdAt": "2000-01-01T00:00", "title": "Renamed"}
        )
        assert updated.id == task.id
        assert updated.created_at == task.created_at
        assert updated.title == "Renamed"
        assert registry.get_by_id("hijack") is None

    def test_does_not_touch_status_implicitly(self, registry):
        task = add(registry)
        registry.complete(task.id)
        updated = registry.update(task.id, TaskUpdate(title="Renamed"))
        assert updated.status is Status.COMPLETED

    def test_not_found(self, registry, observer):
        with pytest.raises(NotFoundError) as exc:
            registry.update("missing", {"title": "x"})
        assert exc.value.task_id == "missing"
        assert observer.snapshots == []

    def test_invalid_value_applies_nothing(self, registry, observer):
        task = add(registry)
        observer.snapshots.clear()

        with pytest.raises(ValidationError):
            registry.update(task.id, TaskUpdate(title="New title", priority="Urgent"))

        assert registry.get_by_id(task.id).title == "Task"
        assert observer.snapshots == []

    def test_empty_title_rejected(self, registry):
        task = add(registry)
        with pytest.raises(ValidationError):
            registry.update(task.id, {"title": ""})

    def test_persists_and_notifies(self, registry, observer, store):
        task = add(registry)
        registry.update(task.id, {"priority": "Low"})
        assert store.load()[0]["priority"] == "Low"
        assert observer.snapshots[-1][0].priority is Priority.LOW


class TestCompleteUncomplete:
    def test_complete_then_uncomplete(self, registry):
        task = add(registry)
        assert registry.complete(task.id).status is Status.COMPLETED
        assert registry.uncomplete(task.id).status is Status.TODO

    def test_complete_not_found(self, registry):
        with pytest.raises(NotFoundError):
            registry.complete("missing")

    def test_overdue_then_completed(self, registry, now):
        task = add(registry, deadline=(now - timedelta(days=1)).isoformat())
        assert registry.statistics().overdue == 1
        registry.complete(task.id)
        assert registry.statistics().overdue == 0


class TestDelete:
    def test_removes_only_target(self, registry, observer):
        keep1 = add(registry, "keep1")
        gone = add(registry, "gone")
        keep2 = add(registry, "keep2")

        assert registry.delete(gone.id) is True

        assert [t.id for t in registry.get_all()] == [keep1.id, keep2.id]
        assert [t.id for t in observer.snapshots[-1]] == [keep1.id, keep2.id]

    def test_not_found(self, registry, observer):
        add(registry)
        observer.snapshots.clear()
        with pytest.raises(NotFoundError):
            registry.delete("missing")
        assert len(registry) == 1
        assert observer.snapshots == []


class TestClear:
    def test_clears_and_persists(self, registry, store, observer):
        add(registry)
        add(registry)
        assert registry.clear() is True
        assert len(registry) == 0
        assert store.load() == []
        assert observer.snapshots[-1] == []


class TestQueries:
    def test_get_all_is_defensive_copy(self, registry):
        task = add(registry)
        result = registry.get_all()
        result.clear()
        assert len(registry) == 1

        registry.get_all()[0].title = "mutated"
        assert registry.get_by_id(task.id).title == "Task"

    def test_get_by_id(self, registry):
        task = add(registry)
        assert registry.get_by_id(task.id) == task
        assert registry.get_by_id("missing") is None

    def test_statistics(self, registry, now):
        past = (now - timedelta(hours=1)).isoformat()
        future = (now + timedelta(days=1)).isoformat()
        overdue = add(registry, "late", deadline=past, priority="High")
        add(registry, "a", deadline=future)
        add(registry, "b", deadline=future, priority="Low")
        done1 = add(registry, "c", deadline=past, priority="High")
        done2 = add(registry, "d", deadline=future)
        registry.complete(done1.id)
        registry.complete(done2.id)

        assert registry.statistics().to_dict() == {
            "total": 5, "completed": 2, "pending": 3, "highPriority": 2, "overdue": 1,
        }
        assert registry.get_by_id(overdue.id).is_overdue(now)


class TestObservers:
    def test_registration_order(self, registry):
        log = []
        registry.add_observer(RecordingObserver(log, "first"))
        registry.add_observer(RecordingObserver(log, "second"))
        add(registry)
        assert log == ["first", "second"]

    def test_duplicate_registration_ignored(self, registry, observer):
        registry.add_observer(observer)
        add(registry)
        assert len(observer.snapshots) == 1

    def test_remove_observer(self, registry, observer):
        registry.remove_observer(observer)
        registry.remove_observer(observer)
        add(registry)
        assert observer.snapshots == []

    def test_failing_observer_does_not_block_others(self, registry):
        registry.add_observer(FailingObserver())
        survivor = RecordingObserver()
        registry.add_observer(survivor)

        task = add(registry)

        assert len(survivor.snapshots) == 1
        assert registry.get_by_id(task.id) is not None

    def test_observers_get_independent_copies(self, registry):
        first, second = RecordingObserver(), RecordingObserver()
        registry.add_observer(first)
        registry.add_observer(second)
        task = add(registry)

        first.snapshots[0][0].title = "scribbled"
        first.snapshots[0].clear()

        assert second.snapshots[0][0].title == "Task"
        assert registry.get_by_id(task.id).title == "Task"


class TestLoadSave:
    def test_load_empty(self, registry, observer):
        assert registry.load() == []
        assert len(registry) == 0
        assert len(observer.snapshots) == 1

    def test_load_round_trip(self, store, now):
        first = TaskRegistry(store, clock=lambda: now)
        task = add(first)
        first.complete(task.id)

        second = TaskRegistry(store, clock=lambda: now)
        loaded = second.load()

        assert len(loaded) == 1
        assert loaded[0].id == task.id
        assert loaded[0].created_at == task.created_at
        assert loaded[0].status is Status.COMPLETED

    def test_load_replaces_collection(self, registry, store, now):
        add(registry, "in memory only")
        store.save([])
        registry.load()
        assert len(registry) == 0

    def test_load_store_failure_falls_back_to_empty(self, now):
        store = MagicMock()
        store.load.side_effect = StorageError("corrupt")
        registry = TaskRegistry(store, clock=lambda: now)
        observer = RecordingObserver()
        registry.add_observer(observer)

        assert registry.load() == []
        assert observer.snapshots == [[]]

    def test_load_unexpected_store_error_falls_back_to_empty(self, now):
        store = MagicMock()
        store.load.side_effect = OSError("EIO")
        registry = TaskRegistry(store, clock=lambda: now)
        observer = RecordingObserver()
        registry.add_observer(observer)

        assert registry.load() == []
        assert observer.snapshots == [[]]

    def test_load_skips_non_mapping_records(self, now):
        store = MagicMock()
        store.load.return_value = [
            "garbage",
            42,
            None,
            {"id": "t1", "title": "Kept", "deadline": "2025-01-20T12:00",
             "priority": "Low", "createdAt": "2025-01-10T08:00"},
        ]
        registry = TaskRegistry(store, clock=lambda: now)

        assert [t.id for t in registry.load()] == ["t1"]

    def test_load_skips_unencodable_records(self, store, now):
        record = {"id": "bad", "title": "x\ud800", "deadline": "2025-01-20T12:00",
                  "priority": "Low", "createdAt": "2025-01-10T08:00"}
        store.path.write_text(json.dumps([record]))
        registry = TaskRegistry(store, clock=lambda: now)
        assert registry.load() == []

    def test_load_skips_invalid_records(self, store, now):
        good = TaskRegistry(store, clock=lambda: now)
        task = add(good)
        records = store.load() + [{"id": "broken", "title": ""}]
        store._write_blob(records)

        registry = TaskRegistry(store, clock=lambda: now)
        assert [t.id for t in registry.load()] == [task.id]

    def test_save_failure_returns_false(self, now):
        store = MagicMock()
        store.save.side_effect = StorageError("disk full")
        registry = TaskRegistry(store, clock=lambda: now)
        assert registry.save() is False

    def test_save_unexpected_error_returns_false(self, now):
        store = MagicMock()
        store.save.side_effect = UnicodeEncodeError("utf-8", "\udcff", 0, 1, "surrogates not allowed")
        registry = TaskRegistry(store, clock=lambda: now)
        assert registry.save() is False
        assert registry.has_unsaved_changes

    def test_unsaved_changes_tracking(self, now):
        store = MagicMock()
        store.load.return_value = []
        store.save.return_value = False
        registry = TaskRegistry(store, clock=lambda: now)

        registry.load()
        assert not registry.has_unsaved_changes

        add(registry)
        assert registry.has_unsaved_changes

        store.save.return_value = True
        assert registry.save() is True
        assert not registry.has_unsaved_changes

    def test_storage_outage_does_not_block_crud(self, now):
        store = MagicMock()
        store.save.return_value = False
        registry = TaskRegistry(store, clock=lambda: now)

        task = add(registry)
        registry.complete(task.id)
        assert registry.delete(task.id) is True

    def test_save_passes_copies(self, now):
        store = MagicMock()
        store.save.return_value = True
        registry = TaskRegistry(store, clock=lambda: now)
        task = add(registry)

        saved = store.save.call_args.args[0]
        saved[0].title = "scribbled"
        assert registry.get_by_id(task.id).title == "Task"
        assert task_to_dict(saved[0])["id"] == task.id


class TestExport:
    def test_returns_path(self, registry, tmp_path):
        add(registry)
        path = registry.export_tasks(tmp_path / "report.txt")
        assert path == tmp_path / "report.txt"
        assert "Total Tasks: 1" in path.read_text()

    def test_failure_reported_not_raised(self, now):
        store = MagicMock()
        store.save.return_value = True
        store.export_to_file.return_value = None
        registry = TaskRegistry(store, clock=lambda: now)
        add(registry)

        assert registry.export_tasks() is None
        assert len(registry) == 1

    def test_storage_error_reported_not_raised(self, now):
        store = MagicMock()
        store.export_to_file.side_effect = StorageError("boom")
        registry = TaskRegistry(store, clock=lambda: now)
        assert registry.export_tasks() is None

    def test_unexpected_error_reported_not_raised(self, now):
        store = MagicMock()
        store.export_to_file.side_effect = UnicodeEncodeError(
            "utf-8", "\udcff", 0, 1, "surrogates not allowed"
        )
        registry = TaskRegistry(store, clock=lambda: now)
        assert registry.export_tasks() is None
