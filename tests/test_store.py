import sqlite3
import threading
from datetime import datetime

import pytest

from habit_timer.actions import add_action
from habit_timer.errors import DecodeError, StorageError
from habit_timer.models import ActivityKind, Snapshot
from habit_timer.store import SNAPSHOT_KEY, SnapshotStore


@pytest.fixture
def store(tmp_path):
    s = SnapshotStore(str(tmp_path / "useful.db"))
    yield s
    s.close()


def test_missing_file_is_a_fresh_install(store):
    snapshot = store.read()
    assert snapshot.current.last_update_day is None
    assert snapshot.actions.is_empty()


def test_save_then_load(store):
    snapshot = Snapshot()
    snapshot.current.remaining[ActivityKind.STRETCH] = 75
    add_action(snapshot.actions, ActivityKind.STRETCH, 40, now=datetime(2022, 12, 13))
    store.save_async(snapshot).result()

    loaded = store.load_async().result()
    assert loaded.current.remaining[ActivityKind.STRETCH] == 75
    assert len(loaded.actions) == 1


def test_save_encodes_at_call_time(store):
    snapshot = Snapshot()
    snapshot.settings.calories_today = 10
    future = store.save_async(snapshot)
    snapshot.settings.calories_today = 99
    future.result()
    assert store.read().settings.calories_today == 10


def test_later_save_wins(store):
    first, second = Snapshot(), Snapshot()
    first.settings.calories_today = 1
    second.settings.calories_today = 2
    store.save_async(first)
    store.save_async(second)
    assert store.load_async().result().settings.calories_today == 2


def test_non_database_file_is_a_decode_error(tmp_path):
    path = tmp_path / "useful.db"
    path.write_text("this is not sqlite " * 100)
    store = SnapshotStore(str(path))
    try:
        with pytest.raises(DecodeError):
            store.read()
    finally:
        store.close()


def test_corrupt_document_is_a_decode_error(store):
    conn = sqlite3.connect(store.db_path)
    store.init_db(conn)
    conn.execute("INSERT INTO snapshot(key, value) VALUES(?, ?)", (SNAPSHOT_KEY, "{broken"))
    conn.commit()
    conn.close()
    with pytest.raises(DecodeError):
        store.load_async().result()


def test_save_failure_goes_to_handler(tmp_path):
    store = SnapshotStore(str(tmp_path / "missing-dir" / "useful.db"))
    errors = []
    reported = threading.Event()

    def on_error(error):
        errors.append(error)
        reported.set()

    future = store.save_async(Snapshot(), on_error=on_error)
    with pytest.raises(StorageError):
        future.result()
    assert reported.wait(2)
    assert isinstance(errors[0], StorageError)
    store.close()


def test_save_after_close_goes_to_handler(tmp_path):
    store = SnapshotStore(str(tmp_path / "useful.db"))
    store.close()
    errors = []
    future = store.save_async(Snapshot(), on_error=errors.append)
    assert isinstance(future.exception(), StorageError)
    assert len(errors) == 1
    assert isinstance(errors[0], StorageError)
