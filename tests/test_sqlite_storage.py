from __future__ import annotations

import sqlite3
import threading

import pytest

from adapters.sqlite_storage import SQLiteStorage, open_storage
from core.errors import StorageError
from core.models import ReputationRecord, Rule


@pytest.fixture
def storage(tmp_path):
    store = open_storage(str(tmp_path / "spamscope.db"))
    yield store
    store.close()


def test_init_db_creates_tables(storage: SQLiteStorage) -> None:
    storage.insert_rule("test", 5.0)
    assert storage.count_rules() == 1


def test_init_db_keeps_existing_rows(tmp_path) -> None:
    path = str(tmp_path / "spamscope.db")
    first = open_storage(path)
    first.insert_rule("spam", 10.0)
    first.upsert_sender("user1", True)
    first.close()

    second = open_storage(path)
    second.init_db()
    assert second.load_all_rules() == [Rule(keyword="spam", score=10.0)]
    assert second.get_spam_score("user1") == 1
    second.close()


def test_init_db_unopenable_location_raises(tmp_path) -> None:
    store = SQLiteStorage(str(tmp_path / "missing" / "dir" / "spamscope.db"))
    with pytest.raises(StorageError):
        store.init_db()


def test_operations_before_init_raise() -> None:
    store = SQLiteStorage(":memory:")
    with pytest.raises(StorageError):
        store.insert_rule("spam", 1.0)


def test_insert_rule_never_deduplicates(storage: SQLiteStorage) -> None:
    storage.insert_rule("spam", 10.0)
    storage.insert_rule("spam", 10.0)
    storage.insert_rule("promo", 2.5)
    assert storage.load_all_rules() == [
        Rule(keyword="spam", score=10.0),
        Rule(keyword="spam", score=10.0),
        Rule(keyword="promo", score=2.5),
    ]


def test_upsert_sender_counts_messages_and_flags(storage: SQLiteStorage) -> None:
    storage.upsert_sender("user1", True)
    assert storage.get_record("user1") == ReputationRecord("user1", 1, 1)

    storage.upsert_sender("user1", False)
    # A clean message never lowers the spam count.
    assert storage.get_record("user1") == ReputationRecord("user1", 1, 2)


def test_get_spam_score_unknown_sender_is_zero(storage: SQLiteStorage) -> None:
    assert storage.get_spam_score("nonexistent") == 0
    assert storage.get_record("nonexistent") is None


def test_get_spam_score_swallows_read_errors(storage: SQLiteStorage) -> None:
    storage.upsert_sender("user1", True)
    storage.close()
    assert storage.get_spam_score("user1") == 0
    with pytest.raises(StorageError):
        storage.get_record("user1")


def test_insert_rule_write_failure_raises(tmp_path) -> None:
    path = str(tmp_path / "spamscope.db")
    store = open_storage(path)
    with sqlite3.connect(path) as conn:
        conn.execute("DROP TABLE rules")
    with pytest.raises(StorageError):
        store.insert_rule("spam", 1.0)
    store.close()


def test_concurrent_upserts_lose_no_updates(storage: SQLiteStorage) -> None:
    def worker(sender_id: str) -> None:
        for index in range(50):
            storage.upsert_sender(sender_id, index % 2 == 0)

    threads = [threading.Thread(target=worker, args=(f"user{n % 3}",)) for n in range(6)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    for n in range(3):
        record = storage.get_record(f"user{n}")
        assert record == ReputationRecord(f"user{n}", 50, 100)
