from __future__ import annotations

import sqlite3
import threading
import time
from datetime import timezone

import pytest

from quotebot.services import quote_store
from quotebot.services.quote_store import QuoteNotFound, QuoteStore, StoreClosed, open_db


def _db_count(path: str) -> int:
    conn = sqlite3.connect(path)
    try:
        return conn.execute("SELECT COUNT(*) FROM quotes").fetchone()[0]
    finally:
        conn.close()


def test_scenario_add_list_delete_edit(store):
    assert store.count() == 0

    assert store.add("Alice", "Hi") == 1
    assert store.count() == 1
    assert store.add("Bob", "Yo") == 2
    assert store.count() == 2

    items = [(q.id, q.author, q.quote) for q in store.get_all()]
    assert items == [(2, "Bob", "Yo"), (1, "Alice", "Hi")]

    assert store.delete(1) is True
    assert store.count() == 1
    assert store.edit(2, "Yo!") is True
    assert store.get_quote(2) == "Yo!"


def test_add_increments_count_and_is_readable(store):
    before = store.count()
    qid = store.add("Carol", "Something wise")
    assert store.count() == before + 1
    assert store.get_quote(qid) == "Something wise"


def test_add_stamps_current_time(store):
    t0 = int(time.time())
    qid = store.add("Alice", "Hi")
    t1 = int(time.time())
    date, author = store.get_details(qid)
    assert author == "Alice"
    assert t0 <= date <= t1

    q = store.get_all()[0]
    assert q.date.tzinfo == timezone.utc
    assert int(q.date.timestamp()) == date


def test_add_rejects_empty_and_null_fields(store):
    with pytest.raises(ValueError):
        store.add("", "text")
    with pytest.raises(ValueError):
        store.add("Alice", "")
    with pytest.raises(sqlite3.IntegrityError):
        store.add(None, "text")
    with pytest.raises(sqlite3.IntegrityError):
        store.add("Alice", None)
    assert store.count() == 0
    assert store.get_all() == []


def test_delete_existing_and_missing(store):
    qid = store.add("Alice", "Hi")
    assert store.delete(qid) is True
    assert store.count() == 0
    with pytest.raises(QuoteNotFound):
        store.get_quote(qid)

    assert store.delete(qid) is False
    assert store.delete(12345) is False
    assert store.count() == 0


def test_edit_missing_changes_nothing(store):
    qid = store.add("Alice", "Hi")
    assert store.edit(qid + 1, "other") is False
    assert store.get_quote(qid) == "Hi"
    assert store.count() == 1
    with pytest.raises(ValueError):
        store.edit(qid, "")


def test_edit_keeps_date_and_author(store):
    qid = store.add("Alice", "Hi")
    before = store.get_details(qid)
    assert store.edit(qid, "Hello")
    assert store.get_details(qid) == before


def test_get_and_details_not_found(store):
    with pytest.raises(QuoteNotFound) as ei:
        store.get_quote(7)
    assert ei.value.quote_id == 7
    with pytest.raises(QuoteNotFound):
        store.get_details(7)
    assert isinstance(ei.value, LookupError)


def test_random_quote_empty_and_nonempty(store):
    with pytest.raises(QuoteNotFound):
        store.random_quote()

    for i in range(5):
        store.add(f"a{i}", f"q{i}")
    ids = {q.id for q in store.get_all()}
    texts = {q.id: q.quote for q in store.get_all()}
    for _ in range(20):
        qid, text = store.random_quote()
        assert qid in ids
        assert texts[qid] == text


def test_get_all_order_and_length(store):
    for i in range(4):
        store.add("a", f"q{i}")
    store.delete(2)
    rows = store.get_all()
    assert [q.id for q in rows] == [4, 3, 1]
    assert len(rows) == store.count()


def test_get_all_empty_is_list(store):
    assert store.get_all() == []


def test_reopen_keeps_rows_and_count(tmp_db_path):
    with QuoteStore(tmp_db_path) as s:
        s.add("Alice", "Hi")
        s.add("Bob", "Yo")
    with open_db(tmp_db_path) as s2:
        assert s2.count() == 2
        assert s2.add("Carol", "Hey") == 3


def test_refresh_count_after_out_of_band_write(store, tmp_db_path):
    store.add("Alice", "Hi")
    conn = sqlite3.connect(tmp_db_path)
    try:
        conn.execute("INSERT INTO quotes (date, author, quote) VALUES (1, 'x', 'y')")
        conn.commit()
    finally:
        conn.close()
    assert store.count() == 1
    assert store.refresh_count() == 2
    assert store.count() == 2


def test_closed_store_rejects_calls(tmp_db_path):
    s = QuoteStore(tmp_db_path)
    s.add("Alice", "Hi")
    s.close()
    assert s.closed
    s.close()
    with pytest.raises(StoreClosed):
        s.count()
    with pytest.raises(StoreClosed):
        s.add("Bob", "Yo")
    with pytest.raises(StoreClosed):
        s.get_all()
    with pytest.raises(StoreClosed):
        s.delete(1)


def test_open_fails_on_non_database_file(tmp_path):
    bad = tmp_path / "garbage.db"
    bad.write_bytes(b"this is not a sqlite file " * 64)
    with pytest.raises(sqlite3.DatabaseError):
        QuoteStore(str(bad))


def test_open_fails_on_missing_directory(tmp_path):
    with pytest.raises(sqlite3.OperationalError):
        QuoteStore(str(tmp_path / "no" / "such" / "dir" / "q.db"))


def test_open_closes_handle_when_schema_fails(tmp_db_path, monkeypatch):
    class _Conn:
        closed = False

        def close(self):
            self.closed = True

    fake = _Conn()

    def _boom(conn):
        raise sqlite3.OperationalError("schema failed")

    monkeypatch.setattr(quote_store, "connect", lambda path: fake)
    monkeypatch.setattr(quote_store.quote_repo, "ensure_schema", _boom)
    with pytest.raises(sqlite3.OperationalError, match="schema failed"):
        QuoteStore(tmp_db_path)
    assert fake.closed


def test_concurrent_adds_and_deletes_keep_count(store, tmp_db_path):
    n_threads, per_thread = 8, 25
    ids: list[int] = []
    ids_lock = threading.Lock()
    errors: list[BaseException] = []

    def adder(k):
        try:
            for i in range(per_thread):
                qid = store.add(f"author{k}", f"quote {k}-{i}")
                with ids_lock:
                    ids.append(qid)
        except BaseException as e:  # surfaced below
            errors.append(e)

    threads = [threading.Thread(target=adder, args=(k,)) for k in range(n_threads)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert not errors
    assert len(set(ids)) == n_threads * per_thread
    assert store.count() == n_threads * per_thread == _db_count(tmp_db_path)

    # every id deleted twice from competing threads; only one call may win
    wins = []

    def deleter(chunk):
        for qid in chunk:
            if store.delete(qid):
                with ids_lock:
                    wins.append(qid)

    victims = sorted(ids)[: len(ids) // 2]
    threads = [threading.Thread(target=deleter, args=(victims,)) for _ in range(2)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert sorted(wins) == victims
    assert store.count() == len(ids) - len(victims) == _db_count(tmp_db_path)


@pytest.mark.parametrize("quote_id", [2**63, -(2**63) - 1, 10**20])
def test_ids_outside_sqlite_range_are_absent(store, quote_id):
    store.add("Alice", "Hi")
    with pytest.raises(QuoteNotFound) as ei:
        store.get_quote(quote_id)
    assert ei.value.quote_id == quote_id
    with pytest.raises(QuoteNotFound):
        store.get_details(quote_id)
    assert store.edit(quote_id, "x") is False
    assert store.delete(quote_id) is False
    assert store.count() == 1


def test_largest_sqlite_id_is_usable(store, tmp_db_path):
    conn = sqlite3.connect(tmp_db_path)
    try:
        conn.execute("INSERT INTO quotes (id, date, author, quote) VALUES (?, 1, 'x', 'edge')", (2**63 - 1,))
        conn.commit()
    finally:
        conn.close()
    store.refresh_count()
    assert store.get_quote(2**63 - 1) == "edge"
    assert store.delete(2**63 - 1) is True
    assert store.count() == 0
