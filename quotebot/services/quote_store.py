"""SQLite-backed quote store.

The store owns a single ``sqlite3.Connection`` (autocommit,
``check_same_thread=False``) and a cached row count. Two locks are involved:

* ``_conn_lock`` serializes statements on the shared connection so that
  ``lastrowid`` / ``rowcount`` belong to the statement that produced them.
* ``_count_lock`` (an :class:`RWLock`) guards the cached count: shared for
  :meth:`QuoteStore.count`, exclusive only around increment/decrement.

The cached count mirrors ``SELECT COUNT(*) FROM quotes`` as long as the store
is the only writer of the table. Errors are never logged or swallowed here;
``sqlite3.Error`` reaches the caller unchanged.

Usage:
    with QuoteStore("quotes.db") as store:
        qid = store.add("Alice", "Hi")
        store.get_quote(qid)
"""

from __future__ import annotations

import sqlite3
import threading
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from ..db import connect
from ..models import Quote
from ..repository import quote_repo
from ..rwlock import RWLock

__all__ = ["QuoteStore", "QuoteNotFound", "StoreClosed", "open_db"]

# SQLite INTEGER is a signed 64-bit value
SQLITE_INT_MIN = -(2 ** 63)
SQLITE_INT_MAX = 2 ** 63 - 1


class QuoteNotFound(LookupError):
    """No quote matched the request (absent id, or empty table for random)."""

    def __init__(self, quote_id: int | None = None):
        self.quote_id = quote_id
        super().__init__("quote_not_found" if quote_id is None else f"quote_not_found: {quote_id}")


class StoreClosed(RuntimeError):
    """Raised when an operation is attempted after the store is closed."""


class QuoteStore:
    """File storage of quotes via an SQLite database."""

    def __init__(self, location: str | Path) -> None:
        self.location = str(location)
        self._conn_lock = threading.Lock()
        self._count_lock = RWLock()
        self._closed = False

        conn = connect(self.location)
        try:
            quote_repo.ensure_schema(conn)
            n = quote_repo.count(conn)
        except Exception:
            conn.close()
            raise
        self._conn: sqlite3.Connection = conn
        self._count = n

    # ------------------------------------------------------------------ #
    # Count                                                              #
    # ------------------------------------------------------------------ #
    def count(self) -> int:
        """Number of quotes, from the in-memory mirror."""
        self._check_open()
        with self._count_lock.read():
            return self._count

    def refresh_count(self) -> int:
        """Re-read the row count from storage, e.g. after an out-of-band write."""
        with self._statement() as conn:
            n = quote_repo.count(conn)
            with self._count_lock.write():
                self._count = n
        return n

    # ------------------------------------------------------------------ #
    # Mutations                                                          #
    # ------------------------------------------------------------------ #
    def add(self, author: str, text: str) -> int:
        """Store a new quote stamped with the current time; returns its id."""
        if author == "":
            raise ValueError("empty_author")
        if text == "":
            raise ValueError("empty_quote")
        with self._statement() as conn:
            quote_id = quote_repo.insert(conn, int(time.time()), author, text)
            with self._count_lock.write():
                self._count += 1
        return quote_id

    def edit(self, quote_id: int, text: str) -> bool:
        """Replace the text of a quote. False when the id does not exist."""
        if text == "":
            raise ValueError("empty_quote")
        with self._statement() as conn:
            if not _storable_id(quote_id):
                return False
            affected = quote_repo.update(conn, quote_id, text)
        return affected == 1

    def delete(self, quote_id: int) -> bool:
        """Remove a quote. False when the id does not exist."""
        with self._statement() as conn:
            if not _storable_id(quote_id):
                return False
            affected = quote_repo.delete(conn, quote_id)
            if affected != 1:
                return False
            with self._count_lock.write():
                self._count -= 1
        return True

    # ------------------------------------------------------------------ #
    # Reads                                                              #
    # ------------------------------------------------------------------ #
    def random_quote(self) -> tuple[int, str]:
        """Uniformly random (id, text); O(n) scan in SQLite."""
        with self._statement() as conn:
            row = quote_repo.random_one(conn)
        if row is None:
            raise QuoteNotFound()
        return row

    def get_quote(self, quote_id: int) -> str:
        with self._statement() as conn:
            if not _storable_id(quote_id):
                raise QuoteNotFound(quote_id)
            text = quote_repo.get_text(conn, quote_id)
        if text is None:
            raise QuoteNotFound(quote_id)
        return text

    def get_details(self, quote_id: int) -> tuple[int, str]:
        """(date as unix seconds, author)."""
        with self._statement() as conn:
            if not _storable_id(quote_id):
                raise QuoteNotFound(quote_id)
            detail = quote_repo.get_detail(conn, quote_id)
        if detail is None:
            raise QuoteNotFound(quote_id)
        return detail

    def get_all(self) -> list[Quote]:
        """Every quote, newest id first."""
        with self._statement() as conn:
            rows = quote_repo.list_all(conn)
        return [Quote.from_row(r) for r in rows]

    # ------------------------------------------------------------------ #
    # Lifecycle                                                          #
    # ------------------------------------------------------------------ #
    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        with self._conn_lock:
            if self._closed:
                return
            self._closed = True
            self._conn.close()

    def __enter__(self) -> "QuoteStore":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # ------------------------------------------------------------------ #
    # Internals                                                          #
    # ------------------------------------------------------------------ #
    def _check_open(self) -> None:
        if self._closed:
            raise StoreClosed("store is closed")

    @contextmanager
    def _statement(self) -> Iterator[sqlite3.Connection]:
        # one statement at a time on the shared connection
        with self._conn_lock:
            self._check_open()
            yield self._conn


def _storable_id(quote_id: int) -> bool:
    """An id SQLite cannot represent can never match a row."""
    return SQLITE_INT_MIN <= quote_id <= SQLITE_INT_MAX


def open_db(location: str | Path) -> QuoteStore:
    """Open (creating if needed) the quote database at `location`."""
    return QuoteStore(location)
