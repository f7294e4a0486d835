"""
Quote data access.
Owns the `quotes` schema and one function per statement; callers pass the connection.
"""
from __future__ import annotations

from sqlite3 import Connection, Row
from typing import Optional

SQL_CREATE_TABLE = (
    "CREATE TABLE IF NOT EXISTS quotes ("
    "id INTEGER PRIMARY KEY,"
    "date INTEGER NOT NULL,"
    "author TEXT NOT NULL,"
    "quote TEXT NOT NULL);"
)
SQL_DATE_INDEX = "CREATE INDEX IF NOT EXISTS quotesdate ON quotes (date);"
SQL_COUNT = "SELECT COUNT(*) FROM quotes;"
SQL_INSERT = "INSERT INTO quotes (date, author, quote) VALUES(?, ?, ?);"
SQL_DELETE = "DELETE FROM quotes WHERE id = ?;"
SQL_UPDATE = "UPDATE quotes SET quote = ? WHERE id = ?;"
SQL_RANDOM = "SELECT id, quote FROM quotes ORDER BY RANDOM() LIMIT 1;"
SQL_GET_TEXT = "SELECT quote FROM quotes WHERE id = ?;"
SQL_GET_DETAIL = "SELECT date, author FROM quotes WHERE id = ?;"
SQL_LIST_ALL = "SELECT id, date, author, quote FROM quotes ORDER BY id DESC;"


def ensure_schema(conn: Connection):
    conn.execute(SQL_CREATE_TABLE)
    conn.execute(SQL_DATE_INDEX)


def count(conn: Connection) -> int:
    return int(conn.execute(SQL_COUNT).fetchone()[0])


def insert(conn: Connection, date: int, author: str, quote: str) -> int:
    """Insert one row; returns the id SQLite assigned."""
    cur = conn.execute(SQL_INSERT, (date, author, quote))
    return int(cur.lastrowid)


def delete(conn: Connection, quote_id: int) -> int:
    """Returns rows affected."""
    return conn.execute(SQL_DELETE, (quote_id,)).rowcount


def update(conn: Connection, quote_id: int, quote: str) -> int:
    """Returns rows affected."""
    return conn.execute(SQL_UPDATE, (quote, quote_id)).rowcount


def random_one(conn: Connection) -> Optional[tuple[int, str]]:
    row = conn.execute(SQL_RANDOM).fetchone()
    if row is None:
        return None
    return int(row[0]), row[1]


def get_text(conn: Connection, quote_id: int) -> Optional[str]:
    row = conn.execute(SQL_GET_TEXT, (quote_id,)).fetchone()
    return None if row is None else row[0]


def get_detail(conn: Connection, quote_id: int) -> Optional[tuple[int, str]]:
    row = conn.execute(SQL_GET_DETAIL, (quote_id,)).fetchone()
    if row is None:
        return None
    return int(row[0]), row[1]


def list_all(conn: Connection) -> list[Row]:
    return conn.execute(SQL_LIST_ALL).fetchall()
