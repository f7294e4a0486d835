from __future__ import annotations

# quotebot/db.py
import sqlite3
from contextlib import contextmanager
from typing import Iterator
import os
import yaml

# DB path resolution order:
# 1) env QUOTEBOT_DB_PATH (highest priority)
# 2) config.yaml test_db_path (when running under tests)
# 3) config.yaml db_path (production default)
# 4) fallback: quotes.db at the project root
_PROJECT_ROOT = os.path.dirname(os.path.dirname(__file__))
_ROOT_DB = os.path.join(_PROJECT_ROOT, "quotes.db")


def _read_config_yaml() -> dict:
    cfg_path = os.path.join(_PROJECT_ROOT, "config.yaml")
    if not os.path.exists(cfg_path):
        return {}
    try:
        with open(cfg_path, "r", encoding="utf-8") as f:
            cfg = yaml.safe_load(f) or {}
        out = {}
        for k in ("db_path", "test_db_path"):
            v = cfg.get(k)
            if isinstance(v, str) and v.strip():
                out[k] = v.strip()
        return out
    except (OSError, yaml.YAMLError, AttributeError):
        return {}


def get_db_path(explicit: str | None = None) -> str:
    env_path = os.environ.get("QUOTEBOT_DB_PATH")
    cfg = _read_config_yaml()
    cfg_db = cfg.get("db_path")
    cfg_test = cfg.get("test_db_path")
    is_test = (os.environ.get("APP_ENV") == "test") or (os.environ.get("PYTEST_CURRENT_TEST") is not None)

    if explicit:
        path = explicit
    elif env_path:
        path = env_path
    elif is_test and cfg_test:
        path = cfg_test
    elif cfg_db:
        path = cfg_db
    else:
        path = _ROOT_DB

    # make sure the directory exists
    dirn = os.path.dirname(path) or "."
    os.makedirs(dirn, exist_ok=True)
    return path


def connect(path: str) -> sqlite3.Connection:
    """
    Open a long-lived connection in autocommit mode, shareable across threads.
    Every statement commits on its own; callers never open transactions.
    """
    conn = sqlite3.connect(
        path,
        check_same_thread=False,
        isolation_level=None,
    )
    conn.row_factory = sqlite3.Row
    return conn


@contextmanager
def get_conn(db_path: str | None = None) -> Iterator[sqlite3.Connection]:
    """
    Short-lived SQLite connection. Uses db_path when given, otherwise get_db_path().
    row_factory is sqlite3.Row.
    """
    conn = connect(db_path or get_db_path())
    try:
        yield conn
    finally:
        conn.close()
