from __future__ import annotations

# quotebot/services/quote_svc.py
import logging
import os
import threading
from typing import Any

from ..db import get_db_path
from ..logs import ENTITY_QUOTE, LogContext
from .quote_store import QuoteNotFound, QuoteStore, StoreClosed

logger = logging.getLogger(__name__)

_store: QuoteStore | None = None
_store_guard = threading.Lock()


def open_store(path: str | None = None) -> QuoteStore:
    """Open the process-wide store (no-op if already open at the same location)."""
    global _store
    with _store_guard:
        location = get_db_path(path)
        if _store is not None and not _store.closed:
            if os.path.abspath(_store.location) != os.path.abspath(location):
                raise ValueError(f"store_already_open: {_store.location}")
            return _store
        _store = QuoteStore(location)
        logger.info(f"quote store opened: {location} ({_store.count()} quotes)")
        return _store


def get_store() -> QuoteStore:
    store = _store
    if store is None or store.closed:
        raise StoreClosed("store is not open")
    return store


def close_store():
    global _store
    with _store_guard:
        if _store is None:
            return
        _store.close()
        logger.info(f"quote store closed: {_store.location}")
        _store = None


def quote_count() -> int:
    return get_store().count()


def random_quote() -> dict[str, Any]:
    qid, text = get_store().random_quote()
    return {"id": qid, "quote": text}


def quote_detail(quote_id: int) -> dict[str, Any]:
    store = get_store()
    text = store.get_quote(quote_id)
    date, author = store.get_details(quote_id)
    return {"id": quote_id, "quote": text, "date": date, "author": author}


def list_quotes() -> list[dict[str, Any]]:
    return [q.to_dict() for q in get_store().get_all()]


def add_quote(author: str, text: str, log: LogContext) -> int:
    log.set_payload({"author": author, "quote": text})
    qid = get_store().add(author, text)
    log.set_entity(ENTITY_QUOTE, qid)
    log.set_after({"id": qid, "author": author, "quote": text})
    logger.debug(f"quote added: id={qid} author={author}")
    return qid


def edit_quote(quote_id: int, text: str, log: LogContext) -> bool:
    store = get_store()
    log.set_entity(ENTITY_QUOTE, quote_id)
    log.set_payload({"quote": text})
    try:
        log.set_before({"quote": store.get_quote(quote_id)})
    except QuoteNotFound:
        log.set_before(None)
    ok = store.edit(quote_id, text)
    if ok:
        log.set_after({"quote": text})
    return ok


def delete_quote(quote_id: int, log: LogContext) -> bool:
    store = get_store()
    log.set_entity(ENTITY_QUOTE, quote_id)
    try:
        text = store.get_quote(quote_id)
        date, author = store.get_details(quote_id)
        log.set_before({"quote": text, "date": date, "author": author})
    except QuoteNotFound:
        log.set_before(None)
    return store.delete(quote_id)
