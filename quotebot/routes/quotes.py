from __future__ import annotations

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from ..logs import ACTION_QUOTE_CREATE, ACTION_QUOTE_DELETE, ACTION_QUOTE_EDIT, LogContext, quote_history
from ..services.quote_store import QuoteNotFound
from ..services.quote_svc import (
    add_quote,
    delete_quote,
    edit_quote,
    list_quotes,
    quote_count,
    quote_detail,
    random_quote,
)

router = APIRouter()


class QuoteCreate(BaseModel):
    author: str
    quote: str


class QuoteEdit(BaseModel):
    quote: str


@router.get("/api/quotes/count")
def api_quotes_count():
    return {"count": quote_count()}


@router.get("/api/quotes/random")
def api_quotes_random():
    try:
        return random_quote()
    except QuoteNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.get("/api/quotes/list")
def api_quotes_list():
    return list_quotes()


@router.get("/api/quotes/{quote_id}")
def api_quotes_get(quote_id: int):
    try:
        return quote_detail(quote_id)
    except QuoteNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.get("/api/quotes/{quote_id}/history")
def api_quotes_history(quote_id: int):
    return {"items": quote_history(quote_id)}


@router.post("/api/quotes/create", status_code=201)
def api_quotes_create(body: QuoteCreate):
    log = LogContext(ACTION_QUOTE_CREATE)
    try:
        qid = add_quote(body.author, body.quote, log)
        log.write("OK")
        return {"message": "ok", "id": qid}
    except ValueError as ve:
        log.write("ERROR", str(ve))
        raise HTTPException(status_code=400, detail=str(ve))
    except Exception as e:
        log.write("ERROR", str(e))
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/api/quotes/{quote_id}/edit")
def api_quotes_edit(quote_id: int, body: QuoteEdit):
    log = LogContext(ACTION_QUOTE_EDIT)
    try:
        ok = edit_quote(quote_id, body.quote, log)
    except ValueError as ve:
        log.write("ERROR", str(ve))
        raise HTTPException(status_code=400, detail=str(ve))
    except Exception as e:
        log.write("ERROR", str(e))
        raise HTTPException(status_code=500, detail=str(e))
    if not ok:
        log.write("ERROR", "quote_not_found")
        raise HTTPException(status_code=404, detail="quote_not_found")
    log.write("OK")
    return {"message": "ok"}


@router.post("/api/quotes/{quote_id}/delete")
def api_quotes_delete(quote_id: int):
    log = LogContext(ACTION_QUOTE_DELETE)
    try:
        ok = delete_quote(quote_id, log)
    except Exception as e:
        log.write("ERROR", str(e))
        raise HTTPException(status_code=500, detail=str(e))
    if not ok:
        log.write("ERROR", "quote_not_found")
        raise HTTPException(status_code=404, detail="quote_not_found")
    log.write("OK")
    return {"message": "ok"}
