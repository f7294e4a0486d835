"""
FastAPI app entry point aggregating routers under quotebot/routes.
Keep as `uvicorn quotebot.api:app`.
"""
from __future__ import annotations


from fastapi import FastAPI

from .logs import ensure_log_schema
from .routes.base import APP_NAME, APP_VERSION
from .services.quote_svc import open_store, close_store


app = FastAPI(title=APP_NAME, version=APP_VERSION)


@app.on_event("startup")
def on_startup():
    ensure_log_schema()
    open_store()


@app.on_event("shutdown")
def on_shutdown():
    close_store()


from .routes import base as base_routes
from .routes import quotes as quotes_routes
from .routes import logs as logs_routes

app.include_router(base_routes.router)
app.include_router(quotes_routes.router)
app.include_router(logs_routes.router)
