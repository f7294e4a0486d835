#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Command line access to the quote database.

Usage:
  python -m quotebot.scripts.quotes_cli add "Alice" "Hi"
  python -m quotebot.scripts.quotes_cli random
  python -m quotebot.scripts.quotes_cli get 3
  python -m quotebot.scripts.quotes_cli edit 3 "new text"
  python -m quotebot.scripts.quotes_cli del 3
  python -m quotebot.scripts.quotes_cli list
  python -m quotebot.scripts.quotes_cli history 3
  python -m quotebot.scripts.quotes_cli --db other.db count
"""

from __future__ import annotations
import argparse
import logging
from datetime import datetime, timezone

from quotebot.db import get_db_path
from quotebot.logs import ACTION_QUOTE_CREATE, ACTION_QUOTE_DELETE, ACTION_QUOTE_EDIT, LogContext, ensure_log_schema, quote_history
from quotebot.services.quote_store import QuoteNotFound
from quotebot.services import quote_svc

logger = logging.getLogger("quotebot.cli")


def _build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="quotebot", description="Store and recall quotes")
    ap.add_argument("--db", default=None, help="SQLite file (default: QUOTEBOT_DB_PATH / config.yaml / quotes.db)")
    ap.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    sub = ap.add_subparsers(dest="cmd", required=True)

    p = sub.add_parser("add", help="add a quote")
    p.add_argument("author")
    p.add_argument("quote")

    sub.add_parser("random", help="print a random quote")

    p = sub.add_parser("get", help="print a quote and its details")
    p.add_argument("id", type=int)

    p = sub.add_parser("edit", help="replace the text of a quote")
    p.add_argument("id", type=int)
    p.add_argument("quote")

    p = sub.add_parser("del", help="delete a quote")
    p.add_argument("id", type=int)

    p = sub.add_parser("history", help="print the audit trail of a quote")
    p.add_argument("id", type=int)

    sub.add_parser("list", help="print every quote, newest first")
    sub.add_parser("count", help="print the number of quotes")
    return ap


def _fmt_date(unix_seconds: int) -> str:
    return datetime.fromtimestamp(unix_seconds, tz=timezone.utc).strftime("%Y-%m-%d %H:%M:%S UTC")


def run(args: argparse.Namespace) -> int:
    db_path = get_db_path(args.db)
    ensure_log_schema(db_path)
    quote_svc.open_store(db_path)
    try:
        if args.cmd == "add":
            log = LogContext(ACTION_QUOTE_CREATE, user="cli", db_path=db_path)
            try:
                qid = quote_svc.add_quote(args.author, args.quote, log)
            except ValueError as ve:
                log.write("ERROR", str(ve))
                print(f"error: {ve}")
                return 1
            log.write("OK")
            print(f"added quote #{qid}")
        elif args.cmd == "random":
            try:
                q = quote_svc.random_quote()
            except QuoteNotFound:
                print("no quotes yet")
                return 1
            print(f"#{q['id']}: {q['quote']}")
        elif args.cmd == "get":
            try:
                q = quote_svc.quote_detail(args.id)
            except QuoteNotFound:
                print(f"quote #{args.id} not found")
                return 1
            print(f"#{q['id']}: {q['quote']}")
            print(f"  added by {q['author']} on {_fmt_date(q['date'])}")
        elif args.cmd == "edit":
            log = LogContext(ACTION_QUOTE_EDIT, user="cli", db_path=db_path)
            try:
                ok = quote_svc.edit_quote(args.id, args.quote, log)
            except ValueError as ve:
                log.write("ERROR", str(ve))
                print(f"error: {ve}")
                return 1
            if not ok:
                log.write("ERROR", "quote_not_found")
                print(f"quote #{args.id} not found")
                return 1
            log.write("OK")
            print(f"edited quote #{args.id}")
        elif args.cmd == "del":
            log = LogContext(ACTION_QUOTE_DELETE, user="cli", db_path=db_path)
            if not quote_svc.delete_quote(args.id, log):
                log.write("ERROR", "quote_not_found")
                print(f"quote #{args.id} not found")
                return 1
            log.write("OK")
            print(f"deleted quote #{args.id}")
        elif args.cmd == "history":
            items = quote_history(args.id, db_path=db_path)
            if not items:
                print(f"no history for quote #{args.id}")
                return 1
            for it in items:
                line = f"{it['ts']} {it['action']} {it['result']} by {it['user']}"
                if it["err_msg"]:
                    line += f" ({it['err_msg']})"
                print(line)
        elif args.cmd == "list":
            for q in quote_svc.get_store().get_all():
                print(f"#{q.id} [{q.date:%Y-%m-%d}] {q.author}: {q.quote}")
        elif args.cmd == "count":
            print(quote_svc.quote_count())
        return 0
    finally:
        quote_svc.close_store()


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.debug(f"command: {args.cmd}")
    return run(args)


if __name__ == "__main__":
    raise SystemExit(main())
