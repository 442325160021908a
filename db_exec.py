# db_exec.py
from __future__ import annotations

import uuid
from typing import Any, Iterator, Optional, Sequence

import psycopg2
from psycopg2.extensions import connection as Connection
from psycopg2.extras import RealDictCursor

from services.errors import storage_error_from


def db_fetchone(conn: Connection, sql: str, params: Optional[Sequence[Any]] = None) -> Optional[dict]:
    """
    Execute on the provided connection so the statement joins the caller's transaction.
    """
    try:
        with conn.cursor(cursor_factory=RealDictCursor) as cur:
            cur.execute(sql, params or ())
            row = cur.fetchone()
            return dict(row) if row is not None else None
    except psycopg2.Error as e:
        raise storage_error_from(e) from e


def db_fetchall(conn: Connection, sql: str, params: Optional[Sequence[Any]] = None) -> list[dict]:
    try:
        with conn.cursor(cursor_factory=RealDictCursor) as cur:
            cur.execute(sql, params or ())
            return [dict(r) for r in cur.fetchall()]
    except psycopg2.Error as e:
        raise storage_error_from(e) from e


def db_iter(
    conn: Connection,
    sql: str,
    params: Optional[Sequence[Any]] = None,
    *,
    batch_size: int = 200,
) -> Iterator[dict]:
    """
    Stream rows through a named (server-side) cursor, batch_size rows per
    round trip. Must run inside an open transaction, which get_conn() provides.
    """
    name = f"cashbook_iter_{uuid.uuid4().hex}"
    try:
        with conn.cursor(name=name, cursor_factory=RealDictCursor) as cur:
            cur.itersize = batch_size
            cur.execute(sql, params or ())
            while True:
                rows = cur.fetchmany(batch_size)
                if not rows:
                    break
                for r in rows:
                    yield dict(r)
    except psycopg2.Error as e:
        raise storage_error_from(e) from e


def db_execute(conn: Connection, sql: str, params: Optional[Sequence[Any]] = None) -> int:
    try:
        with conn.cursor() as cur:
            cur.execute(sql, params or ())
            return cur.rowcount
    except psycopg2.Error as e:
        raise storage_error_from(e) from e
