# db.py
import logging

import psycopg2
from psycopg2.pool import SimpleConnectionPool
from contextlib import contextmanager
from services.errors import storage_error_from
from settings import settings
import psycopg2.extras

logger = logging.getLogger("cashbook.db")

_pool: SimpleConnectionPool | None = None


def init_pool():
    """
    Initialize the PostgreSQL connection pool.
    Called once at app startup.
    """
    psycopg2.extras.register_uuid()
    global _pool
    if _pool is None:
        _pool = SimpleConnectionPool(
            minconn=settings.DB_POOL_MIN,
            maxconn=settings.DB_POOL_MAX,
            dsn=settings.DATABASE_URL,
            connect_timeout=5,
        )


def close_pool():
    """
    Gracefully close all pooled connections.
    """
    global _pool
    if _pool:
        _pool.closeall()
        _pool = None


@contextmanager
def get_conn():
    """
    Provides a transactional DB connection.
    Commits on success, rolls back on any error raised inside the block.
    Driver errors leave as StorageError.
    """
    try:
        if _pool is None:
            init_pool()
        conn = _pool.getconn()
    except psycopg2.Error as e:
        raise storage_error_from(e) from e

    try:
        # never allow long-running queries or idle open transactions
        timeout = f"{int(settings.DB_STATEMENT_TIMEOUT_MS)}ms"
        with conn.cursor() as cur:
            cur.execute("SELECT set_config('statement_timeout', %s, false);", (timeout,))
            cur.execute("SELECT set_config('idle_in_transaction_session_timeout', %s, false);", (timeout,))
            cur.execute("SET application_name = 'cashbook_admin_api';")

        yield conn
        conn.commit()

    except Exception as exc:
        try:
            conn.rollback()
        except psycopg2.Error:
            logger.exception("rollback failed")
        if isinstance(exc, psycopg2.Error):
            raise storage_error_from(exc) from exc
        raise

    finally:
        _pool.putconn(conn)
