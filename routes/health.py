from __future__ import annotations

import logging
import os

from fastapi import APIRouter

from db import get_conn
from settings import settings

router = APIRouter(tags=["health"])
logger = logging.getLogger("cashbook.health")

# head revision this build expects
MIGRATION_REVISION = "0001_baseline_schema"


def _check_db() -> tuple[bool, str | None]:
    try:
        with get_conn() as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT 1;")
                cur.fetchone()
        return True, None
    except Exception as exc:
        logger.warning("db check failed error=%s", type(exc).__name__)
        return False, type(exc).__name__


def _current_revision() -> str | None:
    try:
        with get_conn() as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT to_regclass('public.alembic_version');")
                if not cur.fetchone()[0]:
                    return None
                cur.execute("SELECT version_num FROM alembic_version LIMIT 1;")
                row = cur.fetchone()
                return row[0] if row else None
    except Exception as exc:
        logger.warning("migration check failed error=%s", type(exc).__name__)
        return None


@router.get("/health")
def health():
    return {
        "ok": True,
        "env": settings.ENV,
        "git_sha": (os.getenv("GIT_SHA") or "").strip() or None,
    }


@router.get("/healthz")
def healthz():
    db_ok, db_error = _check_db()
    return {
        "ok": True,
        "version": os.getenv("APP_VERSION", "1.0.0"),
        "db_ok": db_ok,
        "db_error": db_error,
    }


@router.get("/readyz")
def readyz():
    db_ok, db_error = _check_db()
    revision = _current_revision() if db_ok else None
    migrations_ok = revision == MIGRATION_REVISION
    return {
        "ready": bool(db_ok and migrations_ok),
        "version": os.getenv("APP_VERSION", "1.0.0"),
        "db_ok": db_ok,
        "db_error": db_error,
        "migrations_ok": migrations_ok,
        "migration_revision": revision,
        "expected_revision": MIGRATION_REVISION,
        "payout_book_fallback": settings.PAYOUT_BOOK_FALLBACK,
    }
