
# app/ledger/repository.py
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any, Optional
from uuid import UUID

from psycopg2.extras import Json

from db_exec import db_fetchone


# ==========================================================
# Books
# ==========================================================

def user_owns_book(conn, *, book_id: UUID, user_id: UUID) -> bool:
    row = db_fetchone(
        conn,
        "SELECT id FROM public.books WHERE id = %s AND owner_user_id = %s",
        (book_id, user_id),
    )
    return row is not None


def earliest_book_for_owner(conn, user_id: UUID) -> Optional[UUID]:
    row = db_fetchone(
        conn,
        """
        SELECT id
        FROM public.books
        WHERE owner_user_id = %s
        ORDER BY created_at ASC, id ASC
        LIMIT 1
        """,
        (user_id,),
    )
    return row["id"] if row else None


def earliest_book(conn) -> Optional[UUID]:
    row = db_fetchone(
        conn,
        "SELECT id FROM public.books ORDER BY created_at ASC, id ASC LIMIT 1",
    )
    return row["id"] if row else None


# ==========================================================
# Wallets
# ==========================================================

def wallet_for_user(conn, user_id: UUID) -> Optional[dict[str, Any]]:
    return db_fetchone(
        conn,
        """
        SELECT id, user_id, balance, currency_code
        FROM public.user_wallets
        WHERE user_id = %s
        FOR UPDATE
        """,
        (user_id,),
    )


def adjust_wallet_balance(conn, *, wallet_id: UUID, delta: Decimal) -> Decimal:
    row = db_fetchone(
        conn,
        """
        UPDATE public.user_wallets
        SET balance = balance + %s, updated_at = now()
        WHERE id = %s
        RETURNING balance
        """,
        (delta, wallet_id),
    )
    return Decimal(row["balance"])


# ==========================================================
# Transactions
# ==========================================================

def insert_transaction(
    conn,
    *,
    book_id: UUID,
    user_id: UUID,
    wallet_id: Optional[UUID],
    tx_type: str,
    status: str,
    amount: Decimal,
    currency_code: str,
    description: str,
    metadata: dict[str, Any],
    occurred_at: datetime,
) -> UUID:
    row = db_fetchone(
        conn,
        """
        INSERT INTO public.transactions
          (book_id, user_id, wallet_id, type, status, amount, currency_code,
           description, metadata, occurred_at)
        VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s::jsonb, %s)
        RETURNING id
        """,
        (
            book_id,
            user_id,
            wallet_id,
            tx_type,
            status,
            amount,
            currency_code,
            description,
            Json(metadata),
            occurred_at,
        ),
    )
    return row["id"]
