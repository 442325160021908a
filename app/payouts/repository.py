

# app/payouts/repository.py
from __future__ import annotations

from decimal import Decimal
from typing import Any, Iterator, Optional
from uuid import UUID

from db_exec import db_fetchone, db_iter

PAYOUT_COLUMNS = """
    id, user_id, amount, utr, remarks, proof_filename, book_id,
    status, created_at, updated_at
"""

ORDER_BY = {
    "created": "pr.created_at DESC, pr.id DESC",
    "updated": "pr.updated_at DESC, pr.id DESC",
}


# ==========================================================
# Writes
# ==========================================================

def insert_payout_request(
    conn,
    *,
    user_id: UUID,
    amount: Decimal,
    utr: str,
    remarks: str,
    proof_filename: Optional[str],
    book_id: Optional[UUID],
) -> dict[str, Any]:
    return db_fetchone(
        conn,
        f"""
        INSERT INTO public.payout_requests
          (user_id, amount, utr, remarks, proof_filename, book_id, status)
        VALUES (%s, %s, %s, %s, %s, %s, 'pending')
        RETURNING {PAYOUT_COLUMNS}
        """,
        (user_id, amount, utr, remarks, proof_filename, book_id),
    )


def lock_payout_request(conn, request_id: UUID) -> Optional[dict[str, Any]]:
    """
    Row-lock the request for the rest of the transaction so concurrent
    transitions on the same id serialize.
    """
    return db_fetchone(
        conn,
        f"""
        SELECT {PAYOUT_COLUMNS}
        FROM public.payout_requests
        WHERE id = %s
        FOR UPDATE
        """,
        (request_id,),
    )


def set_status_if_pending(conn, request_id: UUID, new_status: str) -> Optional[dict[str, Any]]:
    """
    Compare-and-set: returns None when the row is no longer pending.
    """
    return db_fetchone(
        conn,
        f"""
        UPDATE public.payout_requests
        SET status = %s, updated_at = now()
        WHERE id = %s
          AND status = 'pending'
        RETURNING {PAYOUT_COLUMNS}
        """,
        (new_status, request_id),
    )


# ==========================================================
# Reads
# ==========================================================

def iter_payout_requests(
    conn,
    *,
    status: Optional[str] = None,
    order: str = "created",
) -> Iterator[dict[str, Any]]:
    params: list[Any] = []
    where = ""
    if status:
        where = "WHERE pr.status = %s"
        params.append(status)

    sql = f"""
        SELECT
          pr.id,
          pr.user_id,
          pr.amount,
          pr.utr,
          pr.remarks,
          pr.proof_filename,
          pr.book_id,
          pr.status,
          pr.created_at,
          pr.updated_at,
          u.email AS user_email,
          ud.first_name,
          ud.last_name,
          ud.phone AS user_phone,
          (
            SELECT r.name
            FROM public.user_roles ur
            JOIN public.roles r ON r.id = ur.role_id
            WHERE ur.user_id = pr.user_id
            ORDER BY ur.assigned_at ASC
            LIMIT 1
          ) AS user_role
        FROM public.payout_requests pr
        LEFT JOIN public.users u ON u.id = pr.user_id
        LEFT JOIN public.user_details ud ON ud.user_id = pr.user_id
        {where}
        ORDER BY {ORDER_BY.get(order, ORDER_BY["created"])}
    """
    yield from db_iter(conn, sql, params)
