

# services/roles.py
from __future__ import annotations

from typing import Any, Optional
from uuid import UUID

from db_exec import db_fetchall, db_fetchone
from settings import settings


def get_user(conn, user_id: UUID) -> Optional[dict[str, Any]]:
    return db_fetchone(
        conn,
        "SELECT id, email, status FROM public.users WHERE id = %s",
        (user_id,),
    )


def get_user_roles(conn, user_id: UUID) -> list[str]:
    rows = db_fetchall(
        conn,
        """
        SELECT r.name
        FROM public.user_roles ur
        JOIN public.roles r ON r.id = ur.role_id
        WHERE ur.user_id = %s
        ORDER BY ur.assigned_at ASC
        """,
        (user_id,),
    )
    return [r["name"] for r in rows]


def is_admin(roles: list[str]) -> bool:
    wanted = settings.ADMIN_ROLE_NAME.strip().lower()
    return any((r or "").strip().lower() == wanted for r in roles)


def list_roles_with_counts(conn) -> list[dict[str, Any]]:
    return db_fetchall(
        conn,
        """
        SELECT
          r.id,
          r.name,
          r.description,
          r.created_at,
          r.updated_at,
          COUNT(ur.user_id) AS user_count
        FROM public.roles r
        LEFT JOIN public.user_roles ur ON ur.role_id = r.id
        GROUP BY r.id, r.name, r.description, r.created_at, r.updated_at
        ORDER BY r.name ASC
        """,
    )


PERMISSIONS_MATRIX: list[dict[str, str]] = [
    {
        "capability": "Create payout request",
        "endUser": "yes",
        "businessOwner": "yes",
        "auditor": "view",
        "platformAdmin": "yes",
    },
    {
        "capability": "Upload attachments",
        "endUser": "yes",
        "businessOwner": "yes",
        "auditor": "view",
        "platformAdmin": "yes",
    },
    {
        "capability": "Approve / Reject payout",
        "endUser": "no",
        "businessOwner": "yes",
        "auditor": "view",
        "platformAdmin": "yes",
    },
    {
        "capability": "Automatically post to ledger on Accept",
        "endUser": "auto",
        "businessOwner": "triggered",
        "auditor": "verify",
        "platformAdmin": "override if needed",
    },
    {
        "capability": "Access audit log",
        "endUser": "history of own requests",
        "businessOwner": "full history",
        "auditor": "full history + export",
        "platformAdmin": "full history",
    },
    {
        "capability": "Manage role assignments",
        "endUser": "no",
        "businessOwner": "suggest changes",
        "auditor": "no",
        "platformAdmin": "yes",
    },
]

PERMISSION_NOTES: list[str] = [
    "Ledger entries are immutable once posted; every payout posting references its request id in metadata.",
    "A payout request is decided exactly once; accepted and rejected are final.",
]
