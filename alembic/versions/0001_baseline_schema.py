"""baseline schema

Revision ID: 0001_baseline_schema
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""

from __future__ import annotations

from pathlib import Path

from alembic import op


revision = "0001_baseline_schema"
down_revision = None
branch_labels = None
depends_on = None

SCHEMA_FILE = Path(__file__).resolve().parents[2] / "db" / "schema_v1.sql"

TABLES = (
    "payout_requests",
    "transactions",
    "user_wallets",
    "books",
    "user_roles",
    "roles",
    "user_details",
    "users",
)


def load_schema_sql(path: Path = SCHEMA_FILE) -> str:
    lines = []
    for line in path.read_text(encoding="utf-8").splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("--"):
            continue
        lines.append(line)
    return "\n".join(lines)


def upgrade() -> None:
    op.execute(load_schema_sql())


def downgrade() -> None:
    for table in TABLES:
        op.execute(f"DROP TABLE IF EXISTS public.{table} CASCADE;")
