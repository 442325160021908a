

from __future__ import annotations
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Any
from uuid import UUID
from datetime import datetime


@dataclass(frozen=True)
class PayoutRequest:
    id: UUID
    user_id: Optional[UUID]
    amount: Decimal
    utr: str
    remarks: str
    proof_filename: Optional[str]
    book_id: Optional[UUID]
    status: str
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "PayoutRequest":
        return cls(
            id=row["id"],
            user_id=row.get("user_id"),
            amount=Decimal(row["amount"]),
            utr=row["utr"],
            remarks=row["remarks"],
            proof_filename=row.get("proof_filename"),
            book_id=row.get("book_id"),
            status=row["status"],
            created_at=row["created_at"],
            updated_at=row.get("updated_at") or row["created_at"],
        )

    @property
    def reference(self) -> str:
        # REQ-2026-1A2B3C4D
        short_id = self.id.hex[:8].upper()
        return f"REQ-{self.created_at.year}-{short_id}"


@dataclass(frozen=True)
class LedgerPosting:
    transaction_id: UUID
    book_id: UUID
    wallet_id: Optional[UUID]
    amount: Decimal
    book_source: str
    wallet_balance: Optional[Decimal]


@dataclass(frozen=True)
class TransitionResult:
    request: PayoutRequest
    posting: Optional[LedgerPosting]

    @property
    def transaction_created(self) -> bool:
        return self.posting is not None


@dataclass(frozen=True)
class PayoutRequestView:
    """
    List projection: the request plus who submitted it.
    """
    request: PayoutRequest
    user_email: Optional[str]
    first_name: Optional[str]
    last_name: Optional[str]
    user_phone: Optional[str]
    user_role: Optional[str]

    @property
    def full_name(self) -> str:
        name = " ".join(p for p in (self.first_name, self.last_name) if p).strip()
        if name:
            return name
        if self.user_email:
            return self.user_email.split("@")[0]
        return "Unknown"

    @property
    def submitted_by(self) -> str:
        return f"{self.full_name} ({self.user_role or 'staff'})"
