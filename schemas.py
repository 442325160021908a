

# schemas.py
from __future__ import annotations

from decimal import Decimal
from pydantic import BaseModel, ConfigDict, Field
from uuid import UUID
from typing import Optional, Literal

DecisionStatus = Literal["accepted", "rejected"]


# -------- PAYOUT REQUESTS --------
class PayoutRequestCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    amount: Decimal = Field(gt=0, max_digits=14, decimal_places=2)
    utr: str = Field(min_length=4, max_length=64)
    remarks: str = Field(min_length=1, max_length=1000)
    # data:<mime>;base64,<payload>
    proof: str = Field(min_length=1)
    book_id: Optional[UUID] = None


class PayoutStatusUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    status: DecisionStatus
    notes: str = Field(default="", max_length=2000)
