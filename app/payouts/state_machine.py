

# app/payouts/state_machine.py
from __future__ import annotations

from services.errors import InvalidStateError, ValidationError

PENDING = "pending"
ACCEPTED = "accepted"
REJECTED = "rejected"

STATUSES = (PENDING, ACCEPTED, REJECTED)

ALLOWED = {
    PENDING: {ACCEPTED, REJECTED},
    ACCEPTED: set(),
    REJECTED: set(),
}


def is_terminal(status: str) -> bool:
    return not ALLOWED.get(status)


def normalize_status(value: str | None) -> str:
    raw = (value or "").strip().lower()
    if raw not in STATUSES:
        raise ValidationError(f"Unknown payout status: {value}", code="INVALID_STATUS")
    return raw


def assert_transition(old: str, new: str) -> None:
    if new not in ALLOWED.get(old, set()):
        raise InvalidStateError(
            f"Request is not in pending status ({old} -> {new})",
            code="PAYOUT_NOT_PENDING",
        )
