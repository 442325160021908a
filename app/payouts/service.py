
# app/payouts/service.py
from __future__ import annotations

import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Iterator, Optional
from uuid import UUID

from db import get_conn
from app.ledger import poster
from app.ledger import repository as ledger_repo
from app.payouts import repository as payout_repo
from app.payouts.model import PayoutRequest, PayoutRequestView, TransitionResult
from app.payouts.state_machine import ACCEPTED, PENDING, assert_transition, normalize_status
from services import proof_storage, roles
from services.errors import InvalidStateError, NotFoundError, ValidationError

logger = logging.getLogger("cashbook.payouts")

MIN_UTR_LENGTH = 4
LIST_ORDERS = ("created", "updated")


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _validate_new_request(amount: Decimal, utr: str, remarks: str) -> None:
    if amount is None or Decimal(amount) <= 0:
        raise ValidationError("Amount must be greater than zero", code="INVALID_AMOUNT")
    if len((utr or "").strip()) < MIN_UTR_LENGTH:
        raise ValidationError(
            f"UTR must be at least {MIN_UTR_LENGTH} characters",
            code="INVALID_UTR",
        )
    if not (remarks or "").strip():
        raise ValidationError("Remarks are required", code="INVALID_REMARKS")


def create_payout_request(
    *,
    user_id: UUID,
    amount: Decimal,
    utr: str,
    remarks: str,
    proof: str,
    book_id: Optional[UUID] = None,
) -> PayoutRequest:
    _validate_new_request(amount, utr, remarks)

    proof_ref = None
    try:
        with get_conn() as conn:
            if roles.get_user(conn, user_id) is None:
                raise NotFoundError("User not found", code="USER_NOT_FOUND")

            if book_id and not ledger_repo.user_owns_book(conn, book_id=book_id, user_id=user_id):
                raise ValidationError(
                    "Book not found or does not belong to user",
                    code="BOOK_NOT_OWNED",
                )

            proof_ref = proof_storage.store_proof(proof)
            row = payout_repo.insert_payout_request(
                conn,
                user_id=user_id,
                amount=Decimal(amount),
                utr=utr.strip(),
                remarks=remarks.strip(),
                proof_filename=proof_ref,
                book_id=book_id,
            )
    except Exception:
        # the row rolled back (or never committed), so nothing references the file
        if proof_ref:
            proof_storage.discard_proof(proof_ref)
        raise

    created = PayoutRequest.from_row(row)
    logger.info(
        "payout request created payout_request_id=%s user_id=%s amount=%s book_id=%s",
        created.id,
        user_id,
        created.amount,
        created.book_id,
    )
    return created


def iter_payout_requests(
    *,
    status: Optional[str] = None,
    order: str = "created",
) -> Iterator[PayoutRequestView]:
    """
    Arguments are checked eagerly; rows are streamed when iterated.
    Every call returns a fresh iterator backed by its own connection.
    """
    status_filter = None
    if status and status.strip().lower() != "all":
        status_filter = normalize_status(status)
    if order not in LIST_ORDERS:
        raise ValidationError(f"Unknown order: {order}", code="INVALID_ORDER")
    return _stream_payout_requests(status_filter, order)


def _stream_payout_requests(status: Optional[str], order: str) -> Iterator[PayoutRequestView]:
    with get_conn() as conn:
        for row in payout_repo.iter_payout_requests(conn, status=status, order=order):
            yield PayoutRequestView(
                request=PayoutRequest.from_row(row),
                user_email=row.get("user_email"),
                first_name=row.get("first_name"),
                last_name=row.get("last_name"),
                user_phone=row.get("user_phone"),
                user_role=row.get("user_role"),
            )


def transition_status(
    *,
    payout_request_id: UUID,
    new_status: str,
    actor_user_id: UUID,
    notes: str = "",
    request_id: str | None = None,
) -> TransitionResult:
    """
    Decide a pending payout request. The status change and, for
    acceptance, the ledger posting and wallet debit commit together or
    not at all.
    """
    target = normalize_status(new_status)
    if target == PENDING:
        raise ValidationError("Status must be accepted or rejected", code="INVALID_STATUS")

    with get_conn() as conn:
        row = payout_repo.lock_payout_request(conn, payout_request_id)
        if row is None:
            raise NotFoundError("Payout request not found", code="PAYOUT_REQUEST_NOT_FOUND")

        current = PayoutRequest.from_row(row)
        assert_transition(current.status, target)

        updated_row = payout_repo.set_status_if_pending(conn, payout_request_id, target)
        if updated_row is None:
            raise InvalidStateError("Request is not in pending status", code="PAYOUT_NOT_PENDING")
        updated = PayoutRequest.from_row(updated_row)

        posting = None
        if target == ACCEPTED:
            posting = poster.post_payout_debit(
                conn,
                payout=updated,
                actor_user_id=actor_user_id,
                notes=notes,
                approved_at=_now(),
                request_id=request_id,
            )

    logger.info(
        "payout request %s payout_request_id=%s actor=%s transaction_id=%s",
        target,
        updated.id,
        actor_user_id,
        posting.transaction_id if posting else None,
    )
    return TransitionResult(request=updated, posting=posting)
