
# app/ledger/poster.py
from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from app.ledger import repository as ledger_repo
from app.payouts.model import LedgerPosting, PayoutRequest
from services.errors import InvalidStateError, ValidationError
from settings import settings

logger = logging.getLogger("cashbook.ledger")

TX_TYPE_DEBIT = "debit"
TX_STATUS_COMPLETED = "completed"

BOOK_FROM_REQUEST = "payout_request"
BOOK_OWNER_DEFAULT = "owner_default"
BOOK_GLOBAL_FALLBACK = "global_fallback"


def resolve_book(conn, payout: PayoutRequest) -> tuple[Optional[UUID], Optional[str]]:
    """
    Pick the book a payout posts into, in priority order:
      1. the book stored on the request
      2. the requesting user's oldest book
      3. depending on PAYOUT_BOOK_FALLBACK, the oldest book in the system

    Returns (book_id, source); (None, None) means posting is skipped.
    """
    if payout.book_id:
        return payout.book_id, BOOK_FROM_REQUEST

    owned = ledger_repo.earliest_book_for_owner(conn, payout.user_id)
    if owned:
        return owned, BOOK_OWNER_DEFAULT

    policy = settings.PAYOUT_BOOK_FALLBACK
    if policy == "reject":
        raise ValidationError(
            "Requesting user owns no book to post the payout into",
            code="NO_BOOK_AVAILABLE",
        )
    if policy == "skip":
        return None, None

    fallback = ledger_repo.earliest_book(conn)
    if fallback:
        # posts into a book the user does not own
        logger.warning(
            "payout posted to global fallback book payout_request_id=%s user_id=%s book_id=%s",
            payout.id,
            payout.user_id,
            fallback,
        )
        return fallback, BOOK_GLOBAL_FALLBACK
    return None, None


def describe(payout: PayoutRequest) -> str:
    return f"Payout Request: {payout.utr} - {payout.remarks}"


def post_payout_debit(
    conn,
    *,
    payout: PayoutRequest,
    actor_user_id: UUID,
    notes: str,
    approved_at: datetime,
    request_id: str | None = None,
) -> Optional[LedgerPosting]:
    """
    Cash-out side effect of accepting a payout. Runs on the caller's
    connection; any exception aborts the caller's transaction.
    """
    if payout.user_id is None:
        logger.warning(
            "payout accepted without user_id, skipping ledger posting payout_request_id=%s",
            payout.id,
        )
        return None

    book_id, book_source = resolve_book(conn, payout)
    if book_id is None:
        logger.warning(
            "no book resolved, skipping ledger posting payout_request_id=%s user_id=%s policy=%s",
            payout.id,
            payout.user_id,
            settings.PAYOUT_BOOK_FALLBACK,
        )
        return None

    wallet = ledger_repo.wallet_for_user(conn, payout.user_id)
    wallet_id = wallet["id"] if wallet else None
    if wallet is None:
        logger.warning(
            "user has no wallet, posting without balance change payout_request_id=%s user_id=%s",
            payout.id,
            payout.user_id,
        )
    elif not settings.ALLOW_NEGATIVE_WALLET_BALANCE:
        if Decimal(wallet["balance"]) - payout.amount < 0:
            raise InvalidStateError(
                "Wallet balance is lower than the payout amount",
                code="INSUFFICIENT_BALANCE",
            )

    metadata = {
        "payout_request_id": str(payout.id),
        "utr": payout.utr,
        "approved_by": str(actor_user_id),
        "approved_at": approved_at.isoformat(),
        "notes": notes,
        "book_source": book_source,
    }
    if request_id:
        metadata["request_id"] = request_id

    transaction_id = ledger_repo.insert_transaction(
        conn,
        book_id=book_id,
        user_id=payout.user_id,
        wallet_id=wallet_id,
        tx_type=TX_TYPE_DEBIT,
        status=TX_STATUS_COMPLETED,
        amount=payout.amount,
        currency_code=settings.DEFAULT_CURRENCY,
        description=describe(payout),
        metadata=metadata,
        occurred_at=approved_at,
    )

    new_balance = None
    if wallet_id is not None:
        new_balance = ledger_repo.adjust_wallet_balance(conn, wallet_id=wallet_id, delta=-payout.amount)

    logger.info(
        "cash-out posted payout_request_id=%s transaction_id=%s user_id=%s amount=%s book_id=%s wallet_id=%s",
        payout.id,
        transaction_id,
        payout.user_id,
        payout.amount,
        book_id,
        wallet_id,
    )
    return LedgerPosting(
        transaction_id=transaction_id,
        book_id=book_id,
        wallet_id=wallet_id,
        amount=payout.amount,
        book_source=book_source,
        wallet_balance=new_balance,
    )
