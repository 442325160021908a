
# routes/payout_requests.py
from __future__ import annotations

from typing import Any, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request

from app.payouts import service
from app.payouts.model import PayoutRequest, PayoutRequestView, TransitionResult
from deps.admin import require_admin
from deps.auth import CurrentUser, get_current_user
from schemas import PayoutRequestCreate, PayoutStatusUpdate

router = APIRouter(prefix="/api/payout-requests", tags=["payout-requests"])


def _iso(value) -> Optional[str]:
    return value.isoformat() if value else None


def _serialize_created(req: PayoutRequest) -> dict[str, Any]:
    return {
        "id": str(req.id),
        "status": req.status,
        "created_at": _iso(req.created_at),
        "proof_filename": req.proof_filename,
        "amount": float(req.amount),
        "book_id": str(req.book_id) if req.book_id else None,
    }


def _serialize_decided(req: PayoutRequest) -> dict[str, Any]:
    return {
        "id": str(req.id),
        "status": req.status,
        "amount": float(req.amount),
        "utr": req.utr,
        "remarks": req.remarks,
        "created_at": _iso(req.created_at),
        "updated_at": _iso(req.updated_at),
    }


def _serialize_listed(view: PayoutRequestView) -> dict[str, Any]:
    req = view.request
    return {
        "id": str(req.id),
        "reference": req.reference,
        "submittedBy": view.submitted_by,
        "amount": float(req.amount),
        "utr": req.utr,
        "remarks": req.remarks,
        "status": req.status,
        "bookId": str(req.book_id) if req.book_id else None,
        "createdAt": _iso(req.created_at),
        "updatedAt": _iso(req.updated_at),
        "userEmail": view.user_email,
        "userPhone": view.user_phone or None,
    }


@router.post("", status_code=201)
def create_payout_request(
    payload: PayoutRequestCreate,
    user: CurrentUser = Depends(get_current_user),
):
    created = service.create_payout_request(
        user_id=user.user_id,
        amount=payload.amount,
        utr=payload.utr,
        remarks=payload.remarks,
        proof=payload.proof,
        book_id=payload.book_id,
    )
    return {"request": _serialize_created(created)}


@router.get("")
def list_payout_requests(
    status: Optional[str] = Query(default=None),
    order: str = Query(default="created"),
    admin: CurrentUser = Depends(require_admin),
):
    rows = service.iter_payout_requests(status=status, order=order)
    return {"payoutRequests": [_serialize_listed(v) for v in rows]}


@router.patch("/{payout_request_id}/status")
def update_payout_request_status(
    payout_request_id: UUID,
    payload: PayoutStatusUpdate,
    req: Request,
    admin: CurrentUser = Depends(require_admin),
):
    result: TransitionResult = service.transition_status(
        payout_request_id=payout_request_id,
        new_status=payload.status,
        actor_user_id=admin.user_id,
        notes=payload.notes,
        request_id=getattr(req.state, "request_id", None),
    )
    return {
        "success": True,
        "request": _serialize_decided(result.request),
        "transactionCreated": result.transaction_created,
        "transactionId": str(result.posting.transaction_id) if result.posting else None,
    }
