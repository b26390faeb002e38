"""
Payment request API endpoints for administrator review.
"""
from fastapi import APIRouter, Depends, HTTPException

from app.core.dependencies import get_payment_request_service, require_admin
from app.core.exceptions import InternalServerError
from app.models.identity import Caller
from app.schemas.common import ErrorResponse
from app.schemas.payment_request import (
    PaymentDecisionResponse,
    PaymentRequestItem,
    PaymentRequestListResponse,
)
from app.services.payment_request_service import PaymentRequestService
import structlog

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/payment-requests", tags=["payment-requests"])

DECISION_RESPONSES = {
    200: {"description": "Decision stored"},
    401: {"model": ErrorResponse, "description": "Missing or invalid token"},
    403: {"model": ErrorResponse, "description": "Caller is not an administrator"},
    404: {"model": ErrorResponse, "description": "Payment request not found"},
    409: {"model": ErrorResponse, "description": "Request was already decided"},
    503: {"model": ErrorResponse, "description": "Storage unavailable, safe to retry"},
}


@router.get(
    "",
    response_model=PaymentRequestListResponse,
    responses={
        200: {"description": "Payment requests retrieved successfully"},
        401: {"model": ErrorResponse, "description": "Missing or invalid token"},
        403: {"model": ErrorResponse, "description": "Caller is not an administrator"},
        503: {"model": ErrorResponse, "description": "Storage unavailable"},
    },
    summary="List payment requests",
    description="All payment requests, newest first, with member and collector names",
)
async def list_payment_requests(
    caller: Caller = Depends(require_admin),
    payments: PaymentRequestService = Depends(get_payment_request_service),
) -> PaymentRequestListResponse:
    try:
        requests = await payments.list_payment_requests()
        items = [PaymentRequestItem.from_request(r) for r in requests]
        return PaymentRequestListResponse(payment_requests=items, total_count=len(items))

    except HTTPException:
        raise
    except Exception as e:
        logger.error("Error retrieving payment requests", error=str(e), exc_info=True)
        raise InternalServerError("Failed to retrieve payment requests")


@router.get(
    "/{request_id}",
    response_model=PaymentRequestItem,
    responses={
        200: {"description": "Payment request retrieved"},
        404: {"model": ErrorResponse, "description": "Payment request not found"},
    },
    summary="Get a payment request",
)
async def get_payment_request(
    request_id: str,
    caller: Caller = Depends(require_admin),
    payments: PaymentRequestService = Depends(get_payment_request_service),
) -> PaymentRequestItem:
    request = await payments.get_payment_request(request_id)
    return PaymentRequestItem.from_request(request)


async def _decide(
    payments: PaymentRequestService, request_id: str, caller: Caller, approve: bool
) -> PaymentDecisionResponse:
    action = "approve" if approve else "reject"
    try:
        decided = await payments.decide(request_id, caller, approve)

        logger.info(
            "Payment decision processed successfully",
            request_id=request_id,
            action=action,
            approver=caller.id,
        )

        return PaymentDecisionResponse(
            success=True,
            message="Payment Approved" if approve else "Payment Rejected",
            payment_request=PaymentRequestItem.from_request(decided),
        )

    except HTTPException:
        raise
    except Exception as e:
        logger.error(
            "Unexpected error processing payment decision",
            request_id=request_id,
            action=action,
            error=str(e),
            exc_info=True,
        )
        raise InternalServerError("Failed to process the payment request")


@router.post(
    "/{request_id}/approve",
    response_model=PaymentDecisionResponse,
    responses=DECISION_RESPONSES,
    summary="Approve a payment request",
    description="Approve a pending payment request. Fails with 409 if it was already decided.",
)
async def approve_payment_request(
    request_id: str,
    caller: Caller = Depends(require_admin),
    payments: PaymentRequestService = Depends(get_payment_request_service),
) -> PaymentDecisionResponse:
    return await _decide(payments, request_id, caller, approve=True)


@router.post(
    "/{request_id}/reject",
    response_model=PaymentDecisionResponse,
    responses=DECISION_RESPONSES,
    summary="Reject a payment request",
    description="Reject a pending payment request. Fails with 409 if it was already decided.",
)
async def reject_payment_request(
    request_id: str,
    caller: Caller = Depends(require_admin),
    payments: PaymentRequestService = Depends(get_payment_request_service),
) -> PaymentDecisionResponse:
    return await _decide(payments, request_id, caller, approve=False)
