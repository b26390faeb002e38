"""
Response schemas for payment request endpoints.
"""
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

from app.models.payment_request import PaymentRequest, PaymentStatus, PaymentType


class PaymentRequestItem(BaseModel):
    """Payment request with display names."""

    id: str = Field(..., description="Payment request ID")
    member_id: str = Field(..., description="Paying member ID")
    collector_id: Optional[str] = Field(default=None, description="Submitting collector ID")
    member_name: Optional[str] = Field(default=None, description="Member's full name")
    collector_name: Optional[str] = Field(default=None, description="Collector's name")
    payment_type: PaymentType = Field(..., description="Kind of payment")
    amount: Decimal = Field(..., description="Amount, two decimal places")
    status: PaymentStatus = Field(..., description="pending, approved or rejected")
    created_at: datetime = Field(..., description="Submission time")
    approved_at: Optional[datetime] = Field(default=None, description="Approval time")
    approved_by: Optional[str] = Field(default=None, description="Deciding admin")

    @classmethod
    def from_request(cls, request: PaymentRequest) -> "PaymentRequestItem":
        return cls(**request.model_dump())


class PaymentRequestListResponse(BaseModel):
    """All payment requests, newest first."""

    payment_requests: List[PaymentRequestItem] = Field(..., description="Payment requests")
    total_count: int = Field(..., description="Number of payment requests")


class PaymentDecisionResponse(BaseModel):
    """Outcome of an approve or reject action."""

    success: bool = Field(..., description="Whether the decision was stored")
    message: str = Field(..., description="Response message")
    payment_request: PaymentRequestItem = Field(..., description="The decided request")

