"""
Payment request model and lifecycle states.
"""
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator

TWO_PLACES = Decimal("0.01")


class PaymentStatus(str, Enum):
    """Payment request lifecycle states. Pending is initial, the others are final."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class PaymentType(str, Enum):
    """Kinds of payment a collector can submit."""

    MEMBERSHIP = "membership"
    YEARLY = "yearly"
    OTHER = "other"


class PaymentRequest(BaseModel):
    """A payment request together with its display-only joined names."""

    id: str = Field(..., description="Payment request identifier")
    member_id: str = Field(..., description="Reference to the paying member")
    collector_id: Optional[str] = Field(
        default=None, description="Reference to the submitting collector"
    )
    payment_type: PaymentType = Field(..., description="Kind of payment")
    amount: Decimal = Field(..., gt=0, description="Amount with two-decimal precision")
    status: PaymentStatus = Field(default=PaymentStatus.PENDING, description="Lifecycle state")
    created_at: datetime = Field(..., description="Submission timestamp")
    approved_at: Optional[datetime] = Field(
        default=None, description="Set only when the request was approved"
    )
    approved_by: Optional[str] = Field(
        default=None, description="Identity of the admin who approved or rejected"
    )

    # Display only, never used for integrity
    member_name: Optional[str] = Field(default=None, description="Member's full name")
    collector_name: Optional[str] = Field(default=None, description="Collector's name")

    model_config = {"extra": "ignore"}

    @field_validator("amount")
    @classmethod
    def quantize_amount(cls, v: Decimal) -> Decimal:
        return v.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)

    @property
    def is_pending(self) -> bool:
        return self.status == PaymentStatus.PENDING
