"""
Per-collector rollup of members and payment requests.
"""
from decimal import Decimal

from pydantic import BaseModel, Field


class CollectorSummary(BaseModel):
    """Counts and totals for one collector."""

    collector_name: str = Field(..., description="Collector name")
    member_count: int = Field(default=0, ge=0, description="Members owned by the collector")
    pending_count: int = Field(default=0, ge=0, description="Pending payment requests")
    approved_total: Decimal = Field(
        default=Decimal("0.00"), description="Sum of approved amounts, two decimal places"
    )
