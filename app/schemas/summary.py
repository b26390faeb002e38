"""
Response schema for collector summaries.
"""
from decimal import Decimal

from pydantic import BaseModel, Field

from app.models.summary import CollectorSummary


class CollectorSummaryResponse(BaseModel):
    """Per-collector rollup."""

    collector_name: str = Field(..., description="Collector name")
    member_count: int = Field(..., description="Members owned by the collector")
    pending_count: int = Field(..., description="Pending payment requests")
    approved_total: Decimal = Field(..., description="Sum of approved amounts")

    @classmethod
    def from_summary(cls, summary: CollectorSummary) -> "CollectorSummaryResponse":
        return cls(**summary.model_dump())
