"""
Member and collector directory records.
"""
import math
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class Member(BaseModel):
    """A member of the organization as stored in the ``members`` table."""

    id: str = Field(..., description="Member identifier")
    full_name: str = Field(..., description="Member's full name")
    member_number: str = Field(..., description="Human-facing member number")
    collector: Optional[str] = Field(
        default=None, description="Name of the collector who owns this member"
    )
    created_at: datetime = Field(..., description="Enrollment timestamp")

    model_config = {"extra": "ignore"}


class MemberPage(BaseModel):
    """One page of a member query plus the total number of matches."""

    members: List[Member] = Field(default_factory=list)
    total_count: int = Field(default=0, ge=0, description="Matches before pagination")
    page: int = Field(..., ge=1)
    page_size: int = Field(..., ge=1)

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_count / self.page_size)


class Roster(BaseModel):
    """The member set and title handed to the report generator."""

    title: str
    members: List[Member] = Field(default_factory=list)


class Collector(BaseModel):
    """A collector as stored in the ``members_collectors`` table."""

    id: str = Field(..., description="Stable collector identifier")
    name: str = Field(..., description="Collector name, referenced by Member.collector")
    member_number: Optional[str] = Field(
        default=None, description="Member number of the collector's own login"
    )

    model_config = {"extra": "ignore"}
