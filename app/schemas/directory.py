"""
Response schemas for member directory endpoints.
"""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from app.models.member import Member, MemberPage, Roster


class MemberItem(BaseModel):
    """Member as returned to callers."""

    id: str = Field(..., description="Member identifier")
    full_name: str = Field(..., description="Member's full name")
    member_number: str = Field(..., description="Human-facing member number")
    collector: Optional[str] = Field(default=None, description="Owning collector name")
    created_at: datetime = Field(..., description="Enrollment timestamp")

    @classmethod
    def from_member(cls, member: Member) -> "MemberItem":
        return cls(**member.model_dump())


class MemberListResponse(BaseModel):
    """One page of members."""

    members: List[MemberItem] = Field(..., description="Members on this page")
    total_count: int = Field(..., description="Matching members across all pages")
    page: int = Field(..., description="1-indexed page number")
    page_size: int = Field(..., description="Requested page size")
    total_pages: int = Field(..., description="ceil(total_count / page_size)")

    @classmethod
    def from_page(cls, page: MemberPage) -> "MemberListResponse":
        return cls(
            members=[MemberItem.from_member(m) for m in page.members],
            total_count=page.total_count,
            page=page.page,
            page_size=page.page_size,
            total_pages=page.total_pages,
        )


class RosterResponse(BaseModel):
    """Full scoped member set for report generation."""

    title: str = Field(..., description="Report title")
    members: List[MemberItem] = Field(..., description="Every member in scope")
    total_count: int = Field(..., description="Number of members in the roster")

    @classmethod
    def from_roster(cls, roster: Roster) -> "RosterResponse":
        return cls(
            title=roster.title,
            members=[MemberItem.from_member(m) for m in roster.members],
            total_count=len(roster.members),
        )


class CollectorMembersResponse(BaseModel):
    """All members owned by one collector."""

    collector_name: str = Field(..., description="Collector name")
    members: List[MemberItem] = Field(..., description="Members owned by the collector")
    total_count: int = Field(..., description="Number of members")
