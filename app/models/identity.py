"""
Resolved caller identity.
"""
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class Role(str, Enum):
    """Caller roles, ordered from least to most privileged."""

    MEMBER = "member"
    COLLECTOR = "collector"
    ADMIN = "admin"

    @property
    def rank(self) -> int:
        return _ROLE_RANK[self]


_ROLE_RANK = {Role.MEMBER: 0, Role.COLLECTOR: 1, Role.ADMIN: 2}


class Caller(BaseModel):
    """The principal behind a request, as resolved by the identity service."""

    id: str = Field(..., description="Authenticated user identifier")
    role: Role = Field(default=Role.MEMBER, description="Highest role held")
    member_number: Optional[str] = Field(
        default=None, description="Member number from server-side user metadata"
    )
    collector_name: Optional[str] = Field(
        default=None,
        description="Collector scope, only from a trusted lookup and only for collectors",
    )

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    @property
    def is_collector(self) -> bool:
        return self.role == Role.COLLECTOR
