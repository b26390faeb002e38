"""
Models package for the Collector Membership Service.
"""
from .identity import Caller, Role
from .member import Collector, Member, MemberPage, Roster
from .payment_request import PaymentRequest, PaymentStatus, PaymentType
from .summary import CollectorSummary

__all__ = [
    "Caller",
    "Collector",
    "CollectorSummary",
    "Member",
    "MemberPage",
    "Roster",
    "PaymentRequest",
    "PaymentStatus",
    "PaymentType",
    "Role",
]
