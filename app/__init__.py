"""Collector Membership Service

This service backs the membership and payments dashboard:
- Lists members, scoped to the calling collector and searchable
- Lists payment requests for administrator review
- Approves or rejects payment requests exactly once
- Summarizes each collector's members and payments
"""

__version__ = "1.0.0"
