"""
Payment request store: listing and the approve/reject lifecycle.

Every decision is applied as a single conditional update
``... WHERE id = :id AND status = 'pending'`` so that concurrent deciders,
even on separate service instances, race safely and at most one decision
per request ever reaches storage.
"""
from datetime import datetime, timezone
from typing import Callable, Dict, Iterable, List, Optional

import structlog

from app.core.cache import SUMMARY_NAMESPACE, QueryCache
from app.core.config import Settings, get_settings
from app.core.exceptions import (
    InvalidStateTransitionError,
    NotFoundError,
    PermissionDeniedError,
    StorageUnavailableError,
)
from app.core.logging import log_business_event
from app.core.retry import RetryConfig, call_storage
from app.database.base import DataStore, TableQuery
from app.models.identity import Caller, Role
from app.models.payment_request import PaymentRequest, PaymentStatus

logger = structlog.get_logger(__name__)

PAYMENT_REQUESTS_TABLE = "payment_requests"
MEMBERS_TABLE = "members"
COLLECTORS_TABLE = "members_collectors"

PAYMENT_REQUEST_ORDER = [("created_at", True), ("id", False)]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PaymentRequestService:
    """Sole writer of payment request status and approval fields."""

    def __init__(
        self,
        store: DataStore,
        cache: QueryCache,
        settings: Optional[Settings] = None,
        retry_config: Optional[RetryConfig] = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.store = store
        self.cache = cache
        self.settings = settings or get_settings()
        self.retry_config = retry_config
        self._clock = clock

    async def list_payment_requests(self) -> List[PaymentRequest]:
        """
        List every payment request, newest first, with member and collector
        display names attached.
        """
        query = TableQuery(table=PAYMENT_REQUESTS_TABLE, order_by=list(PAYMENT_REQUEST_ORDER))
        result = await call_storage(
            lambda: self.store.select(query), f"select:{PAYMENT_REQUESTS_TABLE}", self.retry_config
        )

        requests = [PaymentRequest(**row) for row in result.rows]
        await self._attach_display_names(requests)

        logger.info("Retrieved payment requests", count=len(requests))
        return requests

    async def get_payment_request(self, request_id: str) -> PaymentRequest:
        """
        Get a single payment request.

        Raises:
            NotFoundError: if no request has this id
        """
        request = await self._find(request_id)
        if request is None:
            raise NotFoundError("Payment request", request_id)

        await self._attach_display_names([request])
        return request

    async def decide(self, request_id: str, approver: Caller, approve: bool) -> PaymentRequest:
        """
        Approve or reject a pending payment request.

        Args:
            request_id: Payment request ID
            approver: Resolved caller making the decision; must be an admin
            approve: True to approve, False to reject

        Returns:
            The decided payment request

        Raises:
            PermissionDeniedError: if the approver is not an admin
            NotFoundError: if no request has this id
            InvalidStateTransitionError: if the request is no longer pending,
                including when a concurrent decision won the race
            StorageUnavailableError: if the store cannot be reached
        """
        if not approver.is_admin:
            logger.warning(
                "Non-admin attempted payment decision",
                request_id=request_id,
                user_id=approver.id,
                role=approver.role.value,
            )
            raise PermissionDeniedError(
                "Only administrators can approve or reject payment requests",
                required_role=Role.ADMIN.value,
            )

        new_status = PaymentStatus.APPROVED if approve else PaymentStatus.REJECTED
        values = {
            "status": new_status.value,
            "approved_at": self._clock() if approve else None,
            "approved_by": approver.id,
        }
        match = {"id": request_id, "status": PaymentStatus.PENDING.value}

        rows = await call_storage(
            lambda: self.store.update_where(PAYMENT_REQUESTS_TABLE, values, match),
            f"update:{PAYMENT_REQUESTS_TABLE}",
            self.retry_config,
        )

        if not rows:
            current = await self._find(request_id)
            if current is None:
                raise NotFoundError("Payment request", request_id)

            logger.warning(
                "Payment request already decided",
                request_id=request_id,
                current_status=current.status.value,
                requested_status=new_status.value,
                approver=approver.id,
            )
            raise InvalidStateTransitionError(
                request_id,
                current_status=current.status.value,
                requested_status=new_status.value,
            )

        decided = PaymentRequest(**rows[0])

        # Summaries derive pending counts and approved totals from this table
        self.cache.invalidate_namespace(SUMMARY_NAMESPACE)

        log_business_event(
            "payment_request_decided",
            request_id=request_id,
            status=decided.status.value,
            approver=approver.id,
            amount=str(decided.amount),
        )

        await self._attach_display_names([decided])
        return decided

    async def _find(self, request_id: str) -> Optional[PaymentRequest]:
        query = TableQuery(table=PAYMENT_REQUESTS_TABLE, eq={"id": request_id})
        result = await call_storage(
            lambda: self.store.select(query), f"select:{PAYMENT_REQUESTS_TABLE}", self.retry_config
        )
        return PaymentRequest(**result.rows[0]) if result.rows else None

    async def _attach_display_names(self, requests: List[PaymentRequest]) -> None:
        member_names = await self._lookup_names(
            MEMBERS_TABLE, "full_name", (r.member_id for r in requests)
        )
        collector_names = await self._lookup_names(
            COLLECTORS_TABLE, "name", (r.collector_id for r in requests)
        )

        for request in requests:
            request.member_name = member_names.get(request.member_id)
            request.collector_name = collector_names.get(request.collector_id)

    async def _lookup_names(self, table: str, column: str, ids: Iterable[Optional[str]]) -> Dict[str, str]:
        """Read display names by id. A failed read degrades to no names."""
        wanted = sorted({i for i in ids if i})
        if not wanted:
            return {}

        query = TableQuery(table=table, in_={"id": wanted})
        try:
            result = await call_storage(lambda: self.store.select(query), f"select:{table}", self.retry_config)
        except StorageUnavailableError as e:
            logger.warning("Display name lookup failed, leaving names empty", table=table, error=str(e.detail))
            return {}

        return {row["id"]: row.get(column) for row in result.rows if row.get("id")}
