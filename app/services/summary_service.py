"""
Per-collector rollups derived from the directory and payment requests.
"""
from decimal import Decimal
from typing import Optional

import structlog

from app.core.cache import SUMMARY_NAMESPACE, QueryCache
from app.core.config import Settings, get_settings
from app.models.payment_request import TWO_PLACES, PaymentStatus
from app.models.summary import CollectorSummary
from app.services.directory_service import DirectoryService
from app.services.payment_request_service import PaymentRequestService

logger = structlog.get_logger(__name__)


class SummaryService:
    """Read-only aggregator with no storage of its own."""

    def __init__(
        self,
        directory: DirectoryService,
        payments: PaymentRequestService,
        cache: QueryCache,
        settings: Optional[Settings] = None,
    ):
        self.directory = directory
        self.payments = payments
        self.cache = cache
        self.settings = settings or get_settings()

    async def summarize(self, collector_name: str) -> CollectorSummary:
        """
        Summarize a collector's members and payment requests.

        Cached entries are dropped whenever a payment decision succeeds.
        """
        cached = self.cache.get(SUMMARY_NAMESPACE, collector_name)
        if cached is not None:
            return cached

        member_count = await self.directory.count_members(collector_name)

        pending_count = 0
        approved_total = Decimal("0.00")

        collector = await self.directory.get_collector_by_name(collector_name)
        if collector is None:
            logger.warning("Collector not found for summary", collector=collector_name)
        else:
            for request in await self.payments.list_payment_requests():
                if request.collector_id != collector.id:
                    continue
                if request.status == PaymentStatus.PENDING:
                    pending_count += 1
                elif request.status == PaymentStatus.APPROVED:
                    approved_total += request.amount

        summary = CollectorSummary(
            collector_name=collector_name,
            member_count=member_count,
            pending_count=pending_count,
            approved_total=approved_total.quantize(TWO_PLACES),
        )

        logger.info(
            "Collector summary computed",
            collector=collector_name,
            member_count=member_count,
            pending_count=pending_count,
            approved_total=str(summary.approved_total),
        )

        self.cache.set(SUMMARY_NAMESPACE, collector_name, summary, self.settings.summary_cache_ttl_seconds)
        return summary
