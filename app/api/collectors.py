"""
Collector API endpoints: a collector's members and payment summary.
"""
from fastapi import APIRouter, Depends, HTTPException

from app.core.dependencies import (
    ensure_collector_access,
    get_current_caller,
    get_directory_service,
    get_summary_service,
)
from app.core.exceptions import InternalServerError, PermissionDeniedError
from app.models.identity import Caller, Role
from app.schemas.common import ErrorResponse
from app.schemas.directory import CollectorMembersResponse, MemberItem
from app.schemas.summary import CollectorSummaryResponse
from app.services.directory_service import DirectoryService
from app.services.summary_service import SummaryService
import structlog

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/collectors", tags=["collectors"])


@router.get(
    "/me/summary",
    response_model=CollectorSummaryResponse,
    responses={
        200: {"description": "Summary computed"},
        403: {"model": ErrorResponse, "description": "Caller has no collector scope"},
        503: {"model": ErrorResponse, "description": "Storage unavailable"},
    },
    summary="Summary for the calling collector",
)
async def get_own_summary(
    caller: Caller = Depends(get_current_caller),
    summaries: SummaryService = Depends(get_summary_service),
) -> CollectorSummaryResponse:
    if not caller.is_collector or not caller.collector_name:
        raise PermissionDeniedError(
            "Only collectors with a resolved collector record have a summary",
            required_role=Role.COLLECTOR.value,
        )

    try:
        return CollectorSummaryResponse.from_summary(await summaries.summarize(caller.collector_name))
    except HTTPException:
        raise
    except Exception as e:
        logger.error("Error computing collector summary", error=str(e), exc_info=True)
        raise InternalServerError("Failed to compute collector summary")


@router.get(
    "/{collector_name}/summary",
    response_model=CollectorSummaryResponse,
    responses={
        200: {"description": "Summary computed"},
        403: {"model": ErrorResponse, "description": "Not allowed to view this collector"},
        503: {"model": ErrorResponse, "description": "Storage unavailable"},
    },
    summary="Summary for a collector",
    description="Member count, pending request count and approved total for one collector",
)
async def get_collector_summary(
    collector_name: str,
    caller: Caller = Depends(get_current_caller),
    summaries: SummaryService = Depends(get_summary_service),
) -> CollectorSummaryResponse:
    ensure_collector_access(caller, collector_name)

    try:
        return CollectorSummaryResponse.from_summary(await summaries.summarize(collector_name))
    except HTTPException:
        raise
    except Exception as e:
        logger.error(
            "Error computing collector summary",
            collector=collector_name,
            error=str(e),
            exc_info=True,
        )
        raise InternalServerError("Failed to compute collector summary")


@router.get(
    "/{collector_name}/members",
    response_model=CollectorMembersResponse,
    responses={
        200: {"description": "Members retrieved"},
        403: {"model": ErrorResponse, "description": "Not allowed to view this collector"},
        503: {"model": ErrorResponse, "description": "Storage unavailable"},
    },
    summary="All members of a collector",
)
async def get_collector_members(
    collector_name: str,
    caller: Caller = Depends(get_current_caller),
    directory: DirectoryService = Depends(get_directory_service),
) -> CollectorMembersResponse:
    ensure_collector_access(caller, collector_name)

    try:
        members = await directory.list_collector_members(collector_name)
        return CollectorMembersResponse(
            collector_name=collector_name,
            members=[MemberItem.from_member(m) for m in members],
            total_count=len(members),
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.error(
            "Error fetching collector members",
            collector=collector_name,
            error=str(e),
            exc_info=True,
        )
        raise InternalServerError("Failed to load collector members")
