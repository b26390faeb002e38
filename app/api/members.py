"""
Member directory API endpoints.
"""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from app.core.config import get_settings
from app.core.dependencies import get_current_caller, get_directory_service
from app.core.exceptions import InternalServerError
from app.models.identity import Caller
from app.schemas.common import ErrorResponse
from app.schemas.directory import MemberListResponse, RosterResponse
from app.services.directory_service import DirectoryService
import structlog

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/members", tags=["members"])


@router.get(
    "",
    response_model=MemberListResponse,
    responses={
        200: {"description": "Members retrieved successfully"},
        401: {"model": ErrorResponse, "description": "Missing or invalid token"},
        422: {"model": ErrorResponse, "description": "Invalid pagination"},
        503: {"model": ErrorResponse, "description": "Storage unavailable"},
    },
    summary="List members",
    description="Search and page through the members visible to the caller",
)
async def list_members(
    search: Optional[str] = Query(default=None, description="Name, member number or collector"),
    page: int = Query(default=1, description="1-indexed page number"),
    page_size: Optional[int] = Query(default=None, description="Members per page"),
    caller: Caller = Depends(get_current_caller),
    directory: DirectoryService = Depends(get_directory_service),
) -> MemberListResponse:
    """
    List one page of members.

    Collectors only see their own members; the scope comes from the
    caller's identity, never from the request.
    """
    try:
        member_page = await directory.list_members(
            search_term=search,
            role=caller.role,
            caller_collector_name=caller.collector_name,
            page=page,
            page_size=page_size if page_size is not None else get_settings().default_page_size,
        )
        return MemberListResponse.from_page(member_page)

    except HTTPException:
        raise
    except Exception as e:
        logger.error("Unexpected error listing members", error=str(e), exc_info=True)
        raise InternalServerError("Failed to list members")


@router.get(
    "/roster",
    response_model=RosterResponse,
    responses={
        200: {"description": "Roster built successfully"},
        401: {"model": ErrorResponse, "description": "Missing or invalid token"},
        503: {"model": ErrorResponse, "description": "Storage unavailable"},
    },
    summary="Member roster for printing",
    description="Every member in the caller's scope, across all pages, with a report title",
)
async def get_roster(
    search: Optional[str] = Query(default=None, description="Optional search filter"),
    caller: Caller = Depends(get_current_caller),
    directory: DirectoryService = Depends(get_directory_service),
) -> RosterResponse:
    try:
        roster = await directory.build_roster(caller, search_term=search)
        if not roster.members:
            logger.info("Roster is empty", user_id=caller.id)
        return RosterResponse.from_roster(roster)

    except HTTPException:
        raise
    except Exception as e:
        logger.error("Unexpected error building roster", error=str(e), exc_info=True)
        raise InternalServerError("Failed to build member roster")
