"""
Directory query engine for role-scoped, searchable, paginated member lookups.
"""
from typing import List, Optional

import structlog

from app.core.cache import MEMBER_QUERY_NAMESPACE, QueryCache
from app.core.config import Settings, get_settings
from app.core.exceptions import InvalidArgumentError, ScopeResolutionFailed
from app.core.logging import log_business_event
from app.core.retry import RetryConfig, call_storage
from app.database.base import DataStore, TableQuery
from app.models.identity import Caller, Role
from app.models.member import Collector, Member, MemberPage, Roster

logger = structlog.get_logger(__name__)

MEMBERS_TABLE = "members"
COLLECTORS_TABLE = "members_collectors"

# A search term matches when it is a substring of any of these columns
SEARCH_COLUMNS = ("full_name", "member_number", "collector")

# Newest first, ties broken by id for a stable page boundary
MEMBER_ORDER = [("created_at", True), ("id", False)]


class DirectoryService:
    """Read-only member directory. Owns no state beyond its query cache."""

    def __init__(
        self,
        store: DataStore,
        cache: QueryCache,
        settings: Optional[Settings] = None,
        retry_config: Optional[RetryConfig] = None,
    ):
        self.store = store
        self.cache = cache
        self.settings = settings or get_settings()
        self.retry_config = retry_config

    def _validate_pagination(self, page: int, page_size: int) -> None:
        if page < 1:
            raise InvalidArgumentError("page must be at least 1", field="page", value=page)
        if page_size < 1:
            raise InvalidArgumentError("page_size must be at least 1", field="page_size", value=page_size)
        if page_size > self.settings.max_page_size:
            raise InvalidArgumentError(
                f"page_size must not exceed {self.settings.max_page_size}",
                field="page_size",
                value=page_size,
            )

    @staticmethod
    def _require_scope(collector_name: Optional[str]) -> str:
        if not collector_name:
            raise ScopeResolutionFailed("Collector-role caller has no resolved collector name")
        return collector_name

    async def list_members(
        self,
        search_term: Optional[str],
        role: Role,
        caller_collector_name: Optional[str],
        page: int,
        page_size: int,
    ) -> MemberPage:
        """
        List one page of members visible to the caller.

        Collectors only ever see members whose ``collector`` equals their
        resolved collector name; an unresolved collector sees nothing.

        Args:
            search_term: Optional case-insensitive substring of full name,
                member number or collector name
            role: Caller role
            caller_collector_name: Collector scope resolved server-side
            page: 1-indexed page number
            page_size: Records per page

        Returns:
            The requested page and the total number of matching members

        Raises:
            InvalidArgumentError: for page < 1 or page_size out of range
            StorageUnavailableError: if the store cannot be reached
        """
        self._validate_pagination(page, page_size)
        role = Role(role)
        term = search_term or ""

        scope = None
        if role == Role.COLLECTOR:
            try:
                scope = self._require_scope(caller_collector_name)
            except ScopeResolutionFailed as e:
                logger.warning("Collector scope unresolved, returning no members", reason=str(e))
                log_business_event("scope_resolution_failed", operation="list_members")
                return MemberPage(members=[], total_count=0, page=page, page_size=page_size)

        cache_key = (term.casefold(), role.value, scope, page, page_size)
        cached = self.cache.get(MEMBER_QUERY_NAMESPACE, cache_key)
        if cached is not None:
            logger.debug("Member query served from cache", page=page, page_size=page_size)
            return cached

        query = TableQuery(
            table=MEMBERS_TABLE,
            eq={"collector": scope} if scope else {},
            search_term=term or None,
            search_columns=SEARCH_COLUMNS,
            order_by=list(MEMBER_ORDER),
            offset=(page - 1) * page_size,
            limit=page_size,
            with_count=True,
        )
        result = await call_storage(lambda: self.store.select(query), f"select:{MEMBERS_TABLE}", self.retry_config)

        member_page = MemberPage(
            members=[Member(**row) for row in result.rows],
            total_count=result.count or 0,
            page=page,
            page_size=page_size,
        )

        logger.info(
            "Members listed",
            role=role.value,
            scoped=scope is not None,
            searched=bool(term),
            page=page,
            page_size=page_size,
            returned=len(member_page.members),
            total_count=member_page.total_count,
        )

        self.cache.set(
            MEMBER_QUERY_NAMESPACE,
            cache_key,
            member_page,
            self.settings.member_query_cache_ttl_seconds,
        )
        return member_page

    async def list_collector_members(self, collector_name: Optional[str]) -> List[Member]:
        """Every member owned by a collector, unpaginated."""
        if not collector_name:
            return []

        query = TableQuery(
            table=MEMBERS_TABLE,
            eq={"collector": collector_name},
            order_by=list(MEMBER_ORDER),
        )
        result = await call_storage(lambda: self.store.select(query), f"select:{MEMBERS_TABLE}", self.retry_config)

        logger.info("Collector members listed", collector=collector_name, count=len(result.rows))
        return [Member(**row) for row in result.rows]

    async def count_members(self, collector_name: str) -> int:
        """Number of members owned by a collector."""
        query = TableQuery(
            table=MEMBERS_TABLE,
            eq={"collector": collector_name},
            limit=1,
            with_count=True,
        )
        result = await call_storage(lambda: self.store.select(query), f"count:{MEMBERS_TABLE}", self.retry_config)
        return result.count or 0

    async def get_collector_by_name(self, name: str) -> Optional[Collector]:
        """Look up a collector by name. Ambiguous names resolve to None."""
        query = TableQuery(table=COLLECTORS_TABLE, eq={"name": name})
        result = await call_storage(lambda: self.store.select(query), f"select:{COLLECTORS_TABLE}", self.retry_config)

        if len(result.rows) > 1:
            logger.warning("Collector name is ambiguous", collector=name, matches=len(result.rows))
            return None
        if not result.rows:
            return None
        return Collector(**result.rows[0])

    async def build_roster(self, caller: Caller, search_term: Optional[str] = None) -> Roster:
        """
        Collect the full scoped member set for a printable report.

        The roster spans every page, not just the one a caller is viewing.
        """
        term = search_term or ""

        if caller.role == Role.COLLECTOR:
            if not caller.collector_name:
                logger.warning("Roster requested without collector scope", user_id=caller.id)
                return Roster(title="Members List", members=[])
            title = f"Members List - Collector: {caller.collector_name}"
            eq = {"collector": caller.collector_name}
        else:
            title = "Members List"
            eq = {}

        query = TableQuery(
            table=MEMBERS_TABLE,
            eq=eq,
            search_term=term or None,
            search_columns=SEARCH_COLUMNS,
            order_by=list(MEMBER_ORDER),
        )
        result = await call_storage(lambda: self.store.select(query), f"select:{MEMBERS_TABLE}", self.retry_config)

        logger.info("Roster built", role=caller.role.value, count=len(result.rows))
        return Roster(title=title, members=[Member(**row) for row in result.rows])
