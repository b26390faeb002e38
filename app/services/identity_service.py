"""
Caller identity resolution.

Turns an opaque session token into a ``Caller``. The collector scope of a
collector-role caller always comes from the ``members_collectors`` lookup
keyed by the member number stored in the user's server-side metadata; it is
never taken from the request.
"""
from typing import Optional

import structlog

from app.core.cache import COLLECTOR_SCOPE_NAMESPACE, QueryCache
from app.core.config import Settings, get_settings
from app.core.exceptions import AuthenticationError, ScopeResolutionFailed
from app.core.logging import log_business_event, set_caller_context
from app.core.retry import RetryConfig, call_storage
from app.database.base import DataStore, TableQuery
from app.models.identity import Caller, Role

logger = structlog.get_logger(__name__)

USER_ROLES_TABLE = "user_roles"
COLLECTORS_TABLE = "members_collectors"


class IdentityService:
    """Resolves callers and their collector scope."""

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

    async def resolve_caller(self, token: Optional[str]) -> Caller:
        """
        Resolve the caller behind a session token.

        Raises:
            AuthenticationError: if the token is missing or rejected
            StorageUnavailableError: if the store cannot be reached
        """
        if not token:
            raise AuthenticationError("Missing authentication token")

        user = await call_storage(
            lambda: self.store.get_auth_user(token), "auth:get_user", self.retry_config
        )
        if user is None:
            raise AuthenticationError()

        role = await self.resolve_role(user.id)

        collector_name = None
        if role == Role.COLLECTOR:
            try:
                collector_name = await self.resolve_collector_name(user.member_number)
            except ScopeResolutionFailed as e:
                # The caller keeps an empty scope rather than failing the request
                logger.warning(
                    "Collector scope could not be resolved",
                    user_id=user.id,
                    member_number=e.member_number,
                    matches=e.matches,
                )
                log_business_event(
                    "scope_resolution_failed", user_id=user.id, matches=e.matches
                )

        set_caller_context(user.id, role.value)

        return Caller(
            id=user.id,
            role=role,
            member_number=user.member_number,
            collector_name=collector_name,
        )

    async def resolve_role(self, user_id: str) -> Role:
        """Return the highest role held by a user, defaulting to member."""
        result = await call_storage(
            lambda: self.store.select(TableQuery(table=USER_ROLES_TABLE, eq={"user_id": user_id})),
            f"select:{USER_ROLES_TABLE}",
            self.retry_config,
        )

        role = Role.MEMBER
        for row in result.rows:
            try:
                candidate = Role(row.get("role"))
            except ValueError:
                logger.warning("Ignoring unknown role", user_id=user_id, role=row.get("role"))
                continue
            if candidate.rank > role.rank:
                role = candidate

        return role

    async def resolve_collector_name(self, member_number: Optional[str]) -> str:
        """
        Map a collector's own member number to exactly one collector name.

        Raises:
            ScopeResolutionFailed: if there is no member number, or zero or
                several collectors share it
        """
        if not member_number:
            raise ScopeResolutionFailed("Caller has no member number", member_number=None)

        cached = self.cache.get(COLLECTOR_SCOPE_NAMESPACE, member_number)
        if cached is not None:
            return cached

        result = await call_storage(
            lambda: self.store.select(
                TableQuery(table=COLLECTORS_TABLE, eq={"member_number": member_number})
            ),
            f"select:{COLLECTORS_TABLE}",
            self.retry_config,
        )

        names = {row.get("name") for row in result.rows if row.get("name")}
        if len(names) != 1:
            raise ScopeResolutionFailed(
                f"Expected one collector for member number, found {len(names)}",
                member_number=member_number,
                matches=len(names),
            )

        collector_name = names.pop()
        self.cache.set(
            COLLECTOR_SCOPE_NAMESPACE,
            member_number,
            collector_name,
            self.settings.collector_scope_cache_ttl_seconds,
        )
        return collector_name
