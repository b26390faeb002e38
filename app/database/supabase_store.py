"""Persistent store integration with Supabase."""

import asyncio
from datetime import datetime
from decimal import Decimal
from typing import Any, Callable, Dict, List, Optional

from supabase import AuthApiError, Client, create_client

from app.core.config import get_settings
from app.core.exceptions import StorageError, StorageTimeoutError
from app.core.logging import get_logger
from app.database.base import AuthUser, DataStore, QueryResult, TableQuery

logger = get_logger(__name__)


def escape_like(term: str) -> str:
    """Escape LIKE wildcards so the term is matched literally."""
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def quote_filter_value(value: str) -> str:
    """Double-quote a value for a PostgREST ``or`` filter so commas and parentheses survive."""
    return '"' + value.replace("\\", "\\\\").replace('"', '\\"') + '"'


def build_search_filter(term: str, columns) -> str:
    """Build the ``or`` expression matching ``term`` as a substring of any column."""
    pattern = quote_filter_value(f"%{escape_like(term)}%")
    return ",".join(f"{column}.ilike.{pattern}" for column in columns)


def _serialize(values: Dict[str, Any]) -> Dict[str, Any]:
    serialized = {}
    for key, value in values.items():
        if isinstance(value, datetime):
            value = value.isoformat()
        elif isinstance(value, Decimal):
            value = str(value)
        serialized[key] = value
    return serialized


class SupabaseStore(DataStore):
    """Store backed by Supabase tables and Supabase auth."""

    def __init__(self, client: Optional[Client] = None, timeout_seconds: Optional[float] = None):
        settings = get_settings()
        self.client = client or create_client(settings.supabase_url, settings.supabase_key)
        self.timeout_seconds = timeout_seconds or settings.storage_timeout_seconds

    async def _run(self, operation: str, fn: Callable[[], Any]) -> Any:
        """Run a blocking client call off the event loop with a bounded timeout."""
        try:
            return await asyncio.wait_for(asyncio.to_thread(fn), timeout=self.timeout_seconds)
        except asyncio.TimeoutError:
            logger.error("Storage call timed out", operation=operation, timeout_seconds=self.timeout_seconds)
            raise StorageTimeoutError(
                f"{operation} timed out after {self.timeout_seconds} seconds",
                timeout_seconds=self.timeout_seconds,
                operation=operation,
            )
        except Exception as e:
            logger.error("Storage call failed", operation=operation, error=str(e))
            raise StorageError(f"{operation} failed: {e}", operation=operation) from e

    async def select(self, query: TableQuery) -> QueryResult:
        def execute():
            if query.with_count:
                builder = self.client.table(query.table).select("*", count="exact")
            else:
                builder = self.client.table(query.table).select("*")

            for column, value in query.eq.items():
                builder = builder.eq(column, value)

            for column, values in query.in_.items():
                builder = builder.in_(column, list(values))

            if query.search_term:
                builder = builder.or_(build_search_filter(query.search_term, query.search_columns))

            for column, descending in query.order_by:
                builder = builder.order(column, desc=descending)

            if query.limit is not None:
                start = query.offset or 0
                builder = builder.range(start, start + query.limit - 1)

            return builder.execute()

        response = await self._run(f"select:{query.table}", execute)
        rows = response.data if response.data else []
        count = response.count if query.with_count else None
        if query.with_count and count is None:
            count = len(rows)
        return QueryResult(rows=rows, count=count)

    async def update_where(
        self, table: str, values: Dict[str, Any], match: Dict[str, Any]
    ) -> List[Dict[str, Any]]:
        def execute():
            builder = self.client.table(table).update(_serialize(values))
            for column, value in match.items():
                builder = builder.eq(column, value)
            return builder.execute()

        response = await self._run(f"update:{table}", execute)
        return response.data if response.data else []

    async def get_auth_user(self, token: str) -> Optional[AuthUser]:
        def execute():
            return self.client.auth.get_user(token)

        try:
            auth_resp = await self._run("auth:get_user", execute)
        except StorageError as e:
            # GoTrue answers invalid or expired tokens with an API error
            if isinstance(e.__cause__, AuthApiError):
                logger.info("Session token rejected", error=str(e.__cause__))
                return None
            raise

        if not auth_resp or not auth_resp.user:
            return None

        user = auth_resp.user
        metadata = user.user_metadata or {}
        member_number = metadata.get("member_number")
        return AuthUser(
            id=str(user.id),
            email=user.email,
            member_number=str(member_number) if member_number is not None else None,
        )

    async def health_check(self) -> bool:
        try:
            await self.select(TableQuery(table="members", limit=1))
            return True
        except StorageError as e:
            logger.error("Database health check failed", error=str(e))
            return False
