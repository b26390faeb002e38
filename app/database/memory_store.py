"""
In-memory store for development and tests.

Used whenever Supabase credentials are not configured. Behaves like the
Supabase tables the service reads: equality and substring filters, ordered
range reads with an exact count, and an atomic conditional update.
"""
import asyncio
import copy
from typing import Any, Dict, Iterable, List, Optional

import structlog

from app.database.base import AuthUser, DataStore, QueryResult, TableQuery

logger = structlog.get_logger(__name__)


class _Descending:
    """Sort key wrapper that inverts comparison order."""

    __slots__ = ("value",)

    def __init__(self, value: Any):
        self.value = value

    def __lt__(self, other: "_Descending") -> bool:
        return other.value < self.value

    def __eq__(self, other: object) -> bool:
        return isinstance(other, _Descending) and self.value == other.value


def _matches_search(row: Dict[str, Any], term: str, columns: Iterable[str]) -> bool:
    needle = term.casefold()
    for column in columns:
        value = row.get(column)
        if value is not None and needle in str(value).casefold():
            return True
    return False


class InMemoryStore(DataStore):
    """Dictionary-backed store keyed by table name."""

    def __init__(
        self,
        tables: Optional[Dict[str, List[Dict[str, Any]]]] = None,
        users: Optional[Dict[str, AuthUser]] = None,
    ):
        self._tables: Dict[str, List[Dict[str, Any]]] = {
            name: [dict(row) for row in rows] for name, rows in (tables or {}).items()
        }
        self._users: Dict[str, AuthUser] = dict(users or {})
        self._write_lock = asyncio.Lock()

    def insert(self, table: str, row: Dict[str, Any]) -> Dict[str, Any]:
        """Add a row directly. Used for seeding."""
        self._tables.setdefault(table, []).append(dict(row))
        return copy.deepcopy(row)

    def add_user(self, token: str, user: AuthUser) -> None:
        """Register a session token."""
        self._users[token] = user

    def rows(self, table: str) -> List[Dict[str, Any]]:
        """Snapshot of a table's rows."""
        return copy.deepcopy(self._tables.get(table, []))

    async def select(self, query: TableQuery) -> QueryResult:
        rows = self._tables.get(query.table, [])

        matched = [
            row for row in rows
            if all(row.get(column) == value for column, value in query.eq.items())
            and all(row.get(column) in set(values) for column, values in query.in_.items())
            and (not query.search_term or _matches_search(row, query.search_term, query.search_columns))
        ]

        if query.order_by:
            matched.sort(
                key=lambda row: tuple(
                    _Descending(row.get(column)) if descending else row.get(column)
                    for column, descending in query.order_by
                )
            )

        total = len(matched)
        if query.limit is not None:
            start = query.offset or 0
            matched = matched[start:start + query.limit]

        return QueryResult(
            rows=copy.deepcopy(matched),
            count=total if query.with_count else None,
        )

    async def update_where(
        self, table: str, values: Dict[str, Any], match: Dict[str, Any]
    ) -> List[Dict[str, Any]]:
        async with self._write_lock:
            updated = []
            for row in self._tables.get(table, []):
                if all(row.get(column) == value for column, value in match.items()):
                    row.update(values)
                    updated.append(copy.deepcopy(row))

        logger.debug("Conditional update applied", table=table, match=match, rows_affected=len(updated))
        return updated

    async def get_auth_user(self, token: str) -> Optional[AuthUser]:
        return self._users.get(token)

    async def health_check(self) -> bool:
        return True
