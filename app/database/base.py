"""
Generic persistent-store interface consumed by the services.

The services only need equality and substring filters, ordered range reads
with a total count, and one atomic conditional update. Both the Supabase
store and the in-memory store implement exactly that surface.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple


@dataclass
class TableQuery:
    """A single-table read."""

    table: str
    eq: Dict[str, Any] = field(default_factory=dict)
    in_: Dict[str, Sequence[Any]] = field(default_factory=dict)
    # Case-insensitive substring match, OR-ed across search_columns
    search_term: Optional[str] = None
    search_columns: Tuple[str, ...] = ()
    # (column, descending) pairs, applied in order
    order_by: List[Tuple[str, bool]] = field(default_factory=list)
    offset: Optional[int] = None
    limit: Optional[int] = None
    with_count: bool = False


@dataclass
class QueryResult:
    """Rows returned by a read, plus the pre-pagination total when requested."""

    rows: List[Dict[str, Any]]
    count: Optional[int] = None


@dataclass
class AuthUser:
    """User record returned by the session provider."""

    id: str
    email: Optional[str] = None
    member_number: Optional[str] = None


class DataStore(ABC):
    """Data-access interface."""

    @abstractmethod
    async def select(self, query: TableQuery) -> QueryResult:
        """Run a filtered, ordered, optionally paginated read."""

    @abstractmethod
    async def update_where(
        self, table: str, values: Dict[str, Any], match: Dict[str, Any]
    ) -> List[Dict[str, Any]]:
        """
        Atomically update rows whose columns equal every value in ``match``.

        Returns the updated rows; an empty list means no row matched.
        """

    @abstractmethod
    async def get_auth_user(self, token: str) -> Optional[AuthUser]:
        """Validate a session token and return its user, or None if invalid."""

    @abstractmethod
    async def health_check(self) -> bool:
        """Check store connectivity."""
