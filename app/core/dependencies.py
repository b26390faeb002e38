"""
Dependency injection for FastAPI application.

Provides factory functions for the data store, the shared query cache,
the services built on them, and the resolved caller.
"""

from functools import lru_cache
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.core.cache import QueryCache
from app.core.config import get_settings
from app.core.exceptions import PermissionDeniedError
from app.core.logging import get_logger
from app.database.base import DataStore
from app.database.memory_store import InMemoryStore
from app.models.identity import Caller, Role
from app.services.directory_service import DirectoryService
from app.services.identity_service import IdentityService
from app.services.payment_request_service import PaymentRequestService
from app.services.summary_service import SummaryService

logger = get_logger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


@lru_cache()
def get_data_store() -> DataStore:
    """
    Get the process-wide data store.

    Falls back to the in-memory store when Supabase is not configured.
    """
    settings = get_settings()
    if settings.use_supabase:
        from app.database.supabase_store import SupabaseStore

        return SupabaseStore()

    logger.warning("Supabase credentials not configured, running with in-memory store")
    return InMemoryStore()


@lru_cache()
def get_query_cache() -> QueryCache:
    """Get the process-wide query cache."""
    return QueryCache(max_entries=get_settings().cache_max_entries)


def get_identity_service(
    store: DataStore = Depends(get_data_store),
    cache: QueryCache = Depends(get_query_cache),
) -> IdentityService:
    return IdentityService(store=store, cache=cache)


def get_directory_service(
    store: DataStore = Depends(get_data_store),
    cache: QueryCache = Depends(get_query_cache),
) -> DirectoryService:
    return DirectoryService(store=store, cache=cache)


def get_payment_request_service(
    store: DataStore = Depends(get_data_store),
    cache: QueryCache = Depends(get_query_cache),
) -> PaymentRequestService:
    return PaymentRequestService(store=store, cache=cache)


def get_summary_service(
    directory: DirectoryService = Depends(get_directory_service),
    payments: PaymentRequestService = Depends(get_payment_request_service),
    cache: QueryCache = Depends(get_query_cache),
) -> SummaryService:
    return SummaryService(directory=directory, payments=payments, cache=cache)


async def get_current_caller(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    identity: IdentityService = Depends(get_identity_service),
) -> Caller:
    """Resolve the caller from the bearer token."""
    token = credentials.credentials if credentials else None
    return await identity.resolve_caller(token)


async def require_admin(caller: Caller = Depends(get_current_caller)) -> Caller:
    """Only let administrators through."""
    if not caller.is_admin:
        raise PermissionDeniedError(required_role=Role.ADMIN.value)
    return caller


def ensure_collector_access(caller: Caller, collector_name: str) -> None:
    """Admins may view any collector; collectors only their own."""
    if caller.is_admin:
        return
    if caller.is_collector and caller.collector_name == collector_name:
        return
    raise PermissionDeniedError(
        "You can only view your own collector's data",
        collector=collector_name,
    )
