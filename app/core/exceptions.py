"""
Custom exception classes for the Collector Membership Service.
"""
from typing import Optional, Any, Dict
import uuid
from fastapi import HTTPException, status


class BaseAPIException(HTTPException):
    """Base exception for API errors."""

    def __init__(
        self,
        status_code: int,
        detail: str,
        error_code: Optional[str] = None,
        headers: Optional[dict[str, Any]] = None,
        correlation_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(status_code=status_code, detail=detail, headers=headers)
        self.error_code = error_code
        self.correlation_id = correlation_id or str(uuid.uuid4())
        self.context = context or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API response."""
        return {
            "error": True,
            "error_code": self.error_code,
            "message": self.detail,
            "correlation_id": self.correlation_id,
            "context": self.context,
        }


class InvalidArgumentError(BaseAPIException):
    """Exception for invalid query arguments such as bad pagination."""

    def __init__(
        self,
        detail: str,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        **context
    ):
        error_code = "MEM_001"
        if field:
            error_code = f"MEM_001_{field.upper()}"
            detail = f"Invalid value for '{field}': {detail}"

        context_dict = {"field": field, "value": value, **context}

        super().__init__(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=detail,
            error_code=error_code,
            context=context_dict,
        )


class AuthenticationError(BaseAPIException):
    """Exception for missing, invalid or expired session tokens."""

    def __init__(self, detail: str = "Invalid or expired authentication token", **context):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            error_code="MEM_002",
            headers={"WWW-Authenticate": "Bearer"},
            context=context,
        )


class PermissionDeniedError(BaseAPIException):
    """Exception for callers whose role does not allow the operation."""

    def __init__(
        self,
        detail: str = "You do not have permission to perform this action",
        required_role: Optional[str] = None,
        **context
    ):
        self.required_role = required_role
        context_dict = {"required_role": required_role, **context}

        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=detail,
            error_code="MEM_003",
            context=context_dict,
        )


class NotFoundError(BaseAPIException):
    """Exception for unknown entities."""

    def __init__(self, entity: str, entity_id: str, **context):
        self.entity = entity
        self.entity_id = entity_id
        context_dict = {"entity": entity, "entity_id": entity_id, **context}

        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"{entity} '{entity_id}' not found",
            error_code="MEM_004",
            context=context_dict,
        )


class InvalidStateTransitionError(BaseAPIException):
    """Exception for decisions on payment requests that are no longer pending."""

    def __init__(
        self,
        request_id: str,
        current_status: Optional[str] = None,
        requested_status: Optional[str] = None,
        **context
    ):
        self.request_id = request_id
        self.current_status = current_status
        self.requested_status = requested_status
        context_dict = {
            "request_id": request_id,
            "current_status": current_status,
            "requested_status": requested_status,
            **context
        }

        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=(
                "This payment request has already been decided by someone else. "
                "Refresh the list to see its current status."
            ),
            error_code="MEM_005",
            context=context_dict,
        )


class StorageUnavailableError(BaseAPIException):
    """Exception for transient backend failures after the retry budget is spent."""

    def __init__(
        self,
        operation: str,
        detail: Optional[str] = None,
        retry_after: Optional[int] = None,
        **context
    ):
        self.operation = operation
        self.retry_after = retry_after
        if not detail:
            detail = "The system is temporarily unavailable. Please try again shortly."

        context_dict = {"operation": operation, "retry_after": retry_after, **context}

        headers = {}
        if retry_after:
            headers["Retry-After"] = str(retry_after)

        super().__init__(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=detail,
            error_code="MEM_006",
            headers=headers,
            context=context_dict,
        )


class InternalServerError(BaseAPIException):
    """Exception for unexpected internal errors."""

    def __init__(self, detail: str = "An unexpected internal error occurred"):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=detail,
            error_code="INTERNAL_SERVER_ERROR",
        )


# Non-API context exceptions
class ScopeResolutionFailed(Exception):
    """Raised when a collector-role caller cannot be mapped to exactly one collector."""

    def __init__(self, detail: str, member_number: Optional[str] = None, matches: int = 0):
        self.member_number = member_number
        self.matches = matches
        super().__init__(detail)


# Storage Exceptions
class StorageError(Exception):
    """Exception for persistent store failures."""

    def __init__(self, detail: str, operation: Optional[str] = None, **context):
        self.operation = operation
        if operation:
            context["operation"] = operation
        self.context = context
        super().__init__(detail)


class StorageTimeoutError(StorageError):
    """Exception for persistent store calls exceeding the bounded timeout."""

    def __init__(self, detail: str, timeout_seconds: float, operation: Optional[str] = None, **context):
        super().__init__(
            detail=detail,
            operation=operation,
            timeout_seconds=timeout_seconds,
            **context
        )
        self.timeout_seconds = timeout_seconds


def map_storage_error(error: StorageError) -> StorageUnavailableError:
    """Map a storage error to the API exception surfaced to callers."""
    if isinstance(error, StorageTimeoutError):
        return StorageUnavailableError(
            operation=error.operation or "query",
            retry_after=max(1, int(error.timeout_seconds)),
            timeout_seconds=error.timeout_seconds,
        )
    return StorageUnavailableError(
        operation=error.operation or "query",
        retry_after=5,
        reason=str(error),
    )

