"""
Schemas shared by every router.
"""
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Standard error response schema."""

    error: bool = Field(default=True, description="Always true for error responses")
    error_code: Optional[str] = Field(default=None, description="Error code for debugging")
    message: str = Field(..., description="Error message")
    correlation_id: Optional[str] = Field(default=None, description="Request correlation ID")
    context: Optional[Dict[str, Any]] = Field(default=None, description="Additional error details")
