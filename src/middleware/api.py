"""Pydantic models for API error responses."""

from typing import Any, Dict, Optional

from pydantic import BaseModel


class APIErrorResponse(BaseModel):
    """Standardized error response for API endpoints.

    Attributes:
        message: Human-readable error message
        code: Error code string (e.g., from ErrorCode enum)
        details: Additional error context or details
    """

    message: str
    code: str
    details: Optional[Dict[str, Any]] = None
