"""
Common schema types used across the API.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Standard error response."""

    detail: str
    code: str
    request_id: Optional[str] = None
    errors: Optional[List[Dict[str, Any]]] = None


class MessageResponse(BaseModel):
    message: str


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "ok"
    version: str
