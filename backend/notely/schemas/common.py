"""
Notely Backend — Shared Response Schemas
=========================================

What:  Error and health payloads shared by every route.
"""

from typing import Optional

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """
    What:  Standardized error response format for all handled API errors.

    Example:
        {
            "error": "unauthorized",
            "message": "No authorization header included",
            "details": {"kind": "missing"},
            "request_id": "1f0c2a9b"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Fixed readiness payload; identical in full and degraded mode."""
    status: str = Field(default="ok", description="Always 'ok' while the process serves")
