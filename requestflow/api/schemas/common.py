"""Common schemas for the RequestFlow API."""

from datetime import datetime
from typing import Any, Dict, Optional
from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str
    details: Optional[Dict[str, Any]] = None


class HealthResponse(BaseModel):
    status: str
    version: str
    timestamp: datetime
    checks: Dict[str, Dict[str, Any]] = {}
