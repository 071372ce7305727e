"""
Uniform JSON envelope: ``{success, data?, message?, error?, timestamp}``.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


class ApiResponse(BaseModel):
    success: bool
    data: Optional[Any] = None
    message: Optional[str] = None
    error: Optional[str] = None
    timestamp: str = Field(default_factory=_timestamp)


def success_response(data: Any = None, message: str | None = None) -> Dict[str, Any]:
    """Envelope for a successful call; ``None`` fields are dropped."""
    if isinstance(data, BaseModel):
        data = data.model_dump(mode="json")
    return ApiResponse(success=True, data=data, message=message).model_dump(
        mode="json", exclude_none=True
    )


def error_response(message: str, error: str) -> Dict[str, Any]:
    return ApiResponse(success=False, message=message, error=error).model_dump(
        mode="json", exclude_none=True
    )
