from typing import Any, Dict, Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class APIResponse(BaseModel, Generic[T]):
    status_code: int = 200
    status: str = "success"
    message: str
    data: T


class ErrorResponse(BaseModel):
    """Envelope rendered by the exception handlers."""

    status_code: int
    status: str = "error"
    message: str
    data: Dict[str, Any] = Field(default_factory=dict)
