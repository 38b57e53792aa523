"""Standardized API Response Schemas"""

from typing import Any, Dict, Generic, TypeVar
from pydantic import BaseModel, Field


T = TypeVar('T')


class SuccessResponse(BaseModel, Generic[T]):
    """
    Standard success response envelope.

    Example:
        {
            "success": true,
            "data": {...},
            "message": "Operation successful"
        }
    """
    success: bool = True
    data: T
    message: str = "Operation successful"


class ErrorDetail(BaseModel):
    """Error details structure"""
    code: str
    message: str


class ErrorResponse(BaseModel):
    """
    Standard error response envelope.

    Example:
        {
            "success": false,
            "error": {
                "code": "ERR_ILLEGAL_TRANSITION",
                "message": "Cannot approve transaction: already Successful"
            },
            "details": {"current_state": "Successful"}
        }
    """
    success: bool = False
    error: ErrorDetail
    details: Dict[str, Any] = Field(default_factory=dict)
