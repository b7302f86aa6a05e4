"""Standardized API Response Schemas"""

from typing import Generic, TypeVar
from pydantic import BaseModel


T = TypeVar('T')


class SuccessResponse(BaseModel, Generic[T]):
    """
    Standard success response envelope.
    
    Example:
        {
            "success": true,
            "data": {"billId": "A100", ...},
            "message": "Payment verified"
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
                "code": "INVALID_SIGNATURE",
                "message": "Invalid signature"
            }
        }
    """
    success: bool = False
    error: ErrorDetail
