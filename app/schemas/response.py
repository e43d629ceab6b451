from pydantic import BaseModel, Field
from typing import Generic, TypeVar, Optional, Any, Dict

DataType = TypeVar("DataType")

class APIResponse(BaseModel, Generic[DataType]):
    """Envelope for every JSON success response."""
    message: str = Field(..., description="Human-readable outcome, e.g. 'Quiz submitted successfully'.")
    data: Optional[DataType] = Field(None, description="Payload of the operation; null for deletes.")

class ErrorDetail(BaseModel):
    code: str = Field(..., description="Stable machine-readable code such as NOT_FOUND or INVALID_STATE")
    message: str = Field(..., description="Human-readable error message")
    details: Optional[Dict[str, Any]] = Field(
        None,
        description="Error context. Application errors always carry 'retryable': true only when nothing was committed.",
    )

class ErrorResponse(BaseModel):
    """Envelope for every error response, whatever raised it."""
    error: ErrorDetail
    timestamp: str = Field(..., description="ISO 8601 UTC time the error was produced")
    path: str = Field(..., description="Request URL that failed")
    request_id: Optional[str] = Field(None, description="Matches the X-Request-ID response header")
