"""
Standardized API response handler module.
Envelopes for operational endpoints and error bodies.
"""

from typing import Any, Dict, Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict


class ResponseMetadata(BaseModel):
    """Metadata for API responses."""
    timestamp: Optional[str] = None
    status_code: int


class ErrorResponse(BaseModel):
    """
    Error body returned by the global exception handlers.

    Clients written against a bare `{"error": "..."}` body should read
    `error.message` instead; `error.code` is a stable machine-readable tag.
    """
    success: bool = False
    error: Dict[str, Any]
    metadata: ResponseMetadata

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "success": False,
                "error": {
                    "code": "NOT_FOUND",
                    "message": "Form not found: widgets",
                    "details": {"resource_type": "Form", "resource_id": "widgets"}
                },
                "metadata": {
                    "timestamp": "2024-01-15T10:30:45.123456",
                    "status_code": 404
                }
            }
        }
    )


class ResponseHandler:
    """Utility class for generating standardized responses."""

    @staticmethod
    def success(data: Any = None, status_code: int = 200) -> Dict[str, Any]:
        """
        Create a success envelope.

        Args:
            data: Response data
            status_code: HTTP status code

        Returns:
            Standardized success response dictionary
        """
        return {
            "success": True,
            "data": data,
            "metadata": {
                "timestamp": datetime.utcnow().isoformat(),
                "status_code": status_code
            }
        }

    @staticmethod
    def error(
        code: str,
        message: str,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None,
        timestamp: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Create an error body.

        Args:
            code: Error code
            message: Client-facing error message
            status_code: HTTP status code
            details: Additional error details
            timestamp: Request timestamp, defaults to now

        Returns:
            Error response dictionary
        """
        return ErrorResponse(
            error={"code": code, "message": message, "details": details or {}},
            metadata=ResponseMetadata(
                timestamp=timestamp or datetime.utcnow().isoformat(),
                status_code=status_code
            )
        ).model_dump()


ERROR_RESPONSES: Dict[int, Dict[str, Any]] = {
    400: {"model": ErrorResponse, "description": "Missing or malformed input"},
    404: {"model": ErrorResponse, "description": "Record type not registered or schema missing"},
    500: {"model": ErrorResponse, "description": "Persistence or provisioning failure, details withheld"},
}
