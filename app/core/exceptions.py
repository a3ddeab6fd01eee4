"""
Custom exception classes for the application.
"""

from typing import Any, Dict, Optional

GENERIC_ERROR_MESSAGE = "An unexpected error occurred"

class AppException(Exception):
    """
    Base application exception.

    `message` is logged; `public_message` is what clients see for server
    errors, where the internal message must not be exposed.
    """

    def __init__(
        self,
        message: str,
        error_code: str = "INTERNAL_ERROR",
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None,
        public_message: Optional[str] = None
    ):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}
        self.public_message = public_message
        super().__init__(self.message)

    @property
    def client_message(self) -> str:
        if self.status_code < 500:
            return self.public_message or self.message
        return self.public_message or GENERIC_ERROR_MESSAGE

    @property
    def client_details(self) -> Dict[str, Any]:
        return self.details if self.status_code < 500 else {}

class DatabaseException(AppException):
    """Database operation exception."""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        public_message: Optional[str] = None
    ):
        super().__init__(
            message=message,
            error_code="DATABASE_ERROR",
            status_code=500,
            details=details,
            public_message=public_message
        )

class UpstreamProvisioningException(AppException):
    """Remote field-mapping provisioning failed during custom form creation."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            error_code="UPSTREAM_PROVISIONING_ERROR",
            status_code=500,
            details=details,
            public_message="Failed to create form and integration resources"
        )

class WebhookDeliveryException(AppException):
    """Record event could not be delivered to the webhook sink."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            error_code="WEBHOOK_ERROR",
            status_code=502,
            details=details,
            public_message="Failed to deliver record event"
        )

class ValidationException(AppException):
    """Exception raised for validation errors."""
    def __init__(self, message: str, details: Dict = None):
        super().__init__(
            message=message,
            error_code="VALIDATION_ERROR",
            status_code=400,
            details=details or {}
        )

class NotFoundException(AppException):
    """Exception raised when a resource is not found."""
    def __init__(self, resource_type: str, resource_id: str):
        message = f"{resource_type} not found: {resource_id}"
        super().__init__(
            message=message,
            error_code="NOT_FOUND",
            status_code=404,
            details={"resource_type": resource_type, "resource_id": resource_id}
        )
