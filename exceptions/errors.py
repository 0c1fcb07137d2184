"""
Custom exception classes for the application.

Every error carries a code, a user-facing message and the HTTP status the
API boundary should answer with.
"""

from typing import Optional, Any
from datetime import datetime, timezone


class AppError(Exception):
    """
    Base exception for all application errors.

    All custom exceptions inherit from this.

    Attributes:
        code: Error code (e.g., "PRODUCT_NOT_FOUND")
        message: Human-readable message
        status_code: HTTP status code
        details: Additional context
    """

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        details: Optional[dict[str, Any]] = None
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        self.timestamp = datetime.now(timezone.utc).isoformat()
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert to API response format."""
        return {
            "success": False,
            "message": self.message,
            "error": {
                "code": self.code,
                "details": self.details,
                "timestamp": self.timestamp
            }
        }


class NotFoundError(AppError):
    """Resource not found (404)."""

    def __init__(
        self,
        resource: str,
        identifier: str,
        code: Optional[str] = None,
        message: Optional[str] = None
    ):
        super().__init__(
            code=code or f"{resource.upper()}_NOT_FOUND",
            message=message or f"{resource} not found",
            status_code=404,
            details={"id": identifier}
        )


class ValidationError(AppError):
    """Request rejected before any write (400)."""

    def __init__(
        self,
        message: str,
        code: str = "VALIDATION_ERROR",
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=400,
            details=details
        )


class ExternalServiceError(AppError):
    """External service failure (503)."""

    def __init__(
        self,
        service: str,
        message: str,
        details: Optional[dict] = None,
        status_code: int = 503
    ):
        super().__init__(
            code=f"{service.upper()}_ERROR",
            message=message,
            status_code=status_code,
            details={"service": service, **(details or {})}
        )


class DatabaseError(AppError):
    """Database operation failed (500)."""

    def __init__(
        self,
        operation: str,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            code="DATABASE_ERROR",
            message=f"Database {operation} failed: {message}",
            status_code=500,
            details={"operation": operation, **(details or {})}
        )


# ===================
# PRODUCT ERRORS
# ===================

class ProductNotFoundError(NotFoundError):
    """SKU does not exist in the products table."""

    def __init__(self, sku: str):
        super().__init__(
            resource="Product",
            identifier=sku,
            code="PRODUCT_NOT_FOUND",
            message=f'Update failed: SKU "{sku}" does not exist in the database.'
        )


class InvalidInputError(ValidationError):
    """Required payload missing or unreadable."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(
            code="INVALID_INPUT",
            message=message,
            details=details
        )


class InvalidTargetError(ValidationError):
    """Save target is not in the field mapping table for this content kind."""

    def __init__(self, target: Optional[str], kind: Optional[str] = None):
        super().__init__(
            code="INVALID_TARGET",
            message=f"Invalid save target: {target}",
            details={"target": target, "kind": kind}
        )


class PreconditionFailedError(ValidationError):
    """Prerequisite data for this save is missing (or already final)."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(
            code="PRECONDITION_FAILED",
            message=message,
            details=details
        )


# ===================
# STORAGE ERRORS
# ===================

class StorageError(AppError):
    """Object storage upload failed."""

    def __init__(self, key: str, message: str):
        super().__init__(
            code="STORAGE_ERROR",
            message=f"Image upload failed: {message}",
            status_code=500,
            details={"key": key}
        )


# ===================
# GENERATION ERRORS
# ===================

class GenerationError(ExternalServiceError):
    """Generative model returned no usable result (502)."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(
            service="generation",
            message=message,
            details=details,
            status_code=502
        )


class GenerationBlockedError(GenerationError):
    """The prompt was blocked by the model's safety layer."""

    def __init__(self, reason: str, reason_message: Optional[str] = None):
        self.reason = reason
        super().__init__(
            message=f"Request was blocked. Reason: {reason}. {reason_message or ''}".strip(),
            details={"reason": reason}
        )
        self.code = "GENERATION_BLOCKED"


class GenerationStoppedError(GenerationError):
    """The model stopped for a reason other than a normal finish."""

    def __init__(self, context: str, finish_reason: str):
        self.finish_reason = finish_reason
        super().__init__(
            message=(
                f"Generation for {context} stopped unexpectedly. Reason: {finish_reason}. "
                "This often relates to safety settings."
            ),
            details={"context": context, "finish_reason": finish_reason}
        )
        self.code = "GENERATION_STOPPED"


class EmptyGenerationError(GenerationError):
    """The model finished normally but returned nothing usable."""

    def __init__(self, message: str, text: Optional[str] = None):
        self.text = text
        super().__init__(
            message=message,
            details={"text": text}
        )
        self.code = "EMPTY_RESULT"


# ===================
# EDITOR ERRORS
# ===================

class HistoryNavigationError(ValidationError):
    """Undo/redo requested past either end of the history."""

    def __init__(self, action: str, index: int, length: int):
        super().__init__(
            code="HISTORY_NAVIGATION",
            message=f"Cannot {action}: no more steps",
            details={"action": action, "index": index, "length": length}
        )


class NetworkError(ExternalServiceError):
    """Editor could not reach the product API."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(
            service="network",
            message=message,
            details=details
        )


class ProductApiError(AppError):
    """Product API answered with a non-success status."""

    def __init__(self, status_code: int, message: str, code: Optional[str] = None):
        super().__init__(
            code=code or "PRODUCT_API_ERROR",
            message=message,
            status_code=status_code
        )
