"""
Custom exceptions module.
"""

from exceptions.errors import (
    # Base exceptions
    AppError,
    NotFoundError,
    ValidationError,
    ExternalServiceError,
    DatabaseError,

    # Product updates
    ProductNotFoundError,
    InvalidInputError,
    InvalidTargetError,
    PreconditionFailedError,

    # Storage
    StorageError,

    # Generation
    GenerationError,
    GenerationBlockedError,
    GenerationStoppedError,
    EmptyGenerationError,

    # Editor
    HistoryNavigationError,
    NetworkError,
    ProductApiError,
)

__all__ = [
    # Base
    "AppError",
    "NotFoundError",
    "ValidationError",
    "ExternalServiceError",
    "DatabaseError",

    # Product updates
    "ProductNotFoundError",
    "InvalidInputError",
    "InvalidTargetError",
    "PreconditionFailedError",

    # Storage
    "StorageError",

    # Generation
    "GenerationError",
    "GenerationBlockedError",
    "GenerationStoppedError",
    "EmptyGenerationError",

    # Editor
    "HistoryNavigationError",
    "NetworkError",
    "ProductApiError",
]
