"""
Pydantic models for validation and serialization.
"""

from models.base import BaseSchema
from models.save_target import (
    ContentKind,
    SaveTarget,
    IMAGE_TARGETS,
    TEXT_TARGETS,
    TRACKED_FIELDS,
)
from models.product import (
    Completeness,
    StatusColor,
    ProductRecord,
    ProductSummary,
)
from models.update import (
    ImageUpdate,
    TextUpdate,
    UpdateRequest,
    UpdateResult,
    build_update_request,
)

__all__ = [
    "BaseSchema",
    "ContentKind",
    "SaveTarget",
    "IMAGE_TARGETS",
    "TEXT_TARGETS",
    "TRACKED_FIELDS",
    "Completeness",
    "StatusColor",
    "ProductRecord",
    "ProductSummary",
    "ImageUpdate",
    "TextUpdate",
    "UpdateRequest",
    "UpdateResult",
    "build_update_request",
]
