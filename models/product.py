"""
Product schemas for validation and serialization.
"""

from pydantic import Field
from typing import Optional
from enum import Enum
from datetime import datetime

from models.base import BaseSchema
from models.save_target import TRACKED_FIELDS


class Completeness(str, Enum):
    """How many tracked fields a product has filled in."""
    EMPTY = "empty"
    PARTIAL = "partial"
    FULL = "full"


class StatusColor(str, Enum):
    """Indicator color shown next to a SKU in the selector."""
    GREEN = "green"
    ORANGE = "orange"
    NORMAL = "normal"


STATUS_COLORS = {
    Completeness.FULL: StatusColor.GREEN,
    Completeness.PARTIAL: StatusColor.ORANGE,
    Completeness.EMPTY: StatusColor.NORMAL,
}

# Sort weight: products in progress first, untouched next, finished last
STATUS_SORT_WEIGHT = {
    StatusColor.ORANGE: 1,
    StatusColor.NORMAL: 2,
    StatusColor.GREEN: 3,
}


class ProductRecord(BaseSchema):
    """
    One row of the products table.

    Only the columns this service reads or writes are modelled; extra columns
    returned by select("*") are ignored.
    """

    sku: str = Field(..., min_length=1, description="Product SKU (unique identifier)")
    category: Optional[str] = None
    product_name: Optional[str] = None
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None

    pre_image_url: Optional[str] = None
    sketch_image_url: Optional[str] = None
    wax_image_url: Optional[str] = None
    cast_image_url: Optional[str] = None
    final_image_url: Optional[str] = None

    sketch_description: Optional[str] = None
    wax_description: Optional[str] = None
    cast_description: Optional[str] = None
    final_description: Optional[str] = None

    sketch_image_alt_text: Optional[str] = None
    wax_image_alt_text: Optional[str] = None
    cast_image_alt_text: Optional[str] = None
    final_image_alt_text: Optional[str] = None

    modified_at: Optional[datetime] = None

    @property
    def has_meta_title(self) -> bool:
        return bool(self.meta_title and self.meta_title.strip())

    @property
    def has_original_image(self) -> bool:
        return bool(self.pre_image_url)

    def filled_count(self) -> int:
        """Number of tracked fields holding a non-empty value."""
        return sum(1 for field in TRACKED_FIELDS if getattr(self, field))

    def completeness(self) -> Completeness:
        filled = self.filled_count()
        if filled == 0:
            return Completeness.EMPTY
        if filled == len(TRACKED_FIELDS):
            return Completeness.FULL
        return Completeness.PARTIAL


class ProductSummary(BaseSchema):
    """
    Listing entry for the SKU selector.

    Serialized with the statusColor key the editor expects.
    """

    sku: str
    category: Optional[str] = None
    meta_title: Optional[str] = None
    completeness: Completeness
    status_color: StatusColor = Field(..., serialization_alias="statusColor")

    @classmethod
    def from_record(cls, record: ProductRecord) -> "ProductSummary":
        completeness = record.completeness()
        return cls(
            sku=record.sku,
            category=record.category,
            meta_title=record.meta_title,
            completeness=completeness,
            status_color=STATUS_COLORS[completeness]
        )
