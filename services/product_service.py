"""
Product service: SKU lookup, listing and per-field updates.

Updates write exactly one target column (plus the write-once original image
when it is first supplied) and modified_at, in a single UPDATE scoped by SKU.
"""

from datetime import datetime, timezone
from typing import Optional
import re
from fastapi import Request
import structlog

from config import settings
from models.product import ProductRecord, ProductSummary, STATUS_SORT_WEIGHT
from models.save_target import SaveTarget, TRACKED_FIELDS
from models.update import ImageUpdate, TextUpdate, UpdateRequest, UpdateResult
from exceptions import (
    DatabaseError,
    ExternalServiceError,
    PreconditionFailedError,
    ProductNotFoundError,
    StorageError,
)
from services.storage_service import ObjectStorage
from utils.text_utils import build_storage_key

logger = structlog.get_logger(__name__)

LISTING_COLUMNS = ", ".join(("sku", "category", "meta_title") + TRACKED_FIELDS)


def _natural_key(sku: str) -> list:
    """Sort key that orders "R-2" before "R-10"."""
    return [
        int(part) if part.isdigit() else part.lower()
        for part in re.split(r"(\d+)", sku)
    ]


class ProductService:
    """
    Product business logic.

    Args:
        db: Supabase client (or anything with the same table() API)
        storage: Object storage for image uploads
        table: Products table name
    """

    def __init__(self, db, storage: Optional[ObjectStorage], table: str = "products"):
        self.db = db
        self.storage = storage
        self.table = table

    # ===================
    # READ OPERATIONS
    # ===================

    def get_by_sku(self, sku: str) -> Optional[ProductRecord]:
        """
        Get a product by SKU.

        Args:
            sku: Product SKU (matched exactly)

        Returns:
            ProductRecord or None if not found
        """
        logger.debug("getting_product_by_sku", sku=sku)

        try:
            result = (
                self.db.table(self.table)
                .select("*")
                .eq("sku", sku)
                .limit(1)
                .execute()
            )
        except Exception as e:
            logger.error(
                "get_product_by_sku_failed",
                sku=sku,
                error=str(e)
            )
            raise DatabaseError("select", str(e))

        if not result.data:
            return None

        return ProductRecord(**result.data[0])

    def list_products(
        self,
        category: Optional[str] = None,
        search: Optional[str] = None
    ) -> list[ProductSummary]:
        """
        List every product with its completeness indicator.

        Args:
            category: Only products in this category
            search: Case-insensitive match on SKU or meta title

        Returns:
            Summaries ordered in-progress first, then untouched, then
            complete; natural SKU order within each group
        """
        logger.info("listing_products", category=category, search=search)

        try:
            query = self.db.table(self.table).select(LISTING_COLUMNS)
            if category:
                query = query.eq("category", category)
            result = query.execute()
        except Exception as e:
            logger.error("list_products_failed", error=str(e))
            raise DatabaseError("select", str(e))

        summaries = [
            ProductSummary.from_record(ProductRecord(**row))
            for row in result.data
        ]

        if search:
            term = search.strip().lower()
            summaries = [
                s for s in summaries
                if term in s.sku.lower()
                or (s.meta_title and term in s.meta_title.lower())
            ]

        summaries.sort(
            key=lambda s: (STATUS_SORT_WEIGHT[s.status_color], _natural_key(s.sku))
        )

        logger.info("products_listed", count=len(summaries))
        return summaries

    # ===================
    # WRITE OPERATIONS
    # ===================

    def update(self, sku: str, request: UpdateRequest) -> UpdateResult:
        """
        Save one piece of content against a product.

        Steps, in order:
            1. SKU must exist
            2. Image saves (other than the original) need a meta title
            3. Images are uploaded; their URL becomes the column value
            4. The original image is stored once, if supplied and not yet set
            5. Text goes to the column mapped by its target
            6. One UPDATE sets the column(s) and modified_at

        Args:
            sku: Product SKU
            request: Validated ImageUpdate or TextUpdate

        Returns:
            UpdateResult with a user-facing message

        Raises:
            ProductNotFoundError: SKU does not exist
            PreconditionFailedError: Meta title missing, or original already set
            StorageError: Upload failed
            DatabaseError: Select or update failed
        """
        target = request.target
        logger.info(
            "product_update_started",
            sku=sku,
            target=target.value,
            kind=request.kind.value
        )

        product = self.get_by_sku(sku)
        if product is None:
            logger.info("product_update_sku_not_found", sku=sku)
            raise ProductNotFoundError(sku)

        if isinstance(request, ImageUpdate):
            update_data = self._prepare_image_update(product, request)
        else:
            update_data = self._prepare_text_update(request)

        update_data["modified_at"] = datetime.now(timezone.utc).isoformat()

        try:
            (
                self.db.table(self.table)
                .update(update_data)
                .eq("sku", sku)
                .execute()
            )
        except Exception as e:
            logger.error(
                "product_update_failed",
                sku=sku,
                fields=list(update_data.keys()),
                error=str(e)
            )
            raise DatabaseError("update", str(e))

        fields = [f for f in update_data if f != "modified_at"]
        logger.info("product_updated", sku=sku, fields=fields)

        return UpdateResult(
            message=f'Successfully updated {request.kind.value} for SKU "{sku}" ({target.value}).',
            updated_fields=fields,
            image_url=update_data.get(target.column) if target.is_image else None
        )

    def _prepare_image_update(self, product: ProductRecord, request: ImageUpdate) -> dict:
        target = request.target

        if target.is_original:
            if product.has_original_image:
                raise PreconditionFailedError(
                    "The original (pre) image is already set for this product and cannot be replaced.",
                    details={"sku": product.sku}
                )
        elif not product.has_meta_title:
            raise PreconditionFailedError(
                "Please generate a title first: a meta title is required before saving stage images.",
                details={"sku": product.sku, "target": target.value}
            )

        update_data = {
            target.column: self._upload(product, target, request.content, request.content_type)
        }

        # Original image is write-once
        if request.original and not target.is_original and not product.has_original_image:
            update_data[SaveTarget.PRE.column] = self._upload(
                product, SaveTarget.PRE, request.original, request.original_content_type
            )

        return update_data

    def _prepare_text_update(self, request: TextUpdate) -> dict:
        return {request.target.column: request.text}

    def _upload(
        self,
        product: ProductRecord,
        target: SaveTarget,
        content: bytes,
        content_type: str
    ) -> str:
        extension = content_type.split("/")[-1].split(";")[0] or "webp"
        key = build_storage_key(product.category, product.sku, target, extension=extension)

        if self.storage is None:
            raise StorageError(key, "object storage is not configured")

        return self.storage.upload(key, content, content_type)


def get_product_service(request: Request) -> ProductService:
    """
    FastAPI dependency: ProductService bound to the app's clients.

    Raises:
        ExternalServiceError: Database client failed to initialise at startup
    """
    db = getattr(request.app.state, "db", None)
    if db is None:
        raise ExternalServiceError("database", "Database is not available")

    return ProductService(
        db=db,
        storage=getattr(request.app.state, "storage", None),
        table=settings.products_table
    )
