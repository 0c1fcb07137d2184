"""
Product API routes.

GET   /products        listing with completeness indicator
PATCH /products/{sku}  save one image or text field against a SKU
"""

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from fastapi.responses import JSONResponse
from typing import Optional
import structlog

from models.product import ProductSummary
from models.update import build_update_request
from services.product_service import ProductService, get_product_service
from exceptions import AppError

logger = structlog.get_logger(__name__)

router = APIRouter()


# ===================
# EXCEPTION HANDLER
# ===================

def handle_error(e: Exception) -> JSONResponse:
    """Convert exception to JSON response."""
    if isinstance(e, AppError):
        return JSONResponse(
            status_code=e.status_code,
            content=e.to_dict()
        )
    # Unexpected error
    logger.error("unexpected_error", error=str(e), type=type(e).__name__)
    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "message": f"An internal server error occurred: {e}",
            "error": {"code": "INTERNAL_ERROR"}
        }
    )


# ===================
# ROUTES
# ===================

@router.get("", response_model=list[ProductSummary], response_model_by_alias=True)
async def list_products(
    category: Optional[str] = Query(None, description="Filter by category"),
    search: Optional[str] = Query(None, description="Match SKU or meta title"),
    service: ProductService = Depends(get_product_service)
):
    """
    List all products with their completeness status.

    No pagination: the whole catalog is returned.
    """
    try:
        return service.list_products(category=category, search=search)

    except Exception as e:
        return handle_error(e)


@router.patch("/{sku}")
async def update_product(
    sku: str,
    target: Optional[str] = Form(None, alias="type", description="Save target id"),
    data_type: Optional[str] = Form(None, alias="dataType", description="Image or Description"),
    description: Optional[str] = Form(None, description="Text payload"),
    image: Optional[UploadFile] = File(None, description="Image payload"),
    original_image: Optional[UploadFile] = File(None, alias="originalImage", description="Unedited image"),
    service: ProductService = Depends(get_product_service)
):
    """
    Save one image or text field for a product.

    Raises:
        404: SKU not found
        400: Missing payload, unmapped target, missing meta title,
             or original image already set
        500: Storage or database failure
    """
    logger.info("product_patch_received", sku=sku, target=target, data_type=data_type)

    try:
        request = build_update_request(
            target=target,
            data_type=data_type,
            description=description,
            image=await image.read() if image else None,
            image_content_type=image.content_type if image else None,
            original_image=await original_image.read() if original_image else None,
            original_content_type=original_image.content_type if original_image else None
        )

        result = service.update(sku, request)
        return {"success": result.success, "message": result.message}

    except Exception as e:
        return handle_error(e)
