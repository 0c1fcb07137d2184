"""
Business logic services.

Each service handles one domain area.
"""

from services.product_service import ProductService, get_product_service
from services.gemini_service import GeminiService, GeneratedImage, Hotspot, get_gemini_service
from services.storage_service import ObjectStorage

__all__ = [
    "ProductService",
    "get_product_service",
    "GeminiService",
    "GeneratedImage",
    "Hotspot",
    "get_gemini_service",
    "ObjectStorage",
]
