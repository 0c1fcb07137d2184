"""
API route modules.

Each module defines routes for one domain area.
"""

from routes.products import router as products_router
from routes.generation import router as generation_router

__all__ = [
    "products_router",
    "generation_router",
]
