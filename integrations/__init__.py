"""
Clients for services outside this API.
"""

from integrations.product_api import FilePart, ProductApiClient, SaveResponse

__all__ = [
    "FilePart",
    "ProductApiClient",
    "SaveResponse",
]
