"""
HTTP client for the product API.

Used by the editor to save images and text against a SKU and to load the
SKU selector. Nothing is retried: a failure is reported and the user decides
whether to try again.
"""

from dataclasses import dataclass
from typing import Optional, Union
import requests
import structlog

from config.settings import Settings
from exceptions import NetworkError, ProductApiError
from models.save_target import ContentKind, SaveTarget

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class FilePart:
    """A file part of a multipart save."""
    filename: str
    data: bytes
    content_type: str = "image/webp"


@dataclass(frozen=True)
class SaveResponse:
    success: bool
    message: str


class ProductApiClient:
    """
    Talk to PATCH /products/{sku} and GET /products.

    Args:
        base_url: API root (e.g. http://localhost:8000)
        timeout: Seconds before a request is abandoned
        session: Optional requests.Session to reuse connections
    """

    def __init__(
        self,
        base_url: str,
        timeout: int = 60,
        session: Optional[requests.Session] = None
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def from_settings(cls, settings: Settings) -> "ProductApiClient":
        return cls(settings.api_base_url, timeout=settings.api_timeout_seconds)

    def close(self) -> None:
        self.session.close()

    def update_product(
        self,
        sku: str,
        target: SaveTarget,
        data: Union[FilePart, str],
        original: Optional[FilePart] = None
    ) -> SaveResponse:
        """
        Save an image or text for a SKU.

        Args:
            sku: Product SKU
            target: Where to save it
            data: FilePart for image targets, str for text targets
            original: Unedited image, sent along with image saves

        Returns:
            SaveResponse from the server

        Raises:
            NetworkError: Server unreachable or response unreadable
            ProductApiError: Server rejected the save (message from server)
        """
        form = {"type": target.value, "dataType": target.kind.value}
        files = {}

        if target.kind is ContentKind.IMAGE:
            if not isinstance(data, FilePart):
                raise TypeError(f"{target.value} expects an image file")
            files["image"] = (data.filename, data.data, data.content_type)
            if original is not None:
                files["originalImage"] = (
                    f"original-{original.filename}", original.data, original.content_type
                )
        else:
            if not isinstance(data, str):
                raise TypeError(f"{target.value} expects text")
            form["description"] = data

        logger.info("product_save_requested", sku=sku, target=target.value)

        body = self._request(
            "PATCH",
            f"/products/{requests.utils.quote(sku, safe='')}",
            data=form,
            files=files or None
        )

        logger.info("product_saved", sku=sku, target=target.value)
        return SaveResponse(
            success=bool(body.get("success", True)),
            message=body.get("message", "")
        )

    def list_products(
        self,
        category: Optional[str] = None,
        search: Optional[str] = None
    ) -> list[dict]:
        """Fetch the SKU listing with status colors."""
        params = {}
        if category:
            params["category"] = category
        if search:
            params["search"] = search
        return self._request("GET", "/products", params=params)

    def _request(self, method: str, path: str, **kwargs):
        url = f"{self.base_url}{path}"

        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.exceptions.RequestException as e:
            logger.error("product_api_request_failed", url=url, error=str(e))
            raise NetworkError(f"Could not reach the product API: {e}") from e

        try:
            body = response.json()
        except ValueError:
            body = None

        if not response.ok:
            message = (
                body.get("message") if isinstance(body, dict) and body.get("message")
                else f"Server responded with status: {response.status_code}"
            )
            code = None
            if isinstance(body, dict) and isinstance(body.get("error"), dict):
                code = body["error"].get("code")
            logger.warning(
                "product_api_error",
                url=url,
                status=response.status_code,
                message=message
            )
            raise ProductApiError(response.status_code, message, code=code)

        if body is None:
            raise NetworkError(
                "Product API returned an unreadable response",
                details={"status": response.status_code}
            )

        return body
