"""
Object storage uploads for product images.

Thin wrapper around an S3-compatible bucket: one put_object per upload, public
URL built from the CDN base URL and the key.
"""

from typing import Any, Optional
import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError
import structlog

from config.settings import Settings
from exceptions import StorageError

logger = structlog.get_logger(__name__)


class ObjectStorage:
    """
    Upload bytes to the product image bucket.

    Construct with from_settings() in the application lifespan, or pass any
    client exposing put_object() (tests use a fake).
    """

    def __init__(self, client: Any, bucket: str, cdn_base_url: str):
        self.client = client
        self.bucket = bucket
        self.cdn_base_url = cdn_base_url.rstrip("/")

    @classmethod
    def from_settings(cls, settings: Settings) -> "ObjectStorage":
        if not settings.storage_configured:
            raise StorageError("", "STORAGE_BUCKET is not configured")

        session = boto3.session.Session()
        client = session.client(
            "s3",
            endpoint_url=settings.storage_endpoint_url,
            aws_access_key_id=settings.storage_access_key_id,
            aws_secret_access_key=settings.storage_secret_access_key,
            region_name=settings.storage_region,
            config=Config(signature_version="s3v4"),
        )

        logger.info(
            "storage_client_created",
            bucket=settings.storage_bucket,
            endpoint=settings.storage_endpoint_url
        )

        return cls(client, settings.storage_bucket, settings.cdn_base_url)

    def public_url(self, key: str) -> str:
        return f"{self.cdn_base_url}/{key.lstrip('/')}"

    def upload(
        self,
        key: str,
        data: bytes,
        content_type: Optional[str] = None
    ) -> str:
        """
        Put an object and return its public URL.

        Args:
            key: Object key (see utils.text_utils.build_storage_key)
            data: Object body
            content_type: MIME type stored with the object

        Returns:
            Public CDN URL of the uploaded object

        Raises:
            StorageError: If the put fails
        """
        kwargs = {
            "Bucket": self.bucket,
            "Key": key,
            "Body": data,
        }
        if content_type:
            kwargs["ContentType"] = content_type

        logger.info("storage_upload_started", key=key, size=len(data))

        try:
            self.client.put_object(**kwargs)
        except (ClientError, BotoCoreError) as e:
            logger.error(
                "storage_upload_failed",
                key=key,
                error=str(e),
                error_type=type(e).__name__
            )
            raise StorageError(key, str(e)) from e

        url = self.public_url(key)
        logger.info("storage_upload_complete", key=key, url=url)
        return url

    def close(self) -> None:
        close = getattr(self.client, "close", None)
        if close is not None:
            close()
